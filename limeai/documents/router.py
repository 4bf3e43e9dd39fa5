# limeai/documents/router.py
from __future__ import annotations

import io
import logging

import PyPDF2
from fastapi import APIRouter, File, HTTPException, UploadFile
from PyPDF2.errors import PyPdfError

from limeai.config import settings

log = logging.getLogger("limeai.documents")
router = APIRouter(prefix="/api", tags=["documents"])

PDF_TYPE = "application/pdf"
WORD_TYPES = (
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)


def extract_pdf_text(data: bytes) -> str:
    """Concatenate the text layer of every page."""
    reader = PyPDF2.PdfReader(io.BytesIO(data))
    pages = [page.extract_text() or "" for page in reader.pages]
    return "\n".join(p for p in pages if p).strip()


@router.post("/extract-pdf")
async def extract_pdf(file: UploadFile | None = File(None)):
    """
    Extract the text of an uploaded PDF.
    Word documents are accepted by the uploader but parsed client-side, so
    they get a 400 here like any other non-PDF type.
    """
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded")

    if file.content_type not in (PDF_TYPE, *WORD_TYPES):
        raise HTTPException(
            status_code=400, detail="Unsupported file type. Please upload PDF or Word document."
        )
    if file.content_type != PDF_TYPE:
        raise HTTPException(
            status_code=400,
            detail="Unsupported file type. Server can only extract text from PDFs.",
        )

    # Read one byte past the cap so oversize uploads are detectable.
    data = await file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(data) > settings.MAX_UPLOAD_BYTES:
        limit_mb = settings.MAX_UPLOAD_BYTES // (1024 * 1024)
        raise HTTPException(status_code=413, detail=f"File exceeds the {limit_mb}MB upload limit")

    try:
        text = extract_pdf_text(data)
    except (PyPdfError, ValueError) as e:
        log.error('pdf_extract_error filename="%s" err="%s"', file.filename, e)
        raise HTTPException(status_code=500, detail=f"Failed to extract text: {e}") from e

    log.info('pdf_extracted filename="%s" chars=%d', file.filename, len(text))
    return {"text": text}
