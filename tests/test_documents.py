import io

import PyPDF2

from limeai.config import settings
from limeai.documents import router as documents


def _blank_pdf() -> bytes:
    writer = PyPDF2.PdfWriter()
    writer.add_blank_page(width=72, height=72)
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


def test_no_file(client):
    r = client.post("/api/extract-pdf")
    assert r.status_code == 400
    assert r.json()["detail"] == "No file uploaded"


def test_word_document_rejected_server_side(client):
    files = {"file": ("notes.docx", b"PK..", documents.WORD_TYPES[1])}
    r = client.post("/api/extract-pdf", files=files)
    assert r.status_code == 400
    assert "only extract text from PDFs" in r.json()["detail"]


def test_unsupported_type(client):
    r = client.post("/api/extract-pdf", files={"file": ("a.png", b"\x89PNG", "image/png")})
    assert r.status_code == 400


def test_blank_pdf_extracts_empty_text(client):
    r = client.post("/api/extract-pdf", files={"file": ("a.pdf", _blank_pdf(), "application/pdf")})
    assert r.status_code == 200
    assert r.json() == {"text": ""}


def test_extracted_text_is_returned(client, monkeypatch):
    monkeypatch.setattr(documents, "extract_pdf_text", lambda data: "Chapter 1")
    r = client.post("/api/extract-pdf", files={"file": ("a.pdf", b"%PDF-", "application/pdf")})
    assert r.json() == {"text": "Chapter 1"}


def test_corrupt_pdf(client):
    r = client.post("/api/extract-pdf", files={"file": ("a.pdf", b"not a pdf", "application/pdf")})
    assert r.status_code == 500
    assert r.json()["detail"].startswith("Failed to extract text")


def test_oversize_upload(client, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 16)
    r = client.post("/api/extract-pdf", files={"file": ("a.pdf", b"x" * 17, "application/pdf")})
    assert r.status_code == 413
