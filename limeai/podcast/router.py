# limeai/podcast/router.py
from __future__ import annotations

import logging
import time
from urllib.parse import urlparse

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from limeai.deps import get_admission, get_deepseek, get_playdialog
from limeai.fallback.podcast import create_fallback_podcast_script
from limeai.infra.admission import AdmissionController
from limeai.infra.metrics import observe
from limeai.infra.upstream import (
    DeepSeekClient,
    FailureKind,
    PlayDialogClient,
    UpstreamError,
    classify_failure,
)

log = logging.getLogger("limeai.podcast")
router = APIRouter(prefix="/api", tags=["podcast"])

ENDPOINT = "podcast"
FALLBACK_SOURCE_CHARS = 1000

SYSTEM_PROMPT = (
    "You are a podcast script writer. Write natural two-speaker dialogue that "
    "teaches the provided material."
)

STYLE_PROMPTS: dict[str, str] = {
    "educational": (
        "Create an educational podcast script with a host explaining concepts clearly "
        "and a guest asking clarifying questions."
    ),
    "storytelling": (
        "Transform this into a narrative storytelling podcast with a main narrator and "
        "a secondary voice for characters or commentary."
    ),
    "interview": (
        "Create an interview-style podcast with a clear host and guest roles. The host "
        "should ask questions and the guest should provide expertise."
    ),
    "conversational": (
        "Create a conversational podcast with two speakers discussing topics in a casual, "
        "friendly tone."
    ),
}

PROMPT_TMPL = """
{style_prompt}

FORMAT REQUIREMENTS:
Create a natural and engaging podcast script featuring two speakers: HOST and GUEST
Each line of dialogue should begin with "HOST:" or "GUEST:"
Keep dialogue concise (1-3 sentences per speaker)
Maintain a conversational and dynamic back-and-forth exchange
Total length: 500-800 words
STRUCTURE & FLOW:
Introduction:
HOST welcomes listeners and introduces the topic in an engaging way
GUEST responds, setting up the discussion naturally
Main Discussion:
Smooth transitions between subtopics
A mix of insights, questions, and real-world examples to maintain engagement
Occasional humor or rhetorical questions to keep it lively
Pacing & Speech Intervals:
The script should naturally flow with short pauses (for emphasis or dramatic effect)
Use brackets for pacing suggestions: [Pause], [Short Beat], or [Emphasize]
If necessary, include scene-setting cues (e.g., "[Background music fades]")
Conclusion & Sign-Off:
Summarize key takeaways in a clear and memorable way
End with a friendly and engaging sign-off, inviting listeners to tune in again
INPUT DOCUMENT:
{text}
OUTPUT EXPECTATION:
A well-structured podcast conversation based on the provided content
Engaging, easy to follow, and enjoyable for listeners
Clear pacing and transitions to ensure a natural listening experience
"""

MSG_API = "Custom podcast content generated."
MSG_QUOTA = "Using simplified content. API quota will reset shortly."
MSG_ERROR = "Using simplified content. We'll try the API again soon."

MISSING_CREDS = (
    "Text-to-speech functionality is not available. Please configure the "
    "PLAYDIALOG_USER_ID and PLAYDIALOG_SECRET_KEY environment variables."
)


# ---- I/O models
class PodcastRequest(BaseModel):
    text: str | None = None
    style: str = "conversational"


class PodcastContentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    podcast_content: str = Field(..., alias="podcastContent")
    message: str
    source: str


class TTSJobResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(..., alias="jobId")
    status: str
    message: str


class PodcastStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str
    message: str
    audio_url: str | None = Field(default=None, alias="audioUrl")


def _require_text(req: PodcastRequest) -> str:
    if not req.text or not req.text.strip():
        raise HTTPException(status_code=400, detail="Text is required")
    return req.text


def _require_creds(playdialog: PlayDialogClient) -> None:
    if not playdialog.configured:
        raise HTTPException(status_code=500, detail=MISSING_CREDS)


@router.post("/generate-podcast-content", response_model=PodcastContentResponse)
def generate_podcast_content(
    req: PodcastRequest,
    admission: AdmissionController = Depends(get_admission),
    deepseek: DeepSeekClient = Depends(get_deepseek),
):
    text = _require_text(req)
    style = req.style if req.style in STYLE_PROMPTS else "conversational"
    t0 = time.time()
    log.info("podcast_request style=%s chars=%d", style, len(text))

    def _done(content: str, message: str, source: str) -> PodcastContentResponse:
        observe(ENDPOINT, source, int((time.time() - t0) * 1000), admission.in_cooldown)
        return PodcastContentResponse(podcast_content=content, message=message, source=source)

    def _fallback() -> str:
        return create_fallback_podcast_script(text[:FALLBACK_SOURCE_CHARS], style)

    if not admission.should_admit():
        log.info("podcast_fallback reason=quota state=%s", admission.state)
        return _done(_fallback(), MSG_QUOTA, "fallback_quota")

    admission.record_attempt()
    try:
        content = deepseek.complete(
            PROMPT_TMPL.format(style_prompt=STYLE_PROMPTS[style], text=text), SYSTEM_PROMPT
        )
        if not content:
            raise UpstreamError("Invalid content received")
    except UpstreamError as e:
        kind = classify_failure(e)
        log.warning('podcast_upstream_error kind=%s err="%s"', kind, e)
        # Only quota signals trip the cooldown here
        if kind == FailureKind.RATE_LIMITED:
            admission.record_rate_limited()
        return _done(_fallback(), MSG_ERROR, "fallback_error")

    admission.record_success()
    return _done(content, MSG_API, "api")


@router.post("/text-to-speech", response_model=TTSJobResponse)
def text_to_speech(req: PodcastRequest, playdialog: PlayDialogClient = Depends(get_playdialog)):
    """Start an asynchronous PlayDialog job; clients poll /podcast-status/{job_id}."""
    text = _require_text(req)
    _require_creds(playdialog)

    try:
        job_id = playdialog.start_job(text, req.style)
    except UpstreamError as e:
        log.error('tts_start_error status=%s err="%s"', e.status_code, e)
        if classify_failure(e) == FailureKind.AUTH:
            raise HTTPException(
                status_code=401,
                detail="The PlayDialog credentials are invalid or have expired.",
            ) from e
        raise HTTPException(
            status_code=500, detail=f"Failed to generate podcast audio: {e}"
        ) from e

    log.info('tts_job_started job_id="%s" style=%s', job_id, req.style)
    return TTSJobResponse(
        job_id=job_id,
        status="processing",
        message="Podcast generation initiated successfully. Use the jobId to check status.",
    )


@router.get(
    "/podcast-status/{job_id}",
    response_model=PodcastStatusResponse,
    response_model_exclude_none=True,
)
def podcast_status(job_id: str, playdialog: PlayDialogClient = Depends(get_playdialog)):
    _require_creds(playdialog)

    try:
        output = playdialog.job_status(job_id)
    except UpstreamError as e:
        log.error('tts_status_error job_id="%s" status=%s err="%s"', job_id, e.status_code, e)
        if e.status_code == 404:
            raise HTTPException(
                status_code=404, detail="The specified job ID does not exist or has expired."
            ) from e
        raise HTTPException(
            status_code=500, detail=f"Failed to check podcast status: {e}"
        ) from e

    status = output.get("status")
    if status == "COMPLETED" and output.get("url"):
        return PodcastStatusResponse(
            status="completed",
            audio_url=output["url"],
            message="Podcast generation completed successfully.",
        )
    if status == "FAILED":
        log.warning("tts_job_failed job_id=%s", job_id)
        return JSONResponse(
            status_code=500,
            content={"status": "failed", "message": "Podcast generation failed. Please try again."},
        )
    return PodcastStatusResponse(
        status="processing",
        message="Podcast is still being generated. Please check again later.",
    )


@router.get("/podcast-audio")
def podcast_audio(
    url: str | None = Query(None, description="Finished audio URL from /podcast-status"),
    playdialog: PlayDialogClient = Depends(get_playdialog),
):
    if not url:
        raise HTTPException(status_code=400, detail="Audio URL is required")
    if urlparse(url).scheme not in ("http", "https"):
        raise HTTPException(status_code=400, detail="Audio URL must be http(s)")

    try:
        chunks = playdialog.stream_audio(url)
    except UpstreamError as e:
        log.error('tts_audio_error err="%s"', e)
        raise HTTPException(
            status_code=500, detail=f"Failed to download podcast audio: {e}"
        ) from e

    filename = f"podcast_{int(time.time() * 1000)}.mp3"
    return StreamingResponse(
        chunks,
        media_type="audio/mpeg",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
