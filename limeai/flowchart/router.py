# limeai/flowchart/router.py
from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from limeai.deps import get_admission, get_deepseek, get_flowchart_cache
from limeai.fallback.selector import select_fallback
from limeai.infra.admission import AdmissionController
from limeai.infra.metrics import observe
from limeai.infra.result_cache import ResultCache, normalize_key
from limeai.infra.upstream import DeepSeekClient, FailureKind, UpstreamError, classify_failure

log = logging.getLogger("limeai.flowchart")
router = APIRouter(prefix="/api", tags=["flowchart"])

ENDPOINT = "flowchart"

SYSTEM_PROMPT = (
    "You are a flowchart expert. You will generate Mermaid.js flowchart code to explain "
    "concepts. Always respond with only valid Mermaid.js code without any explanations."
)

PROMPT_TMPL = """
Create a flowchart using Mermaid.js syntax that explains: "{concept}"

The flowchart should:
1. Use graph TD syntax (top-down)
2. Include 5-10 nodes with clear relationships
3. Use simple language
4. Cover the key aspects of "{concept}"

Format requirements:
- Start with 'graph TD'
- Use proper Mermaid syntax with nodes [in brackets]
- Include connections with arrows (-->)
- Use clear branch labels for decision points using the |label| syntax

IMPORTANT: Return ONLY valid Mermaid.js code. No explanations, no text outside the code, no markdown formatting. Ensure the code does not produce syntax error in Mermaid.js
"""

MSG_CACHED = "Using cached result for faster response."
MSG_API = "Custom flowchart generated for your concept."
MSG_QUOTA = "Using a pre-built flowchart template. API quota will reset shortly."
MSG_ERROR = "Using a template flowchart. We'll try the API again soon."


class FlowchartRequest(BaseModel):
    concept: str | None = None


class FlowchartResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    mermaid_code: str = Field(..., alias="mermaidCode")
    is_generated_by_api: bool = Field(..., alias="isGeneratedByApi")
    message: str
    source: str


def clean_mermaid(text: str) -> str:
    """Strip Markdown code fences a model may wrap around Mermaid output."""
    if "```mermaid" in text:
        return text.split("```mermaid", 1)[1].split("```", 1)[0].strip()
    if "```" in text:
        return text.split("```", 2)[1].strip()
    return text.strip()


@router.post("/generate-flowchart", response_model=FlowchartResponse)
def generate_flowchart(
    req: FlowchartRequest,
    admission: AdmissionController = Depends(get_admission),
    cache: ResultCache = Depends(get_flowchart_cache),
    deepseek: DeepSeekClient = Depends(get_deepseek),
):
    """
    Cache -> admission -> DeepSeek -> fallback.
    Upstream failures always degrade to a catalog flowchart, never a 5xx.
    """
    if not req.concept or not req.concept.strip():
        raise HTTPException(status_code=400, detail="Concept is required")

    t0 = time.time()
    concept = req.concept
    key = normalize_key(concept)
    log.info('flowchart_request concept="%s"', key[:80])

    def _done(code: str, by_api: bool, message: str, source: str) -> FlowchartResponse:
        observe(ENDPOINT, source, int((time.time() - t0) * 1000), admission.in_cooldown)
        return FlowchartResponse(
            mermaid_code=code, is_generated_by_api=by_api, message=message, source=source
        )

    cached = cache.get(key)
    if cached is not None:
        return _done(cached, True, MSG_CACHED, "cache_hit")

    if not admission.should_admit():
        log.info("flowchart_fallback reason=quota state=%s", admission.state)
        return _done(select_fallback(concept), False, MSG_QUOTA, "fallback_quota")

    admission.record_attempt()
    try:
        raw = deepseek.complete(PROMPT_TMPL.format(concept=concept), SYSTEM_PROMPT)
        code = clean_mermaid(raw)
        if not code or "graph" not in code:
            raise UpstreamError("Invalid mermaid code received")
    except UpstreamError as e:
        kind = classify_failure(e)
        log.warning('flowchart_upstream_error kind=%s err="%s"', kind, e)
        if kind in (FailureKind.RATE_LIMITED, FailureKind.AUTH):
            admission.record_rate_limited()
        return _done(select_fallback(concept), False, MSG_ERROR, "fallback_error")

    admission.record_success()
    cache.put(key, code)
    return _done(code, True, MSG_API, "api")
