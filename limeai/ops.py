# limeai/ops.py
"""
Ops endpoints for liveness/readiness.

- /live  : returns 200 while process is alive
- /ready : returns 200 only after startup completed; flips to 503 during shutdown

Readiness reads app.state.is_ready, which the lifespan context in
limeai.main sets and clears. Upstream providers are not probed; generation
falls back to catalog output without them.
"""

from fastapi import APIRouter, Request, Response, status

router = APIRouter(tags=["ops"])


@router.get("/live")
async def live() -> dict:
    return {"status": "live"}


@router.get("/ready")
async def ready(request: Request):
    is_ready = getattr(request.app.state, "is_ready", False)
    if is_ready:
        return {"status": "ready"}
    return Response(
        content='{"status":"not_ready"}',
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        media_type="application/json",
    )
