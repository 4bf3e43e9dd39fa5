from __future__ import annotations

import os
import platform
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from limeai.config import settings
from limeai.deps import get_admission, get_flowchart_cache
from limeai.documents.router import router as documents_router
from limeai.flowchart.router import router as flowchart_router
from limeai.infra.admission import AdmissionController
from limeai.infra.metrics import metrics as generation_metrics
from limeai.infra.result_cache import ResultCache
from limeai.metrics import MetricsMiddleware, metrics_endpoint
from limeai.observability import RequestIdMiddleware, setup_json_logging
from limeai.ops import router as ops_router
from limeai.podcast.router import router as podcast_router
from limeai.study.router import router as study_router

APP_NAME = "lime-ai"
APP_DESC = "Study-aid generation backend: flowcharts, podcasts, summaries and notes Q&A."
APP_VERSION_FILE = Path(__file__).resolve().parents[1] / "VERSION"


def read_version_fallback() -> str:
    try:
        return APP_VERSION_FILE.read_text(encoding="utf-8").strip()
    except OSError:
        return "0.0.0"


def utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


# Env-configured runtime info
HOST = os.getenv("APP_HOST", "0.0.0.0")
PORT = int(os.getenv("APP_PORT", "3001"))
WORKERS = int(os.getenv("APP_WORKERS", "1"))

# -------------------------
# Logging
# -------------------------
log = setup_json_logging("limeai", os.getenv("LOG_LEVEL", "INFO"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.is_ready = True
    log.info("startup port=%d deepseek_configured=%s", PORT, bool(settings.DEEPSEEK_API_KEY))
    yield
    app.state.is_ready = False
    log.info("shutdown")


app = FastAPI(
    title=APP_NAME,
    description=APP_DESC,
    version=read_version_fallback(),
    lifespan=lifespan,
)

app.add_middleware(MetricsMiddleware, skip_predicate=lambda req: req.url.path == "/metrics")
app.add_middleware(RequestIdMiddleware, logger=log)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(ops_router)
app.include_router(flowchart_router)
app.include_router(podcast_router)
app.include_router(documents_router)
app.include_router(study_router)


# -------------------------
# Core endpoints
# -------------------------
@app.get("/health", tags=["core"])
def health():
    return {"status": "ok"}


@app.get("/version", tags=["core"])
def version():
    return {
        "service": APP_NAME,
        "version": read_version_fallback(),
        "host": HOST,
        "port": PORT,
        "workers": WORKERS,
    }


@app.get("/__meta", tags=["core"])
def meta():
    git_commit = os.getenv("GIT_COMMIT", "unknown")
    git = {
        "commit": git_commit,
        "sha": os.getenv("GIT_SHA", git_commit),
        "branch": os.getenv("GIT_BRANCH", "unknown"),
    }
    runtime = {
        "python": platform.python_version(),
        "platform": platform.platform(),
        "pid": os.getpid(),
        "as_of": utc_now_iso(),
    }
    # Included routers are not flattened into app.routes on every FastAPI release
    endpoints = sorted(app.openapi()["paths"])
    return {
        "service": APP_NAME,
        "version": read_version_fallback(),
        "git": git,
        "runtime": runtime,
        "endpoints": endpoints,
    }


@app.get("/metrics", include_in_schema=False)
def prometheus_metrics():
    return metrics_endpoint()


# -------------------------
# Generation status
# -------------------------
@app.get("/api/health", tags=["generation"])
def api_health(
    admission: AdmissionController = Depends(get_admission),
    cache: ResultCache = Depends(get_flowchart_cache),
):
    """Upstream availability as seen by the admission quota, plus cache fill."""
    return {
        "status": "ok",
        "apiInCooldown": admission.in_cooldown,
        "nextAvailable": admission.next_available(),
        "cacheSize": len(cache),
        "admission": admission.snapshot(),
    }


@app.get("/api/generation-metrics", tags=["generation"])
def api_generation_metrics():
    """
    JSON snapshot for dashboards/demos:
      - counters by outcome and by endpoint
      - latency p50/p95/max overall and by outcome
    """
    return generation_metrics.snapshot()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("limeai.main:app", host=HOST, port=PORT, workers=WORKERS)
