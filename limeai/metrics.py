from __future__ import annotations

import time
from collections.abc import Callable

from fastapi import Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response as StarletteResponse

# Prometheus metric definitions (cardinality kept low by using path templates)
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency (seconds)",
    ["method", "path", "status"],
    # Upstream model calls dominate; allow up to the 15s client timeout
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 15.0, 30.0),
)

HTTP_ERRORS_TOTAL = Counter(
    "http_errors_total",
    "Total 5xx responses",
    ["method", "path"],
)

GENERATION_OUTCOMES_TOTAL = Counter(
    "generation_outcomes_total",
    "Generation responses by where the content came from",
    ["endpoint", "source"],
)

ADMISSION_COOLDOWN = Gauge(
    "admission_cooldown",
    "1 while upstream calls are blocked by cooldown",
)


def _path_template(request: Request) -> str:
    """
    Return the route path template (e.g., '/api/podcast-status/{job_id}').
    Falls back to the raw path if the template is unavailable.
    """
    route = request.scope.get("route")
    if route and getattr(route, "path", None):
        return route.path
    return request.url.path


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Records Prometheus metrics for each request:
      - requests total (method, path, status)
      - latency histogram (method, path, status)
      - errors total (5xx)
    """

    def __init__(self, app, skip_predicate: Callable[[Request], bool] | None = None):
        super().__init__(app)
        self._skip = skip_predicate or (lambda req: False)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> StarletteResponse:
        if self._skip(request):
            return await call_next(request)

        start = time.time()
        method = request.method

        try:
            response = await call_next(request)
        except Exception:
            HTTP_ERRORS_TOTAL.labels(method=method, path=_path_template(request)).inc()
            raise

        # Route is resolved only after the call
        path = _path_template(request)
        status = response.status_code
        duration = time.time() - start

        HTTP_REQUESTS_TOTAL.labels(method=method, path=path, status=str(status)).inc()
        HTTP_REQUEST_DURATION_SECONDS.labels(method=method, path=path, status=str(status)).observe(
            duration
        )

        if 500 <= status < 600:
            HTTP_ERRORS_TOTAL.labels(method=method, path=path).inc()

        return response


def metrics_endpoint() -> Response:
    """Return the Prometheus metrics exposition."""
    payload = generate_latest()  # bytes
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)
