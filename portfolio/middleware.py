# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
HTTP middleware: request ID propagation into responses and log lines, and
per-endpoint Prometheus request metrics.
"""

import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from portfolio.core.logging import request_id_var
from portfolio.metrics import HTTP_ERRORS, REQUEST_COUNT, REQUEST_LATENCY

REQUEST_ID_HEADER = "X-Request-ID"

UNMETERED_PATHS = frozenset({
    "/health", "/health/ready", "/metrics", "/openapi.json", "/docs", "/redoc",
})


def endpoint_label(path: str) -> str:
    """Collapse numeric ids so /api/v1/projects/42/status is metered as one series."""
    parts = [("{id}" if part.isdigit() else part) for part in path.strip("/").split("/")]
    return "/" + "/".join(parts)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reuse the caller's X-Request-ID or mint one; bind it for logging."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Request count, latency and error count per method and endpoint."""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if path in UNMETERED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        endpoint = endpoint_label(path)
        status = str(response.status_code)
        REQUEST_COUNT.labels(method=request.method, endpoint=endpoint, status=status).inc()
        REQUEST_LATENCY.labels(method=request.method, endpoint=endpoint).observe(elapsed)
        if response.status_code >= 400:
            HTTP_ERRORS.labels(method=request.method, endpoint=endpoint, status=status).inc()
        return response
