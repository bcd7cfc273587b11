# app/middleware/metrics.py
import asyncio
import logging
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)


def new_metrics() -> dict:
    return {
        "requests": 0,
        "errors": 0,
        "total_response_ms": 0.0,
    }


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Collects in-process metrics:
      - total requests
      - responses with status >= 400
      - total response time (ms)
    and optionally delays every request by `latency_ms` to mimic a remote backend.
    NOTE: do NOT touch app.state in __init__, it may not exist yet while the middleware stack builds.
    """

    def __init__(self, app, dispatch: Callable = None, latency_ms: int = 0):
        super().__init__(app, dispatch=dispatch)
        self.latency_ms = latency_ms

    async def dispatch(self, request: Request, call_next):
        metrics = getattr(request.app.state, "metrics", None)
        if metrics is None:
            # first request or startup wasn't run
            metrics = request.app.state.metrics = new_metrics()

        start = time.perf_counter()
        if self.latency_ms > 0:
            await asyncio.sleep(self.latency_ms / 1000.0)

        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000.0

        # single-process counters
        metrics["requests"] += 1
        metrics["total_response_ms"] += elapsed_ms
        if response.status_code >= 400:
            metrics["errors"] += 1
            logger.info(
                "%s %s -> %s (%.1f ms)",
                request.method, request.url.path, response.status_code, elapsed_ms,
            )

        return response
