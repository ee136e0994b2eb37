"""FastAPI middleware limiting request rate on /api/** routes.

Each client address gets a sliding window of request timestamps; once the
window holds ``max_requests`` entries, further requests receive 429 until the
oldest entry ages out.

Clients idle for a whole window are swept out once per window, so the table
only holds recently active addresses.
"""

import math
import time
from collections import deque
from typing import Callable, Deque, Dict

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from app.core.logging_config import get_logger

logger = get_logger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window limiter for /api/** routes.

    Args:
        app: Downstream ASGI app.
        max_requests: Requests allowed per client per window.
        window_s: Window length in seconds.
        clock: Monotonic clock, injectable for tests.
    """

    def __init__(self, app, max_requests: int = 120, window_s: float = 60.0, clock: Callable[[], float] = time.monotonic):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_s = window_s
        self.clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = clock()

    def _client_key(self, request: Request) -> str:
        return request.client.host if request.client else "unknown"

    def _prune(self, hits: Deque[float], now: float) -> None:
        while hits and hits[0] <= now - self.window_s:
            hits.popleft()

    def _sweep(self, now: float) -> None:
        for key in list(self._hits):
            hits = self._hits[key]
            self._prune(hits, now)
            if not hits:
                del self._hits[key]
        self._last_sweep = now

    async def dispatch(self, request: Request, call_next) -> Response:
        if not request.url.path.startswith("/api/"):
            return await call_next(request)

        now = self.clock()
        if now - self._last_sweep >= self.window_s:
            self._sweep(now)

        key = self._client_key(request)
        hits = self._hits.setdefault(key, deque())
        self._prune(hits, now)

        if len(hits) >= self.max_requests:
            retry_after = max(1, math.ceil(hits[0] + self.window_s - now))
            logger.warning(f"Rate limit exceeded for {key} on {request.url.path}")
            return JSONResponse(
                {"detail": "Too many requests, please try again later."},
                status_code=429,
                headers={
                    "Retry-After": str(retry_after),
                    "RateLimit-Limit": str(self.max_requests),
                    "RateLimit-Remaining": "0",
                    "RateLimit-Reset": str(retry_after),
                },
            )

        hits.append(now)
        response = await call_next(request)
        response.headers["RateLimit-Limit"] = str(self.max_requests)
        response.headers["RateLimit-Remaining"] = str(self.max_requests - len(hits))
        return response
