"""
Chirpboard Backend: Credential Rate Limiting Middleware
=======================================================

What:  Per-IP sliding-window limit on the credential endpoints
       (POST /user and POST /user/isValid by default).
How:   Each client IP keeps a list of request timestamps. Timestamps older
       than the window are dropped on every request; when the remaining
       count reaches the limit the request is answered with 429 and a
       Retry-After header without reaching the route.

Scope:
    In-memory and per-process. Every other path passes straight through.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from chirpboard.config import Settings
from chirpboard.exceptions import RateLimitExceededError
from chirpboard.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Sliding-window limiter for credential endpoints.

    Configuration (from Settings):
        rate_limit_requests: max POSTs per window per IP
        rate_limit_window:   window length in seconds
        rate_limit_paths:    comma-separated paths that are counted
    """

    def __init__(self, app, settings: Settings, **kwargs):
        super().__init__(app, **kwargs)
        self.limit = settings.rate_limit_requests
        self.window = settings.rate_limit_window
        self.paths = settings.rate_limit_paths_set
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._seen = 0

    def _is_limited_route(self, request: Request) -> bool:
        return request.method == "POST" and request.url.path in self.paths

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not self._is_limited_route(request):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window_start = now - self.window

        timestamps = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = timestamps

        if len(timestamps) >= self.limit:
            retry_after = int(timestamps[0] + self.window - now) + 1
            exc = RateLimitExceededError(retry_after=retry_after)
            logger.warning(
                "Rate limit exceeded for IP %s on %s: %d requests in %ds window",
                client_ip,
                request.url.path,
                len(timestamps),
                self.window,
            )
            # Raised errors do not reach the app's exception handlers from
            # inside BaseHTTPMiddleware, so the response is built here.
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": exc.context,
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        timestamps.append(now)

        self._seen += 1
        if self._seen % 1000 == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        """Drop IPs with no request inside the current window."""
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or max(timestamps) < window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]
        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
