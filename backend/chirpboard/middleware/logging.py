"""
Chirpboard Backend: Access Log Middleware
=========================================

What:  One access-log line per HTTP request on the `chirpboard.access`
       logger.
How:   Times the downstream call and picks the level from the status class.
       Gate rejections (400 bad type, 403 missing cookie, 429) therefore show
       up as WARNING lines next to the gate's own log record.

Line format:
    POST /user/isValid -> 200 in 41.3ms [rid=3f2a9c1e ip=10.0.0.7 cookie=no]

Only the presence of the session cookie is recorded, never its value, and
request bodies are never read here.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from chirpboard.middleware.request_id import request_id_var

logger = logging.getLogger("chirpboard.access")

# Polled by load balancers every few seconds.
_QUIET_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in _QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        client_ip = request.client.host if request.client else "unknown"
        has_cookie = request.app.state.settings.cookie_name in request.cookies
        logger.log(
            level_for_status(response.status_code),
            "%s %s -> %d in %.1fms [rid=%s ip=%s cookie=%s]",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id_var.get(""),
            client_ip,
            "yes" if has_cookie else "no",
        )
        return response
