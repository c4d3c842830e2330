"""
Chirpboard Backend: Health Check Route
======================================

What:  GET /health for load balancers and container health checks.
How:   Runs SELECT 1 through the injected Database and reports the number
       of open live listeners. Returns 503 when the store is unreachable.
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from chirpboard import __version__
from chirpboard.schemas.board import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Store unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request):
    database = request.app.state.database
    hub = request.app.state.live_hub

    reachable = database.is_connected and await database.ping()
    body = HealthResponse(
        status="healthy" if reachable else "unhealthy",
        version=__version__,
        database="connected" if reachable else "disconnected",
        live_listeners=hub.listener_count,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if not reachable:
        logger.warning("Health check: database unreachable")
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
