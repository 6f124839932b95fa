"""
SNS API Server — Liveness and Health Routes
============================================

What:  GET / (plain liveness message) and GET /health (dependency check).
Who:   GET / is what the client pings; GET /health is for container probes
       and load balancers.

Status levels for /health:
    - healthy:   SELECT 1 succeeded (HTTP 200)
    - unhealthy: the database is unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request, Response

from sns_api import __version__
from sns_api.schemas.post import HealthResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/", response_model=MessageResponse, summary="Liveness check")
async def root() -> MessageResponse:
    return MessageResponse(message="SNS API Server is running!")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Reports database connectivity, version and uptime.",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    """
    Probe the database with SELECT 1 and report aggregate status.

    Returns 503 when the database cannot be reached so that orchestrators
    stop routing traffic to this instance.
    """
    db_status = "connected"
    overall = "healthy"

    try:
        await request.app.state.database.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
