"""
QuickNotes Backend — Health Check Route
=========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Pings MongoDB through the shared connection manager.
Who:   Called by Docker health checks, load balancers, and monitoring systems.

Status levels:
    - healthy:   MongoDB reachable
    - unhealthy: MongoDB unreachable or not configured
    Always HTTP 200; the body carries the verdict.
"""

import logging
import time

from fastapi import APIRouter, Depends

from quicknotes import __version__
from quicknotes.database import ConnectionManager, get_connection_manager
from quicknotes.schemas.note import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(
    connection: ConnectionManager = Depends(get_connection_manager),
) -> HealthResponse:
    connected = await connection.check_connection()
    if not connected:
        logger.warning("Health check: database unreachable")

    return HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        database="connected" if connected else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
