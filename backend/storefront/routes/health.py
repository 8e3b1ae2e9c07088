"""
Storefront Backend — Health Check Route
=========================================

What:  Liveness/readiness check for container orchestration and load balancers.
How:   Runs SELECT 1 through the engine on app.state and checks that the data
       directory is writable.

Status levels:
    - healthy:   database reachable, data directory writable (HTTP 200)
    - unhealthy: either check failed (HTTP 503)

    When the app runs without a configured engine (e.g. under test), the
    database check reports "not_configured" and does not fail the check.
"""

import logging
import os
import time

from fastapi import APIRouter, Request, Response
from sqlalchemy import text

from storefront import __version__
from storefront.config import settings
from storefront.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


async def check_database(request: Request) -> str:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        return "not_configured"
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Health check: database unreachable: %s", e)
        return "disconnected"
    return "connected"


def check_storage() -> str:
    data_root = settings.data_root
    if os.path.isdir(data_root) and os.access(data_root, os.W_OK):
        return "writable"
    logger.warning("Health check: data directory %s not writable", data_root)
    return "unavailable"


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "A dependency is down", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    database = await check_database(request)
    storage = check_storage()

    healthy = database != "disconnected" and storage == "writable"
    if not healthy:
        response.status_code = 503

    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        version=__version__,
        database=database,
        storage=storage,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
