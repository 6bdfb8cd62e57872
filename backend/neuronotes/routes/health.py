"""
NeuroNotes Backend: Health Check Route
======================================

What:  Liveness/readiness endpoint for container probes and monitoring.
How:   SELECT 1 against the database and a model listing against the LLM provider.

Status levels:
    healthy:   database and LLM reachable (HTTP 200)
    degraded:  database reachable, LLM not (HTTP 200; notes still work)
    unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text

from neuronotes import __version__
from neuronotes import database
from neuronotes.dependencies import get_llm_service
from neuronotes.schemas.note import HealthResponse
from neuronotes.services.llm_base import LLMService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(llm: LLMService = Depends(get_llm_service)):
    db_status = "connected"
    llm_status = "available"
    overall = "healthy"

    try:
        async with database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    try:
        if not await llm.health_check():
            llm_status = "unavailable"
    except Exception as e:
        llm_status = "unavailable"
        logger.warning("Health check: LLM unreachable: %s", str(e))

    if llm_status != "available" and overall == "healthy":
        overall = "degraded"

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        llm=llm_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    status_code = 503 if overall == "unhealthy" else 200
    return JSONResponse(status_code=status_code, content=body.model_dump())
