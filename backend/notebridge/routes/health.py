"""
NoteBridge Backend - Health Check Route
=========================================

What:  Liveness plus a reachability check of the remote notes service.
How:   `healthy` when the notes service host answers any HTTP request,
       `degraded` when it cannot be reached. Always HTTP 200: NoteBridge
       itself is up, and a dead upstream only degrades pages to empty lists.
"""

import logging
import time

from fastapi import APIRouter, Depends

from notebridge import __version__
from notebridge.config import settings
from notebridge.dependencies import get_notes_api
from notebridge.schemas.note import HealthResponse
from notebridge.services.notes_api import NotesAPIClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(api: NotesAPIClient = Depends(get_notes_api)) -> HealthResponse:
    reachable = await api.ping()
    return HealthResponse(
        status="healthy" if reachable else "degraded",
        version=__version__,
        notes_api="reachable" if reachable else "unreachable",
        storage_driver=settings.storage_driver,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
