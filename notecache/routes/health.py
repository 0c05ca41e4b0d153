"""
NoteCache - Health Check Route
================================

What:  Health check endpoint for monitoring and process supervisors.
How:   Confirms the cache directory exists and is writable, and counts the
       stored notes.

    Status levels:
    - healthy:   cache directory writable (HTTP 200)
    - unhealthy: cache directory missing or not writable (HTTP 503)
"""

import logging
import os
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from notecache import __version__
from notecache.deps import get_store
from notecache.exceptions import NoteStorageError
from notecache.schemas.note import HealthResponse
from notecache.services.note_store import NoteStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Cache directory unavailable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(store: NoteStore = Depends(get_store)):
    storage = "writable"
    note_count = 0

    if not (store.root.is_dir() and os.access(store.root, os.W_OK)):
        storage = "unavailable"
        logger.warning("Health check: cache directory not writable: %s", store.root)
    else:
        try:
            note_count = len(await store.names())
        except NoteStorageError as e:
            storage = "unavailable"
            logger.warning("Health check: cannot list cache directory: %s", e.context)

    healthy = storage == "writable"
    body = HealthResponse(
        status="healthy" if healthy else "unhealthy",
        version=__version__,
        storage=storage,
        note_count=note_count,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    return JSONResponse(status_code=200 if healthy else 503, content=body.model_dump())
