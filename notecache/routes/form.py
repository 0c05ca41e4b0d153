"""
NoteCache - Upload Form Route
===============================

What:  Serves the static HTML form that posts to /write.
Who:   Browsers; the form is a convenience front end for POST /write.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse, PlainTextResponse

from notecache.config import Settings
from notecache.deps import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Form"])


@router.get(
    "/UploadForm.html",
    response_class=FileResponse,
    responses={
        200: {"description": "HTML form for creating a note", "content": {"text/html": {}}},
        404: {"description": "Form file missing"},
    },
    summary="Note upload form",
)
async def upload_form(settings: Settings = Depends(get_settings)):
    path = settings.upload_form_path
    if not path.is_file():
        logger.warning("Upload form not found at %s", path)
        return PlainTextResponse("Not found", status_code=404)
    return FileResponse(path=str(path), media_type="text/html")
