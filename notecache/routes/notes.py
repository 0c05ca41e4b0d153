"""
NoteCache - Notes Route Handlers
==================================

What:  The note CRUD surface:
           POST   /write          create from form fields note_name, note
           GET    /notes          list every note as a JSON array
           GET    /notes/{name}   raw note text
           PUT    /notes/{name}   replace note text with the raw request body
           DELETE /notes/{name}   remove a note
How:   Each handler pulls its input out of the request and makes exactly one
       NoteStore call. Failures surface as NoteCacheError subclasses and are
       rendered by the exception handlers in main.py.
"""

import logging
from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import PlainTextResponse, StreamingResponse

from notecache.deps import get_store
from notecache.exceptions import InvalidNoteError
from notecache.schemas.note import Note
from notecache.services.note_store import NoteStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Notes"])

_TEXT_BODY = {
    "requestBody": {
        "required": True,
        "content": {"text/plain": {"schema": {"type": "string"}}},
    }
}


@router.post(
    "/write",
    status_code=201,
    response_class=PlainTextResponse,
    responses={
        201: {"description": "Note created"},
        400: {"description": "Missing field, invalid name, or note already exists"},
        500: {"description": "Note could not be written"},
    },
    summary="Create a note",
)
async def write_note(
    note_name: Optional[str] = Form(default=None),
    note: Optional[str] = Form(default=None),
    store: NoteStore = Depends(get_store),
) -> PlainTextResponse:
    """
    Create a note from form data (urlencoded or multipart).

    Both fields must be present and non-empty. An existing note is never
    overwritten; use PUT /notes/{name} for that.
    """
    if not note_name or not note:
        raise InvalidNoteError()

    await store.create(note_name, note)
    return PlainTextResponse("Note created", status_code=201)


async def _json_array(notes: AsyncIterator[Note]) -> AsyncIterator[str]:
    # Emits [item,item,...] incrementally; an empty store yields "[]"
    yield "["
    first = True
    async for item in notes:
        if not first:
            yield ","
        first = False
        yield item.model_dump_json()
    yield "]"


@router.get(
    "/notes",
    response_model=list[Note],
    responses={200: {"description": "Every stored note as {name, text}"}},
    summary="List all notes",
)
async def list_notes(store: NoteStore = Depends(get_store)) -> StreamingResponse:
    """
    Return every note with its full text.

    The array is streamed one note at a time, so the response never holds
    more than one note's text in memory. Notes are ordered by name.
    """
    # Listed before streaming starts so a directory error is still a 500
    names = await store.names()
    return StreamingResponse(
        _json_array(store.iter_notes(names)),
        media_type="application/json",
    )


@router.get(
    "/notes/{name}",
    response_class=PlainTextResponse,
    responses={
        200: {"description": "Raw note text"},
        404: {"description": "Note not found"},
    },
    summary="Read a note",
)
async def get_note(name: str, store: NoteStore = Depends(get_store)) -> PlainTextResponse:
    text = await store.get(name)
    return PlainTextResponse(text)


@router.put(
    "/notes/{name}",
    response_class=PlainTextResponse,
    responses={
        200: {"description": "Note updated"},
        400: {"description": "Empty body"},
        404: {"description": "Note not found"},
        500: {"description": "Note could not be written"},
    },
    openapi_extra=_TEXT_BODY,
    summary="Replace a note's text",
)
async def update_note(
    name: str,
    request: Request,
    store: NoteStore = Depends(get_store),
) -> PlainTextResponse:
    """
    Overwrite an existing note with the raw request body.

    The body is taken as UTF-8 text whatever the Content-Type says.
    """
    body = await request.body()
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError:
        raise InvalidNoteError(message="Error: Text must be UTF-8", field="note")

    await store.update(name, text)
    return PlainTextResponse(f'Note "{name}" updated successfully')


@router.delete(
    "/notes/{name}",
    response_class=PlainTextResponse,
    responses={
        200: {"description": "Note deleted"},
        404: {"description": "Note not found"},
    },
    summary="Delete a note",
)
async def delete_note(name: str, store: NoteStore = Depends(get_store)) -> PlainTextResponse:
    await store.delete(name)
    return PlainTextResponse("Note deleted")
