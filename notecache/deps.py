"""FastAPI dependencies resolving per-app state for route handlers."""

from fastapi import Request

from notecache.config import Settings
from notecache.services.note_store import NoteStore


def get_store(request: Request) -> NoteStore:
    """Return the NoteStore created by create_app() for this application."""
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
