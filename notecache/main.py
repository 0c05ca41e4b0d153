"""
NoteCache - FastAPI Application Factory
=========================================

What:  Builds and configures the FastAPI application.
How:   create_app(settings) wires the NoteStore, middleware, exception
       handlers and routers together and returns the app.
Who:   The CLI (notecache.cli) passes the app to uvicorn; tests call
       create_app() with a temporary cache directory. Also usable as
       `uvicorn notecache.main:create_app --factory` with NOTECACHE_* env vars.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐                   │
    │  │ Req ID   │→│  Logging        │                   │
    │  └──────────┘ └─────────────────┘                   │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌────────────────┐ ┌───────────┐  │
    │  │ POST /write  │ │ /notes[/{name}]│ │ /health   │  │
    │  └──────────────┘ └────────────────┘ └───────────┘  │
    │  ┌──────────────────────┐                           │
    │  │ GET /UploadForm.html │                           │
    │  └──────────────────────┘                           │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Invalid/Exists→400 │ NotFound→404 │ I/O→500  │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from notecache import __version__
from notecache.config import Settings
from notecache.exceptions import (
    NoteCacheError,
    InvalidNoteError,
    NoteAlreadyExistsError,
    NoteNotFoundError,
    NoteStorageError,
)
from notecache.middleware.logging import RequestLoggingMiddleware
from notecache.middleware.request_id import RequestIDMiddleware, request_id_var
from notecache.routes import form, health, notes
from notecache.services.note_store import NoteStore

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    Called by the CLI before the server starts.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # notecache.access replaces uvicorn's own access log
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    store: NoteStore = app.state.store

    logger.info("=" * 60)
    logger.info("NoteCache %s starting up...", __version__)

    # Recreate the directory if it was removed after create_app()
    store.root.mkdir(parents=True, exist_ok=True)
    logger.info("Cache directory: %s", store.root)

    logger.info("Server running at %s", settings.base_url)
    logger.info("API docs: %s/docs", settings.base_url)
    logger.info("=" * 60)

    yield

    logger.info("NoteCache shutting down.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map NoteCache exceptions to plain-text responses.

        InvalidNoteError        → 400 Bad Request
        NoteAlreadyExistsError  → 400 Bad Request
        NoteNotFoundError       → 404 Not Found
        NoteStorageError        → 500 Internal Server Error
        NoteCacheError (base)   → 500 Internal Server Error
        Exception (fallback)    → 500 Internal Server Error

    5xx responses always carry the generic message; paths and OS errors
    stay in the server log.
    """

    @app.exception_handler(InvalidNoteError)
    async def handle_invalid_note(request: Request, exc: InvalidNoteError):
        rid = request_id_var.get("")
        logger.warning("[%s] Invalid input: %s | Context: %s", rid, exc.message, exc.context)
        return PlainTextResponse(exc.message, status_code=400)

    @app.exception_handler(NoteAlreadyExistsError)
    async def handle_already_exists(request: Request, exc: NoteAlreadyExistsError):
        rid = request_id_var.get("")
        logger.info("[%s] Note already exists: %s", rid, exc.name)
        return PlainTextResponse(exc.message, status_code=400)

    @app.exception_handler(NoteNotFoundError)
    async def handle_not_found(request: Request, exc: NoteNotFoundError):
        return PlainTextResponse(exc.message, status_code=404)

    @app.exception_handler(NoteStorageError)
    async def handle_storage_error(request: Request, exc: NoteStorageError):
        rid = request_id_var.get("")
        logger.error("[%s] Note storage error: %s | Context: %s", rid, exc.message, exc.context)
        return PlainTextResponse(INTERNAL_ERROR_MESSAGE, status_code=500)

    @app.exception_handler(NoteCacheError)
    async def handle_note_cache_error(request: Request, exc: NoteCacheError):
        rid = request_id_var.get("")
        logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        message = exc.message if exc.status_code < 500 else INTERNAL_ERROR_MESSAGE
        return PlainTextResponse(message, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return PlainTextResponse(INTERNAL_ERROR_MESSAGE, status_code=500)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    The cache directory is created here, before any server is bound, and
    the NoteStore over it is kept on app.state for the route dependencies.
    """
    settings = settings or Settings()

    app = FastAPI(
        title="NoteCache API",
        description=(
            "Store, read, update, delete and list plain-text notes. "
            "Each note is one file in the server's cache directory."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.store = NoteStore(settings.cache_dir, suffix=settings.note_suffix)

    # Last added runs first: RequestID → Logging → route
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(notes.router)
    app.include_router(form.router)
    app.include_router(health.router)

    return app
