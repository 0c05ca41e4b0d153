"""
NoteCache - Custom Exception Hierarchy
========================================

What:  Application-specific exceptions for the note store and HTTP surface.
How:   Each exception carries a user-safe message and an optional context
       dict. Global handlers registered in main.py log the context and turn
       the exception into a plain-text response with the right status code.
Who:   Raised by NoteStore; caught by the handlers in main.py.

Exception Hierarchy:
    NoteCacheError (base)           → 500 Internal Server Error
    ├── InvalidNoteError            → 400 Bad Request   (invalid_input)
    ├── NoteAlreadyExistsError      → 400 Bad Request   (already_exists)
    ├── NoteNotFoundError           → 404 Not Found     (not_found)
    └── NoteStorageError            → 500 Internal Server Error (internal_error)
"""

from typing import Any, Dict, Optional


class NoteCacheError(Exception):
    """
    Base exception for all NoteCache errors.

    Attributes:
        message:  User-facing error description (safe to return in a response)
        context:  Additional debug info (logged but NOT returned to the client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Internal server error",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class InvalidNoteError(NoteCacheError):
    """
    Raised when a note name or text fails validation.

    When:    Missing/empty name or text, or a name outside the allowed
             character set (separators, traversal, leading dot).
    HTTP:    400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Note name and text are required",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NoteAlreadyExistsError(NoteCacheError):
    """Raised by create when a note with the same name is already stored."""

    status_code = 400

    def __init__(self, name: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["name"] = name
        super().__init__(message="Note already exists", context=ctx)
        self.name = name


class NoteNotFoundError(NoteCacheError):
    """
    Raised when the target note of get/update/delete does not exist.

    HTTP:    404 Not Found
    """

    status_code = 404

    def __init__(self, name: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["name"] = name
        super().__init__(message="Not found", context=ctx)
        self.name = name


class NoteStorageError(NoteCacheError):
    """
    Raised when a filesystem operation on a note fails unexpectedly.

    When:    Disk full, permission denied, I/O error during write/read/remove.
    HTTP:    500 Internal Server Error

    The OS error and path go into context (logged); the client only ever
    sees the generic message.
    """

    def __init__(
        self,
        message: str = "Internal server error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
