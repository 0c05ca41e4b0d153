"""
NoteCache - Pydantic Response Schemas
=======================================

What:  Pydantic models describing what the API returns.
How:   FastAPI uses them to serialize responses and to generate the
       OpenAPI document served at /openapi.json and /docs.
"""

from pydantic import BaseModel, Field


class Note(BaseModel):
    """
    What:  One stored note.
    Who:   Items of the GET /notes array; also what NoteStore yields.

    Serialized exactly as {"name": ..., "text": ...}.
    """
    name: str = Field(description="Note name (file name without the .txt suffix)")
    text: str = Field(description="Full note content, verbatim")


class HealthResponse(BaseModel):
    """
    What:  Health check response for GET /health.

    The service is only healthy when the cache directory exists and is
    writable, since every operation round-trips to it.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    storage: str = Field(description="Cache directory status: writable, unavailable")
    note_count: int = Field(description="Number of notes currently stored")
    uptime_seconds: float = Field(description="Seconds since service started")
