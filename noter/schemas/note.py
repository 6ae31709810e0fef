"""
Noter Backend: Pydantic Request/Response Schemas
==================================================

What:  Pydantic models defining the JSON contract of the API.
How:   FastAPI validates request bodies against these models and serializes
       responses through them (which also feeds the OpenAPI docs).

Field casing is snake_case on the wire: id, title, created_at, updated_at.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class CreateNoteRequest(BaseModel):
    """
    Body of POST /notes.

    A missing title defaults to "" so the route can answer
    "Title is required" instead of a schema error. A non-string title
    (e.g. a number) fails validation, because pydantic does not coerce
    numbers to str.
    """
    title: str = Field(default="", description="Note title (must be non-empty)")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """A persisted note, as returned by POST /notes, GET /notes and GET /notes/{id}."""
    id: uuid.UUID = Field(description="Unique note identifier (UUID)")
    title: str = Field(description="Note title")
    created_at: datetime = Field(description="When the note was created")
    updated_at: datetime = Field(description="Equal to created_at (notes are never updated)")

    model_config = {"from_attributes": True}


class MessageResponse(BaseModel):
    """Body of GET /."""
    message: str


class HealthResponse(BaseModel):
    """
    Liveness payload for GET /health.

    `success` is the string "true", not a boolean.
    """
    status: str = Field(description="Always 'ok' while the process serves requests")
    success: str = Field(description="Always 'true'")
    time: str = Field(description="RFC 3339 timestamp of the check")


class DBHealthResponse(BaseModel):
    """Payload for GET /db/health, for both the 200 and the 503 case."""
    status: str = Field(description="'ok' or 'error'")
    message: str = Field(description="Human-readable connectivity result")
    timestamp: str = Field(description="RFC 3339 timestamp of the check")
