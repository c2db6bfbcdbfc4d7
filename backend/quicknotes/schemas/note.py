"""
QuickNotes Backend — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract between frontend and backend,
       plus the document → note mapper.
How:   Input models carry the field bounds; response models serialize with
       camelCase aliases, which FastAPI applies to every response_model.

Two representations of a note exist:
    - NoteDocument (models/note.py): what MongoDB stores; ObjectId + datetime
    - Note (here): what callers see; string id + ISO-8601 strings
    Only document → Note is defined. Mutations go through the input models,
    never through Note itself.
"""

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ── Field Bounds ──────────────────────────────────────────────────────────
TITLE_MIN_LENGTH = 1
TITLE_MAX_LENGTH = 200
CONTENT_MAX_LENGTH = 10_000
ID_MIN_LENGTH = 1


# ══════════════════════════════════════════════════════════════════════════
# Input Models — What callers send to the note operations
# ══════════════════════════════════════════════════════════════════════════


class CreateNoteInput(BaseModel):
    """Input for createNote. Content may be omitted and defaults to ''."""

    model_config = ConfigDict(extra="ignore")

    title: str = Field(min_length=TITLE_MIN_LENGTH, max_length=TITLE_MAX_LENGTH)
    content: str = Field(default="", max_length=CONTENT_MAX_LENGTH)


class UpdateNoteInput(BaseModel):
    """
    Input for updateNote.

    Only supplied fields are written. An explicit null is treated the same
    as an omitted field.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=ID_MIN_LENGTH)
    title: Optional[str] = Field(
        default=None, min_length=TITLE_MIN_LENGTH, max_length=TITLE_MAX_LENGTH
    )
    content: Optional[str] = Field(default=None, max_length=CONTENT_MAX_LENGTH)

    def changes(self) -> dict:
        """The title/content fields the caller actually supplied."""
        fields = {}
        if self.title is not None:
            fields["title"] = self.title
        if self.content is not None:
            fields["content"] = self.content
        return fields


class DeleteNoteInput(BaseModel):
    """Input for deleteNote."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=ID_MIN_LENGTH)


# ══════════════════════════════════════════════════════════════════════════
# Response Models — What the API returns to clients
# ══════════════════════════════════════════════════════════════════════════


class Note(BaseModel):
    """
    Client-facing note.

    Serialized as {id, title, content, createdAt, updatedAt}; both
    timestamps are ISO-8601 UTC strings such as 2024-01-15T12:00:00.000Z.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(description="Note identifier (hex ObjectId)")
    title: str
    content: str
    created_at: str = Field(description="Creation time (ISO 8601, UTC)")
    updated_at: str = Field(description="Last mutation time (ISO 8601, UTC)")


class DeleteNoteResponse(BaseModel):
    """Acknowledgment returned by deleteNote; carries no note payload."""

    success: bool = True


class ConnectionStatusResponse(BaseModel):
    """Result of the read-only MongoDB connectivity probe."""

    connected: bool


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Fields:
        error: Machine-readable error code (e.g., "validation_error", "not_found")
        message: Human-readable description for display to users
        details: Optional extra context (e.g., which field failed validation)
        request_id: Correlation ID for tracing this error in server logs
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")


# ══════════════════════════════════════════════════════════════════════════
# Document → Note Mapper
# ══════════════════════════════════════════════════════════════════════════


def format_timestamp(value: datetime) -> str:
    """
    Render a datetime as ISO-8601 UTC with millisecond precision.

    Naive datetimes are taken to be UTC (that is what MongoDB stores).
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def document_to_note(document: Mapping[str, Any]) -> Note:
    """Convert a stored note document into its client-facing form."""
    return Note(
        id=str(document["_id"]),
        title=document["title"],
        content=document.get("content", ""),
        created_at=format_timestamp(document["createdAt"]),
        updated_at=format_timestamp(document["updatedAt"]),
    )
