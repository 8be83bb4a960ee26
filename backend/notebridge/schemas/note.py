"""
NoteBridge Backend - Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the contract between the front-end and NoteBridge.
How:   FastAPI validates request bodies against these models and serializes
       responses with them. Notes and folders coming from the remote service
       are passed through as plain dicts; NoteBridge does not own their shape.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, Field


def utc_timestamp() -> str:
    """Current time as e.g. 2024-05-01T12:00:00.000Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteWrite(BaseModel):
    """
    Body of POST /notes and PUT /notes/{id}.

    Forwarded verbatim to the notes service as {title, content, folder_id}.
    Missing fields are forwarded as null, the remote service decides.
    """
    title: Optional[str] = Field(default=None, description="Note title")
    content: Optional[str] = Field(default=None, description="Note body")
    folder_id: Optional[Union[int, str]] = Field(
        default=None, description="Identifier of the folder holding the note"
    )

    def to_upstream(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "content": self.content,
            "folder_id": self.folder_id,
        }


# ══════════════════════════════════════════════════════════════════════════
# Domain Models
# ══════════════════════════════════════════════════════════════════════════


class Attachment(BaseModel):
    """
    Metadata record describing one uploaded file linked to a note.

    Created by AttachmentService, appended to the note's `attachments` list
    and persisted by the notes service. The id is generated here, and is only
    unique within the note by chance of uuid4.
    """
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = Field(description="Original client filename")
    type: str = Field(description="MIME type of the uploaded file")
    url: str = Field(description="Public URL of the stored object")
    size: int = Field(ge=0, description="Size in bytes")
    created_at: str = Field(
        default_factory=utc_timestamp,
        description="ISO 8601 creation timestamp, UTC with a Z suffix",
    )


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class FlashMessages(BaseModel):
    """Transient status strings consumed by the next page load."""
    success: Optional[str] = None
    error: Optional[str] = None


class NotesPage(BaseModel):
    """
    Page payload for the notes index, rendered by the front-end.

    `page` names the front-end component, `folders` is the upstream folder
    list (possibly empty after a failed fetch).
    """
    page: str = Field(default="notes/index")
    folders: List[Any] = Field(default_factory=list)
    flash: FlashMessages = Field(default_factory=FlashMessages)


class UploadResponse(BaseModel):
    """
    JSON answer to programmatic upload callers.

    On failure `note` and `file` are null and `success` is false.
    """
    success: bool
    message: str
    note: Optional[Dict[str, Any]] = None
    file: Optional[Attachment] = None


class HealthResponse(BaseModel):
    """Response for GET /health."""
    status: str = Field(description="healthy or degraded")
    version: str
    notes_api: str = Field(description="reachable or unreachable")
    storage_driver: str
    uptime_seconds: float


class ErrorResponse(BaseModel):
    """Shape of every error produced by the global exception handlers."""
    error: str
    message: str
    details: Optional[Dict[str, Any]] = None
    request_id: Optional[str] = None
