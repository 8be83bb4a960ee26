"""
NoteBridge Backend - Attachment Service
=========================================

What:  Uploads a file to object storage and attaches its metadata to a note.
Who:   Called by POST /notes/{id}/files.

Pipeline (linear, no compensation):
    1. validate     note id, non-empty, size <= MAX_FILE_SIZE → ValidationError
    2. store        put notes/note-<id>-<unix>.<ext> (public)  ┐
    3. describe     Attachment{id, name, type, url, size, ts}  │
    4. fetch        GET  /api/v1/notes/{id}                    │ any failure →
    5. write        PUT  /api/v1/notes/{id} full body          │ AttachmentUploadError
                    {title, content, folder_id, attachments}   ┘
    6. re-fetch     GET  /api/v1/notes/{id} → UploadResult(note, file)

Known anomalies (kept as-is, the remote API has no atomic append):
    - A failure at step 4 or 5 leaves the object from step 2 orphaned.
    - Step 5 overwrites the whole note. Two uploads that both fetch before
      either writes end with one attachment missing (last writer wins), and a
      title/content edit landing between 4 and 5 is lost.
"""

import logging
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import magic

from notebridge.config import settings
from notebridge.exceptions import (
    AttachmentUploadError,
    ObjectStorageError,
    UpstreamServiceError,
    ValidationError,
)
from notebridge.schemas.note import Attachment
from notebridge.services.notes_api import NotesAPIClient
from notebridge.services.storage_service import ObjectStorage

logger = logging.getLogger(__name__)

UPLOAD_FAILED = "Failed to upload file"
UPLOAD_SUCCEEDED = "File uploaded successfully"
DEFAULT_CONTENT_TYPE = "application/octet-stream"
NOTE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass
class UploadResult:
    """Outcome of a successful upload: the fresh note and the new attachment."""
    note: Dict[str, Any]
    file: Attachment


class AttachmentService:
    """
    Upload-and-attach workflow for one request.

    Args:
        api:           Notes service client
        storage:       Object storage driver
        max_file_size: Byte limit; defaults to Settings.max_file_size
        clock:         Returns the current unix time (tests pin it)
    """

    def __init__(
        self,
        api: NotesAPIClient,
        storage: ObjectStorage,
        max_file_size: Optional[int] = None,
        clock=time.time,
    ):
        self.api = api
        self.storage = storage
        self.max_file_size = max_file_size or settings.max_file_size
        self.clock = clock

    def validate_note_id(self, note_id: str) -> None:
        """Note ids end up in upstream URLs and object keys: one plain segment only."""
        if not NOTE_ID_PATTERN.match(str(note_id)):
            raise ValidationError(
                message="Invalid note id.",
                field="note_id",
                context={"note_id": str(note_id)[:64]},
            )

    def validate_declared_size(self, content_length: Optional[int]) -> None:
        """
        Reject an upload whose declared size is over the limit, before its
        bytes are read.
        """
        if content_length and content_length > self.max_file_size:
            max_mb = self.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

    def validate_file(self, content: bytes, content_length: Optional[int] = None) -> None:
        """
        Reject empty or oversized uploads before anything is stored.

        Both the declared size (from the multipart part) and the actual byte
        count are checked.

        Raises:
            ValidationError with a human-readable size message
        """
        max_mb = self.max_file_size / (1024 * 1024)

        self.validate_declared_size(content_length)

        if not content:
            raise ValidationError(
                message="The uploaded file is empty.",
                field="file",
                context={"actual_size": 0},
            )

        if len(content) > self.max_file_size:
            raise ValidationError(
                message=(
                    f"File size ({len(content) / (1024 * 1024):.1f}MB) exceeds "
                    f"maximum of {max_mb:.0f}MB."
                ),
                field="file",
                context={"max_size_mb": max_mb, "actual_size": len(content)},
            )

    def build_filename(self, note_id: str, original_name: str) -> str:
        """
        note-<note_id>-<unix seconds>.<original extension>

        A file without an extension keeps a trailing dot, e.g. "note-7-1700000000.".
        """
        extension = Path(original_name).suffix.lstrip(".")
        return f"note-{note_id}-{int(self.clock())}.{extension}"

    def detect_mime_type(self, content: bytes, declared: Optional[str] = None) -> str:
        """
        MIME type from the file's header bytes, via libmagic.

        The client-declared type is only used when detection fails.
        """
        try:
            detected = magic.from_buffer(content, mime=True)
        except magic.MagicException as e:
            logger.warning("MIME type detection failed, using declared type: %s", e)
            detected = None
        return detected or declared or DEFAULT_CONTENT_TYPE

    async def upload(
        self,
        note_id: str,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
        content_length: Optional[int] = None,
    ) -> UploadResult:
        """
        Run the full pipeline for one file.

        Args:
            note_id:        Target note identifier
            filename:       Original client filename
            content:        Raw file bytes
            content_type:   MIME type declared by the client (used when sniffing fails)
            content_length: Declared part size, if the client sent one

        Returns:
            UploadResult with the re-fetched note and the new Attachment

        Raises:
            ValidationError:       bad note id, empty or oversized file (nothing stored)
            AttachmentUploadError: any later step failed
        """
        # ── Step 1: Validate ──────────────────────────────────────────────
        self.validate_note_id(note_id)
        self.validate_file(content, content_length)

        object_name = self.build_filename(note_id, filename)
        key = f"notes/{object_name}"
        mime_type = self.detect_mime_type(content, content_type)

        try:
            # ── Step 2: Store the bytes ───────────────────────────────────
            url = await self.storage.put(key, content, mime_type)

            # ── Step 3: Describe the attachment ───────────────────────────
            attachment = Attachment(
                name=filename,
                type=mime_type,
                url=url,
                size=len(content),
            )

            # ── Step 4: Fetch the current note ────────────────────────────
            note = await self.api.get_note(note_id)

            # ── Step 5: Append and write the full note back ───────────────
            attachments = list(note.get("attachments") or [])
            attachments.append(attachment.model_dump())
            body = {
                "title": note.get("title"),
                "content": note.get("content"),
                "folder_id": note.get("folder_id"),
                "attachments": attachments,
            }
            await self.api.update_note(note_id, body)

        except (UpstreamServiceError, ObjectStorageError) as e:
            logger.error(
                "Upload to note %s failed at key %s | Context: %s", note_id, key, e.context
            )
            raise AttachmentUploadError(
                message=UPLOAD_FAILED,
                context={"note_id": note_id, "key": key, **e.context},
            ) from e

        logger.info("Attached %s (%d bytes) to note %s", key, attachment.size, note_id)

        # ── Step 6: Re-fetch ──────────────────────────────────────────────
        try:
            fresh = await self.api.get_note(note_id)
        except UpstreamServiceError as e:
            logger.warning(
                "Re-fetch of note %s failed after upload, returning written body | Context: %s",
                note_id,
                e.context,
            )
            fresh = {**note, **body}

        return UploadResult(note=fresh, file=attachment)
