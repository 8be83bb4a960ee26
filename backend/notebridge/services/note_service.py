"""
NoteBridge Backend - Note Service
===================================

What:  Creates, updates and deletes notes through the remote notes service.
How:   One request to the notes endpoint, then one unconditional folder
       refresh. The refreshed list is handed back to the route.
Who:   Called by the POST/PUT/DELETE /notes route handlers.

Orchestration Flow:
    ┌──────────────┐  2xx  ┌──────────────────┐
    │ POST/PUT/DEL │──────▶│ GET /folders     │──▶ folders (or [])
    │ /api/v1/notes│       │ (refresh, always │
    └──────┬───────┘       │  degrades to []) │
           │ non-2xx       └──────────────────┘
           ▼
    NoteWriteError("Failed to ... note")

The upstream error detail is logged and dropped. The caller only ever sees
the generic message.
"""

import logging
from typing import Any, Awaitable, List, Optional

from notebridge.exceptions import NoteWriteError, UpstreamServiceError
from notebridge.schemas.note import NoteWrite
from notebridge.services.folder_service import FolderService
from notebridge.services.notes_api import NotesAPIClient

logger = logging.getLogger(__name__)

CREATE_FAILED = "Failed to create note"
UPDATE_FAILED = "Failed to update note"
DELETE_FAILED = "Failed to delete note"


class NoteService:
    """
    Note mutations for one request.

    Each public method returns the refreshed folder list on success and raises
    NoteWriteError on failure of the primary request.
    """

    def __init__(self, api: NotesAPIClient, folders: FolderService):
        self.api = api
        self.folders = folders

    async def create_note(self, payload: NoteWrite, user_uuid: Optional[str] = None) -> List[Any]:
        return await self._write(
            self.api.create_note(payload.to_upstream()),
            failure_message=CREATE_FAILED,
            user_uuid=user_uuid,
            action="create",
        )

    async def update_note(
        self, note_id: str, payload: NoteWrite, user_uuid: Optional[str] = None
    ) -> List[Any]:
        return await self._write(
            self.api.update_note(note_id, payload.to_upstream()),
            failure_message=UPDATE_FAILED,
            user_uuid=user_uuid,
            action="update",
            note_id=note_id,
        )

    async def delete_note(self, note_id: str, user_uuid: Optional[str] = None) -> List[Any]:
        return await self._write(
            self.api.delete_note(note_id),
            failure_message=DELETE_FAILED,
            user_uuid=user_uuid,
            action="delete",
            note_id=note_id,
        )

    async def _write(
        self,
        request: Awaitable[Any],
        failure_message: str,
        user_uuid: Optional[str],
        action: str,
        note_id: Optional[str] = None,
    ) -> List[Any]:
        try:
            await request
        except UpstreamServiceError as e:
            logger.error(
                "Note %s failed (note_id=%s) | Context: %s", action, note_id, e.context
            )
            raise NoteWriteError(
                message=failure_message,
                context={"action": action, "note_id": note_id, **e.context},
            ) from e

        logger.info("Note %s succeeded (note_id=%s)", action, note_id)
        return await self.folders.refresh_folders(user_uuid)
