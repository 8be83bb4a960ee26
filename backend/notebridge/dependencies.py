"""
NoteBridge Backend - Dependency Providers
===========================================

What:  FastAPI dependencies that build the per-request collaborators.
How:   `get_notes_api` yields one NotesAPIClient per request and closes it
       afterwards; services are assembled on top of it. Tests replace
       `get_notes_api` and `get_object_storage` via app.dependency_overrides.

Dependency graph:
    get_notes_api ──┬── get_folder_service ── get_note_service
                    └── get_attachment_service ── get_object_storage
"""

from functools import lru_cache
from typing import AsyncGenerator, Optional

from fastapi import Depends, Header

from notebridge.config import settings
from notebridge.exceptions import AuthenticationError
from notebridge.services.attachment_service import AttachmentService
from notebridge.services.folder_service import FolderService
from notebridge.services.note_service import NoteService
from notebridge.services.notes_api import NotesAPIClient
from notebridge.services.storage_service import ObjectStorage, build_object_storage

USER_HEADER = "X-User-UUID"


async def get_notes_api() -> AsyncGenerator[NotesAPIClient, None]:
    async with NotesAPIClient.from_settings(settings) as api:
        yield api


@lru_cache
def get_object_storage() -> ObjectStorage:
    """Storage driver is process-wide; boto3 clients are thread-safe."""
    return build_object_storage(settings)


def get_folder_service(api: NotesAPIClient = Depends(get_notes_api)) -> FolderService:
    return FolderService(api, on_error=settings.on_folder_fetch_error)


def get_note_service(
    api: NotesAPIClient = Depends(get_notes_api),
    folders: FolderService = Depends(get_folder_service),
) -> NoteService:
    return NoteService(api, folders)


def get_attachment_service(
    api: NotesAPIClient = Depends(get_notes_api),
    storage: ObjectStorage = Depends(get_object_storage),
) -> AttachmentService:
    return AttachmentService(api, storage, max_file_size=settings.max_file_size)


# ── Identity ──────────────────────────────────────────────────────────────
# Authentication happens in front of NoteBridge; the auth layer forwards the
# authenticated user's identifier in X-User-UUID.


def get_optional_user_uuid(
    x_user_uuid: Optional[str] = Header(default=None, alias=USER_HEADER),
) -> Optional[str]:
    return x_user_uuid or None


def get_current_user_uuid(
    user_uuid: Optional[str] = Depends(get_optional_user_uuid),
) -> str:
    if not user_uuid:
        raise AuthenticationError(context={"header": USER_HEADER})
    return user_uuid
