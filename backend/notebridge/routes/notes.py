"""
NoteBridge Backend - Notes Route Handlers
===========================================

What:  The front-end facing notes surface.
How:   Each handler calls one service and shapes the outcome:
       - GET    /notes             → NotesPage payload (folders + flash)
       - POST   /notes             → 303 /notes, or back with "Failed to create note"
       - PUT    /notes/{id}        → 303 /notes, or back with "Failed to update note"
       - DELETE /notes/{id}        → 303 /notes, or back with "Failed to delete note"
       - POST   /notes/{id}/files  → UploadResponse JSON for programmatic callers,
                                     303 /notes with a flash message otherwise
Who:   Called by the notes pages of the web front-end.

Validation failures (missing/empty/oversized file) are not handled here; they
propagate to the global ValidationError handler (400).
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, RedirectResponse

from notebridge.dependencies import (
    get_attachment_service,
    get_current_user_uuid,
    get_folder_service,
    get_note_service,
    get_optional_user_uuid,
)
from notebridge.exceptions import AttachmentUploadError, NoteWriteError
from notebridge.flash import pop_flash, redirect_back, redirect_to_notes, wants_json
from notebridge.schemas.note import ErrorResponse, NotesPage, NoteWrite, UploadResponse
from notebridge.services.attachment_service import UPLOAD_SUCCEEDED, AttachmentService
from notebridge.services.folder_service import FolderService
from notebridge.services.note_service import NoteService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Notes"])


@router.get(
    "/notes",
    response_model=NotesPage,
    responses={
        401: {"description": "No authenticated user", "model": ErrorResponse},
        502: {"description": "Folder fetch failed (propagate mode)", "model": ErrorResponse},
    },
    summary="Notes page payload",
)
async def index(
    request: Request,
    user_uuid: str = Depends(get_current_user_uuid),
    folders: FolderService = Depends(get_folder_service),
) -> NotesPage:
    """
    Folders for the authenticated user plus any pending flash messages.

    A failed folder fetch renders an empty list unless
    ON_FOLDER_FETCH_ERROR=propagate.
    """
    folder_list = await folders.list_folders(user_uuid)
    return NotesPage(folders=folder_list, flash=pop_flash(request))


@router.post("/notes", status_code=303, summary="Create a note")
async def store(
    request: Request,
    payload: NoteWrite,
    user_uuid: Optional[str] = Depends(get_optional_user_uuid),
    notes: NoteService = Depends(get_note_service),
) -> RedirectResponse:
    try:
        await notes.create_note(payload, user_uuid)
    except NoteWriteError as e:
        return redirect_back(request, e.message)
    return redirect_to_notes(request)


@router.put("/notes/{note_id}", status_code=303, summary="Update a note")
async def update(
    request: Request,
    note_id: str,
    payload: NoteWrite,
    user_uuid: Optional[str] = Depends(get_optional_user_uuid),
    notes: NoteService = Depends(get_note_service),
) -> RedirectResponse:
    try:
        await notes.update_note(note_id, payload, user_uuid)
    except NoteWriteError as e:
        return redirect_back(request, e.message)
    return redirect_to_notes(request)


@router.delete("/notes/{note_id}", status_code=303, summary="Delete a note")
async def destroy(
    request: Request,
    note_id: str,
    user_uuid: Optional[str] = Depends(get_optional_user_uuid),
    notes: NoteService = Depends(get_note_service),
) -> RedirectResponse:
    try:
        await notes.delete_note(note_id, user_uuid)
    except NoteWriteError as e:
        return redirect_back(request, e.message)
    return redirect_to_notes(request)


@router.post(
    "/notes/{note_id}/files",
    responses={
        200: {"description": "File attached (programmatic callers)", "model": UploadResponse},
        303: {"description": "Redirect with flash message (page callers)"},
        400: {"description": "Missing, empty or oversized file", "model": ErrorResponse},
        502: {"description": "Upload failed (programmatic callers)", "model": UploadResponse},
    },
    summary="Upload a file and attach it to a note",
)
async def upload_note_file(
    request: Request,
    note_id: str,
    file: UploadFile = File(..., description="File to attach (max 10MB)"),
    body_note_id: Optional[str] = Form(default=None, alias="note_id"),
    attachments: AttachmentService = Depends(get_attachment_service),
):
    """
    Store the file, append it to the note's attachments and return the note.

    A `note_id` form field, when present, takes precedence over the path id.
    """
    target_note_id = body_note_id or note_id
    attachments.validate_declared_size(file.size)
    # never buffer more than one byte past the limit
    content = await file.read(attachments.max_file_size + 1)

    logger.info(
        "Received upload for note %s: filename=%s, size=%d bytes",
        target_note_id,
        file.filename or "unknown",
        len(content),
    )

    try:
        result = await attachments.upload(
            note_id=target_note_id,
            filename=file.filename or "upload",
            content=content,
            content_type=file.content_type,
            content_length=file.size,
        )
    except AttachmentUploadError as e:
        if wants_json(request):
            failure = UploadResponse(success=False, message=e.message)
            return JSONResponse(status_code=502, content=failure.model_dump(mode="json"))
        return redirect_back(request, e.message)
    finally:
        await file.close()

    if wants_json(request):
        return UploadResponse(
            success=True,
            message=UPLOAD_SUCCEEDED,
            note=result.note,
            file=result.file,
        )

    return redirect_to_notes(request, "success", UPLOAD_SUCCEEDED)
