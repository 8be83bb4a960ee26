"""
NoteBridge Backend - Local Storage File Route
===============================================

What:  Serves objects written by LocalObjectStorage at GET /storage/{path}.
When:  Only meaningful with STORAGE_DRIVER=local; with the S3 driver the
       public URLs point at the bucket and this route answers 404.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from notebridge.dependencies import get_object_storage
from notebridge.exceptions import NotFoundError, ObjectStorageError, ValidationError
from notebridge.services.storage_service import LocalObjectStorage, ObjectStorage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Files"])


@router.get(
    "/storage/{file_path:path}",
    summary="Serve a locally stored attachment",
    responses={404: {"description": "File not found"}},
)
async def serve_file(
    file_path: str,
    storage: ObjectStorage = Depends(get_object_storage),
) -> FileResponse:
    if not isinstance(storage, LocalObjectStorage):
        raise NotFoundError(resource="file", resource_id=file_path)

    try:
        full_path = storage.resolve(file_path)
    except ObjectStorageError:
        raise ValidationError(message="Invalid file path", field="file_path")

    if not full_path.is_file():
        raise NotFoundError(resource="file", resource_id=file_path)

    return FileResponse(
        path=str(full_path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
