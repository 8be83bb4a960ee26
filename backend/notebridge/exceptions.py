"""
NoteBridge Backend - Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the failure modes of a proxy layer.
How:   Each exception carries a user-safe message and an optional context dict.
       Global exception handlers (registered in main.py) turn the first group
       into JSON error responses. The second group is caught by the note
       routes and converted into flash messages or upload JSON.

Exception Hierarchy:
    NotesGatewayError (base)
    ├── ValidationError          → 400 Bad Request (missing or oversized file)
    ├── AuthenticationError      → 401 Unauthorized (no forwarded user id)
    ├── NotFoundError            → 404 Not Found
    ├── UpstreamServiceError     → 502 Bad Gateway (notes service error/unreachable)
    ├── ObjectStorageError       → 500 Internal Server Error
    ├── NoteWriteError           → flash "Failed to create note" etc.
    └── AttachmentUploadError    → flash / JSON "Failed to upload file"

Upstream error bodies are never shown to the user. They go into `context`,
which is logged server-side only.
"""

from typing import Any, Dict, Optional


class NotesGatewayError(Exception):
    """
    Base exception for all NoteBridge application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NotesGatewayError):
    """
    Raised when client input fails validation.

    When:    Empty file, file larger than MAX_FILE_SIZE, note id that is not
             a single plain path segment.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "File size (12.0MB) exceeds maximum of 10MB.",
            "details": {"field": "file", "max_size_mb": 10.0, "actual_size": 12582912}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(NotesGatewayError):
    """
    Raised when the request carries no authenticated user identifier.

    Authentication itself happens upstream of NoteBridge; this only signals
    that the forwarded identity header is absent.
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(NotesGatewayError):
    """Raised when a requested resource does not exist. HTTP 404."""

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class UpstreamServiceError(NotesGatewayError):
    """
    Raised when the remote notes service answers with a non-2xx status or
    cannot be reached at all.

    Attributes:
        status_code: Upstream HTTP status, or None for transport failures
    HTTP:    502 Bad Gateway (only when it escapes to the global handler)
    """

    def __init__(
        self,
        message: str = "The notes service is unavailable",
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message=message, context=ctx)
        self.status_code = status_code


class ObjectStorageError(NotesGatewayError):
    """
    Raised when writing an uploaded file to object storage fails.

    When:    S3 client error, missing bucket, disk full on the local driver.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NoteWriteError(NotesGatewayError):
    """
    Raised when a create/update/delete request to the notes service fails.

    The message is one of the generic flash strings ("Failed to create note",
    ...). The route sends the user back to the previous page with it.
    """

    def __init__(
        self,
        message: str = "Failed to save note",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AttachmentUploadError(NotesGatewayError):
    """
    Raised when any step of the upload pipeline after validation fails.

    The object may already exist in storage when this is raised; nothing
    removes it.
    """

    def __init__(
        self,
        message: str = "Failed to upload file",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
