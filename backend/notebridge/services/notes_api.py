"""
NoteBridge Backend - Remote Notes Service Client
==================================================

What:  Thin async client for the remote notes/folders API of record.
How:   Wraps an httpx.AsyncClient bound to the configured base URL. Every
       method issues exactly one request and returns the decoded JSON body.
Who:   Used by FolderService, NoteService and AttachmentService.
When:  One client per inbound request (see dependencies.get_notes_api).

Endpoints:
    GET    /api/v1/folders?user_uuid=<uuid>   → list of folders
    POST   /api/v1/notes                      → created note
    PUT    /api/v1/notes/{id}                 → updated note
    DELETE /api/v1/notes/{id}                 → deletion confirmation
    GET    /api/v1/notes/{id}                 → note detail incl. attachments

Failure model:
    Success is decided by HTTP status alone (2xx). Any other status, and any
    transport error, raises UpstreamServiceError. There are no retries and no
    circuit breaker. The timeout is whatever Settings.upstream_timeout says,
    which is "none" by default.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from notebridge.config import Settings, settings as default_settings
from notebridge.exceptions import UpstreamServiceError
from notebridge.middleware.request_id import REQUEST_ID_HEADER, request_id_var

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def _note_path(note_id: str) -> str:
    # one path segment, whatever the id contains
    return f"/notes/{quote(str(note_id), safe='')}"


async def _forward_request_id(request: httpx.Request) -> None:
    rid = request_id_var.get()
    if rid:
        request.headers[REQUEST_ID_HEADER] = rid


class NotesAPIClient:
    """
    Async client for the remote notes service.

    Usage:
        async with NotesAPIClient.from_settings(settings) as api:
            folders = await api.list_folders(user_uuid)

    Args:
        base_url:  Notes service root, e.g. "http://notes.internal"
        token:     Optional bearer token sent on every request
        timeout:   Seconds, or None to wait indefinitely
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
            event_hooks={"request": [_forward_request_id]},
        )

    @classmethod
    def from_settings(
        cls,
        config: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "NotesAPIClient":
        config = config or default_settings
        return cls(
            base_url=config.notes_api_base_url,
            token=config.notes_api_token,
            timeout=config.upstream_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "NotesAPIClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ── Core request helper ───────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Send one request and return the decoded JSON body.

        Raises:
            UpstreamServiceError: non-2xx status or transport failure.
                The upstream body is kept in `context` for logging only.
        """
        url = f"{API_PREFIX}{path}"
        try:
            response = await self._client.request(method, url, params=params, json=json)
        except httpx.HTTPError as e:
            logger.warning("Notes service unreachable: %s %s: %s", method, url, e)
            raise UpstreamServiceError(
                context={"method": method, "path": url, "error": type(e).__name__},
            ) from e

        if not response.is_success:
            logger.warning(
                "Notes service returned %d for %s %s", response.status_code, method, url
            )
            raise UpstreamServiceError(
                status_code=response.status_code,
                context={"method": method, "path": url, "body": response.text[:500]},
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamServiceError(
                message="The notes service returned an unreadable response",
                status_code=response.status_code,
                context={"method": method, "path": url},
            ) from e

    # ── Folders ───────────────────────────────────────────────────────────

    async def list_folders(self, user_uuid: Optional[str] = None) -> List[Any]:
        params = {"user_uuid": user_uuid} if user_uuid else None
        data = await self._request("GET", "/folders", params=params)
        return data if data is not None else []

    # ── Notes ─────────────────────────────────────────────────────────────

    async def create_note(self, body: Dict[str, Any]) -> Any:
        return await self._request("POST", "/notes", json=body)

    async def get_note(self, note_id: str) -> Dict[str, Any]:
        data = await self._request("GET", _note_path(note_id))
        if not isinstance(data, dict):
            raise UpstreamServiceError(
                message="The notes service returned an unexpected note payload",
                context={"note_id": note_id, "type": type(data).__name__},
            )
        return data

    async def update_note(self, note_id: str, body: Dict[str, Any]) -> Any:
        return await self._request("PUT", _note_path(note_id), json=body)

    async def delete_note(self, note_id: str) -> Any:
        return await self._request("DELETE", _note_path(note_id))

    # ── Health ────────────────────────────────────────────────────────────

    async def ping(self) -> bool:
        """
        True when the notes service host answers at all.

        Any HTTP status counts as reachable; only transport errors do not.
        """
        try:
            await self._client.get("/")
        except httpx.HTTPError as e:
            logger.warning("Notes service ping failed: %s", e)
            return False
        return True
