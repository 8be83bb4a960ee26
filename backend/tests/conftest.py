"""
NoteBridge Backend - Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   The remote notes service is replaced by FakeNotesService, an in-memory
       implementation of the /api/v1 endpoints served through
       httpx.MockTransport. Object storage is replaced by RecordingStorage.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── fake_notes:   in-memory notes service with request log and failure switches
    ├── api:          NotesAPIClient wired to fake_notes
    ├── storage:      RecordingStorage (records every put, can be told to fail)
    └── test_client:  HTTPX AsyncClient against the FastAPI app with both fakes
"""

import asyncio
import copy
import json
import os
import re
import tempfile
from typing import Any, Dict, List, Optional, Tuple

# Environment must be set before notebridge.config is imported anywhere
os.environ["NOTES_API_BASE_URL"] = "http://notes.test"
os.environ["NOTES_API_TOKEN"] = "test-token"
os.environ["STORAGE_DRIVER"] = "local"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="notebridge_test_")
os.environ["STORAGE_URL"] = "https://cdn.test"
os.environ["SESSION_SECRET_KEY"] = "test-secret-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from notebridge.exceptions import ObjectStorageError
from notebridge.services.notes_api import NotesAPIClient
from notebridge.services.storage_service import ObjectStorage

NOTE_PATH = re.compile(r"^/api/v1/notes/([^/]+)$")


class ArrivalBarrier:
    """Holds callers until `parties` of them have arrived, then releases all."""

    def __init__(self, parties: int):
        self.parties = parties
        self.arrived = 0
        self.released = asyncio.Event()

    async def wait(self) -> None:
        if self.released.is_set():
            return
        self.arrived += 1
        if self.arrived >= self.parties:
            self.released.set()
        else:
            await self.released.wait()


class FakeNotesService:
    """
    In-memory stand-in for the remote notes service.

    Attributes:
        notes:     note_id → note dict
        folders:   list returned by GET /api/v1/folders
        requests:  every httpx.Request received, in order
        failures:  (method, resource) → status code to answer with,
                   resource is "folders", "notes" (collection) or "note" (item)
        unreachable: resources that raise httpx.ConnectError instead
        note_get_barrier: optional ArrivalBarrier awaited by GET /notes/{id}
    """

    def __init__(self):
        self.notes: Dict[str, Dict[str, Any]] = {
            "1": {
                "id": 1,
                "title": "Groceries",
                "content": "milk, eggs",
                "folder_id": 10,
                "attachments": [],
            }
        }
        self.folders: List[Dict[str, Any]] = [
            {"id": 10, "user_uuid": "user-123", "name": "Personal"},
            {"id": 11, "user_uuid": "user-123", "name": "Work"},
        ]
        self.requests: List[httpx.Request] = []
        self.failures: Dict[Tuple[str, str], int] = {}
        self.unreachable: set = set()
        self.note_get_barrier: Optional[ArrivalBarrier] = None
        self._next_id = 100

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def fail(self, method: str, resource: str, status: int = 500) -> None:
        self.failures[(method, resource)] = status

    def calls(self, method: str, resource: str) -> List[httpx.Request]:
        return [r for r in self.requests if (r.method, self._resource(r)) == (method, resource)]

    @staticmethod
    def _resource(request: httpx.Request) -> str:
        path = request.url.path
        if path == "/api/v1/folders":
            return "folders"
        if path == "/api/v1/notes":
            return "notes"
        if NOTE_PATH.match(path):
            return "note"
        return "other"

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method = request.method
        resource = self._resource(request)

        if resource in self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)
        status = self.failures.get((method, resource))
        if status is not None:
            return httpx.Response(status, json={"error": "upstream failure"})

        if resource == "folders" and method == "GET":
            return httpx.Response(200, json=self.folders)

        if resource == "notes" and method == "POST":
            note = json.loads(request.content)
            note_id = str(self._next_id)
            self._next_id += 1
            self.notes[note_id] = {"id": int(note_id), "attachments": [], **note}
            return httpx.Response(201, json=self.notes[note_id])

        if resource == "note":
            note_id = NOTE_PATH.match(request.url.path).group(1)
            if note_id not in self.notes:
                return httpx.Response(404, json={"error": "not found"})
            if method == "GET":
                # read before parking so concurrent readers all see the same state
                snapshot = copy.deepcopy(self.notes[note_id])
                if self.note_get_barrier is not None:
                    await self.note_get_barrier.wait()
                return httpx.Response(200, json=snapshot)
            if method == "PUT":
                body = json.loads(request.content)
                self.notes[note_id] = {"id": self.notes[note_id]["id"], **self.notes[note_id], **body}
                return httpx.Response(200, json=self.notes[note_id])
            if method == "DELETE":
                del self.notes[note_id]
                return httpx.Response(200, json={"deleted": True})

        if request.url.path == "/":
            return httpx.Response(200, text="ok")

        return httpx.Response(404, json={"error": "no route"})


class RecordingStorage(ObjectStorage):
    """Object storage that keeps puts in memory."""

    def __init__(self, public_base_url: str = "https://cdn.test"):
        super().__init__(public_base_url)
        self.puts: List[Tuple[str, bytes, str]] = []
        self.fail_with: Optional[Exception] = None

    async def put(self, key: str, content: bytes, content_type: str) -> str:
        if self.fail_with is not None:
            raise self.fail_with
        self.puts.append((key, content, content_type))
        return self.public_url(key)


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def fake_notes():
    return FakeNotesService()


@pytest_asyncio.fixture
async def api(fake_notes):
    async with NotesAPIClient(
        base_url="http://notes.test",
        token="test-token",
        transport=fake_notes.transport,
    ) as client:
        yield client


@pytest.fixture
def storage():
    return RecordingStorage()


@pytest.fixture
def failing_storage():
    s = RecordingStorage()
    s.fail_with = ObjectStorageError(context={"reason": "bucket missing"})
    return s


@pytest_asyncio.fixture
async def test_client(fake_notes, storage):
    """
    HTTPX AsyncClient talking to the FastAPI app, with the notes service and
    object storage replaced by the fakes above.

    Usage:
        async def test_index(test_client):
            response = await test_client.get("/notes", headers={"X-User-UUID": "u"})
    """
    from notebridge.dependencies import get_notes_api, get_object_storage
    from notebridge.main import app

    async def _fake_api():
        async with NotesAPIClient(
            base_url="http://notes.test", transport=fake_notes.transport
        ) as client:
            yield client

    app.dependency_overrides[get_notes_api] = _fake_api
    app.dependency_overrides[get_object_storage] = lambda: storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
