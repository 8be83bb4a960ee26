"""
NoteBridge Backend - HTTP Route Tests
=======================================

What:  End-to-end behaviour of the notes surface through the ASGI app.
How:   test_client (conftest) wires FakeNotesService and RecordingStorage in
       through dependency_overrides. Redirects are not followed, so tests
       see the 303 and its Location.
"""

import pytest
from starlette.datastructures import UploadFile

from notebridge.config import settings

USER = {"X-User-UUID": "user-123"}
JSON_CALLER = {"Accept": "application/json"}


class TestNotesPage:

    @pytest.mark.asyncio
    async def test_requires_user(self, test_client):
        response = await test_client.get("/notes")

        assert response.status_code == 401
        assert response.json()["error"] == "unauthenticated"

    @pytest.mark.asyncio
    async def test_renders_folders(self, test_client, fake_notes):
        response = await test_client.get("/notes", headers=USER)

        assert response.status_code == 200
        body = response.json()
        assert body["page"] == "notes/index"
        assert body["folders"] == fake_notes.folders
        assert fake_notes.calls("GET", "folders")[0].url.params["user_uuid"] == "user-123"

    @pytest.mark.asyncio
    async def test_upstream_failure_renders_empty_list(self, test_client, fake_notes):
        fake_notes.fail("GET", "folders", status=500)

        response = await test_client.get("/notes", headers=USER)

        assert response.status_code == 200
        assert response.json()["folders"] == []

    @pytest.mark.asyncio
    async def test_propagate_mode_returns_502(self, test_client, fake_notes, monkeypatch):
        monkeypatch.setattr(settings, "on_folder_fetch_error", "propagate")
        fake_notes.fail("GET", "folders", status=500)

        response = await test_client.get("/notes", headers=USER)

        assert response.status_code == 502
        assert response.json()["error"] == "upstream_error"

    @pytest.mark.asyncio
    async def test_request_id_header_echoed(self, test_client):
        response = await test_client.get("/notes", headers={**USER, "X-Request-ID": "req-42"})
        assert response.headers["X-Request-ID"] == "req-42"


class TestNoteWrites:

    @pytest.mark.asyncio
    async def test_create_redirects_to_notes(self, test_client, fake_notes):
        response = await test_client.post(
            "/notes",
            json={"title": "New", "content": "Body", "folder_id": 10},
            headers=USER,
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/notes"
        assert len(fake_notes.calls("POST", "notes")) == 1
        assert len(fake_notes.calls("GET", "folders")) == 1

    @pytest.mark.asyncio
    async def test_create_failure_goes_back_with_flash(self, test_client, fake_notes):
        fake_notes.fail("POST", "notes", status=500)

        response = await test_client.post(
            "/notes",
            json={"title": "New", "content": "Body", "folder_id": 10},
            headers={**USER, "Referer": "/notes/create"},
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/notes/create"
        assert fake_notes.calls("GET", "folders") == []

        page = await test_client.get("/notes", headers=USER)
        assert page.json()["flash"]["error"] == "Failed to create note"

        # consumed once
        again = await test_client.get("/notes", headers=USER)
        assert again.json()["flash"]["error"] is None

    @pytest.mark.asyncio
    async def test_update_redirects_to_notes(self, test_client, fake_notes):
        response = await test_client.put(
            "/notes/1", json={"title": "Renamed", "content": "x", "folder_id": 11}
        )

        assert response.status_code == 303
        assert fake_notes.notes["1"]["title"] == "Renamed"
        assert len(fake_notes.calls("GET", "folders")) == 1

    @pytest.mark.asyncio
    async def test_update_failure_flashes_update_message(self, test_client, fake_notes):
        fake_notes.fail("PUT", "note", status=500)

        response = await test_client.put("/notes/1", json={"title": "Renamed"})

        assert response.status_code == 303
        assert response.headers["location"] == "/notes"
        page = await test_client.get("/notes", headers=USER)
        assert page.json()["flash"]["error"] == "Failed to update note"

    @pytest.mark.asyncio
    async def test_delete_refreshes_folders_even_when_refresh_fails(self, test_client, fake_notes):
        fake_notes.fail("GET", "folders", status=503)

        response = await test_client.delete("/notes/1")

        assert response.status_code == 303
        assert response.headers["location"] == "/notes"
        assert len(fake_notes.calls("GET", "folders")) == 1

    @pytest.mark.asyncio
    async def test_delete_failure(self, test_client, fake_notes):
        fake_notes.fail("DELETE", "note", status=500)

        await test_client.delete("/notes/1")

        page = await test_client.get("/notes", headers=USER)
        assert page.json()["flash"]["error"] == "Failed to delete note"


class TestUpload:

    @pytest.mark.asyncio
    async def test_json_caller_gets_note_and_file(self, test_client, storage, fake_notes):
        content = b"%PDF-1.4\n" + b"z" * (10_000 - 9)

        response = await test_client.post(
            "/notes/1/files",
            files={"file": ("scan.pdf", content, "application/pdf")},
            headers=JSON_CALLER,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "File uploaded successfully"
        assert body["file"]["size"] == 10_000
        assert body["file"]["type"] == "application/pdf"

        key = storage.puts[0][0]
        filename = key.split("/", 1)[1]
        assert key.startswith("notes/note-1-")
        assert filename in body["file"]["url"]
        assert body["note"]["attachments"][0]["id"] == body["file"]["id"]

    @pytest.mark.asyncio
    async def test_xhr_caller_is_programmatic(self, test_client):
        response = await test_client.post(
            "/notes/1/files",
            files={"file": ("a.txt", b"abc", "text/plain")},
            headers={"X-Requested-With": "XMLHttpRequest"},
        )
        assert response.json()["success"] is True

    @pytest.mark.asyncio
    async def test_page_caller_redirected_with_success_flash(self, test_client):
        response = await test_client.post(
            "/notes/1/files", files={"file": ("a.txt", b"abc", "text/plain")}
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/notes"
        page = await test_client.get("/notes", headers=USER)
        assert page.json()["flash"]["success"] == "File uploaded successfully"

    @pytest.mark.asyncio
    async def test_note_id_form_field_overrides_path(self, test_client, storage, fake_notes):
        fake_notes.notes["7"] = {"id": 7, "title": "Other", "content": "", "folder_id": 10}

        response = await test_client.post(
            "/notes/1/files",
            files={"file": ("a.txt", b"abc", "text/plain")},
            data={"note_id": "7"},
            headers=JSON_CALLER,
        )

        assert response.json()["note"]["id"] == 7
        assert storage.puts[0][0].startswith("notes/note-7-")
        assert fake_notes.notes["1"]["attachments"] == []

    @pytest.mark.asyncio
    async def test_note_fetch_failure_json(self, test_client, storage, fake_notes):
        fake_notes.fail("GET", "note", status=500)

        response = await test_client.post(
            "/notes/1/files",
            files={"file": ("a.txt", b"abc", "text/plain")},
            headers=JSON_CALLER,
        )

        assert response.status_code == 502
        assert response.json() == {
            "success": False,
            "message": "Failed to upload file",
            "note": None,
            "file": None,
        }
        assert len(storage.puts) == 1

    @pytest.mark.asyncio
    async def test_note_fetch_failure_page_goes_back(self, test_client, fake_notes):
        fake_notes.fail("GET", "note", status=500)

        response = await test_client.post(
            "/notes/1/files",
            files={"file": ("a.txt", b"abc", "text/plain")},
            headers={"Referer": "/notes/1"},
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/notes/1"
        page = await test_client.get("/notes", headers=USER)
        assert page.json()["flash"]["error"] == "Failed to upload file"

    @pytest.mark.asyncio
    async def test_oversized_file_rejected_before_storage(self, test_client, storage, fake_notes):
        content = b"x" * (10 * 1024 * 1024 + 1)

        response = await test_client.post(
            "/notes/1/files",
            files={"file": ("big.bin", content, "application/octet-stream")},
            headers=JSON_CALLER,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        assert response.json()["details"]["field"] == "file"
        assert storage.puts == []
        assert fake_notes.requests == []

    @pytest.mark.asyncio
    async def test_declared_oversize_rejected_without_reading_body(
        self, test_client, storage, monkeypatch
    ):
        monkeypatch.setattr(settings, "max_file_size", 1024)
        reads = []
        real_read = UploadFile.read

        async def recording_read(self, size=-1):
            reads.append(size)
            return await real_read(self, size)

        monkeypatch.setattr(UploadFile, "read", recording_read)

        response = await test_client.post(
            "/notes/1/files",
            files={"file": ("big.bin", b"x" * 5000, "application/octet-stream")},
            headers=JSON_CALLER,
        )

        assert response.status_code == 400
        assert response.json()["details"]["reported_size"] == 5000
        assert reads == []
        assert storage.puts == []

    @pytest.mark.asyncio
    async def test_path_like_note_id_field_rejected(self, test_client, storage, fake_notes):
        response = await test_client.post(
            "/notes/1/files",
            files={"file": ("a.txt", b"abc", "text/plain")},
            data={"note_id": "1/../../folders"},
            headers=JSON_CALLER,
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "note_id"
        assert storage.puts == []
        assert fake_notes.requests == []

    @pytest.mark.asyncio
    async def test_empty_file_rejected(self, test_client, storage):
        response = await test_client.post(
            "/notes/1/files", files={"file": ("empty.txt", b"", "text/plain")}
        )

        assert response.status_code == 400
        assert storage.puts == []

    @pytest.mark.asyncio
    async def test_missing_file_rejected(self, test_client, storage):
        response = await test_client.post("/notes/1/files", data={"note_id": "1"})

        assert response.status_code == 422
        assert storage.puts == []


class TestHealthAndFiles:

    @pytest.mark.asyncio
    async def test_health_reports_reachable_upstream(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["notes_api"] == "reachable"

    @pytest.mark.asyncio
    async def test_storage_route_404_for_non_local_driver(self, test_client):
        response = await test_client.get("/storage/notes/anything.txt")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_storage_route_serves_local_file(self, test_client, tmp_path):
        from notebridge.dependencies import get_object_storage
        from notebridge.main import app
        from notebridge.services.storage_service import LocalObjectStorage

        local = LocalObjectStorage(str(tmp_path), "http://test/storage")
        await local.put("notes/note-1-1.txt", b"stored bytes", "text/plain")
        app.dependency_overrides[get_object_storage] = lambda: local

        response = await test_client.get("/storage/notes/note-1-1.txt")

        assert response.status_code == 200
        assert response.content == b"stored bytes"
