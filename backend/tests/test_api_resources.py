"""
Memos Backend - Resource API Tests
===================================

What:  End-to-end tests for uploads, downloads, listing, deletion and
       attaching resources to memos, against the local object store.

Test Strategy:
    ✅ Upload records size, MIME type and the store URI
    ✅ /o/r streams the stored bytes; wrong names are 404
    ✅ Size limit → 413, missing file → 400, no token → 401
    ✅ Delete removes the row and the stored object
    ✅ Memos may only attach their creator's resources
"""

from pathlib import Path

import pytest
import pytest_asyncio


async def upload(client, headers, name="note.txt", data=b"hello", content_type="text/plain"):
    return await client.post(
        "/api/resource/blob",
        files={"file": (name, data, content_type)},
        headers=headers,
    )


@pytest_asyncio.fixture
async def uploaded(test_client, host_session):
    response = await upload(test_client, host_session["headers"])
    assert response.status_code == 200
    return response.json()


class TestUpload:

    @pytest.mark.asyncio
    async def test_upload_records_metadata(self, uploaded, host_session):
        assert uploaded["filename"] == "note.txt"
        assert uploaded["size"] == 5
        assert uploaded["mimeType"] == "text/plain"
        assert uploaded["creatorId"] == host_session["user"]["id"]
        assert uploaded["externalUri"] == f"local://{uploaded['uid']}/note.txt"

    @pytest.mark.asyncio
    async def test_object_written_under_uid(self, uploaded, test_settings):
        stored = Path(test_settings.storage_root) / uploaded["uid"] / "note.txt"
        assert stored.read_bytes() == b"hello"

    @pytest.mark.asyncio
    async def test_path_components_stripped(self, test_client, host_session):
        response = await upload(test_client, host_session["headers"], name="../../etc/passwd")
        assert response.status_code == 200
        assert response.json()["filename"] == "passwd"

    @pytest.mark.asyncio
    async def test_too_large(self, test_client, host_session, test_settings):
        response = await upload(
            test_client, host_session["headers"], data=b"x" * (test_settings.max_upload_size + 1)
        )
        assert response.status_code == 413
        body = response.json()
        assert body["error"] == "payload_too_large"
        assert body["details"]["max_size"] == test_settings.max_upload_size

    @pytest.mark.asyncio
    async def test_no_file(self, test_client, host_session):
        response = await test_client.post(
            "/api/resource/blob", data={"note": "nothing"}, headers=host_session["headers"]
        )
        assert response.status_code == 400
        assert response.json()["message"] == "No file provided"

    @pytest.mark.asyncio
    async def test_requires_authentication(self, test_client):
        response = await upload(test_client, {})
        assert response.status_code == 401


class TestDownload:

    @pytest.mark.asyncio
    async def test_streams_bytes(self, test_client, uploaded):
        response = await test_client.get(f"/o/r/{uploaded['uid']}/note.txt")
        assert response.status_code == 200
        assert response.content == b"hello"
        assert response.headers["content-type"].startswith("text/plain")

    @pytest.mark.asyncio
    async def test_wrong_filename(self, test_client, uploaded):
        response = await test_client.get(f"/o/r/{uploaded['uid']}/other.txt")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unknown_uid(self, test_client):
        response = await test_client.get("/o/r/does-not-exist/note.txt")
        assert response.status_code == 404


class TestListAndDelete:

    @pytest.mark.asyncio
    async def test_list_own_resources(self, test_client, host_session, uploaded, make_user):
        reader = await make_user("reader")

        mine = await test_client.get("/api/resource", headers=host_session["headers"])
        assert [r["id"] for r in mine.json()] == [uploaded["id"]]

        theirs = await test_client.get("/api/resource", headers=reader["headers"])
        assert theirs.json() == []

    @pytest.mark.asyncio
    async def test_delete_removes_object(self, test_client, host_session, uploaded, test_settings):
        response = await test_client.delete(
            f"/api/resource/{uploaded['id']}", headers=host_session["headers"]
        )
        assert response.status_code == 200

        download = await test_client.get(f"/o/r/{uploaded['uid']}/note.txt")
        assert download.status_code == 404
        assert not (Path(test_settings.storage_root) / uploaded["uid"]).exists()

    @pytest.mark.asyncio
    async def test_delete_missing(self, test_client, host_session):
        response = await test_client.delete("/api/resource/999", headers=host_session["headers"])
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_other_users_resource(self, test_client, uploaded, make_user):
        reader = await make_user("reader")
        response = await test_client.delete(
            f"/api/resource/{uploaded['id']}", headers=reader["headers"]
        )
        assert response.status_code == 404


class TestAttachToMemo:

    @pytest.mark.asyncio
    async def test_attach_on_create(self, test_client, host_session, uploaded):
        response = await test_client.post(
            "/api/memo",
            json={"content": "see attachment", "resourceIdList": [uploaded["id"]]},
            headers=host_session["headers"],
        )
        assert response.status_code == 200
        assert response.json()["resourceIdList"] == [uploaded["id"]]

    @pytest.mark.asyncio
    async def test_cannot_attach_foreign_resource(self, test_client, uploaded, make_user):
        reader = await make_user("reader")
        response = await test_client.post(
            "/api/memo",
            json={"content": "borrowed", "resourceIdList": [uploaded["id"]]},
            headers=reader["headers"],
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_deleting_resource_detaches_it(self, test_client, host_session, uploaded):
        headers = host_session["headers"]
        memo = (await test_client.post(
            "/api/memo",
            json={"content": "with file", "resourceIdList": [uploaded["id"]]},
            headers=headers,
        )).json()

        await test_client.delete(f"/api/resource/{uploaded['id']}", headers=headers)

        fetched = await test_client.get(f"/api/memo/{memo['id']}", headers=headers)
        assert fetched.json()["resourceIdList"] == []
