"""End-to-end tests for the video endpoints."""
from pathlib import Path
from uuid import uuid4

from fastapi.testclient import TestClient

from src.api.auth import issue_token
from src.api.main import create_app
from src.core.config import Settings
from src.ingest.toolkit import ToolResult

MP4_BYTES = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * (2 * 1024 * 1024)


def create_video(client: TestClient, headers: dict[str, str], title: str = "clip") -> dict:
    response = client.post("/api/videos", json={"title": title}, headers=headers)
    assert response.status_code == 201
    return response.json()


def upload(client: TestClient, video_id: str, headers: dict[str, str], content_type: str = "video/mp4"):
    return client.post(
        f"/api/videos/{video_id}/upload",
        files={"video": ("clip.mp4", MP4_BYTES, content_type)},
        headers=headers,
    )


class TestVideoUpload:
    """Upload scenarios through the HTTP API."""

    def test_landscape_upload(
        self, client: TestClient, auth_headers, fake_storage, staging_dir: Path
    ) -> None:
        video = create_video(client, auth_headers)

        response = upload(client, video["id"], auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == video["id"]
        assert body["video_url"].startswith("https://storage.test/bucket1/landscape/")

        ((bucket, key),) = fake_storage.objects.keys()
        assert bucket == "bucket1"
        assert key.startswith("landscape/")
        assert fake_storage.objects[(bucket, key)]["content_type"] == "video/mp4"

        stored = client.app.state.metadata_store
        record = client.portal.call(stored.get_video, body["id"])
        assert record.video_url == f"bucket1,{key}"
        assert list(staging_dir.iterdir()) == []

    def test_unsupported_media_type(
        self, client: TestClient, auth_headers, fake_toolkit, fake_storage, staging_dir: Path
    ) -> None:
        video = create_video(client, auth_headers)

        response = upload(client, video["id"], auth_headers, content_type="video/avi")

        assert response.status_code == 400
        assert response.json()["error"] == "UnsupportedMediaTypeError"
        assert fake_toolkit.calls == []
        assert fake_storage.objects == {}
        assert list(staging_dir.iterdir()) == []

    def test_empty_probe_output(
        self, client: TestClient, auth_headers, fake_toolkit, staging_dir: Path
    ) -> None:
        fake_toolkit.probe_result = ToolResult(0, b'{"streams": []}', b"")
        video = create_video(client, auth_headers)

        response = upload(client, video["id"], auth_headers)

        assert response.status_code == 500
        assert response.json()["error"] == "ProbeError"
        assert list(staging_dir.iterdir()) == []

    def test_storage_put_failure(
        self, client: TestClient, auth_headers, fake_toolkit, fake_storage, staging_dir: Path
    ) -> None:
        fake_storage.fail_puts = True
        video = create_video(client, auth_headers)

        response = upload(client, video["id"], auth_headers)

        assert response.status_code == 500
        assert response.json()["error"] == "UploadError"
        assert [call[0] for call in fake_toolkit.calls] == ["ffprobe", "ffmpeg"]
        assert list(staging_dir.iterdir()) == []

        unchanged = client.get(f"/api/videos/{video['id']}", headers=auth_headers).json()
        assert unchanged["video_url"] is None

    def test_remux_failure(self, client: TestClient, auth_headers, fake_toolkit, staging_dir: Path) -> None:
        fake_toolkit.remux_returncode = 1
        video = create_video(client, auth_headers)

        response = upload(client, video["id"], auth_headers)

        assert response.status_code == 500
        assert response.json()["error"] == "RemuxError"
        assert list(staging_dir.iterdir()) == []

    def test_missing_token(self, client: TestClient, auth_headers) -> None:
        video = create_video(client, auth_headers)

        response = upload(client, video["id"], {})

        assert response.status_code == 401

    def test_other_users_video(self, client: TestClient, auth_headers, fake_toolkit) -> None:
        video = create_video(client, auth_headers)
        intruder = {"Authorization": f"Bearer {issue_token(uuid4(), 'test-secret')}"}

        response = upload(client, video["id"], intruder)

        assert response.status_code == 401
        assert response.json()["error"] == "AccessDeniedError"
        assert fake_toolkit.calls == []

    def test_invalid_video_id(self, client: TestClient, auth_headers) -> None:
        response = upload(client, "not-a-uuid", auth_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid ID"

    def test_unknown_video(self, client: TestClient, auth_headers) -> None:
        response = upload(client, str(uuid4()), auth_headers)

        assert response.status_code == 404

    def test_missing_form_field(self, client: TestClient, auth_headers) -> None:
        video = create_video(client, auth_headers)

        response = client.post(
            f"/api/videos/{video['id']}/upload",
            files={"file": ("clip.mp4", b"data", "video/mp4")},
            headers=auth_headers,
        )

        assert response.status_code == 400

    def test_body_over_ceiling(self, test_settings: Settings, fake_toolkit, fake_storage, auth_headers) -> None:
        settings = test_settings.model_copy(update={"max_video_size_bytes": 1024})
        app = create_app(settings, toolkit=fake_toolkit, object_storage=fake_storage)

        with TestClient(app) as client:
            video = create_video(client, auth_headers)
            response = upload(client, video["id"], auth_headers)

        assert response.status_code == 413
        assert fake_toolkit.calls == []
        assert list(settings.staging_path.iterdir()) == []


class TestVideoRecords:
    """Record endpoints and signed URLs on read paths."""

    def test_get_signs_url(self, client: TestClient, auth_headers) -> None:
        video = create_video(client, auth_headers)
        upload(client, video["id"], auth_headers)

        first = client.get(f"/api/videos/{video['id']}", headers=auth_headers).json()

        assert first["video_url"].startswith("https://storage.test/bucket1/landscape/")
        assert first["video_url"].endswith("?expires=900")

    def test_list_own_videos(self, client: TestClient, auth_headers) -> None:
        create_video(client, auth_headers, "one")
        create_video(client, auth_headers, "two")
        other = {"Authorization": f"Bearer {issue_token(uuid4(), 'test-secret')}"}
        create_video(client, other, "three")

        response = client.get("/api/videos", headers=auth_headers)

        assert response.status_code == 200
        assert {video["title"] for video in response.json()} == {"one", "two"}

    def test_delete_removes_object(self, client: TestClient, auth_headers, fake_storage) -> None:
        video = create_video(client, auth_headers)
        upload(client, video["id"], auth_headers)
        assert len(fake_storage.objects) == 1

        response = client.delete(f"/api/videos/{video['id']}", headers=auth_headers)

        assert response.status_code == 204
        assert fake_storage.objects == {}
        assert client.get(f"/api/videos/{video['id']}", headers=auth_headers).status_code == 404

    def test_malformed_stored_reference(self, client: TestClient, auth_headers) -> None:
        video = create_video(client, auth_headers)
        store = client.app.state.metadata_store
        record = client.portal.call(store.get_video, video["id"])
        client.portal.call(store.update_video, record.model_copy(update={"video_url": "no-separator"}))

        response = client.get(f"/api/videos/{video['id']}", headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["error"] == "SignError"

    def test_delete_malformed_reference_keeps_record(self, client: TestClient, auth_headers) -> None:
        video = create_video(client, auth_headers)
        store = client.app.state.metadata_store
        record = client.portal.call(store.get_video, video["id"])
        client.portal.call(store.update_video, record.model_copy(update={"video_url": "no-separator"}))

        response = client.delete(f"/api/videos/{video['id']}", headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["error"] == "SignError"
        assert client.portal.call(store.get_video, video["id"]) is not None


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        assert client.get("/health").json()["status"] == "healthy"

    def test_ready(self, client: TestClient) -> None:
        body = client.get("/ready").json()
        assert body["ready"] is True
        assert body["checks"] == {"app": True, "database": True, "staging": True}
