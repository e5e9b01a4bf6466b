"""Pytest configuration and fixtures."""
import io
import json
from collections.abc import AsyncGenerator, Callable, Generator
from datetime import timedelta
from pathlib import Path
from typing import Any, BinaryIO
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from src.api.auth import issue_token
from src.api.main import create_app
from src.core.config import IngestionConfig, Settings
from src.core.exceptions import ToolInvocationError, UploadError
from src.ingest.pipeline import VideoIngestionService
from src.ingest.toolkit import MediaToolkit, ToolResult
from src.storage.base import ObjectStorage
from src.storage.metadata import MetadataStore

JWT_SECRET = "test-secret"
BUCKET = "bucket1"


def probe_payload(width: int = 1920, height: int = 1080) -> bytes:
    """ffprobe -show_streams JSON for one video and one audio stream."""
    return json.dumps(
        {
            "streams": [
                {"index": 0, "codec_type": "video", "codec_name": "h264", "width": width, "height": height},
                {"index": 1, "codec_type": "audio", "codec_name": "aac"},
            ]
        }
    ).encode()


class FakeToolkit(MediaToolkit):
    """In-memory stand-in for ffprobe/ffmpeg.

    The fake "remux" prefixes the input bytes so tests can tell the
    processed file from the original.
    """

    REMUX_MARKER = b"faststart:"

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.probe_result = ToolResult(0, probe_payload(), b"")
        self.remux_returncode = 0
        self.unavailable: set[str] = set()

    def set_geometry(self, width: int, height: int) -> None:
        self.probe_result = ToolResult(0, probe_payload(width, height), b"")

    async def run(self, args: list[str]) -> ToolResult:
        self.calls.append(args)
        tool = args[0]
        if tool in self.unavailable:
            raise ToolInvocationError(f"Could not start {tool}", details={"tool": tool})

        if tool == "ffprobe":
            return self.probe_result

        if self.remux_returncode != 0:
            # ffmpeg leaves a truncated output behind when it fails
            Path(args[-1]).write_bytes(b"partial")
            return ToolResult(self.remux_returncode, b"", b"moov atom not found")

        source = Path(args[args.index("-i") + 1])
        Path(args[-1]).write_bytes(self.REMUX_MARKER + source.read_bytes())
        return ToolResult(0, b"", b"")


class FakeObjectStorage(ObjectStorage):
    """Dict-backed object storage with failure injection."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], dict[str, Any]] = {}
        self.fail_puts = False

    async def put(self, bucket: str, key: str, stream: BinaryIO, content_type: str) -> None:
        if self.fail_puts:
            raise UploadError("Unable to put object in storage", details={"key": key})
        self.objects[(bucket, key)] = {"body": stream.read(), "content_type": content_type}

    async def presign_get(self, bucket: str, key: str, ttl: timedelta) -> str:
        return f"https://storage.test/{bucket}/{key}?expires={int(ttl.total_seconds())}"

    async def delete(self, bucket: str, key: str) -> bool:
        return self.objects.pop((bucket, key), None) is not None


class BytesUpload:
    """Async readable over in-memory bytes, like a multipart UploadFile."""

    def __init__(self, data: bytes, fail_after: int | None = None) -> None:
        self._buffer = io.BytesIO(data)
        self._fail_after = fail_after
        self._read = 0

    async def read(self, size: int = -1) -> bytes:
        if self._fail_after is not None and self._read >= self._fail_after:
            raise ConnectionResetError("client disconnected")
        chunk = self._buffer.read(size)
        self._read += len(chunk)
        return chunk


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Test settings with every path under tmp_path."""
    return Settings(
        environment="development",
        debug=True,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'tubely.db'}",
        staging_path=tmp_path / "staging",
        assets_path=tmp_path / "assets",
        jwt_secret=JWT_SECRET,
        s3_bucket=BUCKET,
    )


@pytest.fixture
def staging_dir(test_settings: Settings) -> Path:
    return test_settings.staging_path


@pytest.fixture
def ingestion_config(test_settings: Settings) -> IngestionConfig:
    return test_settings.ingestion_config()


@pytest.fixture
def fake_toolkit() -> FakeToolkit:
    return FakeToolkit()


@pytest.fixture
def fake_storage() -> FakeObjectStorage:
    return FakeObjectStorage()


@pytest.fixture
def make_upload() -> Callable[..., BytesUpload]:
    return BytesUpload


@pytest.fixture
async def metadata_store(test_settings: Settings) -> AsyncGenerator[MetadataStore, None]:
    store = MetadataStore(test_settings.database_url)
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def ingestion_service(
    ingestion_config: IngestionConfig,
    fake_toolkit: FakeToolkit,
    fake_storage: FakeObjectStorage,
    metadata_store: MetadataStore,
) -> VideoIngestionService:
    return VideoIngestionService(ingestion_config, fake_toolkit, fake_storage, metadata_store)


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def auth_headers(user_id: UUID) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_token(user_id, JWT_SECRET)}"}


@pytest.fixture
def client(
    test_settings: Settings,
    fake_toolkit: FakeToolkit,
    fake_storage: FakeObjectStorage,
) -> Generator[TestClient, None, None]:
    """Test client wired to the fake toolkit and storage."""
    app = create_app(test_settings, toolkit=fake_toolkit, object_storage=fake_storage)
    with TestClient(app) as c:
        yield c
