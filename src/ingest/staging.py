"""Request-scoped temporary files for uploads in flight."""
import os
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Protocol

import aiofiles

from src.core.config import IngestionConfig
from src.core.exceptions import PayloadTooLargeError
from src.core.logging import get_logger

logger = get_logger(__name__)

STAGED_PREFIX = "tubely-upload-"


class AsyncReadable(Protocol):
    async def read(self, size: int = -1) -> bytes: ...


def discard(path: Path) -> bool:
    """Remove a file, logging instead of raising on failure."""
    try:
        path.unlink()
        logger.debug("Staged file removed", path=str(path))
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.error("Failed to remove staged file", path=str(path), error=str(e))
        return False


class StagedFile:
    """A temporary file owned by exactly one ingestion.

    Derived files (the remux output) are registered with :meth:`track`
    so they are removed together with the original.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.size = 0
        self._derived: list[Path] = []

    def track(self, path: Path) -> Path:
        self._derived.append(path)
        return path

    @property
    def paths(self) -> list[Path]:
        return [self.path, *self._derived]

    def release(self) -> None:
        for path in reversed(self.paths):
            discard(path)


def create_staged_file(staging_dir: Path, suffix: str = ".mp4") -> StagedFile:
    staging_dir.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(prefix=STAGED_PREFIX, suffix=suffix, dir=staging_dir)
    os.close(fd)
    return StagedFile(Path(name))


async def write_stream(
    source: AsyncReadable,
    staged: StagedFile,
    max_bytes: int,
    chunk_size: int = 1024 * 1024,
) -> int:
    """Copy ``source`` into the staged file, enforcing ``max_bytes``.

    Raises:
        PayloadTooLargeError: As soon as the ceiling is crossed
    """
    written = 0
    async with aiofiles.open(staged.path, "wb") as out_file:
        while chunk := await source.read(chunk_size):
            written += len(chunk)
            if written > max_bytes:
                raise PayloadTooLargeError(
                    "Upload exceeds size limit",
                    details={"max_bytes": max_bytes},
                )
            await out_file.write(chunk)
    staged.size = written
    return written


@asynccontextmanager
async def stage_upload(
    source: AsyncReadable, config: IngestionConfig
) -> AsyncIterator[StagedFile]:
    """Stage an upload on disk for the duration of the block.

    Every file registered on the yielded :class:`StagedFile` is removed
    on exit, whether the block returns, raises or is cancelled.

    Example:
        async with stage_upload(upload, config) as staged:
            geometry = await prober.probe(staged.path)
    """
    staged = create_staged_file(config.staging_dir)
    try:
        await write_stream(source, staged, config.max_upload_bytes, config.chunk_size)
        logger.debug("Upload staged", path=str(staged.path), size_bytes=staged.size)
        yield staged
    finally:
        staged.release()
