"""Streams processed videos into object storage."""
from pathlib import Path

from src.core.exceptions import UploadError
from src.core.logging import get_logger
from src.core.models import ObjectReference
from src.storage.base import ObjectStorage

logger = get_logger(__name__)


class StorageUploader:
    """Uploads one file per call as a single object put."""

    def __init__(self, storage: ObjectStorage) -> None:
        self.storage = storage

    async def upload(
        self,
        path: Path,
        reference: ObjectReference,
        content_type: str,
    ) -> ObjectReference:
        """Upload ``path`` under ``reference``.

        Raises:
            UploadError: On any I/O or storage failure
        """
        try:
            with path.open("rb") as stream:
                stream.seek(0)
                await self.storage.put(reference.bucket, reference.key, stream, content_type)
        except UploadError:
            raise
        except Exception as e:
            logger.error("Failed to upload video", key=reference.key, error=str(e))
            raise UploadError(
                f"Failed to upload {path.name}: {e}",
                details={"key": reference.key},
            ) from e

        logger.info(
            "Video uploaded",
            bucket=reference.bucket,
            key=reference.key,
            size_bytes=path.stat().st_size,
        )
        return reference
