"""Abstract object storage interface."""
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import BinaryIO


class ObjectStorage(ABC):
    """Bucket/key addressed object storage.

    Puts are expected to be atomic per key: a failed put leaves no
    partially written object visible to readers.
    """

    @abstractmethod
    async def put(
        self,
        bucket: str,
        key: str,
        stream: BinaryIO,
        content_type: str,
    ) -> None:
        """Store the whole stream as one object.

        Args:
            bucket: Bucket name
            key: Object key
            stream: Readable binary stream positioned at the start
            content_type: MIME type stored as object metadata

        Raises:
            UploadError: On transport or service failure
        """
        ...

    @abstractmethod
    async def presign_get(self, bucket: str, key: str, ttl: timedelta) -> str:
        """Create a read-only URL valid for ``ttl``.

        Raises:
            SignError: If the URL cannot be produced
        """
        ...

    @abstractmethod
    async def delete(self, bucket: str, key: str) -> bool:
        """Delete an object.

        Returns:
            True if deleted
        """
        ...
