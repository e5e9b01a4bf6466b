"""Signed URL issuance for stored videos."""
from datetime import datetime, timedelta, timezone

from src.core.exceptions import SignError
from src.core.logging import get_logger
from src.core.models import ObjectReference, SignedURL, VideoRecord
from src.storage.base import ObjectStorage

logger = get_logger(__name__)

DEFAULT_TTL = timedelta(minutes=15)


class SignedUrlIssuer:
    """Turns stored object references into time-limited read URLs.

    URLs are computed on every call; expiry is relative to the moment
    of signing, so nothing here is cached.
    """

    def __init__(self, storage: ObjectStorage, default_ttl: timedelta = DEFAULT_TTL) -> None:
        self.storage = storage
        self.default_ttl = default_ttl

    async def sign(
        self,
        reference: ObjectReference,
        ttl: timedelta | None = None,
    ) -> SignedURL:
        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= timedelta(0):
            raise SignError("Signed URL lifetime must be positive", details={"ttl": str(ttl)})

        issued_at = datetime.now(timezone.utc)
        url = await self.storage.presign_get(reference.bucket, reference.key, ttl)
        return SignedURL(url=url, expires_at=issued_at + ttl)

    async def sign_stored(self, value: str, ttl: timedelta | None = None) -> SignedURL:
        """Sign a ``bucket,key`` value as persisted on a record."""
        return await self.sign(ObjectReference.parse(value), ttl)

    async def sign_video(self, record: VideoRecord, ttl: timedelta | None = None) -> VideoRecord:
        """Return a copy of ``record`` whose ``video_url`` is a signed URL."""
        if record.video_url is None:
            return record

        signed = await self.sign_stored(record.video_url, ttl)
        logger.debug("Signed video URL", video_id=str(record.id), expires_at=signed.expires_at.isoformat())
        return record.model_copy(update={"video_url": signed.url})
