"""S3-compatible object storage backend."""
import asyncio
from datetime import timedelta
from typing import Any, BinaryIO

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from src.core.config import Settings, settings
from src.core.exceptions import SignError, UploadError
from src.core.logging import get_logger
from src.storage.base import ObjectStorage

logger = get_logger(__name__)


def create_s3_client(config: Settings | None = None) -> Any:
    """Build a boto3 S3 client from settings.

    Credentials fall back to the standard AWS chain when not configured.
    """
    config = config or settings
    return boto3.client(
        "s3",
        region_name=config.s3_region,
        endpoint_url=config.s3_endpoint_url,
        aws_access_key_id=config.s3_access_key_id,
        aws_secret_access_key=config.s3_secret_access_key,
        config=Config(signature_version="s3v4"),
    )


class S3ObjectStorage(ObjectStorage):
    """Object storage on S3 (or MinIO via ``s3_endpoint_url``).

    boto3 is synchronous, so every call runs in a worker thread.

    Example:
        storage = S3ObjectStorage()
        await storage.put("videos", "landscape/abc.mp4", fh, "video/mp4")
        url = await storage.presign_get("videos", "landscape/abc.mp4", timedelta(minutes=15))
    """

    def __init__(self, client: Any | None = None) -> None:
        self.client = client or create_s3_client()

    async def put(
        self,
        bucket: str,
        key: str,
        stream: BinaryIO,
        content_type: str,
    ) -> None:
        try:
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=bucket,
                Key=key,
                Body=stream,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 put failed", bucket=bucket, key=key, error=str(e))
            raise UploadError(
                f"Unable to put object in storage: {e}",
                details={"bucket": bucket, "key": key},
            ) from e

        logger.debug("Object stored", bucket=bucket, key=key, content_type=content_type)

    async def presign_get(self, bucket: str, key: str, ttl: timedelta) -> str:
        try:
            return await asyncio.to_thread(
                self.client.generate_presigned_url,
                "get_object",
                Params={"Bucket": bucket, "Key": key},
                ExpiresIn=int(ttl.total_seconds()),
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Failed to presign URL", bucket=bucket, key=key, error=str(e))
            raise SignError(
                f"Unable to presign object: {e}",
                details={"bucket": bucket, "key": key},
            ) from e

    async def delete(self, bucket: str, key: str) -> bool:
        try:
            await asyncio.to_thread(self.client.delete_object, Bucket=bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 delete failed", bucket=bucket, key=key, error=str(e))
            return False

        logger.debug("Object deleted", bucket=bucket, key=key)
        return True
