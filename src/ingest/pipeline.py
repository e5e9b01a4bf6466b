"""Video ingestion pipeline.

Sequences one upload through staging, probing, classification, fast-start
remuxing, key generation, object upload and the metadata update::

    VALIDATING -> STAGING -> PROBING -> CLASSIFYING -> REMUXING
        -> KEYGEN -> UPLOADING -> METADATA_SYNC -> DONE

Any stage may end in FAILED. Every failure is terminal for the request
and nothing is retried. Staged files are removed on every exit path.
"""
from dataclasses import dataclass
from uuid import UUID

from src.core.config import IngestionConfig
from src.core.exceptions import (
    AccessDeniedError,
    MetadataSyncError,
    TubelyError,
    UnsupportedMediaTypeError,
    VideoNotFoundError,
)
from src.core.logging import get_logger
from src.core.models import IngestionStage, ObjectReference, Orientation, VideoRecord
from src.ingest.classifier import classify
from src.ingest.keys import generate_object_key
from src.ingest.prober import MediaProber
from src.ingest.remuxer import FastStartRemuxer, processing_path
from src.ingest.staging import AsyncReadable, stage_upload
from src.ingest.toolkit import MediaToolkit
from src.ingest.uploader import StorageUploader
from src.storage.base import ObjectStorage
from src.storage.metadata import MetadataStore

logger = get_logger(__name__)


def parse_media_type(content_type: str | None) -> str:
    """``video/mp4; codecs="avc1"`` -> ``video/mp4``."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


@dataclass
class VideoUpload:
    """One incoming upload: a bounded byte stream and its declared type."""

    stream: AsyncReadable
    content_type: str | None
    filename: str | None = None


@dataclass
class IngestionResult:
    """Outcome of a successful ingestion."""

    record: VideoRecord
    reference: ObjectReference
    orientation: Orientation
    width: int
    height: int


class VideoIngestionService:
    """Runs the ingestion pipeline for one upload at a time per call.

    The service holds no per-request state, so a single instance is
    shared by all concurrent requests.

    Example:
        service = VideoIngestionService(config, toolkit, storage, store)
        record = await service.authorize(video_id, user_id)
        result = await service.ingest(record, user_id, upload)
    """

    def __init__(
        self,
        config: IngestionConfig,
        toolkit: MediaToolkit,
        storage: ObjectStorage,
        metadata_store: MetadataStore,
    ) -> None:
        self.config = config
        self.prober = MediaProber(toolkit, config.ffprobe_bin)
        self.remuxer = FastStartRemuxer(toolkit, config.ffmpeg_bin)
        self.uploader = StorageUploader(storage)
        self.metadata_store = metadata_store

    async def authorize(self, video_id: UUID, user_id: UUID) -> VideoRecord:
        """Load the target record and check the caller owns it."""
        record = await self.metadata_store.get_video(video_id)
        if record is None:
            raise VideoNotFoundError(
                "Video not found",
                details={"video_id": str(video_id)},
            )
        self.check_owner(record, user_id)
        return record

    @staticmethod
    def check_owner(record: VideoRecord, user_id: UUID) -> None:
        if record.user_id != user_id:
            raise AccessDeniedError(
                "Access denied",
                details={"video_id": str(record.id)},
            )

    def check_media_type(self, content_type: str | None) -> str:
        media_type = parse_media_type(content_type)
        if media_type != self.config.allowed_media_type:
            raise UnsupportedMediaTypeError(
                f"File must be of type {self.config.allowed_media_type}",
                details={"content_type": content_type, "allowed": self.config.allowed_media_type},
            )
        return media_type

    async def ingest(
        self,
        record: VideoRecord,
        user_id: UUID,
        upload: VideoUpload,
    ) -> IngestionResult:
        """Ingest an upload into storage and attach it to its record.

        ``record`` is the target as loaded by :meth:`authorize`; ownership
        is checked again here so the service is safe to call directly.

        Raises:
            AccessDeniedError: Caller does not own the record
            UnsupportedMediaTypeError: Declared type is not accepted
            PayloadTooLargeError: Stream exceeds the upload ceiling
            ProbeError: Media could not be probed
            RemuxError: Fast-start remux failed
            UploadError: Object storage put failed
            MetadataSyncError: Record update failed after the object was stored
        """
        # Validation happens before any file I/O.
        stage = IngestionStage.VALIDATING
        self.check_owner(record, user_id)
        media_type = self.check_media_type(upload.content_type)

        log = logger.bind(video_id=str(record.id), user_id=str(user_id))
        log.info("Uploading video", filename=upload.filename)

        reference: ObjectReference | None = None
        try:
            stage = IngestionStage.STAGING
            async with stage_upload(upload.stream, self.config) as staged:
                log.debug("Stage complete", stage=stage.value, size_bytes=staged.size)

                stage = IngestionStage.PROBING
                geometry = await self.prober.probe(staged.path)

                stage = IngestionStage.CLASSIFYING
                orientation = classify(geometry.width, geometry.height)

                stage = IngestionStage.REMUXING
                # Registered up front so a partial output is removed too
                staged.track(processing_path(staged.path))
                processed_path = await self.remuxer.remux(staged.path)

                stage = IngestionStage.KEYGEN
                reference = ObjectReference(
                    bucket=self.config.bucket,
                    key=generate_object_key(orientation, media_type),
                )

                stage = IngestionStage.UPLOADING
                await self.uploader.upload(processed_path, reference, media_type)

            stage = IngestionStage.METADATA_SYNC
            updated = await self.metadata_store.update_video(
                record.model_copy(update={"video_url": reference.encode()})
            )
        except MetadataSyncError:
            # The object stays in storage; nothing reconciles it.
            log.error(
                "Video stored but metadata update failed; object orphaned",
                stage=stage.value,
                bucket=reference.bucket if reference else None,
                key=reference.key if reference else None,
            )
            raise
        except TubelyError as e:
            log.error(
                "Ingestion failed",
                stage=stage.value,
                state=IngestionStage.FAILED.value,
                error=e.message,
                details=e.details,
            )
            raise
        except Exception:
            log.exception("Ingestion failed unexpectedly", stage=stage.value, state=IngestionStage.FAILED.value)
            raise

        log.info(
            "Ingestion complete",
            stage=IngestionStage.DONE.value,
            orientation=orientation.value,
            width=geometry.width,
            height=geometry.height,
            key=reference.key,
        )
        return IngestionResult(
            record=updated,
            reference=reference,
            orientation=orientation,
            width=geometry.width,
            height=geometry.height,
        )
