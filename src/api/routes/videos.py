"""Video record and upload endpoints."""
from fastapi import APIRouter, Request
from starlette.datastructures import UploadFile

from src.api.deps import (
    CurrentUserDep,
    IngestionServiceDep,
    MetadataStoreDep,
    ObjectStorageDep,
    UrlIssuerDep,
    VideoIdDep,
)
from src.core.exceptions import ValidationError
from src.core.logging import get_logger
from src.core.models import ObjectReference, VideoCreateRequest, VideoRecord
from src.ingest.pipeline import VideoUpload

logger = get_logger(__name__)

router = APIRouter()

VIDEO_FIELD = "video"


@router.post("", response_model=VideoRecord, status_code=201)
async def create_video(
    body: VideoCreateRequest,
    user_id: CurrentUserDep,
    metadata_store: MetadataStoreDep,
) -> VideoRecord:
    """Create a draft video record owned by the caller."""
    record = await metadata_store.create_video(user_id, body.title, body.description)
    logger.info("Video created", video_id=str(record.id))
    return record


@router.get("", response_model=list[VideoRecord])
async def list_videos(
    user_id: CurrentUserDep,
    metadata_store: MetadataStoreDep,
    url_issuer: UrlIssuerDep,
) -> list[VideoRecord]:
    """List the caller's videos with freshly signed URLs."""
    records = await metadata_store.list_videos(user_id)
    return [await url_issuer.sign_video(record) for record in records]


@router.get("/{video_id}", response_model=VideoRecord)
async def get_video(
    video_id: VideoIdDep,
    user_id: CurrentUserDep,
    service: IngestionServiceDep,
    url_issuer: UrlIssuerDep,
) -> VideoRecord:
    """Get one video with a freshly signed URL."""
    record = await service.authorize(video_id, user_id)
    return await url_issuer.sign_video(record)


@router.delete("/{video_id}", status_code=204)
async def delete_video(
    video_id: VideoIdDep,
    user_id: CurrentUserDep,
    service: IngestionServiceDep,
    metadata_store: MetadataStoreDep,
    object_storage: ObjectStorageDep,
) -> None:
    """Delete a video record and its stored object."""
    record = await service.authorize(video_id, user_id)
    reference = ObjectReference.parse(record.video_url) if record.video_url else None
    await metadata_store.delete_video(video_id)

    if reference is not None:
        deleted = await object_storage.delete(reference.bucket, reference.key)
        if not deleted:
            logger.warning("Stored video left behind", bucket=reference.bucket, key=reference.key)

    logger.info("Video deleted", video_id=str(video_id))


@router.post("/{video_id}/upload", response_model=VideoRecord)
async def upload_video(
    request: Request,
    video_id: VideoIdDep,
    user_id: CurrentUserDep,
    service: IngestionServiceDep,
    url_issuer: UrlIssuerDep,
) -> VideoRecord:
    """Upload the video file for a record.

    The file is probed, remuxed for fast start and stored under an
    orientation-prefixed key. Ownership is checked before the body is read.
    """
    record = await service.authorize(video_id, user_id)

    async with request.form(max_files=1) as form:
        upload = form.get(VIDEO_FIELD)
        if not isinstance(upload, UploadFile):
            raise ValidationError(
                "Unable to find video file in form",
                details={"field": VIDEO_FIELD},
            )

        result = await service.ingest(
            record,
            user_id,
            VideoUpload(
                stream=upload,
                content_type=upload.content_type,
                filename=upload.filename,
            ),
        )

    return await url_issuer.sign_video(result.record)
