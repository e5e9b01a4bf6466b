"""Thumbnail upload and asset serving."""
from fastapi import APIRouter, Request
from fastapi.responses import FileResponse
from starlette.datastructures import UploadFile

from src.api.deps import (
    AssetStorageDep,
    CurrentUserDep,
    IngestionServiceDep,
    MetadataStoreDep,
    SettingsDep,
    UrlIssuerDep,
    VideoIdDep,
)
from src.core.exceptions import (
    PayloadTooLargeError,
    UnsupportedMediaTypeError,
    ValidationError,
    VideoNotFoundError,
)
from src.core.logging import get_logger
from src.core.models import VideoRecord
from src.ingest.keys import extension_for
from src.ingest.pipeline import parse_media_type

logger = get_logger(__name__)

router = APIRouter()
assets_router = APIRouter()

THUMBNAIL_FIELD = "thumbnail"


@router.post("/{video_id}", response_model=VideoRecord)
async def upload_thumbnail(
    request: Request,
    video_id: VideoIdDep,
    user_id: CurrentUserDep,
    settings: SettingsDep,
    service: IngestionServiceDep,
    metadata_store: MetadataStoreDep,
    asset_storage: AssetStorageDep,
    url_issuer: UrlIssuerDep,
) -> VideoRecord:
    """Attach a thumbnail image to a video.

    Thumbnails are small, so they are read into memory and written to
    the local assets directory in one go.
    """
    record = await service.authorize(video_id, user_id)
    max_bytes = settings.max_thumbnail_size_bytes

    async with request.form(max_files=1) as form:
        upload = form.get(THUMBNAIL_FIELD)
        if not isinstance(upload, UploadFile):
            raise ValidationError(
                "Unable to find thumbnail in form",
                details={"field": THUMBNAIL_FIELD},
            )

        media_type = parse_media_type(upload.content_type)
        if media_type not in settings.allowed_thumbnail_types:
            raise UnsupportedMediaTypeError(
                f"Thumbnail must be one of {', '.join(settings.allowed_thumbnail_types)}",
                details={"content_type": upload.content_type},
            )

        data = await upload.read(max_bytes + 1)
        if len(data) > max_bytes:
            raise PayloadTooLargeError(
                "Thumbnail exceeds size limit",
                details={"max_bytes": max_bytes},
            )

    name = f"{video_id}.{extension_for(media_type)}"
    await asset_storage.save(name, data)

    updated = await metadata_store.update_video(
        record.model_copy(update={"thumbnail_url": f"/assets/{name}"})
    )
    logger.info("Thumbnail uploaded", video_id=str(video_id), size_bytes=len(data))
    return await url_issuer.sign_video(updated)


@assets_router.get("/assets/{name}")
async def get_asset(name: str, asset_storage: AssetStorageDep) -> FileResponse:
    """Serve a stored thumbnail."""
    if not asset_storage.exists(name):
        raise VideoNotFoundError("Asset not found", details={"name": name})
    return FileResponse(asset_storage.resolve(name))
