"""Dependency injection for FastAPI routes."""
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, Request

from src.api.auth import get_bearer_token, validate_token
from src.core.config import Settings
from src.core.exceptions import InvalidVideoIdError
from src.core.logging import log_context
from src.ingest.pipeline import VideoIngestionService
from src.storage.base import ObjectStorage
from src.storage.local import LocalStorage
from src.storage.metadata import MetadataStore
from src.storage.signing import SignedUrlIssuer


def _state(request: Request, name: str):
    component = getattr(request.app.state, name, None)
    if component is None:
        raise RuntimeError(f"{name} not initialized")
    return component


# Settings dependency
def get_settings_dep(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return _state(request, "settings")


SettingsDep = Annotated[Settings, Depends(get_settings_dep)]


# Authenticated caller
def get_current_user(
    settings: SettingsDep,
    authorization: Annotated[str | None, Header()] = None,
) -> UUID:
    """Resolve the bearer token into a user id."""
    token = get_bearer_token(authorization)
    user_id = validate_token(token, settings.jwt_secret, settings.jwt_algorithm)
    log_context(user_id=str(user_id))
    return user_id


CurrentUserDep = Annotated[UUID, Depends(get_current_user)]


def parse_video_id(video_id: str) -> UUID:
    """Parse the ``video_id`` path parameter."""
    try:
        return UUID(video_id)
    except ValueError as e:
        raise InvalidVideoIdError("Invalid ID", details={"video_id": video_id}) from e


VideoIdDep = Annotated[UUID, Depends(parse_video_id)]


# Components
def get_metadata_store(request: Request) -> MetadataStore:
    """Get metadata store instance."""
    return _state(request, "metadata_store")


MetadataStoreDep = Annotated[MetadataStore, Depends(get_metadata_store)]


def get_ingestion_service(request: Request) -> VideoIngestionService:
    return _state(request, "ingestion_service")


IngestionServiceDep = Annotated[VideoIngestionService, Depends(get_ingestion_service)]


def get_url_issuer(request: Request) -> SignedUrlIssuer:
    return _state(request, "url_issuer")


UrlIssuerDep = Annotated[SignedUrlIssuer, Depends(get_url_issuer)]


def get_asset_storage(request: Request) -> LocalStorage:
    return _state(request, "asset_storage")


AssetStorageDep = Annotated[LocalStorage, Depends(get_asset_storage)]


def get_object_storage(request: Request) -> ObjectStorage:
    return _state(request, "object_storage")


ObjectStorageDep = Annotated[ObjectStorage, Depends(get_object_storage)]
