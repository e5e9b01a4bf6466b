"""Domain models for Tubely."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.core.exceptions import SignError


class Orientation(str, Enum):
    """Coarse video geometry class; the value is the object key prefix."""

    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"
    OTHER = "other"


class IngestionStage(str, Enum):
    """Stages of a single video ingestion."""

    VALIDATING = "validating"
    STAGING = "staging"
    PROBING = "probing"
    CLASSIFYING = "classifying"
    REMUXING = "remuxing"
    KEYGEN = "keygen"
    UPLOADING = "uploading"
    METADATA_SYNC = "metadata_sync"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class VideoGeometry:
    """Dimensions of the primary video stream."""

    width: int
    height: int


@dataclass(frozen=True)
class ObjectReference:
    """Location of an object in storage.

    Persisted on the video record as ``"<bucket>,<key>"``.
    """

    bucket: str
    key: str

    def encode(self) -> str:
        return f"{self.bucket},{self.key}"

    @classmethod
    def parse(cls, value: str) -> "ObjectReference":
        """Split a stored ``bucket,key`` value.

        Raises:
            SignError: If the value has no separator or an empty part
        """
        bucket, sep, key = value.partition(",")
        if not sep or not bucket or not key:
            raise SignError(
                "Malformed object reference",
                details={"value": value},
            )
        return cls(bucket=bucket, key=key)


@dataclass(frozen=True)
class SignedURL:
    """A time-limited read URL. Never persisted."""

    url: str
    expires_at: datetime


# ============ Records ============


class VideoRecord(BaseModel):
    """Video metadata record as held by the metadata store."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    title: str
    description: str = ""
    thumbnail_url: str | None = None
    video_url: str | None = None
    created_at: datetime
    updated_at: datetime


# ============ Request/Response Models ============


class VideoCreateRequest(BaseModel):
    """Request to create a draft video record."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="", max_length=5000)
