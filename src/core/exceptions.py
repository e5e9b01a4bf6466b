"""Domain exceptions for Tubely."""
from typing import Any


class TubelyError(Exception):
    """Base exception for all Tubely errors."""

    http_status: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


# Request errors
class ValidationError(TubelyError):
    """Request failed validation."""

    http_status = 400


class InvalidVideoIdError(ValidationError):
    """Video id is not a valid UUID."""

    pass


class UnsupportedMediaTypeError(ValidationError):
    """Declared content type is not accepted."""

    pass


class PayloadTooLargeError(ValidationError):
    """Request body exceeds the configured ceiling."""

    http_status = 413


# Auth errors
class AuthenticationError(TubelyError):
    """Missing or invalid bearer credential."""

    http_status = 401


class AccessDeniedError(AuthenticationError):
    """Caller does not own the target record."""

    pass


# Processing errors
class ProcessingError(TubelyError):
    """Error during the media processing pipeline."""

    pass


class ToolInvocationError(ProcessingError):
    """External media tool could not be started."""

    pass


class ToolTimeoutError(ToolInvocationError):
    """External media tool exceeded its time budget and was killed."""

    pass


class ProbeError(ProcessingError):
    """Media probing failed or produced unusable output."""

    pass


class RemuxError(ProcessingError):
    """Fast-start remux failed."""

    pass


# Storage errors
class StorageError(TubelyError):
    """Error in storage operations."""

    pass


class UploadError(StorageError):
    """Object storage rejected or failed the put."""

    pass


class SignError(StorageError):
    """Signed URL could not be produced."""

    pass


class MetadataSyncError(StorageError):
    """Video record could not be updated."""

    pass


class VideoNotFoundError(StorageError):
    """Video record not found."""

    http_status = 404
