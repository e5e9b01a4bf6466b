"""Storage module - object storage, assets and video metadata."""
from src.storage.base import ObjectStorage
from src.storage.local import LocalStorage
from src.storage.metadata import MetadataStore
from src.storage.s3 import S3ObjectStorage
from src.storage.signing import SignedUrlIssuer

__all__ = ["ObjectStorage", "LocalStorage", "MetadataStore", "S3ObjectStorage", "SignedUrlIssuer"]
