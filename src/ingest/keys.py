"""Object key derivation."""
import base64
import secrets

from src.core.models import Orientation

ID_BYTES = 32


def extension_for(media_type: str) -> str:
    """``video/mp4`` -> ``mp4``."""
    _, _, subtype = media_type.partition("/")
    return subtype or media_type


def random_id() -> str:
    """43-character URL-safe identifier from 32 random bytes."""
    raw = secrets.token_bytes(ID_BYTES)
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def generate_object_key(orientation: Orientation, media_type: str) -> str:
    """Build ``<orientation>/<random-id>.<ext>``.

    Keys are never checked for collisions; 256 bits of entropy make
    them unique in practice.
    """
    return f"{orientation.value}/{random_id()}.{extension_for(media_type)}"
