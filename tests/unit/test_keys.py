"""Tests for object key generation."""
import re

import pytest

from src.core.models import Orientation
from src.ingest.keys import extension_for, generate_object_key, random_id

KEY_PATTERN = re.compile(r"^(landscape|portrait|other)/[A-Za-z0-9_-]{43}\.\w+$")


class TestObjectKeys:
    """Test cases for generate_object_key()."""

    def test_extension_strips_media_prefix(self) -> None:
        assert extension_for("video/mp4") == "mp4"

    def test_random_id_shape(self) -> None:
        value = random_id()
        assert len(value) == 43
        assert "=" not in value
        assert re.fullmatch(r"[A-Za-z0-9_-]{43}", value)

    @pytest.mark.parametrize("orientation", list(Orientation))
    def test_key_format(self, orientation: Orientation) -> None:
        key = generate_object_key(orientation, "video/mp4")
        assert KEY_PATTERN.match(key)
        assert key.startswith(f"{orientation.value}/")
        assert key.endswith(".mp4")

    def test_keys_are_not_idempotent(self) -> None:
        keys = [generate_object_key(Orientation.LANDSCAPE, "video/mp4") for _ in range(1000)]
        assert len(set(keys)) == len(keys)
        assert all(KEY_PATTERN.match(key) for key in keys)
