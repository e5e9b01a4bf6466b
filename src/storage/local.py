"""Local filesystem storage for small assets (thumbnails)."""
from pathlib import Path

import aiofiles

from src.core.config import settings
from src.core.exceptions import StorageError
from src.core.logging import get_logger

logger = get_logger(__name__)


class LocalStorage:
    """Flat local directory of asset files.

    Example:
        storage = LocalStorage()
        await storage.save("abc.png", png_bytes)
        path = storage.resolve("abc.png")
    """

    def __init__(self, base_path: Path | None = None) -> None:
        self.base_path = base_path or settings.assets_path
        self.base_path.mkdir(parents=True, exist_ok=True)

    def resolve(self, name: str) -> Path:
        """Resolve an asset name to a path inside the base directory."""
        # Prevent path traversal
        clean_name = Path(name).name
        if not clean_name or clean_name in (".", ".."):
            raise StorageError(f"Invalid asset name: {name}")
        return self.base_path / clean_name

    async def save(self, name: str, data: bytes) -> Path:
        """Write an asset in one go."""
        path = self.resolve(name)
        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
        except OSError as e:
            logger.error("Failed to save asset", name=name, error=str(e))
            raise StorageError(f"Failed to save {name}: {e}") from e

        logger.debug("Asset saved", path=str(path))
        return path

    def exists(self, name: str) -> bool:
        return self.resolve(name).is_file()

    async def delete(self, name: str) -> bool:
        """Delete an asset."""
        path = self.resolve(name)
        if not path.exists():
            return False

        try:
            path.unlink()
        except OSError as e:
            logger.error("Failed to delete asset", name=name, error=str(e))
            return False

        logger.debug("Asset deleted", path=str(path))
        return True
