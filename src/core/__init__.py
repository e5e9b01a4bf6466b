"""Core module - shared kernel for Tubely."""
from src.core.config import settings
from src.core.exceptions import TubelyError

__all__ = ["settings", "TubelyError"]
