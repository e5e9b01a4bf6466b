"""Aspect ratio classification."""
import math

from src.core.models import Orientation


def truncate_ratio(value: float) -> float:
    """Truncate to three decimals (floor, not round)."""
    return math.floor(value * 1000) / 1000


LANDSCAPE_RATIO = truncate_ratio(16 / 9)
PORTRAIT_RATIO = truncate_ratio(9 / 16)


def classify_ratio(ratio: float) -> Orientation:
    truncated = truncate_ratio(ratio)
    if truncated == LANDSCAPE_RATIO:
        return Orientation.LANDSCAPE
    if truncated == PORTRAIT_RATIO:
        return Orientation.PORTRAIT
    return Orientation.OTHER


def classify(width: int, height: int) -> Orientation:
    """Map video dimensions to an orientation.

    Height must be positive; zero dimensions are rejected by the prober.
    """
    return classify_ratio(width / height)
