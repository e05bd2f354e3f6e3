"""Aspect-ratio normalization for synthesis requests.

The synthesis service only accepts five discrete aspect ratios, so every
requested size is snapped to the nearest supported one before a request
is built.
"""

from __future__ import annotations

from typing import Literal

AspectRatio = Literal["1:1", "3:4", "4:3", "9:16", "16:9"]

# Canonical order; ties resolve to the earliest entry.
CANONICAL_RATIOS: tuple[tuple[AspectRatio, float], ...] = (
    ("1:1", 1.0),
    ("3:4", 0.75),
    ("4:3", 1.333),
    ("9:16", 0.5625),
    ("16:9", 1.777),
)

ASPECT_RATIOS: list[AspectRatio] = [name for name, _ in CANONICAL_RATIOS]


def map_to_supported_ratio(width: float, height: float) -> AspectRatio:
    """Map pixel dimensions to the closest supported aspect ratio.

    Args:
        width: Width in pixels (positive).
        height: Height in pixels (positive).

    Returns:
        The supported ratio tag whose value is closest to ``width / height``.
        When two candidates are equally close, the one listed first in
        CANONICAL_RATIOS wins.

    Example:
        >>> map_to_supported_ratio(1200, 900)
        '4:3'

    """
    ratio = width / height
    best_name, best_value = CANONICAL_RATIOS[0]
    best_distance = abs(best_value - ratio)
    for name, value in CANONICAL_RATIOS[1:]:
        distance = abs(value - ratio)
        if distance < best_distance:
            best_name, best_distance = name, distance
    return best_name
