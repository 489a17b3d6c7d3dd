from __future__ import annotations

from .models.rect import Rect


class CropError(Exception):
    """Base class for crop failures."""


class InvalidRegionError(CropError, ValueError):
    """
    The crop rectangle does not fit the image, or the region could not be decoded.

    Carries the attempted (raw space) rectangle and the image metadata so callers
    can report what was asked for. The underlying failure is kept as __cause__.
    """

    def __init__(self, rect: Rect, image_width: int, image_height: int, rotation: int):
        self.rect = rect
        self.image_width = image_width
        self.image_height = image_height
        self.rotation = rotation
        super().__init__(
            f"Rectangle {rect} is outside of the image "
            f"({image_width},{image_height},{rotation})"
        )


class CropOutOfMemoryError(CropError, MemoryError):
    """Pixel buffer allocation or decode ran out of memory. Not retried."""
