from __future__ import annotations
from dataclasses import dataclass
import numpy as np

from .matrix import Matrix


@dataclass
class RotatedImage:
    """
    Raw decoded pixels plus the rotation still pending for display.
    width/height are the display dimensions.
    """
    pixels: np.ndarray  # Shape (H, W, 3), raw orientation.
    rotation: int = 0   # Degrees, multiple of 90.

    @property
    def raw_width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def raw_height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def is_orientation_changed(self) -> bool:
        return (self.rotation // 90) % 2 != 0

    @property
    def width(self) -> int:
        return self.raw_height if self.is_orientation_changed else self.raw_width

    @property
    def height(self) -> int:
        return self.raw_width if self.is_orientation_changed else self.raw_height

    def rotate_matrix(self) -> Matrix:
        """Raw-to-display transform: rotate about the raw center, recenter on the display center."""
        matrix = Matrix()
        if self.rotation != 0:
            matrix.pre_translate(-self.raw_width / 2, -self.raw_height / 2)
            matrix.post_rotate(self.rotation)
            matrix.post_translate(self.width / 2, self.height / 2)
        return matrix
