from __future__ import annotations
from typing import BinaryIO
import logging
import numpy as np
from PIL import Image as PILImage

from ..models.rect import Rect

logger = logging.getLogger(__name__)


class RegionDecoder:
    """
    Decodes rectangular regions of one image at a power-of-two downsample.

    Opening only reads the header; pixels are produced per region request.
    The stream stays owned by the caller, close() releases the Pillow handle.
    """

    def __init__(self, stream: BinaryIO):
        self._image = PILImage.open(stream)

    @property
    def width(self) -> int:
        return self._image.size[0]

    @property
    def height(self) -> int:
        return self._image.size[1]

    @property
    def format(self) -> str | None:
        return self._image.format

    def decode_region(self, rect: Rect, sample_size: int = 1) -> np.ndarray:
        """
        Returns RGB uint8 pixels of rect (raw space) at 1/sample_size resolution,
        shape (ceil(h / n), ceil(w / n), 3).

        Raises ValueError when rect is empty or not inside the image.
        """
        if sample_size < 1:
            raise ValueError(f"sample_size must be >= 1, got {sample_size}")
        if rect.is_empty or not rect.is_within(self.width, self.height):
            raise ValueError(f"{rect} does not lie within {self.width}x{self.height}")

        region = self._image.crop(rect.as_box())
        if region.mode != "RGB":
            region = region.convert("RGB")
        if sample_size > 1:
            region = region.reduce(sample_size)

        logger.debug(f"Decoded region {rect} at 1/{sample_size} -> {region.size[0]}x{region.size[1]}")
        return np.asarray(region, dtype=np.uint8).copy()

    def close(self) -> None:
        self._image.close()
