import math
import numpy as np
import cv2

from ..errors import CropOutOfMemoryError
from ..models.matrix import Matrix
from ..models.rect import Rect


class CanvasRepository:
    """
    Pixel buffer allocation and affine rendering (OpenCV).
    Buffers are (H, W, 3) uint8 RGB arrays.
    """

    @staticmethod
    def allocate(width: int, height: int) -> np.ndarray:
        try:
            return np.zeros((height, width, 3), dtype=np.uint8)
        except MemoryError as err:
            raise CropOutOfMemoryError(f"Cannot allocate {width}x{height} buffer") from err

    @staticmethod
    def draw(canvas: np.ndarray, pixels: np.ndarray, matrix: Matrix, smooth: bool = True,
             border: int = cv2.BORDER_CONSTANT) -> np.ndarray:
        """
        Render pixels through matrix into canvas, clipped to the canvas bounds.
        With the default border, areas the source does not cover come out black.
        """
        if not pixels.flags['C_CONTIGUOUS']:
            pixels = np.ascontiguousarray(pixels)
        height, width = canvas.shape[:2]
        flags = cv2.INTER_LINEAR if smooth else cv2.INTER_NEAREST
        canvas[...] = cv2.warpAffine(pixels, matrix.to_pixel_affine(), (width, height),
                                     flags=flags, borderMode=border, borderValue=0)
        return canvas

    @classmethod
    def create_transformed(cls, pixels: np.ndarray, matrix: Matrix, smooth: bool = True) -> np.ndarray:
        """
        Render the whole of pixels through matrix into a new buffer sized to the
        mapped bounds, with the mapped top-left moved to the origin.
        """
        height, width = pixels.shape[:2]
        left, top, right, bottom = matrix.map_rect(Rect.from_size(width, height))
        new_width = int(math.floor(right - left + 0.5))
        new_height = int(math.floor(bottom - top + 0.5))

        canvas = cls.allocate(new_width, new_height)
        placed = matrix.copy().post_translate(-left, -top)
        # The source covers the whole buffer, replicate so edges do not fade to black
        return cls.draw(canvas, pixels, placed, smooth=smooth, border=cv2.BORDER_REPLICATE)
