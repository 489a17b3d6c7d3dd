import logging
import math

from ..models.matrix import Matrix
from ..models.rect import Rect
from ..repositories.image_repository import ImageSource
from .image_service import ImageService

logger = logging.getLogger(__name__)


class GeometryService:
    """
    Pure crop geometry: display/raw coordinate mapping and decode sample sizes.
    """

    def __init__(self, image_service: ImageService | None = None):
        self.image_service = image_service or ImageService()

    @staticmethod
    def map_rect_to_raw_space(rect: Rect, exif_rotation: int, image_width: int, image_height: int) -> Rect:
        """
        Map a crop rectangle from display space (after EXIF rotation) back to
        raw space (pixels as stored).

        Args:
            rect (Rect): Crop rectangle in display space.
            exif_rotation (int): Degrees the raw image is rotated for display.
            image_width (int): Raw image width.
            image_height (int): Raw image height.

        Returns:
            Rect: The rectangle in raw space, bounds truncated to integers.
        """
        if exif_rotation == 0:
            return rect

        # Undo the display rotation about the origin
        matrix = Matrix().set_rotate(-exif_rotation)
        left, top, right, bottom = matrix.map_rect(rect)

        # Rotation about the origin lands on negative coordinates, shift back
        dx = image_width if left < 0 else 0
        dy = image_height if top < 0 else 0
        mapped = Rect(int(left + dx), int(top + dy), int(right + dx), int(bottom + dy))
        logger.debug(f"Mapped {rect} at {exif_rotation} deg to raw {mapped}")
        return mapped

    @staticmethod
    def calculate_sample_size(image_width: int, image_height: int, max_width: int, max_height: int) -> int:
        """
        Smallest power-of-two downsample that brings the image within
        max_width x max_height. Returns 1 when it already fits.
        """
        if max_width <= 0 or max_height <= 0:
            raise ValueError(f"Max dimensions must be positive, got {max_width}x{max_height}")

        if image_width <= max_width and image_height <= max_height:
            return 1

        ss_width = math.ceil(image_width / max_width)
        ss_height = math.ceil(image_height / max_height)
        sample_size = max(ss_width, ss_height)

        # Decoders only honour powers of two, round up so the bound still holds
        if sample_size & (sample_size - 1):
            sample_size = 1 << sample_size.bit_length()

        return sample_size

    def calculate_sample_size_for_source(self, source: ImageSource, max_image_size: int) -> int:
        """Sample size for a source, reading only its header for the dimensions."""
        width, height = self.image_service.get_dimensions(source)
        return self.calculate_sample_size(width, height, max_image_size, max_image_size)
