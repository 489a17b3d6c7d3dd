from pathlib import Path
from typing import Tuple, Union
import os
import numpy as np
from dotenv import load_dotenv

from ..models.image import Image
from ..repositories.image_repository import ImageRepository, ImageSource

# Load environment variables
load_dotenv()


class ImageService:
    """I/O helpers.  No crop geometry here."""
    def __init__(self):
        self.JPEG_QUALITY = int(os.getenv("JPEG_QUALITY", "95"))
        self.image_repository = ImageRepository()

    def create_image(self, pixels: np.ndarray, path: Union[str, Path] = None) -> Image:
        return self.image_repository.create_image(pixels, path)

    def load(self, source: ImageSource, sample_size: int = 1) -> Image:
        """Decode a whole image, optionally downsampled by a power of two."""
        return self.image_repository.load(source, sample_size=sample_size)

    def save(self, image: Image) -> None:
        """
        Business-level method to save the image to its path.
        """
        self.image_repository.save(image, quality=self.JPEG_QUALITY)

    def get_dimensions(self, source: ImageSource) -> Tuple[int, int]:
        """(width, height) of an undecoded source, read from its header."""
        return self.image_repository.read_bounds(source)

    def get_format(self, source: ImageSource) -> str | None:
        return self.image_repository.read_format(source)

    def get_exif_rotation(self, source: ImageSource) -> int:
        return self.image_repository.read_exif_rotation(source)
