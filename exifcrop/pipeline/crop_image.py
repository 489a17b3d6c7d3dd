from __future__ import annotations
from pathlib import Path
from typing import Union
import logging

from ..models.image import Image
from ..models.rect import Rect
from ..repositories.image_repository import ImageSource
from ..services.cropping_service import CropMode, CroppingService
from ..services.image_service import ImageService

logger = logging.getLogger(__name__)


def crop_image(
    source: ImageSource,
    rect: Rect,
    out_width: int,
    out_height: int,
    dest: Union[str, Path, None] = None,
    exif_rotation: int | None = None,
    mode: CropMode | None = None,
    cropping_service: CroppingService | None = None,
    image_service: ImageService | None = None,
) -> Image:
    """
    Crop a display-space rectangle out of source and optionally save it.

    The EXIF rotation is read from the source when not supplied.
    """
    cropping_service = cropping_service or CroppingService()
    image_service = image_service or cropping_service.image_service

    if exif_rotation is None:
        exif_rotation = image_service.get_exif_rotation(source)
        logger.debug(f"EXIF rotation read from source: {exif_rotation}")

    cropped = cropping_service.crop(source, exif_rotation, rect, out_width, out_height, mode=mode)

    if dest is not None:
        cropped.path = Path(dest)
        image_service.save(cropped)
        logger.info(f"Saved {cropped.width}x{cropped.height} crop to {cropped.path}")

    return cropped
