from __future__ import annotations
from enum import Enum
import gc
import logging
import os
from dotenv import load_dotenv

from ..errors import CropOutOfMemoryError, InvalidRegionError
from ..models.image import Image
from ..models.matrix import Matrix
from ..models.rect import Rect
from ..models.rotated_image import RotatedImage
from ..repositories.canvas_repository import CanvasRepository
from ..repositories.image_repository import ImageRepository, ImageSource
from .geometry_service import GeometryService
from .image_service import ImageService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class CropMode(Enum):
    IN_MEMORY = "in-memory"  # decode everything, draw the crop
    REGION = "region"        # decode only the crop rectangle


class CroppingService:
    """
    Crops a display-space rectangle out of an EXIF-rotated source.

    Two strategies share one contract, crop(rect, out_width, out_height):
    region decode when the source format allows it, whole-image decode otherwise.
    """

    def __init__(self):
        self.image_service = ImageService()
        self.geometry_service = GeometryService(self.image_service)
        self.canvas_repository = CanvasRepository()
        self.image_repository = ImageRepository()
        self.region_decode_enabled = os.getenv("REGION_DECODE_ENABLED", "true").lower() in ("1", "true", "yes")
        self.region_decode_formats = {
            fmt.strip().upper()
            for fmt in os.getenv("REGION_DECODE_FORMATS", "JPEG,PNG,WEBP,BMP,TIFF").split(",")
            if fmt.strip()
        }
        # Decode at up to this multiple of the output size before the final scale
        self.oversample_factor = int(os.getenv("REGION_OVERSAMPLE_FACTOR", "2"))
        self.in_memory_max_image_size = int(os.getenv("IN_MEMORY_MAX_IMAGE_SIZE", "2048"))

    # ─── Strategy selection ───────────────────────────────────────────
    def select_mode(self, source: ImageSource) -> CropMode:
        if not self.region_decode_enabled:
            return CropMode.IN_MEMORY
        fmt = self.image_service.get_format(source)
        if fmt is not None and fmt.upper() in self.region_decode_formats:
            return CropMode.REGION
        return CropMode.IN_MEMORY

    def crop(
        self,
        source: ImageSource,
        exif_rotation: int,
        rect: Rect,
        out_width: int,
        out_height: int,
        mode: CropMode | None = None,
    ) -> Image:
        """
        Crop rect (display space) from source into an out_width x out_height image.

        Raises:
            InvalidRegionError: rect does not fit the image or the region failed to decode.
            CropOutOfMemoryError: a pixel buffer could not be allocated.
        """
        mode = mode or self.select_mode(source)
        logger.info(f"Cropping {rect} -> {out_width}x{out_height} (rotation {exif_rotation}, {mode.value})")
        if mode is CropMode.REGION:
            return self.decode_region_crop(source, exif_rotation, rect, out_width, out_height)
        return self._crop_from_full_decode(source, exif_rotation, rect, out_width, out_height)

    # ─── In-memory strategy ───────────────────────────────────────────
    def _crop_from_full_decode(
        self, source: ImageSource, exif_rotation: int, rect: Rect, out_width: int, out_height: int
    ) -> Image:
        width, height = self.image_service.get_dimensions(source)
        raw_rect = self.geometry_service.map_rect_to_raw_space(rect, exif_rotation, width, height)
        if raw_rect.is_empty or not raw_rect.is_within(width, height):
            raise InvalidRegionError(raw_rect, width, height, exif_rotation)

        sample_size = self.geometry_service.calculate_sample_size_for_source(source, self.in_memory_max_image_size)
        try:
            decoded = self.image_service.load(source, sample_size=sample_size)
        except MemoryError as err:
            raise CropOutOfMemoryError(f"Cannot decode source at 1/{sample_size}") from err

        rotated = RotatedImage(decoded.pixels, exif_rotation)
        scaled = rect.scaled(1 / sample_size)
        if scaled.is_empty:
            # Rects thinner than the sample size still cover one decoded pixel
            scaled = Rect(scaled.left, scaled.top,
                          max(scaled.right, scaled.left + 1), max(scaled.bottom, scaled.top + 1))

        cropped = self.in_memory_crop(rotated, scaled, scaled.width, scaled.height)
        if (scaled.width, scaled.height) == (out_width, out_height):
            return cropped

        resize = Matrix().post_scale(out_width / scaled.width, out_height / scaled.height)
        logger.debug(f"Resizing in-memory crop {scaled.width}x{scaled.height} -> {out_width}x{out_height}")
        return self.image_service.create_image(self.canvas_repository.create_transformed(cropped.pixels, resize))

    def in_memory_crop(self, rotated_image: RotatedImage, rect: Rect, out_width: int, out_height: int) -> Image:
        """
        Crop from an already decoded image. rect is in the image's display space.
        The output is always exactly out_width x out_height.
        """
        # The whole image is resident, give the collector a chance first
        gc.collect()

        canvas = self.canvas_repository.allocate(out_width, out_height)

        if not rect.is_empty:
            matrix = Matrix().set_rect_to_rect(rect, Rect.from_size(rect.width, rect.height))
            matrix.pre_concat(rotated_image.rotate_matrix())
            self.canvas_repository.draw(canvas, rotated_image.pixels, matrix)

        return self.image_service.create_image(canvas)

    # ─── Region strategy ──────────────────────────────────────────────
    def decode_region_crop(
        self, source: ImageSource, exif_rotation: int, rect: Rect, out_width: int, out_height: int
    ) -> Image:
        """
        Decode only the crop rectangle, at the coarsest power-of-two sample that
        keeps oversample_factor times the output size, then scale and rotate it
        into place.
        """
        with self.image_repository.open_region_decoder(source) as decoder:
            width, height = decoder.width, decoder.height
            rect = self.geometry_service.map_rect_to_raw_space(rect, exif_rotation, width, height)

            # Output size in raw orientation; a quarter turn swaps the axes
            raw_out_width, raw_out_height = (
                (out_height, out_width) if (exif_rotation // 90) % 2 else (out_width, out_height)
            )
            sample_size = self.geometry_service.calculate_sample_size(
                rect.width, rect.height,
                raw_out_width * self.oversample_factor, raw_out_height * self.oversample_factor,
            )
            logger.debug(f"Raw rect {rect} of {width}x{height}, sample size {sample_size}")
            try:
                pixels = decoder.decode_region(rect, sample_size)
            except MemoryError as err:
                raise CropOutOfMemoryError(f"Cannot decode {rect} at 1/{sample_size}") from err
            except (ValueError, OSError) as err:
                raise InvalidRegionError(rect, width, height, exif_rotation) from err

        decoded_height, decoded_width = pixels.shape[:2]
        post_mod = Matrix()
        need_post_decode_mods = False
        if decoded_width > raw_out_width or decoded_height > raw_out_height:
            need_post_decode_mods = True
            # Scale in raw orientation; the rotation below turns it into out_width x out_height
            post_mod.post_scale(raw_out_width / decoded_width, raw_out_height / decoded_height)
        if exif_rotation != 0:
            need_post_decode_mods = True
            post_mod.post_rotate(exif_rotation)

        if need_post_decode_mods:
            logger.debug(f"Post-decode transform {post_mod} on {decoded_width}x{decoded_height}")
            pixels = self.canvas_repository.create_transformed(pixels, post_mod)

        return self.image_service.create_image(pixels)
