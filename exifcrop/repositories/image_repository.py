from __future__ import annotations
from contextlib import contextmanager
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Iterator, Tuple, Union
import logging
import math
import numpy as np
from PIL import Image as PILImage

from ..models.image import Image
from .region_decoder import RegionDecoder

logger = logging.getLogger(__name__)

ImageSource = Union[str, Path, bytes, BinaryIO]

EXIF_ORIENTATION_TAG = 274
_ORIENTATION_TO_DEGREES = {3: 180, 6: 90, 8: 270}


class ImageRepository:
    """
    Handles stream lifecycle, decoding and encoding for Image entities.
    Everything that touches Pillow's decoders lives here.
    """

    @staticmethod
    def create_image(pixels: np.ndarray, path: Union[str, Path] = None) -> Image:
        if path is None:
            return Image(pixels)
        return Image(pixels=pixels, path=Path(path))

    # ─── Streams ──────────────────────────────────────────────────────
    @staticmethod
    def close_silently(stream) -> None:
        """Release a stream; close failures are logged and never raised."""
        if stream is None:
            return
        try:
            stream.close()
        except OSError as err:
            logger.debug(f"Ignoring failure while closing {stream!r}: {err}")

    @classmethod
    @contextmanager
    def open_stream(cls, source: ImageSource) -> Iterator[BinaryIO]:
        """
        Yield a binary stream for source. Streams opened here are closed on exit;
        file objects handed in by the caller stay open.
        """
        if isinstance(source, (str, Path)):
            stream = open(Path(source), "rb")
            owned = True
        elif isinstance(source, (bytes, bytearray)):
            stream = BytesIO(source)
            owned = True
        else:
            stream = source
            owned = False
        try:
            yield stream
        finally:
            if owned:
                cls.close_silently(stream)

    @classmethod
    @contextmanager
    def open_region_decoder(cls, source: ImageSource) -> Iterator[RegionDecoder]:
        with cls.open_stream(source) as stream:
            decoder = RegionDecoder(stream)
            try:
                yield decoder
            finally:
                decoder.close()

    # ─── Header-only reads ───────────────────────────────────────────
    @classmethod
    def read_bounds(cls, source: ImageSource) -> Tuple[int, int]:
        """(width, height) from the image header, without decoding pixels."""
        with cls.open_stream(source) as stream, PILImage.open(stream) as pil_img:
            return pil_img.size

    @classmethod
    def read_format(cls, source: ImageSource) -> str | None:
        with cls.open_stream(source) as stream, PILImage.open(stream) as pil_img:
            return pil_img.format

    @classmethod
    def read_exif_rotation(cls, source: ImageSource) -> int:
        """Rotation in degrees declared by the EXIF orientation tag, 0 when absent."""
        with cls.open_stream(source) as stream, PILImage.open(stream) as pil_img:
            orientation = pil_img.getexif().get(EXIF_ORIENTATION_TAG, 1)
        try:
            orientation = int(orientation)
        except (TypeError, ValueError):
            return 0
        return _ORIENTATION_TO_DEGREES.get(orientation, 0)

    # ─── Full decode / encode ─────────────────────────────────────────
    @classmethod
    def load(cls, source: ImageSource, sample_size: int = 1) -> Image:
        """
        Decode the whole image at 1/sample_size resolution into RGB pixels.
        JPEG sources are scaled inside the decoder where possible.
        """
        with cls.open_stream(source) as stream, PILImage.open(stream) as pil_img:
            width, height = pil_img.size
            remaining = sample_size
            if sample_size > 1 and pil_img.format == "JPEG":
                pil_img.draft("RGB", (math.ceil(width / sample_size), math.ceil(height / sample_size)))
                decoder_scale = max(1, round(width / pil_img.size[0]))
                remaining = max(1, sample_size // decoder_scale)
            decoded = pil_img.convert("RGB")
            if remaining > 1:
                decoded = decoded.reduce(remaining)
            pixels = np.asarray(decoded, dtype=np.uint8).copy()

        path = Path(source) if isinstance(source, (str, Path)) else None
        logger.debug(f"Decoded {width}x{height} at 1/{sample_size} -> {pixels.shape[1]}x{pixels.shape[0]}")
        return Image(pixels=pixels, path=path)

    @staticmethod
    def save(image: Image, quality: int = 95) -> None:
        if image.path is None:
            raise ValueError("Image has no destination path")
        pixels = image.pixels
        if not pixels.flags['C_CONTIGUOUS']:
            pixels = np.ascontiguousarray(pixels)
        path = Path(image.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix.lower() in (".jpg", ".jpeg"):
            PILImage.fromarray(pixels).save(path, quality=quality)
        else:
            PILImage.fromarray(pixels).save(path)
