"""
Pytest configuration and shared fixtures for the crop tests.
"""
import numpy as np
import pytest
from PIL import Image as PILImage

RED = (255, 0, 0)
BLUE = (0, 0, 255)


@pytest.fixture
def write_image(tmp_path):
    """Factory: save an RGB array to tmp_path and return the path."""
    def _write(pixels: np.ndarray, name: str = "source.png", orientation: int | None = None, **save_kwargs):
        path = tmp_path / name
        pil_img = PILImage.fromarray(pixels)
        if orientation is not None:
            exif = PILImage.Exif()
            exif[274] = orientation
            save_kwargs["exif"] = exif
        pil_img.save(path, **save_kwargs)
        return path
    return _write


@pytest.fixture
def gradient_pixels():
    """200x100 RGB image whose pixel values encode their own coordinates."""
    height, width = 100, 200
    ys, xs = np.mgrid[0:height, 0:width]
    pixels = np.zeros((height, width, 3), dtype=np.uint8)
    pixels[..., 0] = xs % 256
    pixels[..., 1] = ys % 256
    pixels[..., 2] = 128
    return pixels


@pytest.fixture
def two_band_pixels():
    """40 wide, 20 tall: top half red, bottom half blue."""
    pixels = np.zeros((20, 40, 3), dtype=np.uint8)
    pixels[:10] = RED
    pixels[10:] = BLUE
    return pixels


@pytest.fixture
def cropping_service(monkeypatch):
    """CroppingService with default configuration, independent of any .env file."""
    for var in ("REGION_DECODE_ENABLED", "REGION_DECODE_FORMATS",
                "REGION_OVERSAMPLE_FACTOR", "IN_MEMORY_MAX_IMAGE_SIZE"):
        monkeypatch.delenv(var, raising=False)
    from exifcrop.services.cropping_service import CroppingService
    return CroppingService()


@pytest.fixture
def odd_pixels():
    """53 wide, 37 tall, seeded noise so every misplaced pixel shows."""
    rng = np.random.default_rng(7)
    return rng.integers(0, 256, size=(37, 53, 3), dtype=np.uint8)
