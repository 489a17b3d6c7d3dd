"""Crop display-space rectangles out of EXIF-rotated images."""
from .errors import CropError, CropOutOfMemoryError, InvalidRegionError
from .models.rect import Rect
from .services.cropping_service import CropMode, CroppingService
from .services.geometry_service import GeometryService

__version__ = "1.0.0"
