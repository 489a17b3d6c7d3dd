import argparse
import logging
import os
import sys
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from ..errors import CropError
from ..models.rect import Rect
from ..pipeline.crop_image import crop_image
from ..services.cropping_service import CropMode

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="exifcrop",
        description="Crop a rectangle (in display orientation) out of an EXIF-rotated image.",
    )
    parser.add_argument("source", help="input image")
    parser.add_argument("dest", help="output image")
    parser.add_argument("--rect", nargs=4, type=int, required=True,
                        metavar=("LEFT", "TOP", "RIGHT", "BOTTOM"),
                        help="crop rectangle in display coordinates")
    parser.add_argument("--size", nargs=2, type=int, metavar=("WIDTH", "HEIGHT"),
                        help="output size (defaults to the rectangle size)")
    parser.add_argument("--rotation", type=int, choices=(0, 90, 180, 270),
                        help="EXIF rotation in degrees (read from the source when omitted)")
    parser.add_argument("--mode", choices=[m.value for m in CropMode],
                        help="force a crop strategy")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # --- Centralized Logging Configuration ---
    level = logging.DEBUG if args.verbose else getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )

    rect = Rect(*args.rect)
    out_width, out_height = args.size if args.size else (rect.width, rect.height)
    mode = CropMode(args.mode) if args.mode else None

    try:
        crop_image(args.source, rect, out_width, out_height, dest=args.dest,
                   exif_rotation=args.rotation, mode=mode)
    except CropError as e:
        logger.error(f"Crop failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
