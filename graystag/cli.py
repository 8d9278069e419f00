"""
Command line driver comparing a library grayscale conversion with the manual
pixel kernel.

Usage:
    graystag-compare photo.jpg
    graystag-compare photo.jpg --kernel vectorized --framework PIL
    graystag-compare photo.jpg --output out/ --no-display
    python -m graystag photo.jpg
"""

from __future__ import annotations

import argparse
import logging
import time
from typing import Sequence

from .buffer import ImageBuffer
from .config import settings
from .definitions import ImsFramework
from .filters.grayscale import (
    KERNELS,
    bgr_to_gray_threaded,
    compare_grayscale,
    get_kernel,
    library_grayscale,
)
from .loader import load_bgr
from .viewer import save_comparison, show_comparison

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="graystag-compare",
        description="Convert a color image to grayscale with an image library "
        "and with a manual pixel walk, then show all three images.",
    )
    parser.add_argument("image", help="Path to the color image file")
    parser.add_argument(
        "--kernel",
        "-k",
        choices=sorted(KERNELS),
        default=settings.KERNEL,
        help=f"Manual conversion kernel (default: {settings.KERNEL})",
    )
    parser.add_argument(
        "--framework",
        "-f",
        choices=[framework.value for framework in ImsFramework],
        default=ImsFramework(settings.FRAMEWORK).value,
        help="Library used for decoding and for the library conversion "
        f"(default: {ImsFramework(settings.FRAMEWORK).value})",
    )
    parser.add_argument(
        "--alignment",
        "-a",
        type=int,
        default=settings.ROW_ALIGNMENT,
        help=f"Row alignment of the image buffers in bytes (default: {settings.ROW_ALIGNMENT})",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=settings.WORKERS,
        help="Threads used by the threaded kernel (default: CPU count)",
    )
    parser.add_argument(
        "--output", "-o", help="Directory to store color.png, gray.png and mygray.png"
    )
    parser.add_argument(
        "--no-display", action="store_true", help="Do not open any windows"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    return parser


def run(args: argparse.Namespace) -> int:
    """
    Runs the comparison for parsed arguments.

    :return: The process exit code
    """
    framework = ImsFramework(args.framework)
    color = load_bgr(args.image, framework=framework)
    if color is None:
        logger.error(f"File {args.image} not opened, program ending")
        return 1

    try:
        source = ImageBuffer.from_pixels(color, alignment=args.alignment)
    except MemoryError:
        logger.error("No memory allocated for the color image buffer")
        return 1
    except ValueError as e:
        logger.error(f"Invalid image buffer: {e}")
        return 1

    logger.info(
        f"Image: {args.image}, height: {source.height}, width: {source.width}, "
        f"widthStep: {source.stride}"
    )
    logger.info(
        f"width * 24: {source.width * 24} bits, widthStep * 8: {source.stride * 8} bits"
    )

    library_gray = library_grayscale(color, framework=framework)

    try:
        target = ImageBuffer.allocate(
            source.width, source.height, channels=1, alignment=args.alignment
        )
    except MemoryError:
        logger.error("No memory allocated for the grayscale image buffer")
        return 1

    start = time.perf_counter()
    if args.kernel == "threaded":
        bgr_to_gray_threaded(source, target, workers=args.workers)
    else:
        get_kernel(args.kernel)(source, target)
    elapsed = time.perf_counter() - start
    logger.info(f"Kernel '{args.kernel}' converted the image in {elapsed * 1000:.1f} ms")

    manual_gray = target.to_array()
    difference = compare_grayscale(library_gray, manual_gray)
    logger.info(f"Library vs kernel: {difference}")

    if args.output:
        save_comparison(args.output, color, library_gray, manual_gray)
    if not args.no_display:
        show_comparison(color, library_gray, manual_gray, settings)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.alignment < 1:
        parser.error("--alignment must be positive")
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.LOG_LEVEL.upper(),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    return run(args)
