"""Grayscale conversion of BGR image buffers.

This module converts 8 bit BGR rasters to single channel luminance using the
ITU-R BT.601 luma coefficients:

    Y = 0.299*R + 0.587*G + 0.114*B

The result is truncated toward zero, the same thing that happens when a
floating point value is stored into an 8 bit unsigned slot.

## Kernels

All kernels take a source and a destination :class:`ImageBuffer` and write
into the destination. They never allocate the destination, never touch its
row padding and do not validate their arguments.

- **pixel**: walks every pixel with plain index arithmetic
- **vectorized**: the same formula evaluated with numpy, byte-identical
- **fixed**: ``(77*R + 150*G + 29*B) >> 8``, may be 1 below the exact value
- **threaded**: the vectorized kernel run on disjoint row bands in parallel

The weights are applied as exact integer thousandths. A binary double
evaluation of ``0.299*128 + 0.587*128 + 0.114*128`` yields
``127.99999999999998`` and would truncate mid-gray to 127.

Usage:
    from graystag import ImageBuffer
    from graystag.filters.grayscale import bgr_to_gray

    src = ImageBuffer.from_pixels(bgr_pixels)
    dst = ImageBuffer.allocate(src.width, src.height, channels=1)
    bgr_to_gray(src, dst)
    gray = dst.to_array()
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable

import numpy as np
from PIL import Image as PILImage

from ..buffer import ImageBuffer
from ..definitions import ImsFramework, get_opencv

logger = logging.getLogger(__name__)

RED_WEIGHT = 299
GREEN_WEIGHT = 587
BLUE_WEIGHT = 114
WEIGHT_SCALE = 1000
"Denominator of the integer weights, RED_WEIGHT / WEIGHT_SCALE == 0.299"

FIXED_RED_WEIGHT = 77
FIXED_GREEN_WEIGHT = 150
FIXED_BLUE_WEIGHT = 29
FIXED_SHIFT = 8

GrayscaleKernel = Callable[[ImageBuffer, ImageBuffer], None]


# ============================================================================
# Kernels
# ============================================================================

def bgr_to_gray(src: ImageBuffer, dst: ImageBuffer) -> None:
    """Convert a BGR buffer to grayscale pixel by pixel.

    Args:
        src: 3 channel BGR source
        dst: 1 channel destination of the same width and height
    """
    source = src.base
    target = dst.base
    for row in range(src.height):
        src_index = row * src.stride
        dst_index = row * dst.stride
        for _ in range(src.width):
            # BGR: the first byte of a pixel is blue
            blue = source[src_index]
            green = source[src_index + 1]
            red = source[src_index + 2]
            target[dst_index] = (
                RED_WEIGHT * red + GREEN_WEIGHT * green + BLUE_WEIGHT * blue
            ) // WEIGHT_SCALE
            src_index += 3
            dst_index += 1


def bgr_to_gray_vectorized(src: ImageBuffer, dst: ImageBuffer) -> None:
    """Convert a BGR buffer to grayscale using numpy.

    Produces exactly the same bytes as :func:`bgr_to_gray`.

    Args:
        src: 3 channel BGR source
        dst: 1 channel destination of the same width and height
    """
    bgr = src.view().astype(np.uint32)
    weighted = (
        RED_WEIGHT * bgr[:, :, 2]
        + GREEN_WEIGHT * bgr[:, :, 1]
        + BLUE_WEIGHT * bgr[:, :, 0]
    )
    dst.view()[...] = (weighted // WEIGHT_SCALE).astype(np.uint8)


def bgr_to_gray_fixed(src: ImageBuffer, dst: ImageBuffer) -> None:
    """Convert a BGR buffer to grayscale with 8 bit fixed point weights.

    Uses ``(77*R + 150*G + 29*B) >> 8``. The result is within 1 of the exact
    formula for every input, e.g. pure blue yields 28 instead of 29.

    Args:
        src: 3 channel BGR source
        dst: 1 channel destination of the same width and height
    """
    bgr = src.view().astype(np.uint32)
    weighted = (
        FIXED_RED_WEIGHT * bgr[:, :, 2]
        + FIXED_GREEN_WEIGHT * bgr[:, :, 1]
        + FIXED_BLUE_WEIGHT * bgr[:, :, 0]
    )
    dst.view()[...] = (weighted >> FIXED_SHIFT).astype(np.uint8)


def bgr_to_gray_threaded(
    src: ImageBuffer, dst: ImageBuffer, workers: int | None = None
) -> None:
    """Convert a BGR buffer to grayscale on several threads.

    The rows are split into disjoint bands, each converted by
    :func:`bgr_to_gray_vectorized`. numpy releases the GIL while the bands
    are computed.

    Args:
        src: 3 channel BGR source
        dst: 1 channel destination of the same width and height
        workers: Number of threads, the CPU count by default
    """
    workers = workers or os.cpu_count() or 1
    bands = max(1, min(workers, src.height))
    bounds = [src.height * index // bands for index in range(bands + 1)]
    with ThreadPoolExecutor(max_workers=bands) as executor:
        futures = [
            executor.submit(
                bgr_to_gray_vectorized,
                _row_band(src, start, stop),
                _row_band(dst, start, stop),
            )
            for start, stop in zip(bounds[:-1], bounds[1:])
        ]
        for future in futures:
            future.result()


def _row_band(buffer: ImageBuffer, start: int, stop: int) -> ImageBuffer:
    """Returns a descriptor of the rows start..stop-1 sharing the memory"""
    return ImageBuffer(
        buffer.base[start * buffer.stride:],
        width=buffer.width,
        height=stop - start,
        stride=buffer.stride,
        channels=buffer.channels,
    )


KERNELS: dict[str, GrayscaleKernel] = {
    "pixel": bgr_to_gray,
    "vectorized": bgr_to_gray_vectorized,
    "fixed": bgr_to_gray_fixed,
    "threaded": bgr_to_gray_threaded,
}
"The available kernels by name"


def get_kernel(name: str) -> GrayscaleKernel:
    """Returns the kernel registered as ``name``.

    Raises:
        ValueError: If no kernel of that name exists
    """
    try:
        return KERNELS[name]
    except KeyError:
        raise ValueError(
            f"Unknown kernel '{name}', expected one of {sorted(KERNELS)}"
        ) from None


# ============================================================================
# Library route
# ============================================================================

def library_grayscale(
    pixels: np.ndarray, framework: ImsFramework | str = ImsFramework.CV
) -> np.ndarray:
    """Convert BGR pixels to grayscale with an image library.

    OpenCV and PIL both round to the nearest integer, so their results may be
    1 above the kernels' truncated values.

    Args:
        pixels: BGR uint8 array (H, W, 3)
        framework: ImsFramework.CV for cv2.cvtColor, ImsFramework.PIL for
            PIL's "L" conversion

    Returns:
        Grayscale uint8 array (H, W)
    """
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected BGR image (H, W, 3), got shape {pixels.shape}")

    if pixels.dtype != np.uint8:
        raise ValueError(f"Expected uint8 dtype, got {pixels.dtype}")

    framework = ImsFramework(framework)
    if framework == ImsFramework.CV:
        cv = get_opencv()
        return cv.cvtColor(pixels, cv.COLOR_BGR2GRAY)
    rgb = np.ascontiguousarray(pixels[:, :, ::-1])
    return np.asarray(PILImage.fromarray(rgb).convert("L"))


# ============================================================================
# Comparison
# ============================================================================

@dataclass
class GrayDifference:
    """Per pixel difference between two grayscale images.

    :param max_abs: Largest absolute difference
    :param mean_abs: Mean absolute difference
    :param mismatched: Number of pixels which differ
    :param total: Number of pixels compared
    """
    max_abs: int
    mean_abs: float
    mismatched: int
    total: int

    @property
    def agreement(self) -> float:
        """Share of identical pixels, 0.0 - 1.0"""
        if self.total == 0:
            return 1.0
        return 1.0 - self.mismatched / self.total

    def __str__(self):
        return (
            f"max |diff| {self.max_abs}, mean |diff| {self.mean_abs:.4f}, "
            f"{self.mismatched} of {self.total} pixels differ "
            f"({self.agreement * 100:.2f}% identical)"
        )


def compare_grayscale(a: np.ndarray, b: np.ndarray) -> GrayDifference:
    """Compare two grayscale images of the same shape.

    Args:
        a: uint8 array (H, W)
        b: uint8 array (H, W)

    Returns:
        The difference statistics
    """
    if a.shape != b.shape:
        raise ValueError(f"Shape mismatch: {a.shape} vs {b.shape}")
    diff = np.abs(a.astype(np.int16) - b.astype(np.int16))
    total = int(diff.size)
    result = GrayDifference(
        max_abs=int(diff.max()) if total else 0,
        mean_abs=float(diff.mean()) if total else 0.0,
        mismatched=int(np.count_nonzero(diff)),
        total=total,
    )
    logger.debug(f"Grayscale comparison: {result}")
    return result


__all__ = [
    'bgr_to_gray', 'bgr_to_gray_vectorized', 'bgr_to_gray_fixed',
    'bgr_to_gray_threaded', 'KERNELS', 'get_kernel', 'GrayscaleKernel',
    'library_grayscale', 'GrayDifference', 'compare_grayscale',
]
