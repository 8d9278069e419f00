# graystag Filters Module
"""
Pixel conversion kernels operating on :class:`graystag.ImageBuffer` planes.
"""

from .grayscale import (
    bgr_to_gray,
    bgr_to_gray_vectorized,
    bgr_to_gray_fixed,
    bgr_to_gray_threaded,
    KERNELS,
    get_kernel,
    GrayscaleKernel,
    library_grayscale,
    GrayDifference,
    compare_grayscale,
)

__all__ = [
    "bgr_to_gray",
    "bgr_to_gray_vectorized",
    "bgr_to_gray_fixed",
    "bgr_to_gray_threaded",
    "KERNELS",
    "get_kernel",
    "GrayscaleKernel",
    "library_grayscale",
    "GrayDifference",
    "compare_grayscale",
]
