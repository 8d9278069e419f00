"""
graystag - Manual and library grayscale conversion of padded BGR image buffers
"""

from .pixel_format import PixelFormat, PixelFormatTypes
from .definitions import ImsFramework, get_opencv
from .buffer import ImageBuffer, DEFAULT_ROW_ALIGNMENT
from .filters.grayscale import (
    bgr_to_gray,
    bgr_to_gray_vectorized,
    bgr_to_gray_fixed,
    bgr_to_gray_threaded,
    get_kernel,
    library_grayscale,
    compare_grayscale,
    GrayDifference,
)
from .loader import load_bgr, SUPPORTED_IMAGE_FILETYPES

__all__ = [
    # Buffers
    "ImageBuffer",
    "DEFAULT_ROW_ALIGNMENT",
    # Pixel formats
    "PixelFormat",
    "PixelFormatTypes",
    # Framework definitions
    "ImsFramework",
    "get_opencv",
    # Kernels
    "bgr_to_gray",
    "bgr_to_gray_vectorized",
    "bgr_to_gray_fixed",
    "bgr_to_gray_threaded",
    "get_kernel",
    # Library route and comparison
    "library_grayscale",
    "compare_grayscale",
    "GrayDifference",
    # Decoding
    "load_bgr",
    "SUPPORTED_IMAGE_FILETYPES",
]

__version__ = "0.1.0"
