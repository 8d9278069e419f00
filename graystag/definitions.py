"""
Framework definitions shared by the decoder, the library conversion route and
the viewer.
"""

from __future__ import annotations

from enum import Enum
from types import ModuleType


class ImsFramework(str, Enum):
    """
    The image library used to decode files and to run the library grayscale
    conversion.
    """

    PIL = "PIL"
    "Pillow. Decodes to RGB which is reversed to BGR after loading."
    CV = "CV"
    "OpenCV. Decodes directly to BGR."


_opencv_module: ModuleType | None = None


def get_opencv() -> ModuleType:
    """
    Returns the OpenCV module, importing it on first use.

    OpenCV is a heavy import which opens a connection to the GUI backend on
    some platforms, so modules which only need it for some code paths fetch it
    through this accessor.
    """
    global _opencv_module
    if _opencv_module is None:
        import cv2

        _opencv_module = cv2
    return _opencv_module
