"""
Defines the pixel formats a :class:`.ImageBuffer` can describe.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Union


class PixelFormat(IntEnum):
    """
    Enumeration of the supported pixel formats.

    All formats store 8 bit unsigned samples. Note that OpenCV decodes color
    images as BGR, so the first byte of a pixel is the blue sample.
    """

    RGB = 0
    "Red, green and blue, one byte each"
    BGR = 5
    "Blue, green and red, one byte each. OpenCV's default color layout"
    GRAY = 10
    "A single luminance byte"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            name = _ALIASES.get(value.lower())
            if name is not None:
                return cls[name]
        return None

    @classmethod
    def from_pil(cls, pil_mode: str) -> PixelFormat | None:
        """
        Returns the pixel format matching a PIL image mode

        :param pil_mode: The PIL mode, e.g. "RGB" or "L"
        :return: The pixel format, None if there is no equivalent
        """
        return {"RGB": cls.RGB, "L": cls.GRAY}.get(pil_mode.upper())

    def to_pil(self) -> str | None:
        """
        Returns the PIL mode of this format. None for BGR which PIL can not
        represent directly.
        """
        return {PixelFormat.RGB: "RGB", PixelFormat.GRAY: "L"}.get(self)

    @property
    def channels(self) -> int:
        """The number of samples per pixel"""
        return len(self.band_names)

    @property
    def band_names(self) -> list[str]:
        """Short names of the bands, in memory order"""
        return {
            PixelFormat.RGB: ["R", "G", "B"],
            PixelFormat.BGR: ["B", "G", "R"],
            PixelFormat.GRAY: ["G"],
        }[self]

    @property
    def full_band_names(self) -> list[str]:
        """Full names of the bands, in memory order"""
        full = {"R": "Red", "G": "Green", "B": "Blue"}
        if self == PixelFormat.GRAY:
            return ["Gray"]
        return [full[name] for name in self.band_names]


_ALIASES = {"rgb": "RGB", "bgr": "BGR", "gray": "GRAY", "g": "GRAY", "l": "GRAY"}

PixelFormatTypes = Union[PixelFormat, str, int]
"Values which can be converted to a PixelFormat"
