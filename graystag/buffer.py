"""
Implements :class:`.ImageBuffer`, a small immutable descriptor of a raster
plane whose rows may be padded to a stride.

A descriptor never owns pixel memory. It keeps a flat byte view of memory the
caller allocated (a ``bytearray``, a numpy array or anything else exporting
the buffer protocol) together with the geometry needed to address it::

    byte of pixel (row, col), band k = base[row * stride + col * channels + k]

Rows are usually padded so that each one starts at an aligned address, the
same way OpenCV's legacy ``IplImage`` aligned its ``widthStep`` to 4 bytes.
The padding bytes may hold anything and are never interpreted.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .pixel_format import PixelFormat

DEFAULT_ROW_ALIGNMENT = 4
"Row alignment in bytes of buffers created by ImageBuffer.allocate"

SUPPORTED_CHANNEL_COUNTS = (1, 3)
"Channel counts a descriptor may have"


@dataclass(frozen=True, eq=False)
class ImageBuffer:
    """
    Describes a single raster plane of 8 bit samples.

    The descriptor is validated on construction, so every pixel it addresses
    is guaranteed to lie inside ``base``. Raises a ValueError otherwise.
    """

    base: memoryview
    "Flat unsigned byte view. Index 0 is the first byte of the first row."
    width: int
    "Pixels per row"
    height: int
    "Number of rows"
    stride: int
    "Bytes from the start of one row to the start of the next"
    channels: int = 3
    "Samples per pixel, 1 (gray) or 3 (BGR)"
    bytes_per_channel: int = 1
    "Bytes per sample. Only 8 bit samples are supported."

    def __post_init__(self):
        try:
            view = memoryview(self.base)
        except TypeError as e:
            raise ValueError(
                f"base must support the buffer protocol, got {type(self.base).__name__}"
            ) from e
        if not view.c_contiguous:
            raise ValueError("base must be a C-contiguous buffer")
        view = view.cast("B")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Invalid image size {self.width}x{self.height}, both must be positive"
            )
        if self.channels not in SUPPORTED_CHANNEL_COUNTS:
            raise ValueError(
                f"Unsupported channel count {self.channels}, "
                f"expected one of {SUPPORTED_CHANNEL_COUNTS}"
            )
        if self.bytes_per_channel != 1:
            raise ValueError(
                f"Only 8 bit samples are supported, got {self.bytes_per_channel} "
                "bytes per channel"
            )
        if self.stride < self.row_bytes:
            raise ValueError(
                f"Stride {self.stride} is smaller than the row size {self.row_bytes}"
            )
        if len(view) < self.required_bytes:
            raise ValueError(
                f"Buffer of {len(view)} bytes is too small, "
                f"{self.required_bytes} bytes are addressed"
            )
        object.__setattr__(self, "base", view)

    @classmethod
    def allocate(
        cls,
        width: int,
        height: int,
        channels: int = 3,
        alignment: int = DEFAULT_ROW_ALIGNMENT,
        fill: int = 0,
    ) -> ImageBuffer:
        """
        Allocates a new buffer whose rows are padded to ``alignment`` bytes

        :param width: The width in pixels
        :param height: The height in pixels
        :param channels: The number of channels, 1 or 3
        :param alignment: The row alignment in bytes. 1 disables padding.
        :param fill: The value every byte, padding included, is set to
        :return: The descriptor of the new buffer
        """
        if alignment < 1:
            raise ValueError(f"Alignment must be positive, got {alignment}")
        if width <= 0 or height <= 0:
            raise ValueError(
                f"Invalid image size {width}x{height}, both must be positive"
            )
        row_bytes = width * channels
        stride = -(-row_bytes // alignment) * alignment
        data = bytearray([fill]) * (stride * height)
        return cls(data, width=width, height=height, stride=stride, channels=channels)

    @classmethod
    def wrap(cls, array: np.ndarray) -> ImageBuffer:
        """
        Creates a descriptor sharing the memory of a numpy array

        :param array: A C-contiguous uint8 array of shape (H, W) or (H, W, 3)
        :return: The descriptor. Writes through it modify ``array``.
        """
        channels = _channels_of(array)
        if not array.flags["C_CONTIGUOUS"]:
            raise ValueError("Only C-contiguous arrays can be wrapped")
        return cls(
            array,
            width=array.shape[1],
            height=array.shape[0],
            stride=array.strides[0],
            channels=channels,
        )

    @classmethod
    def from_pixels(
        cls,
        array: np.ndarray,
        alignment: int = DEFAULT_ROW_ALIGNMENT,
        fill: int = 0,
    ) -> ImageBuffer:
        """
        Allocates a padded buffer and copies the pixels of ``array`` into it

        :param array: A uint8 array of shape (H, W) or (H, W, 3)
        :param alignment: The row alignment in bytes
        :param fill: The value of the padding bytes
        :return: The descriptor of the new buffer
        """
        channels = _channels_of(array)
        buffer = cls.allocate(
            array.shape[1], array.shape[0], channels, alignment=alignment, fill=fill
        )
        buffer.view()[...] = array
        return buffer

    @property
    def row_bytes(self) -> int:
        """Bytes of pixel data in each row, padding excluded"""
        return self.width * self.channels * self.bytes_per_channel

    @property
    def padding(self) -> int:
        """Padding bytes at the end of each row"""
        return self.stride - self.row_bytes

    @property
    def required_bytes(self) -> int:
        """Bytes from the first pixel to the last pixel, inclusive"""
        return self.stride * (self.height - 1) + self.row_bytes

    @property
    def pixel_format(self) -> PixelFormat:
        """GRAY for single channel buffers, BGR otherwise"""
        return PixelFormat.GRAY if self.channels == 1 else PixelFormat.BGR

    @property
    def readonly(self) -> bool:
        return self.base.readonly

    def view(self) -> np.ndarray:
        """
        Returns a numpy view of the pixels, padding excluded.

        The view shares the buffer's memory. Its shape is (H, W) for single
        channel buffers and (H, W, 3) otherwise.
        """
        if self.channels == 1:
            shape = (self.height, self.width)
            strides = (self.stride, self.bytes_per_channel)
        else:
            shape = (self.height, self.width, self.channels)
            strides = (
                self.stride,
                self.channels * self.bytes_per_channel,
                self.bytes_per_channel,
            )
        return np.ndarray(shape, dtype=np.uint8, buffer=self.base, strides=strides)

    def padding_view(self) -> np.ndarray:
        """
        Returns a numpy view of the padding bytes with shape (H, padding).

        Requires the buffer to hold the padding of the last row as well.
        """
        if self.padding == 0:
            return np.empty((self.height, 0), dtype=np.uint8)
        if len(self.base) < self.stride * self.height:
            raise ValueError("The buffer does not cover the padding of the last row")
        return np.ndarray(
            (self.height, self.padding),
            dtype=np.uint8,
            buffer=self.base,
            offset=self.row_bytes,
            strides=(self.stride, 1),
        )

    def to_array(self) -> np.ndarray:
        """Returns a compact, C-contiguous copy of the pixels"""
        return np.ascontiguousarray(self.view())

    def __repr__(self):
        return (
            f"ImageBuffer({self.width}x{self.height}, {self.pixel_format.name}, "
            f"stride={self.stride})"
        )


def _channels_of(array: np.ndarray) -> int:
    if not isinstance(array, np.ndarray):
        raise ValueError(f"Expected a numpy array, got {type(array).__name__}")
    if array.dtype != np.uint8:
        raise ValueError(f"Expected uint8 dtype, got {array.dtype}")
    if array.ndim == 2:
        return 1
    if array.ndim == 3 and array.shape[2] == 3:
        return 3
    raise ValueError(
        f"Expected an image of shape (H, W) or (H, W, 3), got shape {array.shape}"
    )
