"""
Test the grayscale kernels.

Tests verify:
- ITU-R BT.601 luma coefficients are applied and truncated toward zero
- Row padding of source and destination is neither read nor written
- All kernels agree with an independent exact reference
"""

from decimal import Decimal

import numpy as np
import pytest

from graystag import ImageBuffer
from graystag.filters.grayscale import (
    KERNELS,
    bgr_to_gray,
    bgr_to_gray_fixed,
    bgr_to_gray_threaded,
    bgr_to_gray_vectorized,
    get_kernel,
)

EXACT_KERNELS = [bgr_to_gray, bgr_to_gray_vectorized, bgr_to_gray_threaded]


def reference_gray(b: int, g: int, r: int) -> int:
    """Exact decimal evaluation of the luma formula, truncated"""
    luma = Decimal("0.299") * r + Decimal("0.587") * g + Decimal("0.114") * b
    return int(luma)


def convert(kernel, pixels: np.ndarray, alignment: int = 4) -> np.ndarray:
    src = ImageBuffer.from_pixels(pixels, alignment=alignment)
    dst = ImageBuffer.allocate(src.width, src.height, channels=1, alignment=alignment)
    kernel(src, dst)
    return dst.to_array()


def single_pixel(b: int, g: int, r: int) -> int:
    src = ImageBuffer(bytearray([b, g, r]), width=1, height=1, stride=3)
    dst = ImageBuffer(bytearray(1), width=1, height=1, stride=1, channels=1)
    bgr_to_gray(src, dst)
    return dst.base[0]


class TestGrayscaleKernel:
    """Test the pixel walking kernel."""

    def test_single_pixel_example(self):
        """[10, 20, 30] -> floor(21.85) = 21"""
        assert single_pixel(10, 20, 30) == 21

    @pytest.mark.parametrize(
        "bgr, expected",
        [
            ((255, 0, 0), 29),
            ((0, 255, 0), 149),
            ((0, 0, 255), 76),
            ((128, 128, 128), 128),
            ((255, 255, 255), 255),
            ((0, 0, 0), 0),
        ],
    )
    def test_primaries(self, bgr, expected):
        """Pure colors, mid gray and the extremes."""
        assert single_pixel(*bgr) == expected

    def test_single_pixel_matches_formula(self, rng):
        """Random single pixels match the exact formula."""
        for b, g, r in rng.integers(0, 256, size=(200, 3)).tolist():
            assert single_pixel(b, g, r) == reference_gray(b, g, r)

    def test_two_pixel_row(self):
        """A red and a green pixel in one row."""
        src = ImageBuffer(bytearray([0, 0, 255, 0, 255, 0]), width=2, height=1, stride=6)
        dst = ImageBuffer.allocate(2, 1, channels=1)
        bgr_to_gray(src, dst)
        assert list(dst.base[:2]) == [76, 149]

    def test_source_padding_ignored(self):
        """Two rows with one padding byte each, the padding must not leak."""
        src = ImageBuffer(
            bytearray([255, 0, 0, 0xEE, 0, 0, 0, 0xEE]), width=1, height=2, stride=4
        )
        dst = ImageBuffer.allocate(1, 2, channels=1)
        assert dst.stride == 4
        bgr_to_gray(src, dst)
        assert dst.base[0] == 29
        assert dst.base[dst.stride] == 0

    def test_all_zero(self):
        """Black stays black."""
        pixels = np.zeros((7, 9, 3), dtype=np.uint8)
        assert np.all(convert(bgr_to_gray, pixels) == 0)

    def test_all_white(self):
        """White stays white."""
        pixels = np.full((7, 9, 3), 255, dtype=np.uint8)
        assert np.all(convert(bgr_to_gray, pixels) == 255)

    def test_idempotent(self, bgr_pixels):
        """Running the kernel twice yields identical bytes."""
        src = ImageBuffer.from_pixels(bgr_pixels)
        dst = ImageBuffer.allocate(src.width, src.height, channels=1)
        bgr_to_gray(src, dst)
        first = bytes(dst.base)
        bgr_to_gray(src, dst)
        assert bytes(dst.base) == first

    def test_stride_independence(self, bgr_pixels, rng):
        """Different source strides and padding contents give the same result."""
        tight = convert(bgr_to_gray, bgr_pixels, alignment=1)
        src = ImageBuffer.from_pixels(bgr_pixels, alignment=64)
        src.padding_view()[...] = rng.integers(0, 256, size=src.padding_view().shape)
        dst = ImageBuffer.allocate(src.width, src.height, channels=1, alignment=16)
        bgr_to_gray(src, dst)
        assert np.array_equal(dst.view(), tight)

    @pytest.mark.parametrize("kernel", list(KERNELS.values()), ids=list(KERNELS))
    def test_destination_padding_untouched(self, kernel, bgr_pixels):
        """A canary pattern in the destination padding survives the call."""
        src = ImageBuffer.from_pixels(bgr_pixels)
        dst = ImageBuffer.allocate(src.width, src.height, channels=1, alignment=8, fill=0xA5)
        assert dst.padding > 0
        kernel(src, dst)
        assert np.all(dst.padding_view() == 0xA5)

    @pytest.mark.parametrize("width", [1, 2, 15, 16, 17, 640])
    def test_pattern_rows_match_reference(self, width):
        """Rows of (c, 2c, 3c) pixels match the exact reference."""
        columns = np.arange(width)
        row = np.stack([columns % 256, 2 * columns % 256, 3 * columns % 256], axis=1)
        pixels = np.repeat(row[np.newaxis], 3, axis=0).astype(np.uint8)
        expected = np.array(
            [reference_gray(b, g, r) for b, g, r in row.tolist()], dtype=np.uint8
        )
        result = convert(bgr_to_gray, pixels)
        for line in result:
            assert np.array_equal(line, expected)
        assert np.array_equal(convert(bgr_to_gray_vectorized, pixels), result)


class TestCompanionKernels:
    """Test the vectorized, threaded and fixed point kernels."""

    @pytest.mark.parametrize("kernel", EXACT_KERNELS[1:])
    def test_matches_pixel_kernel(self, kernel, bgr_pixels):
        """Exact kernels produce the same bytes as the pixel walk."""
        assert np.array_equal(
            convert(kernel, bgr_pixels), convert(bgr_to_gray, bgr_pixels)
        )

    def test_mid_gray_exact(self):
        """Mid gray is not lost to binary rounding in the vectorized kernel."""
        pixels = np.full((2, 3, 3), 128, dtype=np.uint8)
        assert np.all(convert(bgr_to_gray_vectorized, pixels) == 128)

    @pytest.mark.parametrize("workers", [1, 2, 3, 7, 64])
    def test_threaded_worker_counts(self, workers, rng):
        """Every row is written exactly once for any band split."""
        pixels = rng.integers(0, 256, size=(10, 13, 3), dtype=np.uint8)
        src = ImageBuffer.from_pixels(pixels)
        dst = ImageBuffer.allocate(src.width, src.height, channels=1, fill=0xA5)
        bgr_to_gray_threaded(src, dst, workers=workers)
        assert np.array_equal(dst.view(), convert(bgr_to_gray_vectorized, pixels))
        assert np.all(dst.padding_view() == 0xA5)

    def test_fixed_point_within_one(self, rng):
        """The fixed point variant is at most 1 away from the exact result."""
        pixels = rng.integers(0, 256, size=(64, 256, 3), dtype=np.uint8)
        exact = convert(bgr_to_gray_vectorized, pixels).astype(np.int16)
        fixed = convert(bgr_to_gray_fixed, pixels).astype(np.int16)
        assert np.abs(exact - fixed).max() <= 1

    def test_fixed_point_primaries(self):
        """Pure blue loses one step, white stays white."""
        pixels = np.array([[[255, 0, 0], [255, 255, 255], [0, 0, 0]]], dtype=np.uint8)
        assert convert(bgr_to_gray_fixed, pixels).tolist() == [[28, 255, 0]]


def test_get_kernel():
    """Kernels are looked up by name."""
    assert get_kernel("pixel") is bgr_to_gray
    assert get_kernel("vectorized") is bgr_to_gray_vectorized
    with pytest.raises(ValueError):
        get_kernel("simd")
