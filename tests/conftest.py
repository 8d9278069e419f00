"""
Pytest fixtures for graystag tests
"""

import numpy as np
import PIL.Image
import pytest


@pytest.fixture
def rng() -> np.random.Generator:
    """
    Returns a seeded random generator so failures are reproducible
    """
    return np.random.default_rng(1234)


@pytest.fixture
def bgr_pixels(rng) -> np.ndarray:
    """
    Returns a random BGR image with an odd width so rows need padding
    """
    return rng.integers(0, 256, size=(23, 37, 3), dtype=np.uint8)


@pytest.fixture
def image_file(tmp_path, bgr_pixels):
    """
    Writes bgr_pixels as a lossless PNG file and returns its path
    """
    path = tmp_path / "image.png"
    rgb = np.ascontiguousarray(bgr_pixels[:, :, ::-1])
    PIL.Image.fromarray(rgb).save(path)
    return path
