"""
Decodes image files into BGR pixel arrays.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Union

import filetype
import numpy as np
import PIL.Image

from .definitions import ImsFramework, get_opencv

logger = logging.getLogger(__name__)

SUPPORTED_IMAGE_FILETYPES = ["png", "bmp", "jpg", "jpeg", "gif", "tif", "tiff", "webp"]
"List of image file types which can be read"

SUPPORTED_IMAGE_FILETYPE_SET = set(SUPPORTED_IMAGE_FILETYPES)
"Set of image file types which can be read"

PathTypes = Union[str, Path]


def _load_from_file(path: Path) -> bytes | None:
    """
    Loads the raw bytes of a file.

    :param path: The file path
    :return: The file's content, None if it does not exist or can't be read
    """
    if not path.is_file():
        return None
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        logger.warning(f"Could not read {path}: {e}")
        return None


def detect_filetype(data: bytes) -> str | None:
    """
    Detects the image type of encoded image data.

    :param data: The encoded image
    :return: The file extension, e.g. "png". None if the data is no
        supported image.
    """
    kind = filetype.guess(data)
    if kind is None or kind.extension not in SUPPORTED_IMAGE_FILETYPE_SET:
        return None
    return kind.extension


def load_bgr(
    path: PathTypes, framework: ImsFramework | str = ImsFramework.CV
) -> np.ndarray | None:
    """
    Loads an image file as BGR pixels.

    :param path: The file path
    :param framework: The library used for decoding
    :return: A C-contiguous uint8 array of shape (H, W, 3), None if the file
        could not be opened or decoded
    """
    path = Path(path)
    framework = ImsFramework(framework)
    data = _load_from_file(path)
    if data is None:
        logger.warning(f"File {path} does not exist or is not readable")
        return None
    extension = detect_filetype(data)
    if extension is None:
        logger.warning(f"File {path} is not a supported image")
        return None
    logger.debug(f"Decoding {path} ({extension}, {len(data)} bytes) with {framework.value}")
    if framework == ImsFramework.CV:
        cv = get_opencv()
        pixels = cv.imdecode(np.frombuffer(data, dtype=np.uint8), cv.IMREAD_COLOR)
        if pixels is None:
            logger.warning(f"OpenCV could not decode {path}")
            return None
        return np.ascontiguousarray(pixels)
    try:
        with PIL.Image.open(io.BytesIO(data)) as image:
            rgb = np.asarray(image.convert("RGB"))
    except OSError as e:
        logger.warning(f"PIL could not decode {path}: {e}")
        return None
    return np.ascontiguousarray(rgb[:, :, ::-1])
