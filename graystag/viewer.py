"""
Displays the color image and both grayscale results in OpenCV windows, or
stores them as PNG files when no display is available.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import numpy as np

from .config import Settings, settings as default_settings
from .definitions import get_opencv

logger = logging.getLogger(__name__)

COLOR_WINDOW = "color"
"Window showing the decoded color image"
GRAY_WINDOW = "gray"
"Window showing the library's grayscale conversion"
MYGRAY_WINDOW = "mygray"
"Window showing the kernel's grayscale conversion"


def _named_images(
    color: np.ndarray, library_gray: np.ndarray, manual_gray: np.ndarray
) -> list[tuple[str, np.ndarray]]:
    return [
        (COLOR_WINDOW, color),
        (GRAY_WINDOW, library_gray),
        (MYGRAY_WINDOW, manual_gray),
    ]


def show_comparison(
    color: np.ndarray,
    library_gray: np.ndarray,
    manual_gray: np.ndarray,
    settings: Settings | None = None,
) -> int:
    """
    Shows the three images side by side until the user presses a key.

    The windows are destroyed before returning, also if showing them failed.

    :param color: The BGR source image
    :param library_gray: The grayscale image computed by the image library
    :param manual_gray: The grayscale image computed by the kernel
    :param settings: Provides the window positions. The global settings by
        default.
    :return: The code of the key which was pressed
    """
    settings = settings or default_settings
    positions = {
        COLOR_WINDOW: settings.COLOR_WINDOW_POS,
        GRAY_WINDOW: settings.GRAY_WINDOW_POS,
        MYGRAY_WINDOW: settings.MYGRAY_WINDOW_POS,
    }
    cv = get_opencv()
    flags = cv.WINDOW_NORMAL | cv.WINDOW_KEEPRATIO
    try:
        for name, pixels in _named_images(color, library_gray, manual_gray):
            x, y = positions[name]
            cv.namedWindow(name, flags)
            cv.moveWindow(name, x, y)
            cv.imshow(name, np.ascontiguousarray(pixels))
        logger.info("Press any key in one of the windows to exit")
        key = cv.waitKey(0)
    finally:
        cv.destroyAllWindows()
    return key


def save_comparison(
    output_dir: Union[str, Path],
    color: np.ndarray,
    library_gray: np.ndarray,
    manual_gray: np.ndarray,
) -> list[Path]:
    """
    Writes the three images as color.png, gray.png and mygray.png.

    :param output_dir: The target directory, created if missing
    :return: The written file paths
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    cv = get_opencv()
    written = []
    for name, pixels in _named_images(color, library_gray, manual_gray):
        path = output_dir / f"{name}.png"
        if not cv.imwrite(str(path), np.ascontiguousarray(pixels)):
            raise OSError(f"Could not write {path}")
        logger.info(f"Saved {path}")
        written.append(path)
    return written
