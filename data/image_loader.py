"""
Reference image loading.

Images are decoded with Pillow, reduced to a single grayscale channel and
normalized to float64 in [0, 1] according to their bit depth.
"""

import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, UnidentifiedImageError
from skimage import data as skimage_data

from config.config import DEFAULT_IMAGE
from core.exceptions import ImageLoadError

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = [".tif", ".tiff", ".png", ".jpg", ".jpeg", ".bmp", ".pgm"]

_MODE_MAX = {
    "1": 1.0,
    "L": 255.0,
    "I;16": 65535.0,
    "I;16B": 65535.0,
    "I;16L": 65535.0,
    "I": 65535.0,
}


def pil_to_float(image: Image.Image) -> np.ndarray:
    """
    Convert a Pillow image to a float64 grayscale array in [0, 1].

    Args:
        image: Pillow image in any mode

    Returns:
        2-D float64 array
    """
    mode = image.mode

    if mode == "F":
        array = np.asarray(image, dtype=np.float64)
        return np.clip(array, 0.0, 1.0)

    if mode not in _MODE_MAX:
        # Palette, RGB(A), CMYK, LA, ... -> luminance
        image = image.convert("L")
        mode = "L"

    array = np.asarray(image, dtype=np.float64) / _MODE_MAX[mode]
    return np.clip(array, 0.0, 1.0)


def load_image(path: Union[str, Path]) -> np.ndarray:
    """
    Load a grayscale reference image normalized to [0, 1].

    The default ``cameraman.tif`` falls back to scikit-image's bundled copy of
    the same photograph when no local file exists.

    Args:
        path: Image file path

    Returns:
        2-D float64 array in [0, 1]

    Raises:
        ImageLoadError: If the file is missing, unsupported or undecodable
    """
    path = Path(path)

    if not path.exists():
        if path.name == DEFAULT_IMAGE and str(path) == DEFAULT_IMAGE:
            logger.info(f"{DEFAULT_IMAGE} not found locally, using skimage.data.camera()")
            return skimage_data.camera().astype(np.float64) / 255.0
        raise ImageLoadError(f"Image file not found: {path}")

    if not path.is_file():
        raise ImageLoadError(f"Image path is not a file: {path}")

    if path.suffix.lower() not in SUPPORTED_FORMATS:
        raise ImageLoadError(
            f"Unsupported image format '{path.suffix}'. "
            f"Supported: {', '.join(SUPPORTED_FORMATS)}"
        )

    try:
        with Image.open(path) as img:
            img.load()
            array = pil_to_float(img)
    except (UnidentifiedImageError, OSError) as e:
        raise ImageLoadError(f"Cannot read image {path}: {e}") from e

    if array.ndim != 2 or array.size == 0:
        raise ImageLoadError(f"Decoded image has unexpected shape {array.shape}")

    logger.info(
        f"Loaded {path.name}: {array.shape[1]}x{array.shape[0]}, "
        f"range [{array.min():.3f}, {array.max():.3f}]"
    )
    return array
