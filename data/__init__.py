"""
Data module for the denoising comparison.

This module contains:
- Grayscale reference image loading
"""

from .image_loader import SUPPORTED_FORMATS, load_image, pil_to_float

__all__ = [
    "load_image",
    "pil_to_float",
    "SUPPORTED_FORMATS",
]
