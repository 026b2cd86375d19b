"""
Models module for the denoising comparison.

This module contains:
- DnCNN network definition
- Pretrained weight loading
"""

from .dncnn import (
    DEFAULT_WEIGHTS,
    PRETRAINED_WEIGHTS,
    DnCNN,
    load_pretrained_dncnn,
    resolve_device,
    resolve_weights_url,
)

__all__ = [
    "DnCNN",
    "DEFAULT_WEIGHTS",
    "PRETRAINED_WEIGHTS",
    "load_pretrained_dncnn",
    "resolve_device",
    "resolve_weights_url",
]
