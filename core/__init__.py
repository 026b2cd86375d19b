"""Core module for the Wiener vs DnCNN denoising comparison."""

from .error_handlers import check_image, check_same_shape, error_context
from .exceptions import (
    ConfigurationError,
    DataError,
    DenoiseComparisonError,
    ImageLoadError,
    ModelError,
    ShapeMismatchError,
    ValidationError,
    WindowSizeError,
)
from .filters import adaptive_wiener_filter, estimate_noise_variance, local_statistics
from .interfaces import Denoiser
from .logging_config import LoggingManager, get_logger, setup_project_logging
from .metrics import ComparisonReport, MetricPair, compute_psnr, compute_ssim
from .noise import add_gaussian_noise

__version__ = "0.1.0"

__all__ = [
    "Denoiser",
    "adaptive_wiener_filter",
    "local_statistics",
    "estimate_noise_variance",
    "add_gaussian_noise",
    "compute_psnr",
    "compute_ssim",
    "MetricPair",
    "ComparisonReport",
    "error_context",
    "check_image",
    "check_same_shape",
    "LoggingManager",
    "get_logger",
    "setup_project_logging",
    "DenoiseComparisonError",
    "DataError",
    "ImageLoadError",
    "ModelError",
    "ConfigurationError",
    "ValidationError",
    "WindowSizeError",
    "ShapeMismatchError",
]
