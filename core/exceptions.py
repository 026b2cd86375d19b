"""
Custom exceptions for the denoising comparison project.

This module defines domain-specific exceptions that provide clear
error messages and enable proper error handling throughout the pipeline.
"""


class DenoiseComparisonError(Exception):
    """Base exception for all project-specific errors."""

    pass


class DataError(DenoiseComparisonError):
    """Raised when data loading or processing fails."""

    pass


class ImageLoadError(DataError):
    """Raised when the reference image is missing or cannot be decoded."""

    pass


class ModelError(DenoiseComparisonError):
    """Raised when the pretrained denoiser cannot be loaded or run."""

    pass


class ConfigurationError(DenoiseComparisonError):
    """Raised when configuration is invalid."""

    pass


class ValidationError(DenoiseComparisonError):
    """Raised when validation checks fail."""

    pass


class WindowSizeError(ValidationError):
    """Raised when a filter neighborhood is even, non-positive or too large."""

    pass


class ShapeMismatchError(ValidationError):
    """Raised when two images that must share a shape do not."""

    pass
