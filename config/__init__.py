"""Configuration for the denoising comparison."""

from .config import DEFAULT_IMAGE, BaseConfig, ComparisonConfig

__all__ = ["BaseConfig", "ComparisonConfig", "DEFAULT_IMAGE"]
