"""
Error handling utilities for the denoising comparison pipeline.

Stage failures are logged with their context and then propagated unchanged;
the pipeline has no recovery or retry policy.
"""

import logging
import traceback
from contextlib import contextmanager
from functools import wraps
from typing import Callable, Optional

import numpy as np

from .exceptions import ShapeMismatchError, ValidationError


@contextmanager
def error_context(
    context_name: str,
    logger: Optional[logging.Logger] = None,
):
    """Context manager logging errors raised inside a named pipeline stage."""
    ctx_logger = logger or logging.getLogger(__name__)

    try:
        ctx_logger.debug(f"Entering context: {context_name}")
        yield
        ctx_logger.debug(f"Exiting context: {context_name}")
    except Exception as e:
        ctx_logger.error(f"Error in context {context_name}: {type(e).__name__}: {e}")
        ctx_logger.debug(f"Traceback: {traceback.format_exc()}")
        raise


def logged_operation(
    operation_name: str = "",
    logger: Optional[logging.Logger] = None,
) -> Callable:
    """Decorator wrapping a function call in :func:`error_context`."""

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            op_name = operation_name or func.__name__
            op_logger = logger or logging.getLogger(func.__module__)
            with error_context(op_name, logger=op_logger):
                return func(*args, **kwargs)

        return wrapper

    return decorator


def check_image(image: np.ndarray, name: str = "image") -> np.ndarray:
    """
    Validate that ``image`` is a finite 2-D grayscale array.

    Args:
        image: Array to check
        name: Name used in error messages

    Returns:
        The image as a float64 array (copied only if a conversion is needed)
    """
    image = np.asarray(image)
    if image.ndim != 2:
        raise ValidationError(
            f"{name} must be a 2-D grayscale array, got shape {image.shape}"
        )
    if image.size == 0:
        raise ValidationError(f"{name} is empty")
    image = image.astype(np.float64, copy=False)
    if not np.all(np.isfinite(image)):
        raise ValidationError(f"{name} contains NaN or Inf values")
    return image


def check_same_shape(
    candidate: np.ndarray, reference: np.ndarray, context: str = ""
) -> None:
    """Raise :class:`ShapeMismatchError` unless both arrays share a shape."""
    if candidate.shape != reference.shape:
        where = f" in {context}" if context else ""
        raise ShapeMismatchError(
            f"Shape mismatch{where}: {candidate.shape} vs {reference.shape}"
        )
