"""Abstract base classes and interfaces for the core components."""

from abc import ABC, abstractmethod
from typing import Any, Dict

import numpy as np


class Denoiser(ABC):
    """
    Image-to-image denoising interface.

    Implementations receive a 2-D grayscale image with values in [0, 1] and
    must return a new array of the same shape and compatible range. The
    input is never modified.
    """

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def denoise(self, image: np.ndarray) -> np.ndarray:
        """Denoise a single grayscale image."""
        pass

    def get_parameters(self) -> Dict[str, Any]:
        """Get method-specific parameters."""
        return {}

    def __call__(self, image: np.ndarray) -> np.ndarray:
        return self.denoise(image)

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v!r}" for k, v in self.get_parameters().items())
        return f"{type(self).__name__}({params})"
