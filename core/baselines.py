"""
Denoising methods compared by the pipeline.

Methods included:
1. Classical: adaptive local-statistics Wiener filter
2. Deep learning: pretrained DnCNN
3. Identity: a no-op stand-in for the network in tests and dry runs
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np
import torch

from models.dncnn import DEFAULT_WEIGHTS, load_pretrained_dncnn, resolve_device

from .error_handlers import check_image
from .exceptions import ConfigurationError, ModelError
from .filters import WindowSize, adaptive_wiener_filter
from .interfaces import Denoiser

logger = logging.getLogger(__name__)


class WienerFilterBaseline(Denoiser):
    """Adaptive local-statistics Wiener filter."""

    def __init__(
        self,
        window_size: WindowSize = 5,
        noise_variance: Optional[float] = None,
    ):
        """
        Initialize Wiener filter baseline.

        Args:
            window_size: Odd neighborhood size
            noise_variance: Noise variance, or None for a blind estimate
        """
        super().__init__("Wiener")
        self.window_size = window_size
        self.noise_variance = noise_variance

    def denoise(self, image: np.ndarray) -> np.ndarray:
        return adaptive_wiener_filter(
            image, window_size=self.window_size, noise_variance=self.noise_variance
        )

    def get_parameters(self) -> Dict[str, Any]:
        """Get Wiener filter parameters."""
        return {
            "window_size": self.window_size,
            "noise_variance": self.noise_variance,
        }


class DnCNNBaseline(Denoiser):
    """Pretrained DnCNN denoiser."""

    def __init__(
        self,
        model_path: Optional[Union[str, Path]] = None,
        weights: Optional[str] = DEFAULT_WEIGHTS,
        device: str = "auto",
        num_layers: Optional[int] = None,
        model: Optional[torch.nn.Module] = None,
    ):
        """
        Initialize DnCNN baseline. The network is loaded eagerly so that a
        missing model fails before any image is processed.

        Args:
            model_path: Path to a pretrained checkpoint
            weights: Model zoo name or URL used when no path is given
            device: Device for computation ("auto", "cpu", "cuda")
            num_layers: Network depth (inferred from the checkpoint if None)
            model: Already constructed network (skips loading)
        """
        super().__init__("DnCNN")
        self.model_path = model_path
        self.weights = weights if model is None else None
        self.device = resolve_device(device)

        if model is None:
            model = load_pretrained_dncnn(
                model_path=model_path,
                weights=weights,
                device=self.device,
                num_layers=num_layers,
            )
        self.model = model.to(self.device).eval()
        self.num_layers = getattr(model, "num_layers", num_layers)

    def denoise(self, image: np.ndarray) -> np.ndarray:
        """
        Denoise using DnCNN.

        Args:
            image: Noisy image [H, W] in [0, 1]

        Returns:
            Denoised image [H, W] in [0, 1], float64
        """
        image = check_image(image)

        # torch cannot wrap views with negative strides
        image = np.ascontiguousarray(image)
        x = torch.from_numpy(image).float()[None, None].to(self.device)

        try:
            with torch.no_grad():
                denoised = self.model(x)
        except RuntimeError as e:
            raise ModelError(f"DnCNN inference failed: {e}") from e

        denoised = torch.clamp(denoised, 0, 1)
        result = denoised[0, 0].cpu().numpy().astype(np.float64)

        if result.shape != image.shape:
            raise ModelError(
                f"DnCNN returned shape {result.shape} for input {image.shape}"
            )

        return result

    def get_parameters(self) -> Dict[str, Any]:
        """Get DnCNN parameters."""
        if self.model_path:
            source = str(self.model_path)
        else:
            source = self.weights or "in-memory"
        return {
            "num_layers": self.num_layers,
            "device": str(self.device),
            "weights": source,
        }


class IdentityDenoiser(Denoiser):
    """Returns the input unchanged."""

    def __init__(self):
        super().__init__("Identity")

    def denoise(self, image: np.ndarray) -> np.ndarray:
        return check_image(image).copy()


DENOISER_KINDS = ("dncnn", "identity")


def create_denoiser(
    kind: str = "dncnn",
    model_path: Optional[Union[str, Path]] = None,
    device: str = "auto",
    weights: Optional[str] = DEFAULT_WEIGHTS,
) -> Denoiser:
    """
    Create the learned denoiser used as the AI candidate.

    Args:
        kind: "dncnn" or "identity"
        model_path: Optional DnCNN checkpoint path
        device: Device for computation
        weights: DnCNN model zoo name or URL used when no path is given

    Returns:
        Denoiser instance
    """
    kind = kind.lower()
    if kind == "dncnn":
        return DnCNNBaseline(model_path=model_path, weights=weights, device=device)
    if kind == "identity":
        logger.warning("Using identity denoiser; AI metrics will equal the noisy input")
        return IdentityDenoiser()
    raise ConfigurationError(
        f"Unknown denoiser '{kind}'. Supported: {', '.join(DENOISER_KINDS)}"
    )
