"""
DnCNN residual denoising network.

The layer layout follows the published grayscale DnCNN checkpoints
(``dncnn_gray_blind.pth``, ``dncnn_25.pth`` and friends from the KAIR model
zoo): a flat
``nn.Sequential`` stored under ``model`` holding

    Conv(1 -> 64) + ReLU
    (depth - 2) x [Conv(64 -> 64) + ReLU]
    Conv(64 -> 1)

with biases and batch normalization folded into the convolutions. The
network predicts the noise residual, which is subtracted from the input.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import torch
import torch.nn as nn

from core.exceptions import ModelError

logger = logging.getLogger(__name__)

KAIR_RELEASE_URL = "https://github.com/cszn/KAIR/releases/download/v1.0/{name}.pth"

# Grayscale checkpoints: blind (20 layers, sigma in [0, 55]/255) and
# fixed-level sigma = 15, 25, 50 (17 layers)
PRETRAINED_WEIGHTS = ("dncnn_gray_blind", "dncnn_15", "dncnn_25", "dncnn_50")
DEFAULT_WEIGHTS = "dncnn_gray_blind"


class DnCNN(nn.Module):
    """Residual-learning CNN for Gaussian denoising (Zhang et al., 2017)."""

    def __init__(
        self,
        in_channels: int = 1,
        out_channels: int = 1,
        features: int = 64,
        num_layers: int = 17,
    ):
        super().__init__()

        if num_layers < 2:
            raise ValueError(f"DnCNN needs at least 2 layers, got {num_layers}")

        self.num_layers = num_layers

        layers = [
            nn.Conv2d(in_channels, features, kernel_size=3, padding=1, bias=True),
            nn.ReLU(inplace=True),
        ]
        for _ in range(num_layers - 2):
            layers.append(
                nn.Conv2d(features, features, kernel_size=3, padding=1, bias=True)
            )
            layers.append(nn.ReLU(inplace=True))
        layers.append(
            nn.Conv2d(features, out_channels, kernel_size=3, padding=1, bias=True)
        )

        self.model = nn.Sequential(*layers)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        noise = self.model(x)
        return x - noise

    def init_weights(self) -> "DnCNN":
        """Kaiming initialization, for tests and untrained use."""
        for m in self.modules():
            if isinstance(m, nn.Conv2d):
                nn.init.kaiming_normal_(m.weight, mode="fan_out", nonlinearity="relu")
                nn.init.constant_(m.bias, 0)
        return self


def resolve_device(device: str = "auto") -> torch.device:
    """Map ``"auto"`` to CUDA when available, else CPU."""
    if device == "auto":
        device = "cuda" if torch.cuda.is_available() else "cpu"

    if device.startswith("cuda") and not torch.cuda.is_available():
        logger.warning("CUDA requested but not available, using CPU")
        device = "cpu"

    return torch.device(device)


def resolve_weights_url(weights: str) -> str:
    """
    Map a KAIR model zoo name (``"dncnn_gray_blind"``, ``"dncnn_25"``, ...)
    to its download URL. URLs are returned unchanged.
    """
    if weights in PRETRAINED_WEIGHTS:
        return KAIR_RELEASE_URL.format(name=weights)
    if weights.startswith(("http://", "https://", "file://")):
        return weights
    raise ModelError(
        f"Unknown DnCNN weights '{weights}'. "
        f"Supported: {', '.join(PRETRAINED_WEIGHTS)} or a URL"
    )


def _unwrap_state_dict(checkpoint) -> dict:
    """Accept a raw state dict or common checkpoint wrappers."""
    if isinstance(checkpoint, dict):
        for key in ("state_dict", "params", "model_state_dict"):
            if key in checkpoint and isinstance(checkpoint[key], dict):
                checkpoint = checkpoint[key]
                break
        # Checkpoints saved from nn.DataParallel
        return {
            (k[len("module.") :] if k.startswith("module.") else k): v
            for k, v in checkpoint.items()
        }
    raise ModelError(f"Unsupported checkpoint type: {type(checkpoint).__name__}")


def infer_num_layers(state_dict: dict) -> int:
    """Number of convolutions in a DnCNN state dict."""
    num_layers = sum(
        1
        for key, value in state_dict.items()
        if key.endswith(".weight") and getattr(value, "ndim", 0) == 4
    )
    if num_layers < 2:
        raise ModelError("Checkpoint does not contain DnCNN convolution weights")
    return num_layers


def load_pretrained_dncnn(
    model_path: Optional[Union[str, Path]] = None,
    weights: Optional[str] = DEFAULT_WEIGHTS,
    device: Union[str, torch.device] = "cpu",
    num_layers: Optional[int] = None,
) -> DnCNN:
    """
    Build a DnCNN and load pretrained weights.

    Args:
        model_path: Local checkpoint. Takes precedence over ``weights``.
        weights: Model zoo name or URL downloaded (and cached) through
            ``torch.hub``
        device: Target device
        num_layers: Expected network depth; inferred from the checkpoint
            when None

    Returns:
        Model in eval mode on ``device``

    Raises:
        ModelError: If no weights are given or they cannot be loaded
    """
    device = torch.device(device)

    try:
        if model_path is not None:
            model_path = Path(model_path)
            if not model_path.exists():
                raise FileNotFoundError(f"DnCNN checkpoint not found: {model_path}")
            logger.info(f"Loading DnCNN weights from {model_path}")
            checkpoint = torch.load(model_path, map_location=device)
        elif weights:
            url = resolve_weights_url(weights)
            logger.info(f"Loading DnCNN weights from {url}")
            checkpoint = torch.hub.load_state_dict_from_url(
                url, map_location=device, progress=False
            )
        else:
            raise ValueError("Either model_path or weights must be provided")

        state_dict = _unwrap_state_dict(checkpoint)
        if num_layers is None:
            num_layers = infer_num_layers(state_dict)

        model = DnCNN(num_layers=num_layers)
        model.load_state_dict(state_dict, strict=True)
    except ModelError:
        raise
    except Exception as e:
        raise ModelError(f"Failed to load pretrained DnCNN: {e}") from e

    model.to(device)
    model.eval()

    num_params = sum(p.numel() for p in model.parameters())
    logger.info(f"DnCNN ready on {device} ({num_layers} layers, {num_params:,} params)")

    return model
