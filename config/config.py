"""Configuration classes for the denoising comparison.

This module centralizes configuration-related code:
- Base configuration class with dict/YAML conversion
- The comparison run configuration
"""

import logging
import math
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from core.exceptions import ConfigurationError
from core.filters import is_integer

logger = logging.getLogger(__name__)

DEFAULT_IMAGE = "cameraman.tif"


def _as_float(name: str, value: Any) -> float:
    """Convert a numeric option to a finite float."""
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(result):
        raise ConfigurationError(f"{name} must be finite, got {value!r}")
    return result


@dataclass
class BaseConfig:
    """Base configuration class with common functionality."""

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return asdict(self)

    def to_yaml(self) -> str:
        """Convert config to YAML string."""
        return yaml.safe_dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BaseConfig":
        """Create config from dictionary, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown {cls.__name__} keys: {', '.join(sorted(unknown))}"
            )
        return cls(**data)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "BaseConfig":
        """Create config from YAML string."""
        try:
            data = yaml.safe_load(yaml_str) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML configuration: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError("YAML configuration must be a mapping")
        return cls.from_dict(data)

    @classmethod
    def from_yaml_file(cls, path: Union[str, Path]) -> "BaseConfig":
        """Create config from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")
        return cls.from_yaml(path.read_text(encoding="utf-8"))


@dataclass
class ComparisonConfig(BaseConfig):
    """Configuration of one Wiener-vs-DnCNN comparison run."""

    # Input
    image_path: str = DEFAULT_IMAGE

    # Noise synthesis
    noise_sigma: float = 0.04
    noise_mean: float = 0.0
    seed: Optional[int] = None

    # Traditional filter
    window_size: Union[int, Tuple[int, int]] = 5
    noise_variance: Optional[float] = None
    # Hand the filter the true sigma^2 instead of estimating it
    use_oracle_noise_variance: bool = True

    # Learned denoiser
    ai_model: str = "dncnn"
    # KAIR model zoo name or URL; the blind model covers sigma up to 55/255
    ai_weights: str = "dncnn_gray_blind"
    model_path: Optional[str] = None
    device: str = "auto"

    def __post_init__(self):
        """Validate configuration."""
        # YAML leaves exponent floats such as 1e-2 as strings
        self.noise_sigma = _as_float("noise_sigma", self.noise_sigma)
        self.noise_mean = _as_float("noise_mean", self.noise_mean)
        if self.noise_variance is not None:
            self.noise_variance = _as_float("noise_variance", self.noise_variance)

        if self.seed is not None and not is_integer(self.seed):
            raise ConfigurationError(f"seed must be an integer, got {self.seed!r}")
        if self.seed is not None:
            self.seed = int(self.seed)

        for name in ("ai_model", "ai_weights", "device"):
            if not isinstance(getattr(self, name), str):
                raise ConfigurationError(
                    f"{name} must be a string, got {getattr(self, name)!r}"
                )
        for name in ("image_path", "model_path"):
            value = getattr(self, name)
            if value is None and name == "model_path":
                continue
            if not isinstance(value, (str, Path)):
                raise ConfigurationError(f"{name} must be a path, got {value!r}")
            setattr(self, name, str(value))

        if not isinstance(self.use_oracle_noise_variance, bool):
            raise ConfigurationError(
                "use_oracle_noise_variance must be true or false, "
                f"got {self.use_oracle_noise_variance!r}"
            )

        if self.noise_sigma < 0:
            raise ConfigurationError(
                f"noise_sigma must be >= 0, got {self.noise_sigma}"
            )

        if self.noise_variance is not None and self.noise_variance < 0:
            raise ConfigurationError(
                f"noise_variance must be >= 0, got {self.noise_variance}"
            )

        if isinstance(self.window_size, (list, tuple)):
            sides = tuple(self.window_size)
        else:
            sides = (self.window_size,)
        if len(sides) not in (1, 2) or any(
            not is_integer(s) or s < 1 or s % 2 == 0 for s in sides
        ):
            raise ConfigurationError(
                f"window_size must be an odd positive int or pair, got {self.window_size}"
            )
        sides = tuple(int(s) for s in sides)
        self.window_size = sides[0] if len(sides) == 1 else sides

        if self.ai_model.lower() not in ("dncnn", "identity"):
            raise ConfigurationError(
                f"ai_model must be 'dncnn' or 'identity', got {self.ai_model}"
            )

    def effective_noise_variance(self) -> Optional[float]:
        """
        Noise variance handed to the Wiener filter.

        An explicit ``noise_variance`` wins; otherwise the oracle policy uses
        the synthesis sigma squared, and ``None`` requests a blind estimate.
        """
        if self.noise_variance is not None:
            return self.noise_variance
        if self.use_oracle_noise_variance:
            return self.noise_sigma**2
        return None

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if isinstance(self.window_size, tuple):
            data["window_size"] = list(self.window_size)
        return data
