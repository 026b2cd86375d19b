"""
Image quality metrics and the comparison report.

PSNR and SSIM are delegated to scikit-image; SSIM uses the Gaussian-weighted
settings of Wang et al.
"""

import json
import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterator, List, Mapping

import numpy as np
from skimage.metrics import peak_signal_noise_ratio, structural_similarity

from .error_handlers import check_image, check_same_shape

logger = logging.getLogger(__name__)

NOISY = "Noisy Image"
TRADITIONAL = "Traditional (Wiener)"
AI = "AI (DnCNN)"

# Report rows are always listed in this order
METHOD_ORDER = (NOISY, TRADITIONAL, AI)

# Wang et al. use an 11-tap Gaussian window with sigma 1.5
SSIM_WINDOW = 11
SSIM_SIGMA = 1.5


def compute_psnr(
    candidate: np.ndarray, reference: np.ndarray, data_range: float = 1.0
) -> float:
    """
    Peak signal-to-noise ratio in dB.

    Returns ``inf`` for identical images.
    """
    candidate = check_image(candidate, "candidate")
    reference = check_image(reference, "reference")
    check_same_shape(candidate, reference, "PSNR")

    if np.array_equal(candidate, reference):
        return float("inf")
    return float(
        peak_signal_noise_ratio(reference, candidate, data_range=data_range)
    )


def _ssim_window(shape) -> int:
    # Small images get the largest odd window that fits
    side = min(shape)
    win = min(SSIM_WINDOW, side if side % 2 == 1 else side - 1)
    return max(win, 1)


def compute_ssim(
    candidate: np.ndarray, reference: np.ndarray, data_range: float = 1.0
) -> float:
    """Structural similarity index (Gaussian-weighted, sigma 1.5)."""
    candidate = check_image(candidate, "candidate")
    reference = check_image(reference, "reference")
    check_same_shape(candidate, reference, "SSIM")

    if min(candidate.shape) < 3:
        # skimage needs a window of at least 3
        return 1.0 if np.array_equal(candidate, reference) else float("nan")

    return float(
        structural_similarity(
            candidate,
            reference,
            data_range=data_range,
            win_size=_ssim_window(candidate.shape),
            gaussian_weights=True,
            sigma=SSIM_SIGMA,
            use_sample_covariance=False,
        )
    )


@dataclass(frozen=True)
class MetricPair:
    """PSNR/SSIM of one candidate against the reference."""

    psnr: float
    ssim: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class MethodResult:
    method: str
    metrics: MetricPair


@dataclass
class ComparisonReport:
    """Ordered list of per-method metric pairs."""

    results: List[MethodResult] = field(default_factory=list)

    def add(self, method: str, metrics: MetricPair) -> None:
        if method in self.methods:
            raise ValueError(f"Method '{method}' already in report")
        self.results.append(MethodResult(method, metrics))

    @property
    def methods(self) -> List[str]:
        return [r.method for r in self.results]

    @property
    def psnr_values(self) -> List[float]:
        return [r.metrics.psnr for r in self.results]

    @property
    def ssim_values(self) -> List[float]:
        return [r.metrics.ssim for r in self.results]

    def __getitem__(self, method: str) -> MetricPair:
        for r in self.results:
            if r.method == method:
                return r.metrics
        raise KeyError(method)

    def __iter__(self) -> Iterator[MethodResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "methods": [
                {"method": r.method, **r.metrics.to_dict()} for r in self.results
            ]
        }

    def to_json(self) -> str:
        """Serialize to JSON (infinite PSNR is written as the string "inf")."""
        data = self.to_dict()
        for row in data["methods"]:
            for key in ("psnr", "ssim"):
                if not math.isfinite(row[key]):
                    row[key] = str(row[key])
        return json.dumps(data, indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComparisonReport":
        report = cls()
        for row in data["methods"]:
            report.add(
                row["method"], MetricPair(float(row["psnr"]), float(row["ssim"]))
            )
        return report


def evaluate_pair(
    candidate: np.ndarray, reference: np.ndarray, data_range: float = 1.0
) -> MetricPair:
    """Compute PSNR and SSIM of a candidate against the reference."""
    candidate = check_image(candidate, "candidate")
    reference = check_image(reference, "reference")
    check_same_shape(candidate, reference, "metric evaluation")

    return MetricPair(
        psnr=compute_psnr(candidate, reference, data_range),
        ssim=compute_ssim(candidate, reference, data_range),
    )


def build_report(
    reference: np.ndarray, candidates: Mapping[str, np.ndarray]
) -> ComparisonReport:
    """
    Evaluate every candidate against the reference.

    Args:
        reference: Clean reference image
        candidates: Method name -> image, evaluated in mapping order

    Returns:
        Report with one row per candidate, in insertion order
    """
    report = ComparisonReport()
    for method, image in candidates.items():
        metrics = evaluate_pair(image, reference)
        logger.debug(f"{method}: PSNR={metrics.psnr:.4f} dB, SSIM={metrics.ssim:.4f}")
        report.add(method, metrics)
    return report
