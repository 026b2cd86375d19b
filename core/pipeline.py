"""
Denoising comparison pipeline.

Each stage is a function of its inputs only; images flow left to right

    load -> noise -> (Wiener filter, learned denoiser) -> metrics

and are never modified after they are produced.
"""

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from config.config import ComparisonConfig
from data.image_loader import load_image

from .baselines import WienerFilterBaseline, create_denoiser
from .error_handlers import check_image, check_same_shape, error_context
from .exceptions import ModelError
from .filters import validate_window_size
from .interfaces import Denoiser
from .metrics import AI, NOISY, TRADITIONAL, ComparisonReport, MetricPair, build_report
from .noise import add_gaussian_noise

logger = logging.getLogger(__name__)


@dataclass
class ComparisonResult:
    """Images and metrics of one comparison run."""

    original: np.ndarray
    noisy: np.ndarray
    traditional: np.ndarray
    ai: np.ndarray
    report: ComparisonReport
    config: ComparisonConfig

    def images(self) -> Dict[str, np.ndarray]:
        """Images in display order."""
        return OrderedDict(
            [
                ("Original Image", self.original),
                (NOISY, self.noisy),
                (TRADITIONAL, self.traditional),
                (AI, self.ai),
            ]
        )


def load_stage(config: ComparisonConfig) -> np.ndarray:
    with error_context("load image", logger):
        return load_image(config.image_path)


def noise_stage(
    original: np.ndarray,
    config: ComparisonConfig,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    with error_context("noise synthesis", logger):
        return add_gaussian_noise(
            original,
            sigma=config.noise_sigma,
            mean=config.noise_mean,
            seed=config.seed,
            rng=rng,
        )


def traditional_stage(noisy: np.ndarray, config: ComparisonConfig) -> np.ndarray:
    with error_context("Wiener filter", logger):
        baseline = WienerFilterBaseline(
            window_size=config.window_size,
            noise_variance=config.effective_noise_variance(),
        )
        return baseline.denoise(noisy)


def ai_stage(noisy: np.ndarray, denoiser: Denoiser) -> np.ndarray:
    with error_context(f"{denoiser.name} inference", logger):
        denoised = np.asarray(denoiser.denoise(noisy))
        if denoised.shape != noisy.shape:
            raise ModelError(
                f"{denoiser.name} changed the image shape: "
                f"{noisy.shape} -> {denoised.shape}"
            )
        return check_image(denoised, f"{denoiser.name} output")


def evaluate_stage(
    original: np.ndarray,
    noisy: np.ndarray,
    traditional: np.ndarray,
    ai: np.ndarray,
) -> ComparisonReport:
    with error_context("metric evaluation", logger):
        for name, image in ((NOISY, noisy), (TRADITIONAL, traditional), (AI, ai)):
            check_same_shape(image, original, name)

        return build_report(
            original,
            OrderedDict([(NOISY, noisy), (TRADITIONAL, traditional), (AI, ai)]),
        )


def run_comparison(
    config: ComparisonConfig,
    denoiser: Optional[Denoiser] = None,
    image: Optional[np.ndarray] = None,
    rng: Optional[np.random.Generator] = None,
) -> ComparisonResult:
    """
    Run the full comparison.

    Args:
        config: Run configuration
        denoiser: Learned denoiser; built from ``config`` when None
        image: Reference image; loaded from ``config.image_path`` when None
        rng: Random generator for the noise (overrides ``config.seed``)

    Returns:
        ComparisonResult with the four images and the metrics report
    """
    start_time = time.time()

    if image is None:
        original = load_stage(config)
    else:
        original = check_image(image, "reference image").copy()

    # Fail on a bad window before any work is done
    validate_window_size(config.window_size, original.shape)

    if denoiser is None:
        with error_context("denoiser setup", logger):
            denoiser = create_denoiser(
                config.ai_model,
                model_path=config.model_path,
                device=config.device,
                weights=config.ai_weights,
            )

    logger.info(
        f"Comparing on {original.shape[1]}x{original.shape[0]} image, "
        f"sigma={config.noise_sigma}, window={config.window_size}"
    )

    noisy = noise_stage(original, config, rng=rng)
    traditional = traditional_stage(noisy, config)
    ai = ai_stage(noisy, denoiser)
    report = evaluate_stage(original, noisy, traditional, ai)

    logger.info(f"Comparison finished in {time.time() - start_time:.2f}s")

    return ComparisonResult(
        original=original,
        noisy=noisy,
        traditional=traditional,
        ai=ai,
        report=report,
        config=config,
    )


def run_noise_sweep(
    config: ComparisonConfig,
    sigmas: Sequence[float],
    denoiser: Optional[Denoiser] = None,
    image: Optional[np.ndarray] = None,
    trials: int = 1,
) -> Dict[float, ComparisonReport]:
    """
    Repeat the comparison over several noise levels.

    Each sigma is run ``trials`` times and PSNR/SSIM are averaged per method.
    With a fixed ``config.seed`` every sigma sees the same underlying
    Gaussian draws, scaled by sigma.

    Args:
        config: Base configuration (its ``noise_sigma`` is replaced)
        sigmas: Noise standard deviations to test
        denoiser: Learned denoiser shared by all runs
        image: Reference image; loaded once from the config when None
        trials: Runs per sigma

    Returns:
        Mapping sigma -> averaged report, in the order of ``sigmas``
    """
    if trials < 1:
        raise ValueError(f"trials must be >= 1, got {trials}")

    if image is None:
        image = load_stage(config)

    if denoiser is None:
        with error_context("denoiser setup", logger):
            denoiser = create_denoiser(
                config.ai_model,
                model_path=config.model_path,
                device=config.device,
                weights=config.ai_weights,
            )

    results: Dict[float, ComparisonReport] = OrderedDict()

    for sigma in sigmas:
        sigma_config = ComparisonConfig.from_dict({**config.to_dict(), "noise_sigma": sigma})
        logger.info(f"Testing noise level: {sigma}")

        psnr: Dict[str, List[float]] = OrderedDict()
        ssim: Dict[str, List[float]] = OrderedDict()

        for trial in range(trials):
            seed = None if config.seed is None else config.seed + trial
            rng = np.random.default_rng(seed)
            result = run_comparison(sigma_config, denoiser=denoiser, image=image, rng=rng)
            for row in result.report:
                psnr.setdefault(row.method, []).append(row.metrics.psnr)
                ssim.setdefault(row.method, []).append(row.metrics.ssim)

        averaged = ComparisonReport()
        for method in psnr:
            averaged.add(
                method,
                MetricPair(float(np.mean(psnr[method])), float(np.mean(ssim[method]))),
            )
        results[sigma] = averaged

    return results
