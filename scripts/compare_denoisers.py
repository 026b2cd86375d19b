#!/usr/bin/env python
"""
Compare an adaptive Wiener filter with a pretrained DnCNN on Gaussian noise.

Loads a grayscale reference image, corrupts it with additive Gaussian noise,
denoises it with both methods, logs PSNR/SSIM for the noisy, Wiener and
DnCNN images and shows a table with two bar charts.

Usage:
    python scripts/compare_denoisers.py
    python scripts/compare_denoisers.py --image cameraman.tif --sigma 0.04 --window 5
    python scripts/compare_denoisers.py --estimate-noise --seed 0 --no-show
    python scripts/compare_denoisers.py --config configs/comparison.yaml
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import matplotlib.pyplot as plt

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.config import ComparisonConfig
from core.exceptions import DenoiseComparisonError
from core.logging_config import setup_project_logging
from core.pipeline import run_comparison
from visualization.report import (
    log_metrics_table,
    render_image_comparison,
    render_report,
    save_figure,
)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compare adaptive Wiener filtering with a pretrained DnCNN"
    )

    # Input arguments
    parser.add_argument(
        "--config", type=str, default=None, help="YAML configuration file"
    )
    parser.add_argument("--image", type=str, default=None, help="Reference image path")

    # Noise arguments
    parser.add_argument(
        "--sigma", type=float, default=None, help="Gaussian noise std (default 0.04)"
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")

    # Filter arguments
    parser.add_argument(
        "--window",
        type=int,
        nargs="+",
        default=None,
        help="Wiener neighborhood: one odd size or two (rows cols)",
    )
    noise_group = parser.add_mutually_exclusive_group()
    noise_group.add_argument(
        "--noise-variance",
        type=float,
        default=None,
        help="Noise variance handed to the Wiener filter",
    )
    noise_group.add_argument(
        "--estimate-noise",
        action="store_true",
        help="Estimate the noise variance from the image instead of using sigma^2",
    )

    # Model arguments
    parser.add_argument(
        "--ai-model",
        type=str,
        choices=["dncnn", "identity"],
        default=None,
        help="Learned denoiser (identity is a no-op for dry runs)",
    )
    parser.add_argument(
        "--ai-weights",
        type=str,
        default=None,
        help="DnCNN weights: dncnn_gray_blind (default), dncnn_15, dncnn_25, "
        "dncnn_50 or a URL",
    )
    parser.add_argument(
        "--model-path", type=str, default=None, help="Local DnCNN checkpoint"
    )
    parser.add_argument(
        "--device", type=str, default=None, help="Device: auto, cpu or cuda"
    )

    # Output arguments
    parser.add_argument(
        "--no-show", action="store_true", help="Do not open figure windows"
    )
    parser.add_argument(
        "--save-dir", type=str, default=None, help="Write figures as PNG here"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ComparisonConfig:
    """Merge the optional YAML file with command line overrides."""
    if args.config:
        base = ComparisonConfig.from_yaml_file(args.config).to_dict()
    else:
        base = ComparisonConfig().to_dict()

    overrides = {
        "image_path": args.image,
        "noise_sigma": args.sigma,
        "seed": args.seed,
        "noise_variance": args.noise_variance,
        "ai_model": args.ai_model,
        "ai_weights": args.ai_weights,
        "model_path": args.model_path,
        "device": args.device,
    }
    if args.window is not None:
        if len(args.window) == 1:
            overrides["window_size"] = args.window[0]
        else:
            overrides["window_size"] = list(args.window)
    if args.estimate_noise:
        overrides["use_oracle_noise_variance"] = False
        base["noise_variance"] = None

    base.update({k: v for k, v in overrides.items() if v is not None})
    return ComparisonConfig.from_dict(base)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logger = setup_project_logging(level=args.log_level)

    if args.no_show:
        plt.switch_backend("Agg")

    try:
        config = build_config(args)
        logger.info(f"Configuration: {config.to_dict()}")

        result = run_comparison(config)
    except DenoiseComparisonError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1

    log_metrics_table(result.report, logger)

    images_fig = render_image_comparison(result)
    metrics_fig = render_report(result.report)

    if args.save_dir:
        save_dir = Path(args.save_dir)
        save_figure(images_fig, save_dir / "denoising_comparison.png")
        save_figure(metrics_fig, save_dir / "quality_metrics.png")

    if args.no_show:
        plt.close("all")
    else:
        plt.show()

    return 0


if __name__ == "__main__":
    sys.exit(main())
