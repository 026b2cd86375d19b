"""
Presentation of comparison results: console table and matplotlib figures.
"""

import logging
import math
from pathlib import Path
from typing import List, Optional, Union

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

from core.metrics import ComparisonReport

logger = logging.getLogger(__name__)

TITLE = "--- Image Quality Metrics Comparison ---"
METHOD_WIDTH = 22


def _fmt(value: float, decimals: int, width: int = 8) -> str:
    if math.isinf(value):
        return f"{'inf' if value > 0 else '-inf':>{width}}"
    return f"{value:{width}.{decimals}f}"


def format_metrics_table(report: ComparisonReport) -> List[str]:
    """
    Fixed-width metrics table, one string per line.

    Values use 4 decimals; infinite PSNR is written as ``inf``.
    """
    lines = [
        TITLE,
        f"{'Method':<{METHOD_WIDTH}}| {'PSNR (dB)':<10}| SSIM",
        f"{'-' * METHOD_WIDTH}|{'-' * 11}|{'-' * 10}",
    ]
    for row in report:
        lines.append(
            f"{row.method:<{METHOD_WIDTH}}| {_fmt(row.metrics.psnr, 4)}  "
            f"| {_fmt(row.metrics.ssim, 4)}"
        )
    return lines


def log_metrics_table(
    report: ComparisonReport, log: Optional[logging.Logger] = None
) -> None:
    log = log or logger
    for line in format_metrics_table(report):
        log.info(line)


def _bar_heights(values: List[float]) -> List[float]:
    # Infinite PSNR is drawn at the tallest finite bar
    finite = [v for v in values if math.isfinite(v)]
    ceiling = max(finite) if finite else 0.0
    return [v if math.isfinite(v) else ceiling for v in values]


def _annotate(ax, bars, values: List[float], decimals: int) -> None:
    for bar, value in zip(bars, values):
        label = "inf" if math.isinf(value) else f"{round(value, decimals):.{decimals}f}"
        ax.text(
            bar.get_x() + bar.get_width() / 2,
            bar.get_height(),
            label,
            ha="center",
            va="bottom",
            fontsize=10,
        )


def render_report(report: ComparisonReport) -> Figure:
    """
    Figure with the metrics table on top and PSNR/SSIM bar charts below.

    Args:
        report: Comparison report

    Returns:
        Matplotlib figure (not shown)
    """
    if len(report) == 0:
        raise ValueError("Cannot render an empty report")

    methods = report.methods
    psnr_vals = report.psnr_values
    ssim_vals = report.ssim_values

    fig = plt.figure(figsize=(12, 8), facecolor="white")
    if fig.canvas.manager is not None:
        fig.canvas.manager.set_window_title("Image Quality Metrics")
    grid = fig.add_gridspec(2, 2, height_ratios=[1, 3])

    # Table with the numbers
    ax_table = fig.add_subplot(grid[0, :])
    ax_table.axis("off")
    cell_text = [
        [m, _fmt(p, 4).strip(), _fmt(s, 4).strip()]
        for m, p, s in zip(methods, psnr_vals, ssim_vals)
    ]
    stripes = [
        ["#f2f2f2"] * 3 if i % 2 else ["white"] * 3 for i in range(len(methods))
    ]
    table = ax_table.table(
        cellText=cell_text,
        colLabels=["Method", "PSNR (dB)", "SSIM"],
        cellColours=stripes,
        loc="center",
        cellLoc="center",
    )
    table.auto_set_font_size(False)
    table.set_fontsize(12)
    table.scale(1, 1.5)

    # Bar chart for PSNR
    ax_psnr = fig.add_subplot(grid[1, 0])
    bars = ax_psnr.bar(methods, _bar_heights(psnr_vals), color="#3498db", alpha=0.8)
    ax_psnr.set_title("PSNR (dB)", fontsize=13, fontweight="bold")
    ax_psnr.set_ylabel("dB")
    ax_psnr.grid(axis="y", alpha=0.3)
    _annotate(ax_psnr, bars, psnr_vals, 2)

    # Bar chart for SSIM
    ax_ssim = fig.add_subplot(grid[1, 1])
    bars = ax_ssim.bar(
        methods, np.nan_to_num(ssim_vals, nan=0.0), color="#2ecc71", alpha=0.8
    )
    ax_ssim.set_title("SSIM", fontsize=13, fontweight="bold")
    ax_ssim.set_ylabel("Value")
    ax_ssim.set_ylim(0, 1)
    ax_ssim.grid(axis="y", alpha=0.3)
    _annotate(ax_ssim, bars, ssim_vals, 4)

    for ax in (ax_psnr, ax_ssim):
        plt.setp(ax.xaxis.get_majorticklabels(), rotation=15, ha="right")

    fig.tight_layout()
    return fig


def render_image_comparison(result) -> Figure:
    """1x4 panel: original, noisy, Wiener and DnCNN images."""
    images = result.images()

    fig, axes = plt.subplots(1, len(images), figsize=(4 * len(images), 4.5))
    for ax, (title, image) in zip(axes, images.items()):
        ax.imshow(image, cmap="gray", vmin=0.0, vmax=1.0)
        ax.set_title(title)
        ax.axis("off")

    fig.suptitle("Gaussian Noise Denoising Comparison", fontsize=14, fontweight="bold")
    fig.tight_layout()
    return fig


def save_figure(fig: Figure, path: Union[str, Path], dpi: int = 150) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    logger.info(f"Figure saved: {path}")
    return path
