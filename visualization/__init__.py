"""Console and matplotlib reporting of comparison results."""

from .report import (
    format_metrics_table,
    log_metrics_table,
    render_image_comparison,
    render_report,
    save_figure,
)

__all__ = [
    "format_metrics_table",
    "log_metrics_table",
    "render_report",
    "render_image_comparison",
    "save_figure",
]
