from __future__ import annotations

from ..models.processing_result import ProcessingResult

"""SUMMARY line rendering.

Format:
SUMMARY files={total}/{total} success={success} failed={failed} reports={reports}
surveys={surveys} products={products} line_items={line_items} elapsed_sec={elapsed}
"""

__all__ = [
    "format_seconds",
    "render_summary_line",
]


def format_seconds(value: float) -> str:
    """Render seconds without scientific notation; integral values without ".0"."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(total_files: int, result: ProcessingResult) -> str:
    """Render the SUMMARY line of an import run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2025, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2025, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     success_files=2, failed_files=0, pl_reports=1, surveys=1, product_usages=0,
        ...     total_line_items=120, start_time=start, end_time=end, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(2, result)
        'SUMMARY files=2/2 success=2 failed=0 reports=1 surveys=1 products=0 line_items=120 elapsed_sec=2'
    """
    return (
        f"SUMMARY files={total_files}/{total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"reports={result.pl_reports} "
        f"surveys={result.surveys} "
        f"products={result.product_usages} "
        f"line_items={result.total_line_items} "
        f"elapsed_sec={format_seconds(result.elapsed_seconds)}"
    )
