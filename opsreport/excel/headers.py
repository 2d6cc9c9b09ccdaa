from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..models.grid import HeaderPath
from .cells import PLACEHOLDER, cell_text

"""Header path resolution for three-row header blocks.

Survey exports carry a header block of three rows: metric group label, period
label, field label (e.g. "Score" vs "n"). Group and period labels are written
once over a run of merged cells, so the label of a column is the last
non-empty label seen scanning left to right.
"""

__all__ = [
    "column_key",
    "grid_width",
    "header_label",
    "resolve_headers",
]


def column_key(index: int) -> str:
    return f"_{index}"


def grid_width(grid: Sequence[Sequence[Any]]) -> int:
    return max((len(row) for row in grid), default=0)


def header_label(raw: Any) -> str | None:
    """Header cell text, or None for blanks and the "-" placeholder."""
    text = cell_text(raw)
    if text == "" or text == PLACEHOLDER:
        return None
    return text


def resolve_headers(
    grid: Sequence[Sequence[Any]],
    metric_row: int,
    period_row: int,
    field_row: int,
) -> list[HeaderPath]:
    """Build one HeaderPath per grid column.

    Args:
        grid: Raw rows
        metric_row: Index of the metric group label row
        period_row: Index of the period label row
        field_row: Index of the field label row

    Returns:
        HeaderPaths in column order. Empty when the grid does not reach all
        three header rows.

    Raises:
        ValueError: If any header row index is negative.
    """
    for name, index in (("metric_row", metric_row), ("period_row", period_row), ("field_row", field_row)):
        if index < 0:
            raise ValueError(f"{name} must be >= 0, got {index}")
    if max(metric_row, period_row, field_row) >= len(grid):
        return []

    metric_cells = grid[metric_row]
    period_cells = grid[period_row]
    field_cells = grid[field_row]

    paths: list[HeaderPath] = []
    current_metric: str | None = None
    current_period: str | None = None
    for index in range(grid_width(grid)):
        metric = header_label(metric_cells[index]) if index < len(metric_cells) else None
        if metric is not None:
            current_metric = metric
        period = header_label(period_cells[index]) if index < len(period_cells) else None
        if period is not None:
            current_period = period
        field = header_label(field_cells[index]) if index < len(field_cells) else None
        paths.append(
            HeaderPath(
                column_key=column_key(index),
                metric=current_metric,
                period=current_period,
                field=field,
            )
        )
    return paths
