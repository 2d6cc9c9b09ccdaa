from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from ..models.grid import VALUE_FIELD, CellValue, NormalizationResult, NormalizedRecord
from .cells import cell_text, parse_value
from .headers import header_label, resolve_headers

"""Matrix normalization: raw grid -> semantically addressable records.

Combines header path resolution and cell parsing. Each data row becomes a
NormalizedRecord addressed as metrics[metric][period][field]. Columns without a
resolved metric/period are only kept in the raw passthrough.

When two columns resolve to the same (metric, period, field) path the later
column wins. This is accepted behaviour for exports with duplicated headers.
"""

__all__ = [
    "COUNT_HEADER",
    "NormalizeOptions",
    "normalize",
]

logger = logging.getLogger(__name__)

COUNT_HEADER = "Count"


@dataclass(frozen=True)
class NormalizeOptions:
    """Header block layout; all indices are 0-based grid rows."""
    metric_row: int = 0
    period_row: int = 1
    field_row: int = 2
    data_start: int = 3

    def validate(self) -> None:
        """Raise ValueError for layouts that can only be an integration mistake."""
        if self.data_start < 0:
            raise ValueError(f"data_start must be >= 0, got {self.data_start}")
        header_rows = (self.metric_row, self.period_row, self.field_row)
        if min(header_rows) < 0:
            raise ValueError(f"header rows must be >= 0, got {header_rows}")
        if self.data_start <= max(header_rows):
            raise ValueError(
                f"data_start ({self.data_start}) must come after the header rows {header_rows}"
            )


def _is_blank_row(row: Sequence[Any]) -> bool:
    return all(cell_text(cell) == "" for cell in row)


def _find_count_column(grid: Sequence[Sequence[Any]], metric_row: int) -> int | None:
    top = grid[metric_row]
    for index, raw in enumerate(top):
        if header_label(raw) == COUNT_HEADER:
            return index
    return None


def normalize(grid: Sequence[Sequence[Any]], options: NormalizeOptions | None = None) -> NormalizationResult:
    """Normalize a raw grid into records.

    Args:
        grid: Raw rows (header block followed by data rows)
        options: Header block layout (defaults: rows 0/1/2, data from row 3)

    Returns:
        NormalizationResult. records is empty when the grid has no data rows.

    Raises:
        ValueError: If options describe an impossible layout.
    """
    opts = options or NormalizeOptions()
    opts.validate()

    columns = resolve_headers(grid, opts.metric_row, opts.period_row, opts.field_row)
    if not columns or len(grid) <= opts.data_start:
        logger.debug("normalize: no data rows (rows=%d data_start=%d)", len(grid), opts.data_start)
        return NormalizationResult(columns=columns, records=[])

    count_index = _find_count_column(grid, opts.metric_row)

    records: list[NormalizedRecord] = []
    for row_index in range(opts.data_start, len(grid)):
        row = grid[row_index]
        if _is_blank_row(row):
            continue
        raw: dict[str, str] = {}
        metrics: dict[str, dict[str, dict[str, CellValue]]] = {}
        count: float | None = None
        for index, path in enumerate(columns):
            cell = row[index] if index < len(row) else None
            text = cell_text(cell)
            raw[path.column_key] = text
            if index == count_index:
                parsed = parse_value(cell)
                count = parsed if isinstance(parsed, float) else None
                continue
            if not path.is_semantic:
                continue
            periods = metrics.setdefault(path.metric, {})  # type: ignore[arg-type]
            fields = periods.setdefault(path.period, {})  # type: ignore[arg-type]
            fields[path.field or VALUE_FIELD] = CellValue(value=parse_value(cell), raw=text)
        records.append(NormalizedRecord(row_index=row_index, raw=raw, count=count, metrics=metrics))

    return NormalizationResult(columns=columns, records=records)
