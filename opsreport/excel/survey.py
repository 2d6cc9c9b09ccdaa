from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Any

from ..models.grid import CellValue, NormalizationResult, NormalizedRecord
from ..models.survey import SurveyMetrics, SurveySummary, SurveyTable
from .cells import PLACEHOLDER, cell_text

"""Guest experience survey exports.

Two export flavours exist:

* single-header CSV (metric name per row, one column per date range), handled
  by parse_survey_table() / extract_survey_metrics()
* three-row-header matrix export, normalized by opsreport.excel.matrix and
  condensed by summarize_survey()
"""

__all__ = [
    "MAX_HEADER_LENGTH",
    "normalize_survey_header",
    "parse_survey_table",
    "extract_survey_metrics",
    "summarize_survey",
]

logger = logging.getLogger(__name__)

MAX_HEADER_LENGTH = 50

_COMPARISON_RE = re.compile(r"Comparison:\s*([^,]+)")
_LAST_YEAR_RE = re.compile(r"Last Year[^:]*:\s*([^,]+)")
_SPACE_RE = re.compile(r"\s+")


def normalize_survey_header(text: str) -> str:
    """Shorten an export column header.

    "Comparison: 11/30/2025 - 12/27/2025, Last Year ..." -> "11/30/2025 - 12/27/2025"
    "Last Year (Same Period): 11/30/2024 - 12/27/2024"   -> "Prior Year: 11/30/2024 - 12/27/2024"
    """
    normalized = text.strip()
    if "Comparison:" in normalized:
        match = _COMPARISON_RE.search(normalized)
        if match:
            return match.group(1).strip() or "Current Period"
    if "Last Year" in normalized:
        match = _LAST_YEAR_RE.search(normalized)
        if match:
            return f"Prior Year: {match.group(1).strip()}"

    normalized = _SPACE_RE.sub(" ", normalized)
    if len(normalized) > MAX_HEADER_LENGTH:
        normalized = normalized[: MAX_HEADER_LENGTH - 3] + "..."
    return normalized


def parse_survey_table(
    grid: Sequence[Sequence[Any]],
    skip_rows: int = 1,
    skip_columns: int = 3,
) -> SurveyTable:
    """Build a SurveyTable from a single-header survey export.

    Args:
        grid: Raw rows; row 0 is the header row
        skip_rows: Leading data rows to drop (the export repeats a sub-header)
        skip_columns: Leading columns to drop (store / region identifiers)

    Returns:
        SurveyTable with normalized headers. Blank cells become "-".

    Raises:
        ValueError: If skip_rows or skip_columns is negative.
    """
    if skip_rows < 0 or skip_columns < 0:
        raise ValueError(f"skip_rows/skip_columns must be >= 0, got {skip_rows}/{skip_columns}")
    if not grid:
        return SurveyTable(headers=[], rows=[])

    all_headers = [normalize_survey_header(cell_text(h)) for h in grid[0]]
    data_rows = [row for row in grid[1:] if any(cell_text(c) for c in row)]

    headers = all_headers[skip_columns:]
    rows: list[dict[str, str]] = []
    for row in data_rows[skip_rows:]:
        record: dict[str, str] = {}
        for index, header in enumerate(all_headers):
            if index < skip_columns:
                continue
            text = cell_text(row[index]) if index < len(row) else ""
            record[header] = text or PLACEHOLDER
        rows.append(record)
    return SurveyTable(headers=headers, rows=rows)


def _value_column(headers: Sequence[str]) -> str | None:
    for header in headers[1:]:
        lower = header.lower()
        if "prior" not in lower and "last year" not in lower:
            return header
    return headers[1] if len(headers) > 1 else None


def extract_survey_metrics(table: SurveyTable) -> SurveyMetrics:
    """Map metric name -> current period value.

    The first column holds metric names; the value column is the first later
    column that is not a prior-year comparison.
    """
    if not table.rows or not table.headers:
        return SurveyMetrics()
    name_column = table.headers[0]
    value_column = _value_column(table.headers)
    if value_column is None:
        return SurveyMetrics()

    values: dict[str, str] = {}
    overall = taste = accuracy = None
    for row in table.rows:
        name = row.get(name_column, "").strip()
        value = row.get(value_column, PLACEHOLDER)
        if not name or name == PLACEHOLDER or value == PLACEHOLDER:
            continue
        values[name] = value
        lower = name.lower()
        if "overall" in lower and "satisfaction" in lower:
            overall = value
        elif ("taste" in lower or "food" in lower) and "overall" not in lower:
            taste = value
        elif "accuracy" in lower or ("order" in lower and "taste" not in lower):
            accuracy = value
    return SurveyMetrics(
        values=values,
        overall_satisfaction=overall,
        taste_of_food=taste,
        accuracy_of_orders=accuracy,
    )


def _first_value(record: NormalizedRecord, keyword: str) -> float | str | None:
    for metric, periods in record.metrics.items():
        if keyword not in metric.lower():
            continue
        for fields in periods.values():
            cell: CellValue | None = next(iter(fields.values()), None)
            if cell is not None:
                return cell.value
    return None


def summarize_survey(result: NormalizationResult) -> SurveySummary:
    """Headline count / taste / accuracy scores from the last record.

    The export ends with the store total row, which is the one reported.
    """
    if not result.records:
        return SurveySummary()
    last = result.records[-1]
    summary = SurveySummary(
        count=last.count,
        taste_of_food=_first_value(last, "taste"),
        accuracy_of_order=_first_value(last, "accuracy"),
    )
    logger.debug("survey summary from row %d: %s", last.row_index, summary)
    return summary
