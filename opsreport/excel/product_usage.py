from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Any

from ..models.product_usage import DEFAULT_GROUP, ProductUsage
from .cells import cell_number, cell_text, parse_value
from .pl_sheet import clean_header_text

"""Weekly product usage exports.

Header row = first row with a product number column ("Product Number",
"Product #", "Product No"). Week columns are headers like "W38" or "Week 38";
every other column is located by keyword. Rows without a product number are
skipped.
"""

__all__ = [
    "WEEK_HEADER_RE",
    "UsageColumns",
    "find_usage_header_row",
    "detect_usage_columns",
    "parse_usage_grid",
]

logger = logging.getLogger(__name__)

WEEK_HEADER_RE = re.compile(r"^w(?:eek)?\s*(\d{1,2})$")

_NUMBER_HEADERS = ("product number", "product #", "product no")


def _is_number_header(text: str) -> bool:
    return any(h in text for h in _NUMBER_HEADERS)


def find_usage_header_row(grid: Sequence[Sequence[Any]]) -> int | None:
    for index, row in enumerate(grid):
        if any(_is_number_header(clean_header_text(cell)) for cell in row):
            return index
    return None


class UsageColumns:
    """Column indices of one usage export header."""

    def __init__(self) -> None:
        self.product_number: int | None = None
        self.product_name: int | None = None
        self.unit: int | None = None
        self.conversion: int | None = None
        self.group: int | None = None
        self.weeks: dict[str, int] = {}  # "W38" -> column

    def cell(self, row: Sequence[Any], index: int | None) -> Any:
        if index is None or index >= len(row):
            return None
        return row[index]


def detect_usage_columns(header: Sequence[Any]) -> UsageColumns:
    """Locate columns by header text (first match per column wins)."""
    columns = UsageColumns()
    for index, raw in enumerate(header):
        text = clean_header_text(raw)
        if not text:
            continue
        week = WEEK_HEADER_RE.match(text)
        if week:
            columns.weeks.setdefault(f"W{int(week.group(1)):02d}", index)
        elif _is_number_header(text):
            if columns.product_number is None:
                columns.product_number = index
        elif "name" in text or "description" in text:
            if columns.product_name is None:
                columns.product_name = index
        elif "conversion" in text:
            if columns.conversion is None:
                columns.conversion = index
        elif "group" in text or "category" in text:
            if columns.group is None:
                columns.group = index
        elif text == "unit" or text == "uom":
            if columns.unit is None:
                columns.unit = index
    return columns


def _conversion(raw: Any) -> float | None:
    value = parse_value(raw)
    if isinstance(value, float) and value > 0:
        return value
    return None


def parse_usage_grid(grid: Sequence[Sequence[Any]]) -> list[ProductUsage]:
    """Build ProductUsage rows from a usage export grid.

    Returns:
        Products in row order; empty when no header row is found.
    """
    header_row = find_usage_header_row(grid)
    if header_row is None:
        logger.warning("product usage: no 'Product Number' header row")
        return []
    columns = detect_usage_columns(grid[header_row])
    if not columns.weeks:
        logger.warning("product usage: no week columns in header row %d", header_row)

    products: list[ProductUsage] = []
    for row in grid[header_row + 1:]:
        number = cell_text(columns.cell(row, columns.product_number))
        if not number:
            continue
        products.append(
            ProductUsage(
                product_number=number,
                product_name=cell_text(columns.cell(row, columns.product_name)),
                unit=cell_text(columns.cell(row, columns.unit)),
                weekly={label: cell_number(columns.cell(row, i)) for label, i in columns.weeks.items()},
                conversion=_conversion(columns.cell(row, columns.conversion)),
                group=cell_text(columns.cell(row, columns.group)) or DEFAULT_GROUP,
            )
        )
    logger.debug("product usage: %d products, weeks=%s", len(products), ",".join(columns.weeks))
    return products
