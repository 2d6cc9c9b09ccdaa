from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from ..models.line_item import LineItem
from ..models.pl_report import PlReport
from ..models.summary_data import STATISTIC_LINES, LineFigures, OperatingStatistics, SummaryData
from .cells import cell_number, cell_text, to_percentage_scale

"""Period P&L export parsing.

The export has free-form metadata rows (store, company, period, currency) above
a header row containing "Ledger Account"; every following non-blank row with a
ledger account becomes a LineItem. Columns are located by header keywords, so
column order and optional columns do not matter.

A sheet without a "Ledger Account" header yields an empty report (and a WARN
log line) instead of an exception; partial uploads are expected.
"""

__all__ = [
    "HEADER_KEYWORD",
    "ReportColumns",
    "clean_header_text",
    "find_header_row",
    "extract_metadata",
    "detect_columns",
    "period_from_file_name",
    "extract_summary",
    "parse_pl_grid",
]

logger = logging.getLogger(__name__)

HEADER_KEYWORD = "ledger account"
CURRENCIES = ("USD", "EUR", "GBP", "CAD")

_TAG_RE = re.compile(r"<[^>]*>")
_ENTITY_RE = re.compile(r"&[^;\s]+;")
_SPACE_RE = re.compile(r"\s+")
_PERIOD_RE = re.compile(r"p(\d{1,2})", re.IGNORECASE)


def _strip_markup(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    text = _TAG_RE.sub("", value)
    text = _ENTITY_RE.sub("", text)
    return _SPACE_RE.sub(" ", text).strip()


def clean_header_text(value: Any) -> str:
    """Lower-cased cell text with rich-text tags, entities and extra spaces removed.

    Non-string cells clean to "" (numbers never act as header labels).
    """
    return _strip_markup(value).lower()


def find_header_row(grid: Sequence[Sequence[Any]], keyword: str = HEADER_KEYWORD) -> int | None:
    needle = keyword.lower()
    for index, row in enumerate(grid):
        if any(needle in clean_header_text(cell) for cell in row):
            return index
    return None


def _format_period(number: str) -> str:
    return f"P{int(number):02d}"


def period_from_file_name(file_name: str) -> str | None:
    """"Kitchen P&L P7.xlsx" -> "P07"."""
    match = _PERIOD_RE.search(file_name)
    if match:
        return _format_period(match.group(1))
    return None


@dataclass(frozen=True)
class ReportMetadata:
    store_name: str = ""
    company: str = ""
    period: str = ""
    translation_currency: str = "USD"


def extract_metadata(grid: Sequence[Sequence[Any]], header_row: int) -> ReportMetadata:
    """Scan the rows above the header row for store / company / period / currency."""
    store_name = ""
    company = ""
    period = ""
    currency = "USD"
    for row in grid[:header_row]:
        cleaned = [clean_header_text(cell) for cell in row]
        row_text = " ".join(cleaned)
        if not row_text.strip():
            continue

        if "store" in row_text and not store_name:
            for cell, low in zip(row, cleaned):
                if low and "store" not in low:
                    store_name = _strip_markup(cell)
                    break

        if "company" in row_text and not company:
            for cell, low in zip(row, cleaned):
                if low and "company" not in low:
                    company = _strip_markup(cell)
                    break

        if "period" in row_text or _PERIOD_RE.search(row_text):
            for low in cleaned:
                match = _PERIOD_RE.search(low)
                if match:
                    period = _format_period(match.group(1))
                    break

        if "currency" in row_text or "translation" in row_text:
            for low in cleaned:
                if low.upper() in CURRENCIES:
                    currency = low.upper()
                    break

    return ReportMetadata(store_name=store_name, company=company, period=period, translation_currency=currency)


def _has(*words: str) -> Callable[[str], bool]:
    return lambda h: all(w in h for w in words)


def _has_not(include: tuple[str, ...], exclude: tuple[str, ...]) -> Callable[[str], bool]:
    return lambda h: all(w in h for w in include) and not any(w in h for w in exclude)


# 列属性 -> ヘッダ判定 (最初に一致した列を採用)
_COLUMN_RULES: dict[str, Callable[[str], bool]] = {
    "ledger_account": _has(HEADER_KEYWORD),
    "category": _has_not(("category",), ("subcategory",)),
    "subcategory": _has("subcategory"),
    "actuals": _has_not(("actuals",), ("%", "ytd")),
    "actuals_percentage": _has_not(("actuals", "%"), ("ytd",)),
    "plan": _has_not(("plan",), ("%", "ytd")),
    "plan_percentage": _has_not(("plan", "%"), ("ytd",)),
    "vfp": _has_not(("vfp",), ("ytd",)),
    "prior_year": _has_not(("prior year",), ("%", "ytd")),
    "prior_year_percentage": _has_not(("prior year", "%"), ("ytd",)),
    "actual_ytd": _has_not(("actual", "ytd"), ("%",)),
    "actual_ytd_percentage": _has("actual", "ytd", "%"),
    "plan_ytd": _has_not(("plan", "ytd"), ("%",)),
    "plan_ytd_percentage": _has("plan", "ytd", "%"),
    "vfp_ytd": _has("vfp", "ytd"),
    "prior_year_ytd": _has_not(("prior year", "ytd"), ("%",)),
    "prior_year_ytd_percentage": _has("prior year", "ytd", "%"),
}


@dataclass(frozen=True)
class ReportColumns:
    """Column index per LineItem attribute; None when the export lacks it."""
    indices: dict[str, int | None]

    def cell(self, row: Sequence[Any], attr: str) -> Any:
        index = self.indices.get(attr)
        if index is None or index >= len(row):
            return None
        return row[index]


def detect_columns(header: Sequence[Any]) -> ReportColumns:
    cleaned = [clean_header_text(h) for h in header]
    indices: dict[str, int | None] = {}
    for attr, rule in _COLUMN_RULES.items():
        indices[attr] = next((i for i, h in enumerate(cleaned) if h and rule(h)), None)
    return ReportColumns(indices=indices)


def _build_line_item(row: Sequence[Any], columns: ReportColumns, sort_order: int) -> LineItem | None:
    ledger_account = cell_text(columns.cell(row, "ledger_account"))
    if not ledger_account:
        return None
    numbers: dict[str, float] = {}
    for attr in _COLUMN_RULES:
        if attr in ("ledger_account", "category", "subcategory"):
            continue
        numbers[attr] = cell_number(columns.cell(row, attr), percentage=attr.endswith("_percentage"))
    return LineItem(
        ledger_account=ledger_account,
        category=cell_text(columns.cell(row, "category")),
        subcategory=cell_text(columns.cell(row, "subcategory")),
        sort_order=sort_order,
        **numbers,
    )


def _figures(item: LineItem | None) -> LineFigures | None:
    if item is None:
        return None
    return LineFigures(
        actuals=item.actuals,
        plan=item.plan,
        vfp=item.vfp,
        prior_year=item.prior_year,
        actual_ytd=item.actual_ytd,
        plan_ytd=item.plan_ytd,
        vfp_ytd=item.vfp_ytd,
        prior_year_ytd=item.prior_year_ytd,
    )


def _first(line_items: Sequence[LineItem], predicate: Callable[[str], bool]) -> LineItem | None:
    return next((item for item in line_items if predicate(item.name_key)), None)


def _contains(*needles: str) -> Callable[[str], bool]:
    return lambda name: any(n in name for n in needles)


def extract_summary(line_items: Sequence[LineItem]) -> SummaryData:
    """Derive SummaryData from a report's line items.

    Summary lines are located by name (first matching row wins); operating
    statistics by exact ledger name.
    """
    stats: dict[str, float | None] = {}
    for attr, (_, ledger_name, is_percentage) in STATISTIC_LINES.items():
        item = _first(line_items, lambda name, target=ledger_name: name == target)
        if item is None:
            stats[attr] = None
        else:
            stats[attr] = to_percentage_scale(item.actuals) if is_percentage else item.actuals

    return SummaryData(
        net_sales=_figures(_first(line_items, _contains("net sales"))),
        gross_sales=_figures(_first(line_items, _contains("gross sales"))),
        cost_of_goods_sold=_figures(_first(line_items, _contains("cost of goods sold"))),
        total_labor=_figures(_first(line_items, _contains("total labor"))),
        controllables=_figures(_first(line_items, _contains("total controllables"))),
        controllable_profit=_figures(_first(line_items, _contains("controllable profit"))),
        advertising=_figures(
            _first(
                line_items,
                lambda name: "advertising" in name and "corporate" not in name and "local store" not in name,
            )
        ),
        fixed_costs=_figures(_first(line_items, _contains("total fixed cost"))),
        restaurant_contribution=_figures(
            _first(line_items, _contains("restaurant contribution", "rests contribution"))
        ),
        cashflow=_figures(_first(line_items, _contains("cash flow", "cashflow"))),
        total_transactions=_figures(_first(line_items, lambda name: name == "total transactions")),
        check_average=_figures(
            _first(line_items, lambda name: name == "check avg - net" or "check average" in name)
        ),
        statistics=OperatingStatistics(**stats),
    )


def parse_pl_grid(
    grid: Sequence[Sequence[Any]],
    *,
    file_name: str | None = None,
    period_override: str | None = None,
) -> PlReport:
    """Parse one P&L sheet into a PlReport.

    Args:
        grid: Raw rows of the sheet
        file_name: Upload file name, used as the last resort for the period
        period_override: Period chosen by the uploader; wins over everything

    Returns:
        PlReport. line_items is empty when no "Ledger Account" header exists.
    """
    file_period = period_from_file_name(file_name) if file_name else None
    header_row = find_header_row(grid)
    if header_row is None:
        logger.warning("header row with 'Ledger Account' not found: %s", file_name or "<grid>")
        return PlReport(period=period_override or file_period or "")

    metadata = extract_metadata(grid, header_row)
    columns = detect_columns(grid[header_row])
    if columns.indices["ledger_account"] is None:  # pragma: no cover (header row implies the column)
        return PlReport(period=period_override or metadata.period or file_period or "")

    line_items: list[LineItem] = []
    sort_order = 0
    for row in grid[header_row + 1:]:
        # 空行は採番しない
        if all(cell_text(c) == "" for c in row):
            continue
        item = _build_line_item(row, columns, sort_order)
        sort_order += 1
        if item is not None:
            line_items.append(item)

    logger.debug("parsed %d line items (header row %d)", len(line_items), header_row)
    return PlReport(
        line_items=line_items,
        summary_data=extract_summary(line_items),
        store_name=metadata.store_name,
        company=metadata.company,
        period=period_override or metadata.period or file_period or "",
        translation_currency=metadata.translation_currency,
    )
