from __future__ import annotations

import csv
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.grid import RawGrid

"""Spreadsheet reader: workbook / CSV -> raw grids.

Sheets are read without a header row (header=None) so the parsers see the
export exactly as laid out, metadata rows included. Cell values are kept as
delivered (numbers stay numbers); NaN/NaT become None.
"""

__all__ = [
    "EXCEL_SUFFIXES",
    "CSV_SUFFIXES",
    "UnsupportedFileError",
    "read_grids",
    "frame_to_grid",
]

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = (".xlsx", ".xlsm", ".xls")
CSV_SUFFIXES = (".csv",)


class UnsupportedFileError(Exception):
    """Raised when a file is neither a workbook nor a CSV export."""


def _to_cell(value: Any) -> Any:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):  # 配列系は欠損判定しない
        return value
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


def frame_to_grid(df: pd.DataFrame) -> RawGrid:
    """Convert a header-less DataFrame to a grid, dropping trailing blank rows."""
    grid: RawGrid = [[_to_cell(v) for v in row] for row in df.astype(object).to_numpy().tolist()]
    while grid and all(cell is None for cell in grid[-1]):
        grid.pop()
    return grid


def _read_csv_grid(path: Path) -> RawGrid:
    # 行ごとに列数が異なる出力があるため最大列数を先に求める
    with path.open(newline="", encoding="utf-8-sig") as f:
        width = max((len(row) for row in csv.reader(f)), default=0)
    if width == 0:
        return []
    # 文字列のまま読む (数値解釈は cells 側)
    df = pd.read_csv(
        path,
        header=None,
        names=list(range(width)),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=False,
        encoding="utf-8-sig",
    )
    return frame_to_grid(df)


def read_grids(path: Path | str, target_sheets: Iterable[str] | None = None) -> dict[str, RawGrid]:
    """Read a workbook or CSV file returning raw grids keyed by sheet name.

    Parameters
    ----------
    path: ファイルパス (.xlsx / .xlsm / .xls / .csv)
    target_sheets: 対象シート制限 (None なら全シート)。CSV では無視

    Raises
    ------
    UnsupportedFileError: 拡張子が対象外
    FileNotFoundError: ファイルが存在しない
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in EXCEL_SUFFIXES + CSV_SUFFIXES:
        raise UnsupportedFileError(f"unsupported file type: {path.name}")
    if not path.exists():
        raise FileNotFoundError(path)

    if suffix in CSV_SUFFIXES:
        return {path.stem: _read_csv_grid(path)}

    wanted = None if target_sheets is None else {str(s) for s in target_sheets}
    grids: dict[str, RawGrid] = {}
    with pd.ExcelFile(path) as xls:
        for name in xls.sheet_names:
            if wanted is not None and str(name) not in wanted:
                continue
            df = xls.parse(name, header=None)
            grids[str(name)] = frame_to_grid(df)
            logger.debug("read sheet %s!%s rows=%d", path.name, name, len(grids[str(name)]))
    return grids
