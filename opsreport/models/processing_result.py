from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Processing result models for the report import tool.

Aggregates per-file outcomes into the counters printed on the SUMMARY line.
"""

__all__ = [
    "FileKind",
    "FileStat",
    "ProcessingResult",
]


class FileKind:
    PL_REPORT = "pl_report"
    SURVEY = "survey"
    PRODUCT_USAGE = "product_usage"


@dataclass(frozen=True)
class FileStat:
    """Per-file processing statistics."""
    file_name: str
    kind: str  # FileKind value
    status: str  # success / failed
    line_items: int  # P&L line items, survey records or products produced
    elapsed_seconds: float
    output_path: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results of one import run."""
    success_files: int
    failed_files: int
    pl_reports: int  # 取り込めた P&L レポート数
    surveys: int  # 取り込めたサーベイ数
    product_usages: int  # 取り込めた商品使用量ファイル数
    total_line_items: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None
