from __future__ import annotations

from dataclasses import dataclass

"""Config dataclasses for the report import tool.

Built by opsreport.config.loader from the YAML file after schema validation;
defaults are applied by the loader, so every field here is concrete.
"""

__all__ = [
    "PlReportConfig",
    "SurveyConfig",
    "ProductUsageConfig",
    "DashboardConfig",
]


@dataclass(frozen=True)
class PlReportConfig:
    """Which files are period P&L exports."""
    pattern: str = "*.xlsx"  # glob within source_directory
    sheet: str | None = None  # None -> first sheet


@dataclass(frozen=True)
class SurveyConfig:
    """Which files are survey exports and where their header block sits.

    Row indices are 0-based grid rows.
    """
    pattern: str = "*.csv"
    layout: str = "matrix"  # matrix (3 header rows) | table (single header row)
    metric_row: int = 0
    period_row: int = 1
    field_row: int = 2
    data_start: int = 3
    skip_rows: int = 1  # table layout only
    skip_columns: int = 3  # table layout only


@dataclass(frozen=True)
class ProductUsageConfig:
    """Which files are weekly product usage exports."""
    pattern: str = "products*.xlsx"
    sheet: str | None = None  # None -> first sheet


@dataclass(frozen=True)
class DashboardConfig:
    """Root configuration object for one import run."""
    source_directory: str  # Directory scanned for report files
    output_directory: str  # JSON documents are written here
    pl_reports: PlReportConfig
    surveys: SurveyConfig
    prior_year_directory: str | None = None  # 前年同期レポートの置き場所 (任意)
    products: ProductUsageConfig | None = None  # None -> usage exports are not scanned
