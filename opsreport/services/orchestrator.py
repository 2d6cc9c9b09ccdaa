from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..excel.matrix import NormalizeOptions, normalize
from ..excel.pl_sheet import find_header_row, parse_pl_grid
from ..excel.product_usage import find_usage_header_row, parse_usage_grid
from ..excel.reader import UnsupportedFileError, read_grids
from ..excel.survey import extract_survey_metrics, parse_survey_table, summarize_survey
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.config_models import DashboardConfig
from ..models.grid import RawGrid
from ..models.pl_report import PlReport
from ..models.processing_result import FileKind, FileStat, ProcessingResult
from .classifier import classify
from .metrics import compute_metrics, metrics_to_dict
from .product_usage import summarize_by_group
from .progress import ProgressTracker

"""Import run orchestration.

process_all() scans the source directory, parses every P&L export, survey
export and weekly product usage export, derives classification and KPIs, and
writes one JSON document per input file into the output directory. A failing
file is recorded in the error log and counted; it never aborts the run. Only a
missing / unreadable source directory is fatal (ProcessingError).
"""

__all__ = [
    "ProcessingError",
    "FileProcessingError",
    "scan_files",
    "process_all",
]

logger = logging.getLogger(__name__)

FILE_LEVEL_SHEET = "<FILE_LEVEL>"


class ProcessingError(Exception):
    """Fatal error that prevents the whole run."""


class FileProcessingError(Exception):
    """A single file could not be turned into a document."""

    def __init__(self, error_type: str, message: str, *, sheet: str = FILE_LEVEL_SHEET) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.sheet = sheet


def scan_files(directory: Path, pattern: str) -> list[Path]:
    """Files in directory matching pattern (non-recursive, sorted by name).

    Raises:
        ProcessingError: If directory doesn't exist or can't be read
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")
    try:
        # Excel のロックファイル (~$xxx.xlsx) は除外
        return sorted(
            p for p in directory.glob(pattern) if p.is_file() and not p.name.startswith("~$")
        )
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def _select_grid(path: Path, sheet: str | None) -> tuple[str, RawGrid]:
    grids = read_grids(path, target_sheets=[sheet] if sheet else None)
    if sheet is not None and sheet not in grids:
        raise FileProcessingError("SHEET_NOT_FOUND", f"sheet '{sheet}' not found in {path.name}", sheet=sheet)
    if not grids:
        raise FileProcessingError("EMPTY_WORKBOOK", f"no sheets in {path.name}")
    name = sheet if sheet is not None else next(iter(grids))
    return name, grids[name]


class _PriorYearIndex:
    """Prior-year P&L reports keyed by period (first file per period wins)."""

    def __init__(self, config: DashboardConfig) -> None:
        self._sheet = config.pl_reports.sheet
        self._reports: dict[str, tuple[PlReport, str]] = {}
        if not config.prior_year_directory:
            return
        directory = Path(config.prior_year_directory)
        if not directory.is_dir():
            logger.warning("prior year directory not found: %s", directory)
            return
        for path in scan_files(directory, config.pl_reports.pattern):
            try:
                _, grid = _select_grid(path, self._sheet)
            except Exception as e:
                # 前年ファイルが壊れていても当期の処理は続ける
                logger.warning("prior year file skipped: %s (%s)", path.name, e)
                continue
            report = parse_pl_grid(grid, file_name=path.name)
            if report.period and report.line_items:
                self._reports.setdefault(report.period, (report, path.name))
        logger.info("prior year reports indexed: %d", len(self._reports))

    def lookup(self, period: str) -> tuple[PlReport | None, str | None]:
        if not period or period not in self._reports:
            return None, None
        report, name = self._reports[period]
        return report, name


def _write_document(output_dir: Path, source: Path, document: dict[str, Any]) -> Path:
    out = output_dir / f"{source.stem}.json"
    out.write_text(json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8")
    return out


def _process_pl_report(
    path: Path,
    config: DashboardConfig,
    prior_index: _PriorYearIndex,
) -> tuple[dict[str, Any], int]:
    sheet, grid = _select_grid(path, config.pl_reports.sheet)
    report = parse_pl_grid(grid, file_name=path.name)
    if not report.line_items:
        if find_header_row(grid) is None:
            raise FileProcessingError("HEADER_NOT_FOUND", "no 'Ledger Account' header row", sheet=sheet)
        raise FileProcessingError("NO_LINE_ITEMS", "no line items below the 'Ledger Account' header", sheet=sheet)

    prior, prior_source = prior_index.lookup(report.period)
    metrics = compute_metrics(report, prior)
    categories = classify(report.line_items)
    document = {
        "source": path.name,
        "kind": FileKind.PL_REPORT,
        "sheet": sheet,
        "report": report.to_dict(),
        "categories": {name: [item.ledger_account for item in items] for name, items in categories.items()},
        "metrics": metrics_to_dict(metrics),
        "priorYearSource": prior_source,
    }
    logger.info(
        "P&L %s period=%s line_items=%d metrics=%d",
        path.name,
        report.period or "-",
        len(report.line_items),
        len(metrics),
    )
    return document, len(report.line_items)


def _process_survey(path: Path, config: DashboardConfig) -> tuple[dict[str, Any], int]:
    survey = config.surveys
    _, grid = _select_grid(path, None)
    document: dict[str, Any] = {"source": path.name, "kind": FileKind.SURVEY, "layout": survey.layout}

    if survey.layout == "table":
        table = parse_survey_table(grid, skip_rows=survey.skip_rows, skip_columns=survey.skip_columns)
        document["headers"] = table.headers
        document["rows"] = table.rows
        document["metrics"] = extract_survey_metrics(table).to_dict()
        count = len(table.rows)
    else:
        options = NormalizeOptions(
            metric_row=survey.metric_row,
            period_row=survey.period_row,
            field_row=survey.field_row,
            data_start=survey.data_start,
        )
        result = normalize(grid, options)
        document["summary"] = summarize_survey(result).to_dict()
        document["normalized"] = result.to_dict()
        count = len(result.records)

    if count == 0:
        logger.warning("survey %s has no data rows", path.name)
    logger.info("survey %s layout=%s records=%d", path.name, survey.layout, count)
    return document, count


def _process_product_usage(path: Path, config: DashboardConfig) -> tuple[dict[str, Any], int]:
    sheet, grid = _select_grid(path, config.products.sheet if config.products is not None else None)
    if find_usage_header_row(grid) is None:
        raise FileProcessingError("HEADER_NOT_FOUND", "no 'Product Number' header row", sheet=sheet)
    products = parse_usage_grid(grid)
    groups = summarize_by_group(products)
    document = {
        "source": path.name,
        "kind": FileKind.PRODUCT_USAGE,
        "sheet": sheet,
        "products": [p.to_dict() for p in products],
        "groups": [g.to_dict() for g in groups],
    }
    logger.info("product usage %s products=%d groups=%d", path.name, len(products), len(groups))
    return document, len(products)


def _error_type_of(exc: Exception) -> str:
    if isinstance(exc, FileProcessingError):
        return exc.error_type
    if isinstance(exc, UnsupportedFileError):
        return "UNSUPPORTED_FILE"
    if isinstance(exc, OSError):
        return "IO_ERROR"
    if isinstance(exc, ValueError):
        return "INVALID_LAYOUT"
    return "PROCESSING_ERROR"


def process_all(config: DashboardConfig, error_log: ErrorLogBuffer | None = None) -> ProcessingResult:
    """Process every report file of the configured source directory.

    Args:
        config: Import configuration
        error_log: Buffer for per-file failures (a fresh one by default);
            flushed once at the end of the run

    Returns:
        ProcessingResult with aggregated counters and per-file stats

    Raises:
        ProcessingError: For fatal errors that prevent processing
    """
    start_time = datetime.now(UTC)
    errors = error_log if error_log is not None else ErrorLogBuffer()

    source = Path(config.source_directory)
    # 複数パターンに一致するファイルは 商品使用量 > P&L > サーベイ の順で振り分け
    product_files = scan_files(source, config.products.pattern) if config.products is not None else []
    claimed = set(product_files)
    pl_files = [p for p in scan_files(source, config.pl_reports.pattern) if p not in claimed]
    claimed.update(pl_files)
    survey_files = [p for p in scan_files(source, config.surveys.pattern) if p not in claimed]
    jobs = (
        [(p, FileKind.PL_REPORT) for p in pl_files]
        + [(p, FileKind.SURVEY) for p in survey_files]
        + [(p, FileKind.PRODUCT_USAGE) for p in product_files]
    )

    output_dir = Path(config.output_directory)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ProcessingError(f"Cannot create output directory {output_dir}: {e}") from e

    prior_index = _PriorYearIndex(config)

    file_stats: list[FileStat] = []
    success_count = 0
    failed_count = 0
    report_count = 0
    survey_count = 0
    product_count = 0
    total_line_items = 0

    with ProgressTracker(len(jobs), description="Processing files") as progress:
        for path, kind in jobs:
            progress.start_file(path)
            file_start = datetime.now(UTC)
            output_path: Path | None = None
            error: str | None = None
            line_items = 0
            try:
                if kind == FileKind.PL_REPORT:
                    document, line_items = _process_pl_report(path, config, prior_index)
                elif kind == FileKind.PRODUCT_USAGE:
                    document, line_items = _process_product_usage(path, config)
                else:
                    document, line_items = _process_survey(path, config)
                output_path = _write_document(output_dir, path, document)
            except Exception as e:
                # ファイル単位の失敗は記録して続行
                error = str(e)
                sheet = e.sheet if isinstance(e, FileProcessingError) else FILE_LEVEL_SHEET
                errors.append(
                    ErrorRecord.create(
                        file=path.name,
                        sheet=sheet,
                        row=-1,
                        error_type=_error_type_of(e),
                        message=error,
                    )
                )
                logger.error("file failed: %s (%s)", path.name, error)
                logger.debug("traceback for %s", path.name, exc_info=True)

            elapsed = (datetime.now(UTC) - file_start).total_seconds()
            if error is None:
                success_count += 1
                total_line_items += line_items
                if kind == FileKind.PL_REPORT:
                    report_count += 1
                elif kind == FileKind.PRODUCT_USAGE:
                    product_count += 1
                else:
                    survey_count += 1
            else:
                failed_count += 1

            progress.set_postfix(success=success_count, failed=failed_count)
            progress.finish_file(success=error is None)
            file_stats.append(
                FileStat(
                    file_name=path.name,
                    kind=kind,
                    status="success" if error is None else "failed",
                    line_items=line_items,
                    elapsed_seconds=elapsed,
                    output_path=str(output_path) if output_path is not None else None,
                    error=error,
                )
            )

    try:
        log_path = errors.flush()
    except OSError as e:
        logger.warning("error log could not be written: %s", e)
    else:
        if log_path is not None:
            logger.info("error log written: %s", log_path)

    end_time = datetime.now(UTC)
    return ProcessingResult(
        success_files=success_count,
        failed_files=failed_count,
        pl_reports=report_count,
        surveys=survey_count,
        product_usages=product_count,
        total_line_items=total_line_items,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
    )
