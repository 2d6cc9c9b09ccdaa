from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest

from opsreport.logging.error_log import ErrorLogBuffer
from opsreport.models.config_models import DashboardConfig, PlReportConfig, ProductUsageConfig, SurveyConfig
from opsreport.services.orchestrator import ProcessingError, process_all, scan_files


def _config(root: Path, **kwargs) -> DashboardConfig:
    return DashboardConfig(
        source_directory=str(root / "data"),
        output_directory=str(root / "out"),
        pl_reports=kwargs.pop("pl_reports", PlReportConfig()),
        surveys=kwargs.pop("surveys", SurveyConfig()),
        **kwargs,
    )


def test_scan_files_sorted_and_filtered(tmp_path: Path):
    for name in ["b.xlsx", "a.xlsx", "~$a.xlsx", "c.csv"]:
        (tmp_path / name).write_bytes(b"")
    (tmp_path / "sub.xlsx").mkdir()
    assert [p.name for p in scan_files(tmp_path, "*.xlsx")] == ["a.xlsx", "b.xlsx"]


def test_scan_missing_directory(tmp_path: Path):
    with pytest.raises(ProcessingError, match="Directory not found"):
        scan_files(tmp_path / "missing", "*.xlsx")


def test_scan_file_instead_of_directory(tmp_path: Path):
    f = tmp_path / "x.txt"
    f.write_text("x", encoding="utf-8")
    with pytest.raises(ProcessingError, match="not a directory"):
        scan_files(f, "*")


def test_empty_directory(temp_workdir: Path):
    result = process_all(_config(temp_workdir), ErrorLogBuffer(logs_dir=temp_workdir / "logs"))
    assert result.success_files == 0
    assert result.failed_files == 0
    assert result.file_stats == []
    assert (temp_workdir / "out").is_dir()


def test_processes_pl_report_and_survey(temp_workdir: Path, pl_workbook: Path, survey_csv: Path):
    result = process_all(_config(temp_workdir), ErrorLogBuffer(logs_dir=temp_workdir / "logs"))
    assert result.success_files == 2
    assert result.failed_files == 0
    assert result.pl_reports == 1
    assert result.surveys == 1
    # P&L 20 行 + サーベイ 2 行
    assert result.total_line_items == 22

    doc = json.loads((temp_workdir / "out" / "Main St P07.json").read_text(encoding="utf-8"))
    assert doc["kind"] == "pl_report"
    assert doc["report"]["period"] == "P07"
    assert doc["metrics"]["cogs_pct"]["isPositive"] is False
    assert doc["priorYearSource"] is None

    survey = json.loads((temp_workdir / "out" / "gem_p07.json").read_text(encoding="utf-8"))
    assert survey["summary"] == {"count": 120.0, "tasteOfFood": 73.0, "accuracyOfOrder": 92.0}


def test_failed_file_is_logged_and_counted(temp_workdir: Path, pl_workbook: Path):
    (temp_workdir / "data" / "broken.xlsx").write_bytes(b"not a workbook")
    errors = ErrorLogBuffer(logs_dir=temp_workdir / "logs")
    result = process_all(_config(temp_workdir), errors)
    assert result.success_files == 1
    assert result.failed_files == 1
    failed = [s for s in result.file_stats if s.status == "failed"]
    assert [s.file_name for s in failed] == ["broken.xlsx"]
    assert failed[0].output_path is None

    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    record = json.loads(logs[0].read_text(encoding="utf-8").splitlines()[0])
    assert record["file"] == "broken.xlsx"
    assert record["row"] == -1


def test_workbook_without_ledger_header_fails(temp_workdir: Path):
    pd.DataFrame([["just"], ["text"]]).to_excel(
        temp_workdir / "data" / "notes.xlsx", header=False, index=False
    )
    errors = ErrorLogBuffer(logs_dir=temp_workdir / "logs")
    result = process_all(_config(temp_workdir), errors)
    assert result.failed_files == 1
    assert result.file_stats[0].error == "no 'Ledger Account' header row"


def test_configured_sheet_missing(temp_workdir: Path, pl_workbook: Path):
    config = _config(temp_workdir, pl_reports=PlReportConfig(sheet="Summary"))
    result = process_all(config, ErrorLogBuffer(logs_dir=temp_workdir / "logs"))
    assert result.failed_files == 1
    assert "Summary" in result.file_stats[0].error


def test_missing_source_directory_is_fatal(tmp_path: Path):
    config = DashboardConfig(
        source_directory=str(tmp_path / "nope"),
        output_directory=str(tmp_path / "out"),
        pl_reports=PlReportConfig(),
        surveys=SurveyConfig(),
    )
    with pytest.raises(ProcessingError):
        process_all(config)


def test_table_layout_survey(temp_workdir: Path):
    (temp_workdir / "data" / "gem.csv").write_text(
        "Region,Market,Store,Metric,\"Comparison: 11/30/2025 - 12/27/2025, Last Year (Same Period): 11/30/2024 - 12/27/2024\"\n"
        ",,,Metric,Score\n"
        "West,LA,1234,Taste of Food,72.5%\n",
        encoding="utf-8",
    )
    config = _config(temp_workdir, surveys=SurveyConfig(layout="table"))
    result = process_all(config, ErrorLogBuffer(logs_dir=temp_workdir / "logs"))
    assert result.surveys == 1
    doc = json.loads((temp_workdir / "out" / "gem.json").read_text(encoding="utf-8"))
    assert doc["headers"] == ["Metric", "11/30/2025 - 12/27/2025"]
    assert doc["metrics"]["tasteOfFood"] == "72.5%"


def test_header_without_line_items_is_reported_separately(temp_workdir: Path):
    pd.DataFrame([["Store:", "Main St #1234"], ["Ledger Account", "Actuals", "Prior Year"]]).to_excel(
        temp_workdir / "data" / "empty P07.xlsx", header=False, index=False
    )
    pd.DataFrame([["just"], ["text"]]).to_excel(
        temp_workdir / "data" / "notes.xlsx", header=False, index=False
    )
    errors = ErrorLogBuffer(logs_dir=temp_workdir / "logs")
    result = process_all(_config(temp_workdir), errors)
    assert result.failed_files == 2
    (log,) = (temp_workdir / "logs").glob("errors-*.log")
    records = [json.loads(line) for line in log.read_text(encoding="utf-8").splitlines()]
    assert {r["file"]: r["error_type"] for r in records} == {
        "empty P07.xlsx": "NO_LINE_ITEMS",
        "notes.xlsx": "HEADER_NOT_FOUND",
    }


def test_product_usage_export(temp_workdir: Path):
    pd.DataFrame(
        [
            ["Product Number", "Product Name", "Unit", "W38", "W39", "W40", "W41", "Conversion", "Group"],
            ["10001", "Orange Chicken", "CS", 10, 12, 14, 12, 4, "Protein"],
            ["20001", "Napkins", "CS", 3, 5, 4, 4, None, "Paper"],
        ]
    ).to_excel(temp_workdir / "data" / "products_w41.xlsx", header=False, index=False)
    config = _config(temp_workdir, products=ProductUsageConfig())
    result = process_all(config, ErrorLogBuffer(logs_dir=temp_workdir / "logs"))
    # P&L パターン (*.xlsx) にも一致するが商品使用量として処理される
    assert result.product_usages == 1
    assert result.pl_reports == 0
    assert result.total_line_items == 2
    doc = json.loads((temp_workdir / "out" / "products_w41.json").read_text(encoding="utf-8"))
    assert doc["kind"] == "product_usage"
    assert [p["productNumber"] for p in doc["products"]] == ["10001", "20001"]
    assert doc["groups"][0]["group"] == "Protein"
    assert doc["groups"][0]["averageCsPer1k"] == 3.0


def test_product_files_ignored_without_products_block(temp_workdir: Path):
    pd.DataFrame([["Product Number", "W38"], ["10001", 5]]).to_excel(
        temp_workdir / "data" / "products_w41.xlsx", header=False, index=False
    )
    result = process_all(_config(temp_workdir), ErrorLogBuffer(logs_dir=temp_workdir / "logs"))
    # products 未設定なら P&L として扱われ、ヘッダ無しで失敗
    assert result.product_usages == 0
    assert result.failed_files == 1
