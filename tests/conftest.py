# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pandas as pd
import pytest

from opsreport.logging.init import reset_logging

PL_HEADER = [
    "Ledger Account",
    "Actuals",
    "Actuals %",
    "Plan",
    "Plan %",
    "VFP",
    "Prior Year",
    "Prior Year %",
]


def pl_row(name: str, actuals: float, prior_year: float, plan: float | None = None) -> list[object]:
    plan_value = actuals if plan is None else plan
    return [name, actuals, None, plan_value, None, actuals - plan_value, prior_year, None]


# 当期 110,000 / 前年 105,000 の標準的な期間 P&L
SAMPLE_PL_GRID: list[list[object]] = [
    ["Panda Restaurant Group - Period P&L"],
    ["Store:", "Main St #1234"],
    ["Company:", "Panda Express Inc"],
    ["Period:", "P07 2025"],
    ["Translation Currency:", "USD"],
    [],
    PL_HEADER,
    pl_row("Food Sales", 95000, 90000),
    ["Net Sales", 110000, 1.0, 108000, 1.0, 2000, 105000, 1.0],
    pl_row("Grocery", 20000, 19000),
    ["Cost of Goods Sold", 36250, 0.3295, 35000, 0.324, -1250, 34000, 0.3238],
    pl_row("Total Labor", 30000, 29000),
    pl_row("Electricity", 2500, 2300),
    pl_row("Repairs", 4000, 3000),
    pl_row("Credit Card Fees", 5000, 4800),
    pl_row("Total Controllables", 20000, 19000),
    pl_row("Controllable Profit", 24000, 22000),
    pl_row("Rent - MIN", 6000, 6000),
    pl_row("Rent - Other", 500, 400),
    pl_row("Total Fixed Cost", 9000, 8500),
    pl_row("Restaurant Contribution", 15000, 13500),
    pl_row("Total Transactions", 10000, 9800),
    pl_row("Check Avg - Net", 11.0, 10.71),
    pl_row("Panda Digital %", 0.12, 0.10),
    pl_row("3rd Party Digital %", 0.08, 0.07),
    pl_row("Direct Labor Hours", 2100, 2050),
    pl_row("PSA - Net Sales", 95000, 93000),
]

SAMPLE_SURVEY_CSV = """Store,Count,Taste of Food,,Accuracy of Order,
,,Current,Prior,Current,Prior
,,Score,Score,Score,Score
1234,85,72.5%,70.1%,91%,88%
Total,120,73.0%,70.0%,92.0%,89.0%
"""


@pytest.fixture(autouse=True)
def _reset_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _isolate_config_env(monkeypatch):
    # Keep OPSREPORT_CONFIG (e.g. set by a .env load in another test) from leaking between tests
    monkeypatch.delenv("OPSREPORT_CONFIG", raising=False)
    yield


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
output_directory: ./out
pl_reports:
  pattern: "*.xlsx"
surveys:
  pattern: "*.csv"
  metric_row: 0
  period_row: 1
  field_row: 2
  data_start: 3
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "dashboard.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def sample_pl_grid() -> list[list[object]]:
    return [list(row) for row in SAMPLE_PL_GRID]


def make_workbook(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    """Create a real .xlsx file (no header row, no index)."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet_name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return path


@pytest.fixture()
def pl_workbook(temp_workdir: Path, sample_pl_grid: list[list[object]]) -> Path:
    return make_workbook(temp_workdir / "data" / "Main St P07.xlsx", {"P&L": sample_pl_grid})


@pytest.fixture()
def survey_csv(temp_workdir: Path) -> Path:
    f = temp_workdir / "data" / "gem_p07.csv"
    f.write_text(SAMPLE_SURVEY_CSV, encoding="utf-8")
    return f
