from __future__ import annotations

import json
import re
from pathlib import Path

from opsreport.cli import main as cli_main

SUMMARY_RE = re.compile(
    r"^SUMMARY files=(\d+)/\1 success=(\d+) failed=(\d+) reports=(\d+) surveys=(\d+) products=(\d+) "
    r"line_items=(\d+) elapsed_sec=[0-9.]+$",
    re.MULTILINE,
)


def test_run_success_end_to_end(write_config, pl_workbook: Path, survey_csv: Path, temp_workdir: Path, capsys):
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0

    m = SUMMARY_RE.search(out)
    assert m, out
    assert m.groups() == ("2", "2", "0", "1", "1", "0", "22")
    assert "INFO Processing files from: data" in out
    assert not list((temp_workdir / "logs").glob("errors-*.log"))

    report = json.loads((temp_workdir / "out" / "Main St P07.json").read_text(encoding="utf-8"))
    assert report["source"] == "Main St P07.xlsx"
    assert report["sheet"] == "P&L"
    assert report["report"]["storeName"] == "Main St #1234"
    assert len(report["report"]["lineItems"]) == 20
    assert "Net Sales" in report["categories"]["sales_breakdown"]
    assert "PSA - Net Sales" in report["categories"]["statistics"]
    assert round(report["metrics"]["sss"]["value"], 2) == 110000
    assert report["metrics"]["top_controllable"]["label"] == "Repairs"

    survey = json.loads((temp_workdir / "out" / "gem_p07.json").read_text(encoding="utf-8"))
    assert survey["kind"] == "survey"
    assert survey["layout"] == "matrix"
    assert survey["summary"]["count"] == 120.0
    assert len(survey["normalized"]["records"]) == 2


def test_rerun_overwrites_documents(write_config, pl_workbook: Path, temp_workdir: Path, capsys):
    assert cli_main([]) == 0
    first = (temp_workdir / "out" / "Main St P07.json").read_text(encoding="utf-8")
    assert cli_main([]) == 0
    assert (temp_workdir / "out" / "Main St P07.json").read_text(encoding="utf-8") == first
    capsys.readouterr()
