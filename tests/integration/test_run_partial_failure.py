from __future__ import annotations

import json
from pathlib import Path

from opsreport.cli import main as cli_main


def test_partial_failure_keeps_good_files(write_config, pl_workbook: Path, survey_csv: Path, temp_workdir: Path, capsys):
    (temp_workdir / "data" / "zz_corrupt.xlsx").write_bytes(b"\x00not-a-zip")
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 2
    assert "SUMMARY files=3/3 success=2 failed=1 reports=1 surveys=1 products=0 line_items=22" in out
    assert "ERROR file failed: zz_corrupt.xlsx" in out

    assert (temp_workdir / "out" / "Main St P07.json").exists()
    assert not (temp_workdir / "out" / "zz_corrupt.json").exists()

    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    lines = logs[0].read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    record = json.loads(lines[0])
    assert record["file"] == "zz_corrupt.xlsx"
    assert record["sheet"] == "<FILE_LEVEL>"


def test_empty_survey_succeeds_next_to_corrupt_workbook(write_config, temp_workdir: Path, capsys):
    (temp_workdir / "data" / "a.xlsx").write_bytes(b"junk")
    (temp_workdir / "data" / "b.csv").write_text("", encoding="utf-8")
    code = cli_main([])
    out = capsys.readouterr().out
    # 空の CSV はレコード 0 件のサーベイとして成功扱い
    assert code == 2
    assert "success=1 failed=1" in out
