from __future__ import annotations

import time

from opsreport.excel.matrix import normalize
from opsreport.excel.pl_sheet import parse_pl_grid
from opsreport.services.metrics import compute_metrics

"""Performance smoke test: a large export must stay well inside a second or two."""

ROWS = 2_000


def test_pl_parse_and_metrics_throughput(sample_pl_grid):
    grid = sample_pl_grid + [[f"Account {i}", i, None, i, None, 0, i, None] for i in range(ROWS)]
    start = time.perf_counter()
    report = parse_pl_grid(grid)
    compute_metrics(report)
    elapsed = time.perf_counter() - start
    assert len(report.line_items) == 20 + ROWS
    # CI でも余裕を持たせた上限
    assert elapsed < 3.0, f"P&L parse too slow: {elapsed:.3f}s"


def test_survey_normalize_throughput():
    grid = [
        ["Store", "Count", "Taste of Food", "", "Accuracy of Order", ""],
        ["", "", "Current", "Prior", "Current", "Prior"],
        ["", "", "Score", "Score", "Score", "Score"],
    ] + [[str(i), "10", "72.5%", "70.1%", "91%", "88%"] for i in range(ROWS)]
    start = time.perf_counter()
    result = normalize(grid)
    elapsed = time.perf_counter() - start
    assert len(result.records) == ROWS
    assert elapsed < 3.0, f"normalize too slow: {elapsed:.3f}s"
