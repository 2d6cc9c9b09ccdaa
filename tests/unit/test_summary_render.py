from __future__ import annotations

import re
from datetime import datetime, timezone

import pytest

from opsreport.models.processing_result import ProcessingResult
from opsreport.services.summary import format_seconds, render_summary_line

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY\s+files=([0-9]+)/(\1)\s+success=([0-9]+)\s+failed=([0-9]+)\s+"
    r"reports=([0-9]+)\s+surveys=([0-9]+)\s+products=([0-9]+)\s+line_items=([0-9]+)\s+elapsed_sec=([0-9]+\.?[0-9]*)$"
)


def _result(success: int, failed: int, elapsed: float) -> ProcessingResult:
    start = datetime(2025, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
    return ProcessingResult(
        success_files=success,
        failed_files=failed,
        pl_reports=1,
        surveys=success - 1,
        product_usages=0,
        total_line_items=120,
        start_time=start,
        end_time=start,
        elapsed_seconds=elapsed,
    )


def test_render_summary_line_all_success():
    line = render_summary_line(2, _result(2, 0, 2.0))
    m = SUMMARY_PATTERN.match(line)
    assert m, line
    assert m.group(1) == "2"
    assert m.group(3) == "2"
    assert m.group(4) == "0"
    assert m.group(5) == "1"
    assert m.group(6) == "1"
    assert m.group(7) == "0"
    assert m.group(8) == "120"
    assert m.group(9) == "2"


def test_render_summary_line_partial_failure():
    line = render_summary_line(3, _result(2, 1, 1.25))
    assert line == "SUMMARY files=3/3 success=2 failed=1 reports=1 surveys=1 products=0 line_items=120 elapsed_sec=1.25"


@pytest.mark.parametrize(
    "value, expected",
    [(0, "0"), (3.0, "3"), (0.000123, "0.000123"), (1.23456, "1.235"), (0.5, "0.5")],
)
def test_format_seconds(value, expected):
    assert format_seconds(value) == expected
