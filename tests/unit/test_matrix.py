from __future__ import annotations

import copy

import pytest

from opsreport.excel.matrix import NormalizeOptions, normalize
from opsreport.models.grid import VALUE_FIELD

GRID = [
    ["Store", "Count", "Taste of Food", None, "Accuracy of Order", None],
    [None, None, "Current", "Prior", "Current", "Prior"],
    [None, None, "Score", "Score", "Score", "Score"],
    ["1234", "85", "72.5%", "70.1%", "91%", "-"],
    [None, None, None, None, None, None],
    ["Total", 120, "73.0%", "70.0%", 0.92, "89.0%"],
]


def test_records_are_addressable_by_metric_period_field():
    result = normalize(GRID)
    assert len(result.records) == 2
    first = result.records[0]
    assert first.row_index == 3
    assert first.get("Taste of Food", "Current", "Score").value == 72.5
    assert first.get("Taste of Food", "Prior", "Score").value == 70.1
    assert first.get("Accuracy of Order", "Prior", "Score").value is None
    assert first.get("Accuracy of Order", "Prior", "Score").raw == "-"


def test_count_column_is_extracted_not_a_metric():
    result = normalize(GRID)
    assert result.records[0].count == 85.0
    assert result.records[1].count == 120.0
    assert "Count" not in result.records[0].metrics


def test_blank_rows_are_skipped():
    result = normalize(GRID)
    assert [r.row_index for r in result.records] == [3, 5]


def test_numeric_cells_are_not_rescaled():
    last = normalize(GRID).records[-1]
    assert last.get("Accuracy of Order", "Current", "Score").value == 0.92


def test_raw_passthrough_keeps_every_column():
    first = normalize(GRID).records[0]
    assert first.raw["_0"] == "1234"
    assert first.raw["_1"] == "85"
    assert set(first.raw) == {f"_{i}" for i in range(6)}


def test_column_without_field_uses_value_key():
    grid = [["Sales", "Sales"], ["P1", "P2"], [None, None], ["10", "20"]]
    record = normalize(grid).records[0]
    assert record.get("Sales", "P1").value == 10.0
    assert record.metrics["Sales"]["P2"][VALUE_FIELD].value == 20.0


def test_duplicate_paths_last_column_wins():
    grid = [["Sales", "Sales"], ["P1", "P1"], ["v", "v"], ["10", "20"]]
    assert normalize(grid).records[0].get("Sales", "P1", "v").value == 20.0


def test_grid_without_data_rows():
    result = normalize(GRID[:3])
    assert result.records == []
    assert len(result.columns) == 6


def test_header_only_grid_shorter_than_header_block():
    result = normalize([["A"]])
    assert result.columns == []
    assert result.records == []


def test_custom_layout():
    grid = [["title"], ["Taste"], ["Current"], ["Score"], ["88"]]
    options = NormalizeOptions(metric_row=1, period_row=2, field_row=3, data_start=4)
    record = normalize(grid, options).records[0]
    assert record.get("Taste", "Current", "Score").value == 88.0


@pytest.mark.parametrize(
    "options",
    [
        NormalizeOptions(data_start=-1),
        NormalizeOptions(data_start=2),
        NormalizeOptions(metric_row=-1),
    ],
)
def test_impossible_layout_raises(options):
    with pytest.raises(ValueError):
        normalize(GRID, options)


def test_to_dict_shape():
    out = normalize(GRID).to_dict()
    assert set(out) == {"columns", "records"}
    assert out["columns"][2] == {"columnKey": "_2", "metric": "Taste of Food", "period": "Current", "field": "Score"}
    record = out["records"][0]
    assert record["rowIndex"] == 3
    assert record["count"] == 85.0
    assert record["metrics"]["Taste of Food"]["Current"]["Score"] == {"value": 72.5, "raw": "72.5%"}


def test_normalize_is_repeatable_and_leaves_grid_untouched():
    before = copy.deepcopy(GRID)
    first = normalize(GRID)
    second = normalize(GRID)
    assert first == second
    assert first.to_dict() == second.to_dict()
    assert GRID == before
