from __future__ import annotations

import json

from opsreport.models.error_record import ErrorRecord


def test_create_stamps_utc_z_timestamp():
    rec = ErrorRecord.create(file="a.xlsx", sheet="P&L", row=-1, error_type="HEADER_NOT_FOUND", message="m")
    assert rec.timestamp.endswith("Z")
    assert "+00:00" not in rec.timestamp


def test_json_line_has_fixed_keys():
    rec = ErrorRecord.create(file="レポート.xlsx", sheet="S", row=3, error_type="X", message="m")
    data = json.loads(rec.to_json_line())
    assert list(data) == ["timestamp", "file", "sheet", "row", "error_type", "message"]
    assert data["file"] == "レポート.xlsx"
    assert "レポート" in rec.to_json_line()
