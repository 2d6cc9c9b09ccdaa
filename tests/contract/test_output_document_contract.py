from __future__ import annotations

import json
from pathlib import Path

import jsonschema

from opsreport.cli import main as cli_main

"""Output document contract: one JSON document per processed P&L file."""

SCHEMA_PATH = Path(__file__).with_name("schemas") / "pl_document_schema.json"


def test_pl_document_matches_schema(write_config, pl_workbook: Path, temp_workdir: Path, capsys):
    assert cli_main([]) == 0
    capsys.readouterr()
    schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
    document = json.loads((temp_workdir / "out" / "Main St P07.json").read_text(encoding="utf-8"))
    jsonschema.validate(document, schema)


def test_line_item_sort_order_is_increasing(write_config, pl_workbook: Path, temp_workdir: Path, capsys):
    assert cli_main([]) == 0
    capsys.readouterr()
    document = json.loads((temp_workdir / "out" / "Main St P07.json").read_text(encoding="utf-8"))
    orders = [item["sortOrder"] for item in document["report"]["lineItems"]]
    assert orders == sorted(orders)
    assert len(set(orders)) == len(orders)


def test_every_line_item_lands_in_exactly_one_category(write_config, pl_workbook: Path, temp_workdir: Path, capsys):
    assert cli_main([]) == 0
    capsys.readouterr()
    document = json.loads((temp_workdir / "out" / "Main St P07.json").read_text(encoding="utf-8"))
    names = [item["ledgerAccount"] for item in document["report"]["lineItems"]]
    categorized = [name for members in document["categories"].values() for name in members]
    assert sorted(categorized) == sorted(names)
