from __future__ import annotations

from pathlib import Path

import pytest

from opsreport.config.loader import SCHEMA_PATH, ConfigError, load_config


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_load_config_applies_defaults(tmp_path: Path):
    cfg = load_config(_write(tmp_path / "c.yml", "source_directory: ./data\noutput_directory: ./out\n"))
    assert cfg.source_directory == "./data"
    assert cfg.output_directory == "./out"
    assert cfg.prior_year_directory is None
    assert cfg.pl_reports.pattern == "*.xlsx"
    assert cfg.pl_reports.sheet is None
    assert cfg.surveys.pattern == "*.csv"
    assert cfg.surveys.layout == "matrix"
    assert (cfg.surveys.metric_row, cfg.surveys.period_row, cfg.surveys.field_row) == (0, 1, 2)
    assert cfg.surveys.data_start == 3
    assert cfg.products is None


def test_load_full_config(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.surveys.data_start == 3
    assert cfg.pl_reports.pattern == "*.xlsx"


def test_custom_survey_layout(tmp_path: Path):
    text = """source_directory: d
output_directory: o
prior_year_directory: d/prior
pl_reports: {pattern: "*P&L*.xlsx", sheet: "Report"}
surveys: {pattern: "gem_*.csv", layout: table, skip_rows: 0, skip_columns: 2}
"""
    cfg = load_config(_write(tmp_path / "c.yml", text))
    assert cfg.prior_year_directory == "d/prior"
    assert cfg.pl_reports.sheet == "Report"
    assert cfg.surveys.layout == "table"
    assert cfg.surveys.skip_rows == 0
    assert cfg.surveys.skip_columns == 2


def test_missing_file(tmp_path: Path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "none.yml")


def test_invalid_yaml(tmp_path: Path):
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(_write(tmp_path / "c.yml", "source_directory: [unclosed\n"))


@pytest.mark.parametrize(
    "text",
    [
        "output_directory: o\n",
        "source_directory: d\n",
        "source_directory: d\noutput_directory: o\nunknown_key: 1\n",
        "source_directory: d\noutput_directory: o\nsurveys: {metric_row: -1}\n",
        "source_directory: d\noutput_directory: o\nsurveys: {layout: pivot}\n",
        "source_directory: 1\noutput_directory: o\n",
        "source_directory: d\noutput_directory: o\nproducts: {week_count: 4}\n",
    ],
)
def test_schema_violations(tmp_path: Path, text: str):
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config(_write(tmp_path / "c.yml", text))


def test_data_start_inside_header_block(tmp_path: Path):
    text = "source_directory: d\noutput_directory: o\nsurveys: {data_start: 2}\n"
    with pytest.raises(ConfigError, match="data_start"):
        load_config(_write(tmp_path / "c.yml", text))


def test_schema_ships_with_package():
    assert SCHEMA_PATH.exists()
    assert SCHEMA_PATH.parent.name == "config"


def test_products_block(tmp_path: Path):
    text = "source_directory: d\noutput_directory: o\nproducts: {sheet: Usage}\n"
    cfg = load_config(_write(tmp_path / "c.yml", text))
    assert cfg.products is not None
    assert cfg.products.pattern == "products*.xlsx"
    assert cfg.products.sheet == "Usage"
