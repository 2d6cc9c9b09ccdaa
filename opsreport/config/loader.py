from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import DashboardConfig, PlReportConfig, ProductUsageConfig, SurveyConfig

"""Config loader.

Responsibilities:
- Load the YAML config (config/dashboard.yml by default)
- Validate it against config_schema.json (shipped with the package)
- Apply defaults for the optional pl_reports / surveys / products blocks
"""

__all__ = [
    "SCHEMA_PATH",
    "DEFAULT_CONFIG_PATH",
    "ConfigError",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/dashboard.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: Any) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or unreadable, or the config
            violates it (missing keys, wrong types, unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _survey_config(raw: dict[str, Any]) -> SurveyConfig:
    defaults = SurveyConfig()
    survey = SurveyConfig(
        pattern=raw.get("pattern", defaults.pattern),
        layout=raw.get("layout", defaults.layout),
        metric_row=raw.get("metric_row", defaults.metric_row),
        period_row=raw.get("period_row", defaults.period_row),
        field_row=raw.get("field_row", defaults.field_row),
        data_start=raw.get("data_start", defaults.data_start),
        skip_rows=raw.get("skip_rows", defaults.skip_rows),
        skip_columns=raw.get("skip_columns", defaults.skip_columns),
    )
    header_rows = (survey.metric_row, survey.period_row, survey.field_row)
    if survey.data_start <= max(header_rows):
        raise ConfigError(
            f"surveys.data_start ({survey.data_start}) must come after the header rows {header_rows}"
        )
    return survey


def _products_config(raw: dict[str, Any] | None) -> ProductUsageConfig | None:
    # ブロック省略時は使用量ファイルを走査しない
    if raw is None:
        return None
    defaults = ProductUsageConfig()
    return ProductUsageConfig(
        pattern=raw.get("pattern", defaults.pattern),
        sheet=raw.get("sheet", defaults.sheet),
    )


def load_config(path: Path) -> DashboardConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    _validate_config_schema(data)

    pl_raw = data.get("pl_reports") or {}
    pl_defaults = PlReportConfig()
    return DashboardConfig(
        source_directory=data["source_directory"],
        output_directory=data["output_directory"],
        pl_reports=PlReportConfig(
            pattern=pl_raw.get("pattern", pl_defaults.pattern),
            sheet=pl_raw.get("sheet", pl_defaults.sheet),
        ),
        surveys=_survey_config(data.get("surveys") or {}),
        prior_year_directory=data.get("prior_year_directory"),
        products=_products_config(data.get("products")),
    )
