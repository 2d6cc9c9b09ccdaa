from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

"""Grid-level domain models for spreadsheet normalization.

RawGrid is the format-agnostic input handed over by the file reader: an ordered
sequence of rows, each an ordered sequence of raw cells. HeaderPath and
NormalizedRecord are produced by the header resolver and the matrix normalizer.
"""

__all__ = [
    "RawCell",
    "RawGrid",
    "VALUE_FIELD",
    "HeaderPath",
    "CellValue",
    "NormalizedRecord",
    "NormalizationResult",
]

RawCell = Union[str, int, float, None]
RawGrid = list[list[Any]]

# field キーが無い列 (サブフィールドなし) に使うキー
VALUE_FIELD = "__value__"


@dataclass(frozen=True)
class HeaderPath:
    """Semantic address of one grid column.

    metric / period are carried forward from the last non-empty label in their
    header row (merged header cells). field is taken verbatim per column.
    """
    column_key: str  # "_<index>", unique within the grid
    metric: str | None
    period: str | None
    field: str | None

    @property
    def is_semantic(self) -> bool:
        return self.metric is not None and self.period is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "columnKey": self.column_key,
            "metric": self.metric,
            "period": self.period,
            "field": self.field,
        }


@dataclass(frozen=True)
class CellValue:
    value: float | str | None  # parsed value
    raw: str  # original cell text

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value, "raw": self.raw}


@dataclass(frozen=True)
class NormalizedRecord:
    """One data row after normalization.

    metrics is addressed as metrics[metric][period][field]. The record is never
    mutated after the normalizer returns it.
    """
    row_index: int  # 0-based grid row index
    raw: dict[str, str]  # column_key -> raw text
    count: float | None = None  # value of the explicit "Count" column
    metrics: dict[str, dict[str, dict[str, CellValue]]] = field(default_factory=dict)

    def get(self, metric: str, period: str, field_name: str = VALUE_FIELD) -> CellValue | None:
        return self.metrics.get(metric, {}).get(period, {}).get(field_name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rowIndex": self.row_index,
            "raw": dict(self.raw),
            "count": self.count,
            "metrics": {
                metric: {
                    period: {name: cell.to_dict() for name, cell in fields.items()}
                    for period, fields in periods.items()
                }
                for metric, periods in self.metrics.items()
            },
        }


@dataclass(frozen=True)
class NormalizationResult:
    columns: list[HeaderPath]
    records: list[NormalizedRecord]

    def to_dict(self) -> dict[str, Any]:
        return {
            "columns": [c.to_dict() for c in self.columns],
            "records": [r.to_dict() for r in self.records],
        }
