from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""DerivedMetric: uniform result shape of every KPI computation.

is_positive encodes whether the movement is good for the business; for cost
ratios (COGS%, labor%, rent) a decrease is positive.
"""

__all__ = [
    "DerivedMetric",
]


@dataclass(frozen=True)
class DerivedMetric:
    value: float
    is_positive: bool
    prior_year: float | None = None
    difference: float | None = None  # value - prior_year (pp for ratios)
    change_percent: float | None = None  # (value - prior) / prior * 100 for growth metrics
    label: str | None = None  # e.g. ledger account of the top controllable

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"value": self.value}
        if self.prior_year is not None:
            out["priorYear"] = self.prior_year
        if self.difference is not None:
            out["difference"] = self.difference
        if self.change_percent is not None:
            out["changePercent"] = self.change_percent
        if self.label is not None:
            out["label"] = self.label
        out["isPositive"] = self.is_positive
        return out
