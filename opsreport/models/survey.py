from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Survey (guest experience) models."""

__all__ = [
    "SurveyTable",
    "SurveyMetrics",
    "SurveySummary",
]


@dataclass(frozen=True)
class SurveyTable:
    """Single-header survey export after header normalization."""
    headers: list[str]
    rows: list[dict[str, str]]  # header -> cell text ("-" when blank)


@dataclass(frozen=True)
class SurveyMetrics:
    values: dict[str, str] = field(default_factory=dict)  # metric name -> current period value
    overall_satisfaction: str | None = None
    taste_of_food: str | None = None
    accuracy_of_orders: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = dict(self.values)
        for key, value in (
            ("overallSatisfaction", self.overall_satisfaction),
            ("tasteOfFood", self.taste_of_food),
            ("accuracyOfOrders", self.accuracy_of_orders),
        ):
            if value is not None:
                out[key] = value
        return out


@dataclass(frozen=True)
class SurveySummary:
    """Headline figures of a three-row-header survey export."""
    count: float | None = None
    taste_of_food: float | str | None = None
    accuracy_of_order: float | str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "tasteOfFood": self.taste_of_food,
            "accuracyOfOrder": self.accuracy_of_order,
        }
