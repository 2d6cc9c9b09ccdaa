from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Weekly product usage models.

A usage export lists one product per row with its usage for a run of weeks
(W38, W39, ...) and an optional cases conversion factor. ProductUsage is one
such row; GroupUsageSummary condenses the products of one group.
"""

__all__ = [
    "DEFAULT_GROUP",
    "ProductUsage",
    "GroupUsageSummary",
]

DEFAULT_GROUP = "Others"


@dataclass(frozen=True)
class ProductUsage:
    """One product row of a weekly usage export.

    Attributes:
        product_number: Product code (unique within an export)
        product_name: Display name
        unit: Usage unit as printed (e.g. "CS", "LB")
        weekly: Week label -> usage, in column order; unreadable cells are 0
        conversion: Usage per case; None when absent or not positive
        group: Product group (DEFAULT_GROUP when blank)
    """
    product_number: str
    product_name: str = ""
    unit: str = ""
    weekly: dict[str, float] = field(default_factory=dict)
    conversion: float | None = None
    group: str = DEFAULT_GROUP

    @property
    def average_usage(self) -> float:
        if not self.weekly:
            return 0.0
        return sum(self.weekly.values()) / len(self.weekly)

    @property
    def cases_per_1k(self) -> float | None:
        if self.conversion is None:
            return None
        return self.average_usage / self.conversion

    def to_dict(self) -> dict[str, Any]:
        return {
            "productNumber": self.product_number,
            "productName": self.product_name,
            "unit": self.unit,
            "weekly": dict(self.weekly),
            "conversion": self.conversion,
            "group": self.group,
            "averageUsage": self.average_usage,
            "csPer1k": self.cases_per_1k,
        }


@dataclass(frozen=True)
class GroupUsageSummary:
    group: str
    product_count: int
    average_usage: float
    average_cs_per_1k: float  # 換算値ありの商品のみで平均 (無ければ 0)
    products_with_conversion: int
    conversion_rate: float  # products_with_conversion / product_count * 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "group": self.group,
            "productCount": self.product_count,
            "averageUsage": self.average_usage,
            "averageCsPer1k": self.average_cs_per_1k,
            "productsWithConversion": self.products_with_conversion,
            "conversionRate": self.conversion_rate,
        }
