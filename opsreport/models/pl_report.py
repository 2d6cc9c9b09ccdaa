from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .line_item import LineItem
from .summary_data import SummaryData

"""PlReport: one parsed period P&L report (metadata + line items + summary)."""

__all__ = [
    "PlReport",
]


@dataclass(frozen=True)
class PlReport:
    line_items: list[LineItem] = field(default_factory=list)
    summary_data: SummaryData = field(default_factory=SummaryData)
    store_name: str = ""
    company: str = ""
    period: str = ""  # "P01" .. "P13"
    translation_currency: str = "USD"

    def find_item(self, name: str) -> LineItem | None:
        """First line item whose ledger account equals name (case-insensitive)."""
        key = name.strip().lower()
        for item in self.line_items:
            if item.name_key == key:
                return item
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "storeName": self.store_name,
            "company": self.company,
            "period": self.period,
            "translationCurrency": self.translation_currency,
            "lineItems": [item.to_dict() for item in self.line_items],
            "summaryData": self.summary_data.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlReport:
        return cls(
            line_items=[LineItem.from_dict(d) for d in data.get("lineItems") or []],
            summary_data=SummaryData.from_dict(data.get("summaryData") or {}),
            store_name=data.get("storeName") or "",
            company=data.get("company") or "",
            period=data.get("period") or "",
            translation_currency=data.get("translationCurrency") or "USD",
        )
