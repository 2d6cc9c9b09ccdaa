from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

"""LineItem model for P&L report rows.

A LineItem is one named ledger-account row of a period report. The set of
LineItems for a period is persisted verbatim as the report body, so to_dict()
keeps the camelCase keys the dashboard stores.
"""

__all__ = [
    "LineItem",
    "NUMERIC_COLUMNS",
]

# Python 属性名 -> 永続化 JSON キー
_JSON_KEYS = {
    "ledger_account": "ledgerAccount",
    "actuals": "actuals",
    "actuals_percentage": "actualsPercentage",
    "plan": "plan",
    "plan_percentage": "planPercentage",
    "vfp": "vfp",
    "prior_year": "priorYear",
    "prior_year_percentage": "priorYearPercentage",
    "actual_ytd": "actualYtd",
    "actual_ytd_percentage": "actualYtdPercentage",
    "plan_ytd": "planYtd",
    "plan_ytd_percentage": "planYtdPercentage",
    "vfp_ytd": "vfpYtd",
    "prior_year_ytd": "priorYearYtd",
    "prior_year_ytd_percentage": "priorYearYtdPercentage",
    "sort_order": "sortOrder",
    "category": "category",
    "subcategory": "subcategory",
}

NUMERIC_COLUMNS = (
    "actuals",
    "actuals_percentage",
    "plan",
    "plan_percentage",
    "vfp",
    "prior_year",
    "prior_year_percentage",
    "actual_ytd",
    "actual_ytd_percentage",
    "plan_ytd",
    "plan_ytd_percentage",
    "vfp_ytd",
    "prior_year_ytd",
    "prior_year_ytd_percentage",
)


@dataclass(frozen=True)
class LineItem:
    """One ledger-account row of a P&L report.

    Money columns are plain numbers; *_percentage columns are whole-number
    percentages (55.6 means 55.6%). Missing cells are stored as 0.
    """
    ledger_account: str
    actuals: float = 0.0
    actuals_percentage: float = 0.0
    plan: float = 0.0
    plan_percentage: float = 0.0
    vfp: float = 0.0  # variance from plan
    prior_year: float = 0.0
    prior_year_percentage: float = 0.0
    actual_ytd: float = 0.0
    actual_ytd_percentage: float = 0.0
    plan_ytd: float = 0.0
    plan_ytd_percentage: float = 0.0
    vfp_ytd: float = 0.0
    prior_year_ytd: float = 0.0
    prior_year_ytd_percentage: float = 0.0
    sort_order: int = 0
    category: str = ""  # report's own category column
    subcategory: str = ""

    @property
    def name_key(self) -> str:
        """Lower-cased, trimmed ledger account used for name matching."""
        return self.ledger_account.strip().lower()

    def to_dict(self) -> dict[str, Any]:
        return {_JSON_KEYS[f.name]: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LineItem:
        kwargs: dict[str, Any] = {}
        for attr, key in _JSON_KEYS.items():
            if key in data and data[key] is not None:
                kwargs[attr] = data[key]
        kwargs.setdefault("ledger_account", "")
        return cls(**kwargs)
