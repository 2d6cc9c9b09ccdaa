from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any

"""SummaryData: fixed set of named aggregate figures of a P&L report.

Derived once from the LineItems at parse time and stored alongside them.
Each summary line keeps all eight report columns (LineFigures); a line that is
absent from the report is None instead of a zero-filled placeholder.
to_dict() flattens everything into the persisted camelCase shape
(netSales, netSalesPlan, ..., netSalesPriorYearYtd, totalTransactions, ...).
"""

__all__ = [
    "LineFigures",
    "OperatingStatistics",
    "SummaryData",
    "SUMMARY_LINES",
    "STATISTIC_LINES",
]

# LineFigures 属性 -> フラット化時のキー接尾辞
_COLUMN_SUFFIXES = {
    "actuals": "",
    "plan": "Plan",
    "vfp": "Vfp",
    "prior_year": "PriorYear",
    "actual_ytd": "ActualYtd",
    "plan_ytd": "PlanYtd",
    "vfp_ytd": "VfpYtd",
    "prior_year_ytd": "PriorYearYtd",
}

# SummaryData 属性 -> JSON キー接頭辞
SUMMARY_LINES = {
    "net_sales": "netSales",
    "gross_sales": "grossSales",
    "cost_of_goods_sold": "costOfGoodsSold",
    "total_labor": "totalLabor",
    "controllables": "controllables",
    "controllable_profit": "controllableProfit",
    "advertising": "advertising",
    "fixed_costs": "fixedCosts",
    "restaurant_contribution": "restaurantContribution",
    "cashflow": "cashflow",
    "total_transactions": "totalTransactions",
    "check_average": "checkAverage",
}

# OperatingStatistics 属性 -> (JSON キー, 元帳科目名 (小文字), パーセント列か)
STATISTIC_LINES: dict[str, tuple[str, str, bool]] = {
    "direct_labor_hours": ("directLaborHours", "direct labor hours", False),
    "average_hourly_wage": ("averageHourlyWage", "average hourly wage", False),
    "direct_hours_productivity": ("directHoursProductivity", "direct hours productivity", False),
    "total_hours_productivity": ("totalHoursProductivity", "total hours productivity", False),
    "management_headcount": ("managementHeadcount", "management headcount", False),
    "assistant_manager_headcount": ("assistantManagerHeadcount", "assistant manager headcount", False),
    "chef_headcount": ("chefHeadcount", "chef headcount", False),
    "breakfast_percentage": ("breakfastPercentage", "breakfast %", True),
    "lunch_percentage": ("lunchPercentage", "lunch %", True),
    "afternoon_percentage": ("afternoonPercentage", "afternoon %", True),
    "evening_percentage": ("eveningPercentage", "evening %", True),
    "dinner_percentage": ("dinnerPercentage", "dinner %", True),
    "dine_in_percentage": ("dineInPercentage", "dine in %", True),
    "take_out_percentage": ("takeOutPercentage", "take out %", True),
    "drive_thru_percentage": ("driveThruPercentage", "drive thru %", True),
    "third_party_digital_percentage": ("thirdPartyDigitalPercentage", "3rd party digital %", True),
    "panda_digital_percentage": ("pandaDigitalPercentage", "panda digital %", True),
    "in_store_catering_percentage": ("inStoreCateringPercentage", "in store catering %", True),
    "catering_sales": ("cateringSales", "catering sales", False),
    "panda_digital_sales": ("pandaDigitalSales", "panda digital sales", False),
    "third_party_digital_sales": ("thirdPartyDigitalSales", "3rd party digital sales", False),
    "reward_redemptions": ("rewardRedemptions", "reward redemptions", False),
    "fundraising_events_sales": ("fundraisingEventsSales", "fundraising events sales", False),
    "virtual_fundraising_sales": ("virtualFundraisingSales", "virtual fundraising sales", False),
}


@dataclass(frozen=True)
class LineFigures:
    """The eight numeric report columns of one summary line."""
    actuals: float = 0.0
    plan: float = 0.0
    vfp: float = 0.0
    prior_year: float = 0.0
    actual_ytd: float = 0.0
    plan_ytd: float = 0.0
    vfp_ytd: float = 0.0
    prior_year_ytd: float = 0.0


@dataclass(frozen=True)
class OperatingStatistics:
    """Single-value operating statistics (actuals column only).

    Percentages are whole-number percentages.
    """
    direct_labor_hours: float | None = None
    average_hourly_wage: float | None = None
    direct_hours_productivity: float | None = None
    total_hours_productivity: float | None = None
    management_headcount: float | None = None
    assistant_manager_headcount: float | None = None
    chef_headcount: float | None = None
    breakfast_percentage: float | None = None
    lunch_percentage: float | None = None
    afternoon_percentage: float | None = None
    evening_percentage: float | None = None
    dinner_percentage: float | None = None
    dine_in_percentage: float | None = None
    take_out_percentage: float | None = None
    drive_thru_percentage: float | None = None
    third_party_digital_percentage: float | None = None
    panda_digital_percentage: float | None = None
    in_store_catering_percentage: float | None = None
    catering_sales: float | None = None
    panda_digital_sales: float | None = None
    third_party_digital_sales: float | None = None
    reward_redemptions: float | None = None
    fundraising_events_sales: float | None = None
    virtual_fundraising_sales: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {STATISTIC_LINES[f.name][0]: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class SummaryData:
    net_sales: LineFigures | None = None
    gross_sales: LineFigures | None = None
    cost_of_goods_sold: LineFigures | None = None
    total_labor: LineFigures | None = None
    controllables: LineFigures | None = None
    controllable_profit: LineFigures | None = None
    advertising: LineFigures | None = None
    fixed_costs: LineFigures | None = None
    restaurant_contribution: LineFigures | None = None
    cashflow: LineFigures | None = None
    total_transactions: LineFigures | None = None
    check_average: LineFigures | None = None
    statistics: OperatingStatistics = field(default_factory=OperatingStatistics)

    def figure(self, line: str, column: str = "actuals") -> float | None:
        """Return one figure, e.g. figure("net_sales", "prior_year").

        None when the summary line was not present in the report.
        """
        figures: LineFigures | None = getattr(self, line)
        if figures is None:
            return None
        return getattr(figures, column)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for attr, prefix in SUMMARY_LINES.items():
            figures: LineFigures | None = getattr(self, attr)
            for column, suffix in _COLUMN_SUFFIXES.items():
                out[prefix + suffix] = None if figures is None else getattr(figures, column)
        out.update(self.statistics.to_dict())
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SummaryData:
        kwargs: dict[str, Any] = {}
        for attr, prefix in SUMMARY_LINES.items():
            values = {column: data.get(prefix + suffix) for column, suffix in _COLUMN_SUFFIXES.items()}
            if all(v is None for v in values.values()):
                continue
            kwargs[attr] = LineFigures(**{k: (v if v is not None else 0.0) for k, v in values.items()})
        stats = {attr: data.get(key) for attr, (key, _, _) in STATISTIC_LINES.items()}
        kwargs["statistics"] = OperatingStatistics(**stats)
        return cls(**kwargs)
