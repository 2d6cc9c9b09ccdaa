from __future__ import annotations

import logging
import math
from collections.abc import Callable
from typing import Any

from ..excel.cells import to_percentage_scale
from ..models.derived_metric import DerivedMetric
from ..models.line_item import LineItem
from ..models.pl_report import PlReport
from .classifier import classify

"""Derived KPI computation for one period report.

Every metric is computed independently. A metric whose inputs are missing, or
whose formula would divide by zero (or by a missing denominator), is left out
of the result; callers render absent keys as "no data".

Prior-year figures come from the report's own prior-year columns unless the
prior-year report of the same period is passed explicitly, in which case that
report's actuals are used.
"""

__all__ = [
    "METRIC_KEYS",
    "TOP_CONTROLLABLE_EXCLUSIONS",
    "OLO_ITEMS",
    "RENT_ITEMS",
    "compute_metrics",
    "metrics_to_dict",
]

logger = logging.getLogger(__name__)

METRIC_KEYS = (
    "sss",
    "sst",
    "check_average",
    "olo_pct",
    "cogs_pct",
    "labor_pct",
    "controllable_profit_pct",
    "restaurant_contribution_pct",
    "rent",
    "flow_through",
    "top_controllable",
)

OLO_ITEMS = ("panda digital %", "3rd party digital %")
RENT_ITEMS = ("rent - min", "rent - other")

# 上位コントローラブル費用の対象外 (合計行・広告系・外部手数料)
TOP_CONTROLLABLE_EXCLUSIONS = frozenset(
    {
        "corporate advertising",
        "media",
        "local store marketing",
        "advertising",
        "credit card fees",
        "third party delivery fee",
        "restaurant expenses",
        "total controllables",
        "profit before adv",
        "controllable profit",
    }
)


class _Figures:
    """Current / prior lookups over one report (and optionally its prior-year report)."""

    def __init__(self, current: PlReport, prior: PlReport | None) -> None:
        self.current = current
        self.prior = prior

    def line(self, name: str) -> float | None:
        return self.current.summary_data.figure(name, "actuals")

    def line_prior(self, name: str) -> float | None:
        if self.prior is not None:
            return self.prior.summary_data.figure(name, "actuals")
        return self.current.summary_data.figure(name, "prior_year")

    def item_prior(self, item: LineItem) -> float:
        if self.prior is None:
            return item.prior_year
        match = self.prior.find_item(item.ledger_account)
        # 前年レポートに無い科目は当期レポートの前年列を使う
        return item.prior_year if match is None else match.actuals

    def items_sum(
        self,
        names: tuple[str, ...],
        scale: Callable[[float], float] = float,
    ) -> tuple[float | None, float | None]:
        """Sum actuals / prior of the named items.

        (None, None) unless every named item exists in the current report. A
        prior report lacking any of them is ignored in favour of the current
        report's prior-year column, so both sums cover the same items.
        """
        current_items = [self.current.find_item(n) for n in names]
        if any(i is None for i in current_items):
            return None, None
        value = sum(scale(i.actuals) for i in current_items)  # type: ignore[union-attr]
        if self.prior is not None:
            prior_items = [self.prior.find_item(n) for n in names]
            if all(i is not None for i in prior_items):
                return value, sum(scale(i.actuals) for i in prior_items)  # type: ignore[union-attr]
        return value, sum(scale(i.prior_year) for i in current_items)  # type: ignore[union-attr]


def _finite(value: float) -> bool:
    return not (math.isnan(value) or math.isinf(value))


def _growth(current: float | None, prior: float | None) -> DerivedMetric | None:
    if current is None or prior is None or prior == 0:
        return None
    difference = current - prior
    change = difference / prior * 100
    if not _finite(change):
        return None
    return DerivedMetric(
        value=current,
        prior_year=prior,
        difference=difference,
        change_percent=change,
        is_positive=difference > 0,
    )


def _ratio(
    numerator: float | None,
    denominator: float | None,
    prior_numerator: float | None,
    prior_denominator: float | None,
    *,
    lower_is_better: bool,
) -> DerivedMetric | None:
    if None in (numerator, denominator, prior_numerator, prior_denominator):
        return None
    if denominator == 0 or prior_denominator == 0:
        return None
    value = numerator / denominator * 100  # type: ignore[operator]
    prior = prior_numerator / prior_denominator * 100  # type: ignore[operator]
    difference = value - prior
    return DerivedMetric(
        value=value,
        prior_year=prior,
        difference=difference,
        is_positive=difference < 0 if lower_is_better else difference > 0,
    )


def _delta(current: float | None, prior: float | None, *, lower_is_better: bool) -> DerivedMetric | None:
    if current is None or prior is None:
        return None
    difference = current - prior
    return DerivedMetric(
        value=current,
        prior_year=prior,
        difference=difference,
        is_positive=difference < 0 if lower_is_better else difference > 0,
    )


def _subtract(a: float | None, b: float | None) -> float | None:
    if a is None or b is None:
        return None
    return a - b


def _flow_through(f: _Figures) -> DerivedMetric | None:
    cp, cp_prior = f.line("controllable_profit"), f.line_prior("controllable_profit")
    ns, ns_prior = f.line("net_sales"), f.line_prior("net_sales")
    if None in (cp, cp_prior, ns, ns_prior):
        return None
    ns_diff = ns - ns_prior  # type: ignore[operator]
    if ns_diff == 0:
        return None
    value = (cp - cp_prior) / ns_diff * 100  # type: ignore[operator]
    return DerivedMetric(value=value, is_positive=value > 0)


def _top_controllable(f: _Figures) -> DerivedMetric | None:
    candidates = [
        item
        for item in classify(f.current.line_items)["controllables"]
        if item.actuals > 0 and item.name_key not in TOP_CONTROLLABLE_EXCLUSIONS
    ]
    if not candidates:
        return None
    # 同額は先頭優先
    top = max(candidates, key=lambda item: item.actuals)
    prior = f.item_prior(top)
    difference = top.actuals - prior
    return DerivedMetric(
        value=top.actuals,
        prior_year=prior,
        difference=difference,
        label=top.ledger_account,
        is_positive=difference < 0,
    )


def compute_metrics(current: PlReport, prior: PlReport | None = None) -> dict[str, DerivedMetric]:
    """Compute the KPI set of one report.

    Args:
        current: Parsed report of the period
        prior: Same period of the previous year; None to use the report's own
            prior-year columns

    Returns:
        metric key -> DerivedMetric, in METRIC_KEYS order; unavailable metrics
        are absent.
    """
    f = _Figures(current, prior)
    ns, ns_prior = f.line("net_sales"), f.line_prior("net_sales")

    def ratio_of(line: str, *, lower_is_better: bool) -> DerivedMetric | None:
        return _ratio(f.line(line), ns, f.line_prior(line), ns_prior, lower_is_better=lower_is_better)

    olo, olo_prior = f.items_sum(OLO_ITEMS, to_percentage_scale)
    rent, rent_prior = f.items_sum(RENT_ITEMS)

    candidates: dict[str, DerivedMetric | None] = {
        "sss": _growth(ns, ns_prior),
        "sst": _growth(f.line("total_transactions"), f.line_prior("total_transactions")),
        "check_average": _growth(f.line("check_average"), f.line_prior("check_average")),
        "olo_pct": _delta(olo, olo_prior, lower_is_better=False),
        "cogs_pct": ratio_of("cost_of_goods_sold", lower_is_better=True),
        "labor_pct": ratio_of("total_labor", lower_is_better=True),
        "controllable_profit_pct": ratio_of("controllable_profit", lower_is_better=False),
        "restaurant_contribution_pct": _ratio(
            _subtract(f.line("controllable_profit"), f.line("fixed_costs")),
            ns,
            _subtract(f.line_prior("controllable_profit"), f.line_prior("fixed_costs")),
            ns_prior,
            lower_is_better=False,
        ),
        "rent": _delta(rent, rent_prior, lower_is_better=True),
        "flow_through": _flow_through(f),
        "top_controllable": _top_controllable(f),
    }
    metrics = {key: metric for key, metric in candidates.items() if metric is not None}
    omitted = [key for key, metric in candidates.items() if metric is None]
    if omitted:
        logger.debug("metrics omitted (missing inputs): %s", ", ".join(omitted))
    return metrics


def metrics_to_dict(metrics: dict[str, DerivedMetric]) -> dict[str, Any]:
    """JSON-ready rendering of compute_metrics() output."""
    return {key: metric.to_dict() for key, metric in metrics.items()}
