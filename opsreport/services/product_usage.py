from __future__ import annotations

from collections.abc import Iterable

from ..models.product_usage import GroupUsageSummary, ProductUsage

"""Per-group summary of weekly product usage."""

__all__ = [
    "summarize_by_group",
]


def summarize_by_group(products: Iterable[ProductUsage]) -> list[GroupUsageSummary]:
    """Condense products into one summary per group.

    averageCsPer1k averages only products that have a conversion factor.
    Groups are ordered by product count, largest first; ties keep first-seen
    order.
    """
    grouped: dict[str, list[ProductUsage]] = {}
    for product in products:
        grouped.setdefault(product.group, []).append(product)

    summaries: list[GroupUsageSummary] = []
    for group, members in grouped.items():
        converted = [p.cases_per_1k for p in members if p.cases_per_1k is not None]
        summaries.append(
            GroupUsageSummary(
                group=group,
                product_count=len(members),
                average_usage=sum(p.average_usage for p in members) / len(members),
                average_cs_per_1k=sum(converted) / len(converted) if converted else 0.0,
                products_with_conversion=len(converted),
                conversion_rate=len(converted) / len(members) * 100,
            )
        )
    summaries.sort(key=lambda s: s.product_count, reverse=True)
    return summaries
