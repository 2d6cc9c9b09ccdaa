from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ..models.line_item import LineItem

"""Line-item classification into display categories.

Each category is a rule over the lower-cased, trimmed ledger account name:
sales_breakdown matches by keyword containment, every other category by an
exact allow-list of canonical ledger names. Rules are evaluated in declared
order and the first match wins; anything unmatched lands in "other".
"""

__all__ = [
    "CATEGORIES",
    "OTHER",
    "CategoryRule",
    "DEFAULT_RULES",
    "classify",
    "category_of",
    "find_rule_collisions",
]

OTHER = "other"

CATEGORIES = (
    "sales_breakdown",
    "cogs",
    "labor",
    "controllables",
    "fixed_costs",
    "statistics",
    OTHER,
)


def _names(*names: str) -> frozenset[str]:
    return frozenset(n.strip().lower() for n in names)


@dataclass(frozen=True)
class CategoryRule:
    """Membership rule of one category.

    Attributes:
        category: Category key (one of CATEGORIES except "other")
        exact: Lower-cased ledger names matched exactly
        keywords: Lower-cased substrings; any hit matches
        excludes: Lower-cased substrings that veto a keyword match
    """
    category: str
    exact: frozenset[str] = frozenset()
    keywords: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()

    def matches(self, name_key: str) -> bool:
        if name_key in self.exact:
            return True
        if not self.keywords or any(x in name_key for x in self.excludes):
            return False
        return any(k in name_key for k in self.keywords)


DEFAULT_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        category="sales_breakdown",
        keywords=(
            "food sales",
            "drink sales",
            "retail sales",
            "gross sales",
            "employee meals",
            "20% emp discount",
            "emp discount",
            "coupons",
            "promotions",
            "net sales",
        ),
        excludes=("psa - net sales",),
    ),
    CategoryRule(
        category="cogs",
        exact=_names(
            "Grocery", "Meat", "Produce", "Sea Food", "Drinks", "Paper Goods", "Other",
            "Cost of Goods Sold",
        ),
    ),
    CategoryRule(
        category="labor",
        exact=_names(
            "Front", "back", "Overtime", "Training Wages", "Emergency Store Closure Pay",
            "Direct Labor", "GM Salaries", "GM Overtime", "Other MGMT Salaries",
            "Other MGMT Overtime", "Guaranteed Hourly", "Bereavement Pay", "Guaranteed Overtime",
            "Management Labor", "Payroll Taxes", "Meal Break Premium", "Rest Break Premium",
            "Scheduling Premium Pay", "Workers Comp", "Benefits", "Bonus", "Vacation",
            "Taxes and Benefits", "Total Labor",
        ),
    ),
    CategoryRule(
        category="controllables",
        exact=_names(
            "Third Party Delivery Fee", "Credit Card Fees", "Broadband", "Electricity", "Gas",
            "Telephone", "Waste Disposal", "Water", "Computer Software Expense",
            "Office and Computer Supplies", "Education and Training Other", "Recruitment",
            "Professional Services", "Travel Expenses", "Bank Fees", "Dues and Subscriptions",
            "Moving and Relocation Expenses", "Other Expenses", "Postage and Courier Service",
            "Repairs", "Maintenance", "Restaurant Expenses", "Restaurant Supplies",
            "Total Controllables", "Profit Before Adv", "Advertising", "Corporate Advertising",
            "Media", "Local Store Marketing", "Grand Opening", "Lease Marketing",
            "Controllable Profit",
        ),
    ),
    CategoryRule(
        category="fixed_costs",
        exact=_names(
            "Rent - MIN", "Rent - Storage", "Rent - Percent", "Rent - Other",
            "Rent - Deferred Preopening", "Insurance", "Taxes", "License and Fees",
            "Amortization", "Depreciation", "Total Fixed Cost",
        ),
    ),
    CategoryRule(
        category="statistics",
        exact=_names(
            "Sales Data", "Total Transactions", "Check Avg - Net", "Fundraising Events Sales",
            "Virtual Fundraising Sales", "Catering Sales", "Panda Digital Sales",
            "3rd Party Digital Sales", "Reward Redemptions", "Daypart & Sales Channel %",
            "Breakfast %", "Lunch %", "Afternoon %", "Evening %", "Dinner %", "Dine In %",
            "Take Out %", "Drive Thru %", "3rd Party Digital %", "Panda Digital %",
            "In Store Catering %", "Labor Data", "Direct Labor Hours Total",
            "Average Hourly Wage", "Direct Labor Hours", "Overtime Hours", "Training Hours",
            "Guaranteed Hours", "Management Hours", "Direct Hours Productivity",
            "Total Hours Productivity", "Direct Hours Transaction Productivity",
            "Total Hours Transaction Productivity", "Management Headcount",
            "Assistant Manager Headcount", "Chef Headcount", "PSA - Per Store Average",
            "Store Period", "PSA - Transactions", "PSA - Net Sales", "PSA - Total Labor",
            "PSA - Controllables", "PSA - Control Profit", "PSA - Fixed Costs",
            "PSA - Rests Contribution", "PSA - Cash Flow",
        ),
    ),
)


def category_of(name: str, rules: Sequence[CategoryRule] = DEFAULT_RULES) -> str:
    """Category key for one ledger account name ("other" when no rule matches)."""
    key = name.strip().lower()
    for rule in rules:
        if rule.matches(key):
            return rule.category
    return OTHER


def classify(
    line_items: Iterable[LineItem],
    rules: Sequence[CategoryRule] = DEFAULT_RULES,
) -> dict[str, list[LineItem]]:
    """Partition line items by category, preserving input order.

    Every category key is present in the result (empty lists included), in
    CATEGORIES order.
    """
    grouped: dict[str, list[LineItem]] = {category: [] for category in CATEGORIES}
    for rule in rules:
        grouped.setdefault(rule.category, [])
    for item in line_items:
        grouped[category_of(item.ledger_account, rules)].append(item)
    return grouped


def find_rule_collisions(
    rules: Sequence[CategoryRule] = DEFAULT_RULES,
    names: Iterable[str] | None = None,
) -> dict[str, list[str]]:
    """Names claimed by more than one rule.

    Args:
        rules: Rules to check
        names: Ledger names to check; defaults to every exact name in rules

    Returns:
        name -> categories (declared order) for each ambiguous name
    """
    if names is None:
        candidates = sorted({n for rule in rules for n in rule.exact})
    else:
        candidates = [n.strip().lower() for n in names]
    collisions: dict[str, list[str]] = {}
    for name in candidates:
        hits = [rule.category for rule in rules if rule.matches(name)]
        if len(hits) > 1:
            collisions[name] = hits
    return collisions
