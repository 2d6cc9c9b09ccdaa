#!/usr/bin/env python3
"""Sample report generator.

Writes synthetic period P&L workbooks in the store export layout (title and
metadata rows, a "Ledger Account" header row, one row per ledger account) and
optionally a three-row-header guest survey CSV, for trying out the importer
or sizing a run.

Generated workbooks are deterministic for a given seed.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

HEADER = [
    "Ledger Account",
    "Actuals",
    "Actuals %",
    "Plan",
    "Plan %",
    "VFP",
    "Prior Year",
    "Prior Year %",
]

# (ledger account, share of net sales); None -> statistic row handled separately
LEDGER_LINES: list[tuple[str, float]] = [
    ("Food Sales", 0.86),
    ("Drink Sales", 0.14),
    ("Gross Sales", 1.02),
    ("Promotions", -0.02),
    ("Net Sales", 1.0),
    ("Grocery", 0.12),
    ("Meat", 0.11),
    ("Produce", 0.05),
    ("Paper Goods", 0.04),
    ("Cost of Goods Sold", 0.32),
    ("Direct Labor", 0.19),
    ("Management Labor", 0.06),
    ("Taxes and Benefits", 0.03),
    ("Total Labor", 0.28),
    ("Third Party Delivery Fee", 0.02),
    ("Credit Card Fees", 0.025),
    ("Electricity", 0.02),
    ("Repairs", 0.015),
    ("Maintenance", 0.01),
    ("Restaurant Supplies", 0.012),
    ("Total Controllables", 0.16),
    ("Controllable Profit", 0.24),
    ("Rent - MIN", 0.055),
    ("Rent - Other", 0.005),
    ("Insurance", 0.01),
    ("Depreciation", 0.015),
    ("Total Fixed Cost", 0.085),
    ("Restaurant Contribution", 0.155),
]


def _jitter(rng: np.random.Generator, value: float, spread: float = 0.05) -> float:
    return round(value * (1 + rng.uniform(-spread, spread)), 2)


def generate_pl_grid(store: str, period: int, year: int, net_sales: float, seed: int = 42) -> list[list[Any]]:
    """Build one period P&L export grid.

    Args:
        store: Store name written to the metadata block
        period: Fiscal period (1-13)
        year: Fiscal year of the report
        net_sales: Approximate current-period net sales
        seed: Random seed for reproducible figures

    Returns:
        Grid rows ready for DataFrame(...).to_excel(header=False, index=False)
    """
    rng = np.random.default_rng(seed + period)
    prior_sales = _jitter(rng, net_sales * 0.96)
    grid: list[list[Any]] = [
        ["Panda Restaurant Group - Period P&L"],
        ["Store:", store],
        ["Company:", "Panda Express Inc"],
        ["Period:", f"P{period:02d} {year}"],
        ["Translation Currency:", "USD"],
        [],
        list(HEADER),
    ]
    for name, share in LEDGER_LINES:
        actuals = net_sales if name == "Net Sales" else _jitter(rng, net_sales * share)
        prior = prior_sales if name == "Net Sales" else _jitter(rng, prior_sales * share)
        plan = _jitter(rng, actuals, 0.02)
        grid.append([name, actuals, share, plan, share, round(actuals - plan, 2), prior, share])

    transactions = int(net_sales / 11)
    prior_transactions = int(prior_sales / 10.8)
    grid.extend(
        [
            ["Total Transactions", transactions, None, transactions, None, 0, prior_transactions, None],
            ["Check Avg - Net", round(net_sales / transactions, 2), None, None, None, None,
             round(prior_sales / prior_transactions, 2), None],
            ["Panda Digital %", round(rng.uniform(0.08, 0.15), 4), None, None, None, None,
             round(rng.uniform(0.08, 0.15), 4), None],
            ["3rd Party Digital %", round(rng.uniform(0.05, 0.10), 4), None, None, None, None,
             round(rng.uniform(0.05, 0.10), 4), None],
            ["Direct Labor Hours", round(net_sales / 52, 1), None, None, None, None,
             round(prior_sales / 52, 1), None],
        ]
    )
    return grid


def generate_survey_rows(stores: int, seed: int = 42) -> list[list[str]]:
    """Three-row-header survey export: per-store rows followed by a Total row."""
    rng = np.random.default_rng(seed)
    rows = [
        ["Store", "Count", "Taste of Food", "", "Accuracy of Order", ""],
        ["", "", "Current", "Prior", "Current", "Prior"],
        ["", "", "Score", "Score", "Score", "Score"],
    ]
    counts = rng.integers(20, 120, size=stores)
    for i, count in enumerate(counts):
        rows.append(
            [
                str(1000 + i),
                str(int(count)),
                f"{rng.uniform(60, 85):.1f}%",
                f"{rng.uniform(60, 85):.1f}%",
                f"{rng.uniform(85, 98):.1f}%",
                f"{rng.uniform(85, 98):.1f}%",
            ]
        )
    rows.append(["Total", str(int(counts.sum())), "73.0%", "70.0%", "92.0%", "89.0%"])
    return rows


def write_pl_workbook(output_path: Path, grid: list[list[Any]], sheet: str = "P&L") -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        pd.DataFrame(grid).to_excel(writer, sheet_name=sheet, header=False, index=False)
    print(f"Created workbook: {output_path} ({len(grid)} rows)")


def main() -> int:
    """Main CLI interface for sample report generation."""
    parser = argparse.ArgumentParser(
        description="Generate synthetic P&L workbooks and a survey CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # P01-P13 for one store into ./data
  %(prog)s data

  # Three periods plus last year's reports for prior-year pairing
  %(prog)s data --periods 3 --prior-dir data/prior --survey-stores 25
        """,
    )
    parser.add_argument("output_dir", type=Path, help="Directory for the generated files")
    parser.add_argument("--store", default="Main St #1234", help="Store name (default: 'Main St #1234')")
    parser.add_argument("--periods", type=int, default=13, help="Number of periods, 1-13 (default: 13)")
    parser.add_argument("--year", type=int, default=2025, help="Fiscal year (default: 2025)")
    parser.add_argument("--net-sales", type=float, default=110_000.0, help="Net sales per period (default: 110000)")
    parser.add_argument("--prior-dir", type=Path, default=None, help="Also write last year's reports here")
    parser.add_argument("--survey-stores", type=int, default=0, help="Rows of the survey CSV (0: no survey)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be generated without creating files")
    args = parser.parse_args()

    if not 1 <= args.periods <= 13:
        print("Error: --periods must be between 1 and 13", file=sys.stderr)
        return 1
    if args.net_sales <= 0:
        print("Error: --net-sales must be positive", file=sys.stderr)
        return 1
    if args.survey_stores < 0:
        print("Error: --survey-stores must be >= 0", file=sys.stderr)
        return 1

    store_slug = args.store.split("#")[0].strip()
    targets: list[tuple[Path, int, int]] = []
    for period in range(1, args.periods + 1):
        targets.append((args.output_dir / f"{store_slug} P{period:02d}.xlsx", period, args.year))
        if args.prior_dir is not None:
            targets.append((args.prior_dir / f"{store_slug} P{period:02d} {args.year - 1}.xlsx", period, args.year - 1))

    if args.dry_run:
        for path, period, year in targets:
            print(f"would create {path} (P{period:02d} {year})")
        if args.survey_stores:
            print(f"would create {args.output_dir / 'gem_survey.csv'} ({args.survey_stores} stores)")
        return 0

    try:
        for path, period, year in targets:
            # 前年分は売上を 4% 下げて生成
            sales = args.net_sales if year == args.year else args.net_sales * 0.96
            write_pl_workbook(path, generate_pl_grid(args.store, period, year, sales, args.seed + year))
        if args.survey_stores:
            survey_path = args.output_dir / "gem_survey.csv"
            pd.DataFrame(generate_survey_rows(args.survey_stores, args.seed)).to_csv(
                survey_path, header=False, index=False
            )
            print(f"Created survey: {survey_path}")
    except OSError as e:
        print(f"Error creating files: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
