#!/usr/bin/env python3
"""
Load a budget spreadsheet into a project and/or print budget vs. actual
comparisons.

Usage:
    python3 scripts/budget_report.py --project-id <uuid> [--budget <xlsx>] [--areas]

Examples:
    # Store a new budget, then print the cost-code comparison
    python3 scripts/budget_report.py --project-id 6f1c... --budget estimate.xlsx

    # Print cost-code and area comparisons from the stored data
    python3 scripts/budget_report.py --project-id 6f1c... --areas

    # Read a specific sheet, naming the hours column explicitly
    python3 scripts/budget_report.py --project-id 6f1c... --budget estimate.xlsx \\
        --sheet Labor --hours-column "Field Hours"
"""

from __future__ import annotations

import argparse
import sys
from decimal import Decimal
from pathlib import Path
from uuid import UUID

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Load a budget spreadsheet and print budget vs. actual hours.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--project-id", required=True, type=UUID, help="Project UUID.")
    parser.add_argument("--budget", type=Path, default=None, help="Budget spreadsheet (.xlsx) to store first.")
    parser.add_argument("--sheet", default=None, help="Sheet name (default: active sheet).")
    parser.add_argument("--code-column", default=None, help="Header of the cost code column.")
    parser.add_argument("--hours-column", default=None, help="Header of the hours column.")
    parser.add_argument("--area-column", default=None, help="Header of the area column.")
    parser.add_argument("--areas", action="store_true", help="Also print the area comparison.")
    parser.add_argument("--config", type=Path, default=None, help="YAML config override.")
    parser.add_argument("--db-url", default=None, help="Database URL (overrides config).")
    return parser.parse_args()


def _fmt(value: Decimal | None) -> str:
    return "-" if value is None else f"{value:,.2f}"


def _print_rows(title: str, rows) -> None:
    print(title)
    print(f"  {'Key':<14} {'Label':<28} {'Budget':>10} {'Actual':>10} {'Variance':>10} {'Var %':>8}")
    for row in rows:
        label = (row.label or "")[:28]
        print(
            f"  {row.key:<14} {label:<28} {_fmt(row.budget_hours):>10} "
            f"{_fmt(row.actual_hours):>10} {_fmt(row.variance_hours):>10} "
            f"{_fmt(row.variance_percent):>8}"
        )


def main() -> int:
    args = _parse_args()

    if args.budget is not None and not args.budget.is_file():
        print(f"ERROR: File not found: {args.budget}", file=sys.stderr)
        return 1

    from labor_config import get_active_config
    from labor_ingestion.adapters import XlsxBudgetAdapter
    from labor_kernel.db.engine import create_tables, get_session, init_engine_from_url
    from labor_kernel.exceptions import LaborTrackerError
    from labor_kernel.logging_config import configure_logging
    from labor_modules.budget.service import BudgetService

    try:
        config = get_active_config(args.config)
    except (OSError, ValueError) as e:
        print(f"ERROR: Failed to load config: {e}", file=sys.stderr)
        return 1
    configure_logging(level=config.logging.level)

    try:
        init_engine_from_url(args.db_url or config.database.url, echo=config.database.echo)
        create_tables()
    except Exception as e:
        print(f"ERROR: Database init failed: {e}", file=sys.stderr)
        return 1

    session = get_session()
    service = BudgetService(session, residual_policy=config.reconciliation.residual_policy)
    try:
        if args.budget is not None:
            options = {
                key: value
                for key, value in (
                    ("sheet", args.sheet),
                    ("code_column", args.code_column),
                    ("hours_column", args.hours_column),
                    ("area_column", args.area_column),
                )
                if value
            }
            payload = XlsxBudgetAdapter().read_budget(args.budget.resolve(), options)
            record = service.record_budget(args.project_id, payload)
            print(
                f"Stored budget {record.filename!r}: {len(record.cost_code_hours)} cost codes, "
                f"{len(record.area_hours)} areas"
            )

        comparison = service.cost_code_comparison(args.project_id)
        _print_rows("Cost codes:", comparison.rows)
        print(
            f"  Totals: budget {_fmt(comparison.budgeted_hours)}, "
            f"actual {_fmt(comparison.actual_hours)}, "
            f"variance {_fmt(comparison.variance_hours)}"
        )

        if args.areas:
            areas = service.area_comparison(args.project_id)
            print()
            _print_rows("Areas:", areas.rows)
            for row in areas.rows:
                breakdown = areas.breakdowns[row.key]
                if breakdown.entries:
                    _print_rows(f"  {row.label}:", breakdown.entries)
    except LaborTrackerError as e:
        print(f"ERROR [{e.code}]: {e}", file=sys.stderr)
        return 1
    finally:
        session.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
