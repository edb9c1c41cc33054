"""
CLI Entry Point: residency-stats

Per-state day totals and dashboard figures for one owner and tax year.
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from decimal import Decimal

from residency_tracker.cli.common import add_common_arguments, build_engine, configure_logging
from residency_tracker.dashboard import stats_to_dict
from residency_tracker.intervals import InvalidIntervalError
from residency_tracker.utils.console import print_error, print_step, print_table, risk_markup
from residency_tracker.utils.contracts import ContractError


def format_money(value: Decimal) -> str:
    return f"${value:,.2f}"


def main() -> None:
    parser = argparse.ArgumentParser(description="Show per-state residency day totals and risk levels.")
    add_common_arguments(parser)
    parser.add_argument("--json", action="store_true", help="Output machine-readable JSON.")
    args = parser.parse_args()
    configure_logging(args.verbose)

    year = args.year or date.today().year
    try:
        engine, owner_id = build_engine(args)
    except InvalidIntervalError as e:
        sys.exit(f"Invalid date range in records: {e}")
    except (ContractError, FileNotFoundError, ValueError) as e:
        sys.exit(f"Error loading records: {e}")

    totals = engine.compute_state_day_totals(owner_id, year)
    stats = engine.compute_dashboard_stats(owner_id, year)

    if args.json:
        payload = {
            "owner_id": owner_id,
            "tax_year": year,
            "states": [total._asdict() for total in totals],
            "dashboard": stats_to_dict(stats),
        }
        print(json.dumps(payload, indent=2))
        return

    print_step(f"Residency days for {owner_id} ({year})")
    if not totals:
        print_error("No stays recorded for this tax year.")
    print_table(
        "State Day Totals",
        ["State", "Days", "Days Remaining", "At Risk", "Risk"],
        [
            [
                total.state,
                str(total.total_days),
                str(total.days_remaining),
                "yes" if total.is_at_risk else "no",
                risk_markup(total.risk_level),
            ]
            for total in totals
        ],
    )
    print_table(
        "Dashboard",
        ["Days Tracked", "Active States", "Est. Tax Savings*", "Overall Risk"],
        [
            [
                str(stats.total_days_tracked),
                str(stats.active_states),
                format_money(stats.estimated_tax_savings),
                risk_markup(stats.risk_level),
            ]
        ],
    )
    print("* Rough heuristic per high-tax state kept under the threshold, not a tax calculation.")


if __name__ == "__main__":
    main()
