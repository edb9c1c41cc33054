"""
CLI Entry Point: residency-audit

Compile the audit package for a tax year and write it as JSON for a renderer.
"""

from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path

from residency_tracker.audit import DOCUMENT_FULL_AUDIT, DOCUMENT_STATE_SUMMARY, DOCUMENT_TYPES, package_to_dict
from residency_tracker.cli.common import add_common_arguments, build_engine, configure_logging, write_json
from residency_tracker.intervals import InvalidIntervalError
from residency_tracker.utils import console
from residency_tracker.utils.contracts import ContractError


def main() -> None:
    parser = argparse.ArgumentParser(description="Compile an audit package (state, days, expenses, journal).")
    add_common_arguments(parser)
    parser.add_argument("--state", default=None, help="Restrict the package to one state code.")
    parser.add_argument("--document-type", choices=DOCUMENT_TYPES, default=None, help="Document type to record.")
    parser.add_argument("--out", type=Path, default=None, help="JSON output path.")
    parser.add_argument("--interactive", action="store_true", help="Prompt for missing year and owner.")
    args = parser.parse_args()
    configure_logging(args.verbose)

    if args.interactive and console.is_interactive():
        if args.year is None:
            args.year = int(console.ask_input("Tax year", default=str(date.today().year)))
        if args.owner is None and not args.demo:
            args.owner = console.ask_input("Owner id")

    year = args.year or date.today().year
    document_type = args.document_type or (DOCUMENT_STATE_SUMMARY if args.state else DOCUMENT_FULL_AUDIT)
    out_path = args.out or Path(f"reports/audit_package_{year}{'_' + args.state if args.state else ''}.json")

    try:
        engine, owner_id = build_engine(args)
        package = engine.compile_audit_package(owner_id, year, state=args.state, document_type=document_type)
    except InvalidIntervalError as e:
        sys.exit(f"Invalid date range in records: {e}")
    except ContractError as e:
        sys.exit(f"Audit package failed validation: {e}")
    except (FileNotFoundError, ValueError) as e:
        sys.exit(f"Error building audit package: {e}")

    write_json(out_path, package_to_dict(package))

    summary = package.summary
    console.print_table(
        f"Audit Package {year}",
        ["State", "Days", "Status", "Expenses"],
        [
            [
                section.state,
                str(section.total_days),
                section.compliance_status,
                f"${section.expense_total:,.2f}",
            ]
            for section in package.state_sections
        ],
    )
    if summary.compliance_status != "Compliant":
        console.print_warning(
            f"{summary.representative_state} is at or above {engine.config.thresholds.statutory_days} days."
        )
    console.print_success(
        f"{len(package.state_sections)} state section(s), overall risk {console.risk_markup(summary.risk_level)}. "
        f"Package JSON: {out_path}"
    )


if __name__ == "__main__":
    main()
