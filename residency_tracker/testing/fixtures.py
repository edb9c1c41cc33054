#!/usr/bin/env python3
"""
Demo record set: a snowbird splitting the year between Florida and New York.

Used by the `--demo` flag of the command line tools and by the test suite.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from residency_tracker.audit import Expense, JournalEntry
from residency_tracker.intervals import PROVENANCE_GEO, ResidencyInterval
from residency_tracker.repository import InMemoryRepository

DEMO_OWNER_ID = "demo-user-axc_019"


def demo_intervals(year: int, owner_id: str = DEMO_OWNER_ID) -> list[ResidencyInterval]:
    return [
        ResidencyInterval(
            id="rl_001",
            owner_id=owner_id,
            state="FL",
            start_date=date(year, 1, 1),
            end_date=date(year, 3, 22),
            purpose="Primary residence",
            notes="Utility bills and HOA statements saved for the audit binder.",
        ),
        ResidencyInterval(
            id="rl_002",
            owner_id=owner_id,
            state="NY",
            start_date=date(year, 2, 11),
            end_date=date(year, 2, 18),
            purpose="Family visit",
            provenance=PROVENANCE_GEO,
        ),
    ]


def demo_expenses(year: int, owner_id: str = DEMO_OWNER_ID) -> list[Expense]:
    return [
        Expense("ex_001", owner_id, date(year, 1, 9), Decimal("84.20"), "Groceries", "FL", "Publix, Naples"),
        Expense("ex_002", owner_id, date(year, 2, 3), Decimal("212.45"), "Utilities", "FL", "FPL electric bill"),
        Expense("ex_003", owner_id, date(year, 2, 12), Decimal("389.00"), "Lodging", "NY", "Hotel, Manhattan"),
        Expense("ex_004", owner_id, date(year, 2, 14), Decimal("96.30"), "Dining", "NY", None),
        Expense("ex_005", owner_id, date(year, 3, 1), Decimal("59.99"), "Subscriptions", None, "Cloud storage"),
    ]


def demo_journal_entries(year: int, owner_id: str = DEMO_OWNER_ID) -> list[JournalEntry]:
    return [
        JournalEntry(
            "jr_001",
            owner_id,
            date(year, 1, 2),
            "Arrived in Naples",
            "Drove down from New York; mail forwarding active.",
            "travel",
            "FL",
        ),
        JournalEntry(
            "jr_002",
            owner_id,
            date(year, 2, 18),
            "Back to Florida",
            "Flight JFK to RSW, boarding pass saved.",
            "travel",
            "NY",
        ),
        JournalEntry(
            "jr_003",
            owner_id,
            date(year, 3, 5),
            "Voter registration",
            "Confirmed Collier County voter registration.",
            "legal",
        ),
    ]


def build_demo_repository(year: int | None = None, owner_id: str = DEMO_OWNER_ID) -> InMemoryRepository:
    year = year or date.today().year
    return InMemoryRepository(
        intervals=demo_intervals(year, owner_id),
        expenses=demo_expenses(year, owner_id),
        journal_entries=demo_journal_entries(year, owner_id),
    )
