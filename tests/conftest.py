import pytest
from datetime import date
from decimal import Decimal

from residency_tracker.audit import Expense, JournalEntry
from residency_tracker.engine import ResidencyEngine
from residency_tracker.intervals import ResidencyInterval
from residency_tracker.repository import InMemoryRepository

YEAR = 2025
OWNER = "owner-1"


def make_interval(interval_id, state, start, end, owner=OWNER, **kwargs):
    return ResidencyInterval(
        id=interval_id,
        owner_id=owner,
        state=state,
        start_date=date.fromisoformat(start),
        end_date=date.fromisoformat(end),
        **kwargs,
    )


def stay_of_days(interval_id, state, days, year=YEAR, owner=OWNER):
    """A single stay starting Jan 1 that covers exactly `days` days."""
    start = date(year, 1, 1)
    end = date.fromordinal(start.toordinal() + days - 1)
    return ResidencyInterval(interval_id, owner, state, start, end)


@pytest.fixture
def repository():
    return InMemoryRepository()


@pytest.fixture
def engine(repository):
    return ResidencyEngine(repository, today=lambda: date(YEAR, 6, 30))


@pytest.fixture
def snowbird_records():
    """FL/NY owner from the product walkthrough."""
    intervals = [
        make_interval("fl-1", "FL", "2025-01-01", "2025-03-22"),
        make_interval("ny-1", "NY", "2025-02-11", "2025-02-18"),
    ]
    expenses = [
        Expense("ex-1", OWNER, date(2025, 1, 9), Decimal("84.20"), "Groceries", "FL"),
        Expense("ex-2", OWNER, date(2025, 2, 3), Decimal("212.45"), "Utilities", "FL"),
        Expense("ex-3", OWNER, date(2025, 2, 12), Decimal("389.00"), "Lodging", "NY"),
        Expense("ex-4", OWNER, date(2025, 2, 14), Decimal("15.80"), "Groceries", "NY"),
        Expense("ex-5", OWNER, date(2025, 3, 1), Decimal("59.99"), "Subscriptions", None),
        Expense("ex-old", OWNER, date(2024, 12, 30), Decimal("999.00"), "Lodging", "FL"),
    ]
    entries = [
        JournalEntry("jr-1", OWNER, date(2025, 1, 2), "Arrived", "Drove down.", "travel", "FL"),
        JournalEntry("jr-2", OWNER, date(2025, 2, 18), "Flight home", "JFK to RSW.", "travel", "NY"),
        JournalEntry("jr-3", OWNER, date(2025, 3, 5), "Voter card", "Registered in Collier.", "legal", None),
    ]
    return intervals, expenses, entries
