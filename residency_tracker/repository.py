"""
Record store abstraction.

The engine never imports a concrete store. Anything implementing
`ResidencyRepository` can back it; `InMemoryRepository` serves tests, the demo
data set and the command line tools.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from residency_tracker.alerts import Alert
from residency_tracker.audit import AuditGenerationRecord, Expense, JournalEntry
from residency_tracker.intervals import ResidencyInterval, overlaps_year, validate_interval
from residency_tracker.utils.contracts import validate_output

logger = logging.getLogger(__name__)


class RecordNotFoundError(KeyError):
    pass


class ResidencyRepository(Protocol):
    def add_interval(self, interval: ResidencyInterval) -> ResidencyInterval: ...

    def update_interval(self, interval: ResidencyInterval) -> ResidencyInterval: ...

    def delete_interval(self, interval_id: str) -> None: ...

    def get_interval(self, interval_id: str) -> ResidencyInterval: ...

    def list_intervals(
        self, owner_id: str, year: int | None = None, state: str | None = None
    ) -> list[ResidencyInterval]: ...

    def list_expenses(self, owner_id: str, year: int | None = None, state: str | None = None) -> list[Expense]: ...

    def list_journal_entries(
        self, owner_id: str, year: int | None = None, state: str | None = None
    ) -> list[JournalEntry]: ...

    def create_alert(self, alert: Alert) -> Alert: ...

    def list_alerts(self, owner_id: str, unread_only: bool = False) -> list[Alert]: ...

    def mark_alert_read(self, alert_id: str) -> None: ...

    def delete_alert(self, alert_id: str) -> None: ...

    def record_audit_generation(self, record: AuditGenerationRecord) -> AuditGenerationRecord: ...

    def list_audit_generations(self, owner_id: str) -> list[AuditGenerationRecord]: ...


class InMemoryRepository:
    def __init__(
        self,
        intervals: list[ResidencyInterval] | None = None,
        expenses: list[Expense] | None = None,
        journal_entries: list[JournalEntry] | None = None,
    ) -> None:
        self._intervals: dict[str, ResidencyInterval] = {}
        self._expenses: dict[str, Expense] = {e.id: e for e in expenses or []}
        self._journal_entries: dict[str, JournalEntry] = {j.id: j for j in journal_entries or []}
        self._alerts: dict[str, Alert] = {}
        self._generations: list[AuditGenerationRecord] = []
        for interval in intervals or []:
            self.add_interval(interval)

    # Intervals

    def add_interval(self, interval: ResidencyInterval) -> ResidencyInterval:
        validate_interval(interval)
        if interval.id in self._intervals:
            raise ValueError(f"Duplicate interval id: {interval.id}")
        self._intervals[interval.id] = interval
        return interval

    def update_interval(self, interval: ResidencyInterval) -> ResidencyInterval:
        validate_interval(interval)
        if interval.id not in self._intervals:
            raise RecordNotFoundError(interval.id)
        self._intervals[interval.id] = interval
        return interval

    def delete_interval(self, interval_id: str) -> None:
        if self._intervals.pop(interval_id, None) is None:
            raise RecordNotFoundError(interval_id)

    def get_interval(self, interval_id: str) -> ResidencyInterval:
        try:
            return self._intervals[interval_id]
        except KeyError:
            raise RecordNotFoundError(interval_id) from None

    def list_intervals(
        self, owner_id: str, year: int | None = None, state: str | None = None
    ) -> list[ResidencyInterval]:
        # Year selection keeps any overlap; clipping happens in the aggregator.
        rows = [
            i
            for i in self._intervals.values()
            if i.owner_id == owner_id
            and (year is None or overlaps_year(i, year))
            and (state is None or i.state == state)
        ]
        return sorted(rows, key=lambda i: (i.start_date, i.end_date, i.id))

    # Evidence

    def add_expense(self, expense: Expense) -> Expense:
        self._expenses[expense.id] = expense
        return expense

    def add_journal_entry(self, entry: JournalEntry) -> JournalEntry:
        self._journal_entries[entry.id] = entry
        return entry

    def list_expenses(self, owner_id: str, year: int | None = None, state: str | None = None) -> list[Expense]:
        rows = [
            e
            for e in self._expenses.values()
            if e.owner_id == owner_id
            and (year is None or e.expense_date.year == year)
            and (state is None or e.state == state)
        ]
        return sorted(rows, key=lambda e: (e.expense_date, e.id))

    def list_journal_entries(
        self, owner_id: str, year: int | None = None, state: str | None = None
    ) -> list[JournalEntry]:
        rows = [
            j
            for j in self._journal_entries.values()
            if j.owner_id == owner_id
            and (year is None or j.entry_date.year == year)
            and (state is None or j.state == state)
        ]
        return sorted(rows, key=lambda j: (j.entry_date, j.id))

    # Alerts

    def create_alert(self, alert: Alert) -> Alert:
        self._alerts[alert.id] = alert
        return alert

    def list_alerts(self, owner_id: str, unread_only: bool = False) -> list[Alert]:
        rows = [a for a in self._alerts.values() if a.owner_id == owner_id and not (unread_only and a.is_read)]
        return sorted(rows, key=lambda a: a.created_at, reverse=True)

    def mark_alert_read(self, alert_id: str) -> None:
        if alert_id not in self._alerts:
            raise RecordNotFoundError(alert_id)
        self._alerts[alert_id].is_read = True

    def delete_alert(self, alert_id: str) -> None:
        if self._alerts.pop(alert_id, None) is None:
            raise RecordNotFoundError(alert_id)

    # Audit history

    def record_audit_generation(self, record: AuditGenerationRecord) -> AuditGenerationRecord:
        self._generations.append(record)
        return record

    def list_audit_generations(self, owner_id: str) -> list[AuditGenerationRecord]:
        rows = [r for r in self._generations if r.owner_id == owner_id]
        return sorted(rows, key=lambda r: r.generated_at, reverse=True)


def repository_from_payload(payload: dict[str, Any]) -> InMemoryRepository:
    validate_output(payload, "records", mode="FILING")
    return InMemoryRepository(
        intervals=[ResidencyInterval.from_dict(row) for row in payload.get("intervals", [])],
        expenses=[Expense.from_dict(row) for row in payload.get("expenses", [])],
        journal_entries=[JournalEntry.from_dict(row) for row in payload.get("journal_entries", [])],
    )


def load_repository(path: Path) -> InMemoryRepository:
    with path.open("r", encoding="utf-8") as handle:
        payload: dict[str, Any] = json.load(handle)
    repository = repository_from_payload(payload)
    logger.debug("Loaded records from %s", path)
    return repository


def export_records(repository: ResidencyRepository, owner_id: str) -> dict[str, Any]:
    """Dump an owner's records in the same layout `repository_from_payload` reads."""
    payload = {
        "intervals": [i.to_dict() for i in repository.list_intervals(owner_id)],
        "expenses": [e.to_dict() for e in repository.list_expenses(owner_id)],
        "journal_entries": [j.to_dict() for j in repository.list_journal_entries(owner_id)],
    }
    validate_output(payload, "records", mode="FILING")
    return payload
