#!/usr/bin/env python3

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Iterable

from residency_tracker.intervals import (
    ResidencyInterval,
    clip_to_year,
    count_days_in_year,
    intervals_for_year,
    parse_date_value,
    pick,
)
from residency_tracker.risk import (
    DEFAULT_THRESHOLDS,
    RiskThresholds,
    compliance_status,
    risk_level_for_days,
    worst_state,
)

DOCUMENT_FULL_AUDIT = "full_audit_package"
DOCUMENT_STATE_SUMMARY = "state_summary"
DOCUMENT_EXPENSE_REPORT = "expense_report"
DOCUMENT_TYPES = (DOCUMENT_FULL_AUDIT, DOCUMENT_STATE_SUMMARY, DOCUMENT_EXPENSE_REPORT)

PACKAGE_SCHEMA_VERSION = "1.0.0"
ZERO = Decimal("0.00")


@dataclass(frozen=True)
class Expense:
    id: str
    owner_id: str
    expense_date: date
    amount: Decimal
    category: str
    state: str | None = None
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "state": self.state,
            "expense_date": self.expense_date.isoformat(),
            "amount": str(self.amount),
            "category": self.category,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Expense:
        return cls(
            id=str(data["id"]),
            owner_id=str(pick(data, "owner_id", "ownerId", "userId")),
            expense_date=parse_date_value(pick(data, "expense_date", "expenseDate", "date")),
            amount=Decimal(str(data["amount"])),
            category=str(data["category"]),
            state=data.get("state"),
            description=data.get("description"),
        )


@dataclass(frozen=True)
class JournalEntry:
    id: str
    owner_id: str
    entry_date: date
    title: str
    content: str
    category: str
    state: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "state": self.state,
            "entry_date": self.entry_date.isoformat(),
            "title": self.title,
            "content": self.content,
            "category": self.category,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JournalEntry:
        return cls(
            id=str(data["id"]),
            owner_id=str(pick(data, "owner_id", "ownerId", "userId")),
            entry_date=parse_date_value(pick(data, "entry_date", "entryDate", "date")),
            title=str(data.get("title", "")),
            content=str(data["content"]),
            category=str(data["category"]),
            state=data.get("state"),
        )


@dataclass(frozen=True)
class IntervalSnapshot:
    """Values copied out of a stay record at generation time."""

    interval_id: str
    state: str
    start_date: date
    end_date: date
    days_in_year: int
    purpose: str | None
    notes: str | None
    provenance: str


@dataclass
class StateSection:
    state: str
    total_days: int
    compliance_status: str
    risk_level: str
    intervals: list[IntervalSnapshot]
    expense_total: Decimal
    expenses_by_category: dict[str, Decimal]
    expenses: list[Expense]
    journal_entries: list[JournalEntry]


@dataclass
class AuditSummary:
    total_days_in_state: int
    total_expenses: Decimal
    risk_level: str
    compliance_status: str
    representative_state: str | None


@dataclass
class AuditPackage:
    owner_id: str
    tax_year: int
    state_filter: str | None
    document_type: str
    generated_at: datetime
    state_sections: list[StateSection]
    expenses_by_category: dict[str, Decimal]
    unassigned_expenses: list[Expense]
    unassigned_journal_entries: list[JournalEntry]
    summary: AuditSummary


@dataclass
class AuditGenerationRecord:
    owner_id: str
    document_type: str
    tax_year: int
    state: str | None
    size_bytes: int
    generated_at: datetime
    title: str
    description: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "document_type": self.document_type,
            "tax_year": self.tax_year,
            "state": self.state,
            "title": self.title,
            "description": self.description,
            "size_bytes": self.size_bytes,
            "generated_at": self.generated_at.isoformat(),
        }


def snapshot_interval(interval: ResidencyInterval, year: int) -> IntervalSnapshot:
    span = clip_to_year(interval, year)
    days = (span[1] - span[0]).days + 1 if span else 0
    return IntervalSnapshot(
        interval_id=interval.id,
        state=interval.state,
        start_date=interval.start_date,
        end_date=interval.end_date,
        days_in_year=days,
        purpose=interval.purpose,
        notes=interval.notes,
        provenance=interval.provenance,
    )


def sum_by_category(expenses: Iterable[Expense]) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, ZERO) + expense.amount
    return dict(sorted(totals.items()))


def sum_amounts(expenses: Iterable[Expense]) -> Decimal:
    return sum((expense.amount for expense in expenses), ZERO)


def select_for_year(
    year: int,
    intervals: Iterable[ResidencyInterval],
    expenses: Iterable[Expense],
    journal_entries: Iterable[JournalEntry],
    state: str | None = None,
) -> tuple[list[ResidencyInterval], list[Expense], list[JournalEntry]]:
    selected_intervals = intervals_for_year(intervals, year)
    selected_expenses = sorted(
        (e for e in expenses if e.expense_date.year == year),
        key=lambda e: (e.expense_date, e.id),
    )
    selected_entries = sorted(
        (j for j in journal_entries if j.entry_date.year == year),
        key=lambda j: (j.entry_date, j.id),
    )
    if state is not None:
        selected_intervals = [i for i in selected_intervals if i.state == state]
        selected_expenses = [e for e in selected_expenses if e.state == state]
        selected_entries = [j for j in selected_entries if j.state == state]
    return selected_intervals, selected_expenses, selected_entries


def build_state_section(
    state: str,
    year: int,
    intervals: list[ResidencyInterval],
    expenses: list[Expense],
    journal_entries: list[JournalEntry],
    thresholds: RiskThresholds,
    include_stays: bool = True,
) -> StateSection:
    total_days = count_days_in_year(intervals, year)
    return StateSection(
        state=state,
        total_days=total_days,
        compliance_status=compliance_status(total_days, thresholds),
        risk_level=risk_level_for_days(total_days, thresholds),
        intervals=[snapshot_interval(interval, year) for interval in intervals] if include_stays else [],
        expense_total=sum_amounts(expenses),
        expenses_by_category=sum_by_category(expenses),
        expenses=list(expenses),
        journal_entries=list(journal_entries),
    )


def compile_audit_package(
    owner_id: str,
    tax_year: int,
    intervals: Iterable[ResidencyInterval],
    expenses: Iterable[Expense],
    journal_entries: Iterable[JournalEntry],
    state: str | None = None,
    document_type: str = DOCUMENT_FULL_AUDIT,
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
    now: datetime | None = None,
) -> AuditPackage:
    """
    Group a tax year's stays, expenses and journal entries by state.

    The result is plain structured data for an external renderer. Records are
    expected to be scoped to `owner_id` by the caller.

    An expense report only carries expenses: sections exist for states with
    expenses, keep their day totals, and drop stay snapshots and journal entries.
    """
    if document_type not in DOCUMENT_TYPES:
        raise ValueError(f"Unsupported document type: {document_type}")
    if document_type == DOCUMENT_STATE_SUMMARY and state is None:
        raise ValueError("A state summary requires a state filter.")

    year_intervals, year_expenses, year_entries = select_for_year(
        tax_year, intervals, expenses, journal_entries, state
    )

    expenses_only = document_type == DOCUMENT_EXPENSE_REPORT
    if expenses_only:
        year_entries = []
        states = sorted({e.state for e in year_expenses if e.state})
    else:
        states = sorted(
            {i.state for i in year_intervals}
            | {e.state for e in year_expenses if e.state}
            | {j.state for j in year_entries if j.state}
        )
    if state is not None:
        states = [state]

    sections = [
        build_state_section(
            st,
            tax_year,
            [i for i in year_intervals if i.state == st],
            [e for e in year_expenses if e.state == st],
            [j for j in year_entries if j.state == st],
            thresholds,
            include_stays=not expenses_only,
        )
        for st in states
    ]

    day_counts = {section.state: section.total_days for section in sections}
    representative = state if state is not None else worst_state(day_counts)
    representative_days = day_counts.get(representative, 0) if representative else 0

    summary = AuditSummary(
        total_days_in_state=sum(day_counts.values()),
        total_expenses=sum_amounts(year_expenses),
        risk_level=risk_level_for_days(representative_days, thresholds),
        compliance_status=compliance_status(representative_days, thresholds),
        representative_state=representative,
    )

    return AuditPackage(
        owner_id=owner_id,
        tax_year=tax_year,
        state_filter=state,
        document_type=document_type,
        generated_at=now or datetime.now(timezone.utc),
        state_sections=sections,
        expenses_by_category=sum_by_category(year_expenses),
        unassigned_expenses=[e for e in year_expenses if not e.state],
        unassigned_journal_entries=[j for j in year_entries if not j.state],
        summary=summary,
    )


def to_cents(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1")))


def cents_by_category(totals: dict[str, Decimal]) -> dict[str, int]:
    return {category: to_cents(amount) for category, amount in totals.items()}


def expense_to_dict(expense: Expense) -> dict[str, Any]:
    return {
        "id": expense.id,
        "date": expense.expense_date.isoformat(),
        "state": expense.state,
        "category": expense.category,
        "amount_cents": to_cents(expense.amount),
        "description": expense.description,
    }


def journal_entry_to_dict(entry: JournalEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "date": entry.entry_date.isoformat(),
        "state": entry.state,
        "category": entry.category,
        "title": entry.title,
        "content": entry.content,
    }


def interval_snapshot_to_dict(snapshot: IntervalSnapshot) -> dict[str, Any]:
    return {
        "id": snapshot.interval_id,
        "start_date": snapshot.start_date.isoformat(),
        "end_date": snapshot.end_date.isoformat(),
        "days_in_year": snapshot.days_in_year,
        "purpose": snapshot.purpose,
        "notes": snapshot.notes,
        "provenance": snapshot.provenance,
    }


def package_to_dict(package: AuditPackage) -> dict[str, Any]:
    summary = package.summary
    return {
        "schema_version": PACKAGE_SCHEMA_VERSION,
        "owner_id": package.owner_id,
        "tax_year": package.tax_year,
        "state": package.state_filter,
        "document_type": package.document_type,
        "generated_at": package.generated_at.isoformat(),
        "summary": {
            "total_days_in_state": summary.total_days_in_state,
            "total_expenses_cents": to_cents(summary.total_expenses),
            "risk_level": summary.risk_level,
            "compliance_status": summary.compliance_status,
            "representative_state": summary.representative_state,
        },
        "expenses_by_category_cents": cents_by_category(package.expenses_by_category),
        "state_sections": [
            {
                "state": section.state,
                "total_days": section.total_days,
                "compliance_status": section.compliance_status,
                "risk_level": section.risk_level,
                "expense_total_cents": to_cents(section.expense_total),
                "expenses_by_category_cents": cents_by_category(section.expenses_by_category),
                "intervals": [interval_snapshot_to_dict(s) for s in section.intervals],
                "expenses": [expense_to_dict(e) for e in section.expenses],
                "journal_entries": [journal_entry_to_dict(j) for j in section.journal_entries],
            }
            for section in package.state_sections
        ],
        "unassigned_expenses": [expense_to_dict(e) for e in package.unassigned_expenses],
        "unassigned_journal_entries": [journal_entry_to_dict(j) for j in package.unassigned_journal_entries],
    }


def serialize_package(payload: dict[str, Any]) -> bytes:
    return json.dumps(payload, indent=2, sort_keys=True).encode("utf-8")


def document_title(document_type: str, tax_year: int, state: str | None = None) -> tuple[str, str]:
    """Display title and description stored with a generation record."""
    if document_type == DOCUMENT_STATE_SUMMARY:
        return f"{state} State Summary - {tax_year}", f"Tax residency summary for {state} in {tax_year}"
    if document_type == DOCUMENT_EXPENSE_REPORT:
        if state:
            return f"Expense Report - {state} - {tax_year}", f"Detailed expense report for {tax_year} in {state}"
        return f"Expense Report - {tax_year}", f"Detailed expense report for {tax_year}"
    return f"Full Audit Package - {tax_year}", f"Complete tax residency documentation for {tax_year}"


def build_generation_record(package: AuditPackage, payload: dict[str, Any]) -> AuditGenerationRecord:
    title, description = document_title(package.document_type, package.tax_year, package.state_filter)
    return AuditGenerationRecord(
        owner_id=package.owner_id,
        document_type=package.document_type,
        tax_year=package.tax_year,
        state=package.state_filter,
        size_bytes=len(serialize_package(payload)),
        generated_at=package.generated_at,
        title=title,
        description=description,
    )
