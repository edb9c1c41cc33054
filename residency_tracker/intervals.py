#!/usr/bin/env python3

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Any, Iterable

PROVENANCE_MANUAL = "manual"
PROVENANCE_GEO = "geo-detected"
PROVENANCES = (PROVENANCE_MANUAL, PROVENANCE_GEO)

ONE_DAY = timedelta(days=1)

DaySpan = tuple[date, date]


class InvalidIntervalError(ValueError):
    """Raised when a stay record has an invalid date range."""

    def __init__(self, interval_id: str, message: str) -> None:
        super().__init__(f"Invalid date range for interval {interval_id}: {message}")
        self.interval_id = interval_id


class MissingFieldError(ValueError):
    def __init__(self, record_id: Any, field_name: str) -> None:
        super().__init__(f"Record {record_id} is missing required field '{field_name}'")
        self.record_id = record_id
        self.field_name = field_name


@dataclass(frozen=True)
class ResidencyInterval:
    id: str
    owner_id: str
    state: str
    start_date: date
    end_date: date
    purpose: str | None = None
    notes: str | None = None
    provenance: str = PROVENANCE_MANUAL

    def __post_init__(self) -> None:
        validate_interval(self)

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    @property
    def is_geo_detected(self) -> bool:
        return self.provenance == PROVENANCE_GEO

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "state": self.state,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "purpose": self.purpose,
            "notes": self.notes,
            "provenance": self.provenance,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ResidencyInterval:
        provenance = data.get("provenance")
        if provenance is None:
            # Older exports only carry the auto-detection flag.
            auto = data.get("is_auto_detected", data.get("isAutoDetected", False))
            provenance = PROVENANCE_GEO if auto else PROVENANCE_MANUAL

        return cls(
            id=str(data["id"]),
            owner_id=str(pick(data, "owner_id", "ownerId", "userId")),
            state=str(data["state"]),
            start_date=parse_date_value(pick(data, "start_date", "startDate")),
            end_date=parse_date_value(pick(data, "end_date", "endDate")),
            purpose=data.get("purpose"),
            notes=data.get("notes"),
            provenance=provenance,
        )


def pick(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    raise MissingFieldError(data.get("id", "<no id>"), keys[0])


def parse_date_value(value: date | str) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def validate_interval(interval: ResidencyInterval) -> None:
    if not isinstance(interval.start_date, date) or not isinstance(interval.end_date, date):
        raise InvalidIntervalError(interval.id, "start and end must be calendar dates")
    if interval.end_date < interval.start_date:
        raise InvalidIntervalError(
            interval.id,
            f"end date {interval.end_date.isoformat()} is before start date {interval.start_date.isoformat()}",
        )
    if interval.provenance not in PROVENANCES:
        raise InvalidIntervalError(interval.id, f"unknown provenance '{interval.provenance}'")


def with_changes(interval: ResidencyInterval, **changes: Any) -> ResidencyInterval:
    """Return an edited copy. The copy is re-validated on construction."""
    return replace(interval, **changes)


def tax_year_bounds(year: int) -> DaySpan:
    return date(year, 1, 1), date(year, 12, 31)


def clip_to_year(interval: ResidencyInterval, year: int) -> DaySpan | None:
    year_start, year_end = tax_year_bounds(year)
    start = max(interval.start_date, year_start)
    end = min(interval.end_date, year_end)
    if end < start:
        return None
    return start, end


def overlaps_year(interval: ResidencyInterval, year: int) -> bool:
    return clip_to_year(interval, year) is not None


def intervals_for_year(intervals: Iterable[ResidencyInterval], year: int) -> list[ResidencyInterval]:
    selected = [interval for interval in intervals if overlaps_year(interval, year)]
    selected.sort(key=lambda interval: (interval.start_date, interval.end_date, interval.id))
    return selected


def merge_spans(spans: Iterable[DaySpan]) -> list[DaySpan]:
    ordered = sorted(spans)
    if not ordered:
        return []

    merged: list[DaySpan] = []
    current_start, current_end = ordered[0]
    for start, end in ordered[1:]:
        if start <= current_end + ONE_DAY:
            # Overlapping or adjacent; extend the running span
            current_end = max(current_end, end)
        else:
            merged.append((current_start, current_end))
            current_start, current_end = start, end
    merged.append((current_start, current_end))
    return merged


def span_days(span: DaySpan) -> int:
    start, end = span
    return (end - start).days + 1


def count_days_in_year(intervals: Iterable[ResidencyInterval], year: int) -> int:
    """
    Number of distinct calendar days of `year` covered by any of the intervals.

    Intervals are clipped to the tax year, merged where they overlap or touch,
    and the merged spans are summed. The state of each interval is not looked
    at; callers group by state first.
    """
    clipped = [span for span in (clip_to_year(interval, year) for interval in intervals) if span is not None]
    return sum(span_days(span) for span in merge_spans(clipped))


def group_by_state(intervals: Iterable[ResidencyInterval]) -> dict[str, list[ResidencyInterval]]:
    groups: dict[str, list[ResidencyInterval]] = {}
    for interval in intervals:
        groups.setdefault(interval.state, []).append(interval)
    return groups


def state_day_counts(intervals: Iterable[ResidencyInterval], year: int) -> dict[str, int]:
    counts: dict[str, int] = {}
    for state, group in sorted(group_by_state(intervals).items()):
        days = count_days_in_year(group, year)
        if days > 0:
            counts[state] = days
    return counts


def raw_day_span_total(intervals: Iterable[ResidencyInterval], year: int) -> int:
    """Sum of clipped per-interval spans, with no merging within or across states."""
    total = 0
    for interval in intervals:
        span = clip_to_year(interval, year)
        if span is not None:
            total += span_days(span)
    return total
