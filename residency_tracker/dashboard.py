from __future__ import annotations

from decimal import Decimal
from typing import Iterable, NamedTuple

from residency_tracker.intervals import ResidencyInterval, intervals_for_year, raw_day_span_total, state_day_counts
from residency_tracker.risk import DEFAULT_THRESHOLDS, RiskThresholds, account_risk_level

HIGH_TAX_STATES = ("NY", "CA", "NJ", "CT", "HI")
SAVINGS_PER_HIGH_TAX_STATE = Decimal("15000.00")


class DashboardStats(NamedTuple):
    total_days_tracked: int
    active_states: int
    estimated_tax_savings: Decimal
    risk_level: str


def estimate_tax_savings(
    day_counts: dict[str, int],
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
    high_tax_states: Iterable[str] = HIGH_TAX_STATES,
    savings_per_state: Decimal = SAVINGS_PER_HIGH_TAX_STATE,
) -> Decimal:
    """
    Rough estimate only, not a tax calculation.

    Credits a flat amount for every high-tax state the owner has visited this
    year while staying under the statutory threshold.
    """
    high_tax = set(high_tax_states)
    avoided = [
        state for state, days in day_counts.items() if state in high_tax and days < thresholds.statutory_days
    ]
    return savings_per_state * len(avoided)


def compute_dashboard_stats(
    intervals: Iterable[ResidencyInterval],
    year: int,
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
    high_tax_states: Iterable[str] = HIGH_TAX_STATES,
    savings_per_state: Decimal = SAVINGS_PER_HIGH_TAX_STATE,
) -> DashboardStats:
    in_year = intervals_for_year(intervals, year)
    day_counts = state_day_counts(in_year, year)

    return DashboardStats(
        # Raw logged presence: overlapping stays are intentionally not merged here.
        total_days_tracked=raw_day_span_total(in_year, year),
        active_states=len(day_counts),
        estimated_tax_savings=estimate_tax_savings(day_counts, thresholds, high_tax_states, savings_per_state),
        risk_level=account_risk_level(day_counts, thresholds),
    )


def stats_to_dict(stats: DashboardStats) -> dict[str, object]:
    return {
        "total_days_tracked": stats.total_days_tracked,
        "active_states": stats.active_states,
        "estimated_tax_savings_cents": int(stats.estimated_tax_savings * 100),
        "risk_level": stats.risk_level,
    }
