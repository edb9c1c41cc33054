"""
Risk Classifier

Maps per-state day counts onto the statutory residency threshold.
Everything here works on counts, never on dates, so it can be exercised
independently of the interval aggregator.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Mapping, NamedTuple

RISK_LOW = "low"
RISK_MEDIUM = "medium"
RISK_HIGH = "high"
RISK_CRITICAL = "critical"
RISK_LEVELS = (RISK_LOW, RISK_MEDIUM, RISK_HIGH, RISK_CRITICAL)

COMPLIANT = "Compliant"
AT_RISK = "At Risk"


@dataclass(frozen=True)
class RiskThresholds:
    statutory_days: int = 183
    warning_days: int = 150
    medium_ratio: Decimal = Decimal("0.75")
    high_ratio: Decimal = Decimal("0.90")
    critical_ratio: Decimal = Decimal("1.00")

    def __post_init__(self) -> None:
        if self.statutory_days <= 0:
            raise ValueError(f"statutory_days must be positive, got {self.statutory_days}")
        if not (self.medium_ratio <= self.high_ratio <= self.critical_ratio):
            raise ValueError("Risk ratios must be ordered medium <= high <= critical.")


DEFAULT_THRESHOLDS = RiskThresholds()


class StateDayTotal(NamedTuple):
    state: str
    total_days: int
    days_remaining: int
    is_at_risk: bool
    risk_level: str


def risk_rank(level: str) -> int:
    return RISK_LEVELS.index(level)


def risk_level_for_ratio(ratio: Fraction | Decimal, thresholds: RiskThresholds = DEFAULT_THRESHOLDS) -> str:
    # Exact comparison; a ratio sitting on a boundary belongs to the higher tier.
    exact = Fraction(ratio)
    if exact >= Fraction(thresholds.critical_ratio):
        return RISK_CRITICAL
    if exact >= Fraction(thresholds.high_ratio):
        return RISK_HIGH
    if exact >= Fraction(thresholds.medium_ratio):
        return RISK_MEDIUM
    return RISK_LOW


def days_ratio(total_days: int, thresholds: RiskThresholds = DEFAULT_THRESHOLDS) -> Fraction:
    return Fraction(total_days, thresholds.statutory_days)


def risk_level_for_days(total_days: int, thresholds: RiskThresholds = DEFAULT_THRESHOLDS) -> str:
    return risk_level_for_ratio(days_ratio(total_days, thresholds), thresholds)


def compliance_status(total_days: int, thresholds: RiskThresholds = DEFAULT_THRESHOLDS) -> str:
    return AT_RISK if total_days >= thresholds.statutory_days else COMPLIANT


def classify_days(state: str, total_days: int, thresholds: RiskThresholds = DEFAULT_THRESHOLDS) -> StateDayTotal:
    if total_days < 0:
        raise ValueError(f"Day count for {state} cannot be negative: {total_days}")
    return StateDayTotal(
        state=state,
        total_days=total_days,
        days_remaining=max(0, thresholds.statutory_days - total_days),
        is_at_risk=total_days > thresholds.warning_days,
        risk_level=risk_level_for_days(total_days, thresholds),
    )


def build_state_day_totals(
    day_counts: Mapping[str, int],
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
) -> list[StateDayTotal]:
    return [classify_days(state, days, thresholds) for state, days in sorted(day_counts.items())]


def worst_state(day_counts: Mapping[str, int]) -> str | None:
    """State with the highest day count; ties resolve alphabetically."""
    if not day_counts:
        return None
    return min(day_counts, key=lambda state: (-day_counts[state], state))


def account_risk_level(day_counts: Mapping[str, int], thresholds: RiskThresholds = DEFAULT_THRESHOLDS) -> str:
    state = worst_state(day_counts)
    if state is None:
        return RISK_LOW
    return risk_level_for_days(day_counts[state], thresholds)
