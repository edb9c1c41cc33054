#!/usr/bin/env python3

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from residency_tracker.risk import DEFAULT_THRESHOLDS, RiskThresholds, StateDayTotal

SEVERITY_MEDIUM = "medium"
SEVERITY_HIGH = "high"
SEVERITY_CRITICAL = "critical"
SEVERITIES = (SEVERITY_MEDIUM, SEVERITY_HIGH, SEVERITY_CRITICAL)

ALERT_TYPE_THRESHOLD = "threshold_warning"


@dataclass(frozen=True)
class AlertPolicy:
    alert_window_days: int = 30
    critical_window_days: int = 10

    def __post_init__(self) -> None:
        if self.critical_window_days > self.alert_window_days:
            raise ValueError("critical_window_days cannot exceed alert_window_days.")


DEFAULT_ALERT_POLICY = AlertPolicy()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_alert_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Alert:
    owner_id: str
    state: str
    severity: str
    title: str
    message: str
    id: str = field(default_factory=new_alert_id)
    is_read: bool = False
    created_at: datetime = field(default_factory=utc_now)
    alert_type: str = ALERT_TYPE_THRESHOLD

    def __post_init__(self) -> None:
        if self.severity not in SEVERITIES:
            raise ValueError(f"Unsupported alert severity: {self.severity}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "type": self.alert_type,
            "state": self.state,
            "severity": self.severity,
            "title": self.title,
            "message": self.message,
            "is_read": self.is_read,
            "created_at": self.created_at.isoformat(),
        }


def alert_severity(total: StateDayTotal, policy: AlertPolicy = DEFAULT_ALERT_POLICY) -> str | None:
    if not (total.is_at_risk and total.days_remaining < policy.alert_window_days):
        return None
    if total.days_remaining < policy.critical_window_days:
        return SEVERITY_CRITICAL
    return SEVERITY_HIGH


def build_threshold_alert(
    owner_id: str,
    total: StateDayTotal,
    policy: AlertPolicy = DEFAULT_ALERT_POLICY,
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
    now: datetime | None = None,
) -> Alert | None:
    """
    Build the threshold alert for a freshly recomputed state total, if one is due.

    Qualifying totals always produce a new alert; earlier unread alerts for the
    same state are not consulted.
    """
    severity = alert_severity(total, policy)
    if severity is None:
        return None

    return Alert(
        owner_id=owner_id,
        state=total.state,
        severity=severity,
        title=f"{total.state} Threshold Warning",
        message=(
            f"You have {total.days_remaining} days remaining before reaching the "
            f"{thresholds.statutory_days}-day threshold in {total.state}."
        ),
        created_at=now or utc_now(),
    )
