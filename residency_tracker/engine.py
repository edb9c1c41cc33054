#!/usr/bin/env python3

from __future__ import annotations

import logging
from datetime import date
from typing import Callable

from residency_tracker.alerts import SEVERITIES, Alert, build_threshold_alert
from residency_tracker.audit import (
    DOCUMENT_FULL_AUDIT,
    AuditGenerationRecord,
    AuditPackage,
    build_generation_record,
    compile_audit_package,
    package_to_dict,
)
from residency_tracker.config import EngineConfig
from residency_tracker.dashboard import DashboardStats, compute_dashboard_stats
from residency_tracker.intervals import ResidencyInterval, count_days_in_year, state_day_counts, validate_interval
from residency_tracker.repository import ResidencyRepository
from residency_tracker.risk import StateDayTotal, build_state_day_totals, classify_days
from residency_tracker.utils.contracts import validate_output

logger = logging.getLogger(__name__)


class ResidencyEngine:
    """
    Day accounting and compliance checks over an injected record store.

    Every call recomputes from whatever the repository returns; nothing derived
    is cached or written back except alerts and audit generation history.
    """

    def __init__(
        self,
        repository: ResidencyRepository,
        config: EngineConfig | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.repository = repository
        self.config = config or EngineConfig()
        self.today = today

    def compute_state_day_totals(self, owner_id: str, year: int) -> list[StateDayTotal]:
        intervals = self.repository.list_intervals(owner_id, year=year)
        return build_state_day_totals(state_day_counts(intervals, year), self.config.thresholds)

    def compute_state_day_total(self, owner_id: str, state: str, year: int) -> StateDayTotal:
        intervals = self.repository.list_intervals(owner_id, year=year, state=state)
        return classify_days(state, count_days_in_year(intervals, year), self.config.thresholds)

    def compute_dashboard_stats(self, owner_id: str, year: int | None = None) -> DashboardStats:
        year = year if year is not None else self.today().year
        return compute_dashboard_stats(
            self.repository.list_intervals(owner_id, year=year),
            year,
            thresholds=self.config.thresholds,
            high_tax_states=self.config.high_tax_states,
            savings_per_state=self.config.savings_per_state,
        )

    def evaluate_new_interval(self, owner_id: str, interval: ResidencyInterval) -> Alert | None:
        """
        Recompute the interval's state for every tax year it touches and raise an alert per qualifying year.

        Returns the most severe alert created, the later year winning a tie.
        """
        check_owner(owner_id, interval)
        created: list[Alert] = []
        for year in range(interval.start_date.year, interval.end_date.year + 1):
            total = self.compute_state_day_total(owner_id, interval.state, year)
            alert = build_threshold_alert(owner_id, total, self.config.alert_policy, self.config.thresholds)
            if alert is None:
                continue

            stored = self.repository.create_alert(alert)
            logger.info(
                "Created %s alert for owner %s in %s for %d (%d days remaining)",
                stored.severity,
                owner_id,
                total.state,
                year,
                total.days_remaining,
            )
            created.append(stored)

        if not created:
            return None
        return max(reversed(created), key=lambda alert: SEVERITIES.index(alert.severity))

    def record_interval(self, interval: ResidencyInterval) -> tuple[ResidencyInterval, Alert | None]:
        """
        Persist a new stay, then run the alert check as a separate step.

        A failing alert check is logged and dropped; the stored interval stands.
        """
        validate_interval(interval)
        stored = self.repository.add_interval(interval)

        try:
            alert = self.evaluate_new_interval(stored.owner_id, stored)
        except Exception:
            logger.exception("Alert evaluation failed for interval %s; interval was kept.", stored.id)
            alert = None
        return stored, alert

    def update_interval(self, interval: ResidencyInterval) -> ResidencyInterval:
        validate_interval(interval)
        return self.repository.update_interval(interval)

    def delete_interval(self, interval_id: str) -> None:
        self.repository.delete_interval(interval_id)

    def compile_audit_package(
        self,
        owner_id: str,
        year: int,
        state: str | None = None,
        document_type: str = DOCUMENT_FULL_AUDIT,
        record_history: bool = True,
    ) -> AuditPackage:
        package = compile_audit_package(
            owner_id,
            year,
            intervals=self.repository.list_intervals(owner_id, year=year, state=state),
            expenses=self.repository.list_expenses(owner_id, year=year, state=state),
            journal_entries=self.repository.list_journal_entries(owner_id, year=year, state=state),
            state=state,
            document_type=document_type,
            thresholds=self.config.thresholds,
        )

        if record_history:
            payload = package_to_dict(package)
            validate_output(payload, "audit_package", mode="FILING")
            self.record_generation(package, payload)
        return package

    def record_generation(self, package: AuditPackage, payload: dict) -> AuditGenerationRecord | None:
        """Store generation history; a failing store is logged and the package still returned."""
        try:
            record = self.repository.record_audit_generation(build_generation_record(package, payload))
        except Exception:
            logger.exception(
                "Recording %s generation failed for owner %s; package was still compiled.",
                package.document_type,
                package.owner_id,
            )
            return None

        logger.info(
            "Recorded '%s' for owner %s, tax year %d (%d bytes)",
            record.title,
            package.owner_id,
            package.tax_year,
            record.size_bytes,
        )
        return record


def check_owner(owner_id: str, interval: ResidencyInterval) -> None:
    if interval.owner_id != owner_id:
        raise ValueError(f"Interval {interval.id} belongs to owner {interval.owner_id}, not {owner_id}.")
