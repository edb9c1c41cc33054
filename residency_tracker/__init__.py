from residency_tracker.intervals import (
    InvalidIntervalError,
    MissingFieldError,
    ResidencyInterval,
    count_days_in_year,
    merge_spans,
    raw_day_span_total,
    state_day_counts,
    validate_interval,
)
from residency_tracker.risk import (
    RiskThresholds,
    StateDayTotal,
    account_risk_level,
    build_state_day_totals,
    classify_days,
    risk_level_for_ratio,
)
from residency_tracker.alerts import Alert, AlertPolicy, build_threshold_alert
from residency_tracker.dashboard import DashboardStats, compute_dashboard_stats
from residency_tracker.audit import (
    AuditPackage,
    Expense,
    JournalEntry,
    compile_audit_package,
    package_to_dict,
)
from residency_tracker.config import EngineConfig, load_config
from residency_tracker.repository import InMemoryRepository, ResidencyRepository
from residency_tracker.engine import ResidencyEngine

__all__ = [
    "Alert",
    "AlertPolicy",
    "AuditPackage",
    "DashboardStats",
    "EngineConfig",
    "Expense",
    "InMemoryRepository",
    "InvalidIntervalError",
    "JournalEntry",
    "MissingFieldError",
    "ResidencyEngine",
    "ResidencyInterval",
    "ResidencyRepository",
    "RiskThresholds",
    "StateDayTotal",
    "account_risk_level",
    "build_state_day_totals",
    "build_threshold_alert",
    "classify_days",
    "compile_audit_package",
    "compute_dashboard_stats",
    "count_days_in_year",
    "load_config",
    "merge_spans",
    "package_to_dict",
    "raw_day_span_total",
    "risk_level_for_ratio",
    "state_day_counts",
    "validate_interval",
]
