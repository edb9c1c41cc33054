from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any

from residency_tracker.alerts import AlertPolicy
from residency_tracker.dashboard import HIGH_TAX_STATES, SAVINGS_PER_HIGH_TAX_STATE
from residency_tracker.risk import RiskThresholds
from residency_tracker.utils.contracts import validate_output
from residency_tracker.utils.migration import CURRENT_CONFIG_VERSION, migrate_engine_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineConfig:
    thresholds: RiskThresholds = field(default_factory=RiskThresholds)
    alert_policy: AlertPolicy = field(default_factory=AlertPolicy)
    high_tax_states: tuple[str, ...] = HIGH_TAX_STATES
    savings_per_state: Decimal = SAVINGS_PER_HIGH_TAX_STATE


def as_decimal(value: Any) -> Decimal:
    return Decimal(str(value))


def config_from_dict(payload: dict[str, Any]) -> EngineConfig:
    payload = migrate_engine_config(dict(payload))
    validate_output(payload, "engine_config", mode="FILING")

    defaults = RiskThresholds()
    raw_thresholds = payload.get("thresholds", {})
    thresholds = RiskThresholds(
        statutory_days=raw_thresholds.get("statutory_days", defaults.statutory_days),
        warning_days=raw_thresholds.get("warning_days", defaults.warning_days),
        medium_ratio=as_decimal(raw_thresholds.get("medium_ratio", defaults.medium_ratio)),
        high_ratio=as_decimal(raw_thresholds.get("high_ratio", defaults.high_ratio)),
        critical_ratio=as_decimal(raw_thresholds.get("critical_ratio", defaults.critical_ratio)),
    )

    policy_defaults = AlertPolicy()
    raw_alerts = payload.get("alerts", {})
    alert_policy = AlertPolicy(
        alert_window_days=raw_alerts.get("alert_window_days", policy_defaults.alert_window_days),
        critical_window_days=raw_alerts.get("critical_window_days", policy_defaults.critical_window_days),
    )

    return EngineConfig(
        thresholds=thresholds,
        alert_policy=alert_policy,
        high_tax_states=tuple(payload.get("high_tax_states", HIGH_TAX_STATES)),
        savings_per_state=as_decimal(payload.get("savings_per_state", SAVINGS_PER_HIGH_TAX_STATE)),
    )


def load_config(path: Path | None) -> EngineConfig:
    if path is None:
        return EngineConfig()
    if not path.exists():
        raise FileNotFoundError(f"Engine config not found: {path}")

    with path.open("r", encoding="utf-8") as handle:
        payload: dict[str, Any] = json.load(handle)

    config = config_from_dict(payload)
    logger.info(
        "Loaded engine config %s (version %s, threshold %s days)",
        path,
        payload.get("version", CURRENT_CONFIG_VERSION),
        config.thresholds.statutory_days,
    )
    return config
