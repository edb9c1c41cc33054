from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

CURRENT_CONFIG_VERSION = "0.2.0"


def migrate_engine_config_v0_1_to_v0_2(config: dict[str, Any]) -> dict[str, Any]:
    """
    Migrate a v0.1.x engine configuration to v0.2.0.

    Changes:
    - Bumps version to 0.2.0.
    - Moves the flat `threshold` / `warning_days` keys under `thresholds`.
    - Renames `high_tax_savings` to `savings_per_state`.
    """
    version = config.get("version", "")
    if version.startswith("0.1."):
        logger.warning(
            f"Migrating engine config from {version} to {CURRENT_CONFIG_VERSION}. "
            "Please update your config file to suppress this warning."
        )
        config["version"] = CURRENT_CONFIG_VERSION

        thresholds = config.setdefault("thresholds", {})
        if "threshold" in config:
            thresholds.setdefault("statutory_days", config.pop("threshold"))
        if "warning_days" in config:
            thresholds.setdefault("warning_days", config.pop("warning_days"))
        if "high_tax_savings" in config:
            config.setdefault("savings_per_state", config.pop("high_tax_savings"))

    return config


def migrate_engine_config(config: dict[str, Any]) -> dict[str, Any]:
    """
    Run all sequential migrations to bring a configuration payload to the latest version.
    """
    version = config.get("version", "")
    if version.startswith("0.1."):
        config = migrate_engine_config_v0_1_to_v0_2(config)

    return config
