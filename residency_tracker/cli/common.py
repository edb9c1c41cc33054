from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

from residency_tracker.config import EngineConfig, load_config
from residency_tracker.engine import ResidencyEngine
from residency_tracker.repository import InMemoryRepository, load_repository
from residency_tracker.testing.fixtures import DEMO_OWNER_ID, build_demo_repository


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--records", type=Path, default=None, help="JSON export of intervals, expenses and journal.")
    parser.add_argument("--demo", action="store_true", help="Use the built-in demo record set.")
    parser.add_argument("--owner", default=None, help="Owner id the records are scoped to.")
    parser.add_argument("--year", type=int, default=None, help="Tax year (defaults to the current year).")
    parser.add_argument("--config", type=Path, default=None, help="Optional engine config JSON.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_engine(args: argparse.Namespace) -> tuple[ResidencyEngine, str]:
    """Returns the engine and the owner id to query."""
    config: EngineConfig = load_config(args.config)

    repository: InMemoryRepository
    if args.demo:
        repository = build_demo_repository(args.year)
        owner_id = args.owner or DEMO_OWNER_ID
    else:
        if args.records is None:
            raise ValueError("Either --records or --demo is required.")
        if not args.records.exists():
            raise FileNotFoundError(f"Records file not found: {args.records}")
        if not args.owner:
            raise ValueError("--owner is required with --records.")
        repository = load_repository(args.records)
        owner_id = args.owner

    return ResidencyEngine(repository, config), owner_id


def write_json(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
