import json
from functools import lru_cache
import logging
from pathlib import Path
from typing import Any, Dict, List

from jsonschema import Draft7Validator

logger = logging.getLogger(__name__)

SCHEMA_DIR = Path(__file__).parent.parent / "schemas"


class ContractError(Exception):
    """Raised when a payload violates its data contract."""

    pass


@lru_cache(maxsize=None)
def load_schema(schema_name: str) -> Dict[str, Any]:
    """Load a JSON schema shipped with the package (records, engine_config, audit_package)."""
    schema_path = SCHEMA_DIR / f"{schema_name}.json"
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema not found: {schema_name}")

    with open(schema_path, "r", encoding="utf-8") as f:
        return dict(json.load(f))


def collect_violations(data: Dict[str, Any], schema_name: str) -> List[str]:
    """Every violation as '<json path>: <message>', ordered by path."""
    validator = Draft7Validator(load_schema(schema_name))
    errors = sorted(validator.iter_errors(data), key=lambda e: list(map(str, e.absolute_path)))
    return [f"{'/'.join(map(str, e.absolute_path)) or '<root>'}: {e.message}" for e in errors]


def validate_output(data: Dict[str, Any], schema_name: str, mode: str = "FILING") -> None:
    """
    Validate data against a JSON schema.

    Args:
        data: The dictionary to validate.
        schema_name: Name of the schema file (without .json extension).
        mode: 'FILING' (raises error) or 'REVIEW' (logs each violation).

    Raises:
        ContractError: If validation fails and mode is FILING.
    """
    try:
        violations = collect_violations(data, schema_name)
    except FileNotFoundError as e:
        violations = [str(e)]

    if not violations:
        return

    msg = f"Data Contract Violation ({schema_name}): {'; '.join(violations)}"
    if mode == "FILING":
        raise ContractError(msg)
    for violation in violations:
        logger.warning(f"Data Contract Violation ({schema_name}): {violation}")
