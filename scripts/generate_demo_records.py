"""Write the demo record set as a records JSON file for the CLI tools."""

import json
import sys
from pathlib import Path

from residency_tracker.repository import export_records
from residency_tracker.testing.fixtures import DEMO_OWNER_ID, build_demo_repository


def generate_demo_records(output_path: Path, year: int) -> None:
    payload = export_records(build_demo_repository(year), DEMO_OWNER_ID)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    print(f"Generated demo records for {DEMO_OWNER_ID}: {output_path}")


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python generate_demo_records.py <output_path> <year>")
        sys.exit(1)

    generate_demo_records(Path(sys.argv[1]), int(sys.argv[2]))
