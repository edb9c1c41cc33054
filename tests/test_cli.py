import json
import pytest
from unittest.mock import patch

from residency_tracker.cli import audit as audit_cli
from residency_tracker.cli import stats as stats_cli

OWNER = "owner-1"


@pytest.fixture
def records_file(tmp_path):
    payload = {
        "intervals": [
            {"id": "rl_1", "owner_id": OWNER, "state": "FL", "start_date": "2025-01-01", "end_date": "2025-03-22"},
            {"id": "rl_2", "owner_id": OWNER, "state": "NY", "start_date": "2025-02-11", "end_date": "2025-02-18"},
        ],
        "expenses": [
            {"id": "ex_1", "owner_id": OWNER, "state": "NY", "expense_date": "2025-02-12", "amount": "389.00",
             "category": "Lodging"}
        ],
        "journal_entries": [],
    }
    path = tmp_path / "records.json"
    path.write_text(json.dumps(payload))
    return path


@pytest.mark.integration
def test_stats_json_output(records_file, capsys):
    argv = ["residency-stats", "--records", str(records_file), "--owner", OWNER, "--year", "2025", "--json"]
    with patch("sys.argv", argv):
        stats_cli.main()

    payload = json.loads(capsys.readouterr().out)
    assert [(s["state"], s["total_days"]) for s in payload["states"]] == [("FL", 81), ("NY", 8)]
    assert payload["dashboard"]["active_states"] == 2
    assert payload["dashboard"]["estimated_tax_savings_cents"] == 1500000
    assert payload["dashboard"]["risk_level"] == "low"


@pytest.mark.integration
def test_stats_human_output_demo(capsys):
    with patch("sys.argv", ["residency-stats", "--demo", "--year", "2025"]):
        stats_cli.main()
    out = capsys.readouterr().out
    assert "State Day Totals" in out
    assert "not a tax calculation" in out


@pytest.mark.integration
def test_stats_requires_owner_with_records(records_file):
    with patch("sys.argv", ["residency-stats", "--records", str(records_file)]):
        with pytest.raises(SystemExit) as excinfo:
            stats_cli.main()
    assert "--owner is required" in str(excinfo.value.code)


@pytest.mark.integration
def test_stats_reports_invalid_date_range(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(
        json.dumps(
            {"intervals": [{"id": "x", "owner_id": OWNER, "state": "FL", "start_date": "2025-03-01",
                            "end_date": "2025-02-01"}]}
        )
    )
    with patch("sys.argv", ["residency-stats", "--records", str(path), "--owner", OWNER]):
        with pytest.raises(SystemExit) as excinfo:
            stats_cli.main()
    assert "Invalid date range" in str(excinfo.value.code)


@pytest.mark.integration
def test_stats_reports_record_without_owner(tmp_path):
    path = tmp_path / "no_owner.json"
    path.write_text(
        json.dumps({"intervals": [{"id": "x", "state": "NY", "start_date": "2025-01-01", "end_date": "2025-01-02"}]})
    )
    with patch("sys.argv", ["residency-stats", "--records", str(path), "--owner", OWNER]):
        with pytest.raises(SystemExit) as excinfo:
            stats_cli.main()
    assert "Error loading records" in str(excinfo.value.code)


@pytest.mark.integration
def test_audit_writes_package(records_file, tmp_path):
    out_path = tmp_path / "out" / "package.json"
    argv = [
        "residency-audit",
        "--records",
        str(records_file),
        "--owner",
        OWNER,
        "--year",
        "2025",
        "--out",
        str(out_path),
    ]
    with patch("sys.argv", argv):
        audit_cli.main()

    package = json.loads(out_path.read_text())
    assert package["document_type"] == "full_audit_package"
    assert package["summary"]["total_days_in_state"] == 89
    assert package["summary"]["total_expenses_cents"] == 38900
    assert [s["state"] for s in package["state_sections"]] == ["FL", "NY"]


@pytest.mark.integration
def test_audit_state_filter_defaults_to_state_summary(records_file, tmp_path):
    out_path = tmp_path / "ny.json"
    argv = ["residency-audit", "--records", str(records_file), "--owner", OWNER, "--year", "2025",
            "--state", "NY", "--out", str(out_path)]
    with patch("sys.argv", argv):
        audit_cli.main()

    package = json.loads(out_path.read_text())
    assert package["document_type"] == "state_summary"
    assert package["state"] == "NY"
    assert package["state_sections"][0]["expense_total_cents"] == 38900


@pytest.mark.integration
def test_audit_missing_records_file(tmp_path):
    argv = ["residency-audit", "--records", str(tmp_path / "missing.json"), "--owner", OWNER]
    with patch("sys.argv", argv):
        with pytest.raises(SystemExit) as excinfo:
            audit_cli.main()
    assert "Records file not found" in str(excinfo.value.code)


@pytest.mark.integration
@patch("residency_tracker.utils.console.is_interactive", return_value=True)
@patch("residency_tracker.utils.console.ask_input")
def test_audit_interactive_prompts(mock_ask, mock_is_interactive, records_file, tmp_path):
    mock_ask.side_effect = ["2025", OWNER]
    out_path = tmp_path / "interactive.json"
    argv = ["residency-audit", "--records", str(records_file), "--interactive", "--out", str(out_path)]
    with patch("sys.argv", argv):
        audit_cli.main()

    assert mock_ask.call_count == 2
    assert json.loads(out_path.read_text())["tax_year"] == 2025
