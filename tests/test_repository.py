import json
import pytest
from datetime import datetime, timezone

from residency_tracker.alerts import Alert
from residency_tracker.intervals import InvalidIntervalError, MissingFieldError, ResidencyInterval
from residency_tracker.repository import RecordNotFoundError, load_repository, repository_from_payload
from residency_tracker.utils.contracts import ContractError
from tests.conftest import OWNER, make_interval


def test_list_intervals_by_year_keeps_spanning_stays(repository):
    repository.add_interval(make_interval("a", "FL", "2024-12-28", "2025-01-03"))
    repository.add_interval(make_interval("b", "FL", "2024-06-01", "2024-06-05"))
    repository.add_interval(make_interval("c", "NY", "2025-02-01", "2025-02-02"))
    repository.add_interval(make_interval("d", "NY", "2025-02-01", "2025-02-02", owner="someone-else"))

    assert [i.id for i in repository.list_intervals(OWNER, year=2025)] == ["a", "c"]
    assert [i.id for i in repository.list_intervals(OWNER, year=2024)] == ["b", "a"]
    assert [i.id for i in repository.list_intervals(OWNER, year=2025, state="NY")] == ["c"]
    assert len(repository.list_intervals(OWNER)) == 3


def test_interval_lifecycle(repository):
    stay = repository.add_interval(make_interval("a", "FL", "2025-01-01", "2025-01-10"))
    with pytest.raises(ValueError, match="Duplicate"):
        repository.add_interval(stay)

    edited = make_interval("a", "FL", "2025-01-01", "2025-01-20")
    repository.update_interval(edited)
    assert repository.get_interval("a").days == 20

    repository.delete_interval("a")
    with pytest.raises(RecordNotFoundError):
        repository.get_interval("a")
    with pytest.raises(RecordNotFoundError):
        repository.delete_interval("a")
    with pytest.raises(RecordNotFoundError):
        repository.update_interval(edited)


def test_alert_store(repository):
    older = Alert(OWNER, "NY", "high", "t", "m", created_at=datetime(2025, 1, 1, tzinfo=timezone.utc))
    newer = Alert(OWNER, "NY", "critical", "t", "m", created_at=datetime(2025, 2, 1, tzinfo=timezone.utc))
    repository.create_alert(older)
    repository.create_alert(newer)

    assert [a.id for a in repository.list_alerts(OWNER)] == [newer.id, older.id]
    repository.mark_alert_read(newer.id)
    assert [a.id for a in repository.list_alerts(OWNER, unread_only=True)] == [older.id]

    repository.delete_alert(older.id)
    assert [a.id for a in repository.list_alerts(OWNER)] == [newer.id]
    with pytest.raises(RecordNotFoundError):
        repository.mark_alert_read(older.id)


def test_load_repository_from_file(tmp_path):
    payload = {
        "intervals": [
            {"id": "rl_1", "owner_id": OWNER, "state": "FL", "start_date": "2025-01-01", "end_date": "2025-01-31"}
        ],
        "expenses": [
            {"id": "ex_1", "owner_id": OWNER, "state": "FL", "expense_date": "2025-01-05", "amount": "10.50",
             "category": "Dining"}
        ],
        "journal_entries": [
            {"id": "jr_1", "owner_id": OWNER, "entry_date": "2025-01-06", "content": "note", "category": "travel"}
        ],
    }
    path = tmp_path / "records.json"
    path.write_text(json.dumps(payload))

    repository = load_repository(path)
    assert repository.list_intervals(OWNER, year=2025)[0].days == 31
    assert repository.list_expenses(OWNER, year=2025, state="FL")[0].category == "Dining"
    assert repository.list_journal_entries(OWNER, year=2025)[0].state is None


def test_payload_contract_violation():
    with pytest.raises(ContractError):
        repository_from_payload({"intervals": [{"id": "x", "state": "FL", "start_date": "01/02/2025"}]})


def test_payload_with_inverted_dates_rejected():
    payload = {
        "intervals": [
            {"id": "rl_bad", "owner_id": OWNER, "state": "FL", "start_date": "2025-03-01", "end_date": "2025-02-01"}
        ]
    }
    with pytest.raises(InvalidIntervalError, match="rl_bad"):
        repository_from_payload(payload)


@pytest.mark.parametrize(
    "section, row",
    [
        ("intervals", {"id": "x", "state": "NY", "start_date": "2025-01-01", "end_date": "2025-01-02"}),
        ("expenses", {"id": "ex", "owner_id": OWNER, "amount": "5.00", "category": "Fuel"}),
        ("journal_entries", {"id": "jr", "content": "note", "category": "travel", "entry_date": "2025-01-06"}),
    ],
)
def test_payload_missing_owner_or_date_fails_contract(section, row):
    with pytest.raises(ContractError, match="Data Contract Violation"):
        repository_from_payload({section: [row]})


def test_from_dict_names_record_with_missing_field():
    with pytest.raises(MissingFieldError, match="Record x is missing required field 'owner_id'"):
        ResidencyInterval.from_dict({"id": "x", "state": "NY", "start_date": "2025-01-01", "end_date": "2025-01-02"})
