from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from focus_api.errors import StorageError, ValidationError
from focus_api.main import app
from focus_api.repositories import InMemoryRepository, get_repository


def create_entry_payload(
    reason="Closed social media",
    status=True,
    category="study",
    created_at=None,
):
    payload = {
        "reason": reason,
        "status": status,
        "category": category,
    }
    if created_at is not None:
        payload["createdAt"] = created_at
    return payload


def assert_entry_shape(entry: dict):
    for key in ["id", "reason", "status", "category", "createdAt"]:
        assert key in entry
    assert isinstance(entry["id"], int)
    assert isinstance(entry["reason"], str)
    assert isinstance(entry["status"], bool)
    assert isinstance(entry["category"], str)
    # Timestamps are serialized as ISO8601 strings
    datetime.fromisoformat(entry["createdAt"])


def post_entries(client, statuses):
    ids = []
    for i, status in enumerate(statuses):
        res = client.post(
            "/focus/newEntry",
            json=create_entry_payload(reason=f"Attempt {i}", status=status, category=f"cat{i % 2}"),
        )
        assert res.status_code == 200
        ids.append(res.json()["id"])
    return ids


class TestHealth:
    def test_health_check(self, client):
        res = client.get("/")
        assert res.status_code == 200
        data = res.json()
        assert data["message"] == "Healthy"
        assert data["backend"] in ("memory", "sqlite")


class TestCreateEntry:
    def test_create_assigns_id_and_created_at(self, client):
        before = datetime.now()
        res = client.post("/focus/newEntry", json=create_entry_payload())
        after = datetime.now()
        assert res.status_code == 200
        entry = res.json()
        assert_entry_shape(entry)
        assert entry["reason"] == "Closed social media"
        assert entry["status"] is True
        assert entry["category"] == "study"
        assert before <= datetime.fromisoformat(entry["createdAt"]) <= after

    def test_create_keeps_supplied_created_at(self, client):
        res = client.post(
            "/focus/newEntry",
            json=create_entry_payload(status=False, created_at="2024-03-05T08:15:00"),
        )
        assert res.status_code == 200
        entry = res.json()
        assert entry["createdAt"] == "2024-03-05T08:15:00"
        assert entry["status"] is False

    def test_create_accepts_date_only_created_at(self, client):
        res = client.post("/focus/newEntry", json=create_entry_payload(created_at="2024-03-05"))
        assert res.status_code == 200
        assert res.json()["createdAt"] == "2024-03-05T00:00:00"

    def test_create_accepts_utc_z_created_at(self, client):
        res = client.post("/focus/newEntry", json=create_entry_payload(created_at="2024-03-05T08:15:00Z"))
        assert res.status_code == 200
        created = res.json()
        stamp = datetime.fromisoformat(created["createdAt"].replace("Z", "+00:00"))
        assert stamp == datetime(2024, 3, 5, 8, 15, tzinfo=timezone.utc)
        fetched = client.get(f"/focus/{created['id']}").json()
        assert fetched["createdAt"] == created["createdAt"]

    def test_create_accepts_offset_created_at(self, client):
        res = client.post("/focus/newEntry", json=create_entry_payload(created_at="2024-03-05T08:15:00+02:00"))
        assert res.status_code == 200
        stamp = datetime.fromisoformat(res.json()["createdAt"].replace("Z", "+00:00"))
        assert stamp == datetime(2024, 3, 5, 8, 15, tzinfo=timezone(timedelta(hours=2)))

    def test_create_accepts_epoch_created_at(self, client):
        res = client.post("/focus/newEntry", json=create_entry_payload(created_at=1700000000))
        assert res.status_code == 200
        stamp = datetime.fromisoformat(res.json()["createdAt"].replace("Z", "+00:00"))
        assert stamp == datetime.fromtimestamp(1700000000, tz=timezone.utc)

    def test_create_strips_surrounding_whitespace(self, client):
        res = client.post(
            "/focus/newEntry",
            json=create_entry_payload(reason="  padded  ", category=" work "),
        )
        assert res.status_code == 200
        assert res.json()["reason"] == "padded"
        assert res.json()["category"] == "work"

    def test_create_accepts_snake_case_created_at(self, client):
        payload = create_entry_payload()
        payload["created_at"] = "2023-12-31T23:59:59"
        res = client.post("/focus/newEntry", json=payload)
        assert res.status_code == 200
        assert res.json()["createdAt"] == "2023-12-31T23:59:59"

    def test_ids_are_unique(self, client):
        ids = post_entries(client, [True, True, False, True])
        assert len(set(ids)) == 4

    def test_create_persists_entry(self, client, repo):
        res = client.post("/focus/newEntry", json=create_entry_payload())
        assert repo.count() == 1
        assert repo.find_by_id(res.json()["id"]).reason == "Closed social media"


class TestGetEntry:
    def test_round_trip(self, client):
        created = client.post(
            "/focus/newEntry",
            json=create_entry_payload(reason="Ignored phone", status=False, category="work"),
        ).json()
        res = client.get(f"/focus/{created['id']}")
        assert res.status_code == 200
        fetched = res.json()
        for key in ["id", "reason", "status", "category", "createdAt"]:
            assert fetched[key] == created[key]

    def test_unknown_id_returns_null(self, client):
        res = client.get("/focus/999999")
        assert res.status_code == 200
        assert res.json() is None

    def test_non_integer_id_is_validation_error(self, client):
        res = client.get("/focus/abc")
        assert res.status_code == 422
        assert res.json()["error"] == "ValidationError"


class TestListAndFilters:
    def test_entries_empty(self, client):
        res = client.get("/focus/entries")
        assert res.status_code == 200
        assert res.json() == []

    def test_entries_returns_everything(self, client):
        ids = post_entries(client, [True, False, True])
        res = client.get("/focus/entries")
        assert res.status_code == 200
        items = res.json()
        assert [e["id"] for e in items] == ids
        for e in items:
            assert_entry_shape(e)

    def test_success_and_failure_partition_entries(self, client):
        post_entries(client, [True, False, True, False, False])
        entries = client.get("/focus/entries").json()
        successes = client.get("/focus/success").json()
        failures = client.get("/focus/failure").json()

        assert successes == [e for e in entries if e["status"] is True]
        assert failures == [e for e in entries if e["status"] is False]
        assert len(successes) == 2
        assert len(failures) == 3

    def test_filters_on_empty_store(self, client):
        assert client.get("/focus/success").json() == []
        assert client.get("/focus/failure").json() == []


class TestStats:
    def test_stats_empty(self, client):
        res = client.get("/focus/stats")
        assert res.status_code == 200
        assert res.json() == {"total": 0, "successes": 0, "failures": 0, "successRate": 0.0}

    def test_stats_scenario(self, client):
        post_entries(client, [True, False, True])
        data = client.get("/focus/stats").json()
        assert data["total"] == 3
        assert data["successes"] == 2
        assert data["failures"] == 1
        assert data["successRate"] == 2 * 100.0 / 3
        assert data["successRate"] == pytest.approx(66.6666, rel=1e-4)

    @pytest.mark.parametrize(
        "statuses, expected_rate",
        [
            ([True], 100.0),
            ([False], 0.0),
            ([True, False], 50.0),
            ([False, False, False, True], 25.0),
        ],
    )
    def test_stats_totals_add_up(self, client, statuses, expected_rate):
        post_entries(client, statuses)
        data = client.get("/focus/stats").json()
        assert data["total"] == data["successes"] + data["failures"]
        assert data["total"] == len(statuses)
        assert data["successRate"] == expected_rate


class TestValidationErrors:
    @pytest.mark.parametrize("field", ["reason", "status", "category"])
    def test_null_required_field(self, client, field):
        payload = create_entry_payload()
        payload[field] = None
        res = client.post("/focus/newEntry", json=payload)
        assert res.status_code == 422
        body = res.json()
        assert body.get("error") == "ValidationError"
        assert body.get("message") == "Request validation failed"
        assert isinstance(body.get("detail"), list)

    @pytest.mark.parametrize("field", ["reason", "status", "category"])
    def test_missing_required_field(self, client, field):
        payload = create_entry_payload()
        del payload[field]
        res = client.post("/focus/newEntry", json=payload)
        assert res.status_code == 422
        assert res.json()["error"] == "ValidationError"

    def test_blank_reason(self, client, repo):
        res = client.post("/focus/newEntry", json=create_entry_payload(reason="   "))
        assert res.status_code == 422
        assert res.json()["error"] == "ValidationError"
        assert repo.count() == 0

    def test_bad_created_at(self, client):
        res = client.post("/focus/newEntry", json=create_entry_payload(created_at="not-a-date"))
        assert res.status_code == 422
        assert res.json()["error"] == "ValidationError"

    @pytest.mark.parametrize("value", ["yes", "true", 1, 0])
    def test_non_boolean_status(self, client, repo, value):
        res = client.post("/focus/newEntry", json=create_entry_payload(status=value))
        assert res.status_code == 422
        assert res.json()["error"] == "ValidationError"
        assert repo.count() == 0

    def test_entry_rejected_by_storage(self, client):
        app.dependency_overrides[get_repository] = lambda: _RejectingRepository()
        res = client.post("/focus/newEntry", json=create_entry_payload())
        assert res.status_code == 422
        body = res.json()
        assert body["error"] == "ValidationError"
        assert body["message"] == "Missing required field(s): category"
        assert body["detail"][0]["loc"] == ["body", "category"]
        assert body["detail"][0]["type"] == "missing"


class _RejectingRepository(InMemoryRepository):
    def save(self, entry):
        raise ValidationError("Missing required field(s): category", fields=["category"])


class _BrokenRepository(InMemoryRepository):
    def find_all(self):
        raise StorageError("database is locked")


class TestStorageErrors:
    def test_storage_failure_is_server_error(self):
        app.dependency_overrides[get_repository] = lambda: _BrokenRepository()
        try:
            res = TestClient(app).get("/focus/stats")
        finally:
            app.dependency_overrides.clear()
        assert res.status_code == 500
        body = res.json()
        assert body["error"] == "StorageError"
        assert body["message"] == "database is locked"
