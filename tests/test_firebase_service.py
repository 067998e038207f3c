import firebase_admin
import pytest

from core.config import settings
from services import firebase_service
from services.firebase_service import initialize_firebase, next_sequential_id, snapshot_records


@pytest.fixture
def firebase_calls(monkeypatch):
    """Records initialize_app calls; no default app exists until one is initialized."""
    calls = []

    def fake_get_app():
        if not calls:
            raise ValueError("The default Firebase app does not exist.")
        return object()

    monkeypatch.setattr(firebase_admin, "get_app", fake_get_app)
    monkeypatch.setattr(firebase_admin, "initialize_app", lambda cred, options: calls.append((cred, options)))
    monkeypatch.setattr(firebase_service.credentials, "Certificate", lambda info: ("cert", info["project_id"]))
    return calls


def test_init_without_credentials_is_a_no_op(firebase_calls, monkeypatch, caplog):
    monkeypatch.setattr(settings, "FIREBASE_SERVICE_ACCOUNT_KEY_JSON", None)
    initialize_firebase()
    assert firebase_calls == []
    assert "FIREBASE_SERVICE_ACCOUNT_KEY_JSON is not set" in caplog.text


def test_init_with_malformed_credentials_logs_and_continues(firebase_calls, monkeypatch, caplog):
    monkeypatch.setattr(settings, "FIREBASE_SERVICE_ACCOUNT_KEY_JSON", "{not json")
    initialize_firebase()
    assert firebase_calls == []
    assert "Error initializing Firebase" in caplog.text


def test_init_uses_service_account_and_database_url(firebase_calls, monkeypatch):
    monkeypatch.setattr(settings, "FIREBASE_SERVICE_ACCOUNT_KEY_JSON", '{"project_id": "packing"}')
    monkeypatch.setattr(settings, "FIREBASE_DATABASE_URL", "https://packing.firebaseio.com")
    initialize_firebase()
    assert firebase_calls == [(("cert", "packing"), {"databaseURL": "https://packing.firebaseio.com"})]


def test_init_skips_when_app_already_exists(firebase_calls, monkeypatch):
    monkeypatch.setattr(settings, "FIREBASE_SERVICE_ACCOUNT_KEY_JSON", '{"project_id": "packing"}')
    initialize_firebase()
    initialize_firebase()
    assert len(firebase_calls) == 1


def test_next_sequential_id_counts_per_counter(fake_db):
    assert [next_sequential_id("a_counter") for _ in range(3)] == ["1", "2", "3"]
    assert next_sequential_id("b_counter") == "1"
    assert fake_db.data == {"a_counter": 3, "b_counter": 1}


@pytest.mark.parametrize("snapshot, expected", [
    (None, []),
    ({}, []),
    ({"1": {"id": "1"}, "2": {"id": "2"}}, [{"id": "1"}, {"id": "2"}]),
    ([None, {"id": "1"}, None, {"id": "3"}], [{"id": "1"}, {"id": "3"}]),
])
def test_snapshot_records_accepts_dict_and_array_shapes(snapshot, expected):
    assert snapshot_records(snapshot) == expected
