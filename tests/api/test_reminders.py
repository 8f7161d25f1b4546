from fastapi.testclient import TestClient

from apps.api.main import app
from apps.api.routes import reminders as reminders_module
from packages.core.storage.base import PrescriptionState
from packages.core.storage.sqlite import SQLiteMedStore


def _store_with_prescription(tmp_path, rx_id="rx-1", status="active"):
    store = SQLiteMedStore(db_path=str(tmp_path / "medportal.db"))
    store.upsert_prescription(
        PrescriptionState(
            id=rx_id,
            patient_id="pat-1",
            medication_name="Omeprazole",
            dosage="20mg",
            frequency="Twice daily",
            status=status,
            start_date="2024-01-01",
            end_date=None,
        )
    )
    return store


def test_reminders_crud(monkeypatch, tmp_path):
    store = _store_with_prescription(tmp_path)
    monkeypatch.setattr(reminders_module, "_store", lambda: store)

    client = TestClient(app)

    create_resp = client.post("/reminders", json={"prescription_id": "rx-1"})
    assert create_resp.status_code == 200
    reminder = create_resp.json()
    assert reminder["reminder_id"]
    assert reminder["reminder_times"] == ["08:00", "20:00"]
    assert reminder["frequency_label"] == "Twice daily"
    assert reminder["notification_type"] == "both"
    assert reminder["is_enabled"] is True

    duplicate = client.post("/reminders", json={"prescription_id": "rx-1"})
    assert duplicate.status_code == 409

    list_resp = client.get("/reminders", params={"patient_id": "pat-1"})
    assert list_resp.status_code == 200
    assert len(list_resp.json()) == 1

    get_resp = client.get(f"/reminders/{reminder['reminder_id']}")
    assert get_resp.status_code == 200

    update_resp = client.patch(
        f"/reminders/{reminder['reminder_id']}",
        json={"reminder_times": ["7:30", "19:30"], "notification_type": "in_app"},
    )
    assert update_resp.status_code == 200
    assert update_resp.json()["reminder_times"] == ["07:30", "19:30"]
    assert update_resp.json()["notification_type"] == "in_app"

    toggle_resp = client.post(f"/reminders/{reminder['reminder_id']}/toggle")
    assert toggle_resp.status_code == 200
    assert toggle_resp.json()["is_enabled"] is False

    delete_resp = client.delete(f"/reminders/{reminder['reminder_id']}")
    assert delete_resp.status_code == 200
    assert client.get(f"/reminders/{reminder['reminder_id']}").status_code == 404


def test_create_reminder_unknown_prescription(monkeypatch, tmp_path):
    store = SQLiteMedStore(db_path=str(tmp_path / "medportal.db"))
    monkeypatch.setattr(reminders_module, "_store", lambda: store)

    client = TestClient(app)
    response = client.post("/reminders", json={"prescription_id": "missing"})
    assert response.status_code == 404


def test_update_rejects_bad_times(monkeypatch, tmp_path):
    store = _store_with_prescription(tmp_path)
    monkeypatch.setattr(reminders_module, "_store", lambda: store)

    client = TestClient(app)
    reminder = client.post("/reminders", json={"prescription_id": "rx-1"}).json()

    bad_time = client.patch(
        f"/reminders/{reminder['reminder_id']}", json={"reminder_times": ["25:00"]}
    )
    assert bad_time.status_code == 400

    empty = client.patch(f"/reminders/{reminder['reminder_id']}", json={"reminder_times": []})
    assert empty.status_code == 400


def test_sync_and_frequencies(monkeypatch, tmp_path):
    store = _store_with_prescription(tmp_path)
    monkeypatch.setattr(reminders_module, "_store", lambda: store)

    client = TestClient(app)

    sync_resp = client.post("/reminders/sync", params={"patient_id": "pat-1"})
    assert sync_resp.status_code == 200
    assert [r["prescription_id"] for r in sync_resp.json()] == ["rx-1"]

    freq_resp = client.get("/reminders/frequencies")
    assert freq_resp.status_code == 200
    codes = {entry["code"]: entry for entry in freq_resp.json()}
    assert codes["every_8_hours"]["times"] == ["06:00", "14:00", "22:00"]
