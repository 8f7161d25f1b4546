from packages.core.reminders.service import create_reminder_for_prescription
from packages.core.storage.base import PatientState, PrescriptionState
from packages.core.storage.sqlite import SQLiteMedStore


def _prescription(rx_id="rx-1", start="2024-01-01", end=None, status="active"):
    return PrescriptionState(
        id=rx_id,
        patient_id="pat-1",
        medication_name="Metformin",
        dosage="850mg",
        frequency="twice_daily",
        status=status,
        start_date=start,
        end_date=end,
    )


def test_patient_and_prescription_roundtrip(tmp_path):
    store = SQLiteMedStore(db_path=str(tmp_path / "medportal.db"))
    store.upsert_patient(PatientState(patient_id="pat-1", user_id="user-1", email="a@b.c"))
    store.upsert_prescription(_prescription())

    assert store.get_patient("pat-1").email == "a@b.c"
    assert store.get_prescription("rx-1").medication_name == "Metformin"
    assert [p.id for p in store.list_patient_prescriptions("pat-1", status="active")] == ["rx-1"]
    assert store.list_patient_prescriptions("pat-1", status="cancelled") == []


def test_one_reminder_per_prescription(tmp_path):
    store = SQLiteMedStore(db_path=str(tmp_path / "medportal.db"))
    prescription = _prescription()
    store.upsert_prescription(prescription)
    create_reminder_for_prescription(store, prescription)

    try:
        create_reminder_for_prescription(store, prescription)
        raised = False
    except ValueError:
        raised = True

    assert raised is True


def test_enabled_reminders_filtered_by_validity_window(tmp_path):
    store = SQLiteMedStore(db_path=str(tmp_path / "medportal.db"))
    current = _prescription("rx-1", start="2024-01-01")
    finished = _prescription("rx-2", start="2023-01-01", end="2023-06-30")
    future = _prescription("rx-3", start="2024-02-01")
    for prescription in (current, finished, future):
        store.upsert_prescription(prescription)
        create_reminder_for_prescription(store, prescription)

    on_date = [r.prescription_id for r in store.list_enabled_reminders(on_date="2024-01-15")]
    assert on_date == ["rx-1"]
    assert len(store.list_enabled_reminders()) == 3


def test_deleting_prescription_removes_reminder(tmp_path):
    store = SQLiteMedStore(db_path=str(tmp_path / "medportal.db"))
    prescription = _prescription()
    store.upsert_prescription(prescription)
    reminder = create_reminder_for_prescription(store, prescription)

    store.delete_prescription(prescription.id)

    assert store.get_reminder(reminder.reminder_id) is None


def test_reminder_times_roundtrip(tmp_path):
    store = SQLiteMedStore(db_path=str(tmp_path / "medportal.db"))
    prescription = _prescription()
    store.upsert_prescription(prescription)
    reminder = create_reminder_for_prescription(store, prescription)

    loaded = store.get_reminder_for_prescription("rx-1")
    assert loaded.reminder_id == reminder.reminder_id
    assert loaded.reminder_times == ("08:00", "20:00")
    assert loaded.is_enabled is True
