import datetime as dt

from packages.core.reminders.lifecycle import retire_stale
from packages.core.reminders.service import create_reminder_for_prescription
from packages.core.storage.base import PrescriptionState
from packages.core.storage.sqlite import SQLiteMedStore


def _add(store, rx_id, status="active", end_date=None):
    prescription = PrescriptionState(
        id=rx_id,
        patient_id="pat-1",
        medication_name="Atorvastatin",
        dosage="20mg",
        frequency="once_night",
        status=status,
        start_date="2024-01-01",
        end_date=end_date,
    )
    store.upsert_prescription(prescription)
    return create_reminder_for_prescription(store, prescription)


def test_retires_cancelled_and_keeps_open_ended_active(tmp_path):
    store = SQLiteMedStore(db_path=str(tmp_path / "medportal.db"))
    cancelled = _add(store, "rx-cancelled", status="cancelled")
    active = _add(store, "rx-active")

    disabled = retire_stale(store, dt.datetime(2024, 2, 1, 9, 0))

    assert disabled == 1
    assert store.get_reminder(cancelled.reminder_id).is_enabled is False
    assert store.get_reminder(active.reminder_id).is_enabled is True


def test_retires_completed_and_expired(tmp_path):
    store = SQLiteMedStore(db_path=str(tmp_path / "medportal.db"))
    completed = _add(store, "rx-completed", status="completed")
    expired = _add(store, "rx-expired", end_date="2024-01-31")
    ends_today = _add(store, "rx-today", end_date="2024-02-01")
    ends_tomorrow = _add(store, "rx-tomorrow", end_date="2024-02-02")

    assert retire_stale(store, dt.datetime(2024, 2, 1, 9, 0)) == 3
    assert store.get_reminder(completed.reminder_id).is_enabled is False
    assert store.get_reminder(expired.reminder_id).is_enabled is False
    assert store.get_reminder(ends_today.reminder_id).is_enabled is False
    assert store.get_reminder(ends_tomorrow.reminder_id).is_enabled is True


def test_end_date_retires_from_first_sweep_that_day(tmp_path):
    store = SQLiteMedStore(db_path=str(tmp_path / "medportal.db"))
    reminder = _add(store, "rx-today", end_date="2024-02-01")

    assert retire_stale(store, dt.datetime(2024, 1, 31, 23, 59)) == 0
    assert retire_stale(store, dt.datetime(2024, 2, 1, 0, 1)) == 1
    assert store.get_reminder(reminder.reminder_id).is_enabled is False


def test_end_date_compared_as_utc_for_aware_clock(tmp_path):
    store = SQLiteMedStore(db_path=str(tmp_path / "medportal.db"))
    _add(store, "rx-today", end_date="2024-02-01")
    now = dt.datetime(2024, 2, 1, 9, 0, tzinfo=dt.timezone.utc)

    assert retire_stale(store, now) == 1


def test_retire_is_idempotent(tmp_path):
    store = SQLiteMedStore(db_path=str(tmp_path / "medportal.db"))
    _add(store, "rx-cancelled", status="cancelled")
    now = dt.datetime(2024, 2, 1, 9, 0)

    assert retire_stale(store, now) == 1
    assert retire_stale(store, now) == 0
