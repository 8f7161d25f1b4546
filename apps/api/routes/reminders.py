from __future__ import annotations

import os
from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException

from apps.api.schemas.reminders import (
    FrequencyResponse,
    ReminderCreateRequest,
    ReminderResponse,
    ReminderUpdateRequest,
)
from packages.core.reminders.catalog import frequency_label, list_frequencies
from packages.core.reminders.service import (
    create_reminder_for_prescription,
    list_patient_reminders,
    sync_patient_reminders,
    toggle_reminder,
    update_reminder,
)
from packages.core.storage.sqlite import SQLiteMedStore


router = APIRouter(prefix="/reminders", tags=["reminders"])


def _store() -> SQLiteMedStore:
    data_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "data"))
    db_path = os.getenv("MEDPORTAL_DB_PATH", os.path.join(data_dir, "medportal.db"))
    return SQLiteMedStore(db_path=db_path)


def _to_response(reminder) -> ReminderResponse:
    return ReminderResponse(
        reminder_id=reminder.reminder_id,
        patient_id=reminder.patient_id,
        prescription_id=reminder.prescription_id,
        medicine_name=reminder.medicine_name,
        dosage=reminder.dosage,
        frequency=reminder.frequency,
        frequency_label=frequency_label(reminder.frequency),
        reminder_times=list(reminder.reminder_times),
        start_date=reminder.start_date,
        end_date=reminder.end_date,
        notification_type=reminder.notification_type,
        is_enabled=reminder.is_enabled,
        created_at=reminder.created_at,
        updated_at=reminder.updated_at,
    )


@router.get("/frequencies", response_model=List[FrequencyResponse])
def frequencies() -> List[FrequencyResponse]:
    return [
        FrequencyResponse(
            code=code,
            label=spec.label,
            times=list(spec.times),
            doses_per_day=spec.doses_per_day,
        )
        for code, spec in list_frequencies()
    ]


@router.post("", response_model=ReminderResponse)
def create(payload: ReminderCreateRequest) -> ReminderResponse:
    store = _store()
    prescription = store.get_prescription(payload.prescription_id)
    if prescription is None:
        raise HTTPException(status_code=404, detail="Prescription not found")
    if store.get_reminder_for_prescription(prescription.id) is not None:
        raise HTTPException(status_code=409, detail="Reminder already exists")
    try:
        reminder = create_reminder_for_prescription(
            store,
            prescription,
            notification_type=payload.notification_type,
            reminder_times=payload.reminder_times,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _to_response(reminder)


@router.post("/sync", response_model=List[ReminderResponse])
def sync(patient_id: str) -> List[ReminderResponse]:
    created = sync_patient_reminders(_store(), patient_id)
    return [_to_response(reminder) for reminder in created]


@router.get("", response_model=List[ReminderResponse])
def list_all(patient_id: str, enabled_only: bool = False) -> List[ReminderResponse]:
    reminders = list_patient_reminders(_store(), patient_id, enabled_only=enabled_only)
    return [_to_response(reminder) for reminder in reminders]


@router.get("/{reminder_id}", response_model=ReminderResponse)
def get(reminder_id: str) -> ReminderResponse:
    reminder = _store().get_reminder(reminder_id)
    if reminder is None:
        raise HTTPException(status_code=404, detail="Reminder not found")
    return _to_response(reminder)


@router.patch("/{reminder_id}", response_model=ReminderResponse)
def update(reminder_id: str, payload: ReminderUpdateRequest) -> ReminderResponse:
    store = _store()
    reminder = store.get_reminder(reminder_id)
    if reminder is None:
        raise HTTPException(status_code=404, detail="Reminder not found")
    try:
        updated = update_reminder(
            store,
            reminder,
            is_enabled=payload.is_enabled,
            reminder_times=payload.reminder_times,
            notification_type=payload.notification_type,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _to_response(updated)


@router.post("/{reminder_id}/toggle", response_model=ReminderResponse)
def toggle(reminder_id: str) -> ReminderResponse:
    store = _store()
    reminder = store.get_reminder(reminder_id)
    if reminder is None:
        raise HTTPException(status_code=404, detail="Reminder not found")
    try:
        updated = toggle_reminder(store, reminder)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _to_response(updated)


@router.delete("/{reminder_id}")
def delete(reminder_id: str) -> Dict[str, Any]:
    store = _store()
    reminder = store.get_reminder(reminder_id)
    if reminder is None:
        raise HTTPException(status_code=404, detail="Reminder not found")
    store.delete_reminder(reminder_id)
    return {"status": "deleted", "reminder_id": reminder_id}
