from __future__ import annotations

import datetime as dt
import re
import uuid
from typing import Iterable, List, Optional, Tuple

from ..storage.base import (
    NOTIFICATION_TYPES,
    PrescriptionReader,
    PrescriptionState,
    ReminderState,
    ReminderStore,
)
from .catalog import times_for


_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _to_iso(value: Optional[dt.datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def normalize_times(times: Iterable[str]) -> Tuple[str, ...]:
    normalized = set()
    for raw in times:
        match = _TIME_RE.match((raw or "").strip())
        if not match:
            raise ValueError(f"Invalid reminder time: {raw!r}")
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour > 23 or minute > 59:
            raise ValueError(f"Invalid reminder time: {raw!r}")
        normalized.add(f"{hour:02d}:{minute:02d}")
    return tuple(sorted(normalized))


def _check_notification_type(notification_type: str) -> str:
    if notification_type not in NOTIFICATION_TYPES:
        raise ValueError(f"Invalid notification type: {notification_type}")
    return notification_type


def create_reminder_for_prescription(
    store: ReminderStore,
    prescription: PrescriptionState,
    notification_type: str = "both",
    reminder_times: Optional[Iterable[str]] = None,
) -> ReminderState:
    times = (
        normalize_times(reminder_times)
        if reminder_times is not None
        else times_for(prescription.frequency).times
    )
    if not times:
        raise ValueError("An enabled reminder needs at least one time")
    now = _utc_now()
    reminder = ReminderState(
        reminder_id=str(uuid.uuid4()),
        patient_id=prescription.patient_id,
        prescription_id=prescription.id,
        medicine_name=prescription.medication_name,
        dosage=prescription.dosage,
        frequency=prescription.frequency,
        reminder_times=times,
        start_date=prescription.start_date,
        end_date=prescription.end_date,
        notification_type=_check_notification_type(notification_type),
        is_enabled=True,
        created_at=_to_iso(now),
        updated_at=_to_iso(now),
    )
    store.create_reminder(reminder)
    return reminder


def update_reminder(
    store: ReminderStore,
    reminder: ReminderState,
    is_enabled: Optional[bool] = None,
    reminder_times: Optional[Iterable[str]] = None,
    notification_type: Optional[str] = None,
) -> ReminderState:
    times = (
        normalize_times(reminder_times)
        if reminder_times is not None
        else reminder.reminder_times
    )
    enabled = is_enabled if is_enabled is not None else reminder.is_enabled
    if enabled and not times:
        raise ValueError("An enabled reminder needs at least one time")
    updated = ReminderState(
        **{
            **reminder.__dict__,
            "reminder_times": times,
            "is_enabled": enabled,
            "notification_type": (
                _check_notification_type(notification_type)
                if notification_type is not None
                else reminder.notification_type
            ),
            "updated_at": _to_iso(_utc_now()),
        }
    )
    store.update_reminder(updated)
    return updated


def toggle_reminder(store: ReminderStore, reminder: ReminderState) -> ReminderState:
    return update_reminder(store, reminder, is_enabled=not reminder.is_enabled)


def list_patient_reminders(
    store: ReminderStore, patient_id: str, enabled_only: bool = False
) -> List[ReminderState]:
    return store.list_patient_reminders(patient_id, enabled_only=enabled_only)


def sync_patient_reminders(store, patient_id: str) -> List[ReminderState]:
    """Create default reminders for the patient's active prescriptions that lack one."""
    created: List[ReminderState] = []
    reader: PrescriptionReader = store
    for prescription in reader.list_patient_prescriptions(patient_id, status="active"):
        if store.get_reminder_for_prescription(prescription.id) is not None:
            continue
        created.append(create_reminder_for_prescription(store, prescription))
    return created
