from __future__ import annotations

import datetime as dt
import logging
from typing import Optional

from ..storage.base import PrescriptionState, ReminderStore


logger = logging.getLogger("medportal.reminders")


def _course_end(end_date: str, now: dt.datetime) -> dt.datetime:
    # A bare date marks the start of that day; aware clocks read it as UTC.
    ended = dt.datetime.fromisoformat(end_date[:10])
    if now.tzinfo is not None:
        ended = ended.replace(tzinfo=dt.timezone.utc)
    return ended


def is_stale(prescription: PrescriptionState, now: dt.datetime) -> bool:
    if prescription.status != "active":
        return True
    if prescription.end_date and _course_end(prescription.end_date, now) < now:
        return True
    return False


def retire_stale(store: ReminderStore, now: Optional[dt.datetime] = None) -> int:
    now = now or dt.datetime.now()
    disabled = 0
    for reminder, prescription in store.list_enabled_with_prescriptions():
        if not is_stale(prescription, now):
            continue
        store.set_reminder_enabled(
            reminder.reminder_id, False, dt.datetime.now(dt.timezone.utc).isoformat()
        )
        disabled += 1
        logger.info(
            "reminder_retired id=%s prescription=%s status=%s end_date=%s",
            reminder.reminder_id,
            prescription.id,
            prescription.status,
            prescription.end_date,
        )
    return disabled
