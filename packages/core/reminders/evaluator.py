from __future__ import annotations

import datetime as dt
from typing import Iterable, List

from ..storage.base import ReminderState
from .ledger import TriggerFiredLedger
from .models import DueTrigger


def format_slot(now: dt.datetime) -> str:
    return f"{now.hour:02d}:{now.minute:02d}"


def due_triggers(
    now: dt.datetime,
    reminders: Iterable[ReminderState],
    ledger: TriggerFiredLedger,
) -> List[DueTrigger]:
    """Return the reminder slots matching ``now`` that have not fired yet today.

    Matching is an exact ``HH:MM`` comparison against the local wall-clock of
    ``now``; a slot whose minute passed while nothing was evaluating is never
    reported later. Every returned slot is recorded in ``ledger``.
    """
    current = format_slot(now)
    today = now.date().isoformat()
    due: List[DueTrigger] = []
    for reminder in reminders:
        if not reminder.is_enabled:
            continue
        for time in reminder.reminder_times:
            if time != current:
                continue
            if ledger.has_fired(reminder.reminder_id, time, today):
                continue
            ledger.mark_fired(reminder.reminder_id, time, today)
            due.append(DueTrigger(reminder=reminder, time=time, date=today))
    return due
