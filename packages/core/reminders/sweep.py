from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .dispatcher import NotificationDispatcher
from .evaluator import due_triggers, format_slot
from .ledger import TriggerFiredLedger
from .lifecycle import retire_stale
from .models import EMAIL, channels_for


logger = logging.getLogger("medportal.sweep")


@dataclass
class SweepResult:
    notifications: List[Dict[str, Any]] = field(default_factory=list)
    retired: int = 0

    @property
    def notifications_sent(self) -> int:
        return len(self.notifications)


def run_scheduled_sweep(
    store,
    dispatcher: NotificationDispatcher,
    now: Optional[dt.datetime] = None,
) -> SweepResult:
    """One pass over every patient's reminders for the current minute.

    The ledger lives only for this call. Store errors propagate to the caller
    before anything is dispatched; email failures are reported per item.
    """
    now = now or dt.datetime.now()
    today = now.date().isoformat()
    logger.info("sweep_started time=%s date=%s", format_slot(now), today)

    reminders = store.list_enabled_reminders(on_date=today)
    logger.info("sweep_reminders_loaded count=%s", len(reminders))

    result = SweepResult()
    ledger = TriggerFiredLedger()
    for trigger in due_triggers(now, reminders, ledger):
        reminder = trigger.reminder
        if EMAIL not in channels_for(reminder.notification_type):
            continue
        patient = store.get_patient(reminder.patient_id)
        email = patient.email if patient else None
        if not email:
            logger.info("sweep_skipped_no_email id=%s", reminder.reminder_id)
            continue
        dispatched = dispatcher.dispatch(reminder, trigger.time, channels=[EMAIL], email=email)
        channel_result = dispatched.channels[EMAIL]
        result.notifications.append(
            {
                "reminder_id": reminder.reminder_id,
                "email": email,
                "result": channel_result.to_dict(),
            }
        )

    result.retired = retire_stale(store, now)
    logger.info(
        "sweep_finished notifications_sent=%s retired=%s",
        result.notifications_sent,
        result.retired,
    )
    return result
