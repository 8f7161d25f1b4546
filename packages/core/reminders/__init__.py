from .catalog import TriggerSpec, frequency_label, list_frequencies, times_for
from .dispatcher import NotificationDispatcher
from .evaluator import due_triggers
from .ledger import TriggerFiredLedger
from .lifecycle import retire_stale
from .models import ChannelResult, DispatchResult, DueTrigger
from .service import (
    create_reminder_for_prescription,
    list_patient_reminders,
    normalize_times,
    sync_patient_reminders,
    toggle_reminder,
    update_reminder,
)
from .sweep import SweepResult, run_scheduled_sweep

__all__ = [
    "ChannelResult",
    "DispatchResult",
    "DueTrigger",
    "NotificationDispatcher",
    "SweepResult",
    "TriggerFiredLedger",
    "TriggerSpec",
    "create_reminder_for_prescription",
    "due_triggers",
    "frequency_label",
    "list_frequencies",
    "list_patient_reminders",
    "normalize_times",
    "retire_stale",
    "run_scheduled_sweep",
    "sync_patient_reminders",
    "times_for",
    "toggle_reminder",
    "update_reminder",
]
