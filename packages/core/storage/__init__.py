from .base import (
    NOTIFICATION_TYPES,
    PRESCRIPTION_STATUSES,
    PatientState,
    PrescriptionReader,
    PrescriptionState,
    ReminderState,
    ReminderStore,
)
from .sqlite import SQLiteMedStore

__all__ = [
    "NOTIFICATION_TYPES",
    "PRESCRIPTION_STATUSES",
    "PatientState",
    "PrescriptionReader",
    "PrescriptionState",
    "ReminderState",
    "ReminderStore",
    "SQLiteMedStore",
]
