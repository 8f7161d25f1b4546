from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple, runtime_checkable


NOTIFICATION_TYPES = ("in_app", "email", "both")
PRESCRIPTION_STATUSES = ("active", "completed", "cancelled")


@dataclass(frozen=True)
class ReminderState:
    reminder_id: str
    patient_id: str
    prescription_id: str
    medicine_name: str
    dosage: str
    frequency: str
    reminder_times: Tuple[str, ...]
    start_date: str
    end_date: Optional[str]
    notification_type: str
    is_enabled: bool
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class PrescriptionState:
    id: str
    patient_id: str
    medication_name: str
    dosage: str
    frequency: str
    status: str
    start_date: str
    end_date: Optional[str]


@dataclass(frozen=True)
class PatientState:
    patient_id: str
    user_id: str
    email: Optional[str]


@runtime_checkable
class ReminderStore(Protocol):
    def create_reminder(self, reminder: ReminderState) -> None:
        """Persist a new reminder. Raises ValueError if the prescription already has one."""

    def update_reminder(self, reminder: ReminderState) -> None:
        """Update an existing reminder."""

    def get_reminder(self, reminder_id: str) -> Optional[ReminderState]:
        """Return reminder by id."""

    def get_reminder_for_prescription(self, prescription_id: str) -> Optional[ReminderState]:
        """Return the reminder attached to a prescription, if any."""

    def list_patient_reminders(
        self, patient_id: str, enabled_only: bool = False
    ) -> List[ReminderState]:
        """List reminders owned by one patient."""

    def list_enabled_reminders(self, on_date: Optional[str] = None) -> List[ReminderState]:
        """List enabled reminders, optionally only those whose window contains on_date."""

    def list_enabled_with_prescriptions(
        self,
    ) -> List[Tuple[ReminderState, PrescriptionState]]:
        """List enabled reminders joined with their prescription."""

    def set_reminder_enabled(self, reminder_id: str, enabled: bool, updated_at: str) -> None:
        """Flip the enable flag of one reminder."""

    def delete_reminder(self, reminder_id: str) -> None:
        """Delete a reminder."""


@runtime_checkable
class PrescriptionReader(Protocol):
    def get_prescription(self, prescription_id: str) -> Optional[PrescriptionState]:
        """Return prescription by id."""

    def list_patient_prescriptions(
        self, patient_id: str, status: Optional[str] = None
    ) -> List[PrescriptionState]:
        """List prescriptions issued to a patient."""

    def get_patient(self, patient_id: str) -> Optional[PatientState]:
        """Return patient contact data."""
