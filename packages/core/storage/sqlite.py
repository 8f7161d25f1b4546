from __future__ import annotations

import json
import os
import sqlite3
from typing import List, Optional, Tuple

from .base import (
    PatientState,
    PrescriptionReader,
    PrescriptionState,
    ReminderState,
    ReminderStore,
)


_REMINDER_COLUMNS = """
    reminder_id, patient_id, prescription_id, medicine_name, dosage, frequency,
    reminder_times, start_date, end_date, notification_type, is_enabled,
    created_at, updated_at
"""


def _row_to_reminder(row: tuple) -> ReminderState:
    return ReminderState(
        reminder_id=row[0],
        patient_id=row[1],
        prescription_id=row[2],
        medicine_name=row[3],
        dosage=row[4],
        frequency=row[5],
        reminder_times=tuple(json.loads(row[6] or "[]")),
        start_date=row[7],
        end_date=row[8],
        notification_type=row[9],
        is_enabled=bool(row[10]),
        created_at=row[11],
        updated_at=row[12],
    )


def _row_to_prescription(row: tuple) -> PrescriptionState:
    return PrescriptionState(
        id=row[0],
        patient_id=row[1],
        medication_name=row[2],
        dosage=row[3],
        frequency=row[4],
        status=row[5],
        start_date=row[6],
        end_date=row[7],
    )


class SQLiteMedStore(ReminderStore, PrescriptionReader):
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        os.makedirs(os.path.dirname(db_path), exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS patients (
                    patient_id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    email TEXT
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS prescriptions (
                    id TEXT PRIMARY KEY,
                    patient_id TEXT NOT NULL,
                    medication_name TEXT NOT NULL,
                    dosage TEXT NOT NULL,
                    frequency TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'active',
                    start_date TEXT NOT NULL,
                    end_date TEXT
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS medication_reminders (
                    reminder_id TEXT PRIMARY KEY,
                    patient_id TEXT NOT NULL,
                    prescription_id TEXT NOT NULL UNIQUE,
                    medicine_name TEXT NOT NULL,
                    dosage TEXT NOT NULL,
                    frequency TEXT NOT NULL,
                    reminder_times TEXT NOT NULL,
                    start_date TEXT NOT NULL,
                    end_date TEXT,
                    notification_type TEXT NOT NULL DEFAULT 'both',
                    is_enabled INTEGER NOT NULL DEFAULT 1,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    FOREIGN KEY(prescription_id) REFERENCES prescriptions(id)
                        ON DELETE CASCADE
                )
                """
            )
            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS medication_reminders_patient_idx
                ON medication_reminders (patient_id, is_enabled)
                """
            )

    def upsert_patient(self, patient: PatientState) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO patients (patient_id, user_id, email)
                VALUES (?, ?, ?)
                ON CONFLICT(patient_id) DO UPDATE SET
                    user_id = excluded.user_id,
                    email = excluded.email
                """,
                (patient.patient_id, patient.user_id, patient.email),
            )

    def get_patient(self, patient_id: str) -> Optional[PatientState]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT patient_id, user_id, email FROM patients WHERE patient_id = ?",
                (patient_id,),
            ).fetchone()
            if row is None:
                return None
            return PatientState(patient_id=row[0], user_id=row[1], email=row[2])

    def upsert_prescription(self, prescription: PrescriptionState) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO prescriptions (
                    id, patient_id, medication_name, dosage, frequency, status,
                    start_date, end_date
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    medication_name = excluded.medication_name,
                    dosage = excluded.dosage,
                    frequency = excluded.frequency,
                    status = excluded.status,
                    start_date = excluded.start_date,
                    end_date = excluded.end_date
                """,
                (
                    prescription.id,
                    prescription.patient_id,
                    prescription.medication_name,
                    prescription.dosage,
                    prescription.frequency,
                    prescription.status,
                    prescription.start_date,
                    prescription.end_date,
                ),
            )

    def delete_prescription(self, prescription_id: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM prescriptions WHERE id = ?", (prescription_id,))

    def get_prescription(self, prescription_id: str) -> Optional[PrescriptionState]:
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT id, patient_id, medication_name, dosage, frequency, status,
                       start_date, end_date
                FROM prescriptions
                WHERE id = ?
                """,
                (prescription_id,),
            ).fetchone()
            if row is None:
                return None
            return _row_to_prescription(row)

    def list_patient_prescriptions(
        self, patient_id: str, status: Optional[str] = None
    ) -> List[PrescriptionState]:
        query = """
            SELECT id, patient_id, medication_name, dosage, frequency, status,
                   start_date, end_date
            FROM prescriptions
            WHERE patient_id = ?
        """
        params: list = [patient_id]
        if status is not None:
            query += " AND status = ?"
            params.append(status)
        query += " ORDER BY start_date DESC"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
            return [_row_to_prescription(row) for row in rows]

    def create_reminder(self, reminder: ReminderState) -> None:
        with self._connect() as conn:
            try:
                conn.execute(
                    f"""
                    INSERT INTO medication_reminders ({_REMINDER_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        reminder.reminder_id,
                        reminder.patient_id,
                        reminder.prescription_id,
                        reminder.medicine_name,
                        reminder.dosage,
                        reminder.frequency,
                        json.dumps(list(reminder.reminder_times)),
                        reminder.start_date,
                        reminder.end_date,
                        reminder.notification_type,
                        1 if reminder.is_enabled else 0,
                        reminder.created_at,
                        reminder.updated_at,
                    ),
                )
            except sqlite3.IntegrityError as exc:
                raise ValueError(
                    f"Reminder already exists for prescription: {reminder.prescription_id}"
                ) from exc

    def update_reminder(self, reminder: ReminderState) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                UPDATE medication_reminders
                SET medicine_name = ?, dosage = ?, frequency = ?, reminder_times = ?,
                    start_date = ?, end_date = ?, notification_type = ?,
                    is_enabled = ?, updated_at = ?
                WHERE reminder_id = ?
                """,
                (
                    reminder.medicine_name,
                    reminder.dosage,
                    reminder.frequency,
                    json.dumps(list(reminder.reminder_times)),
                    reminder.start_date,
                    reminder.end_date,
                    reminder.notification_type,
                    1 if reminder.is_enabled else 0,
                    reminder.updated_at,
                    reminder.reminder_id,
                ),
            )

    def set_reminder_enabled(self, reminder_id: str, enabled: bool, updated_at: str) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                UPDATE medication_reminders
                SET is_enabled = ?, updated_at = ?
                WHERE reminder_id = ?
                """,
                (1 if enabled else 0, updated_at, reminder_id),
            )

    def get_reminder(self, reminder_id: str) -> Optional[ReminderState]:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_REMINDER_COLUMNS} FROM medication_reminders WHERE reminder_id = ?",
                (reminder_id,),
            ).fetchone()
            if row is None:
                return None
            return _row_to_reminder(row)

    def get_reminder_for_prescription(self, prescription_id: str) -> Optional[ReminderState]:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_REMINDER_COLUMNS} FROM medication_reminders WHERE prescription_id = ?",
                (prescription_id,),
            ).fetchone()
            if row is None:
                return None
            return _row_to_reminder(row)

    def list_patient_reminders(
        self, patient_id: str, enabled_only: bool = False
    ) -> List[ReminderState]:
        query = f"SELECT {_REMINDER_COLUMNS} FROM medication_reminders WHERE patient_id = ?"
        if enabled_only:
            query += " AND is_enabled = 1"
        query += " ORDER BY is_enabled DESC, created_at ASC"
        with self._connect() as conn:
            rows = conn.execute(query, (patient_id,)).fetchall()
            return [_row_to_reminder(row) for row in rows]

    def list_enabled_reminders(self, on_date: Optional[str] = None) -> List[ReminderState]:
        with self._connect() as conn:
            if on_date is None:
                rows = conn.execute(
                    f"""
                    SELECT {_REMINDER_COLUMNS}
                    FROM medication_reminders
                    WHERE is_enabled = 1
                    ORDER BY created_at ASC
                    """
                ).fetchall()
            else:
                rows = conn.execute(
                    f"""
                    SELECT {_REMINDER_COLUMNS}
                    FROM medication_reminders
                    WHERE is_enabled = 1
                      AND start_date <= ?
                      AND (end_date IS NULL OR end_date >= ?)
                    ORDER BY created_at ASC
                    """,
                    (on_date, on_date),
                ).fetchall()
            return [_row_to_reminder(row) for row in rows]

    def list_enabled_with_prescriptions(
        self,
    ) -> List[Tuple[ReminderState, PrescriptionState]]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT r.reminder_id, r.patient_id, r.prescription_id, r.medicine_name,
                       r.dosage, r.frequency, r.reminder_times, r.start_date, r.end_date,
                       r.notification_type, r.is_enabled, r.created_at, r.updated_at,
                       p.id, p.patient_id, p.medication_name, p.dosage, p.frequency,
                       p.status, p.start_date, p.end_date
                FROM medication_reminders r
                INNER JOIN prescriptions p ON p.id = r.prescription_id
                WHERE r.is_enabled = 1
                """
            ).fetchall()
            return [(_row_to_reminder(row[:13]), _row_to_prescription(row[13:])) for row in rows]

    def delete_reminder(self, reminder_id: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM medication_reminders WHERE reminder_id = ?", (reminder_id,)
            )
