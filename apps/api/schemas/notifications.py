from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class ReminderNotificationRequest(BaseModel):
    reminder_id: Optional[str] = None
    patient_email: Optional[str] = None
    medicine_name: Optional[str] = None
    dosage: Optional[str] = None
    notification_type: Optional[str] = None
    check_scheduled: bool = False


class ScheduledSweepResponse(BaseModel):
    success: bool
    notifications_sent: int
    notifications: List[Dict[str, Any]]


class ManualNotificationResponse(BaseModel):
    success: bool
    message: str


class SessionAlertResponse(BaseModel):
    title: str
    description: str
    tag: str
    created_at: str
    duration_ms: int


class PollerStatusResponse(BaseModel):
    patient_id: str
    running: bool
    ledger_size: int
    pending_alerts: int
