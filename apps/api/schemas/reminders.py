from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


NotificationType = Literal["in_app", "email", "both"]


class ReminderCreateRequest(BaseModel):
    prescription_id: str = Field(..., min_length=1)
    notification_type: NotificationType = "both"
    reminder_times: Optional[List[str]] = None


class ReminderUpdateRequest(BaseModel):
    is_enabled: Optional[bool] = None
    reminder_times: Optional[List[str]] = None
    notification_type: Optional[NotificationType] = None


class ReminderResponse(BaseModel):
    reminder_id: str
    patient_id: str
    prescription_id: str
    medicine_name: str
    dosage: str
    frequency: str
    frequency_label: str
    reminder_times: List[str]
    start_date: str
    end_date: Optional[str]
    notification_type: str
    is_enabled: bool
    created_at: str
    updated_at: str


class FrequencyResponse(BaseModel):
    code: str
    label: str
    times: List[str]
    doses_per_day: int
