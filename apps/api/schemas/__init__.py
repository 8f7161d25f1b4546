from .notifications import (
    ManualNotificationResponse,
    PollerStatusResponse,
    ReminderNotificationRequest,
    ScheduledSweepResponse,
    SessionAlertResponse,
)
from .reminders import (
    FrequencyResponse,
    ReminderCreateRequest,
    ReminderResponse,
    ReminderUpdateRequest,
)

__all__ = [
    "FrequencyResponse",
    "ManualNotificationResponse",
    "PollerStatusResponse",
    "ReminderCreateRequest",
    "ReminderNotificationRequest",
    "ReminderResponse",
    "ReminderUpdateRequest",
    "ScheduledSweepResponse",
    "SessionAlertResponse",
]
