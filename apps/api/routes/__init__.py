from .reminder_notifications import router as reminder_notifications_router
from .reminders import router as reminders_router
from .sessions import router as sessions_router

__all__ = [
    "reminder_notifications_router",
    "reminders_router",
    "sessions_router",
]
