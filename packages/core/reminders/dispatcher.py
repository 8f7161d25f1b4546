from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..notifications.email import ResendEmailClient
from ..notifications.in_app import InAppNotifier
from ..storage.base import ReminderState
from .models import EMAIL, IN_APP, ChannelResult, DispatchResult, channels_for


logger = logging.getLogger("medportal.notifications")


class NotificationDispatcher:
    def __init__(
        self,
        email_client: Optional[ResendEmailClient] = None,
        in_app: Optional[InAppNotifier] = None,
    ) -> None:
        self._email_client = email_client
        self._in_app = in_app

    def dispatch(
        self,
        reminder: ReminderState,
        time: str,
        channels: Optional[Iterable[str]] = None,
        email: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> DispatchResult:
        selected = channels_for(reminder.notification_type)
        if channels is not None:
            selected = selected & frozenset(channels)

        result = DispatchResult(reminder_id=reminder.reminder_id, time=time)
        if IN_APP in selected:
            result.channels[IN_APP] = self._send_in_app(reminder, tag or f"{reminder.reminder_id}-{time}")
        if EMAIL in selected:
            result.channels[EMAIL] = self._send_email(reminder, email)
        return result

    def _send_in_app(self, reminder: ReminderState, tag: str) -> ChannelResult:
        if self._in_app is None:
            return ChannelResult(channel=IN_APP, success=False, error="in_app_unavailable")
        try:
            native_sent = self._in_app.notify(reminder.medicine_name, reminder.dosage, tag)
        except Exception as exc:
            logger.exception("in_app_dispatch_failed id=%s error=%s", reminder.reminder_id, exc)
            return ChannelResult(channel=IN_APP, success=False, error=str(exc))
        return ChannelResult(channel=IN_APP, success=True, data={"native": native_sent})

    def _send_email(self, reminder: ReminderState, email: Optional[str]) -> ChannelResult:
        if self._email_client is None:
            return ChannelResult(channel=EMAIL, success=False, error="email_not_configured")
        if not email:
            return ChannelResult(channel=EMAIL, success=False, error="missing_email")
        try:
            sent = self._email_client.send_reminder(email, reminder.medicine_name, reminder.dosage)
        except Exception as exc:
            logger.exception("email_dispatch_failed id=%s error=%s", reminder.reminder_id, exc)
            return ChannelResult(channel=EMAIL, success=False, error=str(exc))
        return ChannelResult(
            channel=EMAIL,
            success=sent.success,
            error=sent.error,
            data=sent.data,
        )
