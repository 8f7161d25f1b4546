from __future__ import annotations

import datetime as dt
import logging
import threading
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional, Protocol


logger = logging.getLogger("medportal.notifications")

PERMISSION_GRANTED = "granted"
PERMISSION_DENIED = "denied"
PERMISSION_DEFAULT = "default"

ALERT_DURATION_MS = 10000


@dataclass(frozen=True)
class SessionAlert:
    title: str
    description: str
    tag: str
    created_at: str
    duration_ms: int = ALERT_DURATION_MS


class NotificationPermission(Protocol):
    def state(self) -> str:
        """Return granted, denied or default."""

    def request(self) -> str:
        """Ask the user for permission and return the resulting state."""


class NativeNotifier(Protocol):
    def notify(self, title: str, body: str, tag: str) -> None:
        """Show a system-level notification."""


class FixedPermission:
    def __init__(self, state: str = PERMISSION_DEFAULT, answer: Optional[str] = None) -> None:
        self._state = state
        self._answer = answer or state

    def state(self) -> str:
        return self._state

    def request(self) -> str:
        self._state = self._answer
        return self._state


class InAppNotifier:
    """Per-session in-app channel.

    Every reminder becomes a transient alert queued for the session. A native
    notification is sent as well when permission is granted; an undecided
    permission is requested once, the first time it is needed.
    """

    def __init__(
        self,
        permission: Optional[NotificationPermission] = None,
        native: Optional[NativeNotifier] = None,
        max_pending: int = 50,
    ) -> None:
        self._permission = permission
        self._native = native
        self._permission_requested = False
        self._alerts: Deque[SessionAlert] = deque(maxlen=max_pending)
        self._lock = threading.Lock()

    def _native_allowed(self) -> bool:
        if self._permission is None or self._native is None:
            return False
        state = self._permission.state()
        if state == PERMISSION_DEFAULT and not self._permission_requested:
            self._permission_requested = True
            state = self._permission.request()
        return state == PERMISSION_GRANTED

    def notify(self, medicine_name: str, dosage: str, tag: str) -> bool:
        body = f"Time to take {medicine_name} ({dosage}) as prescribed by your doctor."
        alert = SessionAlert(
            title=f"Time for {medicine_name}",
            description=body,
            tag=tag,
            created_at=dt.datetime.now(dt.timezone.utc).isoformat(),
        )
        with self._lock:
            self._alerts.append(alert)

        if not self._native_allowed():
            return False
        self._native.notify(f"Medication Reminder: {medicine_name}", body, tag)
        return True

    def drain(self) -> List[SessionAlert]:
        with self._lock:
            alerts = list(self._alerts)
            self._alerts.clear()
        return alerts

    def pending(self) -> int:
        with self._lock:
            return len(self._alerts)
