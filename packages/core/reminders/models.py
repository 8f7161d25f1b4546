from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..storage.base import ReminderState


IN_APP = "in_app"
EMAIL = "email"
BOTH = "both"


def channels_for(notification_type: str) -> frozenset:
    if notification_type == BOTH:
        return frozenset({IN_APP, EMAIL})
    if notification_type in (IN_APP, EMAIL):
        return frozenset({notification_type})
    return frozenset()


@dataclass(frozen=True)
class DueTrigger:
    reminder: ReminderState
    time: str
    date: str


@dataclass
class ChannelResult:
    channel: str
    success: bool
    error: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": self.success}
        if self.error is not None:
            payload["error"] = self.error
        if self.data is not None:
            payload["data"] = self.data
        return payload


@dataclass
class DispatchResult:
    reminder_id: str
    time: str
    channels: Dict[str, ChannelResult] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return bool(self.channels) and all(result.success for result in self.channels.values())
