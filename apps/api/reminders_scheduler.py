from __future__ import annotations

import datetime as dt
import logging
import os
import threading
import time
from typing import Callable, Dict, Optional

from apscheduler.schedulers.background import BackgroundScheduler

from packages.core.notifications.in_app import InAppNotifier
from packages.core.reminders.dispatcher import NotificationDispatcher
from packages.core.reminders.evaluator import due_triggers
from packages.core.reminders.ledger import TriggerFiredLedger
from packages.core.reminders.models import IN_APP, channels_for
from packages.core.storage.base import ReminderStore


logger = logging.getLogger("medportal.reminders")


def _poll_interval_seconds() -> int:
    return int(os.getenv("REMINDER_POLL_INTERVAL_SECONDS", "60"))


def _ledger_max_entries() -> int:
    return int(os.getenv("REMINDER_LEDGER_MAX_ENTRIES", "100"))


def _session_idle_seconds() -> int:
    return int(os.getenv("REMINDER_SESSION_IDLE_SECONDS", "300"))


class ClientPoller:
    """Minute-by-minute in-app reminder check for one signed-in patient.

    Reminders are read fresh from the store on every tick. The poller owns its
    ledger, so a slot fires at most once per session per day. A session that
    is not touched within ``idle_timeout_seconds`` is torn down by its next
    tick; 0 disables expiry.
    """

    def __init__(
        self,
        store: ReminderStore,
        patient_id: str,
        notifier: Optional[InAppNotifier] = None,
        ledger: Optional[TriggerFiredLedger] = None,
        interval_seconds: Optional[int] = None,
        clock: Callable[[], dt.datetime] = dt.datetime.now,
        idle_timeout_seconds: Optional[int] = None,
        idle_clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.patient_id = patient_id
        self.notifier = notifier or InAppNotifier()
        self.ledger = ledger or TriggerFiredLedger(max_entries=_ledger_max_entries())
        self.on_idle: Optional[Callable[[ClientPoller], None]] = None
        self._store = store
        self._dispatcher = NotificationDispatcher(in_app=self.notifier)
        self._interval = interval_seconds or _poll_interval_seconds()
        self._clock = clock
        if idle_timeout_seconds is None:
            idle_timeout_seconds = _session_idle_seconds()
        self._idle_timeout = idle_timeout_seconds
        self._idle_clock = idle_clock
        self._last_seen = idle_clock()
        self._scheduler: Optional[BackgroundScheduler] = None
        self._lifecycle_lock = threading.Lock()
        self._tick_lock = threading.Lock()
        self._stopped = threading.Event()

    @property
    def running(self) -> bool:
        return self._scheduler is not None and not self._stopped.is_set()

    @property
    def idle(self) -> bool:
        if self._idle_timeout <= 0:
            return False
        return self._idle_clock() - self._last_seen > self._idle_timeout

    def touch(self) -> None:
        self._last_seen = self._idle_clock()

    def start(self) -> None:
        with self._lifecycle_lock:
            self.touch()
            if self._scheduler is not None:
                return
            self._stopped.clear()
            scheduler = BackgroundScheduler()
            scheduler.add_job(
                self.tick,
                "interval",
                seconds=self._interval,
                id=f"reminders-{self.patient_id}",
                max_instances=1,
                coalesce=True,
                replace_existing=True,
                next_run_time=dt.datetime.now(),
            )
            scheduler.start()
            self._scheduler = scheduler
        logger.info("client_poller_started patient=%s", self.patient_id)

    def stop(self) -> None:
        with self._lifecycle_lock:
            self._stopped.set()
            scheduler, self._scheduler = self._scheduler, None
            if scheduler is None:
                return
            scheduler.shutdown(wait=False)
        logger.info("client_poller_stopped patient=%s", self.patient_id)

    def tick(self) -> int:
        if self._stopped.is_set():
            return 0
        if self.idle:
            logger.info("client_poller_idle patient=%s", self.patient_id)
            if self.on_idle is not None:
                self.on_idle(self)
            else:
                self.stop()
            return 0
        if not self._tick_lock.acquire(blocking=False):
            logger.warning("client_poller_tick_skipped patient=%s", self.patient_id)
            return 0
        try:
            return self._check_and_notify()
        except Exception as exc:
            logger.exception(
                "client_poller_tick_failed patient=%s error=%s", self.patient_id, exc
            )
            return 0
        finally:
            self._tick_lock.release()

    def _check_and_notify(self) -> int:
        now = self._clock()
        reminders = [
            reminder
            for reminder in self._store.list_patient_reminders(self.patient_id, enabled_only=True)
            if IN_APP in channels_for(reminder.notification_type)
        ]
        sent = 0
        for trigger in due_triggers(now, reminders, self.ledger):
            if self._stopped.is_set():
                break
            tag = f"{trigger.reminder.reminder_id}-{trigger.time}-{trigger.date}"
            self._dispatcher.dispatch(trigger.reminder, trigger.time, channels=[IN_APP], tag=tag)
            sent += 1
        if self.ledger.trim():
            logger.debug("client_poller_ledger_cleared patient=%s", self.patient_id)
        return sent


class PollerRegistry:
    def __init__(self, poller_factory: Callable[[str], ClientPoller]) -> None:
        self._factory = poller_factory
        self._pollers: Dict[str, ClientPoller] = {}
        self._lock = threading.Lock()

    def start(self, patient_id: str) -> ClientPoller:
        # Started under the lock so a concurrent stop cannot orphan a scheduler.
        with self._lock:
            poller = self._pollers.get(patient_id)
            if poller is None:
                poller = self._factory(patient_id)
                poller.on_idle = self._expire
                self._pollers[patient_id] = poller
            poller.start()
        return poller

    def get(self, patient_id: str) -> Optional[ClientPoller]:
        with self._lock:
            return self._pollers.get(patient_id)

    def stop(self, patient_id: str) -> bool:
        with self._lock:
            poller = self._pollers.pop(patient_id, None)
        if poller is None:
            return False
        poller.stop()
        return True

    def stop_all(self) -> int:
        with self._lock:
            pollers = list(self._pollers.values())
            self._pollers.clear()
        for poller in pollers:
            poller.stop()
        return len(pollers)

    def _expire(self, poller: ClientPoller) -> None:
        with self._lock:
            if self._pollers.get(poller.patient_id) is poller:
                del self._pollers[poller.patient_id]
        poller.stop()
