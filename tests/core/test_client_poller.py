import datetime as dt
import threading
import time

from apscheduler.schedulers.background import BackgroundScheduler

from apps.api import reminders_scheduler as scheduler_module
from apps.api.reminders_scheduler import ClientPoller, PollerRegistry
from packages.core.notifications.in_app import InAppNotifier
from packages.core.reminders.ledger import TriggerFiredLedger
from packages.core.storage.base import ReminderState


def _reminder(reminder_id, times=("08:00", "20:00"), kind="both", enabled=True):
    return ReminderState(
        reminder_id=reminder_id,
        patient_id="pat-1",
        prescription_id=f"rx-{reminder_id}",
        medicine_name="Amlodipine",
        dosage="5mg",
        frequency="twice_daily",
        reminder_times=tuple(times),
        start_date="2024-01-01",
        end_date=None,
        notification_type=kind,
        is_enabled=enabled,
        created_at="2024-01-01T00:00:00+00:00",
        updated_at="2024-01-01T00:00:00+00:00",
    )


class DummyStore:
    def __init__(self, reminders):
        self.reminders = reminders
        self.fetches = 0

    def list_patient_reminders(self, patient_id, enabled_only=False):
        self.fetches += 1
        return [
            r
            for r in self.reminders
            if r.patient_id == patient_id and (r.is_enabled or not enabled_only)
        ]


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def _poller(store, clock, ledger=None):
    return ClientPoller(
        store,
        "pat-1",
        notifier=InAppNotifier(),
        ledger=ledger,
        interval_seconds=60,
        clock=clock,
    )


def test_tick_alerts_once_per_slot():
    store = DummyStore([_reminder("rem-1")])
    clock = Clock(dt.datetime(2024, 1, 2, 8, 0, 5))
    poller = _poller(store, clock)

    assert poller.tick() == 1
    clock.now = dt.datetime(2024, 1, 2, 8, 0, 50)
    assert poller.tick() == 0

    alerts = poller.notifier.drain()
    assert len(alerts) == 1
    assert alerts[0].tag == "rem-1-08:00-2024-01-02"
    assert store.fetches == 2


def test_tick_skips_email_only_reminders():
    store = DummyStore([_reminder("rem-1", kind="email"), _reminder("rem-2", kind="in_app")])
    poller = _poller(store, Clock(dt.datetime(2024, 1, 2, 20, 0)))

    assert poller.tick() == 1
    assert poller.notifier.drain()[0].tag.startswith("rem-2-")


def test_tick_reads_store_fresh_each_time():
    store = DummyStore([_reminder("rem-1", times=("09:00",))])
    clock = Clock(dt.datetime(2024, 1, 2, 8, 0))
    poller = _poller(store, clock)

    assert poller.tick() == 0
    store.reminders = [_reminder("rem-1", times=("08:00",))]
    assert poller.tick() == 1


def test_ledger_cleared_past_bound():
    store = DummyStore([_reminder(f"rem-{index}", times=("08:00",)) for index in range(3)])
    ledger = TriggerFiredLedger(max_entries=2)
    poller = _poller(store, Clock(dt.datetime(2024, 1, 2, 8, 0)), ledger=ledger)

    assert poller.tick() == 3
    assert len(ledger) == 0


def test_store_errors_do_not_escape_tick():
    class BrokenStore:
        def list_patient_reminders(self, patient_id, enabled_only=False):
            raise RuntimeError("offline")

    poller = _poller(BrokenStore(), Clock(dt.datetime(2024, 1, 2, 8, 0)))
    assert poller.tick() == 0


def test_no_dispatch_after_stop():
    store = DummyStore([_reminder("rem-1")])
    poller = _poller(store, Clock(dt.datetime(2024, 1, 2, 8, 0)))

    poller.stop()

    assert poller.tick() == 0
    assert poller.notifier.pending() == 0
    assert store.fetches == 0


def test_start_and_stop_scheduler():
    poller = _poller(DummyStore([]), Clock(dt.datetime(2024, 1, 2, 3, 17)))

    poller.start()
    assert poller.running is True

    poller.stop()
    assert poller.running is False


def test_registry_keeps_one_poller_per_patient():
    created = []

    def factory(patient_id):
        poller = ClientPoller(
            DummyStore([]), patient_id, clock=Clock(dt.datetime(2024, 1, 2, 3, 17))
        )
        created.append(poller)
        return poller

    registry = PollerRegistry(factory)
    first = registry.start("pat-1")
    second = registry.start("pat-1")

    assert first is second
    assert len(created) == 1
    assert registry.stop("pat-1") is True
    assert registry.stop("pat-1") is False
    assert first.running is False

    registry.start("pat-2")
    assert registry.stop_all() == 1


def test_concurrent_starts_build_one_scheduler(monkeypatch):
    created = []

    class SlowScheduler(BackgroundScheduler):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            created.append(self)

        def start(self, *args, **kwargs):
            time.sleep(0.05)
            super().start(*args, **kwargs)

    monkeypatch.setattr(scheduler_module, "BackgroundScheduler", SlowScheduler)
    registry = PollerRegistry(
        lambda patient_id: ClientPoller(
            DummyStore([]), patient_id, clock=Clock(dt.datetime(2024, 1, 2, 3, 17))
        )
    )

    threads = [threading.Thread(target=registry.start, args=("pat-1",)) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    registry.stop("pat-1")

    assert len(created) == 1
    assert not any(scheduler.running for scheduler in created)


def test_idle_session_expires_from_registry():
    idle_clock = Clock(1000.0)
    registry = PollerRegistry(
        lambda patient_id: ClientPoller(
            DummyStore([_reminder("rem-1")]),
            patient_id,
            clock=Clock(dt.datetime(2024, 1, 2, 8, 0)),
            idle_timeout_seconds=30,
            idle_clock=idle_clock,
        )
    )
    poller = registry.start("pat-1")

    idle_clock.now = 1020.0
    poller.touch()
    idle_clock.now = 1045.0
    assert poller.idle is False

    idle_clock.now = 1051.0
    assert poller.tick() == 0
    assert registry.get("pat-1") is None
    assert poller.running is False


def test_idle_expiry_can_be_disabled():
    idle_clock = Clock(0.0)
    poller = ClientPoller(
        DummyStore([]),
        "pat-1",
        clock=Clock(dt.datetime(2024, 1, 2, 3, 17)),
        idle_timeout_seconds=0,
        idle_clock=idle_clock,
    )

    idle_clock.now = 10_000.0
    assert poller.idle is False
