from __future__ import annotations

from typing import Optional, Set, Tuple


LedgerKey = Tuple[str, str, str]


class TriggerFiredLedger:
    """In-memory record of (reminder_id, time, date) slots already dispatched.

    Entries are never persisted. When ``max_entries`` is set, ``trim`` clears the
    whole ledger once it grows past the bound.
    """

    def __init__(self, max_entries: Optional[int] = None) -> None:
        self._max_entries = max_entries
        self._fired: Set[LedgerKey] = set()

    def __contains__(self, key: LedgerKey) -> bool:
        return key in self._fired

    def __len__(self) -> int:
        return len(self._fired)

    def has_fired(self, reminder_id: str, time: str, date: str) -> bool:
        return (reminder_id, time, date) in self._fired

    def mark_fired(self, reminder_id: str, time: str, date: str) -> None:
        self._fired.add((reminder_id, time, date))

    def trim(self) -> bool:
        if self._max_entries is None or len(self._fired) <= self._max_entries:
            return False
        self._fired.clear()
        return True

    def clear(self) -> None:
        self._fired.clear()
