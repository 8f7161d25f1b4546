from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class TriggerSpec:
    times: Tuple[str, ...]
    doses_per_day: int
    label: str


DEFAULT_TRIGGER = TriggerSpec(times=("08:00",), doses_per_day=1, label="Once daily")

CANONICAL_CODES = (
    "once_morning",
    "once_afternoon",
    "once_night",
    "twice_daily",
    "three_times_daily",
    "every_8_hours",
)

# Keys are stored lowercased; legacy codes stay supported alongside the canonical ones.
_FREQUENCY_TABLE: Dict[str, TriggerSpec] = {
    "once_morning": TriggerSpec(("08:00",), 1, "Once a day (Morning)"),
    "once_afternoon": TriggerSpec(("13:00",), 1, "Once a day (Afternoon)"),
    "once_night": TriggerSpec(("20:00",), 1, "Once a day (Night)"),
    "twice_daily": TriggerSpec(("08:00", "20:00"), 2, "Twice a day (Morning, Night)"),
    "three_times_daily": TriggerSpec(("08:00", "13:00", "20:00"), 3, "Three times a day"),
    "every_8_hours": TriggerSpec(("06:00", "14:00", "22:00"), 3, "Every 8 hours"),
    "1-0-0": TriggerSpec(("08:00",), 1, "Once daily (Morning)"),
    "0-1-0": TriggerSpec(("13:00",), 1, "Once daily (Afternoon)"),
    "0-0-1": TriggerSpec(("20:00",), 1, "Once daily (Night)"),
    "1-0-1": TriggerSpec(("08:00", "20:00"), 2, "Twice daily"),
    "1-1-1": TriggerSpec(("08:00", "13:00", "20:00"), 3, "Three times daily"),
    "once daily": TriggerSpec(("08:00",), 1, "Once daily"),
    "twice daily": TriggerSpec(("08:00", "20:00"), 2, "Twice daily"),
    "three times daily": TriggerSpec(("08:00", "13:00", "20:00"), 3, "Three times daily"),
    "every 8 hours": TriggerSpec(("06:00", "14:00", "22:00"), 3, "Every 8 hours"),
}


def _normalize_code(code: str) -> str:
    return (code or "").strip().lower()


def times_for(code: str) -> TriggerSpec:
    return _FREQUENCY_TABLE.get(_normalize_code(code), DEFAULT_TRIGGER)


def frequency_label(code: str) -> str:
    spec = _FREQUENCY_TABLE.get(_normalize_code(code))
    return spec.label if spec else code


def list_frequencies() -> List[Tuple[str, TriggerSpec]]:
    return [(code, _FREQUENCY_TABLE[code]) for code in CANONICAL_CODES]
