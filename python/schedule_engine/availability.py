"""
Availability grid: which weekday/time-slot cells a student marked as open.

The mapping is owned by the caller. Every helper here returns a new mapping
and leaves its input untouched, so "clear all" is just swapping in {}.
Slot keys look like "09:00-10:00" or "morning-09:00-10:00"; the last two
dash-separated parts are the slot bounds.
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .time_intervals import TimeInterval, minutes_of, parse_range, sortable_minutes

logger = logging.getLogger(__name__)

Availability = Mapping[str, Mapping[str, bool]]

DAYS: Tuple[str, ...] = tuple(
    d.strip() for d in os.getenv("SCHEDULE_DAYS", "Monday,Tuesday,Wednesday,Thursday").split(",") if d.strip()
)


@dataclass(frozen=True)
class TimeSlot:
    start: str
    end: str
    id: str


@dataclass(frozen=True)
class TimeSlotGroup:
    name: str
    key: str
    slots: Tuple[TimeSlot, ...]


# (group key, display name, first start hour, end hour exclusive); bands do not overlap
SLOT_BANDS: Tuple[Tuple[str, str, int, int], ...] = (
    ("morning", "Morning Classes (AM EST)", 9, 13),
    ("evening", "Afternoon Classes (PM EST)", 18, 21),
    ("late", "Night Classes (PM PST)", 21, 26),  # 21:00 through 01:59
)


def slot_bounds(key: str) -> Tuple[str, str]:
    """'late-23:00-24:00' -> ('23:00', '24:00')"""
    parts = key.split("-")
    if len(parts) < 2:
        raise ValueError(f"Availability key has no time bounds: {key!r}")
    return parts[-2].strip(), parts[-1].strip()


def slot_interval(key: str) -> TimeInterval:
    start, end = slot_bounds(key)
    return parse_range(f"{start} - {end}")


def index_slots(availability: Availability) -> Dict[TimeInterval, List[str]]:
    """Group availability keys by the interval they describe."""
    index: Dict[TimeInterval, List[str]] = {}
    for key in availability:
        index.setdefault(slot_interval(key), []).append(key)
    return index


def is_meeting_available(
    availability: Availability,
    day: str,
    interval: TimeInterval,
    index: Optional[Dict[TimeInterval, List[str]]] = None,
) -> bool:
    """
    Whether a single meeting fits the availability grid.

    Empty availability means everything is open. Otherwise the meeting needs a
    slot with exactly its bounds that is marked available on its day; when
    several keys share those bounds, one open cell is enough.
    """
    if not availability:
        return True
    if index is None:
        index = index_slots(availability)
    keys = index.get(interval)
    if not keys:
        return False
    return any(bool(availability[k].get(day)) for k in keys)


def has_selections(availability: Availability) -> bool:
    return any(any(days.values()) for days in availability.values())


def toggle(availability: Availability, slot_id: str, day: str) -> Dict[str, Dict[str, bool]]:
    updated = {k: dict(v) for k, v in availability.items()}
    cell = updated.setdefault(slot_id, {})
    cell[day] = not cell.get(day, False)
    return updated


def set_slots(
    availability: Availability,
    slot_ids: Iterable[str],
    value: bool,
    days: Sequence[str] = DAYS,
) -> Dict[str, Dict[str, bool]]:
    """Set every day of each listed slot to `value` (group select/clear)."""
    updated = {k: dict(v) for k, v in availability.items()}
    for slot_id in slot_ids:
        updated[slot_id] = {day: value for day in days}
    return updated


def clear_all() -> Dict[str, Dict[str, bool]]:
    return {}


def is_fully_selected(
    availability: Availability,
    slot_ids: Iterable[str],
    days: Sequence[str] = DAYS,
) -> bool:
    return all(
        all(availability.get(slot_id, {}).get(day, False) for day in days)
        for slot_id in slot_ids
    )


def _band_for(start: str) -> Optional[Tuple[str, str]]:
    hour = sortable_minutes(start) // 60
    for key, name, first, last in SLOT_BANDS:
        if first <= hour < last:
            return key, name
    return None


def group_time_slots(ranges: Iterable[Tuple[str, str]]) -> List[TimeSlotGroup]:
    """
    Group distinct (start, end) pairs into display bands.

    Slots are ordered by start with post-midnight starts sorted after the
    evening. Ranges outside every band are left out; empty bands are omitted.
    """
    unique = sorted(set(ranges), key=lambda r: (sortable_minutes(r[0]), minutes_of(r[1])))
    buckets: Dict[str, List[TimeSlot]] = {}
    for start, end in unique:
        band = _band_for(start)
        if band is None:
            logger.debug(f"Slot {start}-{end} falls outside every availability band")
            continue
        key, _ = band
        buckets.setdefault(key, []).append(TimeSlot(start=start, end=end, id=f"{key}-{start}-{end}"))

    return [
        TimeSlotGroup(name=name, key=key, slots=tuple(buckets[key]))
        for key, name, _, _ in SLOT_BANDS
        if buckets.get(key)
    ]
