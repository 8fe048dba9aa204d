"""
Time interval model for class meetings.

Ranges arrive as 24-hour "HH:MM - HH:MM" strings. 24:00 is the end of the
nominal day (minute 1440), never minute 0, so a meeting that ends at midnight
still overlaps a later meeting that runs up to midnight.
"""

from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Tuple

MINUTES_PER_DAY = 24 * 60

# Slots that start before this hour belong to the previous evening when sorting
LATE_NIGHT_CUTOFF_HOUR = 2

_CLOCK_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")
_RANGE_RE = re.compile(r"^\s*(\d{1,2}:\d{2})\s*-\s*(\d{1,2}:\d{2})\s*$")


class MalformedRangeError(ValueError):
    """Raised when a clock value or time range cannot be parsed."""


@dataclass(frozen=True, order=True)
class TimeInterval:
    """Half-open [start, end) interval in minutes since midnight"""
    start: int
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "TimeInterval") -> bool:
        return overlaps(self, other)

    def __str__(self) -> str:
        return f"{format_minutes(self.start)} - {format_minutes(self.end)}"


def _split_clock(hhmm: str) -> Tuple[int, int]:
    match = _CLOCK_RE.match(hhmm or "")
    if not match:
        raise MalformedRangeError(f"Invalid clock value: {hhmm!r} (expected HH:MM)")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59 or hours > 24 or (hours == 24 and minutes != 0):
        raise MalformedRangeError(f"Clock value out of range: {hhmm!r}")
    return hours, minutes


def minutes_of(hhmm: str) -> int:
    """
    Minutes since midnight for overlap computation.

    24:00 maps to 1440 (end of day), so it compares greater than 23:59.
    """
    hours, minutes = _split_clock(hhmm)
    return hours * 60 + minutes


def normalize_clock(hhmm: str) -> str:
    """Display form of a clock value: hour 24 becomes 00. Never use for comparisons."""
    hours, minutes = _split_clock(hhmm)
    return f"{hours % 24:02d}:{minutes:02d}"


def sortable_minutes(hhmm: str) -> int:
    """Minutes with 00:00-01:59 pushed past 23:59 so late-night slots sort last."""
    hours, minutes = _split_clock(hhmm)
    if hours < LATE_NIGHT_CUTOFF_HOUR:
        hours += 24
    return hours * 60 + minutes


def format_minutes(total: int) -> str:
    """Inverse of minutes_of for values within one day (1440 renders as 24:00)."""
    return f"{total // 60:02d}:{total % 60:02d}"


def split_range(text: str) -> Tuple[str, str]:
    """Split "HH:MM - HH:MM" into its two clock strings without converting them."""
    if not isinstance(text, str):
        raise MalformedRangeError(f"Time range must be a string, got {type(text).__name__}")
    match = _RANGE_RE.match(text)
    if not match:
        raise MalformedRangeError(f"Invalid time range: {text!r} (expected 'HH:MM - HH:MM')")
    return match.group(1), match.group(2)


def parse_range(text: str) -> TimeInterval:
    """Parse an "HH:MM - HH:MM" range into a TimeInterval.

    An end earlier than the start crosses midnight; the end is pushed into the
    next day so the interval stays anchored to the day it started on.

    Raises:
        MalformedRangeError: text is not two clock values joined by '-',
            or describes a zero-length range
    """
    start_text, end_text = split_range(text)
    start = minutes_of(start_text)
    end = minutes_of(end_text)

    if start == MINUTES_PER_DAY:
        raise MalformedRangeError(f"Range cannot start at 24:00: {text!r}")
    if end == start:
        raise MalformedRangeError(f"Zero-length time range: {text!r}")
    if end < start:
        end += MINUTES_PER_DAY

    return TimeInterval(start, end)


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    """Strict half-open overlap; touching endpoints do not conflict."""
    return a.start < b.end and b.start < a.end
