"""
Conflict evaluation between class sections.

Every section expands into placements (one per lecture day, one for the
discussion). Two sections conflict when any same-day pair of placements
overlaps, or when they are sections of the same course.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .models import ClassSection, ConflictKind, MeetingKind
from .time_intervals import TimeInterval, overlaps

logger = logging.getLogger(__name__)

SAME_COURSE_REASON = "same course already selected"


@dataclass(frozen=True)
class Placement:
    """One meeting occurrence of a section"""
    day: str
    interval: TimeInterval
    section_code: str
    kind: MeetingKind


@dataclass(frozen=True)
class Conflict:
    """Conflict between section_a and section_b; interval_a belongs to section_a"""
    section_a: ClassSection
    section_b: ClassSection
    kind: ConflictKind
    day: Optional[str] = None
    interval_a: Optional[TimeInterval] = None
    interval_b: Optional[TimeInterval] = None

    @property
    def is_duplicate_course(self) -> bool:
        return self.kind == ConflictKind.DUPLICATE_COURSE

    @property
    def reason(self) -> str:
        if self.is_duplicate_course:
            return SAME_COURSE_REASON
        return f"{self.kind.value} conflict with {self.section_b.id} on {self.day}"

    @property
    def time(self) -> str:
        """'09:00 - 10:00 vs 09:30 - 10:30' for reports"""
        if self.interval_a is None or self.interval_b is None:
            return ""
        return f"{self.interval_a} vs {self.interval_b}"

    def swapped(self) -> "Conflict":
        return Conflict(
            section_a=self.section_b,
            section_b=self.section_a,
            kind=self.kind,
            day=self.day,
            interval_a=self.interval_b,
            interval_b=self.interval_a,
        )


def placements_for(section: ClassSection) -> List[Placement]:
    lecture = section.lecture_interval
    placements = [
        Placement(day, lecture, section.section_code, MeetingKind.LECTURE)
        for day in section.lecture_days
    ]
    if section.has_discussion:
        placements.append(Placement(
            section.discussion_day,
            section.discussion_interval,
            section.section_code,
            MeetingKind.DISCUSSION,
        ))
    return placements


def _kind_of(a: MeetingKind, b: MeetingKind) -> ConflictKind:
    if a != b:
        return ConflictKind.LECTURE_DISCUSSION
    if a == MeetingKind.LECTURE:
        return ConflictKind.LECTURE
    return ConflictKind.DISCUSSION


def time_conflicts(a: ClassSection, b: ClassSection) -> List[Conflict]:
    """All same-day overlapping placement pairs between two sections"""
    if not a.meeting_days & b.meeting_days:
        return []

    conflicts = []
    placements_b = placements_for(b)
    for pa in placements_for(a):
        for pb in placements_b:
            if pa.day != pb.day or not overlaps(pa.interval, pb.interval):
                continue
            conflicts.append(Conflict(
                section_a=a,
                section_b=b,
                kind=_kind_of(pa.kind, pb.kind),
                day=pa.day,
                interval_a=pa.interval,
                interval_b=pb.interval,
            ))
    return conflicts


def sections_conflict(
    a: ClassSection,
    b: ClassSection,
    check_duplicate_course: bool = True,
) -> List[Conflict]:
    """
    Conflicts between two sections.

    Same course code yields a single duplicate-course conflict, which replaces
    any time conflicts between the pair.
    """
    if check_duplicate_course and a.course_code == b.course_code:
        return [Conflict(section_a=a, section_b=b, kind=ConflictKind.DUPLICATE_COURSE)]
    return time_conflicts(a, b)


def find_conflicts(
    candidate: ClassSection,
    placed: Iterable[ClassSection],
    *,
    check_duplicate_course: bool = True,
) -> List[Conflict]:
    """Conflicts between a candidate and every placed section.

    Duplicate-course conflicts come first, then time conflicts in placed order.
    A placed section identical to the candidate (same id) is skipped.
    """
    duplicates: List[Conflict] = []
    timed: List[Conflict] = []
    for other in placed:
        if other.id == candidate.id:
            continue
        for conflict in sections_conflict(candidate, other, check_duplicate_course):
            if conflict.is_duplicate_course:
                duplicates.append(conflict)
            else:
                timed.append(conflict)
    return duplicates + timed
