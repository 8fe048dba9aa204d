"""
Selection partitioner.

Splits a catalog into available / conflicting / taken / transcript-only for
one student's current selection. Every call is a full re-derivation from its
arguments; callers re-run it after any change to selection, availability or
student instead of patching a previous result.
"""

from __future__ import annotations
import logging
import os
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from prometheus_client import Counter, Histogram

from .availability import Availability, index_slots
from .conflicts import Conflict, find_conflicts
from .eligibility import classify_with_statuses
from .models import ClassSection, CourseStatus, SelectedClass, TranscriptEntry
from .transcript import best_entries, course_statuses

logger = logging.getLogger(__name__)


class InProgressPolicy(str, Enum):
    """When an in-progress transcript course stops being offered"""
    BLOCK_WHEN_PLACED = "block_when_placed"   # only while one of its sections is placed
    ALWAYS_BLOCK = "always_block"
    NEVER_BLOCK = "never_block"


IN_PROGRESS_POLICY = InProgressPolicy(os.getenv("IN_PROGRESS_POLICY", InProgressPolicy.BLOCK_WHEN_PLACED.value))

# Metrics
partition_runs_total = Counter(
    "schedule_partition_runs_total",
    "Catalog partition runs"
)
partition_ms = Histogram(
    "schedule_partition_ms",
    "Catalog partition time (ms)"
)


@dataclass(frozen=True)
class ConflictingSection:
    section: ClassSection
    reason: str
    conflicts: Tuple[Conflict, ...] = ()


@dataclass(frozen=True)
class TakenCourse:
    """A catalog course the transcript already satisfies"""
    course_code: str
    course_name: str
    grade: str
    status: CourseStatus
    representative: ClassSection


@dataclass(frozen=True)
class TranscriptOnlyCourse:
    """A satisfied transcript course that the current catalog does not offer"""
    course_code: str
    course_name: str
    grade: str
    status: CourseStatus


@dataclass
class PartitionResult:
    available: List[ClassSection] = field(default_factory=list)
    conflicting: List[ConflictingSection] = field(default_factory=list)
    taken: List[TakenCourse] = field(default_factory=list)
    transcript_only: List[TranscriptOnlyCourse] = field(default_factory=list)

    def course_codes_by_bucket(self) -> Dict[str, Set[str]]:
        return {
            "available": {s.course_code for s in self.available},
            "conflicting": {c.section.course_code for c in self.conflicting},
            "taken": {t.course_code for t in self.taken},
            "transcript_only": {t.course_code for t in self.transcript_only},
        }

    def reason_for(self, section_id: str) -> Optional[str]:
        for item in self.conflicting:
            if item.section.id == section_id:
                return item.reason
        return None


def _is_blocking(
    status: Optional[CourseStatus],
    course_code: str,
    placed_course_codes: Set[str],
    policy: InProgressPolicy,
) -> bool:
    if status == CourseStatus.PASSED:
        return True
    if status != CourseStatus.IN_PROGRESS:
        return False
    if policy == InProgressPolicy.ALWAYS_BLOCK:
        return True
    if policy == InProgressPolicy.NEVER_BLOCK:
        return False
    return course_code in placed_course_codes


def _taken_course(section: ClassSection, status: CourseStatus, entry: TranscriptEntry) -> TakenCourse:
    return TakenCourse(
        course_code=section.course_code,
        course_name=section.course_name or entry.course_name,
        grade=entry.grade,
        status=status,
        representative=section,
    )


def partition(
    catalog: Iterable[ClassSection],
    transcript: Iterable[TranscriptEntry],
    availability: Availability,
    placed: Sequence[SelectedClass],
    *,
    in_progress_policy: Optional[InProgressPolicy] = None,
    passing_grades: Optional[Sequence[str]] = None,
) -> PartitionResult:
    """Partition the catalog for one student's current selection state.

    Args:
        catalog: offered sections; read fresh on every call
        transcript: this student's transcript entries
        availability: slot key -> weekday -> open; empty means fully open
        placed: manually selected and pre-scheduled classes
        in_progress_policy: overrides IN_PROGRESS_POLICY
        passing_grades: overrides the configured passing grade set

    Returns:
        PartitionResult; available/conflicting follow catalog order,
        taken/transcript_only are sorted by course code
    """
    t0 = time.perf_counter()
    policy = in_progress_policy or IN_PROGRESS_POLICY
    catalog = list(catalog)
    transcript = list(transcript)

    statuses = course_statuses(transcript, passing_grades)
    deciding_entries = best_entries(transcript, passing_grades)
    placed_ids = {p.id for p in placed}
    placed_sections = [p.section for p in placed]
    placed_course_codes = {s.course_code for s in placed_sections}
    catalog_course_codes = {s.course_code for s in catalog}
    slot_index = index_slots(availability) if availability else None

    result = PartitionResult()
    taken: Dict[str, TakenCourse] = {}

    for section in catalog:
        if section.id in placed_ids:
            continue

        course = section.course_code
        status = statuses.get(course)
        if _is_blocking(status, course, placed_course_codes, policy):
            current = taken.get(course)
            if current is None or section.section_code < current.representative.section_code:
                taken[course] = _taken_course(section, status, deciding_entries[course])
            continue

        eligibility = classify_with_statuses(
            section,
            statuses,
            availability,
            in_progress_blocks=False,
            slot_index=slot_index,
        )
        if not eligibility.eligible:
            result.conflicting.append(ConflictingSection(section, eligibility.reason))
            continue

        conflicts = find_conflicts(section, placed_sections)
        if conflicts:
            result.conflicting.append(ConflictingSection(section, conflicts[0].reason, tuple(conflicts)))
            continue

        result.available.append(section)

    # Courses whose every section is placed still get reported as taken
    for course in sorted(catalog_course_codes - set(taken)):
        status = statuses.get(course)
        if not _is_blocking(status, course, placed_course_codes, policy):
            continue
        representative = min(
            (s for s in catalog if s.course_code == course),
            key=lambda s: s.section_code,
        )
        taken[course] = _taken_course(representative, status, deciding_entries[course])

    result.taken =[taken[code] for code in sorted(taken)]
    result.transcript_only = [
        TranscriptOnlyCourse(
            course_code=code,
            course_name=deciding_entries[code].course_name,
            grade=deciding_entries[code].grade,
            status=statuses[code],
        )
        for code in sorted(statuses)
        if code not in catalog_course_codes
        and _is_blocking(statuses[code], code, placed_course_codes, policy)
    ]

    partition_runs_total.inc()
    partition_ms.observe((time.perf_counter() - t0) * 1000.0)
    logger.debug(
        f"Partitioned {len(catalog)} sections: {len(result.available)} available, "
        f"{len(result.conflicting)} conflicting, {len(result.taken)} taken, "
        f"{len(result.transcript_only)} transcript-only"
    )
    return result
