"""
Eligibility classification of a single candidate section.

Rules run in order and the first match wins: transcript, availability,
prerequisite. Time conflicts with placed classes are checked separately
by the conflict evaluator.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional, Sequence

from .availability import Availability, index_slots, is_meeting_available
from .conflicts import placements_for
from .models import ClassSection, CourseStatus, TranscriptEntry
from .transcript import course_statuses


class EligibilityStatus(str, Enum):
    ELIGIBLE = "eligible"
    BLOCKED = "blocked"


class BlockReason:
    ALREADY_COMPLETED = "already completed"
    IN_PROGRESS = "already in progress"
    OUTSIDE_AVAILABILITY = "outside selected availability"
    PREREQUISITE_NOT_MET = "prerequisite not met"


@dataclass(frozen=True)
class EligibilityResult:
    status: EligibilityStatus
    reason: Optional[str] = None

    @property
    def eligible(self) -> bool:
        return self.status == EligibilityStatus.ELIGIBLE

    @classmethod
    def blocked(cls, reason: str) -> "EligibilityResult":
        return cls(EligibilityStatus.BLOCKED, reason)


ELIGIBLE = EligibilityResult(EligibilityStatus.ELIGIBLE)


def fits_availability(section: ClassSection, availability: Availability, index=None) -> bool:
    if not availability:
        return True
    if index is None:
        index = index_slots(availability)
    return all(
        is_meeting_available(availability, p.day, p.interval, index)
        for p in placements_for(section)
    )


def classify_with_statuses(
    candidate: ClassSection,
    statuses: Dict[str, CourseStatus],
    availability: Availability,
    in_progress_blocks: bool = False,
    slot_index=None,
) -> EligibilityResult:
    """classify() over precomputed course statuses, for callers looping a catalog"""
    status = statuses.get(candidate.course_code)
    if status == CourseStatus.PASSED:
        return EligibilityResult.blocked(BlockReason.ALREADY_COMPLETED)
    if status == CourseStatus.IN_PROGRESS and in_progress_blocks:
        return EligibilityResult.blocked(BlockReason.IN_PROGRESS)

    if not fits_availability(candidate, availability, slot_index):
        return EligibilityResult.blocked(BlockReason.OUTSIDE_AVAILABILITY)

    prereq = candidate.prerequisite_course_code
    if prereq and statuses.get(prereq) != CourseStatus.PASSED:
        return EligibilityResult.blocked(BlockReason.PREREQUISITE_NOT_MET)

    return ELIGIBLE


def classify(
    candidate: ClassSection,
    transcript: Iterable[TranscriptEntry],
    availability: Availability,
    *,
    in_progress_blocks: bool = False,
    passing_grades: Optional[Sequence[str]] = None,
) -> EligibilityResult:
    """Decide whether a section may be offered, independent of time conflicts.

    Args:
        candidate: section under consideration
        transcript: the student's transcript entries
        availability: slot key -> weekday -> open; empty means fully open
        in_progress_blocks: treat an in-progress course like a completed one
        passing_grades: overrides the configured passing grade set

    Returns:
        EligibilityResult with a reason when blocked
    """
    statuses = course_statuses(transcript, passing_grades)
    return classify_with_statuses(candidate, statuses, availability, in_progress_blocks)
