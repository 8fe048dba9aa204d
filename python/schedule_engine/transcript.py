"""
Transcript status derivation.

A course is Passed when any entry carries a passing grade, In Progress when
an entry carries the in-progress marker, and Failed otherwise.
"""

import os
from typing import Dict, FrozenSet, Iterable, List, Optional

from .models import CourseStatus, TranscriptEntry

PASSING_GRADES: FrozenSet[str] = frozenset(
    g.strip().upper() for g in os.getenv("PASSING_GRADES", "A,B,C,CR,P").split(",") if g.strip()
)
IN_PROGRESS_GRADE = os.getenv("IN_PROGRESS_GRADE", "IP").strip().upper()

# Higher rank wins when one course has several transcript entries
_STATUS_RANK = {
    CourseStatus.FAILED: 0,
    CourseStatus.IN_PROGRESS: 1,
    CourseStatus.PASSED: 2,
}


def _base_grade(grade: str) -> str:
    """'a-' -> 'A', 'B+' -> 'B', 'CR' -> 'CR'"""
    g = (grade or "").strip().upper()
    if len(g) > 1 and g[-1] in "+-":
        g = g[:-1]
    return g


def grade_status(grade: str, passing_grades: Optional[Iterable[str]] = None) -> CourseStatus:
    passing = PASSING_GRADES if passing_grades is None else {p.strip().upper() for p in passing_grades}
    normalized = (grade or "").strip().upper()
    if normalized == IN_PROGRESS_GRADE:
        return CourseStatus.IN_PROGRESS
    if normalized in passing or _base_grade(normalized) in passing:
        return CourseStatus.PASSED
    return CourseStatus.FAILED


def course_statuses(
    transcript: Iterable[TranscriptEntry],
    passing_grades: Optional[Iterable[str]] = None,
) -> Dict[str, CourseStatus]:
    """Best status per course code, independent of entry order"""
    passing = None if passing_grades is None else frozenset(passing_grades)
    statuses: Dict[str, CourseStatus] = {}
    for entry in transcript:
        status = grade_status(entry.grade, passing)
        current = statuses.get(entry.course_code)
        if current is None or _STATUS_RANK[status] > _STATUS_RANK[current]:
            statuses[entry.course_code] = status
    return statuses


def best_entries(
    transcript: Iterable[TranscriptEntry],
    passing_grades: Optional[Iterable[str]] = None,
) -> Dict[str, TranscriptEntry]:
    """The entry that determined each course's status (first one on ties)"""
    passing = None if passing_grades is None else frozenset(passing_grades)
    chosen: Dict[str, TranscriptEntry] = {}
    for entry in transcript:
        current = chosen.get(entry.course_code)
        if current is None:
            chosen[entry.course_code] = entry
            continue
        if _STATUS_RANK[grade_status(entry.grade, passing)] > _STATUS_RANK[grade_status(current.grade, passing)]:
            chosen[entry.course_code] = entry
    return chosen


def transcript_for(student_id: str, entries: Iterable[TranscriptEntry]) -> List[TranscriptEntry]:
    return [e for e in entries if e.student_id == student_id]


def group_by_term(transcript: Iterable[TranscriptEntry]) -> Dict[str, List[TranscriptEntry]]:
    """Entries grouped by term in first-seen order; blank terms go under 'Other'"""
    grouped: Dict[str, List[TranscriptEntry]] = {}
    for entry in transcript:
        grouped.setdefault(entry.term or "Other", []).append(entry)
    return grouped
