"""
Cohort conflict detection across students sharing a pre-built schedule.

Each unordered pair of students is compared once, across the cross product of
their pre-scheduled sections. Only time overlaps count here: two students
sitting in the same course is expected, not a conflict.
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from prometheus_client import Counter

from python.data_ingestion.validation import ReferenceKind, ReferenceTracker

from .conflicts import Conflict, time_conflicts
from .models import ClassSection, ConflictKind, PreScheduleEntry, Student

logger = logging.getLogger(__name__)

COHORT_TOP_N = int(os.getenv("COHORT_TOP_N", "10"))

cohort_conflicts_total = Counter(
    "schedule_cohort_conflicts_total",
    "Inter-student conflicts found by cohort detection", ["kind"]
)


@dataclass(frozen=True)
class CohortConflict:
    """A conflict between one section of student_a and one of student_b"""
    student_a: Student
    student_b: Student
    conflict: Conflict

    @property
    def kind(self) -> ConflictKind:
        return self.conflict.kind

    @property
    def day(self) -> Optional[str]:
        return self.conflict.day

    def involves(self, student_id: str) -> bool:
        return student_id in (self.student_a.id, self.student_b.id)


@dataclass
class CohortSummary:
    total_conflicts: int = 0
    students_with_conflicts: int = 0
    conflict_type_histogram: Dict[str, int] = field(default_factory=dict)
    top_conflicted_students: List[Tuple[Student, int]] = field(default_factory=list)


@dataclass
class CohortReport:
    conflicts: List[CohortConflict]
    summary: CohortSummary
    dropped_references: int = 0


def summarize(conflicts: Iterable[CohortConflict], top_n: int = COHORT_TOP_N) -> CohortSummary:
    """Aggregate statistics; ties in the top list are ordered by student id"""
    conflicts = list(conflicts)
    histogram: Dict[str, int] = {}
    per_student: Dict[str, int] = {}
    students: Dict[str, Student] = {}

    for item in conflicts:
        histogram[item.kind.value] = histogram.get(item.kind.value, 0) + 1
        for student in (item.student_a, item.student_b):
            students[student.id] = student
            per_student[student.id] = per_student.get(student.id, 0) + 1

    ranked = sorted(per_student.items(), key=lambda x: (-x[1], x[0]))[:max(top_n, 0)]
    return CohortSummary(
        total_conflicts=len(conflicts),
        students_with_conflicts=len(per_student),
        conflict_type_histogram=histogram,
        top_conflicted_students=[(students[sid], count) for sid, count in ranked],
    )


class CohortConflictDetector:
    """Pairwise inter-student conflict detection over pre-scheduled sections"""

    def __init__(
        self,
        catalog: Iterable[ClassSection],
        students: Iterable[Student],
        tracker: Optional[ReferenceTracker] = None,
    ):
        self.sections_by_code: Dict[str, ClassSection] = {}
        for section in catalog:
            if section.section_code in self.sections_by_code:
                logger.warning(f"Duplicate section code {section.section_code} in catalog; keeping the first")
                continue
            self.sections_by_code[section.section_code] = section
        self.students: Dict[str, Student] = {s.id: s for s in students}
        self.tracker = tracker if tracker is not None else ReferenceTracker()
        # last resolved pre-schedule input; repeated calls must not re-record drops
        self._resolved: Optional[Tuple[Tuple[PreScheduleEntry, ...], Dict[str, List[ClassSection]]]] = None

    def student_schedules(self, pre_schedules: Iterable[PreScheduleEntry]) -> Dict[str, List[ClassSection]]:
        """Resolve pre-schedule entries into sections, keyed by student in first-seen order.

        Entries naming an unknown section or an unknown student are dropped
        and recorded on the tracker once per distinct input.
        """
        entries = tuple(pre_schedules)
        if self._resolved is None or self._resolved[0] != entries:
            self._resolved = (entries, self._resolve(entries))
        return {student_id: list(sections) for student_id, sections in self._resolved[1].items()}

    def _resolve(self, pre_schedules: Tuple[PreScheduleEntry, ...]) -> Dict[str, List[ClassSection]]:
        schedules: Dict[str, List[ClassSection]] = {}
        for entry in pre_schedules:
            if entry.student_id not in self.students:
                self.tracker.record_missing(ReferenceKind.STUDENT, entry.student_id, source="pre_schedule")
                continue
            section = self.sections_by_code.get(entry.section_code)
            if section is None:
                self.tracker.record_missing(ReferenceKind.SECTION, entry.section_code, owner=entry.student_id)
                continue
            schedules.setdefault(entry.student_id, []).append(section)
        return schedules

    def detect_all(self, pre_schedules: Iterable[PreScheduleEntry]) -> List[CohortConflict]:
        """Every inter-student conflict, each unordered student pair compared once.

        O(S^2 x C1 x C2) in students and sections per student; section pairs
        with no shared meeting day are skipped before placements are compared.
        """
        schedules = self.student_schedules(pre_schedules)
        found = self._pairwise(schedules)

        for item in found:
            cohort_conflicts_total.labels(kind=item.kind.value).inc()
        logger.info(f"Cohort detection: {len(schedules)} students, {len(found)} conflicts")
        return found

    def detect_student_conflicts(self, student_id: str, pre_schedules: Iterable[PreScheduleEntry]) -> List[CohortConflict]:
        schedules = self.student_schedules(pre_schedules)
        return [c for c in self._pairwise(schedules) if c.involves(student_id)]

    def _pairwise(self, schedules: Dict[str, List[ClassSection]]) -> List[CohortConflict]:
        student_ids = list(schedules)
        found: List[CohortConflict] = []
        for i, id_a in enumerate(student_ids):
            for id_b in student_ids[i + 1:]:
                student_a, student_b = self.students[id_a], self.students[id_b]
                for section_a in schedules[id_a]:
                    for section_b in schedules[id_b]:
                        for conflict in time_conflicts(section_a, section_b):
                            found.append(CohortConflict(student_a, student_b, conflict))
        return found

    def summarize(self, conflicts: Iterable[CohortConflict], top_n: int = COHORT_TOP_N) -> CohortSummary:
        return summarize(conflicts, top_n)


def analyze_cohort(
    catalog: Iterable[ClassSection],
    students: Iterable[Student],
    pre_schedules: Iterable[PreScheduleEntry],
    top_n: int = COHORT_TOP_N,
) -> CohortReport:
    """One-shot cohort report with the number of dropped pre-schedule references"""
    tracker = ReferenceTracker()
    detector = CohortConflictDetector(catalog, students, tracker)
    conflicts = detector.detect_all(pre_schedules)
    tracker.log_quality_summary()
    return CohortReport(
        conflicts=conflicts,
        summary=summarize(conflicts, top_n),
        dropped_references=tracker.dropped_count,
    )
