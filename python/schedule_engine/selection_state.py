"""
Caller-side selection state for one student's scheduling session.

The engine keeps no state of its own. This immutable holder is the state store
a presentation layer would otherwise keep: every change returns a new
ScheduleSelection, and partition() re-derives the class lists from it.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from python.data_ingestion.validation import ReferenceKind, ReferenceTracker

from .availability import Availability
from .models import ClassSection, PreScheduleEntry, SelectedClass, Student, TranscriptEntry
from .partition import InProgressPolicy, PartitionResult, partition
from .transcript import transcript_for

logger = logging.getLogger(__name__)


def resolve_pre_schedule(
    student_id: str,
    catalog: Iterable[ClassSection],
    pre_schedules: Iterable[PreScheduleEntry],
    tracker: Optional[ReferenceTracker] = None,
) -> List[SelectedClass]:
    """A student's pre-scheduled sections as SelectedClass values.

    Entries naming a section absent from the catalog are dropped and recorded.
    """
    by_code: Dict[str, ClassSection] = {}
    for section in catalog:
        by_code.setdefault(section.section_code, section)

    resolved: List[SelectedClass] = []
    seen = set()
    for entry in pre_schedules:
        if entry.student_id != student_id:
            continue
        section = by_code.get(entry.section_code)
        if section is None:
            if tracker is not None:
                tracker.record_missing(ReferenceKind.SECTION, entry.section_code, owner=student_id)
            else:
                logger.warning(f"Pre-schedule for {student_id} names unknown section {entry.section_code}; dropped")
            continue
        if section.id in seen:
            continue
        seen.add(section.id)
        resolved.append(SelectedClass.of(section))
    return resolved


@dataclass(frozen=True)
class ScheduleSelection:
    student: Optional[Student] = None
    selected: Tuple[SelectedClass, ...] = ()
    scheduled: Tuple[SelectedClass, ...] = ()
    availability: Mapping[str, Mapping[str, bool]] = field(default_factory=dict)

    @classmethod
    def for_student(
        cls,
        student: Optional[Student],
        catalog: Iterable[ClassSection],
        pre_schedules: Iterable[PreScheduleEntry],
        tracker: Optional[ReferenceTracker] = None,
    ) -> "ScheduleSelection":
        """Fresh session: selections and availability cleared, pre-schedule loaded"""
        if student is None:
            return cls()
        scheduled = resolve_pre_schedule(student.id, catalog, pre_schedules, tracker)
        return cls(student=student, scheduled=tuple(scheduled))

    @property
    def placed(self) -> List[SelectedClass]:
        """Scheduled then manually selected classes, unique by id"""
        out: List[SelectedClass] = []
        seen = set()
        for item in self.scheduled + self.selected:
            if item.id not in seen:
                seen.add(item.id)
                out.append(item)
        return out

    def is_placed(self, class_id: str) -> bool:
        return any(p.id == class_id for p in self.placed)

    def select(self, section: ClassSection) -> "ScheduleSelection":
        if self.is_placed(section.id):
            return self
        return replace(self, selected=self.selected + (SelectedClass.of(section),))

    def unselect(self, class_id: str) -> "ScheduleSelection":
        return replace(self, selected=tuple(s for s in self.selected if s.id != class_id))

    def remove_scheduled(self, class_id: str) -> "ScheduleSelection":
        return replace(self, scheduled=tuple(s for s in self.scheduled if s.id != class_id))

    def remove_all_scheduled(self) -> "ScheduleSelection":
        return replace(self, scheduled=())

    def with_availability(self, availability: Availability) -> "ScheduleSelection":
        return replace(self, availability={k: dict(v) for k, v in availability.items()})

    def reset(
        self,
        catalog: Iterable[ClassSection],
        pre_schedules: Iterable[PreScheduleEntry],
        tracker: Optional[ReferenceTracker] = None,
    ) -> "ScheduleSelection":
        """Drop manual selections and reload the pre-schedule; availability is kept"""
        if self.student is None:
            return replace(self, selected=(), scheduled=())
        scheduled = resolve_pre_schedule(self.student.id, catalog, pre_schedules, tracker)
        return replace(self, selected=(), scheduled=tuple(scheduled))

    def partition(
        self,
        catalog: Iterable[ClassSection],
        transcript: Iterable[TranscriptEntry],
        in_progress_policy: Optional[InProgressPolicy] = None,
        passing_grades: Optional[Sequence[str]] = None,
    ) -> PartitionResult:
        """Partition the catalog for this student; `transcript` may hold every student's entries"""
        if self.student is None:
            return PartitionResult()
        return partition(
            catalog,
            transcript_for(self.student.id, transcript),
            self.availability,
            self.placed,
            in_progress_policy=in_progress_policy,
            passing_grades=passing_grades,
        )
