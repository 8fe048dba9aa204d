from pydantic import BaseModel, ConfigDict, Field, ValidationError
from typing import Iterable, List, Optional, Tuple
import logging

from python.schedule_engine.models import ClassSection, PreScheduleEntry, Student, TranscriptEntry
from python.data_ingestion.validation import (
    MissingReference, ReferenceKind, ReferenceTracker, ValidationSeverity
)

logger = logging.getLogger(__name__)

# validates the structure of the schedule feeds
# Raw models stay loose (extra fields allowed) and keep the feed's own keys.
class RawClassEntry(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    section_code: str = Field(alias="Section Code")
    course_code: str = Field(alias="Course Code")
    course_name: str = Field(default="", alias="Course Name")
    time_slot: Optional[str] = Field(default=None, alias="Time Slot")
    lecture_day_1: str = Field(alias="Lecture Day 1")
    lecture_day_2: Optional[str] = Field(default=None, alias="Lecture Day 2")
    lecture_time: str = Field(alias="Lecture Time")
    ds_day: Optional[str] = Field(default=None, alias="DS Day")
    ds_time: Optional[str] = Field(default=None, alias="DS Time")
    prerequisite: Optional[str] = Field(default=None, alias="Prerequisite")

class RawTranscriptEntry(BaseModel):
    model_config = ConfigDict(extra="allow")

    student_id: str
    course_code: str
    course_name: str = ""
    grade: str = ""
    term: str = ""
    student_name: Optional[str] = None
    email: Optional[str] = None

class RawStudentEntry(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    person_id: Optional[str] = None
    user_id: Optional[str] = None
    student_name: Optional[str] = None
    email: Optional[str] = None
    coach_name: Optional[str] = None
    term_status_classification: Optional[str] = None
    rn: Optional[str] = None

class RawPreScheduleEntry(BaseModel):
    model_config = ConfigDict(extra="allow")

    student_id: str
    section_code: str


def section_from_raw(raw: RawClassEntry) -> ClassSection:
    """
    Transform a feed class entry into a ClassSection.

    Raises:
        ValidationError: times do not parse, discussion day/time unpaired,
            or lecture days invalid
    """
    lecture_days: Tuple[str, ...] = tuple(
        d.strip() for d in (raw.lecture_day_1, raw.lecture_day_2) if d and d.strip()
    )
    return ClassSection(
        section_code=raw.section_code,
        course_code=raw.course_code,
        course_name=raw.course_name.strip(),
        lecture_days=lecture_days,
        lecture_time=raw.lecture_time,
        discussion_day=raw.ds_day,
        discussion_time=raw.ds_time,
        prerequisite_course_code=raw.prerequisite,
        time_slot=raw.time_slot,
    )

def normalize_catalog(records: Iterable[dict]) -> List[ClassSection]:
    """Validate every class record; the first malformed one fails the whole catalog."""
    catalog = []
    for i, record in enumerate(records):
        try:
            catalog.append(section_from_raw(RawClassEntry.model_validate(record)))
        except ValidationError as e:
            code = record.get("Section Code", f"#{i}") if isinstance(record, dict) else f"#{i}"
            logger.error(f"Class record {code} failed validation: {e.error_count()} error(s)")
            raise
    logger.info(f"Normalized {len(catalog)} class sections")
    return catalog

def normalize_transcripts(records: Iterable[dict]) -> List[TranscriptEntry]:
    entries = []
    for record in records:
        raw = RawTranscriptEntry.model_validate(record)
        entries.append(TranscriptEntry(
            student_id=raw.student_id,
            course_code=raw.course_code,
            course_name=raw.course_name.strip(),
            grade=raw.grade.strip(),
            term=raw.term.strip(),
            student_name=raw.student_name,
            email=raw.email,
        ))
    return entries

def normalize_students(
    records: Iterable[dict],
    tracker: Optional[ReferenceTracker] = None,
) -> List[Student]:
    """
    Roster records with a usable id, name and email, sorted by name.

    Incomplete records are skipped (recorded as INFO on the tracker).
    """
    students = []
    for record in records:
        raw = RawStudentEntry.model_validate(record)
        user_id = (raw.user_id or "").strip()
        name = (raw.student_name or "").strip()
        email = (raw.email or "").strip()
        if not (user_id and name and email):
            if tracker is not None:
                tracker.record(MissingReference(
                    kind=ReferenceKind.STUDENT,
                    reference=user_id or raw.person_id or "<blank>",
                    source="roster",
                    severity=ValidationSeverity.INFO,
                ))
            continue
        students.append(Student(
            id=user_id,
            name=name,
            email=email,
            coach_name=raw.coach_name,
            term_status=raw.term_status_classification,
            term_number=raw.rn,
        ))
    return sorted(students, key=lambda s: s.name)

def normalize_pre_schedules(records: Iterable[dict]) -> List[PreScheduleEntry]:
    return [
        PreScheduleEntry(student_id=raw.student_id, section_code=raw.section_code)
        for raw in (RawPreScheduleEntry.model_validate(r) for r in records)
    ]
