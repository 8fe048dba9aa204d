"""
Pydantic models for the schedule engine.

Records are frozen once validated: the engine only ever reads them, and
frozen models hash, which lets callers memoize on them.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, Tuple
from enum import Enum

from .time_intervals import TimeInterval, parse_range


class MeetingKind(str, Enum):
    """Which component of a section a placement comes from"""
    LECTURE = "lecture"
    DISCUSSION = "discussion"


class ConflictKind(str, Enum):
    LECTURE = "lecture"                          # lecture vs lecture
    DISCUSSION = "discussion"                    # discussion vs discussion
    LECTURE_DISCUSSION = "lecture-discussion"    # lecture vs discussion, either side
    DUPLICATE_COURSE = "duplicate-course"        # same course code, time irrelevant


class CourseStatus(str, Enum):
    PASSED = "Passed"
    IN_PROGRESS = "In Progress"
    FAILED = "Failed"


class ClassSection(BaseModel):
    """One offered section of a course with its lecture and optional discussion"""
    model_config = ConfigDict(frozen=True)

    section_code: str = Field(..., min_length=1)
    course_code: str = Field(..., min_length=1)
    course_name: str = ""
    lecture_days: Tuple[str, ...] = Field(..., description="e.g. ('Monday', 'Wednesday')")
    lecture_time: str = Field(..., description="e.g. '09:00 - 10:30'")
    discussion_day: Optional[str] = None
    discussion_time: Optional[str] = None
    prerequisite_course_code: Optional[str] = None
    time_slot: Optional[str] = Field(default=None, description="Band label from the feed, e.g. 'Morning (AM ET)'")

    @field_validator("section_code", "course_code")
    @classmethod
    def _strip_codes(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("code must not be blank")
        return v

    @field_validator("lecture_days")
    @classmethod
    def _valid_lecture_days(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        days = tuple(d.strip() for d in v if d and d.strip())
        if not 1 <= len(days) <= 2:
            raise ValueError(f"A section meets for lecture on 1 or 2 days, got {len(days)}")
        if len(set(days)) != len(days):
            raise ValueError(f"Lecture days must be distinct: {days}")
        return days

    @field_validator("lecture_time")
    @classmethod
    def _valid_lecture_time(cls, v: str) -> str:
        parse_range(v)  # MalformedRangeError is a ValueError -> ValidationError
        return v.strip()

    @field_validator("discussion_day", "discussion_time", "prerequisite_course_code", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    @model_validator(mode="after")
    def _discussion_pairing(self) -> "ClassSection":
        if (self.discussion_day is None) != (self.discussion_time is None):
            raise ValueError(
                f"Section {self.section_code}: discussion day and time must be set together"
            )
        if self.discussion_time is not None:
            parse_range(self.discussion_time)
        return self

    @property
    def id(self) -> str:
        return f"{self.course_code}-{self.section_code}"

    @property
    def lecture_interval(self) -> TimeInterval:
        return parse_range(self.lecture_time)

    @property
    def discussion_interval(self) -> Optional[TimeInterval]:
        if self.discussion_time is None:
            return None
        return parse_range(self.discussion_time)

    @property
    def has_discussion(self) -> bool:
        return self.discussion_day is not None

    @property
    def meeting_days(self) -> frozenset:
        days = set(self.lecture_days)
        if self.discussion_day:
            days.add(self.discussion_day)
        return frozenset(days)


class TranscriptEntry(BaseModel):
    """One graded (or in-progress) course on a student's transcript"""
    model_config = ConfigDict(frozen=True)

    student_id: str
    course_code: str
    course_name: str = ""
    grade: str = ""
    term: str = ""
    student_name: Optional[str] = None
    email: Optional[str] = None

    @field_validator("student_id", "course_code")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()


class Student(BaseModel):
    """Student identity; the engine only relies on `id`"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    email: str
    coach_name: Optional[str] = None
    term_status: Optional[str] = None
    term_number: Optional[str] = None


class SelectedClass(BaseModel):
    """A section the user picked or that was pre-scheduled; unique by `id`"""
    model_config = ConfigDict(frozen=True)

    id: str
    section: ClassSection

    @classmethod
    def of(cls, section: ClassSection) -> "SelectedClass":
        return cls(id=section.id, section=section)


class PreScheduleEntry(BaseModel):
    """Externally committed placement of a student into a section"""
    model_config = ConfigDict(frozen=True)

    student_id: str
    section_code: str

    @field_validator("student_id", "section_code")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()
