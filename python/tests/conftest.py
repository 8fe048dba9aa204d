"""
Pytest configuration and fixtures for schedule engine tests
"""

import pytest

from python.schedule_engine.models import (
    ClassSection, PreScheduleEntry, SelectedClass, Student, TranscriptEntry
)


def make_section(
    section_code,
    course_code,
    days=("Monday",),
    time="09:00 - 10:00",
    ds_day=None,
    ds_time=None,
    prereq=None,
    name=None,
):
    return ClassSection(
        section_code=section_code,
        course_code=course_code,
        course_name=name or f"{course_code} course",
        lecture_days=tuple(days),
        lecture_time=time,
        discussion_day=ds_day,
        discussion_time=ds_time,
        prerequisite_course_code=prereq,
    )


@pytest.fixture
def section_factory():
    """Build ClassSection values with sensible defaults"""
    return make_section


@pytest.fixture
def placed_factory():
    def _placed(*sections):
        return [SelectedClass.of(s) for s in sections]
    return _placed


@pytest.fixture
def sample_catalog():
    """Small catalog covering lectures, discussions, prerequisites and a late slot"""
    return [
        make_section("A1", "ENG101", ("Monday", "Wednesday"), "09:00 - 10:00"),
        make_section("A2", "ENG101", ("Tuesday", "Thursday"), "09:00 - 10:00"),
        make_section("B1", "BUS101", ("Monday",), "09:30 - 10:30"),
        make_section("C1", "MAT200", ("Tuesday",), "18:00 - 19:30", prereq="MAT100"),
        make_section("D1", "PSY101", ("Wednesday",), "11:00 - 12:00",
                     ds_day="Thursday", ds_time="18:00 - 19:00"),
        make_section("N1", "HIS150", ("Thursday",), "23:00 - 24:00"),
    ]


@pytest.fixture
def sample_students():
    return [
        Student(id="s1", name="Ada Park", email="ada@example.edu"),
        Student(id="s2", name="Ben Ruiz", email="ben@example.edu"),
        Student(id="s3", name="Cy Osei", email="cy@example.edu"),
    ]


@pytest.fixture
def sample_transcript():
    return [
        TranscriptEntry(student_id="s1", course_code="ENG101", course_name="English I", grade="A", term="FA24"),
        TranscriptEntry(student_id="s1", course_code="WRI050", course_name="Writing Lab", grade="CR", term="FA24"),
        TranscriptEntry(student_id="s1", course_code="PSY101", course_name="Psychology", grade="IP", term="SP25"),
        TranscriptEntry(student_id="s1", course_code="BIO110", course_name="Biology", grade="F", term="SP25"),
        TranscriptEntry(student_id="s2", course_code="MAT100", course_name="Algebra", grade="B", term="FA24"),
    ]


@pytest.fixture
def pre_schedule_entries():
    return [
        PreScheduleEntry(student_id="s1", section_code="A1"),
        PreScheduleEntry(student_id="s2", section_code="B1"),
        PreScheduleEntry(student_id="s3", section_code="A2"),
    ]
