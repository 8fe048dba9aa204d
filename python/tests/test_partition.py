"""
Tests for the catalog partitioner
"""

import pytest

from python.schedule_engine.eligibility import BlockReason
from python.schedule_engine.models import ConflictKind, CourseStatus, TranscriptEntry
from python.schedule_engine.partition import InProgressPolicy, partition
from python.schedule_engine.transcript import transcript_for


def entry(course_code, grade, course_name="", student_id="s1"):
    return TranscriptEntry(student_id=student_id, course_code=course_code, course_name=course_name, grade=grade)


def ids(sections):
    return [s.id for s in sections]


def assert_total(result, catalog, placed):
    """No course code in two kinds of bucket; every unplaced section accounted for"""
    buckets = result.course_codes_by_bucket()
    offered = buckets["available"] | buckets["conflicting"]
    assert not offered & buckets["taken"]
    assert not offered & buckets["transcript_only"]
    assert not buckets["taken"] & buckets["transcript_only"]

    placed_ids = {p.id for p in placed}
    listed = set(ids(result.available)) | {c.section.id for c in result.conflicting}
    for section in catalog:
        if section.id in placed_ids:
            assert section.id not in listed
        else:
            assert section.id in listed or section.course_code in buckets["taken"]
    assert len(listed) == len(result.available) + len(result.conflicting)


class TestScenarios:

    def test_basic_conflict(self, sample_catalog, placed_factory):
        placed = placed_factory(sample_catalog[0])
        result = partition(sample_catalog, [], {}, placed)

        assert "BUS101-B1" not in ids(result.available)
        conflicting = next(c for c in result.conflicting if c.section.id == "BUS101-B1")
        assert conflicting.conflicts[0].kind == ConflictKind.LECTURE
        assert conflicting.conflicts[0].day == "Monday"
        assert_total(result, sample_catalog, placed)

    def test_prerequisite_block(self, sample_catalog):
        result = partition(sample_catalog, [], {}, [])
        assert result.reason_for("MAT200-C1") == BlockReason.PREREQUISITE_NOT_MET

    def test_prerequisite_satisfied(self, sample_catalog):
        result = partition(sample_catalog, [entry("MAT100", "B")], {}, [])
        assert "MAT200-C1" in ids(result.available)

    def test_availability_block(self, sample_catalog):
        availability = {"09:00-10:00": {"Monday": False}}
        result = partition(sample_catalog, [], availability, [])

        assert result.available == []
        assert result.reason_for("ENG101-A1") == BlockReason.OUTSIDE_AVAILABILITY

    def test_empty_availability_is_fully_open(self, sample_catalog):
        result = partition(sample_catalog, [], {}, [])
        assert ids(result.available) == [
            "ENG101-A1", "ENG101-A2", "BUS101-B1", "PSY101-D1", "HIS150-N1"
        ]

    def test_transcript_already_passed(self, sample_catalog):
        result = partition(sample_catalog, [entry("ENG101", "A", "English I")], {}, [])

        assert not any(s.course_code == "ENG101" for s in result.available)
        assert not any(c.section.course_code == "ENG101" for c in result.conflicting)
        assert [t.course_code for t in result.taken] == ["ENG101"]
        assert result.taken[0].status == CourseStatus.PASSED
        assert result.taken[0].grade == "A"
        assert_total(result, sample_catalog, [])


class TestDuplicateCourse:

    def test_second_section_of_placed_course_is_conflicting(self, sample_catalog, placed_factory):
        placed = placed_factory(sample_catalog[0])
        result = partition(sample_catalog, [], {}, placed)

        assert "ENG101-A2" not in ids(result.available)
        assert result.reason_for("ENG101-A2") == "same course already selected"

    def test_duplicate_reason_wins_over_time_conflict(self, section_factory, placed_factory):
        a = section_factory("A", "ENG101", ("Monday",), "09:00 - 10:00")
        b = section_factory("B", "ENG101", ("Monday",), "09:30 - 10:30")
        result = partition([a, b], [], {}, placed_factory(a))
        assert result.reason_for("ENG101-B") == "same course already selected"


class TestTakenAndTranscriptOnly:

    def test_transcript_only_lists_courses_missing_from_catalog(self, sample_catalog, sample_transcript):
        transcript = transcript_for("s1", sample_transcript)
        result = partition(sample_catalog, transcript, {}, [])

        assert [t.course_code for t in result.transcript_only] == ["WRI050"]
        assert result.transcript_only[0].course_name == "Writing Lab"
        assert result.transcript_only[0].grade == "CR"
        assert_total(result, sample_catalog, [])

    def test_failed_courses_are_neither_taken_nor_transcript_only(self, sample_catalog):
        result = partition(sample_catalog, [entry("BIO110", "F"), entry("ENG101", "D")], {}, [])
        buckets = result.course_codes_by_bucket()

        assert "BIO110" not in buckets["transcript_only"]
        assert "ENG101" not in buckets["taken"]
        assert "ENG101-A1" in ids(result.available)

    def test_representative_is_smallest_section_code(self, sample_catalog):
        reordered = list(reversed(sample_catalog))
        result = partition(reordered, [entry("ENG101", "A")], {}, [])

        assert len(result.taken) == 1
        assert result.taken[0].representative.section_code == "A1"

    def test_fully_placed_passed_course_stays_taken(self, section_factory, placed_factory):
        a1 = section_factory("A1", "ENG101")
        result = partition([a1], [entry("ENG101", "A")], {}, placed_factory(a1))

        assert result.available == []
        assert result.conflicting == []
        assert [t.course_code for t in result.taken] == ["ENG101"]
        assert result.taken[0].representative == a1
        assert result.transcript_only == []

    def test_fully_placed_in_progress_course_stays_taken(self, sample_catalog, placed_factory):
        d1 = next(s for s in sample_catalog if s.id == "PSY101-D1")
        result = partition(
            sample_catalog, [entry("PSY101", "IP")], {}, placed_factory(d1),
            in_progress_policy=InProgressPolicy.BLOCK_WHEN_PLACED,
        )

        assert [t.course_code for t in result.taken] == ["PSY101"]
        assert result.taken[0].status == CourseStatus.IN_PROGRESS
        assert result.taken[0].representative.section_code == "D1"

    def test_taken_sorted_by_course_code(self, sample_catalog):
        result = partition(sample_catalog, [entry("HIS150", "A"), entry("BUS101", "B")], {}, [])
        assert [t.course_code for t in result.taken] == ["BUS101", "HIS150"]

    def test_retake_after_failure_then_pass(self, sample_catalog):
        transcript = [entry("ENG101", "F"), entry("ENG101", "B+")]
        result = partition(sample_catalog, transcript, {}, [])
        assert result.taken[0].grade == "B+"


class TestInProgressPolicy:

    @pytest.fixture
    def catalog(self, sample_catalog, section_factory):
        return sample_catalog + [section_factory("D2", "PSY101", ("Tuesday",), "11:00 - 12:00")]

    def test_block_when_placed(self, catalog, placed_factory):
        transcript = [entry("PSY101", "IP")]

        open_result = partition(catalog, transcript, {}, [], in_progress_policy=InProgressPolicy.BLOCK_WHEN_PLACED)
        assert {"PSY101-D1", "PSY101-D2"} <= set(ids(open_result.available))

        d1 = next(s for s in catalog if s.id == "PSY101-D1")
        placed = placed_factory(d1)
        placed_result = partition(catalog, transcript, {}, placed, in_progress_policy=InProgressPolicy.BLOCK_WHEN_PLACED)
        assert [t.course_code for t in placed_result.taken] == ["PSY101"]
        assert placed_result.taken[0].status == CourseStatus.IN_PROGRESS
        assert placed_result.taken[0].representative.section_code == "D2"
        assert_total(placed_result, catalog, placed)

    def test_always_block(self, catalog):
        result = partition(catalog, [entry("PSY101", "IP")], {}, [], in_progress_policy=InProgressPolicy.ALWAYS_BLOCK)
        assert [t.course_code for t in result.taken] == ["PSY101"]
        assert result.taken[0].representative.section_code == "D1"

    def test_never_block(self, catalog, placed_factory):
        d1 = next(s for s in catalog if s.id == "PSY101-D1")
        result = partition(
            catalog, [entry("PSY101", "IP")], {}, placed_factory(d1),
            in_progress_policy=InProgressPolicy.NEVER_BLOCK,
        )
        assert result.taken == []
        assert result.reason_for("PSY101-D2") == "same course already selected"

    def test_in_progress_transcript_only_course(self, sample_catalog):
        transcript = [entry("ART900", "IP", "Studio")]

        default = partition(sample_catalog, transcript, {}, [], in_progress_policy=InProgressPolicy.BLOCK_WHEN_PLACED)
        assert default.transcript_only == []

        always = partition(sample_catalog, transcript, {}, [], in_progress_policy=InProgressPolicy.ALWAYS_BLOCK)
        assert [t.course_code for t in always.transcript_only] == ["ART900"]
        assert always.transcript_only[0].status == CourseStatus.IN_PROGRESS


class TestPartitionProperties:

    def test_placed_sections_are_excluded(self, sample_catalog, placed_factory):
        placed = placed_factory(sample_catalog[0], sample_catalog[4])
        result = partition(sample_catalog, [], {}, placed)
        listed = set(ids(result.available)) | {c.section.id for c in result.conflicting}
        assert not listed & {"ENG101-A1", "PSY101-D1"}

    def test_idempotent(self, sample_catalog, sample_transcript, placed_factory):
        transcript = transcript_for("s1", sample_transcript)
        availability = {"morning-09:00-10:00": {"Monday": True, "Tuesday": True}}
        placed = placed_factory(sample_catalog[2])

        first = partition(sample_catalog, transcript, availability, placed)
        second = partition(sample_catalog, transcript, availability, placed)
        assert first == second

    def test_inputs_untouched(self, sample_catalog, placed_factory):
        availability = {"09:00-10:00": {"Monday": True}}
        placed = placed_factory(sample_catalog[0])
        catalog_before = list(sample_catalog)

        partition(sample_catalog, [], availability, placed)

        assert sample_catalog == catalog_before
        assert availability == {"09:00-10:00": {"Monday": True}}
        assert len(placed) == 1

    def test_available_follows_catalog_order(self, sample_catalog):
        reordered = list(reversed(sample_catalog))
        result = partition(reordered, [], {}, [])
        assert ids(result.available) == [
            "HIS150-N1", "PSY101-D1", "BUS101-B1", "ENG101-A2", "ENG101-A1"
        ]

    def test_partial_availability(self, sample_catalog):
        availability = {
            "morning-09:00-10:00": {"Monday": True, "Tuesday": True, "Wednesday": False, "Thursday": True},
        }
        result = partition(sample_catalog, [], availability, [])

        assert ids(result.available) == ["ENG101-A2"]
        assert result.reason_for("ENG101-A1") == BlockReason.OUTSIDE_AVAILABILITY

    def test_passing_grades_override(self, sample_catalog):
        result = partition(
            sample_catalog, [entry("MAT100", "D")], {}, [],
            passing_grades=["A", "B", "C", "D"],
        )
        assert "MAT200-C1" in ids(result.available)

    def test_empty_catalog(self):
        result = partition([], [entry("ENG101", "A")], {}, [])
        assert result.available == []
        assert result.conflicting == []
        assert result.taken == []
        assert [t.course_code for t in result.transcript_only] == ["ENG101"]
