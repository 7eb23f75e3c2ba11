"""Tests for ConflictDetector class."""

import pytest

from timetable_engine.models import Day, Faculty, Priority, ScheduledSlot, Severity, TimeSlot
from timetable_engine.preferences.conflicts import ConflictDetector
from timetable_engine.preferences.models import (
    ConflictKind,
    ExpertiseLevel,
    FacultyPreferences,
    RoomPreference,
    SubjectPreference,
    TimePreference,
)


@pytest.fixture
def detector(rooms, courses, faculty):
    return ConflictDetector(rooms, courses, faculty)


def window(day, start, end, hard=False):
    return TimePreference(day=day, start_time=start, end_time=end, is_hard_constraint=hard)


class TestTimeConflicts:
    """Tests for time preference conflicts."""

    def test_clean_preferences(self, detector):
        """Test preferences without conflicts."""
        prefs = FacultyPreferences(
            faculty_id="F1",
            time_preferences=[window("Mon", "09:00", "10:00"), window("Mon", "10:00", "11:00")],
        )
        result = detector.detect_conflicts("F1", prefs)

        assert not result.has_conflicts
        assert result.suggestions == []

    def test_soft_overlap(self, detector):
        """Test overlapping soft preferences."""
        prefs = FacultyPreferences(
            faculty_id="F1",
            time_preferences=[window("Mon", "09:00", "11:00"), window("Mon", "10:00", "12:00")],
        )
        result = detector.detect_conflicts("F1", prefs)

        assert len(result.time_conflicts) == 1
        conflict = result.time_conflicts[0]
        assert conflict.type == "overlap"
        assert conflict.kind == ConflictKind.TIME
        assert conflict.severity == Severity.MEDIUM
        assert conflict.affected_entities == ["Preference 1", "Preference 2"]
        assert result.constraint_violations == []

    def test_hard_overlap(self, detector):
        """Test overlapping hard constraints."""
        prefs = FacultyPreferences(
            faculty_id="F1",
            time_preferences=[
                window("Mon", "09:00", "11:00", hard=True),
                window("Mon", "10:00", "12:00", hard=True),
            ],
        )
        result = detector.detect_conflicts("F1", prefs)

        assert [c.severity for c in result.time_conflicts] == [Severity.HIGH]
        assert [c.type for c in result.constraint_violations] == ["hard_constraint"]
        assert [s.type for s in result.suggestions] == ["alternative_time", "preference_adjustment"]

    def test_one_hard_side(self, detector):
        """Test that one hard side makes the overlap severe."""
        prefs = FacultyPreferences(
            faculty_id="F1",
            time_preferences=[window("Mon", "09:00", "11:00"), window("Mon", "10:00", "12:00", hard=True)],
        )
        result = detector.detect_conflicts("F1", prefs)

        assert result.time_conflicts[0].severity == Severity.HIGH
        assert result.constraint_violations == []

    def test_different_days(self, detector):
        """Test that windows on different days never overlap."""
        prefs = FacultyPreferences(
            faculty_id="F1",
            time_preferences=[window("Mon", "09:00", "11:00"), window("Tue", "09:00", "11:00")],
        )
        assert detector.detect_conflicts("F1", prefs).time_conflicts == []

    def test_commitments(self, detector):
        """Test clashes with the faculty member's own scheduled slots only."""
        prefs = FacultyPreferences(faculty_id="F1", time_preferences=[window("Mon", "09:00", "11:00")])
        commitments = [
            ScheduledSlot(
                course_id="C1",
                room_id="R1",
                faculty_id="F1",
                time_slot=TimeSlot(day=Day.MONDAY, start_time="10:00", end_time="11:00"),
            ),
            ScheduledSlot(
                course_id="C2",
                room_id="R2",
                faculty_id="F2",
                time_slot=TimeSlot(day=Day.MONDAY, start_time="09:00", end_time="10:00"),
            ),
        ]
        result = detector.detect_conflicts("F1", prefs, commitments)

        assert [c.type for c in result.time_conflicts] == ["unavailable"]
        assert "C1" in result.time_conflicts[0].description

    def test_overcommitment(self, rooms, courses):
        """Test preferred hours above the weekly maximum."""
        detector = ConflictDetector(
            rooms, courses, [Faculty(id="F1", name="Ada Lovelace", department="CS", max_hours_per_week=2)]
        )
        prefs = FacultyPreferences(
            faculty_id="F1",
            time_preferences=[window("Mon", "09:00", "11:00"), window("Tue", "09:00", "11:00")],
        )
        result = detector.detect_conflicts("F1", prefs)

        assert [(c.type, c.severity) for c in result.time_conflicts] == [("overcommitment", Severity.HIGH)]
        assert [(c.type, c.severity) for c in result.constraint_violations] == [
            ("business_rule", Severity.MEDIUM)
        ]

    def test_unknown_faculty_has_no_limit(self, detector):
        """Test that workload checks need a known faculty member."""
        prefs = FacultyPreferences(
            faculty_id="F9",
            time_preferences=[window(day, "08:00", "17:00") for day in ("Mon", "Tue", "Wed", "Thu")],
        )
        assert not detector.detect_conflicts("F9", prefs).has_conflicts


class TestResourceConflicts:
    """Tests for room preference conflicts."""

    def test_unknown_room(self, detector):
        """Test a preferred room that does not exist."""
        prefs = FacultyPreferences(faculty_id="F1", room_preferences=[RoomPreference(room_id="R99")])
        result = detector.detect_conflicts("F1", prefs)

        assert [(c.type, c.severity) for c in result.resource_conflicts] == [
            ("room_unavailable", Severity.HIGH)
        ]

    def test_missing_facility(self, detector):
        """Test facilities no single room offers."""
        prefs = FacultyPreferences(
            faculty_id="F1", room_preferences=[RoomPreference(facilities=["projector", "hologram"])]
        )
        result = detector.detect_conflicts("F1", prefs)

        assert [(c.type, c.severity) for c in result.resource_conflicts] == [
            ("facility_missing", Severity.MEDIUM)
        ]
        assert [s.type for s in result.suggestions] == ["alternative_room"]

    def test_available_facilities(self, detector):
        """Test facilities that one room offers together."""
        prefs = FacultyPreferences(
            faculty_id="F1", room_preferences=[RoomPreference(facilities=["computers", "software"])]
        )
        assert detector.detect_conflicts("F1", prefs).resource_conflicts == []

    def test_missing_room_type(self, detector):
        """Test a room type absent from the inventory."""
        prefs = FacultyPreferences(faculty_id="F1", room_preferences=[RoomPreference(room_type="tutorial")])
        result = detector.detect_conflicts("F1", prefs)

        assert [(c.type, c.severity) for c in result.resource_conflicts] == [
            ("room_unavailable", Severity.MEDIUM)
        ]


class TestConstraintViolations:
    """Tests for subject constraint violations."""

    def test_unknown_course(self, detector):
        """Test a subject preference for a course not in the catalog."""
        prefs = FacultyPreferences(faculty_id="F1", subject_preferences=[SubjectPreference(course_code="BIO999")])
        result = detector.detect_conflicts("F1", prefs)

        assert [(c.type, c.severity) for c in result.constraint_violations] == [
            ("business_rule", Severity.HIGH)
        ]
        assert result.constraint_violations[0].recommended_action is not None

    def test_basic_expertise_high_priority(self, detector):
        """Test the low-severity expertise and priority mismatch."""
        prefs = FacultyPreferences(
            faculty_id="F1",
            subject_preferences=[
                SubjectPreference(
                    course_code="CS101", expertise_level=ExpertiseLevel.BASIC, priority=Priority.HIGH
                )
            ],
        )
        result = detector.detect_conflicts("F1", prefs)

        assert [(c.type, c.severity) for c in result.constraint_violations] == [
            ("soft_constraint", Severity.LOW)
        ]

    def test_to_dict(self, detector):
        """Test serialized detection result."""
        prefs = FacultyPreferences(faculty_id="F1", subject_preferences=[SubjectPreference(course_code="BIO999")])
        data = detector.detect_conflicts("F1", prefs).to_dict()

        assert data["has_conflicts"] is True
        assert data["constraint_violations"][0]["kind"] == "constraint"
        assert data["constraint_violations"][0]["severity"] == "high"
