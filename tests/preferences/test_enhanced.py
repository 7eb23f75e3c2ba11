"""Tests for PreferenceAwareAllocator class."""

import pytest

from timetable_engine.allocation.engine import AllocationEngine
from timetable_engine.allocation.faculty import FacultyAssigner
from timetable_engine.models import Day, Faculty, Priority, Room, RoomType, ScheduledSlot, Severity, TimeSlot
from timetable_engine.preferences.conflicts import ConflictDetector
from timetable_engine.preferences.enhanced import PreferenceAwareAllocator
from timetable_engine.preferences.models import FacultyPreferences, RoomPreference


@pytest.fixture
def auditorium():
    return Room(
        id="R1",
        code="A-001",
        name="Auditorium",
        building="A",
        capacity=300,
        type=RoomType.LECTURE,
        facilities=["projector"],
    )


@pytest.fixture
def candidate_rooms(auditorium, classroom):
    return [auditorium, classroom]


@pytest.fixture
def engine(candidate_rooms):
    return AllocationEngine(candidate_rooms, total_slots=40)


@pytest.fixture
def prefers_auditorium():
    return {
        "F1": FacultyPreferences(
            faculty_id="F1",
            room_preferences=[RoomPreference(room_id="R1", priority=Priority.HIGH, weight=100)],
        )
    }


class TestAllocateWithPreferences:
    """Tests for preference-aware allocation of one hour."""

    def test_suitability_outweighs_preference(
        self, engine, prefers_auditorium, calculus, candidate_rooms, faculty, monday_nine
    ):
        """Test that a much better fitting room beats the preferred one."""
        allocator = PreferenceAwareAllocator(engine, prefers_auditorium)
        result = allocator.allocate_with_preferences(calculus, monday_nine, candidate_rooms, faculty[:1])

        assert result.room.id == "R2"
        assert result.faculty.id == "F1"
        assert result.preference_score.overall_score == 35
        assert result.combined_score == pytest.approx(66.84, abs=0.01)

    def test_alternatives(self, engine, prefers_auditorium, calculus, candidate_rooms, faculty, monday_nine):
        """Test the suggested room swap."""
        allocator = PreferenceAwareAllocator(engine, prefers_auditorium)
        result = allocator.allocate_with_preferences(calculus, monday_nine, candidate_rooms, faculty[:1])

        assert len(result.alternatives) == 1
        alternative = result.alternatives[0]
        assert alternative.type == "room"
        assert alternative.room_id == "R1"
        assert alternative.improvement_score == 30
        assert alternative.impact == Severity.MEDIUM

    def test_satisfaction(self, engine, prefers_auditorium, calculus, candidate_rooms, faculty, monday_nine):
        """Test satisfaction metrics of the chosen faculty member."""
        allocator = PreferenceAwareAllocator(engine, prefers_auditorium)
        result = allocator.allocate_with_preferences(calculus, monday_nine, candidate_rooms, faculty[:1])

        assert result.satisfaction.overall_satisfaction == 35
        assert result.satisfaction.preference_utilization == 0
        assert result.satisfaction.improvement_potential == 65
        assert result.satisfaction.conflict_count == 0

    def test_commits_through_engine(
        self, engine, prefers_auditorium, calculus, candidate_rooms, faculty, monday_nine
    ):
        """Test that the chosen room is occupied and recorded."""
        allocator = PreferenceAwareAllocator(engine, prefers_auditorium)
        result = allocator.allocate_with_preferences(calculus, monday_nine, candidate_rooms, faculty[:1])

        assert not engine.is_slot_available("R2", monday_nine)
        assert result.allocation.selected_room.id == "R2"
        assert result.allocation.faculty_id == "F1"
        assert result.to_dict()["room_id"] == "R2"

    def test_taken_rooms_are_skipped(
        self, engine, prefers_auditorium, calculus, candidate_rooms, faculty, monday_nine
    ):
        """Test that a second hour at the same slot uses the remaining room and faculty."""
        allocator = PreferenceAwareAllocator(engine, prefers_auditorium)
        first = allocator.allocate_with_preferences(calculus, monday_nine, candidate_rooms, faculty)
        second = allocator.allocate_with_preferences(calculus, monday_nine, candidate_rooms, faculty)

        assert {first.room.id, second.room.id} == {"R1", "R2"}
        assert {first.faculty.id, second.faculty.id} == {"F1", "F2"}
        assert second.alternatives == []
        assert allocator.allocate_with_preferences(calculus, monday_nine, candidate_rooms, faculty) is None

    def test_busy_faculty_not_double_booked(
        self, engine, prefers_auditorium, calculus, candidate_rooms, faculty, monday_nine
    ):
        """Test that one faculty member never teaches two rooms at once."""
        allocator = PreferenceAwareAllocator(engine, prefers_auditorium)
        first = allocator.allocate_with_preferences(calculus, monday_nine, candidate_rooms, faculty[:1])
        second = allocator.allocate_with_preferences(calculus, monday_nine, candidate_rooms, faculty[:1])

        assert first.faculty.id == "F1"
        assert second is None
        assert engine.is_slot_available("R1", monday_nine)
        assert allocator.faculty_assigner.get_workload("F1") == 1

    def test_faculty_at_capacity(self, engine, calculus, candidate_rooms, monday_nine):
        """Test that a faculty member at their weekly maximum is skipped."""
        member = Faculty(id="F3", name="Emmy Noether", department="Mathematics", max_hours_per_week=1)
        tuesday = TimeSlot(day=Day.TUESDAY, start_time="09:00", end_time="10:00")
        allocator = PreferenceAwareAllocator(engine, {})

        assert allocator.allocate_with_preferences(calculus, monday_nine, candidate_rooms, [member]) is not None
        assert allocator.allocate_with_preferences(calculus, tuesday, candidate_rooms, [member]) is None
        assert engine.is_slot_available("R2", tuesday)

    def test_shared_faculty_assigner(self, engine, calculus, candidate_rooms, faculty, monday_nine):
        """Test that bookings made elsewhere in the run are respected."""
        assigner = FacultyAssigner(faculty)
        assigner.record_assignment(faculty[0], monday_nine, "C1")
        allocator = PreferenceAwareAllocator(engine, {}, faculty_assigner=assigner)

        result = allocator.allocate_with_preferences(calculus, monday_nine, candidate_rooms, faculty)
        assert result.faculty.id == "F2"
        assert assigner.get_workload("F2") == 1

    def test_no_faculty(self, engine, calculus, candidate_rooms, monday_nine):
        """Test that nothing is allocated without faculty."""
        allocator = PreferenceAwareAllocator(engine, {})
        assert allocator.allocate_with_preferences(calculus, monday_nine, candidate_rooms, []) is None
        assert engine.is_slot_available("R2", monday_nine)

    def test_conflict_count(self, engine, calculus, candidate_rooms, courses, faculty, monday_nine):
        """Test that detected preference conflicts are counted."""
        prefs = {"F1": FacultyPreferences(faculty_id="F1", room_preferences=[RoomPreference(room_id="R99")])}
        detector = ConflictDetector(candidate_rooms, courses, faculty)
        allocator = PreferenceAwareAllocator(engine, prefs, detector=detector)
        result = allocator.allocate_with_preferences(calculus, monday_nine, candidate_rooms, faculty[:1])

        assert result.satisfaction.conflict_count == 1


class TestScoreSchedule:
    """Tests for scoring a finished schedule."""

    def test_average_per_faculty(self, engine, prefers_auditorium, calculus, candidate_rooms):
        """Test averages over slots of faculty with preferences."""
        tuesday = TimeSlot(day=Day.TUESDAY, start_time="09:00", end_time="10:00")
        slots = [
            ScheduledSlot(course_id="C2", room_id="R1", faculty_id="F1", time_slot=tuesday),
            ScheduledSlot(course_id="C2", room_id="R2", faculty_id="F1", time_slot=tuesday),
            ScheduledSlot(course_id="C2", room_id="R2", faculty_id="F2", time_slot=tuesday),
            ScheduledSlot(course_id="C2", room_id="R2", faculty_id=None, time_slot=tuesday),
        ]
        allocator = PreferenceAwareAllocator(engine, prefers_auditorium)

        assert allocator.score_schedule(slots, [calculus], candidate_rooms) == {"F1": 50}
