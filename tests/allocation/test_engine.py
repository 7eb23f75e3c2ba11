"""Tests for AllocationEngine class."""

import pytest

from timetable_engine.allocation.config import AllocationConfig, AllocationPreferences
from timetable_engine.allocation.engine import AllocationEngine
from timetable_engine.allocation.models import AllocationConflictType
from timetable_engine.allocation.requirements import RequirementDeriver
from timetable_engine.models import Course, Day, Room, RoomType, Severity, TimeSlot


@pytest.fixture
def deriver():
    return RequirementDeriver()


@pytest.fixture
def engine(rooms):
    return AllocationEngine(rooms, total_slots=40)


@pytest.fixture
def good_room():
    return Room(id="R8", code="R8", name="Room 8", building="A", capacity=80)


@pytest.fixture
def tiny_room():
    return Room(id="T1", code="T1", name="Closet", building="A", capacity=10)


def make_slot(day=Day.MONDAY, start="09:00", end="10:00"):
    return TimeSlot(day=day, start_time=start, end_time=end)


class TestSlotKeys:
    """Tests for the occupancy map."""

    def test_slot_key(self, monday_nine):
        """Test the room|day|start key."""
        assert AllocationEngine.get_slot_key("R2", monday_nine) == "R2|Mon|09:00"

    def test_available_until_allocated(self, engine, deriver, calculus, classroom, monday_nine):
        """Test that an allocation occupies its slot."""
        assert engine.is_slot_available("R2", monday_nine)
        engine.allocate_room(deriver.derive_lecture(calculus), monday_nine, [classroom])
        assert not engine.is_slot_available("R2", monday_nine)
        assert engine.get_allocated_slots() == {"R2|Mon|09:00": "C2"}

    def test_other_slots_stay_free(self, engine, deriver, calculus, classroom, monday_nine):
        """Test that only the exact slot is occupied."""
        engine.allocate_room(deriver.derive_lecture(calculus), monday_nine, [classroom])
        assert engine.is_slot_available("R2", make_slot(start="10:00", end="11:00"))
        assert engine.is_slot_available("R2", make_slot(day=Day.TUESDAY))


class TestAllocateRoom:
    """Tests for single-hour allocation."""

    def test_picks_best_room(self, engine, deriver, calculus, rooms, monday_nine):
        """Test that the best fitting room is selected."""
        result = engine.allocate_room(deriver.derive_lecture(calculus), monday_nine, rooms)

        assert result.is_successful
        assert result.selected_room.id == "R2"
        assert result.course_id == "C2"
        assert result.time_slot == monday_nine
        assert result.conflicts == []
        assert [r.id for r in result.alternative_rooms] == ["R1", "L1"]

    def test_confidence_of_clean_allocation(self, deriver, intro_programming, good_room, monday_nine):
        """Test suitability plus the balance bonus, capped at 100."""
        engine = AllocationEngine([good_room], total_slots=40)
        result = engine.allocate_room(deriver.derive_lecture(intro_programming), monday_nine, [good_room])

        assert result.suitability.overall_score == 90.0
        assert result.confidence == pytest.approx(100.0)
        assert "Excellent match" in result.reasoning

    def test_undersized_room(self, deriver, intro_programming, tiny_room, monday_nine):
        """Test an undersized room when nothing bigger exists."""
        engine = AllocationEngine([tiny_room], total_slots=40)
        result = engine.allocate_room(deriver.derive_lecture(intro_programming), monday_nine, [tiny_room])

        assert result.selected_room == tiny_room
        assert len(result.conflicts) == 1
        conflict = result.conflicts[0]
        assert conflict.type == AllocationConflictType.CAPACITY_MISMATCH
        assert conflict.severity == Severity.HIGH
        assert result.confidence == pytest.approx(38.5)
        assert "1 potential conflict(s) identified" in result.reasoning

    def test_overflow_avoided_when_room_fits(self, deriver, intro_programming, tiny_room, good_room, monday_nine):
        """Test that undersized rooms lose to rooms that fit."""
        engine = AllocationEngine([tiny_room, good_room], total_slots=40)
        result = engine.allocate_room(
            deriver.derive_lecture(intro_programming), monday_nine, [tiny_room, good_room]
        )
        assert result.selected_room == good_room

    def test_overflow_allowed(self, deriver, monday_nine):
        """Test that an undersized room can outscore a wasteful one when allowed."""
        course = Course(id="C5", code="HIST110", name="History", department="History", lecture_hours=2)
        near = Room(id="N1", code="N1", name="Near Fit", building="A", capacity=59)
        roomy = Room(id="B1", code="B1", name="Big Hall", building="A", capacity=1000)
        config = AllocationConfig(preferences=AllocationPreferences(allow_capacity_overflow=True))
        engine = AllocationEngine([near, roomy], total_slots=40, config=config)

        result = engine.allocate_room(deriver.derive_lecture(course), monday_nine, [near, roomy])
        assert result.selected_room == near

    def test_overflow_disallowed(self, deriver, monday_nine):
        """Test that the only fitting room wins by default."""
        course = Course(id="C5", code="HIST110", name="History", department="History", lecture_hours=2)
        near = Room(id="N1", code="N1", name="Near Fit", building="A", capacity=59)
        roomy = Room(id="B1", code="B1", name="Big Hall", building="A", capacity=1000)
        engine = AllocationEngine([near, roomy], total_slots=40)

        result = engine.allocate_room(deriver.derive_lecture(course), monday_nine, [near, roomy])
        assert result.selected_room == roomy

    def test_oversized_room(self, deriver, monday_nine):
        """Test a LOW capacity mismatch for a much larger room."""
        course = Course(id="C6", code="HIST450", name="History", department="History", lecture_hours=1)
        hall = Room(id="B1", code="B1", name="Big Hall", building="A", capacity=100)
        engine = AllocationEngine([hall], total_slots=40)

        result = engine.allocate_room(deriver.derive_lecture(course), monday_nine, [hall])
        assert [(c.type, c.severity) for c in result.conflicts] == [
            (AllocationConflictType.CAPACITY_MISMATCH, Severity.LOW)
        ]

    def test_no_free_room(self, engine, deriver, calculus, classroom, monday_nine):
        """Test the degraded result when the only room is taken."""
        requirements = deriver.derive_lecture(calculus)
        engine.allocate_room(requirements, monday_nine, [classroom])
        result = engine.allocate_room(requirements, monday_nine, [classroom])

        assert not result.is_successful
        assert result.confidence == 0.0
        assert result.conflicts[0].type == AllocationConflictType.ROOM_UNAVAILABLE
        assert result.conflicts[0].severity == Severity.HIGH

    def test_tie_goes_to_tracker(self, deriver, intro_programming, monday_nine):
        """Test that equal rooms alternate through utilization balancing."""
        first = Room(id="A1", code="A1", name="Twin A", building="A", capacity=80)
        second = Room(id="A2", code="A2", name="Twin B", building="A", capacity=80)
        engine = AllocationEngine([first, second], total_slots=40)
        requirements = deriver.derive_lecture(intro_programming)

        picked_first = engine.allocate_room(requirements, monday_nine, [first, second])
        picked_second = engine.allocate_room(
            requirements, make_slot(start="10:00", end="11:00"), [first, second]
        )
        assert picked_first.selected_room == first
        assert picked_second.selected_room == second


class TestAssignRoom:
    """Tests for recording externally chosen rooms."""

    def test_assign(self, engine, deriver, calculus, lecture_hall, classroom, monday_nine):
        """Test that the given room is used even if not the best."""
        result = engine.assign_room(
            deriver.derive_lecture(calculus), monday_nine, lecture_hall, [lecture_hall, classroom]
        )
        assert result.selected_room == lecture_hall
        assert [r.id for r in result.alternative_rooms] == ["R2"]
        assert not engine.is_slot_available("R1", monday_nine)

    def test_assign_taken_room(self, engine, deriver, calculus, classroom, monday_nine):
        """Test that a taken room gives a degraded result."""
        requirements = deriver.derive_lecture(calculus)
        engine.assign_room(requirements, monday_nine, classroom)
        result = engine.assign_room(requirements, monday_nine, classroom)
        assert not result.is_successful

    def test_lab_hours_in_lecture_room(self, engine, deriver, intro_programming, lecture_hall, monday_nine):
        """Test type and facility conflicts of a lab hour in a lecture hall."""
        result = engine.assign_room(deriver.derive_lab(intro_programming), monday_nine, lecture_hall)

        by_type = {c.type: c for c in result.conflicts}
        assert by_type[AllocationConflictType.TYPE_INCOMPATIBLE].severity == Severity.HIGH
        assert "requires a lab room" in by_type[AllocationConflictType.TYPE_INCOMPATIBLE].description
        assert by_type[AllocationConflictType.FACILITY_MISSING].severity == Severity.HIGH

    def test_tutorial_room_is_compatible(self, engine, deriver, calculus, monday_nine):
        """Test that a tutorial room hosts lecture hours without a type conflict."""
        tutorial = Room(id="T2", code="T2", name="Tutorial", building="A", capacity=50, type=RoomType.TUTORIAL)
        result = engine.assign_room(deriver.derive_lecture(calculus), monday_nine, tutorial)
        assert all(c.type != AllocationConflictType.TYPE_INCOMPATIBLE for c in result.conflicts)


class TestCandidates:
    """Tests for candidate evaluation."""

    def test_evaluate_marks_taken_rooms(self, engine, deriver, calculus, rooms, classroom, monday_nine):
        """Test availability flags on candidates."""
        requirements = deriver.derive_lecture(calculus)
        engine.allocate_room(requirements, monday_nine, [classroom])
        candidates = engine.evaluate_room_candidates(rooms, requirements, monday_nine)

        availability = {c.room.id: c.is_available for c in candidates}
        assert availability == {"R1": True, "R2": False, "L1": True}

    def test_find_best_room(self, engine, deriver, calculus, rooms):
        """Test the best available candidate."""
        candidates = engine.evaluate_room_candidates(rooms, deriver.derive_lecture(calculus))
        assert engine.find_best_room(candidates).id == "R2"

    def test_find_best_room_none_available(self, engine, deriver, calculus, rooms):
        """Test that unavailable candidates give None."""
        candidates = engine.evaluate_room_candidates(rooms, deriver.derive_lecture(calculus))
        for candidate in candidates:
            candidate.is_available = False
        assert engine.find_best_room(candidates) is None
        assert engine.find_best_room([]) is None

    def test_utilization_score(self, engine):
        """Test scores below and above the average."""
        engine.tracker.update_utilization("R1")
        engine.tracker.update_utilization("R1")
        engine.tracker.update_utilization("R1")
        # R1 at 7.5%, average 2.5%
        assert engine.calculate_utilization_score(0.0) == pytest.approx(97.5)
        assert engine.calculate_utilization_score(7.5) == pytest.approx(90.0)


class TestMetrics:
    """Tests for aggregate metrics."""

    def test_empty(self, engine):
        """Test metrics before any allocation."""
        metrics = engine.generate_metrics()
        assert metrics.total_allocations == 0
        assert metrics.type_match_accuracy == 100.0
        assert metrics.success_rate == 0.0

    def test_success_and_failure(self, deriver, intro_programming, good_room, monday_nine):
        """Test that failures count against accuracy and conflict rate."""
        engine = AllocationEngine([good_room], total_slots=40)
        requirements = deriver.derive_lecture(intro_programming)
        engine.allocate_room(requirements, monday_nine, [good_room])
        engine.allocate_room(requirements, monday_nine, [good_room])

        metrics = engine.generate_metrics()
        assert metrics.total_allocations == 2
        assert metrics.successful_allocations == 1
        assert metrics.success_rate == pytest.approx(50.0)
        assert metrics.type_match_accuracy == pytest.approx(50.0)
        assert metrics.facility_match_rate == pytest.approx(50.0)
        assert metrics.conflict_rate == pytest.approx(50.0)
        assert metrics.capacity_efficiency == {"R8": pytest.approx(75.0)}
        assert metrics.capacity_efficiency_ok
        assert not metrics.conflict_rate_ok

    def test_to_dict(self, engine, deriver, calculus, rooms, monday_nine):
        """Test serialized metrics."""
        engine.allocate_room(deriver.derive_lecture(calculus), monday_nine, rooms)
        data = engine.generate_metrics().to_dict()
        assert data["total_allocations"] == 1
        assert data["room_utilization"]["R2"] == 2.5

    def test_reset(self, engine, deriver, calculus, rooms, monday_nine):
        """Test that reset clears occupancy, history and utilization."""
        engine.allocate_room(deriver.derive_lecture(calculus), monday_nine, rooms)
        engine.reset()

        assert engine.get_allocated_slots() == {}
        assert engine.history == []
        assert engine.tracker.get_current_utilization("R2") == 0.0
        assert engine.generate_metrics().total_allocations == 0
