"""Tests for SuitabilityAnalyzer class."""

import pytest

from timetable_engine.allocation.analyzer import SuitabilityAnalyzer
from timetable_engine.allocation.config import AllocationConfig, AllocationPreferences
from timetable_engine.allocation.models import CourseRequirements
from timetable_engine.models import Room, RoomType


@pytest.fixture
def analyzer():
    return SuitabilityAnalyzer()


def make_requirements(size=40, types=None, facilities=None):
    return CourseRequirements(
        course_id="C1",
        expected_size=size,
        required_room_types=types if types is not None else [RoomType.LECTURE],
        required_facilities=facilities or [],
    )


class TestCapacityMatch:
    """Tests for capacity scoring."""

    def test_ideal_ratio(self, analyzer):
        """Test that a 75% full room scores 100."""
        assert analyzer.calculate_capacity_match(100, 75) == pytest.approx(100.0)

    @pytest.mark.parametrize("size", [60, 90])
    def test_optimal_band_edges(self, analyzer, size):
        """Test the edges of the 60-90% band."""
        assert analyzer.calculate_capacity_match(100, size) == pytest.approx(90.0)

    def test_score_is_continuous_at_band_edge(self, analyzer):
        """Test that scores on both sides of the band edge are close."""
        inside = analyzer.calculate_capacity_match(1000, 600)
        outside = analyzer.calculate_capacity_match(1000, 599)
        assert inside - outside < 1

    def test_acceptable_band(self, analyzer):
        """Test linear falloff between 40% and 60%."""
        assert analyzer.calculate_capacity_match(100, 50) == pytest.approx(75.0)
        assert analyzer.calculate_capacity_match(100, 40) == pytest.approx(60.0)

    def test_slightly_overcrowded(self, analyzer):
        """Test the 90-95% band."""
        assert analyzer.calculate_capacity_match(100, 95) == pytest.approx(60.0)

    def test_overcrowded_floor(self, analyzer):
        """Test that heavily overcrowded rooms keep a floor of 10."""
        assert analyzer.calculate_capacity_match(50, 100) == pytest.approx(10.0)

    def test_wasteful_room(self, analyzer):
        """Test that nearly empty rooms score low."""
        assert analyzer.calculate_capacity_match(100, 20) == pytest.approx(30.0)
        assert analyzer.calculate_capacity_match(1000, 1) == pytest.approx(5.0)

    def test_non_positive_inputs(self, analyzer):
        """Test zero sizes and capacities."""
        assert analyzer.calculate_capacity_match(100, 0) == 0.0
        assert analyzer.calculate_capacity_match(0, 40) == 0.0


class TestTypeMatch:
    """Tests for room type scoring."""

    def test_exact(self, analyzer):
        """Test an accepted type."""
        assert analyzer.calculate_type_match(RoomType.LECTURE, [RoomType.LECTURE]) == 100.0

    def test_no_required_types(self, analyzer):
        """Test that no requirement accepts anything."""
        assert analyzer.calculate_type_match(RoomType.LAB, []) == 100.0

    def test_lecture_room_for_tutorial(self, analyzer):
        """Test the lecture-for-tutorial substitute."""
        assert analyzer.calculate_type_match(RoomType.LECTURE, [RoomType.TUTORIAL]) == 70.0

    def test_tutorial_room_for_lecture(self, analyzer):
        """Test the tutorial-for-lecture substitute."""
        assert analyzer.calculate_type_match(RoomType.TUTORIAL, [RoomType.LECTURE]) == 60.0

    def test_strict_mismatch(self, analyzer):
        """Test that strict matching scores a mismatch 0."""
        assert analyzer.calculate_type_match(RoomType.LAB, [RoomType.LECTURE]) == 0.0

    def test_lenient_mismatch(self):
        """Test that lenient matching scores a mismatch 20."""
        config = AllocationConfig(preferences=AllocationPreferences(strict_type_matching=False))
        analyzer = SuitabilityAnalyzer(config)
        assert analyzer.calculate_type_match(RoomType.LAB, [RoomType.LECTURE]) == 20.0

    def test_compatibility(self, analyzer):
        """Test the boolean compatibility check."""
        assert analyzer.check_room_type_compatibility(RoomType.TUTORIAL, [RoomType.LECTURE])
        assert not analyzer.check_room_type_compatibility(RoomType.LAB, [RoomType.LECTURE])
        assert not analyzer.check_room_type_compatibility(RoomType.LECTURE, [RoomType.LAB])


class TestFacilityMatch:
    """Tests for facility scoring."""

    def test_no_requirements(self, analyzer, lecture_hall):
        """Test that no requirements score 100."""
        assert analyzer.calculate_facility_match(lecture_hall, make_requirements()) == 100.0

    def test_full_match(self, analyzer, computer_lab):
        """Test that all facilities present score 100."""
        requirements = make_requirements(facilities=["computers", "equipment"])
        assert analyzer.calculate_facility_match(computer_lab, requirements) == 100.0

    def test_half_match(self, analyzer):
        """Test one of two facilities present."""
        room = Room(id="L2", code="L2", name="Lab 2", building="C", capacity=30, facilities=["computers"])
        requirements = make_requirements(facilities=["computers", "equipment"])
        assert analyzer.calculate_facility_match(room, requirements) == 50.0
        assert analyzer.missing_facilities(room, requirements) == ["equipment"]
        assert not analyzer.check_facility_requirements(room, requirements)

    def test_partial_name_match(self, analyzer):
        """Test that a shorter room facility name counts half."""
        room = Room(id="L2", code="L2", name="Lab 2", building="C", capacity=30, facilities=["computer"])
        requirements = make_requirements(facilities=["computers"])
        assert analyzer.calculate_facility_match(room, requirements) == 50.0
        assert analyzer.check_facility_requirements(room, requirements)

    def test_full_match_after_partial(self, analyzer):
        """Test that a later full match wins over an earlier partial one."""
        room = Room(
            id="L2", code="L2", name="Lab 2", building="C", capacity=30, facilities=["computer", "computers"]
        )
        requirements = make_requirements(facilities=["computers"])
        assert analyzer.calculate_facility_match(room, requirements) == 100.0

    def test_case_insensitive(self, analyzer):
        """Test that facility names are compared case-insensitively."""
        room = Room(id="L2", code="L2", name="Lab 2", building="C", capacity=30, facilities=["Projector"])
        requirements = make_requirements(facilities=["projector"])
        assert analyzer.calculate_facility_match(room, requirements) == 100.0


class TestOverallSuitability:
    """Tests for the weighted overall score."""

    def test_perfect_room_scores_ninety(self, analyzer):
        """Test that default weights cap the score at 90."""
        room = Room(id="R8", code="R8", name="Room 8", building="A", capacity=80)
        score = analyzer.evaluate_room_suitability(room, make_requirements(size=60))

        assert score.capacity_score == pytest.approx(100.0)
        assert score.type_score == 100.0
        assert score.facility_score == 100.0
        assert score.overall_score == 90.0

    def test_weighted_sum(self, analyzer, lecture_hall):
        """Test the weighted combination for a roomy hall."""
        score = analyzer.evaluate_room_suitability(lecture_hall, make_requirements(size=40))
        assert score.overall_score == pytest.approx(76.0)

    def test_wrong_type_scores_low(self, analyzer, computer_lab):
        """Test a lab room for a lecture requirement."""
        score = analyzer.evaluate_room_suitability(computer_lab, make_requirements(size=40))
        assert score.type_score == 0.0
        assert score.overall_score == pytest.approx(28.5)


SWEEP_SIZES = list(range(400, 951, 5))

BOUND_ROOMS = [
    Room(id="T1", code="T1", name="Closet", building="A", capacity=5),
    Room(id="T2", code="T2", name="Arena", building="A", capacity=2000, facilities=["projector"]),
    Room(id="T3", code="T3", name="Bare Lab", building="C", capacity=30, type=RoomType.LAB),
    Room(id="T4", code="T4", name="Seminar", building="B", capacity=25, type=RoomType.TUTORIAL),
]

BOUND_REQUIREMENTS = [
    make_requirements(size=1),
    make_requirements(size=60),
    make_requirements(size=5000),
    make_requirements(size=30, types=[RoomType.LAB], facilities=["computers", "equipment"]),
    make_requirements(size=20, types=[RoomType.TUTORIAL, RoomType.LECTURE]),
    make_requirements(size=40, types=[], facilities=["oscilloscopes"]),
]


class TestCapacityCurve:
    """Tests for the shape of the capacity curve between 40% and 95%."""

    def test_rises_to_ideal_ratio(self, analyzer):
        """Test that scores never drop while approaching 75%."""
        scores = [analyzer.calculate_capacity_match(1000, s) for s in SWEEP_SIZES if s <= 750]
        assert all(a <= b for a, b in zip(scores, scores[1:]))

    def test_falls_after_ideal_ratio(self, analyzer):
        """Test that scores never rise moving past 75%."""
        scores = [analyzer.calculate_capacity_match(1000, s) for s in SWEEP_SIZES if s >= 750]
        assert all(a >= b for a, b in zip(scores, scores[1:]))

    def test_no_jumps(self, analyzer):
        """Test that neighbouring ratios half a point apart score alike."""
        scores = [analyzer.calculate_capacity_match(1000, s) for s in SWEEP_SIZES]
        assert max(abs(a - b) for a, b in zip(scores, scores[1:])) <= 3.0 + 1e-9

    @pytest.mark.parametrize("edge", [4000, 6000, 9000, 9500])
    def test_continuous_at_edges(self, analyzer, edge):
        """Test both sides of each band edge."""
        below = analyzer.calculate_capacity_match(10000, edge - 1)
        above = analyzer.calculate_capacity_match(10000, edge + 1)
        at = analyzer.calculate_capacity_match(10000, edge)

        assert abs(at - below) < 0.1
        assert abs(at - above) < 0.1


class TestSuitabilityBounds:
    """Tests that every score stays within [0, 100]."""

    @pytest.mark.parametrize("strict", [True, False])
    @pytest.mark.parametrize("requirements", BOUND_REQUIREMENTS)
    @pytest.mark.parametrize("room", BOUND_ROOMS, ids=lambda r: r.id)
    def test_scores_bounded(self, room, requirements, strict):
        """Test all axes and the overall score for odd room and course pairs."""
        config = AllocationConfig(preferences=AllocationPreferences(strict_type_matching=strict))
        score = SuitabilityAnalyzer(config).evaluate_room_suitability(room, requirements)

        for value in (score.capacity_score, score.type_score, score.facility_score, score.overall_score):
            assert 0.0 <= value <= 100.0
