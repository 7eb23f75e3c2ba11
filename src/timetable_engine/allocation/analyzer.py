"""Room suitability scoring."""

from ..models import Room, RoomType
from .config import DEFAULT_CONFIG, AllocationConfig
from .models import CourseRequirements, SuitabilityScore

# Capacity scoring bands on the utilization ratio expected_size / capacity
IDEAL_RATIO = 0.75
OPTIMAL_BAND = (0.6, 0.9)
ACCEPTABLE_BAND = (0.4, 0.95)
BAND_EDGE_SCORE = 90.0
ACCEPTABLE_FLOOR_SCORE = 60.0
OVERCROWDED_FLOOR = 10.0
WASTEFUL_FLOOR = 5.0

# Substitute room types: (room type, required type) -> score
TYPE_SUBSTITUTION_SCORES = {
    (RoomType.LECTURE, RoomType.TUTORIAL): 70.0,
    (RoomType.TUTORIAL, RoomType.LECTURE): 60.0,
}
LENIENT_MISMATCH_SCORE = 20.0


class SuitabilityAnalyzer:
    """Scores how well a room fits a set of course requirements.

    Each axis (capacity, type, facilities) is scored in [0, 100] and the
    overall score is their weighted sum using the configured weights.
    """

    def __init__(self, config: AllocationConfig = DEFAULT_CONFIG):
        self.config = config

    def evaluate_room_suitability(
        self, room: Room, requirements: CourseRequirements
    ) -> SuitabilityScore:
        """Score a room against course requirements.

        Args:
            room: Candidate room.
            requirements: Derived course requirements.

        Returns:
            SuitabilityScore with the overall score rounded to two decimals.
        """
        capacity_score = self.calculate_capacity_match(room.capacity, requirements.expected_size)
        type_score = self.calculate_type_match(room.type, requirements.required_room_types)
        facility_score = self.calculate_facility_match(room, requirements)

        weights = self.config.weights
        overall = (
            capacity_score * weights.capacity
            + type_score * weights.room_type
            + facility_score * weights.facilities
        )

        return SuitabilityScore(
            capacity_score=capacity_score,
            type_score=type_score,
            facility_score=facility_score,
            overall_score=round(min(100.0, max(0.0, overall)), 2),
        )

    @staticmethod
    def calculate_capacity_match(room_capacity: int, expected_size: int) -> float:
        """Score the utilization ratio of a room.

        The score peaks at 100 for a 75% full room, stays at or above 90
        inside the 60-90% band and falls linearly to 60 at the edges of the
        40-95% band. Overcrowded rooms drop toward a floor of 10, wasteful
        rooms (under 40% full) score at most 60.

        Args:
            room_capacity: Number of seats.
            expected_size: Expected headcount.

        Returns:
            Score in [0, 100]; 0 for non-positive inputs.
        """
        if expected_size <= 0 or room_capacity <= 0:
            return 0.0

        ratio = expected_size / room_capacity
        low, high = OPTIMAL_BAND
        acceptable_low, acceptable_high = ACCEPTABLE_BAND

        if low <= ratio <= high:
            slope = (100.0 - BAND_EDGE_SCORE) / (IDEAL_RATIO - low)
            return max(0.0, 100.0 - abs(ratio - IDEAL_RATIO) * slope)

        span = BAND_EDGE_SCORE - ACCEPTABLE_FLOOR_SCORE
        if acceptable_low <= ratio < low:
            return ACCEPTABLE_FLOOR_SCORE + (ratio - acceptable_low) / (low - acceptable_low) * span
        if high < ratio <= acceptable_high:
            return BAND_EDGE_SCORE - (ratio - high) / (acceptable_high - high) * span

        if ratio > acceptable_high:
            return max(OVERCROWDED_FLOOR, ACCEPTABLE_FLOOR_SCORE - (ratio - acceptable_high) * 500)

        return min(ACCEPTABLE_FLOOR_SCORE, max(WASTEFUL_FLOOR, ratio * 150))

    def calculate_type_match(self, room_type: RoomType, required_types: list[RoomType]) -> float:
        """Score a room type against the acceptable types."""
        if not required_types:
            return 100.0
        if room_type in required_types:
            return 100.0

        for required in required_types:
            score = TYPE_SUBSTITUTION_SCORES.get((room_type, required))
            if score is not None:
                return score

        if self.config.preferences.strict_type_matching:
            return 0.0
        return LENIENT_MISMATCH_SCORE

    @staticmethod
    def calculate_facility_match(room: Room, requirements: CourseRequirements) -> float:
        """Score facility coverage.

        A room facility containing the required name counts fully; a
        required name containing the room facility counts half. Full
        matches anywhere in the room win over partial ones.
        """
        required = requirements.required_facilities
        if not required:
            return 100.0

        available = [f.lower() for f in room.facilities]
        exact = 0
        partial = 0
        for facility in required:
            wanted = facility.lower()
            if any(wanted in have for have in available):
                exact += 1
            elif any(have and have in wanted for have in available):
                partial += 1

        score = exact / len(required) * 100 + partial / len(required) * 50
        return min(100.0, score)

    @staticmethod
    def check_facility_requirements(room: Room, requirements: CourseRequirements) -> bool:
        """Check that every required facility has some match in the room."""
        return not SuitabilityAnalyzer.missing_facilities(room, requirements)

    @staticmethod
    def check_room_type_compatibility(room_type: RoomType, required_types: list[RoomType]) -> bool:
        """Check whether a room type can host the required types.

        Lecture and tutorial rooms substitute for each other; lab rooms
        only host lab requirements.
        """
        if not required_types or room_type in required_types:
            return True
        return any((room_type, required) in TYPE_SUBSTITUTION_SCORES for required in required_types)

    @staticmethod
    def missing_facilities(room: Room, requirements: CourseRequirements) -> list[str]:
        """List required facilities with no match in the room."""
        available = [f.lower() for f in room.facilities]
        missing = []
        for facility in requirements.required_facilities:
            wanted = facility.lower()
            if not any(wanted in have or (have and have in wanted) for have in available):
                missing.append(facility)
        return missing
