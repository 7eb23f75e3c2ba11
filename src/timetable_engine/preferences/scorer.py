"""Scoring of assignments against a faculty member's declared preferences."""

import logging
from dataclasses import dataclass

from ..constants import (
    EXPERTISE_SCORES,
    NEUTRAL_PREFERENCE_SCORE,
    NO_SUBJECT_PREFERENCE_SCORE,
    PREFERENCE_CATEGORY_WEIGHTS,
    PRIORITY_MULTIPLIERS,
)
from ..models import Course, Priority, Room, TimeSlot
from ..utils import overlap_minutes
from .models import (
    ExpertiseLevel,
    FacultyPreferences,
    OverallPreferenceScore,
    PreferenceBreakdown,
    PreferenceScore,
    SatisfactionLevel,
)

logger = logging.getLogger(__name__)

EXACT_ROOM_SCORE = 100.0
ROOM_TYPE_SCORE = 80.0
BUILDING_SCORE = 60.0
FACILITY_SCORE_CEILING = 70.0
EXACT_TIME_SCORE = 100.0
TIME_OVERLAP_CEILING = 80.0


@dataclass(frozen=True)
class Assignment:
    """A candidate (room, course, time slot, faculty) assignment."""

    room: Room
    course: Course
    time_slot: TimeSlot
    faculty_id: str


def _scale(score: float, weight: float, priority: Priority) -> float:
    return score * (weight / 100) * PRIORITY_MULTIPLIERS[priority.value]


def _bounded(score: float) -> float:
    return max(0.0, min(100.0, score))


class PreferenceScorer:
    """Scores how well an assignment matches one faculty member's preferences.

    The room, time and subject scorers are independent; each returns a
    PreferenceScore in [0, 100]. A category with no declared preferences
    scores a neutral 50.
    """

    def calculate_room_preference_score(
        self, room: Room, preferences: FacultyPreferences
    ) -> PreferenceScore:
        """
        Score a room against the room preferences.

        Each preference scores the first criterion it matches: the exact
        room (100), the room type (80), the building (60) or a share of
        its facilities (up to 70). Scores are scaled by weight and
        priority and the best one is kept.
        """
        if not preferences.room_preferences:
            return PreferenceScore(
                score=NEUTRAL_PREFERENCE_SCORE,
                suggestions=["Consider setting room preferences for better allocation"],
            )

        result = PreferenceScore(score=0.0)
        best = 0.0
        for pref in preferences.room_preferences:
            score = None
            if pref.room_id and pref.room_id == room.id:
                score = EXACT_ROOM_SCORE
                result.matched_preferences.append(f"Specific room match: {room.name}")
            elif pref.room_type and pref.room_type == room.type.value:
                score = ROOM_TYPE_SCORE
                result.matched_preferences.append(f"Room type match: {room.type.value}")
            elif pref.building and pref.building == room.building:
                score = BUILDING_SCORE
                result.matched_preferences.append(f"Building match: {room.building}")
            elif pref.facilities:
                matched = [f for f in pref.facilities if f in room.facilities]
                if matched:
                    score = len(matched) / len(pref.facilities) * FACILITY_SCORE_CEILING
                    result.matched_preferences.append(f"Facility matches: {', '.join(matched)}")

            if score is not None:
                best = max(best, _scale(score, pref.effective_weight, pref.priority))

        for pref in preferences.room_preferences:
            if pref.room_type and pref.room_type != room.type.value and pref.priority == Priority.HIGH:
                result.violated_constraints.append(
                    f"High priority room type preference ({pref.room_type}) not met"
                )

        if best < 50:
            result.suggestions.append(
                "Consider updating room preferences to better match available rooms"
            )
        if result.violated_constraints:
            result.suggestions.append("Some high-priority room preferences could not be satisfied")

        result.score = _bounded(best)
        return result

    def calculate_time_preference_score(
        self, time_slot: TimeSlot, preferences: FacultyPreferences
    ) -> PreferenceScore:
        """
        Score a time slot against the time preferences.

        An exact match scores 100; a partial overlap scores the overlapped
        fraction of the slot times 80. A hard constraint on the slot's day
        that the slot does not meet is reported as a violation.
        """
        if not preferences.time_preferences:
            return PreferenceScore(
                score=NEUTRAL_PREFERENCE_SCORE,
                suggestions=["Consider setting time preferences for better scheduling"],
            )

        result = PreferenceScore(score=0.0)
        best = 0.0
        day = time_slot.day.value
        for pref in preferences.time_preferences:
            if not pref.is_well_formed:
                logger.debug(f"Skipping malformed time preference {pref.describe()}")
                continue

            matched = False
            if pref.day == day:
                if pref.start_minutes == time_slot.start_minutes and pref.end_minutes == time_slot.end_minutes:
                    score = EXACT_TIME_SCORE
                    matched = True
                    result.matched_preferences.append(f"Exact time match: {pref.describe()}")
                else:
                    overlap = overlap_minutes(
                        pref.start_minutes,
                        pref.end_minutes,
                        time_slot.start_minutes,
                        time_slot.end_minutes,
                    )
                    if overlap > 0:
                        score = overlap / time_slot.duration_minutes * TIME_OVERLAP_CEILING
                        matched = True
                        result.matched_preferences.append(f"Partial time overlap: {pref.describe()}")

                if matched:
                    best = max(best, _scale(score, pref.effective_weight, pref.priority))
                elif pref.is_hard_constraint:
                    result.violated_constraints.append(
                        f"Hard time constraint violated: {pref.describe()}"
                    )

        if best < 30:
            result.suggestions.append("Time slot doesn't align well with preferences")
        if result.violated_constraints:
            result.suggestions.append(
                "Hard time constraints were violated - consider alternative time slots"
            )

        result.score = _bounded(best)
        return result

    def calculate_subject_preference_score(
        self, course: Course, preferences: FacultyPreferences
    ) -> PreferenceScore:
        """Score a course by the faculty member's declared expertise in it."""
        if not preferences.subject_preferences:
            return PreferenceScore(
                score=NEUTRAL_PREFERENCE_SCORE,
                suggestions=["Consider setting subject preferences for courses you'd like to teach"],
            )

        pref = preferences.get_subject_preference(course.code)
        if pref is None:
            return PreferenceScore(
                score=NO_SUBJECT_PREFERENCE_SCORE,
                suggestions=[f"No specific preference set for course {course.code}"],
            )

        score = _scale(
            EXPERTISE_SCORES[pref.expertise_level.value], pref.effective_weight, pref.priority
        )
        result = PreferenceScore(
            score=_bounded(score),
            matched_preferences=[
                f"Course preference match: {course.code} "
                f"({pref.expertise_level.value} level, {pref.priority.value} priority)"
            ],
        )
        if pref.expertise_level == ExpertiseLevel.BASIC and pref.priority == Priority.HIGH:
            result.suggestions.append(
                "Consider additional preparation for this high-priority course with basic expertise"
            )
        return result

    def calculate_overall_preference_score(
        self, assignment: Assignment, preferences: FacultyPreferences
    ) -> OverallPreferenceScore:
        """
        Combine the three category scores for a full assignment.

        Args:
            assignment: Room, course, time slot and faculty being scored.
            preferences: Preferences of the assigned faculty member.

        Returns:
            OverallPreferenceScore with the weighted, rounded overall score.
        """
        room = self.calculate_room_preference_score(assignment.room, preferences)
        time = self.calculate_time_preference_score(assignment.time_slot, preferences)
        subject = self.calculate_subject_preference_score(assignment.course, preferences)

        overall = (
            room.score * PREFERENCE_CATEGORY_WEIGHTS["room"]
            + time.score * PREFERENCE_CATEGORY_WEIGHTS["time"]
            + subject.score * PREFERENCE_CATEGORY_WEIGHTS["subject"]
        )
        breakdown = PreferenceBreakdown(
            room_matches=len(room.matched_preferences),
            time_matches=len(time.matched_preferences),
            subject_matches=len(subject.matched_preferences),
            total_preferences=preferences.total_preferences,
            constraint_violations=(
                len(room.violated_constraints)
                + len(time.violated_constraints)
                + len(subject.violated_constraints)
            ),
        )
        return OverallPreferenceScore(
            room_score=room.score,
            time_score=time.score,
            subject_score=subject.score,
            overall_score=round(overall),
            satisfaction_level=SatisfactionLevel.from_score(overall),
            breakdown=breakdown,
        )

    def calculate_batch_preference_scores(
        self,
        assignments: list[Assignment],
        faculty_preferences: dict[str, FacultyPreferences],
    ) -> dict[str, list[OverallPreferenceScore]]:
        """Score many assignments, grouped by faculty id.

        Assignments of faculty without declared preferences are skipped.
        """
        results: dict[str, list[OverallPreferenceScore]] = {}
        for assignment in assignments:
            preferences = faculty_preferences.get(assignment.faculty_id)
            if preferences is None:
                continue
            score = self.calculate_overall_preference_score(assignment, preferences)
            results.setdefault(assignment.faculty_id, []).append(score)
        return results

    @staticmethod
    def calculate_average_satisfaction(scores: list[OverallPreferenceScore]) -> int:
        if not scores:
            return 0
        return round(sum(s.overall_score for s in scores) / len(scores))
