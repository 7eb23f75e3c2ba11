"""Preference-aware allocation on top of the allocation engine."""

import logging
from dataclasses import dataclass, field
from typing import Any

from ..allocation.engine import AllocationEngine
from ..allocation.faculty import FacultyAssigner
from ..allocation.models import AllocationResult, CourseRequirements
from ..allocation.requirements import RequirementDeriver
from ..constants import MAX_SUGGESTIONS, MIN_SUGGESTION_IMPROVEMENT, PREFERENCE_BLEND
from ..models import Course, Faculty, Room, ScheduledSlot, Severity, TimeSlot
from .conflicts import ConflictDetector
from .models import FacultyPreferences, OverallPreferenceScore
from .scorer import Assignment, PreferenceScorer

logger = logging.getLogger(__name__)


def _impact(improvement: float) -> Severity:
    if improvement > 30:
        return Severity.HIGH
    if improvement > 20:
        return Severity.MEDIUM
    return Severity.LOW


@dataclass
class AlternativeSuggestion:
    """A room or faculty swap that would raise the preference score."""

    type: str
    description: str
    room_id: str
    faculty_id: str
    improvement_score: float
    impact: Severity

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "description": self.description,
            "room_id": self.room_id,
            "faculty_id": self.faculty_id,
            "improvement_score": round(self.improvement_score, 2),
            "impact": self.impact.value,
        }


@dataclass
class SatisfactionMetrics:
    """How satisfied the chosen faculty member is with the assignment."""

    overall_satisfaction: float = 0.0
    individual_satisfaction: dict[str, float] = field(default_factory=dict)
    preference_utilization: float = 0.0
    conflict_count: int = 0
    improvement_potential: float = 100.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall_satisfaction": self.overall_satisfaction,
            "individual_satisfaction": self.individual_satisfaction,
            "preference_utilization": round(self.preference_utilization, 2),
            "conflict_count": self.conflict_count,
            "improvement_potential": self.improvement_potential,
        }


@dataclass
class PreferenceAllocationResult:
    """Chosen (room, faculty) pair for one hour, with preference details."""

    course_id: str
    time_slot: TimeSlot
    room: Room
    faculty: Faculty
    combined_score: float
    allocation: AllocationResult
    preference_score: OverallPreferenceScore
    alternatives: list[AlternativeSuggestion] = field(default_factory=list)
    satisfaction: SatisfactionMetrics = field(default_factory=SatisfactionMetrics)

    def to_dict(self) -> dict[str, Any]:
        return {
            "course_id": self.course_id,
            "time_slot": self.time_slot.to_dict(),
            "room_id": self.room.id,
            "faculty_id": self.faculty.id,
            "combined_score": round(self.combined_score, 2),
            "allocation": self.allocation.to_dict(),
            "preference_score": self.preference_score.to_dict(),
            "alternatives": [a.to_dict() for a in self.alternatives],
            "satisfaction": self.satisfaction.to_dict(),
        }


@dataclass
class _Candidate:
    room: Room
    faculty: Faculty
    suitability: float
    preference: OverallPreferenceScore
    combined: float


class PreferenceAwareAllocator:
    """
    Chooses a room and a faculty member for one hour using both room
    suitability and faculty preferences.

    Every free (room, faculty) pair is ranked by
    ``0.6 * room suitability + 0.4 * preference score``. The best pair is
    committed through the allocation engine, so occupancy, utilization and
    conflicts are recorded exactly as for a plain allocation. Faculty who
    already teach at the slot or have reached their weekly maximum are not
    considered.
    """

    def __init__(
        self,
        engine: AllocationEngine,
        faculty_preferences: dict[str, FacultyPreferences],
        scorer: PreferenceScorer | None = None,
        detector: ConflictDetector | None = None,
        deriver: RequirementDeriver | None = None,
        faculty_assigner: FacultyAssigner | None = None,
    ):
        """
        Initialize the allocator.

        Args:
            engine: Allocation engine of the current run.
            faculty_preferences: Preferences by faculty id; faculty without
                                 an entry are scored with empty preferences.
            scorer: Preference scorer.
            detector: Conflict detector used for satisfaction metrics.
            deriver: Requirement deriver.
            faculty_assigner: Tracks faculty bookings; shared with the
                              orchestrator when both place hours of one run.
        """
        self.engine = engine
        self.faculty_preferences = faculty_preferences
        self.scorer = scorer or PreferenceScorer()
        self.detector = detector
        self.deriver = deriver or RequirementDeriver()
        self.faculty_assigner = faculty_assigner or FacultyAssigner([])

    def get_preferences(self, faculty_id: str) -> FacultyPreferences:
        return self.faculty_preferences.get(faculty_id) or FacultyPreferences(faculty_id=faculty_id)

    def allocate_with_preferences(
        self,
        course: Course,
        time_slot: TimeSlot,
        rooms: list[Room],
        faculty: list[Faculty],
    ) -> PreferenceAllocationResult | None:
        """
        Allocate one hour of a course with preference awareness.

        Args:
            course: Course being placed.
            time_slot: Time slot of the hour.
            rooms: Candidate rooms; rooms already taken at the slot are ignored.
            faculty: Candidate faculty; busy or fully loaded members are skipped.

        Returns:
            PreferenceAllocationResult, or None when no free room or no
            faculty member is available.
        """
        free_rooms = [r for r in rooms if self.engine.is_slot_available(r.id, time_slot)]
        free_faculty = [
            f
            for f in faculty
            if self.faculty_assigner.can_take_more_hours(f) and self.faculty_assigner.is_available(f, time_slot)
        ]
        if not free_rooms or not free_faculty:
            logger.debug(f"No free room or faculty for {course.code} at {time_slot}")
            return None

        requirements = self.deriver.derive(course)
        candidates = self._rank_candidates(course, time_slot, free_rooms, free_faculty, requirements)
        best = candidates[0]

        allocation = self.engine.assign_room(requirements, time_slot, best.room, free_rooms)
        allocation.faculty_id = best.faculty.id
        self.faculty_assigner.record_assignment(best.faculty, time_slot, course.id)

        return PreferenceAllocationResult(
            course_id=course.id,
            time_slot=time_slot,
            room=best.room,
            faculty=best.faculty,
            combined_score=best.combined,
            allocation=allocation,
            preference_score=best.preference,
            alternatives=self.generate_alternatives(best, candidates),
            satisfaction=self.calculate_satisfaction_metrics(best.faculty.id, best.preference),
        )

    def _rank_candidates(
        self,
        course: Course,
        time_slot: TimeSlot,
        rooms: list[Room],
        faculty: list[Faculty],
        requirements: CourseRequirements,
    ) -> list[_Candidate]:
        suitability = {
            room.id: self.engine.analyzer.evaluate_room_suitability(room, requirements).overall_score
            for room in rooms
        }
        candidates = []
        for member in faculty:
            preferences = self.get_preferences(member.id)
            for room in rooms:
                score = self.scorer.calculate_overall_preference_score(
                    Assignment(room=room, course=course, time_slot=time_slot, faculty_id=member.id),
                    preferences,
                )
                candidates.append(
                    _Candidate(
                        room=room,
                        faculty=member,
                        suitability=suitability[room.id],
                        preference=score,
                        combined=(
                            suitability[room.id] * PREFERENCE_BLEND["allocation"]
                            + score.overall_score * PREFERENCE_BLEND["preference"]
                        ),
                    )
                )
        # Stable sort keeps faculty order, then room order, among equal scores
        return sorted(candidates, key=lambda c: c.combined, reverse=True)

    @staticmethod
    def generate_alternatives(
        chosen: _Candidate, candidates: list[_Candidate]
    ) -> list[AlternativeSuggestion]:
        """Single room or faculty swaps that improve the preference score."""
        baseline = chosen.preference.overall_score
        suggestions = []
        for candidate in candidates:
            same_room = candidate.room.id == chosen.room.id
            same_faculty = candidate.faculty.id == chosen.faculty.id
            if same_room == same_faculty:
                continue

            improvement = candidate.preference.overall_score - baseline
            if improvement <= MIN_SUGGESTION_IMPROVEMENT:
                continue

            if same_faculty:
                kind = "room"
                description = f"Switch to {candidate.room.name} for better room preference match"
            else:
                kind = "faculty"
                description = f"Assign to {candidate.faculty.name} for better preference alignment"
            suggestions.append(
                AlternativeSuggestion(
                    type=kind,
                    description=description,
                    room_id=candidate.room.id,
                    faculty_id=candidate.faculty.id,
                    improvement_score=improvement,
                    impact=_impact(improvement),
                )
            )

        suggestions.sort(key=lambda s: s.improvement_score, reverse=True)
        return suggestions[:MAX_SUGGESTIONS]

    def calculate_satisfaction_metrics(
        self, faculty_id: str, score: OverallPreferenceScore
    ) -> SatisfactionMetrics:
        preferences = self.get_preferences(faculty_id)
        total = preferences.total_preferences
        utilization = score.breakdown.total_matches / total * 100 if total > 0 else 0.0

        conflict_count = 0
        if self.detector is not None:
            conflict_count = self.detector.detect_conflicts(faculty_id, preferences).conflict_count

        return SatisfactionMetrics(
            overall_satisfaction=score.overall_score,
            individual_satisfaction={faculty_id: score.overall_score},
            preference_utilization=utilization,
            conflict_count=conflict_count,
            improvement_potential=max(0, 100 - score.overall_score),
        )

    def score_schedule(
        self,
        slots: list[ScheduledSlot],
        courses: list[Course],
        rooms: list[Room],
    ) -> dict[str, int]:
        """Average preference satisfaction per faculty member over a schedule.

        Slots without faculty, or whose faculty declared no preferences,
        are not scored.
        """
        course_by_id = {c.id: c for c in courses}
        room_by_id = {r.id: r for r in rooms}
        assignments = [
            Assignment(
                room=room_by_id[s.room_id],
                course=course_by_id[s.course_id],
                time_slot=s.time_slot,
                faculty_id=s.faculty_id,
            )
            for s in slots
            if s.faculty_id and s.room_id in room_by_id and s.course_id in course_by_id
        ]
        batch = self.scorer.calculate_batch_preference_scores(assignments, self.faculty_preferences)
        return {
            faculty_id: self.scorer.calculate_average_satisfaction(scores)
            for faculty_id, scores in batch.items()
        }
