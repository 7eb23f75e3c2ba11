"""Conflict detection over a faculty member's raw preference set."""

import logging
from collections import defaultdict
from itertools import combinations

from ..constants import WORKLOAD_TOLERANCE
from ..models import Course, Faculty, Priority, Room, ScheduledSlot, Severity
from ..utils import intervals_overlap
from .models import (
    Conflict,
    ConflictDetectionResult,
    ConflictKind,
    ConflictSuggestion,
    ExpertiseLevel,
    FacultyPreferences,
    RoomPreference,
    SubjectPreference,
    TimePreference,
)

logger = logging.getLogger(__name__)


def _label(index: int) -> str:
    return f"Preference {index + 1}"


def _slot_dict(pref: TimePreference) -> dict[str, str]:
    return {"day": pref.day, "start_time": pref.start_time, "end_time": pref.end_time}


def find_overlapping_pairs(
    indexed: list[tuple[int, TimePreference]],
) -> list[tuple[tuple[int, TimePreference], tuple[int, TimePreference]]]:
    """Every same-day pair of well-formed preferences whose ranges intersect.

    Each pair is reported once, in input order.
    """
    by_day: dict[str, list[tuple[int, TimePreference]]] = defaultdict(list)
    for index, pref in indexed:
        if pref.is_well_formed:
            by_day[pref.day].append((index, pref))

    pairs = []
    for day_prefs in by_day.values():
        for first, second in combinations(day_prefs, 2):
            if intervals_overlap(
                first[1].start_minutes, first[1].end_minutes,
                second[1].start_minutes, second[1].end_minutes,
            ):
                pairs.append((first, second))
    pairs.sort(key=lambda pair: (pair[0][0], pair[1][0]))
    return pairs


class ConflictDetector:
    """
    Finds problems in a faculty member's preferences before scheduling.

    Time conflicts cover overlapping preferences, clashes with existing
    commitments and overcommitment. Resource conflicts cover preferences
    no room in the inventory can satisfy. Constraint violations cover
    overlapping hard constraints, unknown courses, unusual expertise and
    priority pairings, and workload well above the weekly maximum.
    """

    def __init__(
        self,
        rooms: list[Room],
        courses: list[Course],
        faculty: list[Faculty],
    ):
        """
        Initialize the detector.

        Args:
            rooms: Room inventory.
            courses: Course catalog.
            faculty: Faculty catalog, used for weekly hour limits.
        """
        self.rooms = list(rooms)
        self.room_ids = {r.id for r in self.rooms}
        self.course_codes = {c.code for c in courses}
        self.faculty_by_id = {f.id: f for f in faculty}

    def detect_conflicts(
        self,
        faculty_id: str,
        preferences: FacultyPreferences,
        commitments: list[ScheduledSlot] | None = None,
    ) -> ConflictDetectionResult:
        """
        Detect all conflicts in one faculty member's preferences.

        Args:
            faculty_id: Faculty member the preferences belong to.
            preferences: The preference set.
            commitments: Already scheduled slots; only those of this faculty
                         member are considered.

        Returns:
            ConflictDetectionResult with conflicts and suggestions.
        """
        own = [s for s in (commitments or []) if s.faculty_id == faculty_id]
        result = ConflictDetectionResult(
            time_conflicts=self.detect_time_conflicts(faculty_id, preferences.time_preferences, own),
            resource_conflicts=self.detect_resource_conflicts(preferences.room_preferences),
            constraint_violations=self.detect_constraint_violations(faculty_id, preferences),
        )
        result.suggestions = self.generate_suggestions(result)

        if result.has_conflicts:
            logger.debug(f"Faculty {faculty_id}: {result.conflict_count} preference conflict(s)")
        return result

    def detect_time_conflicts(
        self,
        faculty_id: str,
        time_preferences: list[TimePreference],
        commitments: list[ScheduledSlot] | None = None,
    ) -> list[Conflict]:
        conflicts = []
        for (i, first), (j, second) in find_overlapping_pairs(list(enumerate(time_preferences))):
            hard = first.is_hard_constraint or second.is_hard_constraint
            conflicts.append(
                Conflict(
                    kind=ConflictKind.TIME,
                    type="overlap",
                    severity=Severity.HIGH if hard else Severity.MEDIUM,
                    description=f"Overlapping time preferences on {first.day}",
                    affected_entities=[_label(i), _label(j)],
                    affected_time_slots=[_slot_dict(first), _slot_dict(second)],
                )
            )

        conflicts.extend(self.find_commitment_conflicts(time_preferences, commitments or []))

        overcommitment = self.check_overcommitment(faculty_id, time_preferences)
        if overcommitment is not None:
            conflicts.append(overcommitment)
        return conflicts

    @staticmethod
    def find_commitment_conflicts(
        time_preferences: list[TimePreference], commitments: list[ScheduledSlot]
    ) -> list[Conflict]:
        conflicts = []
        for index, pref in enumerate(time_preferences):
            if not pref.is_well_formed:
                continue
            for slot in commitments:
                ts = slot.time_slot
                if pref.day != ts.day.value:
                    continue
                if not intervals_overlap(pref.start_minutes, pref.end_minutes, ts.start_minutes, ts.end_minutes):
                    continue
                conflicts.append(
                    Conflict(
                        kind=ConflictKind.TIME,
                        type="unavailable",
                        severity=Severity.HIGH if pref.is_hard_constraint else Severity.MEDIUM,
                        description=(
                            f"Time preference conflicts with existing {slot.session_type.value}: "
                            f"{slot.course_id} at {ts}"
                        ),
                        affected_entities=[_label(index)],
                        affected_time_slots=[_slot_dict(pref)],
                    )
                )
        return conflicts

    @staticmethod
    def total_preferred_hours(time_preferences: list[TimePreference]) -> float:
        return sum(p.duration_hours for p in time_preferences if p.is_well_formed)

    def check_overcommitment(
        self, faculty_id: str, time_preferences: list[TimePreference]
    ) -> Conflict | None:
        faculty = self.faculty_by_id.get(faculty_id)
        if faculty is None:
            return None

        preferred = self.total_preferred_hours(time_preferences)
        if preferred <= faculty.max_hours_per_week:
            return None
        return Conflict(
            kind=ConflictKind.TIME,
            type="overcommitment",
            severity=Severity.HIGH,
            description=(
                f"Total preferred hours ({preferred:g}) exceeds maximum allowed "
                f"({faculty.max_hours_per_week})"
            ),
            affected_entities=["All time preferences"],
            affected_time_slots=[_slot_dict(p) for p in time_preferences],
        )

    def detect_resource_conflicts(self, room_preferences: list[RoomPreference]) -> list[Conflict]:
        conflicts = []
        for pref in room_preferences:
            if pref.room_id and pref.room_id not in self.room_ids:
                conflicts.append(
                    Conflict(
                        kind=ConflictKind.RESOURCE,
                        type="room_unavailable",
                        severity=Severity.HIGH,
                        description=f"Preferred room {pref.room_id} does not exist",
                        affected_entities=[pref.room_id],
                    )
                )

            if pref.facilities and not any(
                all(f in room.facilities for f in pref.facilities) for room in self.rooms
            ):
                conflicts.append(
                    Conflict(
                        kind=ConflictKind.RESOURCE,
                        type="facility_missing",
                        severity=Severity.MEDIUM,
                        description=(
                            f"No rooms available with required facilities: {', '.join(pref.facilities)}"
                        ),
                        affected_entities=list(pref.facilities),
                    )
                )

            if pref.room_type and not any(r.type.value == pref.room_type for r in self.rooms):
                conflicts.append(
                    Conflict(
                        kind=ConflictKind.RESOURCE,
                        type="room_unavailable",
                        severity=Severity.MEDIUM,
                        description=f"No rooms available of type: {pref.room_type}",
                        affected_entities=[pref.room_type],
                    )
                )
        return conflicts

    def detect_constraint_violations(
        self, faculty_id: str, preferences: FacultyPreferences
    ) -> list[Conflict]:
        violations = self.check_hard_time_constraints(preferences.time_preferences)
        violations.extend(self.check_subject_constraints(preferences.subject_preferences))

        workload = self.check_workload(faculty_id, preferences.time_preferences)
        if workload is not None:
            violations.append(workload)
        return violations

    @staticmethod
    def check_hard_time_constraints(time_preferences: list[TimePreference]) -> list[Conflict]:
        """Overlapping hard constraints can never both be satisfied."""
        hard = [(i, p) for i, p in enumerate(time_preferences) if p.is_hard_constraint]
        return [
            Conflict(
                kind=ConflictKind.CONSTRAINT,
                type="hard_constraint",
                severity=Severity.HIGH,
                description=f"Conflicting hard time constraints on {first.day}",
                affected_entities=[_label(i), _label(j)],
                affected_time_slots=[_slot_dict(first), _slot_dict(second)],
                recommended_action="Remove or modify one of the conflicting hard constraints",
            )
            for (i, first), (j, second) in find_overlapping_pairs(hard)
        ]

    def check_subject_constraints(
        self, subject_preferences: list[SubjectPreference]
    ) -> list[Conflict]:
        violations = []
        for pref in subject_preferences:
            if pref.course_code not in self.course_codes:
                violations.append(
                    Conflict(
                        kind=ConflictKind.CONSTRAINT,
                        type="business_rule",
                        severity=Severity.HIGH,
                        description=f"Course {pref.course_code} does not exist",
                        affected_entities=[pref.course_code],
                        recommended_action="Remove invalid course or verify course code",
                    )
                )
            if pref.expertise_level == ExpertiseLevel.BASIC and pref.priority == Priority.HIGH:
                violations.append(
                    Conflict(
                        kind=ConflictKind.CONSTRAINT,
                        type="soft_constraint",
                        severity=Severity.LOW,
                        description=(
                            f"High priority preference for {pref.course_code} with basic expertise level"
                        ),
                        affected_entities=[pref.course_code],
                        recommended_action="Consider increasing expertise level or lowering priority",
                    )
                )
        return violations

    def check_workload(
        self, faculty_id: str, time_preferences: list[TimePreference]
    ) -> Conflict | None:
        faculty = self.faculty_by_id.get(faculty_id)
        if faculty is None:
            return None

        preferred = self.total_preferred_hours(time_preferences)
        if preferred <= faculty.max_hours_per_week * WORKLOAD_TOLERANCE:
            return None
        return Conflict(
            kind=ConflictKind.CONSTRAINT,
            type="business_rule",
            severity=Severity.MEDIUM,
            description=(
                f"Total preferred hours ({preferred:g}) significantly exceeds capacity "
                f"({faculty.max_hours_per_week})"
            ),
            affected_entities=["workload_limit"],
            recommended_action="Reduce time preferences or increase maximum hours per week",
        )

    @staticmethod
    def generate_suggestions(result: ConflictDetectionResult) -> list[ConflictSuggestion]:
        """Advisory suggestions, one per conflict of a resolvable type."""
        suggestions = []
        for conflict in result.time_conflicts:
            if conflict.type == "overlap":
                suggestions.append(
                    ConflictSuggestion(
                        type="alternative_time",
                        description="Adjust overlapping time preferences to avoid conflicts",
                        suggested_changes=[
                            "Modify one of the conflicting time slots",
                            "Split the overlapping period between preferences",
                            "Consider alternative days for one preference",
                        ],
                        impact=Severity.MEDIUM,
                    )
                )
        for conflict in result.resource_conflicts:
            if conflict.type == "facility_missing":
                suggestions.append(
                    ConflictSuggestion(
                        type="alternative_room",
                        description="Consider rooms with different facility combinations",
                        suggested_changes=[
                            "Review facility requirements and prioritize essential ones",
                            "Look for rooms in different buildings",
                            "Consider portable equipment as alternatives",
                        ],
                        impact=Severity.LOW,
                    )
                )
        for conflict in result.constraint_violations:
            if conflict.type == "hard_constraint":
                suggestions.append(
                    ConflictSuggestion(
                        type="preference_adjustment",
                        description="Resolve conflicting hard constraints",
                        suggested_changes=[
                            "Convert some hard constraints to soft preferences",
                            "Adjust time slots to eliminate overlaps",
                            "Prioritize the most important constraints",
                        ],
                        impact=Severity.HIGH,
                    )
                )
        return suggestions
