"""Data models for faculty preferences, preference scores and conflicts."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..constants import SATISFACTION_BANDS
from ..models import Day, Priority, RoomType, Severity, TimeSlot
from ..utils import is_valid_time, time_to_minutes


class ExpertiseLevel(str, Enum):
    """How well a faculty member knows a subject."""

    EXPERT = "expert"
    PROFICIENT = "proficient"
    BASIC = "basic"
    WILLING = "willing"


class SatisfactionLevel(str, Enum):
    """Banding of an overall preference score."""

    EXCELLENT = "excellent"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    POOR = "poor"

    @classmethod
    def from_score(cls, score: float) -> "SatisfactionLevel":
        for threshold, level in SATISFACTION_BANDS:
            if score >= threshold:
                return cls(level)
        return cls.POOR


class ConstraintType(str, Enum):
    """Kind of explicit preference constraint."""

    TIME_UNAVAILABLE = "time_unavailable"
    ROOM_INCOMPATIBLE = "room_incompatible"
    SUBJECT_EXPERTISE = "subject_expertise"
    WORKLOAD_LIMIT = "workload_limit"


def clamp_weight(weight: float) -> float:
    """Clamp a preference weight to [0, 100]."""
    return max(0.0, min(100.0, float(weight)))


@dataclass
class RoomPreference:
    """Preferred room, room type, building or facility set."""

    room_id: str | None = None
    room_type: str | None = None
    building: str | None = None
    facilities: list[str] = field(default_factory=list)
    priority: Priority = Priority.MEDIUM
    weight: float = 50.0

    def __post_init__(self) -> None:
        self.priority = Priority(self.priority)
        if isinstance(self.room_type, RoomType):
            self.room_type = self.room_type.value

    @property
    def effective_weight(self) -> float:
        return clamp_weight(self.weight)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RoomPreference":
        return cls(
            room_id=data.get("room_id"),
            room_type=data.get("room_type"),
            building=data.get("building"),
            facilities=list(data.get("facilities") or []),
            priority=Priority(data.get("priority", Priority.MEDIUM.value)),
            weight=float(data.get("weight", 50)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "room_id": self.room_id,
            "room_type": self.room_type,
            "building": self.building,
            "facilities": self.facilities,
            "priority": self.priority.value,
            "weight": self.weight,
        }


@dataclass
class TimePreference:
    """Preferred (or required, when hard) teaching window on one day.

    Day and times are kept as given so that malformed input can be
    reported by the validator; use ``to_time_slot()`` for a checked value.
    """

    day: str
    start_time: str
    end_time: str
    priority: Priority = Priority.MEDIUM
    weight: float = 50.0
    is_hard_constraint: bool = False

    def __post_init__(self) -> None:
        self.priority = Priority(self.priority)
        if isinstance(self.day, Day):
            self.day = self.day.value

    @property
    def effective_weight(self) -> float:
        return clamp_weight(self.weight)

    @property
    def is_well_formed(self) -> bool:
        """True when both times parse and start is before end."""
        if not (is_valid_time(self.start_time) and is_valid_time(self.end_time)):
            return False
        return time_to_minutes(self.start_time) < time_to_minutes(self.end_time)

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end_time)

    @property
    def duration_hours(self) -> float:
        return (self.end_minutes - self.start_minutes) / 60

    def to_time_slot(self) -> TimeSlot:
        """Convert to a TimeSlot.

        Raises:
            InvalidTimeRangeError: If a time is malformed or start is not before end.
            ValueError: If the day is unknown.
        """
        return TimeSlot(day=Day(self.day), start_time=self.start_time, end_time=self.end_time)

    def describe(self) -> str:
        return f"{self.day} {self.start_time}-{self.end_time}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimePreference":
        return cls(
            day=str(data["day"]),
            start_time=str(data["start_time"]),
            end_time=str(data["end_time"]),
            priority=Priority(data.get("priority", Priority.MEDIUM.value)),
            weight=float(data.get("weight", 50)),
            is_hard_constraint=bool(data.get("is_hard_constraint", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "priority": self.priority.value,
            "weight": self.weight,
            "is_hard_constraint": self.is_hard_constraint,
        }


@dataclass
class SubjectPreference:
    """A course a faculty member wants to teach, with their expertise."""

    course_code: str
    expertise_level: ExpertiseLevel = ExpertiseLevel.PROFICIENT
    priority: Priority = Priority.MEDIUM
    weight: float = 50.0

    def __post_init__(self) -> None:
        self.expertise_level = ExpertiseLevel(self.expertise_level)
        self.priority = Priority(self.priority)

    @property
    def effective_weight(self) -> float:
        return clamp_weight(self.weight)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SubjectPreference":
        return cls(
            course_code=str(data["course_code"]),
            expertise_level=ExpertiseLevel(data.get("expertise_level", ExpertiseLevel.PROFICIENT.value)),
            priority=Priority(data.get("priority", Priority.MEDIUM.value)),
            weight=float(data.get("weight", 50)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "course_code": self.course_code,
            "expertise_level": self.expertise_level.value,
            "priority": self.priority.value,
            "weight": self.weight,
        }


@dataclass
class ConstraintCondition:
    """One condition of a preference constraint, e.g. day equals 'Fri'."""

    field: str
    operator: str
    value: Any

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "operator": self.operator, "value": self.value}


@dataclass
class PreferenceConstraint:
    """An explicit constraint declared alongside the preferences."""

    id: str
    type: ConstraintType
    description: str = ""
    is_hard_constraint: bool = False
    priority: int = 0
    conditions: list[ConstraintCondition] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PreferenceConstraint":
        return cls(
            id=str(data["id"]),
            type=ConstraintType(data["type"]),
            description=str(data.get("description", "")),
            is_hard_constraint=bool(data.get("is_hard_constraint", False)),
            priority=int(data.get("priority", 0)),
            conditions=[
                ConstraintCondition(c["field"], c["operator"], c.get("value"))
                for c in data.get("conditions", [])
            ],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "description": self.description,
            "is_hard_constraint": self.is_hard_constraint,
            "priority": self.priority,
            "conditions": [c.to_dict() for c in self.conditions],
        }


@dataclass
class FacultyPreferences:
    """All declared preferences of one faculty member."""

    faculty_id: str
    room_preferences: list[RoomPreference] = field(default_factory=list)
    time_preferences: list[TimePreference] = field(default_factory=list)
    subject_preferences: list[SubjectPreference] = field(default_factory=list)
    constraints: list[PreferenceConstraint] = field(default_factory=list)

    @property
    def total_preferences(self) -> int:
        return len(self.room_preferences) + len(self.time_preferences) + len(self.subject_preferences)

    @property
    def is_empty(self) -> bool:
        return self.total_preferences == 0

    def get_subject_preference(self, course_code: str) -> SubjectPreference | None:
        return next((p for p in self.subject_preferences if p.course_code == course_code), None)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FacultyPreferences":
        """Create preferences from a dictionary."""
        return cls(
            faculty_id=str(data["faculty_id"]),
            room_preferences=[RoomPreference.from_dict(p) for p in data.get("room_preferences", [])],
            time_preferences=[TimePreference.from_dict(p) for p in data.get("time_preferences", [])],
            subject_preferences=[
                SubjectPreference.from_dict(p) for p in data.get("subject_preferences", [])
            ],
            constraints=[PreferenceConstraint.from_dict(c) for c in data.get("constraints", [])],
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert preferences to dictionary."""
        return {
            "faculty_id": self.faculty_id,
            "room_preferences": [p.to_dict() for p in self.room_preferences],
            "time_preferences": [p.to_dict() for p in self.time_preferences],
            "subject_preferences": [p.to_dict() for p in self.subject_preferences],
            "constraints": [c.to_dict() for c in self.constraints],
        }


def calculate_preference_completeness(preferences: FacultyPreferences) -> int:
    """Percentage of the room, time and subject categories that are filled in."""
    filled = sum(
        1
        for category in (
            preferences.room_preferences,
            preferences.time_preferences,
            preferences.subject_preferences,
        )
        if category
    )
    return round(filled / 3 * 100)


@dataclass
class PreferenceScore:
    """Score of one preference category for one assignment."""

    score: float
    matched_preferences: list[str] = field(default_factory=list)
    violated_constraints: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": round(self.score, 2),
            "matched_preferences": self.matched_preferences,
            "violated_constraints": self.violated_constraints,
            "suggestions": self.suggestions,
        }


@dataclass
class PreferenceBreakdown:
    """Match and violation counts behind an overall preference score."""

    room_matches: int = 0
    time_matches: int = 0
    subject_matches: int = 0
    total_preferences: int = 0
    constraint_violations: int = 0

    @property
    def total_matches(self) -> int:
        return self.room_matches + self.time_matches + self.subject_matches

    def to_dict(self) -> dict[str, int]:
        return {
            "room_matches": self.room_matches,
            "time_matches": self.time_matches,
            "subject_matches": self.subject_matches,
            "total_preferences": self.total_preferences,
            "constraint_violations": self.constraint_violations,
        }


@dataclass
class OverallPreferenceScore:
    """Combined room, time and subject preference score."""

    room_score: float
    time_score: float
    subject_score: float
    overall_score: int
    satisfaction_level: SatisfactionLevel
    breakdown: PreferenceBreakdown = field(default_factory=PreferenceBreakdown)

    def to_dict(self) -> dict[str, Any]:
        return {
            "room_score": round(self.room_score, 2),
            "time_score": round(self.time_score, 2),
            "subject_score": round(self.subject_score, 2),
            "overall_score": self.overall_score,
            "satisfaction_level": self.satisfaction_level.value,
            "breakdown": self.breakdown.to_dict(),
        }


class ConflictKind(str, Enum):
    """Category of a preference conflict."""

    TIME = "time"
    RESOURCE = "resource"
    CONSTRAINT = "constraint"


@dataclass
class Conflict:
    """A problem found in a faculty member's preference set.

    One shape for all categories: ``kind`` says which, ``type`` is the
    specific problem (e.g. 'overlap', 'facility_missing', 'hard_constraint').
    """

    kind: ConflictKind
    type: str
    severity: Severity
    description: str
    affected_entities: list[str] = field(default_factory=list)
    affected_time_slots: list[dict[str, str]] = field(default_factory=list)
    recommended_action: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "type": self.type,
            "severity": self.severity.value,
            "description": self.description,
            "affected_entities": self.affected_entities,
            "affected_time_slots": self.affected_time_slots,
            "recommended_action": self.recommended_action,
        }


@dataclass
class ConflictSuggestion:
    """Advisory text for resolving a category of conflicts."""

    type: str
    description: str
    suggested_changes: list[str] = field(default_factory=list)
    impact: Severity = Severity.MEDIUM

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "description": self.description,
            "suggested_changes": self.suggested_changes,
            "impact": self.impact.value,
        }


@dataclass
class ConflictDetectionResult:
    """Conflicts found in one faculty member's preferences."""

    time_conflicts: list[Conflict] = field(default_factory=list)
    resource_conflicts: list[Conflict] = field(default_factory=list)
    constraint_violations: list[Conflict] = field(default_factory=list)
    suggestions: list[ConflictSuggestion] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.time_conflicts or self.resource_conflicts or self.constraint_violations)

    @property
    def all_conflicts(self) -> list[Conflict]:
        return [*self.time_conflicts, *self.resource_conflicts, *self.constraint_violations]

    @property
    def conflict_count(self) -> int:
        return len(self.all_conflicts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "has_conflicts": self.has_conflicts,
            "time_conflicts": [c.to_dict() for c in self.time_conflicts],
            "resource_conflicts": [c.to_dict() for c in self.resource_conflicts],
            "constraint_violations": [c.to_dict() for c in self.constraint_violations],
            "suggestions": [s.to_dict() for s in self.suggestions],
        }


@dataclass
class PreferenceValidationError:
    field: str
    message: str
    code: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message, "code": self.code}


@dataclass
class PreferenceValidationWarning:
    field: str
    message: str
    suggestion: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "message": self.message, "suggestion": self.suggestion}


@dataclass
class PreferenceValidationResult:
    """Field-level errors and warnings for a preference set."""

    errors: list[PreferenceValidationError] = field(default_factory=list)
    warnings: list[PreferenceValidationWarning] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def merge(self, other: "PreferenceValidationResult") -> "PreferenceValidationResult":
        return PreferenceValidationResult(
            errors=[*self.errors, *other.errors],
            warnings=[*self.warnings, *other.warnings],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }
