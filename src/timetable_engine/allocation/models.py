"""Data models produced and consumed by the allocation engine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..models import Course, Priority, Room, RoomType, SessionType, Severity, TimeSlot


class AllocationConflictType(str, Enum):
    """Kinds of problems detected on a single allocation."""

    ROOM_UNAVAILABLE = "room_unavailable"
    CAPACITY_MISMATCH = "capacity_mismatch"
    TYPE_INCOMPATIBLE = "type_incompatible"
    FACILITY_MISSING = "facility_missing"


@dataclass
class CourseRequirements:
    """Structured room requirements derived from a course."""

    course_id: str
    expected_size: int
    required_room_types: list[RoomType]
    required_facilities: list[str] = field(default_factory=list)
    preferred_capacity_range: tuple[int, int] = (0, 0)
    priority: Priority = Priority.MEDIUM

    @property
    def needs_lab(self) -> bool:
        return RoomType.LAB in self.required_room_types

    def to_dict(self) -> dict[str, Any]:
        """Convert requirements to dictionary."""
        return {
            "course_id": self.course_id,
            "expected_size": self.expected_size,
            "required_room_types": [t.value for t in self.required_room_types],
            "required_facilities": self.required_facilities,
            "preferred_capacity_range": list(self.preferred_capacity_range),
            "priority": self.priority.value,
        }


@dataclass
class PlacementUnit:
    """The lecture or lab hours of one course, placed together."""

    course: Course
    session_type: SessionType
    requirements: CourseRequirements
    hours: int

    @property
    def id(self) -> str:
        return f"{self.course.id}:{self.session_type.value}"

    def accepts(self, room: Room) -> bool:
        return room.type in self.requirements.required_room_types


@dataclass(frozen=True)
class SuitabilityScore:
    """Scores of one room against one set of requirements, each in [0, 100]."""

    capacity_score: float
    type_score: float
    facility_score: float
    overall_score: float

    def to_dict(self) -> dict[str, float]:
        """Convert score to dictionary."""
        return {
            "capacity_score": round(self.capacity_score, 2),
            "type_score": round(self.type_score, 2),
            "facility_score": round(self.facility_score, 2),
            "overall_score": self.overall_score,
        }


@dataclass
class AllocationConflict:
    """A problem attached to one allocation result."""

    type: AllocationConflictType
    severity: Severity
    description: str
    suggestion: str | None = None
    time_slot: TimeSlot | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert conflict to dictionary."""
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "description": self.description,
            "suggestion": self.suggestion,
            "time_slot": self.time_slot.to_dict() if self.time_slot else None,
        }


@dataclass
class RoomCandidate:
    """A room scored for one allocation request."""

    room: Room
    suitability: SuitabilityScore
    utilization: float
    utilization_score: float = 0.0
    combined_score: float = 0.0
    is_available: bool = True


@dataclass
class AllocationResult:
    """Outcome of allocating one teaching hour."""

    selected_room: Room | None
    confidence: float
    alternative_rooms: list[Room] = field(default_factory=list)
    conflicts: list[AllocationConflict] = field(default_factory=list)
    reasoning: str = ""
    course_id: str | None = None
    time_slot: TimeSlot | None = None
    session_type: SessionType | None = None
    faculty_id: str | None = None
    suitability: SuitabilityScore | None = None

    @property
    def is_successful(self) -> bool:
        return self.selected_room is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary."""
        return {
            "course_id": self.course_id,
            "selected_room": self.selected_room.id if self.selected_room else None,
            "faculty_id": self.faculty_id,
            "time_slot": self.time_slot.to_dict() if self.time_slot else None,
            "session_type": self.session_type.value if self.session_type else None,
            "confidence": round(self.confidence, 2),
            "alternative_rooms": [room.id for room in self.alternative_rooms],
            "conflicts": [c.to_dict() for c in self.conflicts],
            "reasoning": self.reasoning,
            "suitability": self.suitability.to_dict() if self.suitability else None,
        }


@dataclass(frozen=True)
class UtilizationBalance:
    """Spread statistics of per-room utilization percentages."""

    max_utilization: float = 0.0
    min_utilization: float = 0.0
    average_utilization: float = 0.0
    standard_deviation: float = 0.0
    is_balanced: bool = True

    @property
    def spread(self) -> float:
        return self.max_utilization - self.min_utilization

    def to_dict(self) -> dict[str, Any]:
        """Convert balance to dictionary."""
        return {
            "max_utilization": round(self.max_utilization, 2),
            "min_utilization": round(self.min_utilization, 2),
            "average_utilization": round(self.average_utilization, 2),
            "standard_deviation": round(self.standard_deviation, 2),
            "is_balanced": self.is_balanced,
        }


@dataclass
class AllocationMetrics:
    """Aggregate quality metrics of a generation run."""

    room_utilization: dict[str, float] = field(default_factory=dict)
    capacity_efficiency: dict[str, float] = field(default_factory=dict)
    type_match_accuracy: float = 0.0
    facility_match_rate: float = 0.0
    conflict_rate: float = 0.0
    balance_score: float = 0.0
    total_allocations: int = 0
    successful_allocations: int = 0
    capacity_efficiency_ok: bool = True
    conflict_rate_ok: bool = True

    @property
    def success_rate(self) -> float:
        if self.total_allocations == 0:
            return 0.0
        return 100 * self.successful_allocations / self.total_allocations

    def to_dict(self) -> dict[str, Any]:
        """Convert metrics to dictionary."""
        return {
            "room_utilization": {k: round(v, 2) for k, v in self.room_utilization.items()},
            "capacity_efficiency": {k: round(v, 2) for k, v in self.capacity_efficiency.items()},
            "type_match_accuracy": round(self.type_match_accuracy, 2),
            "facility_match_rate": round(self.facility_match_rate, 2),
            "conflict_rate": round(self.conflict_rate, 2),
            "balance_score": round(self.balance_score, 2),
            "total_allocations": self.total_allocations,
            "successful_allocations": self.successful_allocations,
            "success_rate": round(self.success_rate, 2),
            "capacity_efficiency_ok": self.capacity_efficiency_ok,
            "conflict_rate_ok": self.conflict_rate_ok,
        }
