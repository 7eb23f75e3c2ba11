"""Full-timetable generation over courses, rooms, faculty and a time grid."""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any

from ..constants import DEFAULT_TIME_LIMIT
from ..models import Course, Faculty, Room, ScheduledSlot, SessionType, TimeSlot
from ..utils import course_sort_key, shuffle_time_slots, sort_time_slots
from .config import DEFAULT_CONFIG, AllocationConfig
from .engine import AllocationEngine
from .faculty import FacultyAssigner
from .models import AllocationMetrics, AllocationResult, PlacementUnit
from .requirements import RequirementDeriver
from .strategies import GenerationMethod, GenerationStrategy, get_strategy
from .validator import ScheduleValidator, ValidationReport

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Everything produced by one generation run.

    Results are accumulated in memory; persisting them as one batch is
    left to the caller.
    """

    method: GenerationMethod
    results: list[AllocationResult] = field(default_factory=list)
    slots: list[ScheduledSlot] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    metrics: AllocationMetrics | None = None
    validation: ValidationReport | None = None

    @property
    def total_scheduled(self) -> int:
        return len(self.slots)

    def to_dict(self) -> dict[str, Any]:
        """Convert generation result to dictionary."""
        return {
            "method": self.method.value,
            "total_scheduled": self.total_scheduled,
            "slots": [s.to_dict() for s in self.slots],
            "results": [r.to_dict() for r in self.results],
            "warnings": self.warnings,
            "metrics": self.metrics.to_dict() if self.metrics else None,
            "validation": self.validation.to_dict() if self.validation else None,
        }


class ScheduleOrchestrator:
    """
    Drives generation of a whole timetable.

    Courses are ordered by difficulty to place, each course's lecture
    hours and lab hours are placed as separate units, and every placed
    hour is assigned a faculty member. A course that cannot get all its
    hours is reported in the warnings; generation always continues.
    """

    def __init__(
        self,
        engine: AllocationEngine,
        deriver: RequirementDeriver | None = None,
        faculty_assigner: FacultyAssigner | None = None,
        validator: ScheduleValidator | None = None,
        strategy: GenerationStrategy | None = None,
        shuffle_seed: int | None = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            engine: Allocation engine owning the occupancy map for the run.
            deriver: Requirement deriver.
            faculty_assigner: Faculty assigner; without one, hours have no faculty.
            validator: Validator run over the produced slots, if given.
            strategy: Generation strategy; greedy heuristic by default.
            shuffle_seed: If set, the sorted grid is shuffled with this seed.
        """
        self.engine = engine
        self.deriver = deriver or RequirementDeriver()
        self.faculty_assigner = faculty_assigner or FacultyAssigner([])
        self.validator = validator
        self.strategy = strategy or get_strategy(GenerationMethod.HEURISTIC)
        self.shuffle_seed = shuffle_seed

        self._placed: dict[str, int] = defaultdict(int)
        # course id -> used 'day|start' keys
        self._used_slots: dict[str, set[str]] = defaultdict(set)
        self._results: list[AllocationResult] = []
        self._slots: list[ScheduledSlot] = []

    @classmethod
    def create(
        cls,
        rooms: list[Room],
        time_slots: list[TimeSlot],
        faculty: list[Faculty] | None = None,
        config: AllocationConfig = DEFAULT_CONFIG,
        method: GenerationMethod | str = GenerationMethod.HEURISTIC,
        shuffle_seed: int | None = None,
        time_limit: int = DEFAULT_TIME_LIMIT,
        validate: bool = True,
    ) -> "ScheduleOrchestrator":
        """Build an orchestrator with fresh, exclusively owned components."""
        return cls(
            engine=AllocationEngine(rooms, len(time_slots), config),
            deriver=RequirementDeriver(),
            faculty_assigner=FacultyAssigner(faculty or []),
            validator=ScheduleValidator() if validate else None,
            strategy=get_strategy(method, time_limit),
            shuffle_seed=shuffle_seed,
        )

    @property
    def method(self) -> GenerationMethod:
        return self.strategy.method

    def allocate_rooms_for_timetable(
        self,
        courses: list[Course],
        rooms: list[Room],
        time_slots: list[TimeSlot],
    ) -> list[AllocationResult]:
        """Place all courses and return the accepted allocations in order."""
        return self.generate(courses, rooms, time_slots).results

    def generate(
        self,
        courses: list[Course],
        rooms: list[Room],
        time_slots: list[TimeSlot],
    ) -> GenerationResult:
        """
        Run a complete generation.

        Args:
            courses: Courses to place.
            rooms: Room inventory.
            time_slots: Time grid.

        Returns:
            GenerationResult with allocations, slots, warnings, metrics and
            (if a validator is configured) the validation report.
        """
        self.reset()
        self.engine.tracker.total_slots = len(time_slots)
        self.faculty_assigner.build_expertise(courses)

        grid = self.order_time_slots(time_slots)
        units = self.build_units(courses)
        logger.info(
            f"Generating timetable ({self.method.value}): {len(units)} units, "
            f"{len(rooms)} rooms, {len(grid)} time slots"
        )

        self.strategy.run(self, units, rooms, grid)

        warnings = self._collect_warnings(units)
        result = GenerationResult(
            method=self.method,
            results=list(self._results),
            slots=list(self._slots),
            warnings=warnings,
            metrics=self.engine.generate_metrics(),
        )
        if self.validator is not None:
            result.validation = self.validator.validate_timetable(
                result.slots, courses, self.faculty_assigner.faculty, rooms
            )

        total_hours = sum(u.hours for u in units)
        logger.info(f"Scheduled {len(self._slots)} of {total_hours} hours")
        return result

    def order_time_slots(self, time_slots: list[TimeSlot]) -> list[TimeSlot]:
        """Deterministic day/time order, or a seeded shuffle when requested."""
        if self.shuffle_seed is None:
            return sort_time_slots(time_slots)
        return shuffle_time_slots(time_slots, self.shuffle_seed)

    def build_units(self, courses: list[Course]) -> list[PlacementUnit]:
        """Lecture then lab units for each course, hardest courses first."""
        units = []
        for course in sorted(courses, key=course_sort_key):
            if course.lecture_hours > 0:
                units.append(
                    PlacementUnit(
                        course=course,
                        session_type=SessionType.LECTURE,
                        requirements=self.deriver.derive_lecture(course),
                        hours=course.lecture_hours,
                    )
                )
            if course.lab_hours > 0:
                units.append(
                    PlacementUnit(
                        course=course,
                        session_type=SessionType.LAB,
                        requirements=self.deriver.derive_lab(course),
                        hours=course.lab_hours,
                    )
                )
        return units

    def placed_hours(self, unit: PlacementUnit) -> int:
        return self._placed[unit.id]

    def place_hour(
        self,
        unit: PlacementUnit,
        time_slot: TimeSlot,
        rooms: list[Room],
        room: Room | None = None,
    ) -> AllocationResult | None:
        """
        Try to place one hour of a unit at a time slot.

        Args:
            unit: Unit being placed.
            time_slot: Candidate slot.
            rooms: Room inventory.
            room: Room fixed in advance (e.g. by the solver); best free
                  compatible room otherwise.

        Returns:
            The accepted AllocationResult, or None if the slot could not be used.
        """
        used = self._used_slots[unit.course.id]
        if time_slot.key in used:
            return None

        compatible = [
            r for r in rooms if unit.accepts(r) and self.engine.is_slot_available(r.id, time_slot)
        ]
        if not compatible:
            return None

        faculty = None
        if self.faculty_assigner.has_faculty:
            faculty = self.faculty_assigner.find_best_faculty(unit.course, time_slot)
            if faculty is None:
                return None

        if room is None:
            result = self.engine.allocate_room(unit.requirements, time_slot, compatible)
        else:
            result = self.engine.assign_room(unit.requirements, time_slot, room, compatible)
        if result.selected_room is None:
            return None

        result.session_type = unit.session_type
        if faculty is not None:
            self.faculty_assigner.record_assignment(faculty, time_slot, unit.course.id)
            result.faculty_id = faculty.id

        used.add(time_slot.key)
        self._placed[unit.id] += 1
        self._results.append(result)
        self._slots.append(
            ScheduledSlot(
                course_id=unit.course.id,
                room_id=result.selected_room.id,
                faculty_id=result.faculty_id,
                time_slot=time_slot,
                session_type=unit.session_type,
            )
        )
        return result

    def _collect_warnings(self, units: list[PlacementUnit]) -> list[str]:
        warnings = []
        for unit in units:
            placed = self._placed[unit.id]
            if placed < unit.hours:
                message = (
                    f"Course {unit.course.code} only scheduled {placed}/{unit.hours} "
                    f"{unit.session_type.value} hours"
                )
                logger.warning(message)
                warnings.append(message)
        return warnings

    def get_metrics(self) -> AllocationMetrics:
        return self.engine.generate_metrics()

    def get_detailed_report(self) -> dict[str, Any]:
        """Metrics, balance, rebalancing advice and per-room efficiency."""
        tracker = self.engine.tracker
        suggestions = tracker.get_rebalancing_suggestions()
        return {
            "metrics": self.get_metrics().to_dict(),
            "utilization_balance": tracker.get_utilization_balance().to_dict(),
            "needs_rebalancing": tracker.needs_rebalancing(),
            "rebalancing_suggestions": suggestions.suggested_actions,
            "room_efficiency": {
                room.id: round(tracker.get_utilization_efficiency(room.id), 2)
                for room in tracker.rooms
            },
            "faculty_workload": self.faculty_assigner.get_workloads(),
        }

    def reset(self) -> None:
        """Clear all per-run state, including engine and faculty loads."""
        self.engine.reset()
        self.faculty_assigner.reset()
        self._placed.clear()
        self._used_slots.clear()
        self._results.clear()
        self._slots.clear()
