"""Core single-assignment room allocation."""

import logging

import pandas as pd

from ..constants import (
    CONFIDENCE_PENALTIES,
    MAX_ALTERNATIVE_ROOMS,
    OVERSIZED_ROOM_FACTOR,
    SUITABILITY_SHARE,
    UTILIZATION_BONUS_FACTOR,
    UTILIZATION_SHARE,
)
from ..models import Room, RoomType, Severity, TimeSlot
from .analyzer import SuitabilityAnalyzer
from .config import DEFAULT_CONFIG, AllocationConfig
from .models import (
    AllocationConflict,
    AllocationConflictType,
    AllocationMetrics,
    AllocationResult,
    CourseRequirements,
    RoomCandidate,
)
from .utilization import UtilizationTracker

logger = logging.getLogger(__name__)

# Combined scores closer than this are treated as tied
SCORE_TIE_EPSILON = 1e-9


class AllocationEngine:
    """Assigns one teaching hour at a time to the best free room.

    The engine owns the occupancy map for a whole generation run, keyed
    by ``roomId|day|startTime``, and the log of results it produced. Call
    ``reset()`` before reusing an instance for an independent run.
    """

    def __init__(
        self,
        rooms: list[Room],
        total_slots: int,
        config: AllocationConfig = DEFAULT_CONFIG,
        analyzer: SuitabilityAnalyzer | None = None,
        tracker: UtilizationTracker | None = None,
    ):
        """Initialize the engine.

        Args:
            rooms: Room inventory tracked for utilization.
            total_slots: Size of the time grid.
            config: Allocation configuration.
            analyzer: Suitability analyzer; one is built from config if omitted.
            tracker: Utilization tracker; one is built from rooms if omitted.
        """
        self.config = config
        self.analyzer = analyzer or SuitabilityAnalyzer(config)
        self.tracker = tracker or UtilizationTracker(rooms, total_slots, config)

        # slot key -> course id
        self._allocated_slots: dict[str, str] = {}
        self._history: list[tuple[AllocationResult, CourseRequirements]] = []

    @staticmethod
    def get_slot_key(room_id: str, time_slot: TimeSlot) -> str:
        return f"{room_id}|{time_slot.day.value}|{time_slot.start_time}"

    def is_slot_available(self, room_id: str, time_slot: TimeSlot) -> bool:
        return self.get_slot_key(room_id, time_slot) not in self._allocated_slots

    def get_allocated_slots(self) -> dict[str, str]:
        """Copy of the occupancy map (slot key -> course id)."""
        return dict(self._allocated_slots)

    @property
    def history(self) -> list[AllocationResult]:
        return [result for result, _ in self._history]

    def allocate_room(
        self,
        requirements: CourseRequirements,
        time_slot: TimeSlot,
        available_rooms: list[Room],
    ) -> AllocationResult:
        """Allocate the best free room for one teaching hour.

        Args:
            requirements: Requirements of the hour being placed.
            time_slot: Desired time slot.
            available_rooms: Candidate rooms.

        Returns:
            AllocationResult; a degraded result with no room when every
            candidate is already taken at this slot.
        """
        candidates = self.evaluate_room_candidates(available_rooms, requirements, time_slot)
        free = [c for c in candidates if c.is_available]
        if not free:
            return self.handle_no_available_rooms(requirements, time_slot)

        ranked = self._rank(self._restrict_overflow(free, requirements))
        selected = self._break_tie(ranked)
        return self._commit(requirements, time_slot, selected, free)

    def assign_room(
        self,
        requirements: CourseRequirements,
        time_slot: TimeSlot,
        room: Room,
        available_rooms: list[Room] | None = None,
    ) -> AllocationResult:
        """Record a room chosen elsewhere (e.g. by a solver) for one hour.

        Conflicts, confidence and reasoning are computed exactly as in
        ``allocate_room``.

        Args:
            requirements: Requirements of the hour being placed.
            time_slot: Time slot of the placement.
            room: Room to assign.
            available_rooms: Rooms considered for alternatives; defaults to ``[room]``.

        Returns:
            AllocationResult; degraded if the room is already taken.
        """
        pool = available_rooms if available_rooms is not None else [room]
        if all(r.id != room.id for r in pool):
            pool = [room, *pool]

        candidates = self.evaluate_room_candidates(pool, requirements, time_slot)
        free = [c for c in candidates if c.is_available]
        chosen = next((c for c in free if c.room.id == room.id), None)
        if chosen is None:
            return self.handle_no_available_rooms(requirements, time_slot)

        return self._commit(requirements, time_slot, chosen, free)

    def evaluate_room_candidates(
        self,
        rooms: list[Room],
        requirements: CourseRequirements,
        time_slot: TimeSlot | None = None,
    ) -> list[RoomCandidate]:
        """Score rooms and flag whether each is free at the time slot."""
        candidates = []
        for room in rooms:
            available = self.is_slot_available(room.id, time_slot) if time_slot else True
            candidates.append(
                RoomCandidate(
                    room=room,
                    suitability=self.analyzer.evaluate_room_suitability(room, requirements),
                    utilization=self.tracker.get_current_utilization(room.id),
                    is_available=available,
                )
            )
        return candidates

    def find_best_room(self, candidates: list[RoomCandidate]) -> Room | None:
        """Pick the highest combined-score room among available candidates.

        Returns:
            Best room, or None for an empty or fully unavailable list.
        """
        available = [c for c in candidates if c.is_available]
        if not available:
            return None
        return self._break_tie(self._rank(available)).room

    def calculate_utilization_score(self, utilization: float) -> float:
        """Reward rooms below the running average, penalize rooms above it."""
        average = self.tracker.get_utilization_balance().average_utilization
        if utilization < average:
            return 100 - (average - utilization)
        return max(0.0, 100 - (utilization - average) * 2)

    def _rank(self, candidates: list[RoomCandidate]) -> list[RoomCandidate]:
        for candidate in candidates:
            candidate.utilization_score = self.calculate_utilization_score(candidate.utilization)
            candidate.combined_score = (
                candidate.suitability.overall_score * SUITABILITY_SHARE
                + candidate.utilization_score * UTILIZATION_SHARE
            )
        return sorted(candidates, key=lambda c: c.combined_score, reverse=True)

    def _break_tie(self, ranked: list[RoomCandidate]) -> RoomCandidate:
        """Let the utilization tracker choose among equally scored leaders."""
        best = ranked[0].combined_score
        leaders = [c for c in ranked if best - c.combined_score <= SCORE_TIE_EPSILON]
        if len(leaders) == 1:
            return leaders[0]
        room = self.tracker.select_room_for_balancing([c.room for c in leaders])
        return next(c for c in leaders if c.room.id == room.id)

    def _restrict_overflow(
        self, candidates: list[RoomCandidate], requirements: CourseRequirements
    ) -> list[RoomCandidate]:
        """Drop undersized rooms while a big-enough room is still free."""
        if self.config.preferences.allow_capacity_overflow:
            return candidates
        fitting = [c for c in candidates if c.room.capacity >= requirements.expected_size]
        return fitting or candidates

    def _commit(
        self,
        requirements: CourseRequirements,
        time_slot: TimeSlot,
        selected: RoomCandidate,
        free: list[RoomCandidate],
    ) -> AllocationResult:
        room = selected.room
        conflicts = self.detect_potential_conflicts(room, requirements, time_slot)
        confidence = self.calculate_confidence(selected, conflicts)
        reasoning = self.generate_reasoning(selected, conflicts)

        alternatives = sorted(
            (c for c in free if c.room.id != room.id),
            key=lambda c: c.suitability.overall_score,
            reverse=True,
        )[:MAX_ALTERNATIVE_ROOMS]

        self._allocated_slots[self.get_slot_key(room.id, time_slot)] = requirements.course_id
        self.tracker.update_utilization(room.id, time_slot)

        result = AllocationResult(
            selected_room=room,
            confidence=confidence,
            alternative_rooms=[c.room for c in alternatives],
            conflicts=conflicts,
            reasoning=reasoning,
            course_id=requirements.course_id,
            time_slot=time_slot,
            suitability=selected.suitability,
        )
        self._history.append((result, requirements))
        logger.debug(
            f"Allocated {requirements.course_id} to {room.id} at {time_slot} "
            f"(confidence {confidence:.1f})"
        )
        return result

    def handle_no_available_rooms(
        self, requirements: CourseRequirements, time_slot: TimeSlot
    ) -> AllocationResult:
        """Build the degraded result for a slot with no free room.

        The result is logged in the history so it counts toward metrics.
        """
        conflict = AllocationConflict(
            type=AllocationConflictType.ROOM_UNAVAILABLE,
            severity=Severity.HIGH,
            description="No suitable rooms available for the requested time slot",
            suggestion="Consider alternative time slots or room modifications",
            time_slot=time_slot,
        )
        result = AllocationResult(
            selected_room=None,
            confidence=0.0,
            conflicts=[conflict],
            reasoning="No rooms available that meet the requirements for this time slot",
            course_id=requirements.course_id,
            time_slot=time_slot,
        )
        self._history.append((result, requirements))
        return result

    def detect_potential_conflicts(
        self, room: Room, requirements: CourseRequirements, time_slot: TimeSlot
    ) -> list[AllocationConflict]:
        """Check capacity, type and facilities of the selected room."""
        conflicts = []
        size = requirements.expected_size

        if room.capacity < size:
            conflicts.append(
                AllocationConflict(
                    type=AllocationConflictType.CAPACITY_MISMATCH,
                    severity=Severity.HIGH,
                    description=(
                        f"Room capacity ({room.capacity}) is less than expected class size ({size})"
                    ),
                    suggestion="Consider a larger room or split the class",
                    time_slot=time_slot,
                )
            )
        elif room.capacity > size * OVERSIZED_ROOM_FACTOR:
            conflicts.append(
                AllocationConflict(
                    type=AllocationConflictType.CAPACITY_MISMATCH,
                    severity=Severity.LOW,
                    description=(
                        f"Room capacity ({room.capacity}) is significantly larger "
                        f"than needed ({size})"
                    ),
                    suggestion="Consider a smaller room for better utilization",
                    time_slot=time_slot,
                )
            )

        required_types = requirements.required_room_types
        if not self.analyzer.check_room_type_compatibility(room.type, required_types):
            if requirements.needs_lab and room.type != RoomType.LAB:
                conflicts.append(
                    AllocationConflict(
                        type=AllocationConflictType.TYPE_INCOMPATIBLE,
                        severity=Severity.HIGH,
                        description=(
                            f"Course requires a lab room but {room.name} is a "
                            f"{room.type.value} room"
                        ),
                        suggestion="Allocate to a laboratory room",
                        time_slot=time_slot,
                    )
                )
            else:
                wanted = ", ".join(t.value for t in required_types)
                conflicts.append(
                    AllocationConflict(
                        type=AllocationConflictType.TYPE_INCOMPATIBLE,
                        severity=Severity.MEDIUM,
                        description=(
                            f"Room type ({room.type.value}) doesn't match preferred types ({wanted})"
                        ),
                        suggestion="Consider rooms of the preferred type",
                        time_slot=time_slot,
                    )
                )

        missing = self.analyzer.missing_facilities(room, requirements)
        if missing:
            conflicts.append(
                AllocationConflict(
                    type=AllocationConflictType.FACILITY_MISSING,
                    severity=Severity.HIGH if len(missing) > 1 else Severity.MEDIUM,
                    description=f"Room is missing required facilities: {', '.join(missing)}",
                    suggestion="Find a room with the required facilities",
                    time_slot=time_slot,
                )
            )

        return conflicts

    def calculate_confidence(
        self, candidate: RoomCandidate, conflicts: list[AllocationConflict]
    ) -> float:
        """Suitability minus conflict penalties plus a small balance term, in [0, 100]."""
        confidence = candidate.suitability.overall_score
        for conflict in conflicts:
            confidence -= CONFIDENCE_PENALTIES[conflict.severity.value]

        utilization_score = self.calculate_utilization_score(candidate.utilization)
        confidence += (utilization_score - 50) * UTILIZATION_BONUS_FACTOR
        return max(0.0, min(100.0, confidence))

    @staticmethod
    def generate_reasoning(candidate: RoomCandidate, conflicts: list[AllocationConflict]) -> str:
        score = candidate.suitability
        reasons = []

        if score.overall_score >= 80:
            reasons.append("Excellent match for course requirements")
        elif score.overall_score >= 60:
            reasons.append("Good match for course requirements")
        else:
            reasons.append("Acceptable match with some compromises")

        if score.capacity_score >= 80:
            reasons.append("optimal room capacity for class size")
        elif score.capacity_score >= 60:
            reasons.append("adequate room capacity")
        else:
            reasons.append("suboptimal capacity match")

        if candidate.utilization < 50:
            reasons.append("helps balance room utilization")
        elif candidate.utilization > 80:
            reasons.append("room is heavily utilized")

        if conflicts:
            reasons.append(f"{len(conflicts)} potential conflict(s) identified")

        return ", ".join(reasons)

    def generate_metrics(self) -> AllocationMetrics:
        """Summarize the results recorded since the last reset."""
        balance = self.tracker.get_utilization_balance()
        thresholds = self.config.thresholds

        rows = []
        for result, requirements in self._history:
            conflict_types = {c.type for c in result.conflicts}
            room = result.selected_room
            rows.append(
                {
                    "room_id": room.id if room else None,
                    "successful": room is not None,
                    "efficiency": (
                        requirements.expected_size / room.capacity * 100
                        if room and room.capacity > 0
                        else None
                    ),
                    "type_match": room is not None
                    and AllocationConflictType.TYPE_INCOMPATIBLE not in conflict_types,
                    "facility_match": room is not None
                    and AllocationConflictType.FACILITY_MISSING not in conflict_types,
                    "has_conflicts": bool(result.conflicts),
                }
            )

        balance_score = 100 - balance.standard_deviation if balance.is_balanced else 50.0
        metrics = AllocationMetrics(
            room_utilization=self.tracker.get_utilization_stats(),
            balance_score=balance_score,
            type_match_accuracy=100.0,
            facility_match_rate=100.0,
        )
        if not rows:
            return metrics

        df = pd.DataFrame(rows)
        placed = df[df["successful"]]
        efficiency = placed.groupby("room_id")["efficiency"].mean()

        metrics.capacity_efficiency = {room_id: float(v) for room_id, v in efficiency.items()}
        metrics.type_match_accuracy = float(df["type_match"].mean() * 100)
        metrics.facility_match_rate = float(df["facility_match"].mean() * 100)
        metrics.conflict_rate = float(df["has_conflicts"].mean() * 100)
        metrics.total_allocations = len(df)
        metrics.successful_allocations = int(df["successful"].sum())

        if not efficiency.empty:
            metrics.capacity_efficiency_ok = bool(
                efficiency.mean() / 100 >= thresholds.min_capacity_efficiency
            )
        metrics.conflict_rate_ok = metrics.conflict_rate / 100 <= thresholds.max_conflict_rate
        return metrics

    def reset(self) -> None:
        """Clear occupancy, history and utilization for a fresh run."""
        self._allocated_slots.clear()
        self._history.clear()
        self.tracker.reset_utilization()
