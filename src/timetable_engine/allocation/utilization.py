"""Per-room utilization tracking and load balancing."""

import logging
import statistics
from dataclasses import dataclass, field

from ..constants import (
    BALANCING_SPREAD_THRESHOLD,
    HIGH_VARIANCE_STDDEV,
    NEAR_TIE_WINDOW,
    REBALANCE_STDDEV,
)
from ..models import Room, TimeSlot
from .config import DEFAULT_CONFIG, AllocationConfig
from .models import UtilizationBalance

logger = logging.getLogger(__name__)


@dataclass
class RebalancingSuggestions:
    """Rooms to move sessions away from or toward, with advice text."""

    overutilized_rooms: list[Room] = field(default_factory=list)
    underutilized_rooms: list[Room] = field(default_factory=list)
    suggested_actions: list[str] = field(default_factory=list)


class UtilizationTracker:
    """Tracks how many grid slots each room has been assigned in a run.

    Utilization of a room is its assigned slot count as a percentage of
    the total number of slots in the time grid. The rotation counter used
    to break near-ties is owned by the tracker, so identical inputs give
    identical selections.
    """

    def __init__(
        self,
        rooms: list[Room],
        total_slots: int,
        config: AllocationConfig = DEFAULT_CONFIG,
        rotation_seed: int = 0,
    ):
        """Initialize the tracker.

        Args:
            rooms: Rooms to track; all start at zero utilization.
            total_slots: Number of slots in the time grid.
            config: Allocation configuration.
            rotation_seed: Starting value of the tie-break rotation counter.
        """
        self.rooms = list(rooms)
        self.total_slots = total_slots
        self.config = config
        self.rotation_seed = rotation_seed
        self._rotation = rotation_seed
        self._slot_counts: dict[str, int] = {}
        self._utilization: dict[str, float] = {}
        self._initialize()

    def _initialize(self) -> None:
        for room in self.rooms:
            self._slot_counts[room.id] = 0
            self._utilization[room.id] = 0.0

    def get_current_utilization(self, room_id: str) -> float:
        return self._utilization.get(room_id, 0.0)

    def get_slot_count(self, room_id: str) -> int:
        return self._slot_counts.get(room_id, 0)

    def update_utilization(self, room_id: str, time_slot: TimeSlot | None = None) -> None:
        """Record one more slot assigned to a room."""
        count = self._slot_counts.get(room_id, 0) + 1
        self._slot_counts[room_id] = count
        self._utilization[room_id] = count / self.total_slots * 100 if self.total_slots > 0 else 0.0
        if time_slot is not None:
            logger.debug(f"Room {room_id} used at {time_slot}: {self._utilization[room_id]:.1f}%")

    def get_utilization_stats(self) -> dict[str, float]:
        return dict(self._utilization)

    def get_utilization_balance(self) -> UtilizationBalance:
        """Compute spread statistics across all tracked rooms.

        Returns:
            UtilizationBalance; all zeros and balanced when no rooms are tracked.
        """
        values = list(self._utilization.values())
        if not values:
            return UtilizationBalance()

        max_utilization = max(values)
        min_utilization = min(values)
        spread = max_utilization - min_utilization

        return UtilizationBalance(
            max_utilization=max_utilization,
            min_utilization=min_utilization,
            average_utilization=statistics.fmean(values),
            standard_deviation=statistics.pstdev(values),
            is_balanced=spread <= self.config.thresholds.max_utilization_spread,
        )

    def get_lowest_utilized_rooms(self, count: int) -> list[Room]:
        ranked = sorted(self.rooms, key=lambda room: self.get_current_utilization(room.id))
        return ranked[:count]

    def get_underutilized_rooms(self) -> list[Room]:
        """Rooms below the average utilization."""
        average = self.get_utilization_balance().average_utilization
        return [room for room in self.rooms if self.get_current_utilization(room.id) < average]

    def get_overutilized_rooms(self) -> list[Room]:
        """Rooms above average plus half the allowed spread."""
        balance = self.get_utilization_balance()
        threshold = balance.average_utilization + self.config.thresholds.max_utilization_spread / 2
        return [room for room in self.rooms if self.get_current_utilization(room.id) > threshold]

    def select_room_for_balancing(self, candidates: list[Room]) -> Room | None:
        """Pick a room from equally suitable candidates to spread load.

        With balancing enabled, the lowest-utilized candidate wins when the
        candidates differ by more than 10 points; otherwise the tracker
        rotates among candidates within 5 points of the lowest.

        Args:
            candidates: Rooms to choose from.

        Returns:
            Chosen room, or None if there are no candidates.
        """
        if not candidates:
            return None
        if len(candidates) == 1:
            return candidates[0]
        if not self.config.preferences.balance_utilization:
            return candidates[0]

        ranked = sorted(candidates, key=lambda room: self.get_current_utilization(room.id))
        lowest = self.get_current_utilization(ranked[0].id)
        highest = self.get_current_utilization(ranked[-1].id)

        if highest - lowest > BALANCING_SPREAD_THRESHOLD:
            return ranked[0]

        near_tied = [
            room for room in ranked if self.get_current_utilization(room.id) <= lowest + NEAR_TIE_WINDOW
        ]
        index = self._next_rotation_index(len(near_tied))
        return near_tied[index]

    def _next_rotation_index(self, count: int) -> int:
        index = self._rotation % count
        self._rotation += 1
        return index

    def get_utilization_efficiency(self, room_id: str) -> float:
        """Score in [0, 100]; 100 when a room sits exactly at the average."""
        utilization = self.get_current_utilization(room_id)
        balance = self.get_utilization_balance()

        deviation = abs(utilization - balance.average_utilization)
        max_deviation = max(
            balance.max_utilization - balance.average_utilization,
            balance.average_utilization - balance.min_utilization,
        )
        if max_deviation == 0:
            return 100.0
        return max(0.0, 100 - deviation / max_deviation * 100)

    def needs_rebalancing(self) -> bool:
        balance = self.get_utilization_balance()
        return not balance.is_balanced or balance.standard_deviation > REBALANCE_STDDEV

    def get_rebalancing_suggestions(self) -> RebalancingSuggestions:
        """Build advisory text for moving sessions between rooms."""
        overutilized = self.get_overutilized_rooms()
        underutilized = self.get_underutilized_rooms()
        balance = self.get_utilization_balance()

        actions = []
        if overutilized:
            names = ", ".join(room.name for room in overutilized)
            actions.append(f"Consider moving some sessions from overutilized rooms: {names}")
        if underutilized:
            names = ", ".join(room.name for room in underutilized)
            actions.append(f"Consider scheduling more sessions in underutilized rooms: {names}")
        if balance.standard_deviation > HIGH_VARIANCE_STDDEV:
            actions.append(
                "High utilization variance detected. "
                "Consider redistributing sessions for better balance."
            )

        return RebalancingSuggestions(
            overutilized_rooms=overutilized,
            underutilized_rooms=underutilized,
            suggested_actions=actions,
        )

    def reset_utilization(self) -> None:
        """Clear all counts and restart the rotation counter."""
        self._slot_counts.clear()
        self._utilization.clear()
        self._rotation = self.rotation_seed
        self._initialize()
