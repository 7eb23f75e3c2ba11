"""Solution extraction from the CP-SAT solver."""

from dataclasses import dataclass

from ortools.sat.python import cp_model

from ...models import Room, TimeSlot
from ..models import PlacementUnit


@dataclass(frozen=True)
class PlannedHour:
    """One hour the solver decided to place."""

    unit: PlacementUnit
    time_slot: TimeSlot
    room: Room
    slot_index: int


class SolutionExtractor:
    """Reads the chosen (unit, slot, room) triples from a solved model."""

    def __init__(
        self,
        solver: cp_model.CpSolver,
        variables: dict,
        units: list[PlacementUnit],
        rooms: list[Room],
        time_slots: list[TimeSlot],
    ):
        self.solver = solver
        self.variables = variables
        self.units = units
        self.time_slots = time_slots

        self._unit_order = {u.id: idx for idx, u in enumerate(units)}
        self._unit_by_id = {u.id: u for u in units}
        self._room_by_id = {r.id: r for r in rooms}

    def extract(self) -> list[PlannedHour]:
        """
        Extract planned hours.

        Returns hours ordered by unit order, then grid order, so replaying
        them is deterministic.
        """
        planned = []
        for (unit_id, slot_idx, room_id), var in self.variables["x"].items():
            if self.solver.Value(var) != 1:
                continue
            planned.append(
                PlannedHour(
                    unit=self._unit_by_id[unit_id],
                    time_slot=self.time_slots[slot_idx],
                    room=self._room_by_id[room_id],
                    slot_index=slot_idx,
                )
            )

        planned.sort(key=lambda p: (self._unit_order[p.unit.id], p.slot_index))
        return planned
