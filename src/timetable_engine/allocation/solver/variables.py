"""CP-SAT variable creation with domain reduction."""

from ortools.sat.python import cp_model

from ...models import Room, TimeSlot
from ..models import PlacementUnit


class VariableManager:
    """Creates one boolean per (unit, slot, compatible room) triple."""

    def __init__(
        self,
        model: cp_model.CpModel,
        units: list[PlacementUnit],
        rooms: list[Room],
        time_slots: list[TimeSlot],
    ):
        self.model = model
        self.units = units
        self.rooms = rooms
        self.time_slots = time_slots

        # x[(unit_id, slot_idx, room_id)] = BoolVar
        self.x: dict[tuple[str, int, str], cp_model.IntVar] = {}

        # unit_id -> number of hours to place
        self.unit_hours: dict[str, int] = {}

    def create_variables(self) -> dict:
        """
        Create decision variables.

        Returns a dictionary containing:
        - 'x': Assignment indicators
        - 'unit_hours': Hours to place per unit
        """
        for unit in self.units:
            if unit.hours <= 0:
                continue
            self.unit_hours[unit.id] = unit.hours

            # Rooms of the wrong type never get a variable
            allowed_rooms = [room for room in self.rooms if unit.accepts(room)]
            if not allowed_rooms:
                continue

            for slot_idx in range(len(self.time_slots)):
                for room in allowed_rooms:
                    var_name = f"x_{unit.id}_s{slot_idx}_{room.id}"
                    self.x[(unit.id, slot_idx, room.id)] = self.model.NewBoolVar(var_name)

        return {
            "x": self.x,
            "unit_hours": self.unit_hours,
        }
