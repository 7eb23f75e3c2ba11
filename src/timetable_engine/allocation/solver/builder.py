"""CP-SAT model construction."""

from collections import defaultdict

from ortools.sat.python import cp_model

from ...models import Room, TimeSlot
from ..analyzer import SuitabilityAnalyzer
from ..models import PlacementUnit
from .variables import VariableManager


class ModelBuilder:
    """Builds the placement model.

    Hard constraints: each unit gets at most its hour count, each room
    hosts at most one hour per slot, and a course never has two hours at
    the same slot. When the faculty pool size is known, no slot carries
    more hours than there are faculty members.

    The objective places as many hours as possible first, then prefers
    more suitable rooms.
    """

    def __init__(
        self,
        units: list[PlacementUnit],
        rooms: list[Room],
        time_slots: list[TimeSlot],
        analyzer: SuitabilityAnalyzer,
        faculty_count: int | None = None,
    ):
        self.units = units
        self.rooms = rooms
        self.time_slots = time_slots
        self.analyzer = analyzer
        self.faculty_count = faculty_count

        self.model = cp_model.CpModel()
        self.variables: dict = {}
        self.variable_manager: VariableManager | None = None

        self._unit_by_id = {u.id: u for u in units}
        self._room_by_id = {r.id: r for r in rooms}

    def build(self) -> cp_model.CpModel:
        """
        Build the complete CP-SAT model.

        Returns the configured CpModel ready for solving.
        """
        self.variable_manager = VariableManager(self.model, self.units, self.rooms, self.time_slots)
        self.variables = self.variable_manager.create_variables()

        self._add_hour_limits()
        self._add_room_exclusivity()
        self._add_course_exclusivity()
        if self.faculty_count is not None:
            self._add_faculty_capacity()
        self._add_objective()

        return self.model

    def _add_hour_limits(self) -> None:
        """Each unit is placed for at most its required hours."""
        by_unit = defaultdict(list)
        for (unit_id, _, _), var in self.variables["x"].items():
            by_unit[unit_id].append(var)

        for unit_id, unit_vars in by_unit.items():
            self.model.Add(sum(unit_vars) <= self.variables["unit_hours"][unit_id])

    def _add_room_exclusivity(self) -> None:
        """A room hosts at most one hour per slot."""
        by_room_slot = defaultdict(list)
        for (_, slot_idx, room_id), var in self.variables["x"].items():
            by_room_slot[(room_id, slot_idx)].append(var)

        for slot_vars in by_room_slot.values():
            if len(slot_vars) > 1:
                self.model.AddAtMostOne(slot_vars)

    def _add_course_exclusivity(self) -> None:
        """A course has at most one hour per slot, lecture and lab together."""
        by_course_slot = defaultdict(list)
        for (unit_id, slot_idx, _), var in self.variables["x"].items():
            course_id = self._unit_by_id[unit_id].course.id
            by_course_slot[(course_id, slot_idx)].append(var)

        for slot_vars in by_course_slot.values():
            if len(slot_vars) > 1:
                self.model.AddAtMostOne(slot_vars)

    def _add_faculty_capacity(self) -> None:
        """Never place more simultaneous hours than there are faculty."""
        by_slot = defaultdict(list)
        for (_, slot_idx, _), var in self.variables["x"].items():
            by_slot[slot_idx].append(var)

        for slot_vars in by_slot.values():
            self.model.Add(sum(slot_vars) <= self.faculty_count)

    def _add_objective(self) -> None:
        """Maximize placed hours, then total room suitability."""
        x = self.variables["x"]
        if not x:
            return

        total_hours = sum(self.variables["unit_hours"].values())
        # One extra placed hour outweighs any suitability difference
        placement_bonus = 100 * total_hours + 1

        suitability: dict[tuple[str, str], int] = {}
        terms = []
        for (unit_id, _, room_id), var in x.items():
            key = (unit_id, room_id)
            if key not in suitability:
                score = self.analyzer.evaluate_room_suitability(
                    self._room_by_id[room_id], self._unit_by_id[unit_id].requirements
                )
                suitability[key] = int(round(score.overall_score))
            terms.append(var * (placement_bonus + suitability[key]))

        self.model.Maximize(sum(terms))

    def get_variables(self) -> dict:
        """Get the variables dictionary."""
        return self.variables

    def get_model(self) -> cp_model.CpModel:
        """Get the CP-SAT model."""
        return self.model
