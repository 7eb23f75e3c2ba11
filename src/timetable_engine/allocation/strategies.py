"""Generation strategies selectable on the schedule orchestrator."""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING

from ortools.sat.python import cp_model

from ..constants import DEFAULT_TIME_LIMIT, SOLVER_RANDOM_SEED
from ..exceptions import ConfigurationError
from ..models import Room, TimeSlot
from .models import PlacementUnit
from .solver import ModelBuilder, SolutionExtractor

if TYPE_CHECKING:
    from .orchestrator import ScheduleOrchestrator

logger = logging.getLogger(__name__)


class GenerationMethod(str, Enum):
    """Available timetable generation methods."""

    HEURISTIC = "heuristic"
    CP_SAT = "cp_sat"


class GenerationStrategy(ABC):
    """Places every unit's hours through the orchestrator."""

    method: GenerationMethod

    @abstractmethod
    def run(
        self,
        orchestrator: "ScheduleOrchestrator",
        units: list[PlacementUnit],
        rooms: list[Room],
        time_slots: list[TimeSlot],
    ) -> None:
        """Place hours for all units, in order."""


class HeuristicStrategy(GenerationStrategy):
    """Greedy walk: each unit takes the first free slots of the grid in order."""

    method = GenerationMethod.HEURISTIC

    def run(
        self,
        orchestrator: "ScheduleOrchestrator",
        units: list[PlacementUnit],
        rooms: list[Room],
        time_slots: list[TimeSlot],
    ) -> None:
        for unit in units:
            for time_slot in time_slots:
                if orchestrator.placed_hours(unit) >= unit.hours:
                    break
                orchestrator.place_hour(unit, time_slot, rooms)


class CpSatStrategy(GenerationStrategy):
    """Solves room and slot choice globally with OR-Tools CP-SAT.

    The solver only decides (unit, slot, room); the chosen hours are then
    replayed through the allocation engine so that conflicts, confidence
    and utilization are computed exactly as for the greedy walk. Faculty
    are assigned during the replay; hours the replay cannot place are
    handed to the greedy walk afterwards.
    """

    method = GenerationMethod.CP_SAT

    def __init__(self, time_limit: int = DEFAULT_TIME_LIMIT, random_seed: int = SOLVER_RANDOM_SEED):
        self.time_limit = time_limit
        self.random_seed = random_seed

    def run(
        self,
        orchestrator: "ScheduleOrchestrator",
        units: list[PlacementUnit],
        rooms: list[Room],
        time_slots: list[TimeSlot],
    ) -> None:
        if not units or not rooms or not time_slots:
            logger.warning("Nothing to solve: no units, rooms or time slots")
            return

        assigner = orchestrator.faculty_assigner
        faculty_count = len(assigner.faculty) if assigner.has_faculty else None

        builder = ModelBuilder(units, rooms, time_slots, orchestrator.engine.analyzer, faculty_count)
        model = builder.build()
        variables = builder.get_variables()

        # Single worker with a fixed seed keeps runs reproducible
        solver = cp_model.CpSolver()
        solver.parameters.max_time_in_seconds = self.time_limit
        solver.parameters.num_workers = 1
        solver.parameters.random_seed = self.random_seed
        solver.parameters.log_search_progress = False

        logger.info(f"Starting CP-SAT solver with {len(variables['x'])} variables...")
        status = solver.Solve(model)

        if status == cp_model.OPTIMAL:
            logger.info("Found optimal solution")
        elif status == cp_model.FEASIBLE:
            logger.info("Found feasible solution (may not be optimal)")
        else:
            logger.warning(
                f"Solver returned status: {solver.StatusName(status)}; falling back to heuristic"
            )
            HeuristicStrategy().run(orchestrator, units, rooms, time_slots)
            return

        extractor = SolutionExtractor(solver, variables, units, rooms, time_slots)
        for planned in extractor.extract():
            result = orchestrator.place_hour(planned.unit, planned.time_slot, rooms, room=planned.room)
            if result is None:
                logger.warning(
                    f"Could not replay {planned.unit.course.code} at {planned.time_slot} "
                    f"in {planned.room.id}"
                )

        short_units = [u for u in units if orchestrator.placed_hours(u) < u.hours]
        if short_units:
            logger.info(f"Placing remaining hours of {len(short_units)} units with the heuristic")
            HeuristicStrategy().run(orchestrator, short_units, rooms, time_slots)


def get_strategy(method: GenerationMethod | str, time_limit: int = DEFAULT_TIME_LIMIT) -> GenerationStrategy:
    """Create the strategy for a generation method.

    Raises:
        ConfigurationError: If the method is unknown.
    """
    try:
        method = GenerationMethod(method)
    except ValueError as e:
        choices = ", ".join(m.value for m in GenerationMethod)
        raise ConfigurationError("method", method, f"one of {choices}") from e

    if method == GenerationMethod.CP_SAT:
        return CpSatStrategy(time_limit=time_limit)
    return HeuristicStrategy()
