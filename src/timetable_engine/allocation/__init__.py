"""Room, time and faculty allocation for a weekly timetable.

Main classes:
- ScheduleOrchestrator: Generates a full timetable from catalogs
- AllocationEngine: Places one teaching hour in the best free room
- SuitabilityAnalyzer: Scores a room against course requirements
- UtilizationTracker: Tracks room usage and balances load
- ScheduleValidator: Re-checks a finished slot list

Usage:
    from timetable_engine.allocation import GenerationMethod, ScheduleOrchestrator

    orchestrator = ScheduleOrchestrator.create(rooms, time_slots, faculty=faculty)
    result = orchestrator.generate(courses, rooms, time_slots)
"""

from .analyzer import SuitabilityAnalyzer
from .config import (
    DEFAULT_CONFIG,
    AllocationConfig,
    AllocationPreferences,
    AllocationThresholds,
    AllocationWeights,
    load_allocation_config,
)
from .engine import AllocationEngine
from .faculty import FacultyAssigner
from .models import (
    AllocationConflict,
    AllocationConflictType,
    AllocationMetrics,
    AllocationResult,
    CourseRequirements,
    PlacementUnit,
    RoomCandidate,
    SuitabilityScore,
    UtilizationBalance,
)
from .orchestrator import GenerationResult, ScheduleOrchestrator
from .requirements import RequirementDeriver
from .strategies import (
    CpSatStrategy,
    GenerationMethod,
    GenerationStrategy,
    HeuristicStrategy,
    get_strategy,
)
from .utilization import RebalancingSuggestions, UtilizationTracker
from .validator import (
    ScheduleValidator,
    ValidationIssue,
    ValidationIssueType,
    ValidationReport,
)

__all__ = [
    # Generation
    "ScheduleOrchestrator",
    "GenerationResult",
    "GenerationMethod",
    "GenerationStrategy",
    "HeuristicStrategy",
    "CpSatStrategy",
    "get_strategy",
    # Engine components
    "AllocationEngine",
    "FacultyAssigner",
    "RequirementDeriver",
    "SuitabilityAnalyzer",
    "UtilizationTracker",
    "RebalancingSuggestions",
    # Configuration
    "AllocationConfig",
    "AllocationWeights",
    "AllocationThresholds",
    "AllocationPreferences",
    "DEFAULT_CONFIG",
    "load_allocation_config",
    # Models
    "AllocationConflict",
    "AllocationConflictType",
    "AllocationMetrics",
    "AllocationResult",
    "CourseRequirements",
    "PlacementUnit",
    "RoomCandidate",
    "SuitabilityScore",
    "UtilizationBalance",
    # Validation
    "ScheduleValidator",
    "ValidationIssue",
    "ValidationIssueType",
    "ValidationReport",
]
