"""Timetable Engine - room, time and faculty allocation for university timetables.

This module places the lecture and lab hours of a course catalog into a
weekly time grid, choosing for every hour the most suitable free room and
a faculty member with spare capacity. Faculty preferences can be scored,
validated and checked for conflicts.

Example usage:
    from timetable_engine import CatalogLoader, ScheduleOrchestrator

    catalog = CatalogLoader("data").load()
    orchestrator = ScheduleOrchestrator.create(
        catalog.rooms, catalog.time_slots, faculty=catalog.faculty
    )
    result = orchestrator.generate(catalog.courses, catalog.rooms, catalog.time_slots)

    print(f"Scheduled hours: {result.total_scheduled}")
    for warning in result.warnings:
        print(warning)

    # Export to JSON
    from timetable_engine.exporters import export_generation_json
    export_generation_json(result, "schedule.json")
"""

from .allocation import (
    AllocationConfig,
    AllocationEngine,
    AllocationResult,
    GenerationMethod,
    GenerationResult,
    ScheduleOrchestrator,
    ScheduleValidator,
    SuitabilityAnalyzer,
    UtilizationTracker,
)
from .catalog import Catalog, CatalogLoader
from .exceptions import (
    CatalogError,
    ConfigurationError,
    InvalidTimeRangeError,
    MissingColumnsError,
    ScheduleFileError,
    TimetableEngineError,
)
from .exporters import (
    CSVExporter,
    JSONExporter,
    TimetableExcelExporter,
    export_generation_json,
    get_exporter,
)
from .models import Course, Day, Faculty, Priority, Room, RoomType, ScheduledSlot, TimeSlot
from .preferences import (
    ConflictDetector,
    FacultyPreferences,
    PreferenceAwareAllocator,
    PreferenceScorer,
    PreferenceValidator,
)

__version__ = "0.1.0"

__all__ = [
    # Generation
    "ScheduleOrchestrator",
    "GenerationMethod",
    "GenerationResult",
    "AllocationEngine",
    "AllocationConfig",
    "AllocationResult",
    "SuitabilityAnalyzer",
    "UtilizationTracker",
    "ScheduleValidator",
    # Preferences
    "FacultyPreferences",
    "PreferenceScorer",
    "ConflictDetector",
    "PreferenceValidator",
    "PreferenceAwareAllocator",
    # Models
    "Course",
    "Room",
    "RoomType",
    "Faculty",
    "Day",
    "Priority",
    "TimeSlot",
    "ScheduledSlot",
    # Catalogs and export
    "Catalog",
    "CatalogLoader",
    "JSONExporter",
    "CSVExporter",
    "TimetableExcelExporter",
    "export_generation_json",
    "get_exporter",
    # Exceptions
    "TimetableEngineError",
    "CatalogError",
    "MissingColumnsError",
    "InvalidTimeRangeError",
    "ConfigurationError",
    "ScheduleFileError",
]
