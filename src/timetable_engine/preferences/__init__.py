"""Faculty preferences: scoring, conflict detection and validation.

Usage:
    from timetable_engine.preferences import ConflictDetector, FacultyPreferences

    detector = ConflictDetector(rooms, courses, faculty)
    result = detector.detect_conflicts("F1", FacultyPreferences.from_dict(data))
"""

from .conflicts import ConflictDetector
from .enhanced import (
    AlternativeSuggestion,
    PreferenceAllocationResult,
    PreferenceAwareAllocator,
    SatisfactionMetrics,
)
from .models import (
    Conflict,
    ConflictDetectionResult,
    ConflictKind,
    ConflictSuggestion,
    ConstraintCondition,
    ConstraintType,
    ExpertiseLevel,
    FacultyPreferences,
    OverallPreferenceScore,
    PreferenceBreakdown,
    PreferenceConstraint,
    PreferenceScore,
    PreferenceValidationError,
    PreferenceValidationResult,
    PreferenceValidationWarning,
    RoomPreference,
    SatisfactionLevel,
    SubjectPreference,
    TimePreference,
    calculate_preference_completeness,
)
from .scorer import Assignment, PreferenceScorer
from .validator import PreferenceValidator

__all__ = [
    # Services
    "ConflictDetector",
    "PreferenceAwareAllocator",
    "PreferenceScorer",
    "PreferenceValidator",
    "calculate_preference_completeness",
    # Preference models
    "FacultyPreferences",
    "RoomPreference",
    "TimePreference",
    "SubjectPreference",
    "PreferenceConstraint",
    "ConstraintCondition",
    "ConstraintType",
    "ExpertiseLevel",
    # Results
    "Assignment",
    "AlternativeSuggestion",
    "Conflict",
    "ConflictDetectionResult",
    "ConflictKind",
    "ConflictSuggestion",
    "OverallPreferenceScore",
    "PreferenceAllocationResult",
    "PreferenceBreakdown",
    "PreferenceScore",
    "PreferenceValidationError",
    "PreferenceValidationResult",
    "PreferenceValidationWarning",
    "SatisfactionLevel",
    "SatisfactionMetrics",
]
