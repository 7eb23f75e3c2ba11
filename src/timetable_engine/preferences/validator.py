"""Field-level validation of faculty preference input."""

from itertools import combinations

from ..constants import (
    KNOWN_FACILITIES,
    MAX_PREFERENCE_MINUTES,
    MIN_PREFERENCE_MINUTES,
    VALID_PREFERENCE_DAYS,
)
from ..models import Course, Priority, Room, RoomType, TimeSlot
from ..utils import intervals_overlap, is_valid_time, normalize_time
from .models import (
    ExpertiseLevel,
    FacultyPreferences,
    PreferenceValidationError,
    PreferenceValidationResult,
    PreferenceValidationWarning,
    RoomPreference,
    SubjectPreference,
    TimePreference,
)

MAX_HARD_CONSTRAINT_HOURS = 40
HARD_CONSTRAINT_WARNING_HOURS = 30
HIGH_WEIGHT = 80
LOW_WEIGHT = 20
HIGH_WEIGHT_RATIO = 0.8
LOW_WEIGHT_RATIO = 0.5


class PreferenceValidator:
    """Validates preference input against the room, course and time catalogs.

    Errors make a preference set invalid; warnings are advice only.
    """

    def __init__(
        self,
        rooms: list[Room],
        courses: list[Course],
        time_slots: list[TimeSlot] | None = None,
    ):
        """
        Initialize the validator.

        Args:
            rooms: Room inventory.
            courses: Course catalog.
            time_slots: Standard time grid; grid alignment is not checked if empty.
        """
        self.room_by_id = {r.id: r for r in rooms}
        self.course_by_code = {c.code: c for c in courses}
        self.grid = {(ts.day.value, ts.start_time, ts.end_time) for ts in time_slots or []}
        self.known_facilities = set(KNOWN_FACILITIES)
        for room in rooms:
            self.known_facilities.update(room.facilities)

    def validate_all(
        self, preferences: FacultyPreferences, faculty_department: str | None = None
    ) -> PreferenceValidationResult:
        """
        Validate a complete preference set.

        Args:
            preferences: Preferences to validate.
            faculty_department: Department of the faculty member, for
                                cross-department subject warnings.

        Returns:
            PreferenceValidationResult; valid when no errors were found.
        """
        result = PreferenceValidationResult()
        if not preferences.faculty_id:
            result.errors.append(
                PreferenceValidationError("faculty_id", "Faculty ID is required", "MISSING_FACULTY_ID")
            )

        return (
            result.merge(self.validate_room_preferences(preferences.room_preferences))
            .merge(self.validate_time_preferences(preferences.time_preferences))
            .merge(
                self.validate_subject_preferences(preferences.subject_preferences, faculty_department)
            )
            .merge(self.validate_weights(preferences))
            .merge(self.validate_constraints(preferences))
        )

    def validate_room_preferences(
        self, room_preferences: list[RoomPreference]
    ) -> PreferenceValidationResult:
        result = PreferenceValidationResult()
        valid_types = [t.value for t in RoomType]

        for index, pref in enumerate(room_preferences):
            prefix = f"room_preferences[{index}]"

            if pref.room_type and pref.room_type not in valid_types:
                result.errors.append(
                    PreferenceValidationError(
                        f"{prefix}.room_type",
                        f"Invalid room type: {pref.room_type}. Must be one of: {', '.join(valid_types)}",
                        "INVALID_ROOM_TYPE",
                    )
                )

            if pref.room_id:
                room = self.room_by_id.get(pref.room_id)
                if room is None:
                    result.errors.append(
                        PreferenceValidationError(
                            f"{prefix}.room_id",
                            f"Room with ID {pref.room_id} does not exist",
                            "ROOM_NOT_FOUND",
                        )
                    )
                elif pref.room_type and room.type.value != pref.room_type:
                    result.warnings.append(
                        PreferenceValidationWarning(
                            prefix,
                            f"Room {pref.room_id} is of type '{room.type.value}' "
                            f"but preference specifies '{pref.room_type}'",
                            "Remove room type specification or choose a room of the correct type",
                        )
                    )

            unknown = [f for f in pref.facilities if f not in self.known_facilities]
            if unknown:
                result.warnings.append(
                    PreferenceValidationWarning(
                        f"{prefix}.facilities",
                        f"Unknown facilities: {', '.join(unknown)}",
                        f"Valid facilities are: {', '.join(sorted(self.known_facilities))}",
                    )
                )

        return result

    def validate_time_preferences(
        self, time_preferences: list[TimePreference]
    ) -> PreferenceValidationResult:
        result = PreferenceValidationResult()

        for index, pref in enumerate(time_preferences):
            prefix = f"time_preferences[{index}]"

            if pref.day not in VALID_PREFERENCE_DAYS:
                result.errors.append(
                    PreferenceValidationError(
                        f"{prefix}.day",
                        f"Invalid day: {pref.day}. Must be one of: {', '.join(VALID_PREFERENCE_DAYS)}",
                        "INVALID_DAY",
                    )
                )

            times_ok = True
            for name in ("start_time", "end_time"):
                if not is_valid_time(getattr(pref, name)):
                    times_ok = False
                    result.errors.append(
                        PreferenceValidationError(
                            f"{prefix}.{name}",
                            "Invalid time format. Use HH:MM format (24-hour)",
                            "INVALID_TIME_FORMAT",
                        )
                    )
            if not times_ok:
                continue

            duration = pref.end_minutes - pref.start_minutes
            if duration <= 0:
                result.errors.append(
                    PreferenceValidationError(
                        f"{prefix}.end_time",
                        "End time must be after start time",
                        "INVALID_TIME_RANGE",
                    )
                )
                continue

            key = (pref.day, normalize_time(pref.start_time), normalize_time(pref.end_time))
            if self.grid and key not in self.grid:
                result.warnings.append(
                    PreferenceValidationWarning(
                        prefix,
                        "Time slot does not match standard time grid",
                        "Consider using standard time slots for better scheduling compatibility",
                    )
                )

            if duration < MIN_PREFERENCE_MINUTES:
                result.warnings.append(
                    PreferenceValidationWarning(
                        prefix,
                        f"Very short time slot (less than {MIN_PREFERENCE_MINUTES} minutes)",
                        "Consider longer time slots for practical scheduling",
                    )
                )
            elif duration > MAX_PREFERENCE_MINUTES:
                result.warnings.append(
                    PreferenceValidationWarning(
                        prefix,
                        f"Very long time slot (more than {MAX_PREFERENCE_MINUTES // 60} hours)",
                        "Consider breaking into shorter sessions",
                    )
                )

        well_formed = [(i, p) for i, p in enumerate(time_preferences) if p.is_well_formed]
        for (_, first), (j, second) in combinations(well_formed, 2):
            if first.day == second.day and intervals_overlap(
                first.start_minutes, first.end_minutes, second.start_minutes, second.end_minutes
            ):
                result.errors.append(
                    PreferenceValidationError(
                        f"time_preferences[{j}]",
                        f"Time preference overlaps with another preference on {first.day} "
                        f"({first.start_time}-{first.end_time})",
                        "TIME_OVERLAP",
                    )
                )

        return result

    def validate_subject_preferences(
        self,
        subject_preferences: list[SubjectPreference],
        faculty_department: str | None = None,
    ) -> PreferenceValidationResult:
        result = PreferenceValidationResult()

        for index, pref in enumerate(subject_preferences):
            prefix = f"subject_preferences[{index}]"
            course = self.course_by_code.get(pref.course_code)
            if course is None:
                result.errors.append(
                    PreferenceValidationError(
                        f"{prefix}.course_code",
                        f"Course {pref.course_code} does not exist",
                        "COURSE_NOT_FOUND",
                    )
                )
                continue

            if faculty_department and course.department != faculty_department:
                result.warnings.append(
                    PreferenceValidationWarning(
                        f"{prefix}.course_code",
                        f"Course {pref.course_code} is from {course.department} department, "
                        f"but faculty is from {faculty_department}",
                        "Consider focusing on courses from your own department",
                    )
                )

            if pref.expertise_level == ExpertiseLevel.EXPERT and pref.priority == Priority.LOW:
                result.warnings.append(
                    PreferenceValidationWarning(
                        prefix,
                        "Expert-level course with low priority seems unusual",
                        "Consider higher priority for courses where you have expertise",
                    )
                )
            if pref.expertise_level == ExpertiseLevel.BASIC and pref.priority == Priority.HIGH:
                result.warnings.append(
                    PreferenceValidationWarning(
                        prefix,
                        "Basic-level course with high priority may need additional preparation",
                        "Consider medium priority or improve expertise level first",
                    )
                )

        return result

    @staticmethod
    def validate_weights(preferences: FacultyPreferences) -> PreferenceValidationResult:
        """Every weight must lie in [0, 100]."""
        result = PreferenceValidationResult()
        groups = (
            ("room_preferences", preferences.room_preferences),
            ("time_preferences", preferences.time_preferences),
            ("subject_preferences", preferences.subject_preferences),
        )
        for name, prefs in groups:
            for index, pref in enumerate(prefs):
                if not 0 <= pref.weight <= 100:
                    result.errors.append(
                        PreferenceValidationError(
                            f"{name}[{index}].weight",
                            f"Weight must be between 0 and 100, got {pref.weight:g}",
                            "INVALID_WEIGHT",
                        )
                    )
        return result

    @staticmethod
    def validate_constraints(preferences: FacultyPreferences) -> PreferenceValidationResult:
        """Check the volume of hard constraints and the spread of weights."""
        result = PreferenceValidationResult()

        hard_hours = sum(
            p.duration_hours
            for p in preferences.time_preferences
            if p.is_hard_constraint and p.is_well_formed
        )
        if hard_hours > MAX_HARD_CONSTRAINT_HOURS:
            result.errors.append(
                PreferenceValidationError(
                    "time_preferences",
                    f"Hard constraints total {hard_hours:g} hours per week, exceeding reasonable "
                    f"limit of {MAX_HARD_CONSTRAINT_HOURS} hours",
                    "EXCESSIVE_HARD_CONSTRAINTS",
                )
            )
        if hard_hours > HARD_CONSTRAINT_WARNING_HOURS:
            result.warnings.append(
                PreferenceValidationWarning(
                    "time_preferences",
                    f"Hard constraints total {hard_hours:g} hours per week, which may limit "
                    "scheduling flexibility",
                    "Consider reducing hard constraints or converting some to soft preferences",
                )
            )

        weights = [
            p.weight
            for p in (
                *preferences.room_preferences,
                *preferences.time_preferences,
                *preferences.subject_preferences,
            )
        ]
        if weights:
            if sum(1 for w in weights if w > HIGH_WEIGHT) / len(weights) > HIGH_WEIGHT_RATIO:
                result.warnings.append(
                    PreferenceValidationWarning(
                        "preferences",
                        f"Most preferences have very high weights (>{HIGH_WEIGHT}), "
                        "which may make scheduling difficult",
                        "Consider using a mix of high, medium, and low weights for better flexibility",
                    )
                )
            if sum(1 for w in weights if w < LOW_WEIGHT) / len(weights) > LOW_WEIGHT_RATIO:
                result.warnings.append(
                    PreferenceValidationWarning(
                        "preferences",
                        f"Many preferences have very low weights (<{LOW_WEIGHT}), "
                        "which may not influence scheduling",
                        "Consider increasing weights for preferences that are important to you",
                    )
                )

        return result
