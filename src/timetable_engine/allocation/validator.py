"""Post-hoc validation of a finished set of scheduled slots."""

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..constants import LOW_OCCUPANCY_RATIO, VALIDATOR_DEFAULT_SIZE, VALIDATOR_SIZE_BY_NUMBER
from ..models import Course, Faculty, Room, RoomType, ScheduledSlot, SessionType, Severity
from ..utils import parse_course_number, size_from_table

MANY_WARNINGS = 5


class ValidationIssueType(str, Enum):
    """Kinds of schedule validation findings."""

    FACULTY_CONFLICT = "faculty_conflict"
    ROOM_CONFLICT = "room_conflict"
    CAPACITY_OVERFLOW = "capacity_overflow"
    SUBOPTIMAL_CAPACITY = "suboptimal_capacity"
    FACULTY_OVERLOAD = "faculty_overload"
    ROOM_TYPE_MISMATCH = "room_type_mismatch"


@dataclass
class ValidationIssue:
    """One error or warning found in a schedule."""

    type: ValidationIssueType
    description: str
    affected_slots: list[str] = field(default_factory=list)
    severity: Severity | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert issue to dictionary."""
        data: dict[str, Any] = {
            "type": self.type.value,
            "description": self.description,
            "affected_slots": self.affected_slots,
        }
        if self.severity is not None:
            data["severity"] = self.severity.value
        return data


@dataclass
class ValidationReport:
    """Errors, warnings and advice for a schedule."""

    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        """Convert report to dictionary."""
        return {
            "is_valid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "suggestions": self.suggestions,
        }


class ScheduleValidator:
    """Checks a slot list for double-booking, capacity, workload and room types.

    The checks are independent of how the slots were produced, so a
    schedule built by the allocation engine is still re-checked here.
    """

    def validate_timetable(
        self,
        slots: list[ScheduledSlot],
        courses: list[Course],
        faculty: list[Faculty],
        rooms: list[Room],
    ) -> ValidationReport:
        """Validate a complete timetable.

        Args:
            slots: Scheduled slots to check.
            courses: Course catalog.
            faculty: Faculty catalog.
            rooms: Room catalog.

        Returns:
            ValidationReport; valid when no errors were found.
        """
        course_by_id = {c.id: c for c in courses}
        room_by_id = {r.id: r for r in rooms}

        report = ValidationReport()
        report.errors.extend(self.check_faculty_conflicts(slots))
        report.errors.extend(self.check_room_conflicts(slots))

        capacity_errors, capacity_warnings = self.check_capacity(slots, course_by_id, room_by_id)
        report.errors.extend(capacity_errors)
        report.warnings.extend(capacity_warnings)
        report.warnings.extend(self.check_faculty_workload(slots, faculty))
        report.warnings.extend(self.check_room_types(slots, course_by_id, room_by_id))

        if report.errors:
            report.suggestions.append("Resolve conflicts before finalizing the timetable")
        if len(report.warnings) > MANY_WARNINGS:
            report.suggestions.append("Consider adjusting room assignments for better optimization")

        return report

    @staticmethod
    def estimate_class_size(course: Course) -> int:
        return size_from_table(
            parse_course_number(course.code), VALIDATOR_SIZE_BY_NUMBER, VALIDATOR_DEFAULT_SIZE
        )

    @staticmethod
    def check_faculty_conflicts(slots: list[ScheduledSlot]) -> list[ValidationIssue]:
        """Report every slot booking a faculty member a second time at one time."""
        issues = []
        seen: dict[str, dict[str, str]] = defaultdict(dict)
        for slot in slots:
            if slot.faculty_id is None:
                continue
            booked = seen[slot.faculty_id]
            if slot.time_slot.key in booked:
                issues.append(
                    ValidationIssue(
                        type=ValidationIssueType.FACULTY_CONFLICT,
                        severity=Severity.HIGH,
                        description=(
                            f"Faculty member {slot.faculty_id} has conflicting assignments "
                            f"at {slot.day.value} {slot.start_time}"
                        ),
                        affected_slots=[slot.id, booked[slot.time_slot.key]],
                    )
                )
            else:
                booked[slot.time_slot.key] = slot.id
        return issues

    @staticmethod
    def check_room_conflicts(slots: list[ScheduledSlot]) -> list[ValidationIssue]:
        """Report every slot booking a room a second time at one time."""
        issues = []
        seen: dict[str, dict[str, str]] = defaultdict(dict)
        for slot in slots:
            booked = seen[slot.room_id]
            if slot.time_slot.key in booked:
                issues.append(
                    ValidationIssue(
                        type=ValidationIssueType.ROOM_CONFLICT,
                        severity=Severity.HIGH,
                        description=(
                            f"Room {slot.room_id} has conflicting bookings "
                            f"at {slot.day.value} {slot.start_time}"
                        ),
                        affected_slots=[slot.id, booked[slot.time_slot.key]],
                    )
                )
            else:
                booked[slot.time_slot.key] = slot.id
        return issues

    def check_capacity(
        self,
        slots: list[ScheduledSlot],
        course_by_id: dict[str, Course],
        room_by_id: dict[str, Room],
    ) -> tuple[list[ValidationIssue], list[ValidationIssue]]:
        errors = []
        warnings = []
        for slot in slots:
            course = course_by_id.get(slot.course_id)
            room = room_by_id.get(slot.room_id)
            if course is None or room is None:
                continue

            size = self.estimate_class_size(course)
            if size > room.capacity:
                errors.append(
                    ValidationIssue(
                        type=ValidationIssueType.CAPACITY_OVERFLOW,
                        severity=Severity.HIGH,
                        description=(
                            f"Course {course.code} ({size} students) exceeds "
                            f"room capacity ({room.capacity})"
                        ),
                        affected_slots=[slot.id],
                    )
                )
            elif size < room.capacity * LOW_OCCUPANCY_RATIO:
                warnings.append(
                    ValidationIssue(
                        type=ValidationIssueType.SUBOPTIMAL_CAPACITY,
                        description=f"Course {course.code} significantly underutilizes room capacity",
                        affected_slots=[slot.id],
                    )
                )
        return errors, warnings

    @staticmethod
    def check_faculty_workload(
        slots: list[ScheduledSlot], faculty: list[Faculty]
    ) -> list[ValidationIssue]:
        hours: dict[str, list[str]] = defaultdict(list)
        for slot in slots:
            if slot.faculty_id is not None:
                hours[slot.faculty_id].append(slot.id)

        warnings = []
        for member in faculty:
            assigned = hours.get(member.id, [])
            if len(assigned) > member.max_hours_per_week:
                warnings.append(
                    ValidationIssue(
                        type=ValidationIssueType.FACULTY_OVERLOAD,
                        description=(
                            f"{member.name} assigned {len(assigned)} hours, "
                            f"exceeds maximum of {member.max_hours_per_week}"
                        ),
                        affected_slots=list(assigned),
                    )
                )
        return warnings

    @staticmethod
    def check_room_types(
        slots: list[ScheduledSlot],
        course_by_id: dict[str, Course],
        room_by_id: dict[str, Room],
    ) -> list[ValidationIssue]:
        """Warn about lab hours of lab-bearing courses held outside lab rooms."""
        warnings = []
        for slot in slots:
            course = course_by_id.get(slot.course_id)
            room = room_by_id.get(slot.room_id)
            if course is None or room is None:
                continue
            if not course.has_lab or slot.session_type != SessionType.LAB:
                continue
            if room.type != RoomType.LAB:
                warnings.append(
                    ValidationIssue(
                        type=ValidationIssueType.ROOM_TYPE_MISMATCH,
                        description=f"Lab course {course.code} scheduled in non-lab room {room.name}",
                        affected_slots=[slot.id],
                    )
                )
        return warnings

    def validate_slot(
        self,
        slot: ScheduledSlot,
        course: Course,
        faculty: Faculty,
        room: Room,
        existing_slots: list[ScheduledSlot],
    ) -> ValidationReport:
        """Quick double-booking check of one slot against existing slots."""
        report = ValidationReport()

        faculty_clash = next(
            (
                s
                for s in existing_slots
                if s.faculty_id == slot.faculty_id and s.time_slot.key == slot.time_slot.key
            ),
            None,
        )
        if faculty_clash is not None:
            report.errors.append(
                ValidationIssue(
                    type=ValidationIssueType.FACULTY_CONFLICT,
                    severity=Severity.HIGH,
                    description=f"Faculty {faculty.name} already assigned at this time",
                    affected_slots=[slot.id, faculty_clash.id],
                )
            )

        room_clash = next(
            (
                s
                for s in existing_slots
                if s.room_id == slot.room_id and s.time_slot.key == slot.time_slot.key
            ),
            None,
        )
        if room_clash is not None:
            report.errors.append(
                ValidationIssue(
                    type=ValidationIssueType.ROOM_CONFLICT,
                    severity=Severity.HIGH,
                    description=f"Room {room.name} already booked at this time",
                    affected_slots=[slot.id, room_clash.id],
                )
            )

        if report.errors:
            report.suggestions.append("Choose different time slot or room")
        else:
            size = self.estimate_class_size(course)
            if size > room.capacity:
                report.warnings.append(
                    ValidationIssue(
                        type=ValidationIssueType.CAPACITY_OVERFLOW,
                        description=(
                            f"Course {course.code} ({size} students) exceeds "
                            f"room capacity ({room.capacity})"
                        ),
                        affected_slots=[slot.id],
                    )
                )
        return report
