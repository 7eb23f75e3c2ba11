"""Derive structured room requirements from course records."""

import math
import re

from ..constants import (
    CAPACITY_RANGE_LOWER,
    CAPACITY_RANGE_UPPER,
    DEFAULT_EXPECTED_SIZE,
    DEFAULT_LAB_FACILITIES,
    EXPECTED_SIZE_BY_NUMBER,
    LAB_CODE_SUFFIX_PATTERN,
    LAB_FACILITY_RULES,
    LAB_NAME_KEYWORDS,
    LAB_SIZE_CAP,
    SENIOR_EXPECTED_SIZE,
    SESSION_LAB_FACILITIES,
)
from ..models import Course, Priority, RoomType
from ..utils import parse_course_number
from .models import CourseRequirements

# Short department keywords only match whole words ('IT' but not 'Literature')
SHORT_KEYWORD_LENGTH = 3


class RequirementDeriver:
    """Turns Course records into CourseRequirements."""

    def derive(self, course: Course) -> CourseRequirements:
        """Derive requirements for a course as a whole.

        Args:
            course: Course record.

        Returns:
            CourseRequirements with size, room types, facilities and priority.
        """
        number = parse_course_number(course.code)
        expected_size = self.estimate_size(number)
        is_lab = self.is_lab_course(course)

        if is_lab:
            expected_size = min(expected_size, LAB_SIZE_CAP)
            room_types = [RoomType.LAB]
            facilities = self.get_lab_facilities(course)
        elif expected_size <= 25:
            room_types = [RoomType.TUTORIAL, RoomType.LECTURE]
            facilities = []
        elif expected_size <= 40:
            room_types = [RoomType.LECTURE, RoomType.TUTORIAL]
            facilities = []
        else:
            room_types = [RoomType.LECTURE]
            facilities = []

        priority = Priority.MEDIUM
        if number is not None and (number < 200 or number >= 400):
            priority = Priority.HIGH
        if is_lab:
            priority = Priority.HIGH

        return CourseRequirements(
            course_id=course.id,
            expected_size=expected_size,
            required_room_types=room_types,
            required_facilities=facilities,
            preferred_capacity_range=self.capacity_range(expected_size),
            priority=priority,
        )

    def derive_lecture(self, course: Course) -> CourseRequirements:
        """Requirements for the lecture hours of a course.

        Lecture hours accept lecture or tutorial rooms and need no
        special facilities.
        """
        base = self.derive(course)
        expected_size = self.estimate_size(parse_course_number(course.code))
        return CourseRequirements(
            course_id=course.id,
            expected_size=expected_size,
            required_room_types=[RoomType.LECTURE, RoomType.TUTORIAL],
            required_facilities=[],
            preferred_capacity_range=self.capacity_range(expected_size),
            priority=base.priority,
        )

    def derive_lab(self, course: Course) -> CourseRequirements:
        """Requirements for the lab hours of a course."""
        expected_size = min(self.estimate_size(parse_course_number(course.code)), LAB_SIZE_CAP)
        return CourseRequirements(
            course_id=course.id,
            expected_size=expected_size,
            required_room_types=[RoomType.LAB],
            required_facilities=list(SESSION_LAB_FACILITIES),
            preferred_capacity_range=self.capacity_range(expected_size),
            priority=Priority.HIGH,
        )

    @staticmethod
    def estimate_size(number: int | None) -> int:
        """Estimate headcount from the course number.

        Introductory courses are larger, senior courses smaller.
        """
        if number is None:
            return DEFAULT_EXPECTED_SIZE
        for upper_bound, size in EXPECTED_SIZE_BY_NUMBER:
            if number < upper_bound:
                return size
        return SENIOR_EXPECTED_SIZE

    @staticmethod
    def capacity_range(expected_size: int) -> tuple[int, int]:
        return (
            math.floor(expected_size * CAPACITY_RANGE_LOWER),
            math.ceil(expected_size * CAPACITY_RANGE_UPPER),
        )

    @staticmethod
    def is_lab_course(course: Course) -> bool:
        """Check lab hours, then code, then name for lab indicators."""
        if course.lab_hours > 0:
            return True

        code = (course.code or "").lower()
        if "lab" in code or LAB_CODE_SUFFIX_PATTERN.search(code):
            return True

        name = (course.name or "").lower()
        return any(keyword in name for keyword in LAB_NAME_KEYWORDS)

    @staticmethod
    def get_lab_facilities(course: Course) -> list[str]:
        """Pick lab facilities by department and course name."""
        department = (course.department or "").lower()
        name = (course.name or "").lower()

        for department_keywords, name_keywords, facilities in LAB_FACILITY_RULES:
            if any(_matches(keyword, department) for keyword in department_keywords):
                return list(facilities)
            if any(keyword in name for keyword in name_keywords):
                return list(facilities)

        return list(DEFAULT_LAB_FACILITIES)


def _matches(keyword: str, text: str) -> bool:
    if len(keyword) <= SHORT_KEYWORD_LENGTH:
        return re.search(rf"\b{re.escape(keyword)}\b", text) is not None
    return keyword in text
