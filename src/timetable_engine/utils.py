"""Utility functions for the timetable engine."""

import random
import re
from typing import TYPE_CHECKING

import pandas as pd

from .constants import DAY_ORDER, TIME_PATTERN

if TYPE_CHECKING:
    from .models import Course, TimeSlot


def is_valid_time(value: str) -> bool:
    """Check whether a value is a 24-hour HH:MM string."""
    return bool(value) and TIME_PATTERN.match(value.strip()) is not None


def time_to_minutes(value: str) -> int:
    """Convert an HH:MM string to minutes since midnight.

    Args:
        value: Time string like '09:30' or '9:30'.

    Returns:
        Minutes since midnight.

    Raises:
        ValueError: If the value is not a valid 24-hour time.
    """
    match = TIME_PATTERN.match(value.strip()) if value else None
    if not match:
        raise ValueError(f"Invalid time format: '{value}'")
    return int(match.group(1)) * 60 + int(match.group(2))


def minutes_to_time(minutes: int) -> str:
    """Convert minutes since midnight to a zero-padded HH:MM string."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_time(value: str) -> str:
    """Normalize a time string to zero-padded HH:MM form."""
    return minutes_to_time(time_to_minutes(value))


def intervals_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    """Half-open interval intersection test."""
    return start1 < end2 and start2 < end1


def overlap_minutes(start1: int, end1: int, start2: int, end2: int) -> int:
    """Length of the intersection of two half-open intervals."""
    return max(0, min(end1, end2) - max(start1, start2))


def parse_course_number(code: str | None) -> int | None:
    """Extract the numeric part of a course code.

    All digits in the code are joined, so 'CS101' gives 101 and
    'MATH2B10' gives 210.

    Args:
        code: Course code.

    Returns:
        Course number, or None if the code has no digits.
    """
    if not code:
        return None
    digits = re.sub(r"\D", "", code)
    return int(digits) if digits else None


def get_course_level(code: str | None) -> int:
    """Get the hundreds level of a course code.

    Uses the first run of digits: 'CS301' -> 300, 'ENG95' -> 0.
    Codes without digits sort last with level 999.
    """
    match = re.search(r"(\d+)", code or "")
    if not match:
        return 999
    return int(match.group(1)) // 100 * 100


def size_from_table(number: int | None, table: tuple[tuple[int, int], ...], fallback: int) -> int:
    """Look up a size in an ascending (upper bound, size) table."""
    if number is None:
        return fallback
    for upper_bound, size in table:
        if number < upper_bound:
            return size
    return fallback


def day_index(day: str) -> int:
    """Get sort position of a day abbreviation, unknown days last."""
    return DAY_ORDER.get(day, len(DAY_ORDER))


def sort_time_slots(time_slots: list["TimeSlot"]) -> list["TimeSlot"]:
    """Sort time slots by day order then start time."""
    return sorted(time_slots, key=lambda ts: (day_index(ts.day.value), ts.start_time))


def shuffle_time_slots(time_slots: list["TimeSlot"], seed: int) -> list["TimeSlot"]:
    """Return a reproducibly shuffled copy of a sorted time grid.

    Args:
        time_slots: Time slots to shuffle.
        seed: Seed for the private random generator.

    Returns:
        New list, same slots in seeded random order.
    """
    shuffled = sort_time_slots(time_slots)
    random.Random(seed).shuffle(shuffled)
    return shuffled


def course_sort_key(course: "Course") -> tuple[int, int, int, str]:
    """Sort key placing the hardest-to-place courses first.

    Order: more lecture hours first, then lower level, then
    lab-bearing courses, then alphabetical by code.
    """
    return (
        -course.lecture_hours,
        get_course_level(course.code),
        0 if course.lab_hours > 0 else 1,
        course.code,
    )


def split_list_cell(value: object, separator: str = "|") -> list[str]:
    """Split a delimited catalog cell into a list of trimmed values."""
    if value is None or pd.isna(value):
        return []
    text = str(value).strip()
    if not text:
        return []
    return [part.strip() for part in text.split(separator) if part.strip()]
