"""Loading of course, room, faculty, time grid and preference catalogs."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, TypeVar

import pandas as pd

from .constants import DEFAULT_GRID_DAYS, DEFAULT_GRID_START_TIMES, DEFAULT_SLOT_MINUTES
from .exceptions import CatalogError, MissingColumnsError, TimetableEngineError
from .models import Course, Day, Faculty, Room, TimeSlot
from .preferences.models import FacultyPreferences
from .utils import minutes_to_time, split_list_cell, time_to_minutes

logger = logging.getLogger(__name__)

T = TypeVar("T")

COURSES_FILE = "courses.csv"
ROOMS_FILE = "rooms.csv"
FACULTY_FILE = "faculty.csv"
TIME_SLOTS_FILE = "time-slots.csv"
PREFERENCES_FILE = "preferences.json"

REQUIRED_COLUMNS = {
    COURSES_FILE: ["id", "code", "name", "department", "lecture_hours"],
    ROOMS_FILE: ["id", "name", "capacity"],
    FACULTY_FILE: ["id", "name", "department"],
    TIME_SLOTS_FILE: ["day", "start_time", "end_time"],
}

# Pipe-separated cells holding lists
LIST_COLUMNS = {"facilities", "preferred_subjects"}


def default_time_grid() -> list[TimeSlot]:
    """Mon-Fri grid of one-hour slots with a break at noon."""
    slots = []
    for day in DEFAULT_GRID_DAYS:
        for start in DEFAULT_GRID_START_TIMES:
            end = minutes_to_time(time_to_minutes(start) + DEFAULT_SLOT_MINUTES)
            slots.append(TimeSlot(day=Day(day), start_time=start, end_time=end))
    return slots


@dataclass
class Catalog:
    """Everything needed for one generation run."""

    courses: list[Course] = field(default_factory=list)
    rooms: list[Room] = field(default_factory=list)
    faculty: list[Faculty] = field(default_factory=list)
    time_slots: list[TimeSlot] = field(default_factory=list)
    preferences: dict[str, FacultyPreferences] = field(default_factory=dict)

    def get_faculty(self, faculty_id: str) -> Faculty | None:
        return next((f for f in self.faculty if f.id == faculty_id), None)


class CatalogLoader:
    """Loads catalogs from a data directory.

    Expected files:
    - courses.csv, rooms.csv, faculty.csv (required)
    - time-slots.csv (optional, default grid otherwise)
    - preferences.json (optional, list of faculty preference objects)
    """

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir)

    def load(self) -> Catalog:
        """Load all catalogs.

        Raises:
            CatalogError: If a required file is missing or a row is invalid.
        """
        catalog = Catalog(
            courses=self.load_courses(),
            rooms=self.load_rooms(),
            faculty=self.load_faculty(),
            time_slots=self.load_time_slots(),
            preferences=self.load_preferences(),
        )
        logger.info(
            f"Loaded {len(catalog.courses)} courses, {len(catalog.rooms)} rooms, "
            f"{len(catalog.faculty)} faculty, {len(catalog.time_slots)} time slots"
        )
        return catalog

    def load_courses(self) -> list[Course]:
        return self._load_csv(COURSES_FILE, Course.from_dict)

    def load_rooms(self) -> list[Room]:
        rooms = self._load_csv(ROOMS_FILE, Room.from_dict)
        for index, room in enumerate(rooms):
            if room.capacity <= 0:
                raise CatalogError(
                    f"room '{room.id}' must have a positive capacity",
                    path=self.data_dir / ROOMS_FILE,
                    row=index + 2,
                )
        return rooms

    def load_faculty(self) -> list[Faculty]:
        return self._load_csv(FACULTY_FILE, Faculty.from_dict)

    def load_time_slots(self) -> list[TimeSlot]:
        if not (self.data_dir / TIME_SLOTS_FILE).exists():
            logger.debug("No time-slots.csv found, using default grid")
            return default_time_grid()
        return self._load_csv(TIME_SLOTS_FILE, TimeSlot.from_dict)

    def load_preferences(self) -> dict[str, FacultyPreferences]:
        path = self.data_dir / PREFERENCES_FILE
        if not path.exists():
            return {}

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise CatalogError(f"invalid JSON: {e}", path=path) from e

        if not isinstance(data, list):
            raise CatalogError("expected a list of faculty preference objects", path=path)

        preferences = {}
        for index, entry in enumerate(data):
            try:
                item = FacultyPreferences.from_dict(entry)
            except (KeyError, TypeError, ValueError) as e:
                raise CatalogError(f"invalid preference entry: {e}", path=path, row=index + 1) from e
            preferences[item.faculty_id] = item
        return preferences

    def _load_csv(self, filename: str, factory: Callable[[dict[str, Any]], T]) -> list[T]:
        path = self.data_dir / filename
        if not path.exists():
            raise CatalogError("file not found", path=path)

        try:
            df = pd.read_csv(path, dtype=str, keep_default_na=False)
        except pd.errors.EmptyDataError as e:
            raise CatalogError("file is empty", path=path) from e

        df.columns = [str(c).strip() for c in df.columns]
        missing = [c for c in REQUIRED_COLUMNS[filename] if c not in df.columns]
        if missing:
            raise MissingColumnsError(path, missing)

        items = []
        for index, row in enumerate(df.to_dict(orient="records")):
            record = _clean_row(row)
            try:
                items.append(factory(record))
            except (KeyError, ValueError, TimetableEngineError) as e:
                # Header is line 1
                raise CatalogError(str(e), path=path, row=index + 2) from e
        return items


def _clean_row(row: dict[str, Any]) -> dict[str, Any]:
    """Drop empty cells and split list-valued columns."""
    record: dict[str, Any] = {}
    for key, value in row.items():
        if key in LIST_COLUMNS:
            record[key] = split_list_cell(value)
            continue
        text = str(value).strip()
        if text:
            record[key] = text
    return record
