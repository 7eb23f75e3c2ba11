"""Catalog data models for the timetable engine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .constants import DAY_ORDER, DEFAULT_MAX_HOURS_PER_WEEK
from .exceptions import InvalidTimeRangeError
from .utils import normalize_time, time_to_minutes


class Day(str, Enum):
    """Days of the academic week."""

    MONDAY = "Mon"
    TUESDAY = "Tue"
    WEDNESDAY = "Wed"
    THURSDAY = "Thu"
    FRIDAY = "Fri"
    SATURDAY = "Sat"

    @property
    def order(self) -> int:
        return DAY_ORDER[self.value]


class RoomType(str, Enum):
    """Type of teaching room."""

    LECTURE = "lecture"
    LAB = "lab"
    TUTORIAL = "tutorial"


class Priority(str, Enum):
    """Priority of a requirement or preference."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Severity(str, Enum):
    """Severity of a detected conflict."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SessionType(str, Enum):
    """Kind of teaching hour being placed."""

    LECTURE = "lecture"
    LAB = "lab"


@dataclass
class Course:
    """A course that needs teaching hours placed in the timetable."""

    id: str
    code: str
    name: str
    department: str
    semester: int = 1
    credits: int = 3
    lecture_hours: int = 0
    lab_hours: int = 0

    @property
    def has_lab(self) -> bool:
        return self.lab_hours > 0

    @property
    def total_hours(self) -> int:
        return self.lecture_hours + self.lab_hours

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Course":
        """Create a Course from a dictionary."""
        return cls(
            id=str(data["id"]),
            code=str(data["code"]),
            name=str(data.get("name", "")),
            department=str(data.get("department", "")),
            semester=int(data.get("semester", 1)),
            credits=int(data.get("credits", 3)),
            lecture_hours=int(data.get("lecture_hours", 0)),
            lab_hours=int(data.get("lab_hours") or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert course to dictionary."""
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "department": self.department,
            "semester": self.semester,
            "credits": self.credits,
            "lecture_hours": self.lecture_hours,
            "lab_hours": self.lab_hours,
        }


@dataclass
class Room:
    """A physical room that can host classes."""

    id: str
    code: str
    name: str
    building: str
    capacity: int
    type: RoomType = RoomType.LECTURE
    facilities: list[str] = field(default_factory=list)

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Room):
            return False
        return self.id == other.id

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Room":
        """Create a Room from a dictionary."""
        return cls(
            id=str(data["id"]),
            code=str(data.get("code", data["id"])),
            name=str(data.get("name", "")),
            building=str(data.get("building", "")),
            capacity=int(data["capacity"]),
            type=RoomType(data.get("type", RoomType.LECTURE.value)),
            facilities=list(data.get("facilities") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert room to dictionary."""
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "building": self.building,
            "capacity": self.capacity,
            "type": self.type.value,
            "facilities": self.facilities,
        }


@dataclass
class Faculty:
    """A faculty member available for teaching."""

    id: str
    name: str
    department: str
    email: str = ""
    max_hours_per_week: int = DEFAULT_MAX_HOURS_PER_WEEK
    preferred_subjects: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Faculty":
        """Create a Faculty member from a dictionary."""
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            department=str(data.get("department", "")),
            email=str(data.get("email", "")),
            max_hours_per_week=int(data.get("max_hours_per_week") or DEFAULT_MAX_HOURS_PER_WEEK),
            preferred_subjects=list(data.get("preferred_subjects") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert faculty member to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "department": self.department,
            "email": self.email,
            "max_hours_per_week": self.max_hours_per_week,
            "preferred_subjects": self.preferred_subjects,
        }


@dataclass(frozen=True)
class TimeSlot:
    """One entry of the weekly time grid.

    Times are normalized to zero-padded HH:MM so that lexicographic
    ordering of start times matches chronological ordering.
    """

    day: Day
    start_time: str
    end_time: str

    def __post_init__(self) -> None:
        try:
            start = normalize_time(self.start_time)
            end = normalize_time(self.end_time)
        except ValueError as e:
            raise InvalidTimeRangeError(self.start_time, self.end_time, str(e)) from e
        if time_to_minutes(start) >= time_to_minutes(end):
            raise InvalidTimeRangeError(start, end, "start must be before end")
        # Frozen dataclass: assign normalized values through object.__setattr__
        object.__setattr__(self, "day", Day(self.day))
        object.__setattr__(self, "start_time", start)
        object.__setattr__(self, "end_time", end)

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end_time)

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    @property
    def key(self) -> str:
        """Day and start time key, e.g. 'Mon|09:00'."""
        return f"{self.day.value}|{self.start_time}"

    def overlaps(self, other: "TimeSlot") -> bool:
        """Check whether two slots on the same day intersect."""
        if self.day != other.day:
            return False
        return self.start_minutes < other.end_minutes and other.start_minutes < self.end_minutes

    def __str__(self) -> str:
        return f"{self.day.value} {self.start_time}-{self.end_time}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeSlot":
        """Create a TimeSlot from a dictionary."""
        return cls(
            day=Day(data["day"]),
            start_time=str(data["start_time"]),
            end_time=str(data["end_time"]),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert time slot to dictionary."""
        return {
            "day": self.day.value,
            "start_time": self.start_time,
            "end_time": self.end_time,
        }


@dataclass
class ScheduledSlot:
    """A placed teaching hour: course, room and faculty at one time slot."""

    course_id: str
    room_id: str
    faculty_id: str | None
    time_slot: TimeSlot
    session_type: SessionType = SessionType.LECTURE

    @property
    def id(self) -> str:
        return f"{self.course_id}|{self.room_id}|{self.time_slot.key}"

    @property
    def day(self) -> Day:
        return self.time_slot.day

    @property
    def start_time(self) -> str:
        return self.time_slot.start_time

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScheduledSlot":
        """Create a ScheduledSlot from a dictionary."""
        return cls(
            course_id=str(data["course_id"]),
            room_id=str(data["room_id"]),
            faculty_id=data.get("faculty_id"),
            time_slot=TimeSlot.from_dict(data),
            session_type=SessionType(data.get("session_type", SessionType.LECTURE.value)),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert scheduled slot to dictionary."""
        return {
            "course_id": self.course_id,
            "room_id": self.room_id,
            "faculty_id": self.faculty_id,
            **self.time_slot.to_dict(),
            "session_type": self.session_type.value,
        }
