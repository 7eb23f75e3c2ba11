"""Test fixtures for timetable engine tests."""

import csv
import json
from pathlib import Path

import pytest

from timetable_engine.catalog import default_time_grid
from timetable_engine.models import Course, Day, Faculty, Room, RoomType, TimeSlot


def _write_csv(path: Path, rows: list[dict]) -> Path:
    """Write dictionaries to a CSV file with a header row."""
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
        writer.writeheader()
        writer.writerows(rows)
    return path


@pytest.fixture
def write_csv():
    """Helper writing a list of dictionaries as a CSV file."""
    return _write_csv


@pytest.fixture
def lecture_hall():
    return Room(
        id="R1",
        code="A-101",
        name="Main Hall",
        building="A",
        capacity=100,
        type=RoomType.LECTURE,
        facilities=["projector", "whiteboard"],
    )


@pytest.fixture
def classroom():
    return Room(
        id="R2",
        code="B-201",
        name="Classroom 201",
        building="B",
        capacity=60,
        type=RoomType.LECTURE,
        facilities=["whiteboard"],
    )


@pytest.fixture
def computer_lab():
    return Room(
        id="L1",
        code="C-10",
        name="Computer Lab",
        building="C",
        capacity=30,
        type=RoomType.LAB,
        facilities=["computers", "software", "internet", "equipment"],
    )


@pytest.fixture
def rooms(lecture_hall, classroom, computer_lab):
    return [lecture_hall, classroom, computer_lab]


@pytest.fixture
def intro_programming():
    return Course(
        id="C1",
        code="CS101",
        name="Intro to Programming",
        department="Computer Science",
        lecture_hours=3,
        lab_hours=2,
    )


@pytest.fixture
def calculus():
    return Course(
        id="C2",
        code="MATH201",
        name="Calculus II",
        department="Mathematics",
        lecture_hours=3,
    )


@pytest.fixture
def courses(intro_programming, calculus):
    return [intro_programming, calculus]


@pytest.fixture
def faculty():
    return [
        Faculty(
            id="F1",
            name="Ada Lovelace",
            department="Computer Science",
            preferred_subjects=["CS101"],
        ),
        Faculty(id="F2", name="Carl Gauss", department="Mathematics"),
    ]


@pytest.fixture
def time_grid():
    return default_time_grid()


@pytest.fixture
def monday_nine():
    return TimeSlot(day=Day.MONDAY, start_time="09:00", end_time="10:00")


@pytest.fixture
def catalog_dir(tmp_path):
    """A data directory with course, room and faculty catalogs."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()

    _write_csv(
        data_dir / "courses.csv",
        [
            {
                "id": "C1",
                "code": "CS101",
                "name": "Intro to Programming",
                "department": "Computer Science",
                "lecture_hours": "3",
                "lab_hours": "",
            },
            {
                "id": "C2",
                "code": "MATH201",
                "name": "Calculus II",
                "department": "Mathematics",
                "lecture_hours": "2",
                "lab_hours": "",
            },
        ],
    )
    _write_csv(
        data_dir / "rooms.csv",
        [
            {
                "id": "R1",
                "name": "Main Hall",
                "building": "A",
                "capacity": "100",
                "type": "lecture",
                "facilities": "projector|whiteboard",
            },
            {
                "id": "R2",
                "name": "Classroom 201",
                "building": "B",
                "capacity": "60",
                "type": "lecture",
                "facilities": "whiteboard",
            },
        ],
    )
    _write_csv(
        data_dir / "faculty.csv",
        [
            {
                "id": "F1",
                "name": "Ada Lovelace",
                "department": "Computer Science",
                "max_hours_per_week": "10",
                "preferred_subjects": "CS101",
            },
            {
                "id": "F2",
                "name": "Carl Gauss",
                "department": "Mathematics",
                "max_hours_per_week": "",
                "preferred_subjects": "",
            },
        ],
    )
    return data_dir


@pytest.fixture
def preferences_file(catalog_dir):
    """Write a valid preferences.json for F1 into the catalog directory."""
    data = [
        {
            "faculty_id": "F1",
            "room_preferences": [{"room_id": "R1", "priority": "high", "weight": 80}],
            "time_preferences": [
                {"day": "Mon", "start_time": "09:00", "end_time": "10:00", "weight": 70}
            ],
        }
    ]
    path = catalog_dir / "preferences.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path
