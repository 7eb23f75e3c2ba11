"""Tests for preference data models."""

import pytest

from timetable_engine.exceptions import InvalidTimeRangeError
from timetable_engine.models import Day, Priority
from timetable_engine.preferences.models import (
    ConstraintType,
    ExpertiseLevel,
    FacultyPreferences,
    RoomPreference,
    SatisfactionLevel,
    SubjectPreference,
    TimePreference,
    calculate_preference_completeness,
)


class TestSatisfactionLevel:
    """Tests for score banding."""

    @pytest.mark.parametrize(
        "score,expected",
        [
            (100, SatisfactionLevel.EXCELLENT),
            (80, SatisfactionLevel.EXCELLENT),
            (79.9, SatisfactionLevel.GOOD),
            (65, SatisfactionLevel.GOOD),
            (45, SatisfactionLevel.ACCEPTABLE),
            (44.5, SatisfactionLevel.POOR),
            (0, SatisfactionLevel.POOR),
        ],
    )
    def test_bands(self, score, expected):
        """Test band boundaries."""
        assert SatisfactionLevel.from_score(score) == expected


class TestRoomPreference:
    """Tests for RoomPreference class."""

    def test_effective_weight_is_clamped(self):
        """Test that out-of-range weights are clamped when used."""
        assert RoomPreference(weight=150).effective_weight == 100.0
        assert RoomPreference(weight=-5).effective_weight == 0.0
        assert RoomPreference(weight=150).weight == 150

    def test_from_dict_defaults(self):
        """Test defaults for omitted fields."""
        pref = RoomPreference.from_dict({"building": "A"})

        assert pref.building == "A"
        assert pref.priority == Priority.MEDIUM
        assert pref.weight == 50.0
        assert pref.facilities == []


class TestTimePreference:
    """Tests for TimePreference class."""

    def test_well_formed(self):
        """Test a valid window."""
        pref = TimePreference(day="Mon", start_time="09:00", end_time="10:30")
        assert pref.is_well_formed
        assert pref.duration_hours == 1.5

    @pytest.mark.parametrize(
        "start,end",
        [
            ("10:00", "09:00"),
            ("10:00", "10:00"),
            ("9am", "10:00"),
        ],
    )
    def test_malformed(self, start, end):
        """Test reversed, empty and unparsable windows."""
        assert not TimePreference(day="Mon", start_time=start, end_time=end).is_well_formed

    def test_to_time_slot(self):
        """Test conversion to a checked time slot."""
        slot = TimePreference(day="Tue", start_time="13:00", end_time="14:00").to_time_slot()
        assert slot.day == Day.TUESDAY
        assert slot.start_time == "13:00"

    def test_to_time_slot_reversed(self):
        """Test that a reversed window cannot become a time slot."""
        with pytest.raises(InvalidTimeRangeError):
            TimePreference(day="Mon", start_time="11:00", end_time="10:00").to_time_slot()

    def test_day_enum_is_stored_as_text(self):
        """Test that a Day member is kept as its abbreviation."""
        assert TimePreference(day=Day.FRIDAY, start_time="09:00", end_time="10:00").day == "Fri"


class TestFacultyPreferences:
    """Tests for FacultyPreferences class."""

    def test_from_dict(self):
        """Test parsing a full preference record."""
        prefs = FacultyPreferences.from_dict(
            {
                "faculty_id": "F1",
                "room_preferences": [{"room_type": "lab", "priority": "high"}],
                "time_preferences": [
                    {"day": "Wed", "start_time": "10:00", "end_time": "12:00", "is_hard_constraint": True}
                ],
                "subject_preferences": [{"course_code": "CS101", "expertise_level": "expert"}],
                "constraints": [
                    {
                        "id": "K1",
                        "type": "time_unavailable",
                        "conditions": [{"field": "day", "operator": "equals", "value": "Fri"}],
                    }
                ],
            }
        )

        assert prefs.total_preferences == 3
        assert prefs.room_preferences[0].priority == Priority.HIGH
        assert prefs.time_preferences[0].is_hard_constraint
        assert prefs.subject_preferences[0].expertise_level == ExpertiseLevel.EXPERT
        assert prefs.constraints[0].type == ConstraintType.TIME_UNAVAILABLE
        assert prefs.constraints[0].conditions[0].value == "Fri"

    def test_to_dict_round_trip(self):
        """Test that serialization keeps every field."""
        prefs = FacultyPreferences(
            faculty_id="F1",
            subject_preferences=[SubjectPreference(course_code="CS101", priority=Priority.LOW)],
        )
        assert FacultyPreferences.from_dict(prefs.to_dict()) == prefs

    def test_get_subject_preference(self):
        """Test lookup by course code."""
        prefs = FacultyPreferences(
            faculty_id="F1", subject_preferences=[SubjectPreference(course_code="CS101")]
        )
        assert prefs.get_subject_preference("CS101").course_code == "CS101"
        assert prefs.get_subject_preference("MATH201") is None

    def test_is_empty(self):
        """Test a record without preferences."""
        assert FacultyPreferences(faculty_id="F1").is_empty


class TestCompleteness:
    """Tests for calculate_preference_completeness."""

    def test_empty(self):
        """Test no categories filled."""
        assert calculate_preference_completeness(FacultyPreferences(faculty_id="F1")) == 0

    def test_one_category(self):
        """Test one of three categories."""
        prefs = FacultyPreferences(faculty_id="F1", room_preferences=[RoomPreference(room_id="R1")])
        assert calculate_preference_completeness(prefs) == 33

    def test_two_categories(self):
        """Test two of three categories."""
        prefs = FacultyPreferences(
            faculty_id="F1",
            room_preferences=[RoomPreference(room_id="R1")],
            time_preferences=[TimePreference(day="Mon", start_time="09:00", end_time="10:00")],
        )
        assert calculate_preference_completeness(prefs) == 67

    def test_all_categories(self):
        """Test that repeated entries do not count twice."""
        prefs = FacultyPreferences(
            faculty_id="F1",
            room_preferences=[RoomPreference(room_id="R1"), RoomPreference(room_id="R2")],
            time_preferences=[TimePreference(day="Mon", start_time="09:00", end_time="10:00")],
            subject_preferences=[SubjectPreference(course_code="CS101")],
        )
        assert calculate_preference_completeness(prefs) == 100
