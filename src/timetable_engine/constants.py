"""Constants for the timetable allocation engine."""

import re

# Day ordering used when sorting the time grid
DAY_ORDER = {
    "Mon": 0,
    "Tue": 1,
    "Wed": 2,
    "Thu": 3,
    "Fri": 4,
    "Sat": 5,
}

# Default weekly grid: Mon-Fri, one-hour slots with a lunch break at 12:00
DEFAULT_GRID_DAYS = ("Mon", "Tue", "Wed", "Thu", "Fri")
DEFAULT_GRID_START_TIMES = (
    "08:00",
    "09:00",
    "10:00",
    "11:00",
    "13:00",
    "14:00",
    "15:00",
    "16:00",
)
DEFAULT_SLOT_MINUTES = 60

# 24-hour HH:MM with optional leading zero on the hour
TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")

# Faculty workload
DEFAULT_MAX_HOURS_PER_WEEK = 20

# Expected class size by course number: (exclusive upper bound, size)
EXPECTED_SIZE_BY_NUMBER = ((200, 60), (300, 40), (400, 30))
SENIOR_EXPECTED_SIZE = 25
DEFAULT_EXPECTED_SIZE = 30

# Class size heuristic used by the post-hoc schedule validator
VALIDATOR_SIZE_BY_NUMBER = ((200, 60), (300, 40), (400, 30))
VALIDATOR_DEFAULT_SIZE = 20
LOW_OCCUPANCY_RATIO = 0.3

# Lab handling
LAB_SIZE_CAP = 30
LAB_NAME_KEYWORDS = ("lab", "laboratory", "practical", "workshop")
LAB_CODE_SUFFIX_PATTERN = re.compile(r"\d+l$", re.IGNORECASE)
SESSION_LAB_FACILITIES = ("computers", "equipment")

# Facility sets by lab field, checked in order: (department keywords, name keywords, facilities)
LAB_FACILITY_RULES = (
    (
        ("computer", "ise", "it", "software"),
        ("programming", "software", "web", "database"),
        ("computers", "software", "internet"),
    ),
    (("physics",), ("physics",), ("physics equipment", "oscilloscopes")),
    (("chemistry",), ("chemistry",), ("fume hoods", "safety equipment")),
    (("biology", "bio"), ("biology", "microbiology"), ("microscopes", "incubators")),
    ((), ("electronics", "circuit"), ("electronics equipment", "oscilloscopes")),
)
DEFAULT_LAB_FACILITIES = ("equipment",)

# Preferred capacity range around the expected size
CAPACITY_RANGE_LOWER = 0.6
CAPACITY_RANGE_UPPER = 1.8

# Engine scoring
SUITABILITY_SHARE = 0.7
UTILIZATION_SHARE = 0.3
CONFIDENCE_PENALTIES = {"high": 30, "medium": 15, "low": 5}
UTILIZATION_BONUS_FACTOR = 0.2
OVERSIZED_ROOM_FACTOR = 2.5
MAX_ALTERNATIVE_ROOMS = 3

# Utilization balancing
BALANCING_SPREAD_THRESHOLD = 10
NEAR_TIE_WINDOW = 5
REBALANCE_STDDEV = 15
HIGH_VARIANCE_STDDEV = 20

# Preference scoring
PRIORITY_MULTIPLIERS = {"high": 1.2, "medium": 1.0, "low": 0.8}
EXPERTISE_SCORES = {"expert": 100, "proficient": 80, "basic": 60, "willing": 40}
NO_SUBJECT_PREFERENCE_SCORE = 30
NEUTRAL_PREFERENCE_SCORE = 50
PREFERENCE_CATEGORY_WEIGHTS = {"room": 0.3, "time": 0.4, "subject": 0.3}
SATISFACTION_BANDS = ((80, "excellent"), (65, "good"), (45, "acceptable"))

# Preference validation
VALID_PREFERENCE_DAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
KNOWN_FACILITIES = ("projector", "whiteboard", "computer", "audio_system", "video_conference")
MIN_PREFERENCE_MINUTES = 30
MAX_PREFERENCE_MINUTES = 180
WORKLOAD_TOLERANCE = 1.2

# Preference-aware allocation
PREFERENCE_BLEND = {"allocation": 0.6, "preference": 0.4}
MIN_SUGGESTION_IMPROVEMENT = 10
MAX_SUGGESTIONS = 5

# CP-SAT solver
DEFAULT_TIME_LIMIT = 30
SOLVER_RANDOM_SEED = 42
