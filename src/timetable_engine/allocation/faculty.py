"""Round-robin faculty assignment by expertise and workload."""

import logging
from collections import defaultdict

from ..models import Course, Faculty, TimeSlot

logger = logging.getLogger(__name__)


class FacultyAssigner:
    """Picks a faculty member for each placed teaching hour.

    Candidates are tried in three tiers: faculty whose expertise covers
    the course code, then faculty of the course's department, then anyone
    with spare hours. Within a tier the least-loaded members share the
    work through a rotation counter owned by this instance.

    Expertise is a faculty member's preferred subjects, or the codes of
    all courses of their department when they declared none.
    """

    def __init__(self, faculty: list[Faculty], rotation_seed: int = 0):
        self.faculty = list(faculty)
        self.rotation_seed = rotation_seed
        self._rotation = rotation_seed
        self._expertise: dict[str, set[str]] = {}
        self._hours: dict[str, int] = defaultdict(int)
        # faculty slot key -> course id
        self._busy: dict[str, str] = {}

    @property
    def has_faculty(self) -> bool:
        return bool(self.faculty)

    def build_expertise(self, courses: list[Course]) -> dict[str, set[str]]:
        """Map each faculty id to the course codes they can teach."""
        by_department: dict[str, set[str]] = defaultdict(set)
        for course in courses:
            by_department[course.department].add(course.code)

        self._expertise = {
            f.id: set(f.preferred_subjects) if f.preferred_subjects else set(by_department[f.department])
            for f in self.faculty
        }
        return self._expertise

    @staticmethod
    def get_slot_key(faculty_id: str, time_slot: TimeSlot) -> str:
        return f"{faculty_id}|{time_slot.day.value}|{time_slot.start_time}"

    def get_workload(self, faculty_id: str) -> int:
        return self._hours.get(faculty_id, 0)

    def can_take_more_hours(self, faculty: Faculty) -> bool:
        return self.get_workload(faculty.id) < faculty.max_hours_per_week

    def is_available(self, faculty: Faculty, time_slot: TimeSlot) -> bool:
        return self.get_slot_key(faculty.id, time_slot) not in self._busy

    def find_best_faculty(self, course: Course, time_slot: TimeSlot | None = None) -> Faculty | None:
        """Choose a faculty member for one hour of a course.

        Faculty at their weekly maximum, or already teaching at the time
        slot, are skipped entirely.

        Args:
            course: Course being taught.
            time_slot: Slot of the hour; availability is ignored if None.

        Returns:
            Chosen faculty member, or None if nobody can take the hour.
        """
        available = [
            f
            for f in self.faculty
            if self.can_take_more_hours(f) and (time_slot is None or self.is_available(f, time_slot))
        ]
        if not available:
            logger.debug(f"No faculty available for {course.code} at {time_slot}")
            return None

        experts = [f for f in available if course.code in self._expertise.get(f.id, set())]
        if experts:
            return self._pick_least_loaded(experts)

        same_department = [f for f in available if f.department == course.department]
        if same_department:
            return self._pick_least_loaded(same_department)

        return self._pick_least_loaded(available)

    def _pick_least_loaded(self, candidates: list[Faculty]) -> Faculty:
        min_load = min(self.get_workload(f.id) for f in candidates)
        least_loaded = [f for f in candidates if self.get_workload(f.id) == min_load]
        selected = least_loaded[self._rotation % len(least_loaded)]
        self._rotation += 1
        return selected

    def record_assignment(self, faculty: Faculty, time_slot: TimeSlot, course_id: str) -> None:
        """Book a faculty member for one hour."""
        self._busy[self.get_slot_key(faculty.id, time_slot)] = course_id
        self._hours[faculty.id] += 1

    def get_workloads(self) -> dict[str, int]:
        return {f.id: self.get_workload(f.id) for f in self.faculty}

    def reset(self) -> None:
        self._rotation = self.rotation_seed
        self._hours.clear()
        self._busy.clear()
