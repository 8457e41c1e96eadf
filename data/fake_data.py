"""Testdaten-Generator für den Lerngruppen-Matcher.

Erzeugt reproduzierbare Datensätze mit absichtlichen Engpässen:
  1. Kleiner Kurs: der letzte Kurs erhält nur wenige Einschreibungen
  2. Ohne Verfügbarkeit: ca. 3% der Personen geben keine Zeit an
  3. Abendgruppe: ein Teil lernt nur abends (18-20 Uhr) → needs-time-Kandidaten
"""

import random
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich import box

from config.schema import StudyGroupConfig
from config.defaults import SAMPLE_COURSES, SAMPLE_TOPICS, SAMPLE_TIME_BLOCKS
from models.availability import AvailabilityWindow
from models.student import Course, Student
from models.student_pool import StudentPool

# ─── Namens-Listen ────────────────────────────────────────────────────────────

_FIRST_NAMES = [
    "Anna", "Ben", "Clara", "David", "Elif", "Finn", "Greta", "Hannes",
    "Ida", "Jonas", "Kira", "Leon", "Mia", "Noah", "Ole", "Paula",
    "Quentin", "Rosa", "Samir", "Tara", "Uwe", "Vera", "Yusuf", "Zoe",
]

_LAST_NAMES = [
    "Müller", "Schmidt", "Schneider", "Fischer", "Weber", "Meyer",
    "Wagner", "Becker", "Schulz", "Hoffmann", "Koch", "Bauer",
    "Richter", "Klein", "Wolf", "Neumann", "Schwarz", "Braun",
]

_NO_TIME_RATE = 0.03
_EVENING_RATE = 0.05


class FakeStudentGenerator:
    """Generiert einen vollständigen StudentPool auf Basis der Config."""

    def __init__(self, config: StudyGroupConfig, seed: Optional[int] = None) -> None:
        self.config = config
        self.fake = config.fake_data
        self.rng = random.Random(seed)

    def generate(self) -> StudentPool:
        """Erzeugt Kurse und Studierende."""
        courses = self._make_courses()
        course_ids = [c.id for c in courses]
        students = [
            self._make_student(i, course_ids) for i in range(1, self.fake.num_students + 1)
        ]
        return StudentPool(students=students, courses=courses)

    # ─── Einzelteile ──────────────────────────────────────────────────────────

    def _make_courses(self) -> list[Course]:
        courses: list[Course] = []
        sample = list(SAMPLE_COURSES.items())
        for i in range(self.fake.num_courses):
            if i < len(sample):
                cid, name = sample[i]
            else:
                cid, name = f"EXT{100 + i}", f"Wahlkurs {i + 1}"
            courses.append(Course(id=cid, name=name))
        return courses

    def _make_student(self, index: int, course_ids: list[str]) -> Student:
        rng = self.rng
        # Engpass 1: letzter Kurs wird nur selten gewählt
        weights = [1.0] * len(course_ids)
        if len(course_ids) > 1:
            weights[-1] = 0.05
        n_courses = rng.randint(1, min(self.fake.max_courses_per_student, len(course_ids)))
        chosen: list[str] = []
        while len(chosen) < n_courses:
            cid = rng.choices(course_ids, weights=weights, k=1)[0]
            if cid not in chosen:
                chosen.append(cid)

        topics: set[str] = set()
        for cid in chosen:
            pool = SAMPLE_TOPICS.get(cid, ["grundlagen", "übungsaufgaben", "prüfungsvorbereitung"])
            topics.update(rng.sample(pool, k=rng.randint(0, min(2, len(pool)))))

        return Student(
            id=f"S{index:04d}",
            name=f"{rng.choice(_FIRST_NAMES)} {rng.choice(_LAST_NAMES)}",
            courses=chosen,
            difficult_topics=topics,
            availability=self._make_windows(),
        )

    def _make_windows(self) -> list[AvailabilityWindow]:
        rng = self.rng
        roll = rng.random()
        # Engpass 2: keine Angabe
        if roll < _NO_TIME_RATE:
            return []
        # Engpass 3: nur abends
        if roll < _NO_TIME_RATE + _EVENING_RATE:
            return [AvailabilityWindow(day=rng.randint(0, 4), start="18:00", end="20:00")]

        n = rng.randint(max(1, self.fake.min_windows), self.fake.max_windows)
        windows: list[AvailabilityWindow] = []
        for _ in range(n):
            start, end = rng.choice(SAMPLE_TIME_BLOCKS)
            windows.append(AvailabilityWindow(day=rng.randint(0, 4), start=start, end=end))
        return windows

    def print_summary(self, pool: StudentPool) -> None:
        """Gibt eine Kurs-Übersicht über Rich aus."""
        console = Console()
        table = Table(title="Generierte Kurse", box=box.ROUNDED)
        table.add_column("Kurs", style="bold")
        table.add_column("Name")
        table.add_column("Teilnehmende", justify="right")
        buckets = pool.course_buckets()
        for course in pool.courses:
            table.add_row(course.id, course.name, str(len(buckets.get(course.id, []))))
        console.print(table)
