"""Datenmodelle für Studierende und Kurse (Pydantic v2)."""

from pydantic import BaseModel, ConfigDict, field_validator

from models.availability import AvailabilityWindow


class Course(BaseModel):
    """Ein Kurs. Die Teilnehmerliste wird aus den Einschreibungen abgeleitet."""

    id: str                # "SQA101"
    name: str = ""         # "Software-Qualitätssicherung"

    @field_validator("id")
    @classmethod
    def normalize_id(cls, v: str) -> str:
        return v.strip().upper()


class Student(BaseModel):
    """Repräsentiert eine einzelne Studierende / einen Studierenden.

    Eingabe eines Matching-Laufs; wird vom Engine nie verändert.
    Kurse dürfen hier leer sein, der Lauf lehnt solche Datensätze aber ab.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    courses: tuple[str, ...]                        # Eingeschriebene Kurse (geordnet)
    difficult_topics: frozenset[str] = frozenset()  # Schwache Themen ("rekursion", ...)
    availability: tuple[AvailabilityWindow, ...] = ()

    @field_validator("courses", mode="before")
    @classmethod
    def normalize_courses(cls, v):
        if isinstance(v, str):
            v = [c for c in v.split(",") if c.strip()]
        return tuple(c.strip().upper() if isinstance(c, str) else c for c in v)

    @field_validator("difficult_topics", mode="before")
    @classmethod
    def normalize_topics(cls, v):
        if isinstance(v, str):
            v = v.split(",")
        return frozenset(t.strip().lower() for t in v if t and t.strip())

    @field_validator("availability", mode="before")
    @classmethod
    def parse_windows(cls, v):
        if isinstance(v, str):
            v = [t for t in v.split(";") if t.strip()]
        return tuple(
            AvailabilityWindow.parse(w) if isinstance(w, str) else w for w in v
        )

    def is_enrolled(self, course_id: str) -> bool:
        return course_id.upper() in self.courses

    @property
    def weekly_minutes(self) -> int:
        """Summe der angegebenen Verfügbarkeit (ohne Vereinigung)."""
        return sum(w.duration_minutes for w in self.availability)
