from pydantic import BaseModel, Field, model_validator
from typing import Optional
from enum import Enum


class ScoringStrategy(str, Enum):
    # Gemeinsame schwache Themen werden belohnt
    SHARED = "shared"
    # Unterschiedliche schwache Themen werden belohnt (Stärken ergänzen sich)
    COMPLEMENTARY = "complementary"


# ─── GRUPPENBILDUNG ───

class MatchingConfig(BaseModel):
    """Harte Parameter der Gruppenbildung.

    Gruppengrößen gelten pro Kurs. Über- oder unterbesetzte Gruppen entstehen
    nur, wenn sie ausdrücklich erlaubt sind, und werden dann markiert.
    """
    # Minimale Gruppengröße (mind. 2)
    min_group_size: int = Field(3, ge=2,
        description="Minimale Gruppengröße")
    # Maximale Gruppengröße
    max_group_size: int = Field(5, ge=2,
        description="Maximale Gruppengröße")
    # Kurse mit zu wenigen Teilnehmenden dürfen eine kleinere Gruppe bilden
    allow_undersized_groups: bool = Field(False,
        description="Unterbesetzte Gruppe erlauben (statt 'insufficient-pool')")
    # Reste (≥ 2), die in keine Gruppe passen, bilden eine kleine Restgruppe
    allow_undersized_leftover_group: bool = Field(False,
        description="Kleine Restgruppe statt 'no-compatible-group'")
    # Eine Gruppe pro Kurs darf Restplätze über max_group_size aufnehmen
    allow_overflow_group: bool = Field(False,
        description="Eine überbesetzte Gruppe pro Kurs für Reste erlauben")
    # Zeitlimit für einen kompletten Lauf (None = unbegrenzt)
    deadline_seconds: Optional[float] = Field(None, gt=0,
        description="Zeitlimit eines Laufs in Sekunden")
    # Dauer eines Treffens; None = das ganze gemeinsame Fenster wird belegt
    meeting_duration_minutes: Optional[int] = Field(None, ge=15, le=24 * 60,
        description="Dauer eines Treffens in Minuten (None = ganzes Fenster)")
    # Threads für die Gruppenbildung pro Kurs (1 = sequentiell)
    num_workers: int = Field(1, ge=1, le=64,
        description="Threads für die Gruppenbildung (1=sequentiell)")

    @model_validator(mode='after')
    def validate_bounds(self):
        if self.max_group_size < self.min_group_size:
            raise ValueError(
                f"max_group_size ({self.max_group_size}) < "
                f"min_group_size ({self.min_group_size})")
        return self


# ─── KOMPATIBILITÄT ───

class ScoringConfig(BaseModel):
    """Gewichtung der paarweisen Kompatibilität.

    score = (base_score + topic_weight * Themen-Treffer) * Überlappung in Stunden
    Paare ohne gemeinsame Zeit erhalten immer 0.
    """
    # Auswahl der Themen-Bewertung
    strategy: ScoringStrategy = Field(ScoringStrategy.SHARED)
    # Grundwert für jedes Paar mit gemeinsamer Zeit
    base_score: float = Field(1.0, ge=0.0,
        description="Grundwert pro Paar mit gemeinsamer Zeit")
    # Gewicht pro Themen-Treffer
    topic_weight: float = Field(1.0, ge=0.0,
        description="Gewicht pro Themen-Treffer")


# ─── TESTDATEN ───

class FakeDataConfig(BaseModel):
    """Parameter für den Testdaten-Generator."""
    num_students: int = Field(120, ge=1, le=100_000)
    num_courses: int = Field(6, ge=1, le=200)
    # Wie viele Kurse belegt eine Person höchstens
    max_courses_per_student: int = Field(3, ge=1, le=10)
    # Anzahl Verfügbarkeitsfenster pro Person (Bereich)
    min_windows: int = Field(1, ge=0)
    max_windows: int = Field(4, ge=1)

    @model_validator(mode='after')
    def validate_windows(self):
        if self.max_windows < self.min_windows:
            raise ValueError("max_windows < min_windows")
        return self


# ─── GESAMT-CONFIG ───

class StudyGroupConfig(BaseModel):
    """Gesamtkonfiguration des Lerngruppen-Matchers."""
    # Name der Hochschule
    institution_name: str = Field("Muster-Hochschule",
        description="Name der Hochschule")
    # Semester, z.B. "WS 2026/27"
    term: str = Field("WS 2026/27")
    # Gruppenbildung
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    # Kompatibilitäts-Bewertung
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    # Testdaten-Generator
    fake_data: FakeDataConfig = Field(default_factory=FakeDataConfig)
