"""Paarweise Kompatibilität zwischen Studierenden.

score = (base_score + topic_weight * Themen-Treffer) * gemeinsame Stunden

Was als Themen-Treffer zählt, entscheidet die Strategie:
  - shared:        gemeinsame schwache Themen
  - complementary: Themen, die nur einer der beiden schwach findet
Paare ohne gemeinsame Zeit erhalten 0 (nachrangig, aber nicht verboten).
"""

from typing import Callable, Optional, Sequence

from config.schema import ScoringConfig, ScoringStrategy
from models.availability import AvailabilityWindow
from models.student import Student
from matching.availability import overlap_minutes_merged, union


class CompatibilityScorer:
    """Basisklasse; Unterklassen definieren topic_matches()."""

    name = "base"

    def __init__(self, base_score: float = 1.0, topic_weight: float = 1.0) -> None:
        self.base_score = base_score
        self.topic_weight = topic_weight

    def topic_matches(self, a: Student, b: Student) -> int:
        raise NotImplementedError

    def score(self, a: Student, b: Student) -> float:
        return self.score_merged(a, b, union(a.availability), union(b.availability))

    def score_merged(
        self,
        a: Student,
        b: Student,
        windows_a: Sequence[AvailabilityWindow],
        windows_b: Sequence[AvailabilityWindow],
    ) -> float:
        """Wie score(), mit bereits vereinigten Fenstern beider Personen."""
        minutes = overlap_minutes_merged(windows_a, windows_b)
        if minutes == 0:
            return 0.0
        topic_part = self.base_score + self.topic_weight * self.topic_matches(a, b)
        return topic_part * (minutes / 60.0)

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(base_score={self.base_score}, "
                f"topic_weight={self.topic_weight})")


class SharedTopicScorer(CompatibilityScorer):
    """+1 pro gemeinsamem schwachen Thema."""

    name = ScoringStrategy.SHARED.value

    def topic_matches(self, a: Student, b: Student) -> int:
        return len(a.difficult_topics & b.difficult_topics)


class ComplementaryTopicScorer(CompatibilityScorer):
    """+1 pro Thema, das nur eine der beiden Personen schwach findet."""

    name = ScoringStrategy.COMPLEMENTARY.value

    def topic_matches(self, a: Student, b: Student) -> int:
        return len(a.difficult_topics ^ b.difficult_topics)


_SCORERS: dict[ScoringStrategy, type[CompatibilityScorer]] = {
    ScoringStrategy.SHARED: SharedTopicScorer,
    ScoringStrategy.COMPLEMENTARY: ComplementaryTopicScorer,
}


def make_scorer(config: Optional[ScoringConfig] = None) -> CompatibilityScorer:
    """Erzeugt den Scorer passend zur Konfiguration (Default: shared)."""
    config = config or ScoringConfig()
    return _SCORERS[config.strategy](
        base_score=config.base_score, topic_weight=config.topic_weight
    )


def build_compatibility_matrix(
    students: list[Student],
    scorer: CompatibilityScorer,
    windows: Optional[dict[str, list[AvailabilityWindow]]] = None,
    check_deadline: Optional[Callable[[], None]] = None,
) -> dict[tuple[str, str], float]:
    """Symmetrische Matrix {(id_a, id_b): score} für alle Paare.

    windows: vereinigte Fenster pro ID (sonst hier berechnet).
    check_deadline: wird einmal pro Zeile aufgerufen und darf abbrechen.
    """
    if windows is None:
        windows = {s.id: union(s.availability) for s in students}
    scores: dict[tuple[str, str], float] = {}
    for i, s1 in enumerate(students):
        if check_deadline is not None:
            check_deadline()
        w1 = windows[s1.id]
        for s2 in students[i + 1:]:
            value = scorer.score_merged(s1, s2, w1, windows[s2.id])
            scores[(s1.id, s2.id)] = value
            scores[(s2.id, s1.id)] = value
    return scores
