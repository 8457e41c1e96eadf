"""Matching-Orchestrator: kompletter Lauf von Rohdaten bis MatchingResult.

Architektur:
  - Validierung (Config + Studierende) → Abbruch vor jeder Gruppenbildung
  - Kurs-Buckets, sortiert nach Kurs-ID
  - Gruppenbildung pro Kurs (optional parallel, Threads)
  - Termin + atomare Eintragung pro Gruppe, strikt sequentiell in Kursreihenfolge
  - Die übergebene Registry wird nie verändert; der Lauf arbeitet auf einer
    Kopie, die mit dem Ergebnis zurückgegeben wird
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from functools import partial
from typing import Any, Iterable, Optional, Union

from pydantic import ValidationError

from config.schema import MatchingConfig
from models.group import Group, GroupStatus
from models.registry import ConflictRegistry
from models.result import ConflictRecord, MatchingResult, UnmatchedReason, UnmatchedStudent
from models.student import Student
from models.student_pool import bucket_by_course
from matching.availability import choose_meeting_window, intersect_all
from matching.conflict_tracker import ConflictTracker
from matching.errors import InvalidConfigError, InvalidInputError, MatchingTimeoutError
from matching.grouping import GroupingOutcome, GroupingStrategy
from matching.scoring import CompatibilityScorer, SharedTopicScorer

logger = logging.getLogger(__name__)


# ─── Validierung ──────────────────────────────────────────────────────────────

def validate_config(config: Union[MatchingConfig, dict, None]) -> MatchingConfig:
    """Gibt eine geprüfte MatchingConfig zurück oder wirft InvalidConfigError."""
    if config is None:
        return MatchingConfig()
    if isinstance(config, dict):
        try:
            config = MatchingConfig.model_validate(config)
        except ValidationError as e:
            raise InvalidConfigError(f"Konfiguration ungültig: {e}") from e
    # Auch per model_construct erzeugte Configs prüfen
    if config.min_group_size < 2:
        raise InvalidConfigError(
            f"min_group_size muss ≥ 2 sein (ist {config.min_group_size})")
    if config.max_group_size < config.min_group_size:
        raise InvalidConfigError(
            f"max_group_size ({config.max_group_size}) < "
            f"min_group_size ({config.min_group_size})")
    if config.deadline_seconds is not None and config.deadline_seconds <= 0:
        raise InvalidConfigError("deadline_seconds muss > 0 sein")
    if config.num_workers < 1:
        raise InvalidConfigError("num_workers muss ≥ 1 sein")
    return config


def validate_students(students: Iterable[Union[Student, dict]]) -> list[Student]:
    """Parst und prüft alle Datensätze. Ein Fehler bricht den ganzen Lauf ab."""
    parsed: list[Student] = []
    seen: set[str] = set()
    for idx, raw in enumerate(students):
        if isinstance(raw, Student):
            student = raw
        else:
            try:
                student = Student.model_validate(raw)
            except ValidationError as e:
                raise InvalidInputError(f"Datensatz #{idx} ungültig: {e}") from e
        if not student.id:
            raise InvalidInputError(f"Datensatz #{idx}: leere ID")
        if student.id in seen:
            raise InvalidInputError(f"Doppelte ID: {student.id}")
        if not student.courses:
            raise InvalidInputError(f"Person {student.id} hat keinen Kurs")
        if any(not c for c in student.courses):
            raise InvalidInputError(f"Person {student.id}: leere Kurs-ID")
        seen.add(student.id)
        parsed.append(student)
    return parsed


# ─── Haupt-Engine ─────────────────────────────────────────────────────────────

class MatchingEngine:
    """Bildet Lerngruppen für alle Kurse eines Datensatzes.

    Verwendung:
        engine = MatchingEngine(config)
        result = engine.run(students, registry=previous.registry)
    """

    def __init__(
        self,
        config: Union[MatchingConfig, dict, None] = None,
        scorer: Optional[CompatibilityScorer] = None,
    ) -> None:
        self.config = validate_config(config)
        self.scorer = scorer or SharedTopicScorer()

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def run(
        self,
        students: Iterable[Union[Student, dict]],
        registry: Optional[ConflictRegistry] = None,
    ) -> MatchingResult:
        """Führt einen kompletten Lauf durch."""
        t0 = time.monotonic()
        limit = self.config.deadline_seconds
        deadline = t0 + limit if limit is not None else None

        pool = validate_students(students)
        work_registry = registry.copy_registry() if registry is not None else ConflictRegistry()
        buckets = bucket_by_course(pool)

        logger.info(
            f"Matching-Lauf: {len(pool)} Personen, {len(buckets)} Kurse, "
            f"Gruppengröße {self.config.min_group_size}-{self.config.max_group_size}"
        )

        outcomes = self._group_all(buckets, deadline)

        tracker = ConflictTracker(work_registry)
        groups: list[Group] = []
        unmatched: list[UnmatchedStudent] = []
        conflicts: list[ConflictRecord] = []

        for course_id in buckets:
            self._check_deadline(deadline)
            outcome = outcomes[course_id]
            unmatched.extend(outcome.unmatched)
            by_id = {s.id: s for s in buckets[course_id]}
            for group in outcome.groups:
                self._check_deadline(deadline)
                placed, records = self._schedule_group(group, by_id, tracker)
                groups.append(placed)
                if records:
                    conflicts.extend(records)
                    unmatched.extend(
                        UnmatchedStudent(
                            student_id=sid,
                            course_id=course_id,
                            reason=UnmatchedReason.TIME_CONFLICT,
                            detail=f"Gruppe {placed.id} abgelehnt ({placed.meeting_window})",
                        )
                        for sid in placed.members
                    )

        elapsed = time.monotonic() - t0
        result = MatchingResult(
            groups=groups,
            unmatched=unmatched,
            conflicts=conflicts,
            registry=work_registry,
            config_snapshot=self.config,
            scoring_strategy=self.scorer.name,
            run_time_seconds=round(elapsed, 4),
            created_at=datetime.now(timezone.utc),
        )
        logger.info(
            f"Matching beendet: {len(result.active_groups)} aktive Gruppen, "
            f"{len(unmatched)} ohne Gruppe, {len(conflicts)} Konflikte | "
            f"Zeit: {elapsed:.2f}s"
        )
        return result

    # ─── Phasen ───────────────────────────────────────────────────────────────

    def _check_deadline(self, deadline: Optional[float]) -> None:
        if deadline is not None and time.monotonic() > deadline:
            raise MatchingTimeoutError(
                f"Zeitlimit von {self.config.deadline_seconds}s überschritten"
            )

    def _group_course(
        self, course_id: str, pool: list[Student], deadline: Optional[float]
    ) -> GroupingOutcome:
        self._check_deadline(deadline)
        strategy = GroupingStrategy(
            self.config, self.scorer, partial(self._check_deadline, deadline)
        )
        return strategy.partition(course_id, pool)

    def _group_all(
        self, buckets: dict[str, list[Student]], deadline: Optional[float]
    ) -> dict[str, GroupingOutcome]:
        """Gruppenbildung pro Kurs; Kurse sind unabhängig voneinander."""
        workers = min(self.config.num_workers, max(1, len(buckets)))
        if workers <= 1:
            return {cid: self._group_course(cid, pool, deadline) for cid, pool in buckets.items()}

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                cid: executor.submit(self._group_course, cid, pool, deadline)
                for cid, pool in buckets.items()
            }
            # result() gibt Exceptions (auch Timeout) unverändert weiter
            return {cid: fut.result() for cid, fut in futures.items()}

    def _schedule_group(
        self, group: Group, by_id: dict[str, Student], tracker: ConflictTracker
    ) -> tuple[Group, list[ConflictRecord]]:
        """Termin bestimmen und Gruppe eintragen (alles oder nichts)."""
        common = intersect_all([by_id[sid].availability for sid in group.members])
        window = choose_meeting_window(common, self.config.meeting_duration_minutes)

        if window is None:
            logger.warning(f"Gruppe {group.id}: keine gemeinsame Zeit → needs-time")
            return group.model_copy(update={"status": GroupStatus.NEEDS_TIME}), []

        candidate = group.model_copy(update={"meeting_window": window})
        records = tracker.commit_group(candidate)
        if records:
            return candidate.model_copy(update={"status": GroupStatus.REJECTED}), records
        return candidate.model_copy(update={"status": GroupStatus.FORMED}), []


def run_matching(
    students: Iterable[Union[Student, dict[str, Any]]],
    config: Union[MatchingConfig, dict, None] = None,
    registry: Optional[ConflictRegistry] = None,
    scorer: Optional[CompatibilityScorer] = None,
) -> MatchingResult:
    """Einstiegspunkt: ein kompletter Matching-Lauf.

    Wirft InvalidConfigError / InvalidInputError vor jeder Verarbeitung und
    MatchingTimeoutError, wenn deadline_seconds überschritten wird. Alle
    anderen Probleme stehen als Daten im Ergebnis.
    """
    return MatchingEngine(config, scorer).run(students, registry)
