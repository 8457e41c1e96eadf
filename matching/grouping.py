"""Gierige, deterministische Gruppenbildung innerhalb eines Kurses.

Ablauf pro Kurs:
  1. Pool nach ID sortieren (reproduzierbar)
  2. Paarweise Kompatibilität berechnen (siehe scoring.py)
  3. Gruppe starten: Person mit der höchsten Rest-Kompatibilität als Keim,
     dann jeweils die Person mit der höchsten Summe gegenüber den Mitgliedern
     hinzunehmen, solange die gemeinsame Zeit nicht leer wird
  4. Wiederholen, solange noch min_group_size Personen übrig sind
  5. Reste auf bestehende Gruppen verteilen (max_group_size, gemeinsame Zeit);
     was nicht passt, ist no-compatible-group. Überlauf-Gruppe und kleine
     Restgruppe gibt es nur mit allow_overflow_group bzw.
     allow_undersized_leftover_group.

Die Prüfung des Zeitlimits läuft pro Matrix-Zeile und pro Aufnahme-Schritt.

Gruppen werden bis zu einer ausgeglichenen Zielgröße gefüllt statt bis
max_group_size, damit z.B. 7 Personen bei 3-4 als 4+3 aufgehen.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Optional

from config.schema import MatchingConfig
from models.availability import AvailabilityWindow
from models.group import Group
from models.result import UnmatchedReason, UnmatchedStudent
from models.student import Student
from matching.availability import intersect_merged, union
from matching.scoring import CompatibilityScorer, SharedTopicScorer, build_compatibility_matrix

logger = logging.getLogger(__name__)


@dataclass
class _Draft:
    """Gruppe im Aufbau."""

    members: list[str]
    common: list[AvailabilityWindow]
    is_undersized: bool = False
    is_overflow: bool = False


@dataclass
class GroupingOutcome:
    """Vorgeschlagene Gruppen (noch ohne Termin) und Reste eines Kurses."""

    course_id: str
    groups: list[Group] = field(default_factory=list)
    unmatched: list[UnmatchedStudent] = field(default_factory=list)


def target_group_size(remaining: int, min_size: int, max_size: int) -> int:
    """Ausgeglichene Zielgröße für die nächste Gruppe.

    k = ceil(r / max) Gruppen, Zielgröße ceil(r / k). Liegt das unter min,
    wird mit so vielen Gruppen geplant, wie min-große Gruppen möglich sind.
    """
    k = math.ceil(remaining / max_size)
    target = math.ceil(remaining / k)
    if target < min_size:
        k = max(1, remaining // min_size)
        target = min(max_size, math.ceil(remaining / k))
    return target


class GroupingStrategy:
    """Partitioniert den Pool eines Kurses in Gruppen.

    Hält Zwischenstände pro Lauf; bei paralleler Verarbeitung eine Instanz pro Kurs.

    Verwendung:
        strategy = GroupingStrategy(config, scorer)
        outcome = strategy.partition("SQA101", students)
    """

    def __init__(
        self,
        config: MatchingConfig,
        scorer: Optional[CompatibilityScorer] = None,
        check_deadline: Optional[Callable[[], None]] = None,
    ) -> None:
        self.config = config
        self.scorer = scorer or SharedTopicScorer()
        # Wirft MatchingTimeoutError, wenn das Zeitlimit überschritten ist
        self._check_deadline = check_deadline or (lambda: None)

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def partition(self, course_id: str, pool: list[Student]) -> GroupingOutcome:
        """Bildet Gruppen für einen Kurs. Reihenfolge des Pools ist egal."""
        outcome = GroupingOutcome(course_id=course_id)
        students = sorted(pool, key=lambda s: s.id)
        n = len(students)
        min_size = self.config.min_group_size
        max_size = self.config.max_group_size

        if n == 0:
            return outcome

        if n == 1:
            outcome.unmatched.append(self._unmatched(
                students[0].id, course_id, UnmatchedReason.INSUFFICIENT_POOL,
                "einzige Person im Kurs",
            ))
            return outcome

        self._windows = {s.id: union(s.availability) for s in students}
        self._scores = build_compatibility_matrix(
            students, self.scorer, self._windows, self._check_deadline
        )
        unplaced = [s.id for s in students]
        self._remaining_totals = {}
        for sid in unplaced:
            self._check_deadline()
            self._remaining_totals[sid] = self._aggregate(sid, [o for o in unplaced if o != sid])

        if n < min_size:
            if self.config.allow_undersized_groups:
                draft = self._grow_group(unplaced, target=n, min_fill=n)
                draft.is_undersized = True
                outcome.groups = self._finalize(course_id, [draft])
            else:
                outcome.unmatched = [
                    self._unmatched(
                        sid, course_id, UnmatchedReason.INSUFFICIENT_POOL,
                        f"{n} Teilnehmende < min_group_size {min_size}",
                    )
                    for sid in unplaced
                ]
            return outcome

        drafts: list[_Draft] = []
        while len(unplaced) >= min_size:
            self._check_deadline()
            target = target_group_size(len(unplaced), min_size, max_size)
            drafts.append(self._grow_group(unplaced, target=target, min_fill=min_size))

        leftovers = self._place_leftovers(unplaced, drafts)

        if leftovers and self.config.allow_undersized_leftover_group and len(leftovers) >= 2:
            for sid in leftovers:
                self._remaining_totals[sid] = self._aggregate(sid, [o for o in leftovers if o != sid])
            draft = self._grow_group(list(leftovers), target=len(leftovers), min_fill=len(leftovers))
            draft.is_undersized = True
            drafts.append(draft)
            leftovers = []

        outcome.groups = self._finalize(course_id, drafts)
        outcome.unmatched = [
            self._unmatched(
                sid, course_id, UnmatchedReason.NO_COMPATIBLE_GROUP,
                "keine Gruppe mit freiem Platz und gemeinsamer Zeit",
            )
            for sid in leftovers
        ]
        logger.info(
            f"Kurs {course_id}: {n} Personen → {len(outcome.groups)} Gruppe(n), "
            f"{len(outcome.unmatched)} Rest"
        )
        return outcome

    # ─── Gruppenaufbau ────────────────────────────────────────────────────────

    def _aggregate(self, sid: str, members: list[str]) -> float:
        return sum(self._scores[(sid, m)] for m in members)

    def _take(self, sid: str, unplaced: list[str]) -> None:
        """Entfernt sid aus dem Pool und aktualisiert die Rest-Summen."""
        unplaced.remove(sid)
        for other in unplaced:
            self._remaining_totals[other] -= self._scores[(other, sid)]

    def _pick_seed(self, unplaced: list[str]) -> str:
        best_id = unplaced[0]
        best_total = self._remaining_totals[best_id]
        for sid in unplaced[1:]:
            if self._remaining_totals[sid] > best_total:
                best_total = self._remaining_totals[sid]
                best_id = sid
        return best_id

    def _grow_group(self, unplaced: list[str], target: int, min_fill: int) -> _Draft:
        """Baut eine Gruppe aus dem Pool auf (verändert unplaced)."""
        seed = self._pick_seed(unplaced)
        self._take(seed, unplaced)
        draft = _Draft(members=[seed], common=list(self._windows[seed]))

        while len(draft.members) < target and unplaced:
            self._check_deadline()
            best_keep: Optional[tuple[float, str, list[AvailabilityWindow]]] = None
            best_any: Optional[tuple[float, str]] = None
            for sid in unplaced:
                agg = self._aggregate(sid, draft.members)
                if best_any is None or agg > best_any[0]:
                    best_any = (agg, sid)
                if not draft.common:
                    continue
                common = intersect_merged(draft.common, self._windows[sid])
                if common and (best_keep is None or agg > best_keep[0]):
                    best_keep = (agg, sid, common)

            if best_keep is not None:
                _, sid, common = best_keep
                draft.common = common
            elif len(draft.members) < min_fill:
                # Mindestgröße geht vor gemeinsamer Zeit (Gruppe wird needs-time)
                _, sid = best_any
                draft.common = []
            else:
                break
            draft.members.append(sid)
            self._take(sid, unplaced)

        return draft

    def _place_leftovers(self, leftovers: list[str], drafts: list[_Draft]) -> list[str]:
        """Verteilt Reste einzeln auf bestehende Gruppen. Gibt Unplatzierte zurück."""
        max_size = self.config.max_group_size
        remaining: list[str] = []

        for sid in list(leftovers):
            self._check_deadline()
            choice = self._best_host(sid, [d for d in drafts if len(d.members) < max_size])
            if choice is None and self.config.allow_overflow_group:
                overflow = [d for d in drafts if d.is_overflow]
                hosts = overflow or [d for d in drafts if len(d.members) >= max_size]
                choice = self._best_host(sid, hosts)
                if choice is not None:
                    choice[0].is_overflow = True
            if choice is None:
                remaining.append(sid)
                continue
            host, common = choice
            host.members.append(sid)
            host.common = common
        return remaining

    def _best_host(
        self, sid: str, hosts: list[_Draft]
    ) -> Optional[tuple[_Draft, list[AvailabilityWindow]]]:
        """Beste Gruppe für einen Rest: gemeinsame Zeit bleibt erhalten, dann Score.

        Gruppen, die schon keine gemeinsame Zeit haben, dürfen ebenfalls aufnehmen.
        """
        best = None
        best_key = None
        for idx, draft in enumerate(hosts):
            if draft.common:
                common = intersect_merged(draft.common, self._windows[sid])
                if not common:
                    continue
                keeps_time = 1
            else:
                common = []
                keeps_time = 0
            key = (keeps_time, self._aggregate(sid, draft.members), -idx)
            if best_key is None or key > best_key:
                best_key = key
                best = (draft, common)
        return best

    # ─── Ergebnis ─────────────────────────────────────────────────────────────

    def _finalize(self, course_id: str, drafts: list[_Draft]) -> list[Group]:
        groups: list[Group] = []
        for i, draft in enumerate(drafts, 1):
            members = draft.members
            score = sum(
                self._scores[(a, b)]
                for j, a in enumerate(members) for b in members[j + 1:]
            )
            groups.append(Group(
                id=f"{course_id}-G{i:02d}",
                course_id=course_id,
                members=list(members),
                is_undersized=draft.is_undersized,
                is_overflow=draft.is_overflow,
                compatibility_score=round(score, 2),
            ))
        return groups

    @staticmethod
    def _unmatched(
        student_id: str, course_id: str, reason: UnmatchedReason, detail: str
    ) -> UnmatchedStudent:
        return UnmatchedStudent(
            student_id=student_id, course_id=course_id, reason=reason, detail=detail,
        )
