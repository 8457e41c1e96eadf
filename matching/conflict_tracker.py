"""ConflictTracker – verhindert Doppelbuchungen über Gruppen hinweg.

Eine Person darf in beliebig vielen Gruppen sein, solange sich deren Termine
nicht überschneiden. Ausschluss erfolgt nur über die Zeit, nicht über den Kurs.
"""

import logging
import threading
from typing import Optional

from pydantic import BaseModel

from models.availability import AvailabilityWindow
from models.group import Group
from models.registry import CommittedSlot, ConflictRegistry
from models.result import ConflictRecord
from matching.availability import windows_overlap

logger = logging.getLogger(__name__)


class CommitOutcome(BaseModel):
    """Ergebnis von check_and_commit: angenommen oder Konflikt."""

    accepted: bool
    student_id: str
    window: AvailabilityWindow
    conflicting: list[CommittedSlot] = []

    @property
    def conflicting_windows(self) -> list[AvailabilityWindow]:
        return [s.window for s in self.conflicting]


def find_conflicts(
    student_id: str, window: AvailabilityWindow, registry: ConflictRegistry
) -> list[CommittedSlot]:
    """Alle eingetragenen Treffen der Person, die das Fenster überlappen."""
    return [s for s in registry.get(student_id) if windows_overlap(s.window, window)]


def check_and_commit(
    student_id: str,
    proposed_window: AvailabilityWindow,
    registry: ConflictRegistry,
    group_id: Optional[str] = None,
    course_id: Optional[str] = None,
) -> CommitOutcome:
    """Trägt das Fenster ein, wenn es mit nichts kollidiert.

    Bei Konflikt bleibt die Registry unverändert. Dasselbe Fenster zweimal
    einzutragen ergibt beim zweiten Mal einen Konflikt.
    """
    conflicting = find_conflicts(student_id, proposed_window, registry)
    if conflicting:
        return CommitOutcome(
            accepted=False, student_id=student_id,
            window=proposed_window, conflicting=conflicting,
        )
    registry.add(
        student_id,
        CommittedSlot(window=proposed_window, group_id=group_id, course_id=course_id),
    )
    return CommitOutcome(accepted=True, student_id=student_id, window=proposed_window)


class ConflictTracker:
    """Atomare Gruppen-Eintragung in eine Registry.

    Verwendung:
        tracker = ConflictTracker(registry)
        conflicts = tracker.commit_group(group)
    """

    def __init__(self, registry: ConflictRegistry) -> None:
        self.registry = registry
        # Serialisiert alle Schreibzugriffe auf die Registry
        self._lock = threading.Lock()

    def check_and_commit(
        self,
        student_id: str,
        proposed_window: AvailabilityWindow,
        group_id: Optional[str] = None,
        course_id: Optional[str] = None,
    ) -> CommitOutcome:
        with self._lock:
            return check_and_commit(
                student_id, proposed_window, self.registry, group_id, course_id
            )

    def commit_group(self, group: Group) -> list[ConflictRecord]:
        """Prüft alle Mitglieder und trägt nur ein, wenn keines kollidiert.

        Gibt die Konflikte zurück (leer = Gruppe eingetragen).
        """
        if group.meeting_window is None:
            raise ValueError(f"Gruppe {group.id} hat keinen Termin und wird nicht eingetragen")
        if len(set(group.members)) != len(group.members):
            raise ValueError(f"Gruppe {group.id} enthält eine Person mehrfach")
        window = group.meeting_window

        with self._lock:
            records: list[ConflictRecord] = []
            for sid in group.members:
                conflicting = find_conflicts(sid, window, self.registry)
                if conflicting:
                    records.append(ConflictRecord(
                        student_id=sid,
                        group_id=group.id,
                        course_id=group.course_id,
                        window=window,
                        competing_group_ids=[s.group_id or "extern" for s in conflicting],
                        overlapping_windows=[s.window for s in conflicting],
                    ))
            if records:
                logger.warning(
                    f"Gruppe {group.id}: {len(records)} Terminkonflikt(e) bei {window} "
                    f"({', '.join(r.student_id for r in records)})"
                )
                return records

            slot = CommittedSlot(window=window, group_id=group.id, course_id=group.course_id)
            for sid in group.members:
                self.registry.add(sid, slot)
            return []
