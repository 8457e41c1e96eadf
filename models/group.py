"""Datenmodell für eine Lerngruppe (Pydantic v2)."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from models.availability import AvailabilityWindow


class GroupStatus(str, Enum):
    FORMED = "formed"            # Termin gefunden und eingetragen
    NEEDS_TIME = "needs-time"    # Keine gemeinsame Zeit, Termin muss abgesprochen werden
    REJECTED = "rejected"        # Termin kollidiert mit bestehender Verpflichtung


class Group(BaseModel):
    """Eine Lerngruppe innerhalb eines Kurses."""

    id: str                                       # "SQA101-G01"
    course_id: str
    members: list[str]                            # Student-IDs, Reihenfolge = Aufnahme
    meeting_window: Optional[AvailabilityWindow] = None
    status: GroupStatus = GroupStatus.FORMED
    is_undersized: bool = False                   # < min_group_size (nur wenn erlaubt)
    is_overflow: bool = False                     # > max_group_size (max. eine pro Kurs)
    compatibility_score: float = 0.0

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def is_active(self) -> bool:
        """Aktive Gruppen zählen als Platzierung (abgelehnte nicht)."""
        return self.status != GroupStatus.REJECTED

    def __str__(self) -> str:
        window = str(self.meeting_window) if self.meeting_window else "ohne Termin"
        return f"{self.id} [{self.status.value}] {window}: {', '.join(self.members)}"
