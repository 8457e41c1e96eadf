"""Ergebnis eines Matching-Laufs (Pydantic v2)."""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from config.schema import MatchingConfig
from models.availability import AvailabilityWindow
from models.group import Group, GroupStatus
from models.registry import ConflictRegistry


class UnmatchedReason(str, Enum):
    INSUFFICIENT_POOL = "insufficient-pool"      # Kurs hat zu wenige Teilnehmende
    NO_COMPATIBLE_GROUP = "no-compatible-group"  # Rest passt in keine Gruppe
    TIME_CONFLICT = "time-conflict"              # Gruppe wegen Terminkollision abgelehnt


class UnmatchedStudent(BaseModel):
    """Eine Person, die für einen Kurs keiner Gruppe zugeordnet wurde."""

    student_id: str
    course_id: str
    reason: UnmatchedReason
    detail: str = ""


class ConflictRecord(BaseModel):
    """Abgelehnte Zuordnung wegen überlappender Verpflichtung."""

    student_id: str
    group_id: str                                  # vorgeschlagene Gruppe
    course_id: str
    window: AvailabilityWindow                     # vorgeschlagener Termin
    competing_group_ids: list[str]                 # bereits eingetragene Gruppen
    overlapping_windows: list[AvailabilityWindow]


class MatchingResult(BaseModel):
    """Vollständiges Ergebnis eines Laufs inkl. aktualisierter Registry."""

    groups: list[Group]
    unmatched: list[UnmatchedStudent]
    conflicts: list[ConflictRecord]
    registry: ConflictRegistry
    config_snapshot: MatchingConfig
    scoring_strategy: str = "shared"
    run_time_seconds: float = 0.0
    created_at: Optional[datetime] = None

    # ─── Abfragen ───

    @property
    def active_groups(self) -> list[Group]:
        return [g for g in self.groups if g.is_active]

    def groups_for_course(self, course_id: str) -> list[Group]:
        return [g for g in self.groups if g.course_id == course_id]

    def groups_with_status(self, status: GroupStatus) -> list[Group]:
        return [g for g in self.groups if g.status == status]

    def groups_for_student(self, student_id: str) -> list[Group]:
        """Alle aktiven Gruppen einer Person (über alle Kurse)."""
        return [g for g in self.active_groups if student_id in g.members]

    def unmatched_for_course(self, course_id: str) -> list[UnmatchedStudent]:
        return [u for u in self.unmatched if u.course_id == course_id]

    def summary(self) -> str:
        """Kurze Übersicht über das Ergebnis."""
        by_status = {s: len(self.groups_with_status(s)) for s in GroupStatus}
        placed = sum(g.size for g in self.active_groups)
        lines = [
            f"Gruppen: {len(self.groups)} "
            f"(formed: {by_status[GroupStatus.FORMED]}, "
            f"needs-time: {by_status[GroupStatus.NEEDS_TIME]}, "
            f"rejected: {by_status[GroupStatus.REJECTED]})",
            f"Platzierungen: {placed}",
            f"Ohne Gruppe: {len(self.unmatched)}",
            f"Konflikte: {len(self.conflicts)}",
            f"Laufzeit: {self.run_time_seconds:.2f}s",
        ]
        return "\n".join(lines)

    # ─── Persistenz ───

    def save_json(self, path: Path) -> None:
        """Speichert das Ergebnis als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "MatchingResult":
        """Lädt ein gespeichertes Ergebnis aus JSON."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Ergebnis nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())

    def print_rich(self) -> None:
        """Gibt Gruppen, Reste und Konflikte formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        console.print(Panel(self.summary(), title="Matching-Ergebnis", border_style="cyan"))

        if self.groups:
            table = Table(title="Gruppen", box=box.ROUNDED)
            table.add_column("Gruppe", style="bold")
            table.add_column("Status")
            table.add_column("Termin")
            table.add_column("Mitglieder")
            colors = {
                GroupStatus.FORMED: "green",
                GroupStatus.NEEDS_TIME: "yellow",
                GroupStatus.REJECTED: "red",
            }
            for g in self.groups:
                color = colors[g.status]
                flags = []
                if g.is_undersized:
                    flags.append("klein")
                if g.is_overflow:
                    flags.append("Überlauf")
                status = f"[{color}]{g.status.value}[/{color}]"
                if flags:
                    status += f" ({', '.join(flags)})"
                table.add_row(
                    g.id, status,
                    str(g.meeting_window) if g.meeting_window else "–",
                    ", ".join(g.members),
                )
            console.print(table)

        if self.unmatched:
            table = Table(title="Ohne Gruppe", box=box.ROUNDED)
            table.add_column("Person", style="bold")
            table.add_column("Kurs")
            table.add_column("Grund")
            for u in self.unmatched:
                table.add_row(u.student_id, u.course_id, u.reason.value)
            console.print(table)

        if self.conflicts:
            table = Table(title="Konflikte", box=box.ROUNDED)
            table.add_column("Person", style="bold")
            table.add_column("Gruppe")
            table.add_column("Termin")
            table.add_column("Kollidiert mit")
            for c in self.conflicts:
                table.add_row(
                    c.student_id, c.group_id, str(c.window),
                    ", ".join(c.competing_group_ids),
                )
            console.print(table)
