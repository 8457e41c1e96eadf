"""StudentPool: Momentaufnahme aller Studierenden + Vorab-Check (Pydantic v2)."""

import json
from collections import Counter, defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from config.schema import MatchingConfig
from models.student import Course, Student


class FeasibilityReport(BaseModel):
    """Ergebnis des Vorab-Checks."""

    is_feasible: bool
    errors: list[str]      # Lauf würde abbrechen
    warnings: list[str]    # Lauf möglich, aber mit Resten / needs-time

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        if self.is_feasible:
            status = "[bold green]✓ LAUF MÖGLICH[/bold green]"
        else:
            status = "[bold red]✗ LAUF NICHT MÖGLICH[/bold red]"

        lines = [status]
        if self.errors:
            lines.append("\n[red bold]Fehler (kritisch):[/red bold]")
            for e in self.errors:
                lines.append(f"  [red]• {e}[/red]")
        if self.warnings:
            lines.append("\n[yellow bold]Warnungen:[/yellow bold]")
            for w in self.warnings:
                lines.append(f"  [yellow]• {w}[/yellow]")
        if not self.errors and not self.warnings:
            lines.append("[dim]Keine Probleme gefunden.[/dim]")

        console.print(Panel("\n".join(lines), title="Vorab-Check", border_style="cyan"))


def bucket_by_course(students: list[Student]) -> dict[str, list[Student]]:
    """Kurs -> Kandidaten, Kurs-IDs sortiert. Mehrfach-Einschreibung zählt einmal."""
    buckets: dict[str, list[Student]] = defaultdict(list)
    for student in students:
        for cid in dict.fromkeys(student.courses):
            buckets[cid].append(student)
    return {cid: buckets[cid] for cid in sorted(buckets)}


class StudentPool(BaseModel):
    """Alle Studierenden eines Semesters plus optionale Kursnamen."""

    students: list[Student]
    courses: list[Course] = []
    created_at: Optional[datetime] = None
    data_version: str = "1.0"

    # ─── Übersicht ───

    @property
    def course_ids(self) -> list[str]:
        """Alle Kurse mit mindestens einer Einschreibung, sortiert."""
        return sorted({c for s in self.students for c in s.courses})

    def course_name(self, course_id: str) -> str:
        for c in self.courses:
            if c.id == course_id:
                return c.name
        return ""

    def course_buckets(self) -> dict[str, list[Student]]:
        """Kurs -> eingeschriebene Studierende (Eingabereihenfolge je Kurs)."""
        return bucket_by_course(self.students)

    def get_student(self, student_id: str) -> Optional[Student]:
        for s in self.students:
            if s.id == student_id:
                return s
        return None

    def summary(self) -> str:
        """Kurze Übersicht über den Datensatz."""
        buckets = self.course_buckets()
        enrollments = sum(len(v) for v in buckets.values())
        no_time = sum(1 for s in self.students if not s.availability)
        lines = [
            f"Studierende: {len(self.students)}",
            f"Kurse: {len(buckets)}",
            f"Einschreibungen: {enrollments}",
            f"Ohne Verfügbarkeit: {no_time}" if no_time else "",
        ]
        return "\n".join(l for l in lines if l)

    # ─── Vorab-Check ───

    def validate_feasibility(self, config: MatchingConfig) -> FeasibilityReport:
        """Prüft vor dem Lauf, was abbrechen oder Reste erzeugen würde.

        Prüfungen:
        1. Eindeutige IDs und mindestens ein Kurs pro Person (sonst Abbruch)
        2. Kurse unter min_group_size (insufficient-pool)
        3. Personen ohne Verfügbarkeit (Gruppe landet bei needs-time)
        4. Kurse, in denen kein Paar gemeinsame Zeit hat
        """
        from matching.availability import intersect

        errors: list[str] = []
        warnings: list[str] = []

        # ── 1. Abbruch-Gründe ─────────────────────────────────────────────
        dupes = [sid for sid, n in Counter(s.id for s in self.students).items() if n > 1]
        if dupes:
            errors.append(f"Doppelte IDs: {', '.join(sorted(dupes))}")
        no_course = [s.id for s in self.students if not s.courses]
        if no_course:
            errors.append(
                f"{len(no_course)} Person(en) ohne Kurs: {', '.join(no_course[:6])}"
                f"{'...' if len(no_course) > 6 else ''}"
            )

        # ── 2. Kleine Kurse ───────────────────────────────────────────────
        buckets = self.course_buckets()
        for cid in sorted(buckets):
            n = len(buckets[cid])
            if n < config.min_group_size:
                if n >= 2 and config.allow_undersized_groups:
                    warnings.append(f"Kurs {cid}: nur {n} Teilnehmende → unterbesetzte Gruppe.")
                else:
                    warnings.append(
                        f"Kurs {cid}: nur {n} Teilnehmende (< {config.min_group_size}) "
                        f"→ insufficient-pool."
                    )

        # ── 3. Ohne Verfügbarkeit ─────────────────────────────────────────
        no_time = [s.id for s in self.students if not s.availability]
        if no_time:
            warnings.append(
                f"{len(no_time)} Person(en) ohne Verfügbarkeit – deren Gruppen "
                f"erhalten keinen Termin (needs-time)."
            )

        # ── 4. Kurse ohne gemeinsame Zeit ─────────────────────────────────
        for cid in sorted(buckets):
            members = buckets[cid]
            if len(members) < 2:
                continue
            has_pair = any(
                intersect(a.availability, b.availability)
                for i, a in enumerate(members)
                for b in members[i + 1:]
            )
            if not has_pair:
                warnings.append(f"Kurs {cid}: kein Paar mit gemeinsamer Zeit.")

        return FeasibilityReport(
            is_feasible=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    # ─── Persistenz ───

    def save_json(self, path: Path) -> None:
        """Speichert den Datensatz als JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        if self.created_at is None:
            self.created_at = datetime.now(timezone.utc)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "StudentPool":
        """Lädt einen Datensatz aus JSON (Objekt mit 'students' oder reine Liste)."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Datensatz nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        if isinstance(raw, list):
            raw = {"students": raw}
        return cls.model_validate(raw)
