"""Nachträgliche Validierung eines Matching-Ergebnisses.

Prüft das fertige Ergebnis auf Regelverletzungen als Sicherheitsnetz
unabhängig vom Engine.
"""

from collections import defaultdict
from typing import Literal

from pydantic import BaseModel

from models.group import Group, GroupStatus
from models.result import MatchingResult
from models.student import Student
from matching.availability import intersect_all, windows_overlap


class ValidationViolation(BaseModel):
    """Eine einzelne Regelverletzung."""

    severity: Literal["error", "warning"]
    constraint: str      # z.B. "double_booking"
    description: str
    entity: str          # group_id / student_id / course_id


class ValidationReport(BaseModel):
    """Ergebnis der Validierung."""

    violations: list[ValidationViolation]
    is_valid: bool       # True wenn keine Errors (Warnings ok)

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        errors = [v for v in self.violations if v.severity == "error"]
        warnings = [v for v in self.violations if v.severity == "warning"]

        status = (
            "[bold green]✓ VALIDE[/bold green]"
            if self.is_valid
            else "[bold red]✗ VERLETZUNGEN GEFUNDEN[/bold red]"
        )
        lines = [status, f"Fehler: {len(errors)} | Warnungen: {len(warnings)}"]
        console.print(Panel("\n".join(lines), title="Ergebnis-Validierung", border_style="cyan"))

        if not self.violations:
            console.print("[dim]Keine Verletzungen gefunden.[/dim]")
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Regel", width=24)
        table.add_column("Entität", width=14)
        table.add_column("Beschreibung")

        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{v.severity.upper()}[/{color}]",
                v.constraint,
                v.entity,
                v.description,
            )
        console.print(table)


class ResultValidator:
    """Prüft ein MatchingResult gegen die Eingabedaten."""

    def validate(self, result: MatchingResult, students: list[Student]) -> ValidationReport:
        """Führt alle Checks durch und gibt einen ValidationReport zurück."""
        violations: list[ValidationViolation] = []
        by_id = {s.id: s for s in students}

        violations.extend(self._check_enrollment(result, by_id))
        violations.extend(self._check_group_sizes(result))
        violations.extend(self._check_meeting_windows(result, by_id))
        violations.extend(self._check_double_booking(result))
        violations.extend(self._check_conservation(result, students))
        violations.extend(self._check_registry(result))

        has_errors = any(v.severity == "error" for v in violations)
        return ValidationReport(violations=violations, is_valid=not has_errors)

    # ── Einzelne Prüfungen ────────────────────────────────────────────────────

    def _check_enrollment(
        self, result: MatchingResult, by_id: dict[str, Student]
    ) -> list[ValidationViolation]:
        """Jedes Mitglied ist im Kurs der Gruppe eingeschrieben."""
        violations: list[ValidationViolation] = []
        for g in result.groups:
            for sid in g.members:
                student = by_id.get(sid)
                if student is None:
                    violations.append(ValidationViolation(
                        severity="error", constraint="unknown_student", entity=g.id,
                        description=f"Mitglied {sid} ist nicht im Datensatz.",
                    ))
                elif not student.is_enrolled(g.course_id):
                    violations.append(ValidationViolation(
                        severity="error", constraint="not_enrolled", entity=g.id,
                        description=f"{sid} ist nicht in {g.course_id} eingeschrieben.",
                    ))
            if len(set(g.members)) != len(g.members):
                violations.append(ValidationViolation(
                    severity="error", constraint="duplicate_member", entity=g.id,
                    description="Person mehrfach in derselben Gruppe.",
                ))
        return violations

    def _check_group_sizes(self, result: MatchingResult) -> list[ValidationViolation]:
        """Größen im erlaubten Bereich, Ausnahmen nur markiert und erlaubt."""
        cfg = result.config_snapshot
        violations: list[ValidationViolation] = []
        overflow_per_course: dict[str, int] = defaultdict(int)

        for g in result.groups:
            undersized_ok = g.is_undersized and (
                cfg.allow_undersized_groups or cfg.allow_undersized_leftover_group
            )
            if g.size < cfg.min_group_size and not undersized_ok:
                violations.append(ValidationViolation(
                    severity="error", constraint="group_too_small", entity=g.id,
                    description=f"{g.size} Mitglieder < {cfg.min_group_size}.",
                ))
            if g.size > cfg.max_group_size and not (g.is_overflow and cfg.allow_overflow_group):
                violations.append(ValidationViolation(
                    severity="error", constraint="group_too_large", entity=g.id,
                    description=f"{g.size} Mitglieder > {cfg.max_group_size}.",
                ))
            if g.size < 2:
                violations.append(ValidationViolation(
                    severity="error", constraint="singleton_group", entity=g.id,
                    description="Gruppe mit nur einer Person.",
                ))
            if g.is_overflow:
                overflow_per_course[g.course_id] += 1

        for course_id, n in overflow_per_course.items():
            if n > 1:
                violations.append(ValidationViolation(
                    severity="error", constraint="multiple_overflow", entity=course_id,
                    description=f"{n} Überlauf-Gruppen (max. 1 pro Kurs).",
                ))
        return violations

    def _check_meeting_windows(
        self, result: MatchingResult, by_id: dict[str, Student]
    ) -> list[ValidationViolation]:
        """Termin liegt in der gemeinsamen Zeit aller Mitglieder; Status passt."""
        violations: list[ValidationViolation] = []
        for g in result.groups:
            if g.status == GroupStatus.NEEDS_TIME:
                if g.meeting_window is not None:
                    violations.append(ValidationViolation(
                        severity="warning", constraint="status_mismatch", entity=g.id,
                        description="needs-time, aber Termin gesetzt.",
                    ))
                continue
            if g.meeting_window is None:
                violations.append(ValidationViolation(
                    severity="error", constraint="missing_window", entity=g.id,
                    description=f"Status {g.status.value} ohne Termin.",
                ))
                continue
            members = [by_id[sid] for sid in g.members if sid in by_id]
            if not members:
                continue
            common = intersect_all([s.availability for s in members])
            w = g.meeting_window
            inside = any(c.day == w.day and c.start <= w.start and w.end <= c.end for c in common)
            if not inside:
                violations.append(ValidationViolation(
                    severity="error", constraint="window_outside_availability", entity=g.id,
                    description=f"Termin {w} liegt nicht in der gemeinsamen Zeit.",
                ))
        return violations

    def _check_double_booking(self, result: MatchingResult) -> list[ValidationViolation]:
        """Keine Person in zwei eingetragenen Gruppen mit überlappendem Termin."""
        violations: list[ValidationViolation] = []
        per_student: dict[str, list[Group]] = defaultdict(list)
        for g in result.groups:
            if g.status == GroupStatus.FORMED and g.meeting_window is not None:
                for sid in g.members:
                    per_student[sid].append(g)

        for sid, groups in per_student.items():
            for i, a in enumerate(groups):
                for b in groups[i + 1:]:
                    if windows_overlap(a.meeting_window, b.meeting_window):
                        violations.append(ValidationViolation(
                            severity="error", constraint="double_booking", entity=sid,
                            description=(
                                f"{a.id} ({a.meeting_window}) überschneidet "
                                f"{b.id} ({b.meeting_window})."
                            ),
                        ))
        return violations

    def _check_conservation(
        self, result: MatchingResult, students: list[Student]
    ) -> list[ValidationViolation]:
        """Jede (Person, Kurs)-Kandidatur genau einmal: aktive Gruppe oder Rest."""
        violations: list[ValidationViolation] = []
        seen: dict[tuple[str, str], int] = defaultdict(int)
        for g in result.active_groups:
            for sid in g.members:
                seen[(sid, g.course_id)] += 1
        for u in result.unmatched:
            seen[(u.student_id, u.course_id)] += 1

        for s in students:
            for cid in dict.fromkeys(s.courses):
                n = seen.pop((s.id, cid), 0)
                if n != 1:
                    violations.append(ValidationViolation(
                        severity="error", constraint="conservation", entity=s.id,
                        description=f"Kurs {cid}: {n}x platziert/gelistet (erwartet 1).",
                    ))
        for (sid, cid), n in seen.items():
            violations.append(ValidationViolation(
                severity="error", constraint="conservation", entity=sid,
                description=f"Eintrag für Kurs {cid} ohne passende Einschreibung.",
            ))
        return violations

    def _check_registry(self, result: MatchingResult) -> list[ValidationViolation]:
        """Alle eingetragenen Gruppen stehen in der Registry, abgelehnte nicht."""
        violations: list[ValidationViolation] = []
        committed = {
            (sid, slot.group_id)
            for sid, slots in result.registry.slots.items()
            for slot in slots
        }
        for g in result.groups:
            for sid in g.members:
                present = (sid, g.id) in committed
                if g.status == GroupStatus.FORMED and not present:
                    violations.append(ValidationViolation(
                        severity="error", constraint="registry_missing", entity=g.id,
                        description=f"{sid} fehlt in der Registry.",
                    ))
                # Gruppen-IDs wiederholen sich zwischen Läufen, daher nur Warnung
                if g.status != GroupStatus.FORMED and present:
                    violations.append(ValidationViolation(
                        severity="warning", constraint="registry_leak", entity=g.id,
                        description=f"{sid} eingetragen, obwohl Gruppe {g.status.value}.",
                    ))
        return violations
