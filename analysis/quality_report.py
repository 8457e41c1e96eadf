"""Qualitätsbericht für Matching-Ergebnisse.

Analysiert pro Kurs Abdeckung, Gruppengrößen und Termine und berechnet
zusammenfassende Metriken.
"""

from collections import Counter

from pydantic import BaseModel

from models.group import GroupStatus
from models.result import MatchingResult
from models.student import Student
from matching.orchestrator import bucket_by_course


# ─── Metriken-Modelle ─────────────────────────────────────────────────────────

class CourseQualityMetrics(BaseModel):
    """Qualitäts-Metriken für einen einzelnen Kurs."""

    course_id: str
    candidates: int
    placed: int
    match_rate: float              # 0.0–1.0
    groups_formed: int
    groups_needs_time: int
    groups_rejected: int
    avg_group_size: float
    avg_meeting_minutes: float     # nur formed-Gruppen
    avg_compatibility: float
    unmatched_reasons: dict[str, int]


class MatchingQualityReport(BaseModel):
    """Vollständiger Qualitätsbericht für ein MatchingResult."""

    course_metrics: list[CourseQualityMetrics]
    total_candidates: int
    total_placed: int
    overall_match_rate: float
    students_without_group: list[str]   # in keinem Kurs platziert

    def print_rich(self) -> None:
        """Gibt den Bericht formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        console.print(Panel(
            f"Kandidaturen: {self.total_candidates} | Platziert: {self.total_placed} "
            f"({self.overall_match_rate:.0%})\n"
            f"Ganz ohne Gruppe: {len(self.students_without_group)} Person(en)",
            title="Qualitätsbericht", border_style="cyan",
        ))

        table = Table(box=box.ROUNDED)
        table.add_column("Kurs", style="bold")
        table.add_column("Kand.", justify="right")
        table.add_column("Quote", justify="right")
        table.add_column("formed", justify="right")
        table.add_column("needs-time", justify="right")
        table.add_column("rejected", justify="right")
        table.add_column("Ø Größe", justify="right")
        table.add_column("Ø Min.", justify="right")
        for m in self.course_metrics:
            rate_color = "green" if m.match_rate >= 0.9 else "yellow" if m.match_rate >= 0.6 else "red"
            table.add_row(
                m.course_id, str(m.candidates),
                f"[{rate_color}]{m.match_rate:.0%}[/{rate_color}]",
                str(m.groups_formed), str(m.groups_needs_time), str(m.groups_rejected),
                f"{m.avg_group_size:.1f}", f"{m.avg_meeting_minutes:.0f}",
            )
        console.print(table)


class QualityAnalyzer:
    """Berechnet einen MatchingQualityReport."""

    def analyze(self, result: MatchingResult, students: list[Student]) -> MatchingQualityReport:
        buckets = bucket_by_course(students)
        metrics = [self._course_metrics(cid, len(pool), result) for cid, pool in buckets.items()]

        total_candidates = sum(m.candidates for m in metrics)
        total_placed = sum(m.placed for m in metrics)
        placed_ids = {sid for g in result.active_groups for sid in g.members}
        without = sorted(s.id for s in students if s.id not in placed_ids)

        return MatchingQualityReport(
            course_metrics=metrics,
            total_candidates=total_candidates,
            total_placed=total_placed,
            overall_match_rate=(total_placed / total_candidates) if total_candidates else 0.0,
            students_without_group=without,
        )

    def _course_metrics(
        self, course_id: str, candidates: int, result: MatchingResult
    ) -> CourseQualityMetrics:
        groups = result.groups_for_course(course_id)
        active = [g for g in groups if g.is_active]
        formed = [g for g in groups if g.status == GroupStatus.FORMED]
        placed = sum(g.size for g in active)
        reasons = Counter(u.reason.value for u in result.unmatched_for_course(course_id))

        return CourseQualityMetrics(
            course_id=course_id,
            candidates=candidates,
            placed=placed,
            match_rate=(placed / candidates) if candidates else 0.0,
            groups_formed=len(formed),
            groups_needs_time=sum(1 for g in groups if g.status == GroupStatus.NEEDS_TIME),
            groups_rejected=sum(1 for g in groups if g.status == GroupStatus.REJECTED),
            avg_group_size=round(placed / len(active), 2) if active else 0.0,
            avg_meeting_minutes=round(
                sum(g.meeting_window.duration_minutes for g in formed) / len(formed), 1
            ) if formed else 0.0,
            avg_compatibility=round(
                sum(g.compatibility_score for g in active) / len(active), 2
            ) if active else 0.0,
            unmatched_reasons=dict(reasons),
        )
