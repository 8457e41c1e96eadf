"""Excel-Export für Matching-Ergebnisse (openpyxl)."""

from pathlib import Path
from typing import Optional

from models.result import MatchingResult
from models.student_pool import StudentPool

from export.helpers import COLORS, format_window, group_flags, status_color, today_str


class ExcelExporter:
    """Exportiert ein MatchingResult in eine Excel-Datei.

    Blätter: Übersicht, Gruppen, Ohne Gruppe, Konflikte (+ optional Qualität).
    """

    ROW_HEADER_H = 22

    def __init__(self, result: MatchingResult, pool: Optional[StudentPool] = None):
        self.result = result
        self.pool = pool
        self._names = {s.id: s.name for s in pool.students} if pool else {}

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path, quality_report=None) -> None:
        """Erstellt die Excel-Datei mit allen Sheets.

        quality_report: optionaler MatchingQualityReport – wenn angegeben,
        wird ein zusätzliches Qualitätsblatt eingefügt.
        """
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # Leeres Standard-Sheet entfernen

        self._sheet_uebersicht(wb)
        self._sheet_gruppen(wb)
        self._sheet_ohne_gruppe(wb)
        self._sheet_konflikte(wb)
        if quality_report is not None:
            self._sheet_qualitaet(wb, quality_report)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _write_table(self, ws, headers: list[str], rows: list[list], widths: list[int]):
        """Kopfzeile + Datenzeilen; gibt die Zeilennummer der ersten Datenzeile zurück."""
        from openpyxl.styles import Font
        from openpyxl.utils import get_column_letter

        ws.append(headers)
        for cell in ws[1]:
            cell.fill = self._fill(COLORS["header"])
            cell.font = Font(bold=True, color="FFFFFF", size=10)
        ws.row_dimensions[1].height = self.ROW_HEADER_H
        for row in rows:
            ws.append(row)
        for col, width in enumerate(widths, 1):
            ws.column_dimensions[get_column_letter(col)].width = width
        ws.freeze_panes = "A2"

    def _label(self, student_id: str) -> str:
        name = self._names.get(student_id)
        return f"{student_id} ({name})" if name else student_id

    # ─── Blätter ──────────────────────────────────────────────────────────────

    def _sheet_uebersicht(self, wb) -> None:
        from openpyxl.styles import Font
        ws = wb.create_sheet("Übersicht")
        ws["A1"] = "Lerngruppen-Matching"
        ws["A1"].font = Font(bold=True, size=14)
        ws["A2"] = f"Export vom {today_str()}"
        row = 4
        for line in self.result.summary().splitlines():
            label, _, value = line.partition(":")
            ws.cell(row=row, column=1, value=label.strip())
            ws.cell(row=row, column=2, value=value.strip())
            row += 1
        ws.column_dimensions["A"].width = 20
        ws.column_dimensions["B"].width = 60

    def _sheet_gruppen(self, wb) -> None:
        ws = wb.create_sheet("Gruppen")
        rows = [
            [g.id, g.course_id, g.status.value, format_window(g.meeting_window),
             g.size, group_flags(g), g.compatibility_score,
             ", ".join(self._label(m) for m in g.members)]
            for g in self.result.groups
        ]
        self._write_table(
            ws,
            ["Gruppe", "Kurs", "Status", "Termin", "Größe", "Hinweis", "Score", "Mitglieder"],
            rows, [14, 10, 12, 18, 7, 12, 8, 80],
        )
        for idx, group in enumerate(self.result.groups, start=2):
            ws.cell(row=idx, column=3).fill = self._fill(status_color(group))

    def _sheet_ohne_gruppe(self, wb) -> None:
        ws = wb.create_sheet("Ohne Gruppe")
        rows = [
            [self._label(u.student_id), u.course_id, u.reason.value, u.detail]
            for u in self.result.unmatched
        ]
        self._write_table(ws, ["Person", "Kurs", "Grund", "Details"], rows, [30, 10, 22, 60])

    def _sheet_konflikte(self, wb) -> None:
        ws = wb.create_sheet("Konflikte")
        rows = [
            [self._label(c.student_id), c.group_id, format_window(c.window),
             ", ".join(c.competing_group_ids),
             ", ".join(str(w) for w in c.overlapping_windows)]
            for c in self.result.conflicts
        ]
        self._write_table(
            ws, ["Person", "Gruppe", "Termin", "Kollidiert mit", "Belegte Zeiten"],
            rows, [30, 14, 18, 30, 40],
        )
        for idx in range(2, len(rows) + 2):
            ws.cell(row=idx, column=3).fill = self._fill(COLORS["conflict"])

    def _sheet_qualitaet(self, wb, report) -> None:
        ws = wb.create_sheet("Qualität")
        rows = [
            [m.course_id, m.candidates, m.placed, f"{m.match_rate:.0%}",
             m.groups_formed, m.groups_needs_time, m.groups_rejected,
             m.avg_group_size, m.avg_meeting_minutes]
            for m in report.course_metrics
        ]
        self._write_table(
            ws,
            ["Kurs", "Kandidaten", "Platziert", "Quote", "formed", "needs-time",
             "rejected", "Ø Größe", "Ø Minuten"],
            rows, [10, 11, 10, 8, 8, 11, 9, 9, 10],
        )
