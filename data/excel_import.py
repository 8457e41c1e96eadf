"""Excel-Import und Template-Generator für Studierenden-Daten.

Template-Generator: Excel-Vorlage mit Beispielzeilen.
Import-Funktion:    Excel/CSV → StudentPool mit Validierung und FeasibilityReport.

Blatt "Studierende" (eine Zeile pro Person):
  ID | Name | Kurse | Schwache Themen | Verfügbarkeit
  Kurse/Themen kommagetrennt, Verfügbarkeit semikolongetrennt ("Mo 14:00-16:00; Mi 10:00-12:00")
"""

import csv
from pathlib import Path

from pydantic import ValidationError

from config.schema import MatchingConfig
from config.defaults import SAMPLE_COURSES
from models.availability import AvailabilityWindow
from models.student import Course, Student
from models.student_pool import StudentPool, FeasibilityReport


class ExcelImportError(Exception):
    """Fehler beim Excel-Import."""


STUDENT_SHEET = "Studierende"
COURSE_SHEET = "Kurse"

_STUDENT_HEADERS = ["ID", "Name", "Kurse", "Schwache Themen", "Verfügbarkeit"]
_COURSE_HEADERS = ["ID", "Name"]

# Spaltennamen (lowercase) → Feld
_HEADER_ALIASES = {
    "id": "id",
    "name": "name",
    "kurse": "courses",
    "courses": "courses",
    "schwache themen": "topics",
    "difficult_topics": "topics",
    "verfügbarkeit": "availability",
    "availability": "availability",
}


def parse_availability(raw: str) -> list[AvailabilityWindow]:
    """Parst 'Mo 14:00-16:00; Mi 10:00-12:00' → Fensterliste."""
    if not raw.strip():
        return []
    return [AvailabilityWindow.parse(t) for t in raw.replace("\n", ";").split(";") if t.strip()]


# ─── TEMPLATE-GENERATOR ───────────────────────────────────────────────────────

def generate_template(path: Path) -> None:
    """Erzeugt eine Excel-Vorlage mit den Blättern 'Kurse' und 'Studierende'."""
    from openpyxl import Workbook
    from openpyxl.styles import Font, PatternFill

    wb = Workbook()
    hdr_font = Font(bold=True, color="FFFFFF", size=11)
    hdr_fill = PatternFill("solid", fgColor="2E6DA4")

    ws = wb.active
    ws.title = COURSE_SHEET
    ws.append(_COURSE_HEADERS)
    for cid, name in SAMPLE_COURSES.items():
        ws.append([cid, name])
    ws.column_dimensions["A"].width = 12
    ws.column_dimensions["B"].width = 40

    ws2 = wb.create_sheet(STUDENT_SHEET)
    ws2.append(_STUDENT_HEADERS)
    ws2.append(["S0001", "Müller, Anna", "SQA101, CS210", "rekursion, testplanung",
                "Mo 14:00-16:00; Mi 10:00-12:00"])
    ws2.append(["S0002", "Weber, Ben", "SQA101", "testplanung", "Mo 13:00-15:00"])
    for col, width in zip("ABCDE", (10, 25, 25, 35, 45)):
        ws2.column_dimensions[col].width = width

    for sheet in (ws, ws2):
        for cell in sheet[1]:
            cell.font = hdr_font
            cell.fill = hdr_fill

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)


# ─── IMPORT ───────────────────────────────────────────────────────────────────

class ExcelImporter:
    """Importiert Studierende aus einer Excel-Vorlage oder CSV-Datei."""

    def __init__(self, path: Path, config: MatchingConfig) -> None:
        self.path = Path(path)
        self.config = config
        self._errors: list[str] = []
        self._warnings: list[str] = []

    def _read_rows(self, sheet_name: str) -> list[dict]:
        """Tabellenblatt → Liste von Dicts (erste Zeile = Header, lowercase)."""
        if not self.path.exists():
            raise ExcelImportError(f"Datei nicht gefunden: {self.path}")

        if self.path.suffix.lower() == ".csv":
            if sheet_name != STUDENT_SHEET:
                return []
            with open(self.path, encoding="utf-8-sig", newline="") as f:
                raw_rows = [
                    tuple(row) for row in csv.reader(f)
                ]
        else:
            try:
                import openpyxl
                wb = openpyxl.load_workbook(str(self.path), read_only=True, data_only=True)
            except Exception as e:
                raise ExcelImportError(f"Fehler beim Öffnen der Excel-Datei: {e}") from e
            sheet = None
            for sn in wb.sheetnames:
                if sn.strip().lower() == sheet_name.strip().lower():
                    sheet = wb[sn]
            if sheet is None:
                wb.close()
                return []
            raw_rows = list(sheet.iter_rows(values_only=True))
            wb.close()

        if not raw_rows:
            return []
        headers = [
            str(h).strip().lower() if h is not None else f"col_{i}"
            for i, h in enumerate(raw_rows[0])
        ]
        result = []
        for row in raw_rows[1:]:
            if all(v is None or v == "" for v in row):
                continue
            result.append({
                headers[i]: (str(v).strip() if v is not None else "")
                for i, v in enumerate(row)
                if i < len(headers)
            })
        return result

    def import_courses(self) -> list[Course]:
        courses = []
        for i, row in enumerate(self._read_rows(COURSE_SHEET), start=2):
            cid = row.get("id", "")
            if not cid:
                self._warnings.append(f"Kurse Zeile {i}: leere ID – übersprungen.")
                continue
            courses.append(Course(id=cid, name=row.get("name", "")))
        return courses

    def import_students(self) -> list[Student]:
        rows = self._read_rows(STUDENT_SHEET)
        if not rows:
            raise ExcelImportError(f"Blatt '{STUDENT_SHEET}' fehlt oder ist leer.")

        students: list[Student] = []
        for i, raw in enumerate(rows, start=2):
            row = {_HEADER_ALIASES.get(k, k): v for k, v in raw.items()}
            row_id = f"Zeile {i}"
            sid = row.get("id", "")
            if not sid:
                self._errors.append(f"{row_id}: leere ID.")
                continue
            try:
                availability = parse_availability(row.get("availability", ""))
            except ValueError as e:
                self._errors.append(f"{row_id} ({sid}): {e}")
                continue
            try:
                student = Student(
                    id=sid,
                    name=row.get("name", ""),
                    courses=row.get("courses", ""),
                    difficult_topics=row.get("topics", ""),
                    availability=availability,
                )
            except ValidationError as e:
                self._errors.append(f"{row_id} ({sid}): {e.errors()[0]['msg']}")
                continue
            if not student.courses:
                self._errors.append(f"{row_id} ({sid}): keine Kurse angegeben.")
                continue
            if not student.availability:
                self._warnings.append(f"{row_id} ({sid}): keine Verfügbarkeit angegeben.")
            students.append(student)
        return students

    def import_all(self) -> tuple[StudentPool, FeasibilityReport]:
        """Liest alle Blätter und prüft den Datensatz.

        Raises:
            ExcelImportError: Bei fehlerhaften Zeilen (alle Fehler gesammelt).
        """
        courses = self.import_courses()
        students = self.import_students()
        if self._errors:
            raise ExcelImportError(
                "Import fehlgeschlagen:\n" + "\n".join(f"  • {e}" for e in self._errors)
            )
        pool = StudentPool(students=students, courses=courses)
        report = pool.validate_feasibility(self.config)
        report.warnings = self._warnings + report.warnings
        return pool, report


def import_from_excel(
    path: Path, config: MatchingConfig
) -> tuple[StudentPool, FeasibilityReport]:
    """Importiert Studierende aus .xlsx oder .csv."""
    return ExcelImporter(path, config).import_all()
