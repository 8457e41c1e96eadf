"""Tests für Excel-Export sowie Excel/CSV-Import."""

from pathlib import Path

import pytest
import openpyxl

from config.schema import MatchingConfig
from data.excel_import import (
    ExcelImportError,
    ExcelImporter,
    generate_template,
    import_from_excel,
    parse_availability,
)
from models.availability import AvailabilityWindow
from models.registry import CommittedSlot, ConflictRegistry
from models.student import Student
from models.student_pool import StudentPool
from matching import run_matching
from analysis.quality_report import QualityAnalyzer
from export.excel_export import ExcelExporter
from export.helpers import COLORS, format_window, group_flags


# ─── Hilfsfunktionen ──────────────────────────────────────────────────────────

def make_pool() -> StudentPool:
    students = [
        Student(id=f"S{i}", name=f"Person {i}", courses="SQA101",
                availability="Mo 14:00-16:00")
        for i in range(1, 6)
    ]
    students.append(Student(id="S9", courses="CS210", availability="Di 10:00-12:00"))
    return StudentPool(students=students)


def write_csv(path: Path, rows: list[str]) -> Path:
    path.write_text("\n".join(["ID,Name,Kurse,Schwache Themen,Verfügbarkeit"] + rows) + "\n",
                    encoding="utf-8")
    return path


# ─── EXPORT ───────────────────────────────────────────────────────────────────

class TestExcelExport:
    def test_sheets_and_rows(self, tmp_path: Path):
        pool = make_pool()
        registry = ConflictRegistry()
        registry.add("S4", CommittedSlot(
            window=AvailabilityWindow.parse("Mo 15:00-16:00"), group_id="CS999-G01",
        ))
        result = run_matching(pool.students, MatchingConfig(min_group_size=2, max_group_size=3),
                              registry)
        quality = QualityAnalyzer().analyze(result, pool.students)

        out = tmp_path / "sub" / "ergebnis.xlsx"
        ExcelExporter(result, pool).export(out, quality_report=quality)

        wb = openpyxl.load_workbook(out)
        assert wb.sheetnames == ["Übersicht", "Gruppen", "Ohne Gruppe", "Konflikte", "Qualität"]

        groups = list(wb["Gruppen"].iter_rows(min_row=2, values_only=True))
        assert len(groups) == len(result.groups)
        assert groups[0][0] == result.groups[0].id
        assert "S1 (Person 1)" in groups[0][7]

        unmatched = list(wb["Ohne Gruppe"].iter_rows(min_row=2, values_only=True))
        assert len(unmatched) == len(result.unmatched)
        conflicts = list(wb["Konflikte"].iter_rows(min_row=2, values_only=True))
        assert len(conflicts) == 1
        assert conflicts[0][3] == "CS999-G01"

    def test_without_quality_sheet(self, tmp_path: Path):
        pool = make_pool()
        result = run_matching(pool.students)
        out = tmp_path / "ergebnis.xlsx"
        ExcelExporter(result).export(out)
        wb = openpyxl.load_workbook(out)
        assert "Qualität" not in wb.sheetnames
        assert wb["Übersicht"]["A1"].value == "Lerngruppen-Matching"

    def test_helpers(self):
        students = [
            Student(id=f"S{i}", courses="CS210", availability="Di 10:00-12:00")
            for i in (1, 2)
        ]
        result = run_matching(students, MatchingConfig(allow_undersized_groups=True))
        [group] = result.groups
        assert group_flags(group) == "klein"
        assert format_window(group.meeting_window) == "Di 10:00-12:00"
        assert format_window(None) == "–"
        assert group.status.value in COLORS


# ─── IMPORT ───────────────────────────────────────────────────────────────────

class TestExcelImport:
    def test_parse_availability(self):
        windows = parse_availability("Mo 14:00-16:00; Mi 10:00-12:00")
        assert [str(w) for w in windows] == ["Mo 14:00-16:00", "Mi 10:00-12:00"]
        assert parse_availability("  ") == []

    def test_template_roundtrip(self, tmp_path: Path):
        path = tmp_path / "vorlage.xlsx"
        generate_template(path)
        pool, report = import_from_excel(path, MatchingConfig())

        assert [s.id for s in pool.students] == ["S0001", "S0002"]
        assert pool.students[0].courses == ("SQA101", "CS210")
        assert "testplanung" in pool.students[1].difficult_topics
        assert pool.course_name("SQA101") == "Software-Qualitätssicherung"
        assert report.is_feasible
        assert report.warnings   # nur zwei Personen pro Kurs

    def test_csv_import(self, tmp_path: Path):
        path = write_csv(tmp_path / "studierende.csv", [
            'S1,Anna,"SQA101, CS210","rekursion","Mo 14:00-16:00; Di 10:00-12:00"',
            "S2,Ben,SQA101,,Mo 14:00-16:00",
            "S3,Clara,SQA101,,",
        ])
        pool, report = import_from_excel(path, MatchingConfig())
        assert len(pool.students) == 3
        assert pool.courses == []
        assert pool.get_student("S1").courses == ("SQA101", "CS210")
        assert any("S3" in w and "Verfügbarkeit" in w for w in report.warnings)

    def test_bad_rows_collected(self, tmp_path: Path):
        path = write_csv(tmp_path / "kaputt.csv", [
            "S1,Anna,SQA101,,Mo 16:00-14:00",
            "S2,Ben,,,Mo 14:00-16:00",
            ",Ohne ID,SQA101,,",
        ])
        with pytest.raises(ExcelImportError) as exc:
            import_from_excel(path, MatchingConfig())
        message = str(exc.value)
        assert "S1" in message
        assert "S2" in message
        assert "leere ID" in message

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ExcelImportError):
            ExcelImporter(tmp_path / "fehlt.xlsx", MatchingConfig()).import_all()

    def test_missing_student_sheet(self, tmp_path: Path):
        path = tmp_path / "leer.xlsx"
        wb = openpyxl.Workbook()
        wb.active.title = "Sonstiges"
        wb.save(path)
        with pytest.raises(ExcelImportError):
            import_from_excel(path, MatchingConfig())
