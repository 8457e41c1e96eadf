"""Export-Modul: Excel (openpyxl) für Matching-Ergebnisse."""

from export.excel_export import ExcelExporter

__all__ = ["ExcelExporter"]
