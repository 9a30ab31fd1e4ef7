"""Service für Excel-Exporte mit wiederverwendbaren Formatierungen"""
from datetime import date, datetime
from typing import Any, Dict, List, Sequence
from openpyxl import Workbook
from openpyxl.cell.cell import Cell
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.worksheet.worksheet import Worksheet


class ExcelService:
    """
    Wiederverwendbare Excel-Funktionen für den Stunden-Export.

    Zahlen werden als Zahlen geschrieben, damit Summen im Tabellenprogramm
    funktionieren. Datumswerte bekommen ein Datumsformat.
    """

    HEADER_COLOR = "4472C4"   # Blau
    SECTION_COLOR = "FCE4D6"  # Hellorange
    SUMMARY_COLOR = "D9E1F2"  # Hellblau
    WHITE_COLOR = "FFFFFF"

    DATE_FORMAT = "m/d/yyyy"

    @staticmethod
    def _fill(color: str) -> PatternFill:
        return PatternFill(start_color=color, end_color=color, fill_type="solid")

    @staticmethod
    def create_header_style() -> Dict[str, Any]:
        """
        Erstellt Standard Header-Formatierung.

        Returns:
            Dictionary mit 'fill', 'font' und 'alignment' Objekten
        """
        return {
            'fill': ExcelService._fill(ExcelService.HEADER_COLOR),
            'font': Font(color=ExcelService.WHITE_COLOR, bold=True, size=11),
            'alignment': Alignment(horizontal="center", vertical="center", wrap_text=True)
        }

    @staticmethod
    def create_section_style() -> Dict[str, Any]:
        return {
            'fill': ExcelService._fill(ExcelService.SECTION_COLOR),
            'font': Font(bold=True, size=12),
        }

    @staticmethod
    def create_summary_style() -> Dict[str, Any]:
        """
        Erstellt Standard Summenzeilen-Formatierung.

        Returns:
            Dictionary mit 'fill' und 'font' Objekten
        """
        return {
            'fill': ExcelService._fill(ExcelService.SUMMARY_COLOR),
            'font': Font(bold=True)
        }

    @staticmethod
    def write_cell(ws: Worksheet, row: int, column: int, value: Any) -> Cell:
        """
        Schreibt einen Wert typgerecht.

        None bleibt eine leere Zelle, int bleibt numerisch, Datumswerte
        bekommen DATE_FORMAT.
        """
        cell = ws.cell(row=row, column=column)
        if value is None:
            return cell
        if isinstance(value, datetime):
            value = value.date()
        cell.value = value
        if isinstance(value, date):
            cell.number_format = ExcelService.DATE_FORMAT
        return cell

    @staticmethod
    def write_row(ws: Worksheet, row: int, values: Sequence[Any], style: Dict[str, Any] = None) -> None:
        """
        Schreibt eine komplette Zeile und wendet optional einen Style an.

        Args:
            ws: Worksheet-Objekt
            row: Zeilennummer (1-basiert)
            values: Zellwerte in Spaltenreihenfolge
            style: Optional - Style-Dictionary (siehe create_*_style)
        """
        for col_num, value in enumerate(values, 1):
            cell = ExcelService.write_cell(ws, row, col_num, value)
            if style:
                for attr, style_value in style.items():
                    setattr(cell, attr, style_value)

    @staticmethod
    def set_column_widths(
        ws: Worksheet,
        widths: List[int],
        start_column: int = 1
    ) -> None:
        """
        Setzt Spaltenbreiten für eine Liste von Spalten.

        Args:
            ws: Worksheet-Objekt
            widths: Liste von Breiten in derselben Reihenfolge wie Spalten
            start_column: Erste Spalte (default: 1)
        """
        for idx, width in enumerate(widths):
            col_num = start_column + idx
            column_letter = ws.cell(row=1, column=col_num).column_letter
            ws.column_dimensions[column_letter].width = width

    @staticmethod
    def create_workbook(sheet_title: str = "Sheet1") -> tuple[Workbook, Worksheet]:
        """
        Erstellt ein neues Workbook mit einer Worksheet.

        Returns:
            Tuple aus (Workbook, Worksheet)
        """
        wb = Workbook()
        ws = wb.active
        # Excel erlaubt maximal 31 Zeichen im Blattnamen
        ws.title = sheet_title[:31]
        return wb, ws
