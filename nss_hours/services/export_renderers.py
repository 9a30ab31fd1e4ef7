"""Renderer für das Pivot-Dokument: CSV-Text und Excel-Datei"""
import csv
import io
import logging
from datetime import date
from typing import List, Optional

from nss_hours.config import settings
from nss_hours.services.excel_service import ExcelService
from nss_hours.services.pivot_export import (
    META_COLUMNS,
    ROW_HEADER,
    ROW_SECTION,
    ROW_SUMMARY,
    ROW_TOTAL,
    Cell,
    ReportDocument,
)
from nss_hours.utils.datetime_utils import format_report_date, today

logger = logging.getLogger(__name__)

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def export_filename(extension: str, report_name: Optional[str] = None, on: Optional[date] = None) -> str:
    """Download-Dateiname: {report_name}-{YYYY-MM-DD}.{extension}"""
    name = report_name or settings.export_report_name
    day = on or today()
    return f"{name}-{day.isoformat()}.{extension}"


def format_csv_cell(value: Cell) -> str:
    if value is None:
        return ""
    if isinstance(value, date):
        return format_report_date(value)
    return str(value)


def render_csv(doc: ReportDocument) -> str:
    """
    Serialisiert das Dokument als CSV (UTF-8, Komma, RFC4180-Quoting).

    Leerzeilen im Dokument werden zu leeren Textzeilen.
    """
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    for row in doc.rows:
        writer.writerow([format_csv_cell(value) for value in row.cells])
    return output.getvalue()


def _column_widths(doc: ReportDocument) -> List[int]:
    widths = [4, 12, 40, 8]
    volunteer_columns = doc.column_count - META_COLUMNS
    return widths + [12] * max(volunteer_columns, 0)


def render_xlsx(doc: ReportDocument) -> bytes:
    """Schreibt das Dokument in ein Worksheet, Layout identisch zur CSV"""
    wb, ws = ExcelService.create_workbook(doc.title)
    styles = {
        ROW_HEADER: ExcelService.create_header_style(),
        ROW_SECTION: ExcelService.create_section_style(),
        ROW_TOTAL: ExcelService.create_summary_style(),
        ROW_SUMMARY: ExcelService.create_summary_style(),
    }

    for row_num, row in enumerate(doc.rows, 1):
        ExcelService.write_row(ws, row_num, row.cells, styles.get(row.kind))

    ExcelService.set_column_widths(ws, _column_widths(doc))
    # Kopfzeilen und Metadaten-Spalten beim Scrollen fixieren
    ws.freeze_panes = ws.cell(row=4, column=META_COLUMNS + 1)

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()
