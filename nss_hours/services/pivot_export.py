"""
Pivot-Export - Stunden-Matrix Events x Freiwillige.

Die Matrix wird als formatneutrales Zeilen-Dokument aufgebaut
(ReportDocument). CSV- und Excel-Renderer serialisieren dasselbe Dokument.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple, Union
from sqlalchemy import case, func
from sqlalchemy.orm import Session

from nss_hours.models import Event, EventCategory, EventParticipation, Volunteer
from nss_hours.models.category import CATEGORY_TO_SECTION, SECTION_ORDER
from nss_hours.models.enums import ATTENDED_STATUSES, Gender
from nss_hours.schemas.report import ExportEventRow, ExportParticipationRow, ExportVolunteerRow
from nss_hours.utils.datetime_utils import as_date

logger = logging.getLogger(__name__)

Cell = Union[str, int, date, None]

# Zeilenarten im Dokument
ROW_HEADER = "header"
ROW_SECTION = "section"
ROW_EVENT = "event"
ROW_TOTAL = "total"
ROW_SUMMARY = "summary"
ROW_BLANK = "blank"

# Leere Spalte, Datum, Event-Name, Stunden
META_COLUMNS = 4
SUMMARY_HEADERS = ["Count", "Male", "Female"]

# Sortierung nach Studienjahr: SE zuerst, dann TE, alle anderen danach
YEAR_RANK = {"SE": 0, "TE": 1}

GENDER_LABELS = {Gender.MALE.value: "Male", Gender.FEMALE.value: "Female"}


@dataclass
class ReportRow:
    kind: str
    cells: List[Cell] = field(default_factory=list)


@dataclass
class ReportDocument:
    """Geordnete Zeilenfolge, jede Zeile eine geordnete Zellenfolge"""
    title: str
    volunteer_count: int
    rows: List[ReportRow] = field(default_factory=list)

    def add(self, kind: str, cells: Optional[List[Cell]] = None) -> ReportRow:
        row = ReportRow(kind, list(cells or []))
        self.rows.append(row)
        return row

    def rows_of_kind(self, kind: str) -> List[ReportRow]:
        return [row for row in self.rows if row.kind == kind]

    @property
    def column_count(self) -> int:
        return max((len(row.cells) for row in self.rows), default=0)


@dataclass
class ExportData:
    """Eingaben für den Pivot-Aufbau, bereits sortiert"""
    volunteers: List[ExportVolunteerRow]
    events: List[ExportEventRow]
    participations: List[ExportParticipationRow]

    def hours_lookup(self) -> Dict[Tuple[int, int], int]:
        return {(p.event_id, p.volunteer_id): p.hours for p in self.participations}

    def events_by_section(self) -> Dict[str, List[ExportEventRow]]:
        sections: Dict[str, List[ExportEventRow]] = {name: [] for name in SECTION_ORDER}
        for event in self.events:
            section = CATEGORY_TO_SECTION.get(event.category_code)
            if section is None:
                logger.warning(f"Event {event.id} has unknown category '{event.category_code}', skipped in export")
                continue
            sections[section].append(event)
        for section_events in sections.values():
            section_events.sort(key=lambda e: e.start_date)
        return sections


def count_male_female(volunteers: Sequence[ExportVolunteerRow], values: Sequence[int]) -> Tuple[int, int, int]:
    """
    Zählt positive Zellen einer Zeile.

    Returns:
        Tuple (count, male, female)
    """
    count = male = female = 0
    for volunteer, value in zip(volunteers, values):
        if not value or value <= 0:
            continue
        count += 1
        if volunteer.gender == Gender.MALE.value:
            male += 1
        elif volunteer.gender == Gender.FEMALE.value:
            female += 1
    return count, male, female


def _hour_cells(values: Sequence[int]) -> List[Cell]:
    # Null wird als leere Zelle ausgegeben, nie als "0"
    return [value if value and value > 0 else None for value in values]


def _add_values(target: List[int], values: Sequence[int]) -> None:
    for idx, value in enumerate(values):
        if value and value > 0:
            target[idx] += value


class PivotExportService:
    """Aufbau des Pivot-Dokuments"""

    @staticmethod
    def fetch_export_data(db: Session) -> ExportData:
        """Lädt Freiwillige, Events und angerechnete Stunden als typisierte Zeilen"""
        year_rank = case(
            *[(Volunteer.year == year, rank) for year, rank in YEAR_RANK.items()],
            else_=len(YEAR_RANK)
        )
        volunteers = db.query(
            Volunteer.id, Volunteer.first_name, Volunteer.last_name, Volunteer.gender, Volunteer.year
        ).filter(
            Volunteer.is_active == True  # noqa: E712
        ).order_by(year_rank, Volunteer.first_name, Volunteer.last_name, Volunteer.id).all()

        events = db.query(
            Event.id, Event.event_name, Event.start_date, Event.declared_hours, EventCategory.code
        ).join(
            EventCategory, Event.category_id == EventCategory.id
        ).filter(
            Event.is_active == True,  # noqa: E712
            EventCategory.is_active == True  # noqa: E712
        ).order_by(EventCategory.code, Event.start_date, Event.id).all()

        # Freigegebene Stunden sind maßgeblich, sonst die gemeldeten
        credited = func.coalesce(EventParticipation.approved_hours, EventParticipation.hours_attended)
        participations = db.query(
            EventParticipation.event_id, EventParticipation.volunteer_id, credited.label("hours")
        ).filter(
            EventParticipation.participation_status.in_(ATTENDED_STATUSES),
            EventParticipation.hours_attended > 0
        ).all()

        return ExportData(
            volunteers=[
                ExportVolunteerRow(id=v.id, first_name=v.first_name, last_name=v.last_name,
                                   gender=v.gender, year=v.year)
                for v in volunteers
            ],
            events=[
                ExportEventRow(id=e.id, event_name=e.event_name, start_date=e.start_date,
                               declared_hours=e.declared_hours, category_code=e.code)
                for e in events
            ],
            participations=[
                ExportParticipationRow(event_id=p.event_id, volunteer_id=p.volunteer_id, hours=p.hours)
                for p in participations
                if p.hours and p.hours > 0
            ],
        )

    @staticmethod
    def build_document(data: ExportData, title: str = "NSS Hours") -> ReportDocument:
        """
        Baut das Pivot-Dokument.

        Aufbau:
            - 3 Kopfzeilen (Vornamen, Nachnamen + Metadaten, Geschlecht)
            - pro Abschnitt: Abschnittszeile, Event-Zeilen, TOTAL-Zeile, Leerzeile
            - Gesamtzeilen pro Abschnitt und Gesamtsummen
        """
        # Reihenfolge einmal festlegen und für Kopf und Matrix verwenden
        volunteers = list(data.volunteers)
        width = len(volunteers)
        hours = data.hours_lookup()
        doc = ReportDocument(title=title, volunteer_count=width)

        doc.add(ROW_HEADER, ["", "", "", ""] + [v.first_name for v in volunteers] + SUMMARY_HEADERS)
        doc.add(ROW_HEADER, ["", "Date", "Event Name", "Hours"] + [v.last_name for v in volunteers])
        doc.add(ROW_HEADER, ["", "", "", ""] + [GENDER_LABELS.get(v.gender, "") for v in volunteers])

        section_totals: Dict[str, List[int]] = {}
        section_declared: Dict[str, int] = {}

        for section, events in data.events_by_section().items():
            totals = [0] * width
            doc.add(ROW_SECTION, ["", "", section, ""])

            for event in events:
                values = [hours.get((event.id, v.id), 0) for v in volunteers]
                _add_values(totals, values)
                doc.add(
                    ROW_EVENT,
                    ["", as_date(event.start_date), event.event_name, event.declared_hours]
                    + _hour_cells(values)
                    + list(count_male_female(volunteers, values))
                )

            declared = sum(e.declared_hours for e in events)
            doc.add(
                ROW_TOTAL,
                ["", "", "TOTAL", declared]
                + _hour_cells(totals)
                + list(count_male_female(volunteers, totals))
            )
            doc.add(ROW_BLANK)

            section_totals[section] = totals
            section_declared[section] = declared

        area_1, area_2, university, college = SECTION_ORDER
        area_total = [a + b for a, b in zip(section_totals[area_1], section_totals[area_2])]
        grand_total = [
            sum(values) for values in zip(*(section_totals[s] for s in SECTION_ORDER))
        ] if width else []

        summaries = [
            ("Area Based 1 Hours", section_declared[area_1], section_totals[area_1]),
            ("Area Based 2 Hours", section_declared[area_2], section_totals[area_2]),
            ("Total Area Based (60)", section_declared[area_1] + section_declared[area_2], area_total),
            ("University Hours", section_declared[university], section_totals[university]),
            ("College Hours", section_declared[college], section_totals[college]),
            ("Total Hours (120)", sum(section_declared.values()), grand_total),
        ]

        doc.add(ROW_BLANK)
        for idx, (label, declared, values) in enumerate(summaries):
            if idx:
                doc.add(ROW_BLANK)
            doc.add(ROW_SUMMARY, [0, label, "", declared] + _hour_cells(values))

        return doc

    @staticmethod
    def build_export(db: Session, title: str = "NSS Hours") -> ReportDocument:
        data = PivotExportService.fetch_export_data(db)
        doc = PivotExportService.build_document(data, title=title)
        logger.info(
            f"Pivot export built: {len(data.volunteers)} volunteers, {len(data.events)} events, "
            f"{len(doc.rows)} rows"
        )
        return doc
