"""Report Service - lesende Auswertungen über Teilnahmen, Events und Freiwillige"""
import logging
from datetime import date, datetime, time, timezone
from typing import List, Optional
from sqlalchemy import and_, case, func
from sqlalchemy.orm import Session

from nss_hours.config import settings
from nss_hours.exceptions import NotFound
from nss_hours.models import Event, EventCategory, EventParticipation, Volunteer
from nss_hours.models.enums import ApprovalStatus, ParticipationStatus, ATTENDED_STATUSES
from nss_hours.schemas.report import (
    AttendanceSummaryRow,
    CategoryDistributionRow,
    DashboardStats,
    MonthlyTrendRow,
    ParticipationHistoryRow,
    TopEventRow,
    VolunteerHoursSummaryRow,
)
from nss_hours.utils.datetime_utils import latest, month_start, today, utcnow

logger = logging.getLogger(__name__)

# Nur freigegebene Stunden zählen, abgelehnte Einträge haben ohnehin 0
approved_hours_expr = case(
    (EventParticipation.approval_status == ApprovalStatus.APPROVED, EventParticipation.approved_hours),
    else_=0
)

# Freigegeben: approved_hours, abgelehnt: 0, offen: gemeldete Stunden
claimed_hours_expr = case(
    (EventParticipation.approval_status == ApprovalStatus.APPROVED, EventParticipation.approved_hours),
    (EventParticipation.approval_status == ApprovalStatus.REJECTED, 0),
    else_=EventParticipation.hours_attended
)


def _sum(expr):
    return func.coalesce(func.sum(expr), 0)


class ReportService:
    """Aggregationen für Dashboard und Reports (nur lesend)"""

    @staticmethod
    def get_dashboard_stats(db: Session) -> DashboardStats:
        """
        Kennzahlen für das Dashboard.

        total_hours summiert ausschließlich approved_hours freigegebener
        Einträge aktiver Events, nie gemeldete Stunden.
        """
        active_volunteers = db.query(func.count(Volunteer.id)).filter(
            Volunteer.is_active == True  # noqa: E712
        ).scalar()

        total_events = db.query(func.count(Event.id)).filter(
            Event.is_active == True  # noqa: E712
        ).scalar()

        total_hours = db.query(_sum(EventParticipation.approved_hours)).join(
            Event, EventParticipation.event_id == Event.id
        ).filter(
            EventParticipation.approval_status == ApprovalStatus.APPROVED,
            Event.is_active == True  # noqa: E712
        ).scalar()

        ongoing_events = db.query(func.count(Event.id)).filter(
            Event.is_active == True,  # noqa: E712
            Event.end_date >= utcnow()
        ).scalar()

        return DashboardStats(
            active_volunteers=active_volunteers or 0,
            total_events=total_events or 0,
            total_hours=int(total_hours or 0),
            ongoing_events=ongoing_events or 0,
        )

    @staticmethod
    def get_category_distribution(db: Session) -> List[CategoryDistributionRow]:
        """Pro aktiver Kategorie: Anzahl Events, Teilnehmer und freigegebene Stunden"""
        event_count = func.count(func.distinct(Event.id))
        rows = db.query(
            EventCategory.id,
            EventCategory.code,
            EventCategory.category_name,
            EventCategory.color_hex,
            event_count.label("event_count"),
            func.count(func.distinct(EventParticipation.volunteer_id)).label("participant_count"),
            _sum(approved_hours_expr).label("total_hours"),
        ).outerjoin(
            Event, and_(Event.category_id == EventCategory.id, Event.is_active == True)  # noqa: E712
        ).outerjoin(
            EventParticipation, EventParticipation.event_id == Event.id
        ).filter(
            EventCategory.is_active == True  # noqa: E712
        ).group_by(
            EventCategory.id, EventCategory.code, EventCategory.category_name, EventCategory.color_hex
        ).order_by(event_count.desc(), EventCategory.code).all()

        return [
            CategoryDistributionRow(
                category_id=row.id,
                category_code=row.code,
                category_name=row.category_name,
                color_hex=row.color_hex,
                event_count=row.event_count,
                participant_count=row.participant_count,
                total_hours=int(row.total_hours),
            )
            for row in rows
        ]

    @staticmethod
    def get_top_events(db: Session, limit: Optional[int] = None) -> List[TopEventRow]:
        """
        Events nach Wirkung: Teilnehmerzahl zuerst, bei Gleichstand
        freigegebene Stunden.
        """
        if limit is None:
            limit = settings.top_events_limit

        participant_count = func.count(func.distinct(EventParticipation.volunteer_id))
        total_hours = _sum(approved_hours_expr)

        rows = db.query(
            Event.id,
            Event.event_name,
            Event.start_date,
            EventCategory.category_name,
            participant_count.label("participant_count"),
            total_hours.label("total_hours"),
        ).outerjoin(
            EventCategory, Event.category_id == EventCategory.id
        ).outerjoin(
            EventParticipation, EventParticipation.event_id == Event.id
        ).filter(
            Event.is_active == True  # noqa: E712
        ).group_by(
            Event.id, Event.event_name, Event.start_date, EventCategory.category_name
        ).order_by(
            participant_count.desc(), total_hours.desc(), Event.start_date.desc()
        ).limit(limit).all()

        return [
            TopEventRow(
                event_id=row.id,
                event_name=row.event_name,
                start_date=row.start_date,
                category_name=row.category_name,
                participant_count=row.participant_count,
                total_hours=int(row.total_hours),
                impact_score=row.participant_count * int(row.total_hours),
            )
            for row in rows
        ]

    @staticmethod
    def get_attendance_summary(db: Session) -> List[AttendanceSummaryRow]:
        """Pro Event: registriert/anwesend/abwesend und Anwesenheitsquote"""
        rows = db.query(
            Event.id,
            Event.event_name,
            Event.start_date,
            EventCategory.category_name,
            func.count(EventParticipation.id).label("total_registered"),
            func.count(
                case((EventParticipation.participation_status.in_(ATTENDED_STATUSES), 1))
            ).label("total_present"),
            func.count(
                case((EventParticipation.participation_status == ParticipationStatus.ABSENT, 1))
            ).label("total_absent"),
            _sum(approved_hours_expr).label("total_hours"),
        ).outerjoin(
            EventCategory, Event.category_id == EventCategory.id
        ).outerjoin(
            EventParticipation, EventParticipation.event_id == Event.id
        ).filter(
            Event.is_active == True  # noqa: E712
        ).group_by(
            Event.id, Event.event_name, Event.start_date, EventCategory.category_name
        ).order_by(Event.start_date.desc()).all()

        result = []
        for row in rows:
            rate = row.total_present / row.total_registered if row.total_registered else 0.0
            result.append(AttendanceSummaryRow(
                event_id=row.id,
                event_name=row.event_name,
                start_date=row.start_date,
                category_name=row.category_name,
                total_registered=row.total_registered,
                total_present=row.total_present,
                total_absent=row.total_absent,
                attendance_rate=rate,
                total_hours=int(row.total_hours),
            ))
        return result

    @staticmethod
    def get_volunteer_hours_summary(db: Session) -> List[VolunteerHoursSummaryRow]:
        """
        Pro aktivem Freiwilligen: Gesamtstunden, freigegebene Stunden,
        Anzahl Events und letzte Aktivität.

        total_hours nimmt bei freigegebenen Einträgen approved_hours, bei
        offenen die gemeldeten Stunden. Abgelehnte zählen nicht.
        """
        total_hours = _sum(claimed_hours_expr)
        rows = db.query(
            Volunteer.id,
            Volunteer.first_name,
            Volunteer.last_name,
            total_hours.label("total_hours"),
            _sum(approved_hours_expr).label("approved_hours"),
            func.count(func.distinct(EventParticipation.event_id)).label("events_count"),
            func.max(EventParticipation.attendance_date).label("last_attendance"),
            func.max(EventParticipation.approved_at).label("last_approval"),
        ).outerjoin(
            EventParticipation, EventParticipation.volunteer_id == Volunteer.id
        ).filter(
            Volunteer.is_active == True  # noqa: E712
        ).group_by(
            Volunteer.id, Volunteer.first_name, Volunteer.last_name
        ).order_by(total_hours.desc(), Volunteer.last_name, Volunteer.first_name).all()

        return [
            VolunteerHoursSummaryRow(
                volunteer_id=row.id,
                volunteer_name=f"{row.first_name} {row.last_name}",
                total_hours=int(row.total_hours),
                approved_hours=int(row.approved_hours),
                events_count=row.events_count,
                last_activity=latest(row.last_attendance, row.last_approval),
            )
            for row in rows
        ]

    @staticmethod
    def get_monthly_trends(db: Session, months: Optional[int] = None) -> List[MonthlyTrendRow]:
        """
        Aktivität pro Monat über die letzten `months` Monate (inkl. aktuellem).

        Pro Monat des Event-Starts: Anzahl aktiver Events, verschiedene
        Teilnehmer und freigegebene Stunden. Monate ohne Events fehlen.
        Gruppiert wird in Python, damit SQLite und PostgreSQL gleich rechnen.
        """
        months = months or settings.trend_months
        since = datetime.combine(month_start(today(), months - 1), time.min, tzinfo=timezone.utc)

        rows = db.query(
            Event.id,
            Event.start_date,
            EventParticipation.volunteer_id,
            approved_hours_expr.label("hours"),
        ).outerjoin(
            EventParticipation, EventParticipation.event_id == Event.id
        ).filter(
            Event.is_active == True,  # noqa: E712
            Event.start_date >= since
        ).order_by(Event.start_date).all()

        buckets = {}
        for row in rows:
            key = (row.start_date.year, row.start_date.month)
            bucket = buckets.setdefault(key, {"events": set(), "volunteers": set(), "hours": 0})
            bucket["events"].add(row.id)
            if row.volunteer_id is not None:
                bucket["volunteers"].add(row.volunteer_id)
            bucket["hours"] += int(row.hours or 0)

        return [
            MonthlyTrendRow(
                month=date(year, month, 1).strftime("%b"),
                month_number=month,
                year_number=year,
                events_count=len(bucket["events"]),
                volunteers_count=len(bucket["volunteers"]),
                hours_sum=bucket["hours"],
            )
            for (year, month), bucket in sorted(buckets.items())
        ]

    @staticmethod
    def get_volunteer_participation_history(db: Session, volunteer_id: int) -> List[ParticipationHistoryRow]:
        """Alle Einträge eines Freiwilligen inklusive abgelehnter (Status-Ansicht)"""
        if not db.query(Volunteer.id).filter(Volunteer.id == volunteer_id).first():
            raise NotFound(f"Freiwilliger mit ID {volunteer_id} nicht gefunden")

        rows = db.query(EventParticipation, Event, EventCategory.category_name).join(
            Event, EventParticipation.event_id == Event.id
        ).outerjoin(
            EventCategory, Event.category_id == EventCategory.id
        ).filter(
            EventParticipation.volunteer_id == volunteer_id
        ).order_by(Event.start_date.desc()).all()

        return [
            ParticipationHistoryRow(
                participation_id=participation.id,
                event_id=event.id,
                event_name=event.event_name,
                start_date=event.start_date,
                category_name=category_name,
                participation_status=participation.participation_status,
                hours_attended=participation.hours_attended,
                approval_status=participation.approval_status,
                approved_hours=participation.approved_hours,
                approved_by=participation.approved_by,
                approved_at=participation.approved_at,
                approval_notes=participation.approval_notes,
                attendance_date=participation.attendance_date,
                notes=participation.notes,
            )
            for participation, event, category_name in rows
        ]
