"""Attendance Service - Anwesenheit erfassen und Roster abgleichen"""
import logging
from typing import Iterable, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from nss_hours.database import transaction
from nss_hours.exceptions import (
    AlreadyRegistered,
    CapacityExceeded,
    EventNotFound,
    NotFound,
    ParticipationNotFound,
    PermissionDenied,
)
from nss_hours.models import Event, EventParticipation, Volunteer
from nss_hours.models.enums import ApprovalStatus, ParticipationStatus, SEAT_HOLDING_STATUSES
from nss_hours.schemas.participation import (
    AttendanceEntry,
    BatchResult,
    EventParticipantResponse,
    ParticipationResponse,
)
from nss_hours.utils.datetime_utils import utcnow
from nss_hours.utils.error_decorators import handle_store_errors
from nss_hours.utils.validators import Validators

logger = logging.getLogger(__name__)


class AttendanceService:
    """Service für Anwesenheits-Business-Logik"""

    @staticmethod
    def _get_event(db: Session, event_id: int, active_only: bool = False, lock: bool = False) -> Event:
        query = db.query(Event).filter(Event.id == event_id)
        if active_only:
            query = query.filter(Event.is_active == True)  # noqa: E712
        if lock:
            # Sperrt die Event-Zeile bis zum Ende der Transaktion (PostgreSQL)
            query = query.with_for_update()
        event = query.first()
        if not event:
            raise EventNotFound(f"Event mit ID {event_id} nicht gefunden")
        return event

    @staticmethod
    def _ensure_volunteers_exist(db: Session, volunteer_ids: List[int]) -> None:
        if not volunteer_ids:
            return
        found = {
            row[0] for row in db.query(Volunteer.id).filter(Volunteer.id.in_(volunteer_ids)).all()
        }
        missing = [v for v in volunteer_ids if v not in found]
        if missing:
            raise NotFound(f"Freiwillige nicht gefunden: {missing}")

    @staticmethod
    def _existing_by_volunteer(db: Session, event_id: int, volunteer_ids: List[int]) -> dict:
        rows = db.query(EventParticipation).filter(
            EventParticipation.event_id == event_id,
            EventParticipation.volunteer_id.in_(volunteer_ids)
        ).all()
        return {row.volunteer_id: row for row in rows}

    @staticmethod
    @handle_store_errors("Submitting attendance")
    def submit_attendance(
        db: Session,
        event_id: int,
        entries: Iterable[AttendanceEntry],
        recorded_by: Optional[int] = None
    ) -> BatchResult:
        """
        Speichert ein Anwesenheits-Set in einer einzigen Transaktion.

        Pro Freiwilligem wird der bestehende Eintrag aktualisiert oder ein neuer
        angelegt (declared_hours = hours_attended). Bei einem Fehler wird der
        gesamte Batch zurückgerollt.

        Args:
            db: Datenbank-Session
            event_id: ID des Events
            entries: Einträge des Anwesenheits-Sets
            recorded_by: ID des erfassenden Freiwilligen

        Returns:
            BatchResult mit added/updated
        """
        # Letzter Eintrag pro Freiwilligem gewinnt
        by_volunteer = {}
        for entry in entries:
            Validators.validate_hours(entry.hours_attended, "Anwesenheitsstunden")
            by_volunteer[entry.volunteer_id] = entry

        if not by_volunteer:
            return BatchResult()

        volunteer_ids = list(by_volunteer.keys())

        with transaction(db):
            AttendanceService._get_event(db, event_id)
            AttendanceService._ensure_volunteers_exist(db, volunteer_ids)
            existing = AttendanceService._existing_by_volunteer(db, event_id, volunteer_ids)
            now = utcnow()
            added = updated = 0

            for volunteer_id, entry in by_volunteer.items():
                participation = existing.get(volunteer_id)
                if participation is not None:
                    participation.participation_status = entry.status
                    participation.hours_attended = entry.hours_attended
                    participation.attendance_date = now
                    participation.recorded_by_volunteer_id = recorded_by
                    updated += 1
                else:
                    db.add(EventParticipation(
                        event_id=event_id,
                        volunteer_id=volunteer_id,
                        participation_status=entry.status,
                        hours_attended=entry.hours_attended,
                        declared_hours=entry.hours_attended,
                        attendance_date=now,
                        recorded_by_volunteer_id=recorded_by,
                    ))
                    added += 1

            db.flush()

        logger.info(f"Attendance submitted for event {event_id}: {added} added, {updated} updated")
        return BatchResult(added=added, updated=updated)

    @staticmethod
    @handle_store_errors("Syncing attendance")
    def sync_attendance(
        db: Session,
        event_id: int,
        volunteer_ids: Iterable[int],
        recorded_by: Optional[int] = None
    ) -> BatchResult:
        """
        Gleicht den gespeicherten Roster eines Events mit der gewünschten Liste ab.

        Nur die Differenz wird geschrieben: neue Freiwillige werden als 'present'
        mit 0 Stunden angelegt, fehlende gelöscht. Verbleibende Einträge behalten
        Freigabestatus und Notizen. Eine leere Liste leert den Roster.

        Returns:
            BatchResult mit added/removed
        """
        desired = Validators.unique_ids(volunteer_ids)

        with transaction(db):
            AttendanceService._get_event(db, event_id)
            AttendanceService._ensure_volunteers_exist(db, desired)

            current = {
                row[0] for row in db.query(EventParticipation.volunteer_id).filter(
                    EventParticipation.event_id == event_id
                ).all()
            }
            desired_set = set(desired)
            to_add = [v for v in desired if v not in current]
            to_remove = [v for v in current if v not in desired_set]

            if to_remove:
                db.query(EventParticipation).filter(
                    EventParticipation.event_id == event_id,
                    EventParticipation.volunteer_id.in_(to_remove)
                ).delete(synchronize_session="fetch")

            for volunteer_id in to_add:
                db.add(EventParticipation(
                    event_id=event_id,
                    volunteer_id=volunteer_id,
                    participation_status=ParticipationStatus.PRESENT,
                    hours_attended=0,
                    declared_hours=0,
                    recorded_by_volunteer_id=recorded_by,
                ))

            db.flush()

        logger.info(f"Attendance synced for event {event_id}: {len(to_add)} added, {len(to_remove)} removed")
        return BatchResult(added=len(to_add), removed=len(to_remove))

    @staticmethod
    @handle_store_errors("Bulk marking attendance")
    def bulk_mark_attendance(
        db: Session,
        event_id: int,
        volunteer_ids: Iterable[int],
        status: ParticipationStatus,
        hours_attended: Optional[int] = None,
        notes: Optional[str] = None,
        recorded_by: Optional[int] = None
    ) -> BatchResult:
        """
        Setzt alle übergebenen Freiwilligen auf einen Status (gespeichert).

        Bestehende Einträge behalten Stunden und Notizen, sofern nicht
        explizit überschrieben.
        """
        Validators.validate_hours(hours_attended, "Anwesenheitsstunden")
        ids = Validators.unique_ids(volunteer_ids)
        if not ids:
            return BatchResult()

        with transaction(db):
            AttendanceService._get_event(db, event_id)
            AttendanceService._ensure_volunteers_exist(db, ids)
            existing = AttendanceService._existing_by_volunteer(db, event_id, ids)
            now = utcnow()
            added = updated = 0

            for volunteer_id in ids:
                participation = existing.get(volunteer_id)
                if participation is not None:
                    participation.participation_status = status
                    if hours_attended is not None:
                        participation.hours_attended = hours_attended
                    if notes is not None:
                        participation.notes = notes
                    participation.attendance_date = now
                    updated += 1
                else:
                    hours = hours_attended if hours_attended is not None else 0
                    db.add(EventParticipation(
                        event_id=event_id,
                        volunteer_id=volunteer_id,
                        participation_status=status,
                        hours_attended=hours,
                        declared_hours=hours,
                        notes=notes,
                        registration_date=now,
                        attendance_date=now,
                        recorded_by_volunteer_id=recorded_by,
                    ))
                    added += 1

            db.flush()

        logger.info(f"Bulk marked {added + updated} volunteers as {status.value} for event {event_id}")
        return BatchResult(added=added, updated=updated)

    @staticmethod
    @handle_store_errors("Registering for event", duplicate_error=AlreadyRegistered)
    def register_for_event(
        db: Session,
        event_id: int,
        volunteer_id: int,
        declared_hours: Optional[int] = None
    ) -> EventParticipation:
        """
        Selbst-Registrierung eines Freiwilligen.

        Die Kapazitätsprüfung läuft in derselben Transaktion wie das Insert,
        die Event-Zeile ist dabei gesperrt.

        Raises:
            ValidationError: Stunden außerhalb 0-24 oder über den Event-Stunden
            EventNotFound: Event existiert nicht oder ist inaktiv
            AlreadyRegistered: Es gibt bereits einen Eintrag für das Paar
            CapacityExceeded: max_participants ist erreicht
        """
        Validators.validate_hours(declared_hours, "Deklarierte Stunden")

        with transaction(db):
            event = AttendanceService._get_event(db, event_id, active_only=True, lock=True)
            AttendanceService._ensure_volunteers_exist(db, [volunteer_id])

            already = db.query(EventParticipation.id).filter(
                EventParticipation.event_id == event_id,
                EventParticipation.volunteer_id == volunteer_id
            ).first()
            if already:
                raise AlreadyRegistered(f"Freiwilliger {volunteer_id} ist für Event {event_id} bereits registriert")

            if declared_hours is None:
                declared_hours = min(event.declared_hours, Validators.MAX_HOURS)
            else:
                Validators.validate_requested_hours(declared_hours, event.declared_hours)

            if event.max_participants:
                current_count = db.query(func.count(EventParticipation.id)).filter(
                    EventParticipation.event_id == event_id,
                    EventParticipation.participation_status.in_(SEAT_HOLDING_STATUSES)
                ).scalar()
                if current_count >= event.max_participants:
                    raise CapacityExceeded(
                        f"Event {event_id} ist voll ({current_count}/{event.max_participants})"
                    )

            participation = EventParticipation(
                event_id=event_id,
                volunteer_id=volunteer_id,
                participation_status=ParticipationStatus.REGISTERED,
                hours_attended=0,
                declared_hours=declared_hours,
                registration_date=utcnow(),
            )
            db.add(participation)
            db.flush()

        logger.info(f"Volunteer {volunteer_id} registered for event {event_id}")
        return participation

    @staticmethod
    @handle_store_errors("Updating participation")
    def update_participation_status(
        db: Session,
        participation_id: int,
        status: Optional[ParticipationStatus] = None,
        hours_attended: Optional[int] = None,
        notes: Optional[str] = None
    ) -> EventParticipation:
        """Aktualisiert nur die übergebenen Felder eines Eintrags"""
        Validators.validate_hours(hours_attended, "Anwesenheitsstunden")

        with transaction(db):
            participation = db.query(EventParticipation).filter(
                EventParticipation.id == participation_id
            ).first()
            if not participation:
                raise ParticipationNotFound(f"Teilnahme mit ID {participation_id} nicht gefunden")

            if status is not None:
                participation.participation_status = status
            if hours_attended is not None:
                participation.hours_attended = hours_attended
            if notes is not None:
                participation.notes = notes
            db.flush()

        return participation

    @staticmethod
    @handle_store_errors("Requesting hours")
    def request_hours(
        db: Session,
        participation_id: int,
        volunteer_id: int,
        hours: int,
        notes: Optional[str] = None
    ) -> EventParticipation:
        """
        Stunden-Antrag (oder Korrektur) des Freiwilligen für seinen eigenen Eintrag.

        Der Antrag landet wieder in der Freigabe-Warteschlange: der
        Freigabestatus wird auf 'pending' zurückgesetzt.

        Raises:
            ValidationError: Stunden außerhalb 0-24 oder über den Event-Stunden
            ParticipationNotFound: Eintrag existiert nicht
            PermissionDenied: Eintrag gehört einem anderen Freiwilligen
        """
        Validators.validate_hours(hours, "Beantragte Stunden")

        # Obergrenze vor Beginn der Schreib-Transaktion prüfen
        event_hours = db.query(Event.declared_hours).join(
            EventParticipation, EventParticipation.event_id == Event.id
        ).filter(EventParticipation.id == participation_id).scalar()
        if event_hours is None:
            raise ParticipationNotFound(f"Teilnahme mit ID {participation_id} nicht gefunden")
        Validators.validate_requested_hours(hours, event_hours)

        with transaction(db):
            participation = db.get(EventParticipation, participation_id)
            if participation.volunteer_id != volunteer_id:
                raise PermissionDenied("Stunden können nur für eigene Teilnahmen beantragt werden")

            participation.hours_attended = hours
            participation.declared_hours = hours
            participation.approval_status = ApprovalStatus.PENDING
            participation.approved_hours = None
            participation.approved_by = None
            participation.approved_at = None
            participation.approval_notes = None
            if notes is not None:
                participation.notes = notes
            db.flush()

        logger.info(f"Hours requested: participation {participation_id} -> {hours}h")
        return participation

    @staticmethod
    def get_event_participants(db: Session, event_id: int) -> List[EventParticipantResponse]:
        """Alle Teilnahmen eines Events mit Namen, sortiert nach Nachname"""
        AttendanceService._get_event(db, event_id)
        rows = db.query(EventParticipation).join(
            Volunteer, EventParticipation.volunteer_id == Volunteer.id
        ).options(
            joinedload(EventParticipation.volunteer)
        ).filter(
            EventParticipation.event_id == event_id
        ).order_by(Volunteer.last_name, Volunteer.first_name).all()

        return [
            EventParticipantResponse(
                **ParticipationResponse.model_validate(row).model_dump(),
                volunteer_name=row.volunteer.full_name,
            )
            for row in rows
        ]
