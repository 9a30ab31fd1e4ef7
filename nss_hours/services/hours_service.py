"""Hours Approval Service - Freigabe-Workflow für gemeldete Stunden"""
import logging
from typing import Iterable, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from nss_hours.database import transaction
from nss_hours.exceptions import ParticipationNotFound
from nss_hours.models import Event, EventParticipation
from nss_hours.models.enums import ApprovalStatus
from nss_hours.schemas.hours import ApprovalResult, PendingParticipationResponse
from nss_hours.utils.datetime_utils import utcnow
from nss_hours.utils.error_decorators import handle_store_errors
from nss_hours.utils.validators import Validators

logger = logging.getLogger(__name__)

BULK_APPROVAL_NOTE = "Bulk approved"


def resolve_approved_hours(override: Optional[int], claimed: int) -> int:
    """
    Ermittelt die freizugebenden Stunden.

    Ohne Override gelten die gemeldeten Stunden des Eintrags.
    """
    if override is not None:
        return override
    return claimed or 0


class HoursApprovalService:
    """
    Zustandsautomat pro Eintrag: pending -> approved, pending -> rejected,
    approved|rejected -> pending (Reset).
    """

    @staticmethod
    def _get_participation(db: Session, participation_id: int) -> EventParticipation:
        participation = db.query(EventParticipation).filter(
            EventParticipation.id == participation_id
        ).first()
        if not participation:
            raise ParticipationNotFound(f"Teilnahme mit ID {participation_id} nicht gefunden")
        return participation

    @staticmethod
    @handle_store_errors("Approving hours")
    def approve_hours(
        db: Session,
        participation_id: int,
        approver_id: int,
        approved_hours: Optional[int] = None,
        notes: Optional[str] = None
    ) -> EventParticipation:
        """
        Gibt die Stunden eines Eintrags frei.

        Eine erneute Freigabe eines bereits freigegebenen Eintrags ist erlaubt
        (administrative Korrektur), der letzte Aufruf gewinnt.

        Args:
            db: Datenbank-Session
            participation_id: ID des Eintrags
            approver_id: ID des freigebenden Freiwilligen
            approved_hours: Optional - abweichende Stundenzahl (0-24)
            notes: Optional - Freigabe-Notiz

        Raises:
            ValidationError: approved_hours außerhalb von 0-24
            ParticipationNotFound: Eintrag existiert nicht
        """
        Validators.validate_hours(approved_hours, "Freigegebene Stunden")

        with transaction(db):
            participation = HoursApprovalService._get_participation(db, participation_id)
            hours = resolve_approved_hours(approved_hours, participation.hours_attended)

            participation.approval_status = ApprovalStatus.APPROVED
            participation.approved_by = approver_id
            participation.approved_at = utcnow()
            participation.approved_hours = hours
            participation.approval_notes = notes
            db.flush()

        logger.info(f"Hours approved: participation {participation_id} -> {hours}h by {approver_id}")
        return participation

    @staticmethod
    @handle_store_errors("Rejecting hours")
    def reject_hours(
        db: Session,
        participation_id: int,
        rejecter_id: int,
        notes: Optional[str] = None
    ) -> EventParticipation:
        """Lehnt die Stunden ab, approved_hours wird immer 0"""
        with transaction(db):
            participation = HoursApprovalService._get_participation(db, participation_id)

            participation.approval_status = ApprovalStatus.REJECTED
            participation.approved_by = rejecter_id
            participation.approved_at = utcnow()
            participation.approved_hours = 0
            participation.approval_notes = notes
            db.flush()

        logger.info(f"Hours rejected: participation {participation_id} by {rejecter_id}")
        return participation

    @staticmethod
    @handle_store_errors("Bulk approving hours")
    def bulk_approve_hours(
        db: Session,
        participation_ids: Iterable[int],
        approver_id: int,
        notes: Optional[str] = None
    ) -> ApprovalResult:
        """
        Gibt mehrere Einträge in einem einzigen UPDATE frei.

        Nur Einträge, die noch 'pending' sind, werden geändert. Bereits
        entschiedene Einträge werden stillschweigend übersprungen, auch wenn
        sie zwischenzeitlich von jemand anderem bearbeitet wurden.

        Returns:
            ApprovalResult mit updated/skipped
        """
        ids = Validators.unique_ids(participation_ids)
        if not ids:
            return ApprovalResult()

        with transaction(db):
            now = utcnow()
            updated = db.query(EventParticipation).filter(
                EventParticipation.id.in_(ids),
                EventParticipation.approval_status == ApprovalStatus.PENDING
            ).update(
                {
                    EventParticipation.approval_status: ApprovalStatus.APPROVED,
                    EventParticipation.approved_by: approver_id,
                    EventParticipation.approved_at: now,
                    EventParticipation.approved_hours: EventParticipation.hours_attended,
                    EventParticipation.approval_notes: notes or BULK_APPROVAL_NOTE,
                    EventParticipation.updated_at: now,
                },
                synchronize_session=False
            )

        # Im Session-Cache geladene Einträge sind nach dem UPDATE veraltet
        db.expire_all()

        skipped = len(ids) - updated
        logger.info(f"Bulk approval by {approver_id}: {updated} approved, {skipped} skipped")
        return ApprovalResult(updated=updated, skipped=skipped)

    @staticmethod
    @handle_store_errors("Resetting approval")
    def reset_approval(db: Session, participation_id: int) -> EventParticipation:
        """Setzt einen entschiedenen Eintrag zurück auf 'pending'"""
        with transaction(db):
            participation = HoursApprovalService._get_participation(db, participation_id)

            participation.approval_status = ApprovalStatus.PENDING
            participation.approved_by = None
            participation.approved_at = None
            participation.approved_hours = None
            participation.approval_notes = None
            db.flush()

        logger.info(f"Approval reset: participation {participation_id}")
        return participation

    @staticmethod
    def _pending_filter(query):
        # Einträge ohne Stunden sind nicht freigabefähig
        return query.filter(
            EventParticipation.approval_status == ApprovalStatus.PENDING,
            EventParticipation.hours_attended > 0
        )

    @staticmethod
    def get_pending_approvals_count(db: Session) -> int:
        query = db.query(func.count(EventParticipation.id))
        return HoursApprovalService._pending_filter(query).scalar() or 0

    @staticmethod
    def get_pending_participations(db: Session) -> List[PendingParticipationResponse]:
        """Freigabe-Warteschlange, neueste Einträge zuerst"""
        query = db.query(EventParticipation).options(
            joinedload(EventParticipation.volunteer),
            joinedload(EventParticipation.event).joinedload(Event.category),
        )
        rows = HoursApprovalService._pending_filter(query).order_by(
            EventParticipation.created_at.desc(),
            EventParticipation.id.desc()
        ).all()

        return [
            PendingParticipationResponse(
                id=row.id,
                event_id=row.event_id,
                event_name=row.event.event_name,
                category_name=row.event.category.category_name if row.event.category else None,
                volunteer_id=row.volunteer_id,
                volunteer_name=row.volunteer.full_name,
                participation_status=row.participation_status,
                hours_attended=row.hours_attended,
                declared_hours=row.declared_hours,
                approval_status=row.approval_status,
                registration_date=row.registration_date,
                created_at=row.created_at,
            )
            for row in rows
        ]
