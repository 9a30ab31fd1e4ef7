"""Hours (Stunden-Freigabe) Router"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from nss_hours.database import get_db
from nss_hours.dependencies import Identity, STAFF_ROLES, require_roles
from nss_hours.schemas import (
    ApprovalResult,
    ApproveHoursRequest,
    BulkApproveRequest,
    ParticipationResponse,
    PendingCount,
    PendingParticipationResponse,
    RejectHoursRequest,
)
from nss_hours.services.hours_service import HoursApprovalService

router = APIRouter(prefix="/hours", tags=["hours"])


@router.get("/pending", response_model=List[PendingParticipationResponse])
def get_pending(
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_roles(*STAFF_ROLES))
):
    return HoursApprovalService.get_pending_participations(db)


@router.get("/pending/count", response_model=PendingCount)
def get_pending_count(
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_roles(*STAFF_ROLES))
):
    return PendingCount(count=HoursApprovalService.get_pending_approvals_count(db))


@router.post("/bulk-approve", response_model=ApprovalResult)
def bulk_approve(
    payload: BulkApproveRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_roles(*STAFF_ROLES))
):
    """Gibt alle noch offenen Einträge der Liste frei"""
    return HoursApprovalService.bulk_approve_hours(
        db, payload.participation_ids, identity.volunteer_id, notes=payload.notes
    )


@router.post("/{participation_id}/approve", response_model=ParticipationResponse)
def approve(
    participation_id: int,
    payload: ApproveHoursRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_roles(*STAFF_ROLES))
):
    return HoursApprovalService.approve_hours(
        db,
        participation_id,
        identity.volunteer_id,
        approved_hours=payload.approved_hours,
        notes=payload.notes,
    )


@router.post("/{participation_id}/reject", response_model=ParticipationResponse)
def reject(
    participation_id: int,
    payload: RejectHoursRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_roles(*STAFF_ROLES))
):
    return HoursApprovalService.reject_hours(
        db, participation_id, identity.volunteer_id, notes=payload.notes
    )


@router.post("/{participation_id}/reset", response_model=ParticipationResponse)
def reset(
    participation_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_roles(*STAFF_ROLES))
):
    return HoursApprovalService.reset_approval(db, participation_id)
