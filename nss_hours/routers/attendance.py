"""Attendance (Anwesenheit) Router"""
import logging
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from nss_hours.database import get_db
from nss_hours.dependencies import Identity, STAFF_ROLES, get_current_identity, require_roles
from nss_hours.schemas import (
    BatchResult,
    BulkMarkAttendanceRequest,
    EventParticipantResponse,
    HoursRequest,
    ParticipationResponse,
    ParticipationUpdate,
    RegisterForEventRequest,
    SubmitAttendanceRequest,
    SyncAttendanceRequest,
)
from nss_hours.services.attendance_service import AttendanceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.post("/events/{event_id}/submit", response_model=BatchResult)
def submit_attendance(
    event_id: int,
    payload: SubmitAttendanceRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_roles(*STAFF_ROLES))
):
    """Speichert ein Anwesenheits-Set (alles oder nichts)"""
    return AttendanceService.submit_attendance(
        db, event_id, payload.entries, recorded_by=identity.volunteer_id
    )


@router.post("/events/{event_id}/sync", response_model=BatchResult)
def sync_attendance(
    event_id: int,
    payload: SyncAttendanceRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_roles(*STAFF_ROLES))
):
    """Gleicht den Roster mit der übergebenen Liste ab"""
    return AttendanceService.sync_attendance(
        db, event_id, payload.volunteer_ids, recorded_by=identity.volunteer_id
    )


@router.post("/events/{event_id}/bulk-mark", response_model=BatchResult)
def bulk_mark_attendance(
    event_id: int,
    payload: BulkMarkAttendanceRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_roles(*STAFF_ROLES))
):
    return AttendanceService.bulk_mark_attendance(
        db,
        event_id,
        payload.volunteer_ids,
        payload.status,
        hours_attended=payload.hours_attended,
        notes=payload.notes,
        recorded_by=identity.volunteer_id,
    )


@router.post("/events/{event_id}/register", response_model=ParticipationResponse, status_code=201)
def register_for_event(
    event_id: int,
    payload: RegisterForEventRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    """Selbst-Registrierung der angemeldeten Person"""
    return AttendanceService.register_for_event(
        db, event_id, identity.volunteer_id, declared_hours=payload.declared_hours
    )


@router.get("/events/{event_id}/participants", response_model=List[EventParticipantResponse])
def get_event_participants(
    event_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_roles(*STAFF_ROLES))
):
    return AttendanceService.get_event_participants(db, event_id)


@router.patch("/participations/{participation_id}", response_model=ParticipationResponse)
def update_participation(
    participation_id: int,
    payload: ParticipationUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_roles(*STAFF_ROLES))
):
    return AttendanceService.update_participation_status(
        db,
        participation_id,
        status=payload.participation_status,
        hours_attended=payload.hours_attended,
        notes=payload.notes,
    )


@router.post("/participations/{participation_id}/request-hours", response_model=ParticipationResponse)
def request_hours(
    participation_id: int,
    payload: HoursRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    """Stunden-Antrag für eine eigene Teilnahme"""
    return AttendanceService.request_hours(
        db, participation_id, identity.volunteer_id, payload.hours, notes=payload.notes
    )
