"""Pydantic Schemas für die Stunden-Freigabe"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from nss_hours.models.enums import ParticipationStatus, ApprovalStatus


class ApproveHoursRequest(BaseModel):
    """Ohne approved_hours werden die gemeldeten Stunden übernommen"""
    approved_hours: Optional[int] = Field(None, ge=0, le=24)
    notes: Optional[str] = None


class RejectHoursRequest(BaseModel):
    notes: Optional[str] = None


class BulkApproveRequest(BaseModel):
    participation_ids: List[int] = Field(default_factory=list)
    notes: Optional[str] = None


class ApprovalResult(BaseModel):
    """Ergebnis einer Freigabe: übersprungen = nicht mehr 'pending'"""
    updated: int = 0
    skipped: int = 0


class PendingCount(BaseModel):
    count: int


class PendingParticipationResponse(BaseModel):
    """Eintrag der Freigabe-Warteschlange"""
    id: int
    event_id: int
    event_name: str
    category_name: Optional[str] = None
    volunteer_id: int
    volunteer_name: str
    participation_status: ParticipationStatus
    hours_attended: int
    declared_hours: Optional[int] = None
    approval_status: ApprovalStatus
    registration_date: Optional[datetime] = None
    created_at: datetime
