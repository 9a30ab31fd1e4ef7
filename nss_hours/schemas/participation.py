"""Pydantic Schemas für Anwesenheit und Teilnahme"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from nss_hours.models.enums import ParticipationStatus, ApprovalStatus


class AttendanceEntry(BaseModel):
    """Ein Eintrag des Anwesenheits-Sets (noch nicht gespeichert)"""
    volunteer_id: int
    status: ParticipationStatus
    hours_attended: int = Field(0, ge=0, le=24)


class SubmitAttendanceRequest(BaseModel):
    """Schema für das Speichern eines Anwesenheits-Sets"""
    entries: List[AttendanceEntry] = Field(default_factory=list)


class SyncAttendanceRequest(BaseModel):
    """Schema für den Roster-Abgleich"""
    volunteer_ids: List[int] = Field(default_factory=list)


class BulkMarkAttendanceRequest(BaseModel):
    """Schema für das Massen-Markieren mit einem Status"""
    volunteer_ids: List[int] = Field(default_factory=list)
    status: ParticipationStatus
    hours_attended: Optional[int] = Field(None, ge=0, le=24)
    notes: Optional[str] = None


class RegisterForEventRequest(BaseModel):
    """Schema für die Selbst-Registrierung"""
    declared_hours: Optional[int] = Field(None, ge=0, le=24)


class ParticipationUpdate(BaseModel):
    """Schema für das Aktualisieren eines einzelnen Eintrags"""
    participation_status: Optional[ParticipationStatus] = None
    hours_attended: Optional[int] = Field(None, ge=0, le=24)
    notes: Optional[str] = None


class HoursRequest(BaseModel):
    """Schema für einen Stunden-Antrag des Freiwilligen"""
    hours: int = Field(..., ge=0, le=24)
    notes: Optional[str] = None


class BatchResult(BaseModel):
    """Aggregiertes Ergebnis einer Batch-Operation (alles oder nichts)"""
    added: int = 0
    updated: int = 0
    removed: int = 0
    skipped: int = 0


class ParticipationResponse(BaseModel):
    """Schema für die Antwort"""
    id: int
    event_id: int
    volunteer_id: int
    participation_status: ParticipationStatus
    hours_attended: int
    declared_hours: Optional[int] = None
    approval_status: ApprovalStatus
    approved_hours: Optional[int] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    approval_notes: Optional[str] = None
    recorded_by_volunteer_id: Optional[int] = None
    registration_date: Optional[datetime] = None
    attendance_date: Optional[datetime] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class EventParticipantResponse(ParticipationResponse):
    """Teilnahme inklusive Name des Freiwilligen"""
    volunteer_name: str
