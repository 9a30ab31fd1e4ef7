"""
Typisierte Zeilen für Report-Abfragen.

Rohe Join-Ergebnisse werden an der Datenbankgrenze in diese Schemas
überführt und nie als ungetypte Dicts weitergereicht.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from nss_hours.models.enums import ParticipationStatus, ApprovalStatus


class DashboardStats(BaseModel):
    active_volunteers: int = 0
    total_events: int = 0
    total_hours: int = 0  # nur freigegebene Stunden
    ongoing_events: int = 0


class CategoryDistributionRow(BaseModel):
    category_id: int
    category_code: str
    category_name: str
    color_hex: Optional[str] = None
    event_count: int = 0
    participant_count: int = 0
    total_hours: int = 0


class TopEventRow(BaseModel):
    event_id: int
    event_name: str
    start_date: datetime
    category_name: Optional[str] = None
    participant_count: int = 0
    total_hours: int = 0
    impact_score: int = 0


class AttendanceSummaryRow(BaseModel):
    event_id: int
    event_name: str
    start_date: datetime
    category_name: Optional[str] = None
    total_registered: int = 0
    total_present: int = 0
    total_absent: int = 0
    attendance_rate: float = Field(0.0, ge=0.0, le=1.0)
    total_hours: int = 0


class VolunteerHoursSummaryRow(BaseModel):
    volunteer_id: int
    volunteer_name: str
    total_hours: int = 0
    approved_hours: int = 0
    events_count: int = 0
    last_activity: Optional[datetime] = None


class MonthlyTrendRow(BaseModel):
    month: str  # "Jan" .. "Dec"
    month_number: int = Field(..., ge=1, le=12)
    year_number: int
    events_count: int = 0
    volunteers_count: int = 0
    hours_sum: int = 0  # nur freigegebene Stunden


class ParticipationHistoryRow(BaseModel):
    participation_id: int
    event_id: int
    event_name: str
    start_date: datetime
    category_name: Optional[str] = None
    participation_status: ParticipationStatus
    hours_attended: int
    approval_status: ApprovalStatus
    approved_hours: Optional[int] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    approval_notes: Optional[str] = None
    attendance_date: Optional[datetime] = None
    notes: Optional[str] = None


# Export-Eingaben

class ExportVolunteerRow(BaseModel):
    id: int
    first_name: str
    last_name: str
    gender: Optional[str] = None
    year: str


class ExportEventRow(BaseModel):
    id: int
    event_name: str
    start_date: datetime
    declared_hours: int
    category_code: str


class ExportParticipationRow(BaseModel):
    event_id: int
    volunteer_id: int
    hours: int = Field(..., ge=0, le=24)
