"""Pydantic Schemas für Validierung"""
from nss_hours.schemas.participation import (
    AttendanceEntry,
    SubmitAttendanceRequest,
    SyncAttendanceRequest,
    BulkMarkAttendanceRequest,
    RegisterForEventRequest,
    ParticipationUpdate,
    HoursRequest,
    BatchResult,
    ParticipationResponse,
    EventParticipantResponse,
)
from nss_hours.schemas.hours import (
    ApproveHoursRequest,
    RejectHoursRequest,
    BulkApproveRequest,
    ApprovalResult,
    PendingCount,
    PendingParticipationResponse,
)
from nss_hours.schemas.report import (
    DashboardStats,
    CategoryDistributionRow,
    TopEventRow,
    AttendanceSummaryRow,
    VolunteerHoursSummaryRow,
    ParticipationHistoryRow,
    MonthlyTrendRow,
    ExportVolunteerRow,
    ExportEventRow,
    ExportParticipationRow,
)

__all__ = [
    "AttendanceEntry",
    "SubmitAttendanceRequest",
    "SyncAttendanceRequest",
    "BulkMarkAttendanceRequest",
    "RegisterForEventRequest",
    "ParticipationUpdate",
    "HoursRequest",
    "BatchResult",
    "ParticipationResponse",
    "EventParticipantResponse",
    "ApproveHoursRequest",
    "RejectHoursRequest",
    "BulkApproveRequest",
    "ApprovalResult",
    "PendingCount",
    "PendingParticipationResponse",
    "DashboardStats",
    "CategoryDistributionRow",
    "TopEventRow",
    "AttendanceSummaryRow",
    "VolunteerHoursSummaryRow",
    "ParticipationHistoryRow",
    "MonthlyTrendRow",
    "ExportVolunteerRow",
    "ExportEventRow",
    "ExportParticipationRow",
]
