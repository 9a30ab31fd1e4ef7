"""Reports Router - Auswertungen und Pivot-Export"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from nss_hours.config import settings
from nss_hours.database import get_db
from nss_hours.dependencies import Identity, ROLE_ADMIN, STAFF_ROLES, get_current_identity, require_roles
from nss_hours.exceptions import PermissionDenied
from nss_hours.schemas import (
    AttendanceSummaryRow,
    CategoryDistributionRow,
    DashboardStats,
    MonthlyTrendRow,
    ParticipationHistoryRow,
    TopEventRow,
    VolunteerHoursSummaryRow,
)
from nss_hours.services.export_renderers import (
    CSV_MEDIA_TYPE,
    XLSX_MEDIA_TYPE,
    export_filename,
    render_csv,
    render_xlsx,
)
from nss_hours.services.pivot_export import PivotExportService
from nss_hours.services.report_service import ReportService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])


def _attachment(content, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.get("/dashboard", response_model=DashboardStats)
def dashboard(db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    return ReportService.get_dashboard_stats(db)


@router.get("/categories", response_model=List[CategoryDistributionRow])
def category_distribution(db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    return ReportService.get_category_distribution(db)


@router.get("/top-events", response_model=List[TopEventRow])
def top_events(
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    return ReportService.get_top_events(db, limit=limit)


@router.get("/monthly-trends", response_model=List[MonthlyTrendRow])
def monthly_trends(
    months: Optional[int] = Query(None, ge=1, le=60),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    return ReportService.get_monthly_trends(db, months=months)


@router.get("/attendance", response_model=List[AttendanceSummaryRow])
def attendance_summary(
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_roles(*STAFF_ROLES))
):
    return ReportService.get_attendance_summary(db)


@router.get("/volunteers", response_model=List[VolunteerHoursSummaryRow])
def volunteer_hours_summary(
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_roles(*STAFF_ROLES))
):
    return ReportService.get_volunteer_hours_summary(db)


@router.get("/volunteers/{volunteer_id}/history", response_model=List[ParticipationHistoryRow])
def volunteer_history(
    volunteer_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    """Eigene Historie für alle, fremde nur für Admin/Programmverantwortliche"""
    if volunteer_id != identity.volunteer_id and not identity.has_role(*STAFF_ROLES):
        raise PermissionDenied("Nur die eigene Historie ist einsehbar")
    return ReportService.get_volunteer_participation_history(db, volunteer_id)


@router.get("/export.csv")
def export_csv(db: Session = Depends(get_db), identity: Identity = Depends(require_roles(ROLE_ADMIN))):
    """Pivot-Export als CSV-Download"""
    doc = PivotExportService.build_export(db, title=settings.app_name)
    filename = export_filename("csv")
    logger.info(f"CSV export {filename} requested by {identity.volunteer_id}")
    return _attachment(render_csv(doc).encode("utf-8"), CSV_MEDIA_TYPE, filename)


@router.get("/export.xlsx")
def export_xlsx(db: Session = Depends(get_db), identity: Identity = Depends(require_roles(ROLE_ADMIN))):
    """Pivot-Export als Excel-Download"""
    doc = PivotExportService.build_export(db, title=settings.app_name)
    filename = export_filename("xlsx")
    logger.info(f"Excel export {filename} requested by {identity.volunteer_id}")
    return _attachment(render_xlsx(doc), XLSX_MEDIA_TYPE, filename)
