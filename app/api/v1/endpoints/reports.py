"""College report endpoints for the admin portal."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.config import settings
from app.core.exceptions import ValidationError
from app.dependencies import get_tenant_scope
from app.schemas import (
    AttendanceTrends,
    DashboardStats,
    EventType,
    EventTypeAnalytics,
    PopularEventsReport,
    StudentParticipationReport,
    StudentRanking,
    TopStudentsReport,
)
from app.services.report_service import ReportService
from app.services.scope import TenantScope

router = APIRouter()


def get_report_service(scope: TenantScope = Depends(get_tenant_scope)) -> ReportService:
    return ReportService(scope)


@router.get("/popular_events", response_model=PopularEventsReport)
async def popular_events(
    limit: int = Query(settings.DEFAULT_REPORT_LIMIT, ge=1, le=settings.MAX_REPORT_LIMIT),
    type: Optional[EventType] = Query(None, description="Filter by event type"),
    date_from: Optional[date] = Query(None, description="Events starting on or after this day"),
    date_to: Optional[date] = Query(None, description="Events starting on or before this day"),
    service: ReportService = Depends(get_report_service),
):
    """Events ranked by number of registrations."""
    if date_from and date_to and date_to < date_from:
        raise ValidationError("date_to must not be before date_from")
    return await service.popular_events(type=type, date_from=date_from, date_to=date_to, limit=limit)


@router.get("/student_participation", response_model=StudentParticipationReport)
async def student_participation(
    limit: int = Query(settings.DEFAULT_REPORT_LIMIT, ge=1, le=settings.MAX_REPORT_LIMIT),
    sort_by: StudentRanking = Query("attended"),
    service: ReportService = Depends(get_report_service),
):
    """Per-student registration and attendance counts."""
    return await service.student_participation(limit=limit, sort_by=sort_by)


@router.get("/top_students", response_model=TopStudentsReport)
async def top_students(
    limit: int = Query(settings.DEFAULT_TOP_STUDENTS, ge=1, le=settings.MAX_REPORT_LIMIT),
    criteria: StudentRanking = Query("attended"),
    service: ReportService = Depends(get_report_service),
):
    """Top ranked students by the chosen criteria."""
    return await service.top_students(limit=limit, criteria=criteria)


@router.get("/event_type_analytics", response_model=EventTypeAnalytics)
async def event_type_analytics(service: ReportService = Depends(get_report_service)):
    """Totals and rates per event type."""
    return await service.event_type_analytics()


@router.get("/attendance_trends", response_model=AttendanceTrends)
async def attendance_trends(
    months: int = Query(settings.DEFAULT_TREND_MONTHS, ge=1, le=settings.MAX_TREND_MONTHS),
    service: ReportService = Depends(get_report_service),
):
    """Monthly attendance, oldest month first."""
    return await service.attendance_trends(months=months)


@router.get("/dashboard_stats", response_model=DashboardStats)
async def dashboard_stats(service: ReportService = Depends(get_report_service)):
    """Headline numbers for the admin dashboard."""
    return await service.dashboard_stats()
