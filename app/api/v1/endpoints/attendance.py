"""Attendance marking and attendance report endpoints (college admins)."""

from uuid import UUID

from fastapi import APIRouter, Depends

from app.dependencies import get_tenant_scope
from app.schemas import (
    BulkAttendanceRequest,
    BulkAttendanceResponse,
    EventAttendanceReport,
    MarkAttendanceRequest,
    MarkAttendanceResponse,
    RegistrationResponse,
    StudentAttendanceHistory,
)
from app.services.attendance_service import AttendanceService
from app.services.scope import TenantScope

router = APIRouter()


def get_attendance_service(scope: TenantScope = Depends(get_tenant_scope)) -> AttendanceService:
    return AttendanceService(scope)


@router.post("/mark", response_model=MarkAttendanceResponse)
async def mark_attendance(
    data: MarkAttendanceRequest,
    service: AttendanceService = Depends(get_attendance_service),
):
    """Mark one registered student as attended or absent."""
    registration = await service.mark(data.student_id, data.event_id, data.status)
    return MarkAttendanceResponse(
        message="Attendance marked successfully",
        registration=RegistrationResponse.model_validate(registration),
    )


@router.post("/mark-bulk", response_model=BulkAttendanceResponse)
async def mark_attendance_bulk(
    data: BulkAttendanceRequest,
    service: AttendanceService = Depends(get_attendance_service),
):
    """Mark many students for one event; failures are reported per item."""
    results = await service.mark_bulk(data.event_id, data.attendance)
    return BulkAttendanceResponse(message="Bulk attendance processed", results=results)


@router.get("/{event_id}/report", response_model=EventAttendanceReport)
async def event_attendance_report(
    event_id: UUID,
    service: AttendanceService = Depends(get_attendance_service),
):
    """Attendance summary and roster for an event."""
    return await service.event_report(event_id)


@router.get("/student/{student_id}/history", response_model=StudentAttendanceHistory)
async def student_attendance_history(
    student_id: UUID,
    service: AttendanceService = Depends(get_attendance_service),
):
    """Attendance history for one student."""
    return await service.student_history(student_id)
