"""Attendance marking and attendance reports for one college.

Marks are last-write-wins: two concurrent marks for the same registration
both succeed and the later flush decides the stored status.
"""

import uuid
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from app.core.exceptions import NotFoundError, ValidationError
from app.core.logging import get_logger
from app.models.event import Event
from app.models.registration import ATTENDANCE_STATUSES, Registration
from app.schemas import (
    AttendedEvent,
    BulkAttendanceItem,
    BulkAttendanceResult,
    EventAttendanceReport,
    EventAttendanceSummary,
    EventBrief,
    RegisteredStudent,
    StudentAttendanceHistory,
    StudentAttendanceSummary,
    StudentBrief,
)
from app.services.metrics import percentage
from app.services.scope import TenantScope

# Per-item error tags returned by mark_bulk
INVALID_STATUS = "invalid_status"
NOT_REGISTERED = "not_registered"
ITEM_ERROR = "error"

logger = get_logger("attendance")


class AttendanceService:
    def __init__(self, scope: TenantScope):
        self.scope = scope

    async def _find_registration(
        self, student_id: uuid.UUID, event_id: uuid.UUID
    ) -> Optional[Registration]:
        result = await self.scope.db.execute(
            self.scope.registrations().where(
                Registration.student_id == student_id,
                Registration.event_id == event_id,
            )
        )
        return result.scalar_one_or_none()

    async def mark(self, student_id, event_id, status: str) -> Registration:
        """Set one registration to attended/absent.

        Any current status may be overwritten, so repeating a mark is a no-op.
        """
        if status not in ATTENDANCE_STATUSES:
            raise ValidationError(f"Status must be one of: {', '.join(ATTENDANCE_STATUSES)}")

        event = await self.scope.get_event(event_id)
        student = await self.scope.get_student(student_id)

        registration = await self._find_registration(student.id, event.id)
        if not registration:
            raise NotFoundError("Student is not registered for this event")

        registration.status = status
        await self.scope.db.flush()

        logger.info(f"Attendance marked: {student.email} -> {status} for '{event.name}'")
        return registration

    async def mark_bulk(
        self, event_id, items: List[BulkAttendanceItem]
    ) -> List[BulkAttendanceResult]:
        """Mark many students for one event.

        Returns one result per item, in input order. A failing item never
        aborts the batch.
        """
        event = await self.scope.get_event(event_id)
        results = [await self._mark_item(event, item) for item in items]

        succeeded = sum(1 for r in results if r.success)
        logger.info(
            f"Bulk attendance for '{event.name}': {succeeded}/{len(results)} marked"
        )
        return results

    async def _mark_item(self, event: Event, item: BulkAttendanceItem) -> BulkAttendanceResult:
        if item.status not in ATTENDANCE_STATUSES:
            return BulkAttendanceResult(
                student_id=item.student_id, success=False, error=INVALID_STATUS
            )

        try:
            student_id = uuid.UUID(item.student_id)
        except ValueError:
            return BulkAttendanceResult(
                student_id=item.student_id, success=False, error=NOT_REGISTERED
            )

        try:
            async with self.scope.db.begin_nested():
                registration = await self._find_registration(student_id, event.id)
                if not registration:
                    return BulkAttendanceResult(
                        student_id=item.student_id, success=False, error=NOT_REGISTERED
                    )
                registration.status = item.status
        except SQLAlchemyError as e:
            logger.warning(f"Bulk attendance item {item.student_id} failed: {e}")
            return BulkAttendanceResult(
                student_id=item.student_id, success=False, error=ITEM_ERROR
            )

        return BulkAttendanceResult(
            student_id=item.student_id, success=True, status=item.status
        )

    async def event_report(self, event_id) -> EventAttendanceReport:
        """Attendance summary and roster for one event, roster sorted by status then name."""
        event = await self.scope.get_event(event_id)
        registrations = await self.scope.all(
            self.scope.registrations()
            .where(Registration.event_id == event.id)
            .options(selectinload(Registration.student))
        )
        registrations.sort(key=lambda r: (r.status, r.student.name))

        total = len(registrations)
        attended = sum(1 for r in registrations if r.status == "attended")
        absent = sum(1 for r in registrations if r.status == "absent")
        pending = sum(1 for r in registrations if r.status == "registered")

        return EventAttendanceReport(
            event=EventBrief.model_validate(event),
            summary=EventAttendanceSummary(
                total_registered=total,
                attended=attended,
                absent=absent,
                pending=pending,
                attendance_percentage=percentage(attended, total),
            ),
            registrations=[
                RegisteredStudent(
                    id=r.id,
                    status=r.status,
                    registered_at=r.registered_at,
                    student=StudentBrief.model_validate(r.student),
                )
                for r in registrations
            ],
        )

    async def student_history(self, student_id) -> StudentAttendanceHistory:
        """Every registration of one student, newest event first."""
        student = await self.scope.get_student(student_id)
        registrations = await self.scope.all(
            self.scope.student_registrations()
            .where(Registration.student_id == student.id)
            .options(selectinload(Registration.event))
        )
        registrations.sort(key=lambda r: r.event.start_time, reverse=True)

        attended = sum(1 for r in registrations if r.status == "attended")

        return StudentAttendanceHistory(
            student=StudentBrief.model_validate(student),
            summary=StudentAttendanceSummary(
                total_events=len(registrations),
                attended_events=attended,
                attendance_rate=percentage(attended, len(registrations)),
            ),
            history=[
                AttendedEvent(
                    id=r.id,
                    status=r.status,
                    registered_at=r.registered_at,
                    event=EventBrief.model_validate(r.event),
                )
                for r in registrations
            ],
        )
