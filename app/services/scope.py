"""College-scoped query builders.

Every report and attendance operation reads through a ``TenantScope``, so
each statement it issues is already filtered by the caller's college.
"""

import uuid
from typing import Any, List, Union

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.models.event import Event
from app.models.feedback import Feedback
from app.models.registration import Registration
from app.models.student import Student


def parse_id(value: Union[str, uuid.UUID], message: str = "Resource not found") -> uuid.UUID:
    """Coerce a path/body id to UUID; malformed ids raise NotFoundError."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise NotFoundError(message)


class TenantScope:
    """Select builders bound to a single college."""

    def __init__(self, db: AsyncSession, college_id: uuid.UUID):
        self.db = db
        self.college_id = college_id

    # ─── Select builders ─────────────────────────────────────────────────────

    def events(self) -> Select:
        return select(Event).where(Event.college_id == self.college_id)

    def event_ids(self) -> Select:
        return select(Event.id).where(Event.college_id == self.college_id)

    def students(self) -> Select:
        return select(Student).where(Student.college_id == self.college_id)

    def student_ids(self) -> Select:
        return select(Student.id).where(Student.college_id == self.college_id)

    def registrations(self) -> Select:
        """Registrations for this college's events."""
        return select(Registration).where(Registration.event_id.in_(self.event_ids()))

    def feedback(self) -> Select:
        """Feedback left on this college's events."""
        return select(Feedback).where(Feedback.event_id.in_(self.event_ids()))

    def student_registrations(self) -> Select:
        """Registrations made by this college's students, on any event."""
        return select(Registration).where(Registration.student_id.in_(self.student_ids()))

    def student_feedback(self) -> Select:
        """Feedback written by this college's students, on any event."""
        return select(Feedback).where(Feedback.student_id.in_(self.student_ids()))

    # ─── Execution helpers ───────────────────────────────────────────────────

    async def all(self, query: Select) -> List[Any]:
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count(self, query: Select) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )
        return result.scalar() or 0

    async def get_event(self, event_id: Union[str, uuid.UUID]) -> Event:
        result = await self.db.execute(
            self.events().where(Event.id == parse_id(event_id, "Event not found"))
        )
        event = result.scalar_one_or_none()
        if not event:
            raise NotFoundError("Event not found")
        return event

    async def get_student(self, student_id: Union[str, uuid.UUID]) -> Student:
        result = await self.db.execute(
            self.students().where(Student.id == parse_id(student_id, "Student not found"))
        )
        student = result.scalar_one_or_none()
        if not student:
            raise NotFoundError("Student not found")
        return student
