"""Per-college report builders (popular events, participation, trends, dashboard).

Registrations and feedback are loaded once per report and folded in memory
rather than queried per event. Reports are not snapshot-isolated: writes that
land while a report is being built may be partially reflected.
"""

import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional

from app.models.event import EVENT_TYPES, Event
from app.models.feedback import Feedback
from app.models.registration import Registration
from app.models.student import Student
from app.schemas import (
    AttendanceTrends,
    DashboardStats,
    EventResponse,
    EventStats,
    EventTypeAnalytics,
    EventTypeStats,
    MonthlyAttendance,
    PopularEventsReport,
    StudentBrief,
    StudentParticipationReport,
    StudentStats,
    TopStudentStats,
    TopStudentsReport,
)
from app.services.metrics import average, percentage
from app.services.scope import TenantScope

# Ranking key per sort_by/criteria value
STUDENT_SORT_KEYS = {
    "attended": lambda row: row.attended_events,
    "participation": lambda row: row.participation_rate,
    "feedback": lambda row: row.feedback_count,
}


@dataclass
class Tally:
    """Running totals for one event, one student, or a group of events."""

    registrations: int = 0
    attended: int = 0
    ratings: List[int] = field(default_factory=list)

    def add(self, other: "Tally") -> None:
        self.registrations += other.registrations
        self.attended += other.attended
        self.ratings.extend(other.ratings)

    @property
    def attendance_rate(self) -> float:
        return percentage(self.attended, self.registrations)

    @property
    def average_rating(self) -> float:
        return average(self.ratings)


def month_start(anchor: datetime, months_back: int) -> datetime:
    """First instant of the calendar month ``months_back`` months before ``anchor``."""
    index = anchor.year * 12 + (anchor.month - 1) - months_back
    return datetime(index // 12, index % 12 + 1, 1)


class ReportService:
    """Read-only statistics over one college's events, registrations and feedback."""

    def __init__(self, scope: TenantScope):
        self.scope = scope

    # ─── Tallies ─────────────────────────────────────────────────────────────

    async def _event_tallies(self, events: Iterable[Event]) -> Dict[uuid.UUID, Tally]:
        tallies = {event.id: Tally() for event in events}
        if not tallies:
            return tallies

        ids = list(tallies)
        registrations = await self.scope.all(
            self.scope.registrations().where(Registration.event_id.in_(ids))
        )
        for registration in registrations:
            tally = tallies[registration.event_id]
            tally.registrations += 1
            if registration.status == "attended":
                tally.attended += 1

        feedbacks = await self.scope.all(
            self.scope.feedback().where(Feedback.event_id.in_(ids))
        )
        for feedback in feedbacks:
            tallies[feedback.event_id].ratings.append(feedback.rating)

        return tallies

    async def _student_rows(self) -> List[tuple]:
        """(student, tally) pairs for every student of the college, in name order."""
        students = await self.scope.all(self.scope.students().order_by(Student.name))
        tallies: Dict[uuid.UUID, Tally] = defaultdict(Tally)

        for registration in await self.scope.all(self.scope.student_registrations()):
            tally = tallies[registration.student_id]
            tally.registrations += 1
            if registration.status == "attended":
                tally.attended += 1

        for feedback in await self.scope.all(self.scope.student_feedback()):
            tallies[feedback.student_id].ratings.append(feedback.rating)

        return [(student, tallies[student.id]) for student in students]

    # ─── Reports ─────────────────────────────────────────────────────────────

    async def popular_events(
        self,
        type: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 10,
    ) -> PopularEventsReport:
        """Events ranked by registration count.

        Ties keep start_time-descending order (the sort is stable).
        ``date_to`` includes the whole day.
        """
        query = self.scope.events()
        if type:
            query = query.where(Event.type == type)
        if date_from:
            query = query.where(Event.start_time >= datetime.combine(date_from, time.min))
        if date_to:
            query = query.where(
                Event.start_time < datetime.combine(date_to + timedelta(days=1), time.min)
            )
        events = await self.scope.all(query.order_by(Event.start_time.desc()))
        tallies = await self._event_tallies(events)

        rows = [
            EventStats(
                **EventResponse.model_validate(event).model_dump(),
                total_registrations=tallies[event.id].registrations,
                attended_count=tallies[event.id].attended,
                attendance_rate=tallies[event.id].attendance_rate,
                average_rating=tallies[event.id].average_rating,
                feedback_count=len(tallies[event.id].ratings),
            )
            for event in events
        ]
        rows.sort(key=lambda row: row.total_registrations, reverse=True)

        return PopularEventsReport(events=rows[:limit], total=len(rows))

    async def student_participation(
        self, limit: int = 10, sort_by: str = "attended"
    ) -> StudentParticipationReport:
        rows = [
            StudentStats(
                **StudentBrief.model_validate(student).model_dump(),
                total_events=tally.registrations,
                attended_events=tally.attended,
                participation_rate=tally.attendance_rate,
                feedback_count=len(tally.ratings),
            )
            for student, tally in await self._student_rows()
        ]
        rows.sort(key=STUDENT_SORT_KEYS[sort_by], reverse=True)

        return StudentParticipationReport(students=rows[:limit], total=len(rows))

    async def top_students(self, limit: int = 3, criteria: str = "attended") -> TopStudentsReport:
        """Flat ranking; the first three are what the portal shows as the podium."""
        rows = [
            TopStudentStats(
                **StudentBrief.model_validate(student).model_dump(),
                total_events=tally.registrations,
                attended_events=tally.attended,
                participation_rate=tally.attendance_rate,
                feedback_count=len(tally.ratings),
                average_rating_given=tally.average_rating,
            )
            for student, tally in await self._student_rows()
        ]
        rows.sort(key=STUDENT_SORT_KEYS[criteria], reverse=True)

        return TopStudentsReport(top_students=rows[:limit], criteria=criteria, total=len(rows))

    async def event_type_analytics(self) -> EventTypeAnalytics:
        """One row per event type, zero-filled when the college has none of that type."""
        events = await self.scope.all(self.scope.events())
        tallies = await self._event_tallies(events)

        by_type = {event_type: Tally() for event_type in EVENT_TYPES}
        event_counts = {event_type: 0 for event_type in EVENT_TYPES}
        for event in events:
            by_type[event.type].add(tallies[event.id])
            event_counts[event.type] += 1

        return EventTypeAnalytics(
            analytics=[
                EventTypeStats(
                    type=event_type,
                    total_events=event_counts[event_type],
                    total_registrations=by_type[event_type].registrations,
                    total_attended=by_type[event_type].attended,
                    average_attendance_rate=by_type[event_type].attendance_rate,
                    total_feedbacks=len(by_type[event_type].ratings),
                    average_rating=by_type[event_type].average_rating,
                )
                for event_type in EVENT_TYPES
            ]
        )

    async def attendance_trends(
        self, months: int = 6, as_of: Optional[datetime] = None
    ) -> AttendanceTrends:
        """Monthly attendance for the last ``months`` calendar months, oldest first.

        The month containing ``as_of`` (default: now, UTC) is the last entry.
        """
        as_of = as_of or datetime.utcnow()
        trends = []

        for months_back in range(months - 1, -1, -1):
            start = month_start(as_of, months_back)
            end = month_start(as_of, months_back - 1)
            events = await self.scope.all(
                self.scope.events().where(Event.start_time >= start, Event.start_time < end)
            )

            total = Tally()
            for tally in (await self._event_tallies(events)).values():
                total.add(tally)

            trends.append(
                MonthlyAttendance(
                    month=start.strftime("%B %Y"),
                    total_events=len(events),
                    total_registrations=total.registrations,
                    total_attended=total.attended,
                    attendance_rate=total.attendance_rate,
                )
            )

        return AttendanceTrends(trends=trends)

    async def dashboard_stats(self, now: Optional[datetime] = None) -> DashboardStats:
        now = now or datetime.utcnow()

        registrations = await self.scope.all(self.scope.registrations())
        feedbacks = await self.scope.all(self.scope.feedback())
        attended = [r for r in registrations if r.status == "attended"]

        upcoming = await self.scope.count(
            self.scope.events().where(Event.status == "upcoming", Event.start_time > now)
        )

        return DashboardStats(
            total_students=await self.scope.count(self.scope.students()),
            total_events=await self.scope.count(self.scope.events()),
            total_registrations=len(registrations),
            total_feedbacks=len(feedbacks),
            active_students=len({r.student_id for r in attended}),
            upcoming_events=upcoming,
            average_attendance_rate=percentage(len(attended), len(registrations)),
            average_rating=average(f.rating for f in feedbacks),
        )
