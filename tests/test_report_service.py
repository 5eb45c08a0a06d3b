from datetime import date, datetime, timedelta

import pytest

from app.models.event import EVENT_TYPES
from app.services.report_service import ReportService
from app.services.scope import TenantScope


def reports_for(db, college) -> ReportService:
    return ReportService(TenantScope(db, college.id))


@pytest.fixture
async def campus(seed):
    """A college with one busy event, one empty event and ten students."""
    college = await seed.college("North Campus")
    busy = await seed.event(college, name="Hackathon", start=datetime(2026, 3, 1, 9))
    empty = await seed.event(college, name="Poetry Night", type="cultural", start=datetime(2026, 4, 1, 18))
    students = [await seed.student(college) for _ in range(10)]
    for i, student in enumerate(students):
        await seed.registration(student, busy, "attended" if i < 7 else "registered")
    for student, rating in zip(students, (5, 4, 4)):
        await seed.feedback(student, busy, rating)
    return college, busy, empty, students


async def test_popular_events_ranks_by_registrations(db, campus):
    college, busy, empty, _ = campus

    report = await reports_for(db, college).popular_events(limit=10)

    assert report.total == 2
    first, second = report.events
    assert first.id == busy.id
    assert first.total_registrations == 10
    assert first.attended_count == 7
    assert first.attendance_rate == 70.0
    assert first.average_rating == 4.33
    assert first.feedback_count == 3
    assert second.id == empty.id
    assert second.total_registrations == 0
    assert second.attendance_rate == 0
    assert second.average_rating == 0


async def test_popular_events_ties_keep_newest_first(db, seed):
    college = await seed.college()
    older = await seed.event(college, start=datetime(2026, 1, 10))
    newer = await seed.event(college, start=datetime(2026, 2, 10))

    report = await reports_for(db, college).popular_events()

    assert [row.id for row in report.events] == [newer.id, older.id]


async def test_popular_events_filters_and_limit(db, campus, seed):
    college, busy, empty, _ = campus
    await seed.event(college, type="sports", start=datetime(2026, 3, 20))

    by_type = await reports_for(db, college).popular_events(type="cultural")
    assert [row.id for row in by_type.events] == [empty.id]

    march = await reports_for(db, college).popular_events(
        date_from=date(2026, 3, 1), date_to=date(2026, 3, 31)
    )
    assert march.total == 2
    assert empty.id not in [row.id for row in march.events]

    # date_to covers the whole day
    same_day = await reports_for(db, college).popular_events(date_to=date(2026, 3, 1))
    assert [row.id for row in same_day.events] == [busy.id]

    limited = await reports_for(db, college).popular_events(limit=1)
    assert len(limited.events) == 1
    assert limited.total == 3


async def test_reports_ignore_other_colleges(db, campus, seed):
    college, _, _, _ = campus
    other = await seed.college("South Campus")
    outsider = await seed.student(other)
    foreign = await seed.event(other)
    await seed.registration(outsider, foreign, "attended")

    report = await reports_for(db, college).popular_events()
    assert foreign.id not in [row.id for row in report.events]

    participation = await reports_for(db, college).student_participation(limit=50)
    assert outsider.id not in [row.id for row in participation.students]


async def test_student_participation_sorting(db, seed):
    college = await seed.college()
    alice = await seed.student(college, "Alice")
    bob = await seed.student(college, "Bob")
    cara = await seed.student(college, "Cara")
    events = [await seed.event(college) for _ in range(4)]

    await seed.registration(alice, events[0], "attended")
    await seed.registration(alice, events[1], "attended")
    await seed.feedback(alice, events[0], 5)
    await seed.registration(bob, events[0], "attended")
    for event in events[1:]:
        await seed.registration(bob, event, "absent")

    reports = reports_for(db, college)

    by_attended = await reports.student_participation(sort_by="attended")
    assert [row.name for row in by_attended.students] == ["Alice", "Bob", "Cara"]
    assert by_attended.total == 3

    bob_row = by_attended.students[1]
    assert bob_row.total_events == 4
    assert bob_row.attended_events == 1
    assert bob_row.participation_rate == 25.0

    cara_row = by_attended.students[2]
    assert cara_row.total_events == 0
    assert cara_row.participation_rate == 0

    by_feedback = await reports.student_participation(sort_by="feedback", limit=1)
    assert [row.name for row in by_feedback.students] == ["Alice"]
    assert by_feedback.students[0].feedback_count == 1
    assert by_feedback.total == 3


async def test_top_students_include_average_rating_given(db, seed):
    college = await seed.college()
    students = [await seed.student(college, name) for name in ("Ann", "Ben", "Cal", "Dee")]
    events = [await seed.event(college) for _ in range(3)]

    for event in events:
        await seed.registration(students[1], event, "attended")
    await seed.feedback(students[1], events[0], 5)
    await seed.feedback(students[1], events[1], 2)
    await seed.registration(students[3], events[0], "attended")

    report = await reports_for(db, college).top_students()

    assert report.criteria == "attended"
    assert report.total == 4
    assert [row.name for row in report.top_students] == ["Ben", "Dee", "Ann"]
    assert report.top_students[0].average_rating_given == 3.5
    assert report.top_students[1].average_rating_given == 0


async def test_event_type_analytics_always_has_six_rows(db, seed):
    college = await seed.college()

    report = await reports_for(db, college).event_type_analytics()

    assert [row.type for row in report.analytics] == list(EVENT_TYPES)
    for row in report.analytics:
        assert row.total_events == 0
        assert row.average_attendance_rate == 0
        assert row.average_rating == 0


async def test_event_type_analytics_sums_per_type(db, campus, seed):
    college, busy, _, students = campus
    second = await seed.event(college, type="technical")
    await seed.registration(students[0], second, "absent")
    await seed.registration(students[1], second, "attended")
    await seed.feedback(students[1], second, 1)

    report = await reports_for(db, college).event_type_analytics()
    technical = next(row for row in report.analytics if row.type == "technical")
    cultural = next(row for row in report.analytics if row.type == "cultural")

    assert technical.total_events == 2
    assert technical.total_registrations == 12
    assert technical.total_attended == 8
    assert technical.average_attendance_rate == 66.67
    assert technical.total_feedbacks == 4
    assert technical.average_rating == 3.5
    assert cultural.total_events == 1
    assert cultural.total_registrations == 0


async def test_attendance_trends_calendar_months_oldest_first(db, seed):
    college = await seed.college()
    january = await seed.event(college, start=datetime(2026, 1, 31, 23, 30))
    await seed.event(college, start=datetime(2026, 3, 1, 0, 0))
    await seed.event(college, start=datetime(2025, 12, 15))
    alice = await seed.student(college)
    bob = await seed.student(college)
    await seed.registration(alice, january, "attended")
    await seed.registration(bob, january, "absent")

    report = await reports_for(db, college).attendance_trends(
        months=3, as_of=datetime(2026, 3, 15, 12)
    )

    assert [row.month for row in report.trends] == ["January 2026", "February 2026", "March 2026"]
    jan, feb, mar = report.trends
    assert (jan.total_events, jan.total_registrations, jan.total_attended) == (1, 2, 1)
    assert jan.attendance_rate == 50.0
    assert (feb.total_events, feb.total_registrations, feb.attendance_rate) == (0, 0, 0)
    assert mar.total_events == 1


async def test_attendance_trends_returns_requested_month_count(db, seed):
    college = await seed.college()

    report = await reports_for(db, college).attendance_trends(months=12)

    assert len(report.trends) == 12
    assert report.trends[-1].month == datetime.utcnow().strftime("%B %Y")


async def test_dashboard_stats(db, seed):
    college = await seed.college()
    s1, s2, s3, s4, s5 = [await seed.student(college) for _ in range(5)]
    now = datetime(2026, 6, 1, 12)
    e1 = await seed.event(college, start=now + timedelta(days=3))
    e2 = await seed.event(college, start=now - timedelta(days=3))
    e3 = await seed.event(college, start=now + timedelta(days=5), status="completed")

    for student, event in ((s1, e1), (s1, e2), (s2, e1), (s3, e3), (s4, e2)):
        await seed.registration(student, event, "attended")
    await seed.registration(s5, e1, "registered")
    await seed.registration(s5, e2, "absent")
    await seed.registration(s2, e3, "registered")
    await seed.feedback(s1, e1, 5)
    await seed.feedback(s3, e3, 4)

    stats = await reports_for(db, college).dashboard_stats(now=now)

    assert stats.total_students == 5
    assert stats.total_events == 3
    assert stats.total_registrations == 8
    assert stats.total_feedbacks == 2
    assert stats.active_students == 4
    assert stats.upcoming_events == 1
    assert stats.average_attendance_rate == 62.5
    assert stats.average_rating == 4.5
