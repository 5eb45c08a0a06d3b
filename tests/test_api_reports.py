from datetime import datetime

from conftest import admin_headers

API = "/api/v1"


async def test_reports_require_a_token(client):
    response = await client.get(f"{API}/reports/dashboard_stats")

    assert response.status_code == 401
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Authentication required"


async def test_reports_reject_a_bad_token(client):
    response = await client.get(
        f"{API}/reports/dashboard_stats", headers={"Authorization": "Bearer nonsense"}
    )

    assert response.status_code == 401


async def test_super_admin_has_no_college_reports(client, seed):
    super_admin = await seed.admin(role="super_admin")

    response = await client.get(
        f"{API}/reports/popular_events", headers=admin_headers(super_admin)
    )

    assert response.status_code == 403


async def test_popular_events_response_shape(client, seed):
    college = await seed.college()
    admin = await seed.admin(college)
    busy = await seed.event(college, start=datetime(2026, 2, 1))
    await seed.event(college, start=datetime(2026, 3, 1))
    students = [await seed.student(college) for _ in range(10)]
    for i, student in enumerate(students):
        await seed.registration(student, busy, "attended" if i < 7 else "registered")

    response = await client.get(
        f"{API}/reports/popular_events", params={"limit": 10}, headers=admin_headers(admin)
    )

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    top, quiet = body["events"]
    # Event fields sit next to the counters; the portal reads row.name directly
    assert "event" not in top
    assert top["id"] == str(busy.id)
    assert top["name"] == busy.name
    assert top["start_time"].startswith("2026-02-01")
    assert top["totalRegistrations"] == 10
    assert top["attendedCount"] == 7
    assert top["attendanceRate"] == 70.0
    assert quiet["attendanceRate"] == 0
    assert quiet["averageRating"] == 0


async def test_popular_events_rejects_unknown_type(client, seed):
    admin = await seed.admin(await seed.college())

    response = await client.get(
        f"{API}/reports/popular_events", params={"type": "gaming"}, headers=admin_headers(admin)
    )

    assert response.status_code == 422


async def test_popular_events_rejects_inverted_dates(client, seed):
    admin = await seed.admin(await seed.college())

    response = await client.get(
        f"{API}/reports/popular_events",
        params={"date_from": "2026-05-01", "date_to": "2026-04-01"},
        headers=admin_headers(admin),
    )

    assert response.status_code == 400


async def test_top_students_defaults_to_three(client, seed):
    college = await seed.college()
    admin = await seed.admin(college)
    for _ in range(5):
        await seed.student(college)

    response = await client.get(f"{API}/reports/top_students", headers=admin_headers(admin))

    assert response.status_code == 200
    body = response.json()
    assert len(body["topStudents"]) == 3
    assert body["total"] == 5
    assert body["criteria"] == "attended"
    first = body["topStudents"][0]
    assert set(first) == {
        "id",
        "name",
        "email",
        "student_id",
        "totalEvents",
        "attendedEvents",
        "participationRate",
        "feedbackCount",
        "averageRatingGiven",
    }


async def test_student_participation_sort_by(client, seed):
    college = await seed.college()
    admin = await seed.admin(college)
    await seed.student(college)

    ok = await client.get(
        f"{API}/reports/student_participation",
        params={"sort_by": "feedback"},
        headers=admin_headers(admin),
    )
    bad = await client.get(
        f"{API}/reports/student_participation",
        params={"sort_by": "height"},
        headers=admin_headers(admin),
    )

    assert ok.status_code == 200
    assert ok.json()["students"][0]["participationRate"] == 0
    assert bad.status_code == 422


async def test_event_type_analytics_endpoint(client, seed):
    admin = await seed.admin(await seed.college())

    response = await client.get(
        f"{API}/reports/event_type_analytics", headers=admin_headers(admin)
    )

    assert response.status_code == 200
    analytics = response.json()["analytics"]
    assert len(analytics) == 6
    assert analytics[0] == {
        "type": "academic",
        "totalEvents": 0,
        "totalRegistrations": 0,
        "totalAttended": 0,
        "averageAttendanceRate": 0,
        "totalFeedbacks": 0,
        "averageRating": 0,
    }


async def test_attendance_trends_endpoint(client, seed):
    admin = await seed.admin(await seed.college())

    default = await client.get(f"{API}/reports/attendance_trends", headers=admin_headers(admin))
    yearly = await client.get(
        f"{API}/reports/attendance_trends", params={"months": 12}, headers=admin_headers(admin)
    )

    assert len(default.json()["trends"]) == 6
    assert len(yearly.json()["trends"]) == 12


async def test_dashboard_stats_endpoint(client, seed):
    college = await seed.college()
    admin = await seed.admin(college)
    student = await seed.student(college)
    event = await seed.event(college)
    await seed.registration(student, event, "attended")

    response = await client.get(f"{API}/reports/dashboard_stats", headers=admin_headers(admin))

    assert response.status_code == 200
    assert response.json() == {
        "totalStudents": 1,
        "totalEvents": 1,
        "totalRegistrations": 1,
        "totalFeedbacks": 0,
        "activeStudents": 1,
        "upcomingEvents": 1,
        "averageAttendanceRate": 100.0,
        "averageRating": 0,
    }
