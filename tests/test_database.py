import pytest
from sqlalchemy import func, select

from app.core.database import flush_unique
from app.core.exceptions import DuplicateError
from app.models.college import College
from app.models.registration import Registration


async def test_flush_unique_turns_constraint_violation_into_duplicate(db, seed):
    college = await seed.college("Lakeside College")
    name = college.name

    db.add(College(name=name, address="Somewhere else"))
    with pytest.raises(DuplicateError) as excinfo:
        await flush_unique(db, "College already exists")

    assert excinfo.value.status_code == 409
    assert excinfo.value.message == "College already exists"

    # The failed insert was rolled back and the session is usable again
    result = await db.execute(select(func.count()).select_from(College).where(College.name == name))
    assert result.scalar() == 1


async def test_flush_unique_on_registration_pair(db, seed):
    college = await seed.college()
    student = await seed.student(college)
    event = await seed.event(college)
    await seed.registration(student, event)
    student_id, event_id = student.id, event.id

    db.add(Registration(student_id=student_id, event_id=event_id, status="registered"))
    with pytest.raises(DuplicateError, match="Already registered"):
        await flush_unique(db, "Already registered for this event")

    result = await db.execute(
        select(func.count()).select_from(Registration).where(Registration.event_id == event_id)
    )
    assert result.scalar() == 1
