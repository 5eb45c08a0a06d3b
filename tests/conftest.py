import logging
import os
import tempfile
from datetime import datetime, timedelta

# Point the app at a throwaway SQLite database before anything imports settings
_db_dir = tempfile.mkdtemp(prefix="campus_events_tests_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from httpx import ASGITransport, AsyncClient

import app.models  # noqa: F401
from app.core.database import Base, async_session, engine
from app.core.logging import LOGGER_NAME
from app.dependencies import create_access_token, hash_password
from app.main import app as application
from app.models import Admin, College, Event, Feedback, Registration, Student

PASSWORD = "secret123"
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture
async def db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def client(db):
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class Seeder:
    """Creates committed rows for tests."""

    def __init__(self, session):
        self.session = session
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    async def _save(self, obj):
        self.session.add(obj)
        await self.session.commit()
        await self.session.refresh(obj)
        return obj

    async def college(self, name=None):
        n = self._next()
        return await self._save(College(name=name or f"College {n}", address=f"{n} Campus Road"))

    async def admin(self, college=None, role="college_admin"):
        n = self._next()
        return await self._save(
            Admin(
                email=f"admin{n}@example.edu",
                password_hash=PASSWORD_HASH,
                role=role,
                college_id=college.id if college else None,
            )
        )

    async def student(self, college, name=None):
        n = self._next()
        return await self._save(
            Student(
                college_id=college.id,
                name=name or f"Student {n:03d}",
                email=f"student{n}@example.edu",
                password_hash=PASSWORD_HASH,
                student_id=f"STU-{n:04d}",
            )
        )

    async def event(self, college, type="technical", start=None, status="upcoming", **extra):
        n = self._next()
        start = start or datetime.utcnow() + timedelta(days=7)
        return await self._save(
            Event(
                college_id=college.id,
                name=extra.pop("name", f"Event {n}"),
                type=type,
                host="Student Council",
                description="An event for the whole campus.",
                start_time=start,
                end_time=start + timedelta(hours=2),
                location="Main Hall",
                status=status,
                **extra,
            )
        )

    async def registration(self, student, event, status="registered"):
        return await self._save(
            Registration(student_id=student.id, event_id=event.id, status=status)
        )

    async def feedback(self, student, event, rating):
        return await self._save(
            Feedback(student_id=student.id, event_id=event.id, rating=rating)
        )


@pytest.fixture
def seed(db):
    return Seeder(db)


@pytest.fixture
def app_log(caplog):
    """Capture the application logger, which does not propagate to root."""
    app_logger = logging.getLogger(LOGGER_NAME)
    app_logger.addHandler(caplog.handler)
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    yield caplog
    app_logger.removeHandler(caplog.handler)


def admin_headers(admin: Admin) -> dict:
    token = create_access_token(str(admin.id), "admin", admin.role)
    return {"Authorization": f"Bearer {token}"}


def student_headers(student: Student) -> dict:
    token = create_access_token(str(student.id), "student", "student")
    return {"Authorization": f"Bearer {token}"}
