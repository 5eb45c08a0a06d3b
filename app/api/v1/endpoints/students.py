"""Student roster and self-registration endpoints."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.database import get_db, flush_unique
from app.core.exceptions import DuplicateError, NotFoundError, ValidationError
from app.core.logging import logger
from app.dependencies import get_current_student, get_tenant_scope, hash_password, verify_password
from app.models.event import Event
from app.models.feedback import Feedback
from app.models.registration import Registration
from app.models.student import Student
from app.schemas import (
    EventResponse,
    MyEventResponse,
    PasswordChange,
    RegisterEventRequest,
    RegistrationResponse,
    StudentProfileResponse,
    StudentProfileUpdate,
    StudentResponse,
)
from app.services.scope import TenantScope

router = APIRouter()


async def find_registration(
    db: AsyncSession, student_id: UUID, event_id: UUID
) -> Optional[Registration]:
    result = await db.execute(
        select(Registration).where(
            Registration.student_id == student_id,
            Registration.event_id == event_id,
        )
    )
    return result.scalar_one_or_none()


@router.get("/", response_model=List[StudentResponse])
async def list_students(scope: TenantScope = Depends(get_tenant_scope)):
    """List the college's students by name."""
    return await scope.all(scope.students().order_by(Student.name))


@router.get("/me/events", response_model=List[MyEventResponse])
async def my_events(
    student: Student = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    """Events the current student registered for, newest first."""
    result = await db.execute(
        select(Registration)
        .where(Registration.student_id == student.id)
        .options(selectinload(Registration.event))
    )
    registrations = list(result.scalars().all())
    registrations.sort(key=lambda r: r.event.start_time, reverse=True)

    rated = await db.execute(
        select(Feedback.event_id).where(Feedback.student_id == student.id)
    )
    rated_events = set(rated.scalars().all())

    return [
        MyEventResponse(
            id=r.id,
            status=r.status,
            registered_at=r.registered_at,
            event=EventResponse.model_validate(r.event),
            has_feedback=r.event_id in rated_events,
        )
        for r in registrations
    ]


@router.post("/register-event", response_model=RegistrationResponse, status_code=201)
async def register_for_event(
    data: RegisterEventRequest,
    student: Student = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    """Register the current student for an upcoming event."""
    result = await db.execute(select(Event).where(Event.id == data.event_id))
    event = result.scalar_one_or_none()
    if not event:
        raise NotFoundError("Event not found")

    if event.status != "upcoming":
        raise ValidationError("Event is not available for registration")

    if await find_registration(db, student.id, event.id):
        raise DuplicateError("Already registered for this event")

    if event.max_participants:
        count = await db.execute(
            select(func.count()).select_from(Registration).where(Registration.event_id == event.id)
        )
        if (count.scalar() or 0) >= event.max_participants:
            raise ValidationError("Event is full")

    registration = Registration(student_id=student.id, event_id=event.id, status="registered")
    db.add(registration)
    await flush_unique(db, "Already registered for this event")
    await db.refresh(registration)

    logger.info(f"Student {student.email} registered for '{event.name}'")
    return registration


@router.delete("/unregister-event/{event_id}")
async def unregister_from_event(
    event_id: UUID,
    student: Student = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    """Withdraw the current student's registration."""
    registration = await find_registration(db, student.id, event_id)
    if not registration:
        raise NotFoundError("Registration not found")

    await db.delete(registration)
    logger.info(f"Student {student.email} unregistered from event {event_id}")
    return {"message": "Successfully unregistered from event"}


@router.put("/profile", response_model=StudentProfileResponse)
async def update_profile(
    data: StudentProfileUpdate,
    student: Student = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    """Change the current student's name and/or email."""
    changes = {}
    if data.name:
        changes["name"] = data.name
    if data.email:
        email = data.email.lower()
        taken = await db.execute(
            select(Student).where(Student.email == email, Student.id != student.id)
        )
        if taken.scalar_one_or_none():
            raise DuplicateError("Email already in use")
        changes["email"] = email

    for key, value in changes.items():
        setattr(student, key, value)
    await flush_unique(db, "Email already in use")
    await db.refresh(student)

    logger.info(f"Student {student.student_id} updated profile ({', '.join(changes) or 'no changes'})")
    return StudentProfileResponse(
        message="Profile updated successfully",
        student=StudentResponse.model_validate(student),
    )


@router.put("/change-password")
async def change_password(
    data: PasswordChange,
    student: Student = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    """Replace the current student's password after checking the old one."""
    if not verify_password(data.current_password, student.password_hash):
        raise ValidationError("Current password is incorrect")

    student.password_hash = hash_password(data.new_password)
    await db.flush()

    logger.info(f"Student {student.email} changed password")
    return {"message": "Password changed successfully"}
