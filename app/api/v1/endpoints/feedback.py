"""Event feedback endpoints."""

import math
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db, flush_unique
from app.core.exceptions import AuthorizationError, DuplicateError, NotFoundError, ValidationError
from app.core.logging import logger
from app.dependencies import get_current_student, get_tenant_scope
from app.models.event import Event
from app.models.feedback import Feedback
from app.models.registration import Registration
from app.models.student import Student
from app.schemas import (
    EventBrief,
    EventFeedbackSummary,
    FeedbackCreate,
    FeedbackPage,
    FeedbackResponse,
    FeedbackUpdate,
)
from app.services.metrics import average
from app.services.scope import TenantScope

router = APIRouter()


async def _own_feedback(db: AsyncSession, feedback_id: UUID, student: Student) -> Feedback:
    result = await db.execute(select(Feedback).where(Feedback.id == feedback_id))
    feedback = result.scalar_one_or_none()
    if not feedback:
        raise NotFoundError("Feedback not found")
    if feedback.student_id != student.id:
        raise AuthorizationError("You can only change your own feedback")
    return feedback


@router.post("/submit", response_model=FeedbackResponse, status_code=201)
async def submit_feedback(
    data: FeedbackCreate,
    student: Student = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    """Rate an event the current student attended."""
    result = await db.execute(select(Event).where(Event.id == data.event_id))
    event = result.scalar_one_or_none()
    if not event:
        raise NotFoundError("Event not found")

    attended = await db.execute(
        select(Registration).where(
            Registration.student_id == student.id,
            Registration.event_id == event.id,
            Registration.status == "attended",
        )
    )
    if not attended.scalar_one_or_none():
        raise ValidationError("You must have attended the event to provide feedback")

    existing = await db.execute(
        select(Feedback).where(
            Feedback.student_id == student.id,
            Feedback.event_id == event.id,
        )
    )
    if existing.scalar_one_or_none():
        raise DuplicateError("Feedback already submitted for this event")

    feedback = Feedback(
        student_id=student.id,
        event_id=event.id,
        rating=data.rating,
        comment=data.comment or None,
    )
    db.add(feedback)
    await flush_unique(db, "Feedback already submitted for this event")
    await db.refresh(feedback)

    logger.info(f"Feedback from {student.email} on '{event.name}': {feedback.rating}/5")
    return feedback


@router.put("/{feedback_id}", response_model=FeedbackResponse)
async def update_feedback(
    feedback_id: UUID,
    data: FeedbackUpdate,
    student: Student = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    """Edit the current student's feedback."""
    feedback = await _own_feedback(db, feedback_id, student)

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in changes.items():
        setattr(feedback, key, value)
    await db.flush()
    await db.refresh(feedback)

    logger.info(
        f"Feedback {feedback.id} updated by {student.email} ({', '.join(changes) or 'no changes'})"
    )
    return feedback


@router.delete("/{feedback_id}")
async def delete_feedback(
    feedback_id: UUID,
    student: Student = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    """Delete the current student's feedback."""
    feedback = await _own_feedback(db, feedback_id, student)
    await db.delete(feedback)

    logger.info(f"Feedback {feedback_id} deleted by {student.email}")
    return {"message": "Feedback deleted successfully"}


@router.get("/event/{event_id}/average", response_model=EventFeedbackSummary)
async def event_feedback_average(event_id: UUID, db: AsyncSession = Depends(get_db)):
    """Average rating and rating distribution for one event (public)."""
    result = await db.execute(select(Event).where(Event.id == event_id))
    event = result.scalar_one_or_none()
    if not event:
        raise NotFoundError("Event not found")

    result = await db.execute(
        select(Feedback)
        .where(Feedback.event_id == event.id)
        .order_by(Feedback.created_at.desc())
    )
    feedbacks = list(result.scalars().all())
    ratings = [f.rating for f in feedbacks]

    return EventFeedbackSummary(
        event=EventBrief.model_validate(event),
        average_rating=average(ratings),
        total_feedbacks=len(feedbacks),
        rating_distribution={star: ratings.count(star) for star in range(5, 0, -1)},
        feedbacks=[FeedbackResponse.model_validate(f) for f in feedbacks],
    )


@router.get("/admin/all", response_model=FeedbackPage)
async def list_college_feedback(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    event_id: UUID = None,
    scope: TenantScope = Depends(get_tenant_scope),
):
    """Feedback on the college's events, newest first."""
    query = scope.feedback()
    if event_id:
        query = query.where(Feedback.event_id == event_id)

    total = await scope.count(query)
    feedbacks = await scope.all(
        query.order_by(Feedback.created_at.desc()).offset((page - 1) * limit).limit(limit)
    )

    return FeedbackPage(
        feedbacks=[FeedbackResponse.model_validate(f) for f in feedbacks],
        total_pages=math.ceil(total / limit),
        current_page=page,
        total=total,
    )
