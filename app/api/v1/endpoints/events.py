"""Event management endpoints."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import NotFoundError, ValidationError
from app.core.logging import logger
from app.dependencies import CollegeAdmin, get_tenant_scope, require_college_admin
from app.models.event import Event
from app.schemas import EventCreate, EventResponse, EventStatus, EventType, EventUpdate
from app.services.scope import TenantScope

router = APIRouter()


@router.post("/", response_model=EventResponse, status_code=201)
async def create_event(
    data: EventCreate,
    identity: CollegeAdmin = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create an event in the calling admin's college."""
    event = Event(college_id=identity.college_id, status="upcoming", **data.model_dump())
    db.add(event)
    await db.flush()
    await db.refresh(event)

    logger.info(f"Event created by {identity.email}: {event.name} ({event.type})")
    return event


@router.get("/", response_model=List[EventResponse])
async def list_events(
    type: Optional[EventType] = Query(None, description="Filter by event type"),
    status: Optional[EventStatus] = Query(None, description="Filter by event status"),
    scope: TenantScope = Depends(get_tenant_scope),
):
    """List the college's events, newest first."""
    query = scope.events()
    if type:
        query = query.where(Event.type == type)
    if status:
        query = query.where(Event.status == status)
    return await scope.all(query.order_by(Event.start_time.desc()))


@router.get("/public", response_model=List[EventResponse])
async def list_public_events(
    college_id: UUID = None,
    type: Optional[EventType] = Query(None, description="Filter by event type"),
    db: AsyncSession = Depends(get_db),
):
    """List upcoming events open for registration (public)."""
    query = select(Event).where(Event.status == "upcoming")
    if college_id:
        query = query.where(Event.college_id == college_id)
    if type:
        query = query.where(Event.type == type)
    query = query.order_by(Event.start_time)

    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(event_id: UUID, db: AsyncSession = Depends(get_db)):
    """Get a single event by ID (public)."""
    result = await db.execute(select(Event).where(Event.id == event_id))
    event = result.scalar_one_or_none()
    if not event:
        raise NotFoundError("Event not found")
    return event


@router.put("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: UUID,
    data: EventUpdate,
    identity: CollegeAdmin = Depends(require_college_admin),
    scope: TenantScope = Depends(get_tenant_scope),
):
    """Update an event owned by the calling admin's college."""
    event = await scope.get_event(event_id)
    # poster_url and max_participants may be cleared with null, other fields may not
    changes = {
        key: value
        for key, value in data.model_dump(exclude_unset=True).items()
        if value is not None or key in ("poster_url", "max_participants")
    }

    start_time = changes.get("start_time", event.start_time)
    end_time = changes.get("end_time", event.end_time)
    if end_time <= start_time:
        raise ValidationError("End time must be after start time")

    for key, value in changes.items():
        setattr(event, key, value)
    await scope.db.flush()
    await scope.db.refresh(event)

    logger.info(f"Event updated by {identity.email}: {event.name} ({', '.join(changes) or 'no changes'})")
    return event


@router.post("/{event_id}/cancel", response_model=EventResponse)
async def cancel_event(
    event_id: UUID,
    identity: CollegeAdmin = Depends(require_college_admin),
    scope: TenantScope = Depends(get_tenant_scope),
):
    """Cancel an event. Registrations are kept."""
    event = await scope.get_event(event_id)
    event.status = "cancelled"
    await scope.db.flush()
    await scope.db.refresh(event)

    logger.info(f"Event cancelled by {identity.email}: {event.name}")
    return event
