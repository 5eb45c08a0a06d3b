"""Super admin endpoints for managing colleges and admin accounts."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db, flush_unique
from app.core.exceptions import ConflictError, DuplicateError, NotFoundError, ValidationError
from app.core.logging import logger
from app.dependencies import SuperAdmin, require_super_admin
from app.models.admin import Admin
from app.models.college import College
from app.models.event import Event
from app.models.student import Student
from app.schemas import AdminResponse, CollegeCreate, CollegeDetail, CollegeResponse

router = APIRouter()


# ─── Colleges ────────────────────────────────────────────────────────────────

@router.post("/colleges", response_model=CollegeResponse, status_code=201)
async def create_college(
    data: CollegeCreate,
    identity: SuperAdmin = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create a new college."""
    existing = await db.execute(select(College).where(College.name == data.name))
    if existing.scalar_one_or_none():
        raise DuplicateError("College already exists")

    college = College(**data.model_dump())
    db.add(college)
    await flush_unique(db, "College already exists")
    await db.refresh(college)

    logger.info(f"College created by {identity.email}: {college.name}")
    return college


@router.get("/colleges", response_model=List[CollegeResponse])
async def list_colleges(
    identity: SuperAdmin = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """List all colleges."""
    result = await db.execute(select(College).order_by(College.name))
    return result.scalars().all()


@router.get("/colleges/{college_id}", response_model=CollegeDetail)
async def get_college(
    college_id: UUID,
    identity: SuperAdmin = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """A college together with its college admin, if one has been created."""
    result = await db.execute(select(College).where(College.id == college_id))
    college = result.scalar_one_or_none()
    if not college:
        raise NotFoundError("College not found")

    result = await db.execute(
        select(Admin)
        .where(Admin.college_id == college_id, Admin.role == "college_admin")
        .order_by(Admin.created_at)
    )
    admin = result.scalars().first()

    return CollegeDetail(
        college=CollegeResponse.model_validate(college),
        admin=AdminResponse.model_validate(admin) if admin else None,
    )


@router.delete("/colleges/{college_id}")
async def delete_college(
    college_id: UUID,
    identity: SuperAdmin = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete a college that no longer owns admins, students or events."""
    result = await db.execute(select(College).where(College.id == college_id))
    college = result.scalar_one_or_none()
    if not college:
        raise NotFoundError("College not found")

    for model, label in ((Admin, "admins"), (Student, "students"), (Event, "events")):
        count = await db.execute(
            select(func.count()).select_from(model).where(model.college_id == college_id)
        )
        if count.scalar():
            raise ConflictError(
                f"Cannot delete college '{college.name}' while it has {label}. Remove them first."
            )

    await db.delete(college)
    logger.info(f"College deleted by {identity.email}: {college.name}")
    return {"message": f"College '{college.name}' deleted"}


# ─── Admins ──────────────────────────────────────────────────────────────────

@router.get("/admins", response_model=List[AdminResponse])
async def list_admins(
    college_id: UUID = None,
    identity: SuperAdmin = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """List admins, optionally filtered by college."""
    query = select(Admin)
    if college_id:
        query = query.where(Admin.college_id == college_id)
    query = query.order_by(Admin.created_at.desc())

    result = await db.execute(query)
    return result.scalars().all()


@router.delete("/admins/{admin_id}")
async def delete_admin(
    admin_id: UUID,
    identity: SuperAdmin = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete an admin account."""
    if admin_id == identity.admin_id:
        raise ValidationError("Cannot delete yourself")

    result = await db.execute(select(Admin).where(Admin.id == admin_id))
    admin = result.scalar_one_or_none()
    if not admin:
        raise NotFoundError("Admin not found")

    await db.delete(admin)
    logger.info(f"Admin deleted by {identity.email}: {admin.email}")
    return {"message": f"Admin '{admin.email}' deleted"}
