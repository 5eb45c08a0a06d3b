"""Login and account creation for admins and students.

Logout is client-side: the portal and the student app drop their token.
"""

from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db, flush_unique
from app.core.exceptions import AuthenticationRequired, DuplicateError, ValidationError
from app.core.logging import logger
from app.dependencies import (
    CollegeAdmin,
    SuperAdmin,
    create_access_token,
    get_current_admin_record,
    get_current_student,
    hash_password,
    require_college_admin,
    require_super_admin,
    verify_password,
)
from app.models.admin import Admin
from app.models.college import College
from app.models.student import Student
from app.schemas import (
    AdminCreate,
    AdminResponse,
    AdminTokenResponse,
    LoginRequest,
    StudentCreate,
    StudentResponse,
    StudentTokenResponse,
)

router = APIRouter()


@router.post("/admin/login", response_model=AdminTokenResponse)
async def admin_login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Login as an admin and receive a JWT token."""
    result = await db.execute(select(Admin).where(Admin.email == data.email.lower()))
    admin = result.scalar_one_or_none()

    if not admin or not verify_password(data.password, admin.password_hash):
        raise AuthenticationRequired("Invalid email or password")

    admin.last_login = datetime.utcnow()
    await db.flush()

    token = create_access_token(str(admin.id), "admin", admin.role)
    logger.info(f"Admin logged in: {admin.email}")

    return AdminTokenResponse(access_token=token, admin=AdminResponse.model_validate(admin))


@router.post("/student/login", response_model=StudentTokenResponse)
async def student_login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Login as a student and receive a JWT token."""
    result = await db.execute(select(Student).where(Student.email == data.email.lower()))
    student = result.scalar_one_or_none()

    if not student or not verify_password(data.password, student.password_hash):
        raise AuthenticationRequired("Invalid email or password")

    token = create_access_token(str(student.id), "student", "student")
    logger.info(f"Student logged in: {student.email}")

    return StudentTokenResponse(
        access_token=token, student=StudentResponse.model_validate(student)
    )


@router.get("/admin/me", response_model=AdminResponse)
async def get_admin_me(admin: Admin = Depends(get_current_admin_record)):
    """Get the current admin profile."""
    return admin


@router.get("/student/me", response_model=StudentResponse)
async def get_student_me(student: Student = Depends(get_current_student)):
    """Get the current student profile."""
    return student


@router.post("/admin/create", response_model=AdminResponse, status_code=201)
async def create_admin(
    data: AdminCreate,
    identity: SuperAdmin = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create an admin (super_admin only). College admins need an existing college."""
    if data.role == "college_admin":
        if not data.college_id:
            raise ValidationError("college_id is required for a college admin")
        college = await db.execute(select(College).where(College.id == data.college_id))
        if not college.scalar_one_or_none():
            raise ValidationError("College not found")

    email = data.email.lower()
    existing = await db.execute(select(Admin).where(Admin.email == email))
    if existing.scalar_one_or_none():
        raise DuplicateError("Admin already exists")

    admin = Admin(
        email=email,
        password_hash=hash_password(data.password),
        role=data.role,
        college_id=data.college_id if data.role == "college_admin" else None,
    )
    db.add(admin)
    await flush_unique(db, "Admin already exists")
    await db.refresh(admin)

    logger.info(f"Admin created by {identity.email}: {admin.email} ({admin.role})")
    return admin


@router.post("/student/create", response_model=StudentResponse, status_code=201)
async def create_student(
    data: StudentCreate,
    identity: CollegeAdmin = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create a student in the calling admin's college."""
    email = data.email.lower()
    existing = await db.execute(
        select(Student).where(
            (Student.email == email) | (Student.student_id == data.student_id)
        )
    )
    if existing.scalars().first():
        raise DuplicateError("Student already exists")

    student = Student(
        college_id=identity.college_id,
        name=data.name,
        email=email,
        password_hash=hash_password(data.password),
        student_id=data.student_id,
    )
    db.add(student)
    await flush_unique(db, "Student already exists")
    await db.refresh(student)

    logger.info(f"Student created by {identity.email}: {student.email} ({student.student_id})")
    return student
