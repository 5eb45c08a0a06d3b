"""JWT authentication, admin identities and college scoping."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Union

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import AuthenticationRequired, AuthorizationError
from app.models.admin import Admin
from app.models.student import Student
from app.services.scope import TenantScope


# ─── Password hashing ───────────────────────────────────────────────────────

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a password against its bcrypt hash."""
    return pwd_context.verify(plain, hashed)


# ─── JWT tokens ──────────────────────────────────────────────────────────────

# Missing tokens are reported as AuthenticationRequired, not FastAPI's default 401
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/admin/login", auto_error=False
)


def create_access_token(
    subject_id: str, kind: str, role: str, expires_delta: Optional[timedelta] = None
) -> str:
    """Create a JWT access token for an admin or a student."""
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.JWT_EXPIRE_MINUTES))
    payload = {
        "sub": subject_id,
        "kind": kind,
        "role": role,
        "exp": expire,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def _decode_subject(token: Optional[str], kind: str) -> uuid.UUID:
    if not token:
        raise AuthenticationRequired("Not authenticated")
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        if payload.get("kind") != kind or payload.get("sub") is None:
            raise AuthenticationRequired()
        return uuid.UUID(payload["sub"])
    except (JWTError, ValueError):
        raise AuthenticationRequired()


# ─── Identities ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SuperAdmin:
    admin_id: uuid.UUID
    email: str


@dataclass(frozen=True)
class CollegeAdmin:
    admin_id: uuid.UUID
    email: str
    college_id: uuid.UUID


Identity = Union[SuperAdmin, CollegeAdmin]


def identity_for(admin: Admin) -> Identity:
    """Build the identity variant for a stored admin."""
    if admin.role == "super_admin":
        return SuperAdmin(admin_id=admin.id, email=admin.email)
    if admin.role == "college_admin" and admin.college_id:
        return CollegeAdmin(admin_id=admin.id, email=admin.email, college_id=admin.college_id)
    raise AuthorizationError("Admin account is not attached to a college")


# ─── Auth dependencies ───────────────────────────────────────────────────────

async def get_current_admin_record(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> Admin:
    """Decode an admin token and load the admin row."""
    admin_id = _decode_subject(token, "admin")
    result = await db.execute(select(Admin).where(Admin.id == admin_id))
    admin = result.scalar_one_or_none()
    if not admin:
        raise AuthenticationRequired()
    return admin


async def get_current_admin(admin: Admin = Depends(get_current_admin_record)) -> Identity:
    return identity_for(admin)


async def get_current_student(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> Student:
    """Decode a student token and load the student row."""
    student_id = _decode_subject(token, "student")
    result = await db.execute(select(Student).where(Student.id == student_id))
    student = result.scalar_one_or_none()
    if not student:
        raise AuthenticationRequired()
    return student


# ─── Role guards ─────────────────────────────────────────────────────────────

async def require_super_admin(identity: Identity = Depends(get_current_admin)) -> SuperAdmin:
    if isinstance(identity, SuperAdmin):
        return identity
    raise AuthorizationError("Requires a super admin account")


async def require_college_admin(identity: Identity = Depends(get_current_admin)) -> CollegeAdmin:
    if isinstance(identity, CollegeAdmin):
        return identity
    if isinstance(identity, SuperAdmin):
        raise AuthorizationError("Requires a college admin account")
    raise AuthenticationRequired()


async def get_tenant_scope(
    identity: CollegeAdmin = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> TenantScope:
    """Queries bound to the calling admin's college."""
    return TenantScope(db, identity.college_id)
