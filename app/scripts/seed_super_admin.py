"""Seed the database with the first super_admin account.

Usage:
    source .venv/bin/activate
    python -m app.scripts.seed_super_admin [email] [password]
"""

import asyncio
import sys

from sqlalchemy import select

import app.models  # noqa: F401
from app.core.database import Base, async_session, engine
from app.dependencies import hash_password
from app.models.admin import Admin

DEFAULT_EMAIL = "superadmin@campus-events.local"
DEFAULT_PASSWORD = "admin123"


async def seed(email: str = DEFAULT_EMAIL, password: str = DEFAULT_PASSWORD) -> Admin:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        result = await session.execute(
            select(Admin).where(Admin.role == "super_admin")
        )
        existing = result.scalars().first()

        if existing:
            print(f"Super admin already exists: {existing.email}")
            return existing

        admin = Admin(
            email=email.lower(),
            password_hash=hash_password(password),
            role="super_admin",
        )
        session.add(admin)
        await session.commit()
        await session.refresh(admin)

        print("Super admin created!")
        print(f"  Email: {admin.email}")
        print(f"  Password: {password}")
        print(f"  ID: {admin.id}")
        print("\nLog in at POST /api/v1/auth/admin/login to get a bearer token.")
        return admin


if __name__ == "__main__":
    asyncio.run(seed(*sys.argv[1:3]))
