"""Async SQLAlchemy database setup."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from app.core.config import settings
from app.core.exceptions import DuplicateError

# Hosted Postgres providers hand out postgresql:// URLs, asyncpg needs postgresql+asyncpg://
db_url = settings.DATABASE_URL
if db_url.startswith("postgresql://"):
    db_url = db_url.replace("postgresql://", "postgresql+asyncpg://", 1)
db_url = db_url.replace("sslmode=require", "ssl=require")

engine = create_async_engine(
    db_url,
    echo=settings.SQL_ECHO,
    pool_pre_ping=True,
)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


async def get_db():
    """Dependency that provides an async database session."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def flush_unique(db: AsyncSession, message: str) -> None:
    """Flush pending inserts, turning a unique-key violation into DuplicateError.

    The session is rolled back on violation, so callers must not reuse
    objects added before the failed flush.
    """
    try:
        await db.flush()
    except IntegrityError as exc:
        await db.rollback()
        raise DuplicateError(message) from exc
