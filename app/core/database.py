from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.exc import OperationalError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.pool import StaticPool
from app.core.config import settings
from app.core.errors import Conflict, ConcurrentModification
import logging
from typing import AsyncGenerator, Optional

logger = logging.getLogger(__name__)


def build_async_url(db_url: str) -> str:
    """
    Convert plain PostgreSQL URLs to their asyncpg form.
    """
    if db_url.startswith('postgresql://'):
        return db_url.replace('postgresql://', 'postgresql+asyncpg://', 1)
    if db_url.startswith('postgres://'):
        return db_url.replace('postgres://', 'postgresql+asyncpg://', 1)
    return db_url


def _engine_options(db_url: str) -> dict:
    if db_url.startswith('sqlite'):
        options = {"connect_args": {"check_same_thread": False}}
        if db_url.rstrip('/').endswith(':') or ':memory:' in db_url:
            # Single shared connection so in-memory databases survive across sessions
            options["poolclass"] = StaticPool
        return options
    return {
        "pool_pre_ping": True,  # Verify connections before using them
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "connect_args": {
            "command_timeout": settings.DB_COMMAND_TIMEOUT,
        },
    }


try:
    db_url = build_async_url(settings.DATABASE_URL)
    logger.info(f"Using async database driver: {db_url.split(':', 1)[0]}")

    engine = create_async_engine(
        db_url,
        echo=settings.SQL_ECHO,
        future=True,
        **_engine_options(db_url),
    )

    AsyncSessionLocal = sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,  # Don't expire objects after commit
        autocommit=False,
        autoflush=False
    )
except OperationalError as e:
    logger.error(f"Failed to connect to database: {e}")
    raise

Base = declarative_base()


# Dependency to use in FastAPI endpoints
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides an async database session.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def initialize_db(create_tables: bool = False):
    """
    Verify the database is reachable; optionally create missing tables.
    """
    # Import models so they register on Base.metadata
    import app.db.models  # noqa: F401

    async with engine.begin() as conn:
        if create_tables:
            await conn.run_sync(Base.metadata.create_all)
    logger.info("Database connection initialized successfully")
    return True


async def close_db_connection():
    """
    Close database connection pool.
    """
    await engine.dispose()
    logger.info("Database connection pool closed")


async def commit_or_rollback(db: AsyncSession, resource: str, conflict_message: Optional[str] = None) -> None:
    """
    Commit the unit of work, rolling back on any database error.

    A versioned row updated by someone else since it was read surfaces as
    ConcurrentModification; a unique constraint violation as Conflict.
    """
    try:
        await db.commit()
    except StaleDataError as e:
        await db.rollback()
        logger.warning(f"Stale {resource} write rejected: {e}")
        raise ConcurrentModification(resource)
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"{resource} write violates a constraint: {e.orig}")
        raise Conflict(conflict_message or f"{resource} conflicts with an existing record")
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Database error while saving {resource}: {e}")
        raise
