from typing import Optional, List, Any, Dict, Union
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
import logging
from app.core.errors import Conflict
from app.db.models import Court, CourtType
from app.utils.slug import derive_slug

logger = logging.getLogger(__name__)


async def get_court(db: AsyncSession, court_id: Union[UUID, str]) -> Optional[Court]:
    result = await db.execute(select(Court).where(Court.id == _as_uuid(court_id)))
    return result.scalar_one_or_none()


async def get_court_by_slug(db: AsyncSession, slug: str) -> Optional[Court]:
    result = await db.execute(select(Court).where(Court.slug == slug))
    return result.scalar_one_or_none()


async def get_courts(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 100,
    court_type: Optional[CourtType] = None,
    state: Optional[str] = None,
    include_inactive: bool = False,
) -> List[Court]:
    query = select(Court)
    if not include_inactive:
        query = query.where(Court.is_active.is_(True))
    if court_type:
        query = query.where(Court.type == court_type)
    if state:
        query = query.where(Court.state == state)
    result = await db.execute(query.order_by(Court.name).offset(skip).limit(limit))
    return list(result.scalars().all())


async def create_court(db: AsyncSession, data: Dict[str, Any]) -> Court:
    try:
        db_court = Court(**data)
        db_court.slug = derive_slug(db_court.name, db_court.code)
        db.add(db_court)
        await db.commit()
        await db.refresh(db_court)
        logger.info(f"Court created: {db_court.code}")
        return db_court
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Duplicate court rejected: {e.orig}")
        raise Conflict("Court with this name or code already exists")
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Database error in create_court: {e}")
        raise


async def save_court(db: AsyncSession, db_court: Court, changes: Dict[str, Any]) -> Court:
    try:
        for field, value in changes.items():
            setattr(db_court, field, value)
        if "name" in changes:
            db_court.slug = derive_slug(db_court.name, db_court.code)
        await db.commit()
        await db.refresh(db_court)
        return db_court
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Duplicate court data rejected for {db_court.id}: {e.orig}")
        raise Conflict("Court with this name or code already exists")
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Database error in save_court: {e}")
        raise


def _as_uuid(value: Union[UUID, str]) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))
