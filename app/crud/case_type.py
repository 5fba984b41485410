from typing import Optional, List, Any, Dict, Union
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
import logging
from app.core.errors import Conflict
from app.db.models import CaseType, CaseCategory
from app.utils.slug import derive_slug

logger = logging.getLogger(__name__)


async def get_case_type(db: AsyncSession, case_type_id: Union[UUID, str]) -> Optional[CaseType]:
    result = await db.execute(select(CaseType).where(CaseType.id == _as_uuid(case_type_id)))
    return result.scalar_one_or_none()


async def get_case_type_by_slug(db: AsyncSession, slug: str) -> Optional[CaseType]:
    result = await db.execute(select(CaseType).where(CaseType.slug == slug))
    return result.scalar_one_or_none()


async def get_case_types(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 100,
    category: Optional[CaseCategory] = None,
    include_inactive: bool = False,
) -> List[CaseType]:
    query = select(CaseType)
    if not include_inactive:
        query = query.where(CaseType.is_active.is_(True))
    if category:
        query = query.where(CaseType.category == category)
    result = await db.execute(query.order_by(CaseType.name).offset(skip).limit(limit))
    return list(result.scalars().all())


async def create_case_type(db: AsyncSession, data: Dict[str, Any]) -> CaseType:
    try:
        db_case_type = CaseType(**data)
        db_case_type.slug = derive_slug(db_case_type.name, db_case_type.code)
        db.add(db_case_type)
        await db.commit()
        await db.refresh(db_case_type)
        logger.info(f"Case type created: {db_case_type.code}")
        return db_case_type
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Duplicate case type rejected: {e.orig}")
        raise Conflict("Case type with this name or code already exists")
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Database error in create_case_type: {e}")
        raise


async def save_case_type(db: AsyncSession, db_case_type: CaseType, changes: Dict[str, Any]) -> CaseType:
    try:
        for field, value in changes.items():
            setattr(db_case_type, field, value)
        if "name" in changes:
            db_case_type.slug = derive_slug(db_case_type.name, db_case_type.code)
        await db.commit()
        await db.refresh(db_case_type)
        return db_case_type
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Duplicate case type data rejected for {db_case_type.id}: {e.orig}")
        raise Conflict("Case type with this name or code already exists")
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Database error in save_case_type: {e}")
        raise


def _as_uuid(value: Union[UUID, str]) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))
