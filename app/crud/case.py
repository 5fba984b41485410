from typing import List, Optional, Union, Dict, Any, Tuple
from uuid import UUID
from sqlalchemy import select, delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
import logging
from app.core.database import commit_or_rollback
from app.db.models import Case, CaseBookmark, CaseParty, Hearing
from app.utils.slug import derive_slug

logger = logging.getLogger(__name__)

CASE_CONFLICT_MESSAGE = "Case with this case number already exists"


async def get_case(db: AsyncSession, case_id: Union[UUID, str]) -> Optional[Case]:
    """
    Get a case by ID with court, case type and filer loaded.
    """
    result = await db.execute(
        select(Case)
        .where(Case.id == _as_uuid(case_id))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_case_by_slug(db: AsyncSession, slug: str) -> Optional[Case]:
    result = await db.execute(select(Case).where(Case.slug == slug))
    return result.scalar_one_or_none()


async def get_case_by_number(db: AsyncSession, case_number: str) -> Optional[Case]:
    result = await db.execute(select(Case).where(Case.case_number == case_number.strip().upper()))
    return result.scalar_one_or_none()


def visible_to(user_id: Union[UUID, str]):
    """Restricted cases stay visible only to their filer."""
    return or_(Case.is_public.is_(True), Case.filed_by_id == _as_uuid(user_id))


def _apply_filters(query, filters: Dict[str, Any]):
    if status := filters.get("status"):
        query = query.where(Case.status == status)
    if stage := filters.get("stage"):
        query = query.where(Case.stage == stage)
    if priority := filters.get("priority"):
        query = query.where(Case.priority == priority)
    if court_id := filters.get("court_id"):
        query = query.where(Case.court_id == _as_uuid(court_id))
    if case_type_id := filters.get("case_type_id"):
        query = query.where(Case.case_type_id == _as_uuid(case_type_id))
    if filed_by_id := filters.get("filed_by_id"):
        query = query.where(Case.filed_by_id == _as_uuid(filed_by_id))
    if search := filters.get("search"):
        pattern = f"%{search.lower()}%"
        query = query.where(
            func.lower(Case.title).like(pattern)
            | func.lower(Case.case_number).like(pattern)
            | func.lower(Case.description).like(pattern)
        )
    if "visible_to" in filters:
        query = query.where(visible_to(filters["visible_to"]))
    return query


async def get_cases(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 10,
    filters: Optional[Dict[str, Any]] = None,
) -> Tuple[List[Case], int]:
    """
    Get a page of cases and the total number matching ``filters``.
    """
    filters = filters or {}
    query = _apply_filters(select(Case), filters)
    count_query = _apply_filters(select(func.count(Case.id)), filters)

    total = (await db.execute(count_query)).scalar_one()
    result = await db.execute(query.order_by(Case.filing_date.desc()).offset(skip).limit(limit))
    return list(result.scalars().all()), total


async def create_case(db: AsyncSession, data: Dict[str, Any]) -> Case:
    db_case = Case(**data)
    db_case.slug = derive_slug(db_case.title, db_case.case_number)
    db.add(db_case)
    await commit_or_rollback(db, "Case", CASE_CONFLICT_MESSAGE)
    logger.info(f"Case created: {db_case.case_number}")
    return await get_case(db, db_case.id)


async def save_case(db: AsyncSession, db_case: Case, changes: Optional[Dict[str, Any]] = None) -> Case:
    """
    Persist pending changes on a case read earlier in this session.

    The UPDATE is conditional on the row version that was read, so a
    concurrent writer makes this raise ConcurrentModification.
    """
    for field, value in (changes or {}).items():
        setattr(db_case, field, value)
    if changes and "title" in changes:
        db_case.slug = derive_slug(db_case.title, db_case.case_number)
    await commit_or_rollback(db, "Case", CASE_CONFLICT_MESSAGE)
    return await get_case(db, db_case.id)


async def delete_case(db: AsyncSession, db_case: Case) -> None:
    """
    Delete a case together with its hearings, parties and bookmarks.
    """
    try:
        await db.execute(delete(Hearing).where(Hearing.case_id == db_case.id))
        await db.execute(delete(CaseParty).where(CaseParty.case_id == db_case.id))
        await db.execute(delete(CaseBookmark).where(CaseBookmark.case_id == db_case.id))
        await db.delete(db_case)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Database error in delete_case: {e}")
        raise
    await commit_or_rollback(db, "Case")
    logger.info(f"Case deleted: {db_case.case_number}")


async def count_cases_by_status(db: AsyncSession) -> Dict[str, int]:
    result = await db.execute(select(Case.status, func.count(Case.id)).group_by(Case.status))
    return {status.value: count for status, count in result.all()}


def _as_uuid(value: Union[UUID, str]) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))
