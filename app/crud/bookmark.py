from typing import Optional, List, Any, Dict, Union
from uuid import UUID
from datetime import datetime
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
import logging
from app.core.database import commit_or_rollback
from app.crud.case import visible_to as case_visible_to
from app.db.models import Case, CaseBookmark

logger = logging.getLogger(__name__)

BOOKMARK_CONFLICT_MESSAGE = "Case already bookmarked"


async def get_bookmark(db: AsyncSession, bookmark_id: Union[UUID, str]) -> Optional[CaseBookmark]:
    result = await db.execute(
        select(CaseBookmark)
        .where(CaseBookmark.id == _as_uuid(bookmark_id))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_bookmark_for(
    db: AsyncSession, user_id: Union[UUID, str], case_id: Union[UUID, str]
) -> Optional[CaseBookmark]:
    result = await db.execute(
        select(CaseBookmark).where(
            CaseBookmark.user_id == _as_uuid(user_id),
            CaseBookmark.case_id == _as_uuid(case_id),
        )
    )
    return result.scalar_one_or_none()


async def get_user_bookmarks(
    db: AsyncSession,
    user_id: Union[UUID, str],
    skip: int = 0,
    limit: int = 50,
    upcoming_after: Optional[datetime] = None,
    visible_to: Optional[Union[UUID, str]] = None,
) -> List[CaseBookmark]:
    """
    A user's bookmarks, newest first.

    ``upcoming_after`` keeps only cases with a next hearing at or after it.
    """
    query = (
        select(CaseBookmark)
        .join(Case, Case.id == CaseBookmark.case_id)
        .where(CaseBookmark.user_id == _as_uuid(user_id))
    )
    if upcoming_after is not None:
        query = query.where(Case.next_hearing_date >= upcoming_after)
    if visible_to is not None:
        query = query.where(case_visible_to(visible_to))
    result = await db.execute(query.order_by(CaseBookmark.created_at.desc()).offset(skip).limit(limit))
    return list(result.scalars().all())


async def create_bookmark(db: AsyncSession, data: Dict[str, Any]) -> CaseBookmark:
    db_bookmark = CaseBookmark(**data)
    db.add(db_bookmark)
    await commit_or_rollback(db, "Bookmark", BOOKMARK_CONFLICT_MESSAGE)
    return await get_bookmark(db, db_bookmark.id)


async def save_bookmark(db: AsyncSession, db_bookmark: CaseBookmark, changes: Dict[str, Any]) -> CaseBookmark:
    for field, value in changes.items():
        setattr(db_bookmark, field, value)
    await commit_or_rollback(db, "Bookmark", BOOKMARK_CONFLICT_MESSAGE)
    return await get_bookmark(db, db_bookmark.id)


async def delete_bookmark(db: AsyncSession, db_bookmark: CaseBookmark) -> None:
    await db.delete(db_bookmark)
    await commit_or_rollback(db, "Bookmark")


async def get_user_bookmark_statistics(db: AsyncSession, user_id: Union[UUID, str], now: datetime) -> Dict[str, int]:
    owned = CaseBookmark.user_id == _as_uuid(user_id)
    total = await db.scalar(select(func.count(CaseBookmark.id)).where(owned))
    upcoming = await db.scalar(
        select(func.count(CaseBookmark.id))
        .join(Case, Case.id == CaseBookmark.case_id)
        .where(owned, Case.next_hearing_date >= now)
    )
    return {"total": total or 0, "with_upcoming_hearing": upcoming or 0}


async def get_bookmark_statistics(db: AsyncSession) -> Dict[str, int]:
    result = await db.execute(
        select(
            func.count(CaseBookmark.id),
            func.count(func.distinct(CaseBookmark.user_id)),
            func.count(func.distinct(CaseBookmark.case_id)),
        )
    )
    total, users, cases = result.one()
    return {"total": total, "unique_users": users, "unique_cases": cases}


def _as_uuid(value: Union[UUID, str]) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))
