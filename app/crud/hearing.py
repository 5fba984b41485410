from typing import Any, Dict, Iterable, List, Optional, Union
from uuid import UUID
from datetime import datetime
from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
import logging
from app.core.database import commit_or_rollback
from app.crud.case import visible_to as case_visible_to
from app.db.models import Case, Hearing, HearingStatus

logger = logging.getLogger(__name__)


async def get_hearing(db: AsyncSession, hearing_id: Union[UUID, str]) -> Optional[Hearing]:
    result = await db.execute(
        select(Hearing)
        .where(Hearing.id == _as_uuid(hearing_id))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_case_hearings(db: AsyncSession, case_id: Union[UUID, str]) -> List[Hearing]:
    result = await db.execute(
        select(Hearing)
        .where(Hearing.case_id == _as_uuid(case_id))
        .order_by(Hearing.hearing_date.desc())
    )
    return list(result.scalars().all())


def _scoped(query, court_id=None, visible_to=None):
    # One join on cases serves both the court filter and the visibility rule
    if court_id is None and visible_to is None:
        return query
    query = query.join(Case, Case.id == Hearing.case_id)
    if court_id is not None:
        query = query.where(Case.court_id == _as_uuid(court_id))
    if visible_to is not None:
        query = query.where(case_visible_to(visible_to))
    return query


async def get_upcoming_hearings(
    db: AsyncSession,
    after: datetime,
    judge_id: Optional[Union[UUID, str]] = None,
    court_id: Optional[Union[UUID, str]] = None,
    limit: int = 10,
    visible_to: Optional[Union[UUID, str]] = None,
) -> List[Hearing]:
    """
    Scheduled hearings on or after ``after``, soonest first.
    """
    query = select(Hearing).where(
        Hearing.hearing_date >= after,
        Hearing.status == HearingStatus.scheduled,
    )
    if judge_id:
        query = query.where(Hearing.judge_id == _as_uuid(judge_id))
    query = _scoped(query, court_id=court_id, visible_to=visible_to)
    result = await db.execute(query.order_by(Hearing.hearing_date.asc()).limit(limit))
    return list(result.scalars().all())


async def get_hearings_between(
    db: AsyncSession,
    start: datetime,
    end: datetime,
    statuses: Iterable[HearingStatus],
    judge_id: Optional[Union[UUID, str]] = None,
    visible_to: Optional[Union[UUID, str]] = None,
) -> List[Hearing]:
    """
    Hearings in ``[start, end)`` with one of ``statuses``, in court-time order.
    """
    query = select(Hearing).where(
        Hearing.hearing_date >= start,
        Hearing.hearing_date < end,
        Hearing.status.in_(list(statuses)),
    )
    if judge_id:
        query = query.where(Hearing.judge_id == _as_uuid(judge_id))
    query = _scoped(query, visible_to=visible_to)
    result = await db.execute(query.order_by(Hearing.hearing_time.asc(), Hearing.hearing_date.asc()))
    return list(result.scalars().all())


async def get_judge_hearings(
    db: AsyncSession,
    judge_id: Union[UUID, str],
    visible_to: Optional[Union[UUID, str]] = None,
) -> List[Hearing]:
    query = _scoped(select(Hearing).where(Hearing.judge_id == _as_uuid(judge_id)), visible_to=visible_to)
    result = await db.execute(query.order_by(Hearing.hearing_date.desc()))
    return list(result.scalars().all())


async def get_hearing_statistics(db: AsyncSession, now: datetime) -> Dict[str, Any]:
    by_status = await db.execute(select(Hearing.status, func.count(Hearing.id)).group_by(Hearing.status))
    by_purpose = await db.execute(select(Hearing.purpose, func.count(Hearing.id)).group_by(Hearing.purpose))
    upcoming = await db.scalar(
        select(func.count(Hearing.id)).where(
            Hearing.hearing_date >= now,
            Hearing.status == HearingStatus.scheduled,
        )
    )
    by_status = {status.value: count for status, count in by_status.all()}
    return {
        "total": sum(by_status.values()),
        "upcoming": upcoming or 0,
        "by_status": by_status,
        "by_purpose": {purpose.value: count for purpose, count in by_purpose.all()},
    }


async def create_hearing(db: AsyncSession, data: Dict[str, Any]) -> Hearing:
    """
    Insert a hearing. Changes already made to its case in this session are
    committed in the same transaction.
    """
    db_hearing = Hearing(**data)
    db.add(db_hearing)
    await commit_or_rollback(db, "Hearing")
    logger.info(f"Hearing {db_hearing.hearing_number} created for case {db_hearing.case_id}")
    return await get_hearing(db, db_hearing.id)


async def save_hearing(db: AsyncSession, db_hearing: Hearing, changes: Optional[Dict[str, Any]] = None) -> Hearing:
    """
    Persist a hearing, plus any pending change to its case, in one commit.
    """
    for field, value in (changes or {}).items():
        setattr(db_hearing, field, value)
    await commit_or_rollback(db, "Hearing")
    return await get_hearing(db, db_hearing.id)


async def delete_hearing(db: AsyncSession, db_hearing: Hearing) -> None:
    try:
        await db.execute(delete(Hearing).where(Hearing.id == db_hearing.id))
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Database error in delete_hearing: {e}")
        raise
    await commit_or_rollback(db, "Hearing")
    logger.info(f"Hearing deleted: {db_hearing.id}")


def _as_uuid(value: Union[UUID, str]) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))
