from collections import Counter
from typing import Optional, List, Any, Dict, Tuple, Union
from uuid import UUID
from sqlalchemy import select, func, cast, String
from sqlalchemy.ext.asyncio import AsyncSession
import logging
from app.core.database import commit_or_rollback
from app.db.models import Advocate

logger = logging.getLogger(__name__)

ADVOCATE_CONFLICT_MESSAGE = "Advocate with this user, bar council ID or license number already exists"


async def get_advocate(db: AsyncSession, advocate_id: Union[UUID, str]) -> Optional[Advocate]:
    result = await db.execute(
        select(Advocate)
        .where(Advocate.id == _as_uuid(advocate_id))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_advocate_by_user(db: AsyncSession, user_id: Union[UUID, str]) -> Optional[Advocate]:
    result = await db.execute(select(Advocate).where(Advocate.user_id == _as_uuid(user_id)))
    return result.scalar_one_or_none()


def _apply_filters(query, is_active=None, specialization=None, min_experience=None):
    if is_active is not None:
        query = query.where(Advocate.is_active.is_(is_active))
    if specialization:
        # Specializations are stored as a JSON list of lowercase strings
        query = query.where(cast(Advocate.specialization, String).like(f'%"{specialization.strip().lower()}"%'))
    if min_experience is not None:
        query = query.where(Advocate.experience >= min_experience)
    return query


async def get_advocates(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 10,
    is_active: Optional[bool] = None,
    specialization: Optional[str] = None,
    min_experience: Optional[int] = None,
) -> Tuple[List[Advocate], int]:
    filters = {"is_active": is_active, "specialization": specialization, "min_experience": min_experience}
    query = _apply_filters(select(Advocate), **filters)
    count_query = _apply_filters(select(func.count(Advocate.id)), **filters)

    total = (await db.execute(count_query)).scalar_one()
    result = await db.execute(
        query.order_by(Advocate.experience.desc(), Advocate.created_at.desc()).offset(skip).limit(limit)
    )
    return list(result.scalars().all()), total


async def create_advocate(db: AsyncSession, data: Dict[str, Any]) -> Advocate:
    db_advocate = Advocate(**data)
    db.add(db_advocate)
    await commit_or_rollback(db, "Advocate", ADVOCATE_CONFLICT_MESSAGE)
    logger.info(f"Advocate created: {db_advocate.bar_council_id}")
    return await get_advocate(db, db_advocate.id)


async def save_advocate(db: AsyncSession, db_advocate: Advocate, changes: Dict[str, Any]) -> Advocate:
    for field, value in changes.items():
        setattr(db_advocate, field, value)
    await commit_or_rollback(db, "Advocate", ADVOCATE_CONFLICT_MESSAGE)
    return await get_advocate(db, db_advocate.id)


async def get_advocate_statistics(db: AsyncSession) -> Dict[str, Any]:
    counts = await db.execute(select(Advocate.is_active, func.count(Advocate.id)).group_by(Advocate.is_active))
    by_state = {bool(active): count for active, count in counts.all()}
    average = await db.scalar(select(func.avg(Advocate.experience)))

    # JSON lists are tallied here rather than unnested in SQL
    specializations = Counter()
    for values in (await db.execute(select(Advocate.specialization))).scalars():
        specializations.update(values or [])

    return {
        "total": sum(by_state.values()),
        "active": by_state.get(True, 0),
        "inactive": by_state.get(False, 0),
        "average_experience": round(float(average or 0), 1),
        "by_specialization": dict(specializations.most_common()),
    }


def _as_uuid(value: Union[UUID, str]) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))
