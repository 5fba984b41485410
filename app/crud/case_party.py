from typing import Optional, List, Any, Dict, Union
from uuid import UUID
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
import logging
from app.core.database import commit_or_rollback
from app.crud.case import visible_to as case_visible_to
from app.db.models import Case, CaseParty, PartyType

logger = logging.getLogger(__name__)


async def get_party(db: AsyncSession, party_id: Union[UUID, str]) -> Optional[CaseParty]:
    result = await db.execute(
        select(CaseParty)
        .where(CaseParty.id == _as_uuid(party_id))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_case_parties(
    db: AsyncSession,
    case_id: Union[UUID, str],
    party_type: Optional[PartyType] = None,
    include_inactive: bool = False,
) -> List[CaseParty]:
    query = select(CaseParty).where(CaseParty.case_id == _as_uuid(case_id))
    if not include_inactive:
        query = query.where(CaseParty.is_active.is_(True))
    if party_type:
        query = query.where(CaseParty.party_type == party_type)
    result = await db.execute(query.order_by(CaseParty.party_type, CaseParty.created_at))
    return list(result.scalars().all())


async def get_advocate_parties(
    db: AsyncSession,
    advocate_id: Union[UUID, str],
    visible_to: Optional[Union[UUID, str]] = None,
) -> List[CaseParty]:
    """
    Active parties represented by an advocate, newest first.
    """
    query = select(CaseParty).where(
        CaseParty.advocate_id == _as_uuid(advocate_id),
        CaseParty.is_active.is_(True),
    )
    if visible_to is not None:
        query = query.join(Case, Case.id == CaseParty.case_id).where(case_visible_to(visible_to))
    result = await db.execute(query.order_by(CaseParty.created_at.desc()))
    return list(result.scalars().all())


async def create_party(db: AsyncSession, data: Dict[str, Any]) -> CaseParty:
    db_party = CaseParty(**data)
    db.add(db_party)
    await commit_or_rollback(db, "Case party")
    logger.info(f"Party {db_party.name} added to case {db_party.case_id}")
    return await get_party(db, db_party.id)


async def save_party(db: AsyncSession, db_party: CaseParty, changes: Dict[str, Any]) -> CaseParty:
    for field, value in changes.items():
        setattr(db_party, field, value)
    await commit_or_rollback(db, "Case party")
    return await get_party(db, db_party.id)


async def get_party_statistics(db: AsyncSession) -> Dict[str, Any]:
    result = await db.execute(
        select(CaseParty.party_type, func.count(CaseParty.id))
        .where(CaseParty.is_active.is_(True))
        .group_by(CaseParty.party_type)
    )
    by_type = {party_type.value: count for party_type, count in result.all()}
    represented = await db.scalar(
        select(func.count(CaseParty.id)).where(
            CaseParty.is_active.is_(True),
            CaseParty.advocate_id.is_not(None),
        )
    )
    return {
        "total": sum(by_type.values()),
        "represented": represented or 0,
        "by_type": by_type,
    }


def _as_uuid(value: Union[UUID, str]) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))
