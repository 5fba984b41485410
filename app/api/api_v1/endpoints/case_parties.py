from typing import List, Any, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging
from app.core.auth import get_current_user, require_roles
from app.core.database import get_db
from app.core.permissions import MANAGE_PARTIES_ROLES, REMOVE_PARTY_ROLES, STATISTICS_VIEWERS
from app.db.models import PartyType
from app.schemas.case_party import CaseParty, CasePartyCreate, CasePartyUpdate
from app.schemas.user import CurrentUser
from app.services.case_party_service import case_party_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=CaseParty, status_code=status.HTTP_201_CREATED)
async def add_case_party(
    *,
    db: AsyncSession = Depends(get_db),
    party_in: CasePartyCreate,
    current_user: CurrentUser = Depends(require_roles(MANAGE_PARTIES_ROLES)),
) -> Any:
    """
    Add a party to a case. A representing advocate must be active.
    """
    party = await case_party_service.add_party(db, party_in)
    logger.info(f"Party {party.id} added to case {party.case_id} by user {current_user.id}")
    return party


@router.get("/statistics")
async def party_statistics(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(STATISTICS_VIEWERS)),
) -> Any:
    return await case_party_service.statistics(db)


@router.get("/case/{case_id}", response_model=List[CaseParty])
async def get_case_parties(
    case_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    party_type: Optional[PartyType] = Query(None),
    include_inactive: bool = Query(False),
) -> Any:
    return await case_party_service.list_case_parties(
        db, case_id, current_user, party_type=party_type, include_inactive=include_inactive
    )


@router.get("/{party_id}", response_model=CaseParty)
async def get_case_party(
    party_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Any:
    return await case_party_service.get_party(db, party_id, current_user)


@router.patch("/{party_id}", response_model=CaseParty)
async def update_case_party(
    party_id: UUID,
    party_in: CasePartyUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(MANAGE_PARTIES_ROLES)),
) -> Any:
    return await case_party_service.update_party(db, party_id, party_in)


@router.delete("/{party_id}", response_model=CaseParty)
async def remove_case_party(
    party_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(REMOVE_PARTY_ROLES)),
) -> Any:
    """
    Deactivate a party. It stays on record and drops out of default listings.
    """
    return await case_party_service.remove_party(db, party_id)
