from typing import List, Any, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging
from app.core.auth import get_current_user, require_roles
from app.core.database import get_db
from app.core.permissions import MANAGE_ADVOCATES_ROLES, STATISTICS_VIEWERS
from app.schemas.advocate import Advocate, AdvocateCreate, AdvocateList, AdvocateUpdate
from app.schemas.case_party import CaseParty
from app.schemas.user import CurrentUser
from app.services.advocate_service import advocate_service
from app.services.case_party_service import case_party_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=Advocate, status_code=status.HTTP_201_CREATED)
async def create_advocate(
    *,
    db: AsyncSession = Depends(get_db),
    advocate_in: AdvocateCreate,
    current_user: CurrentUser = Depends(require_roles(MANAGE_ADVOCATES_ROLES)),
) -> Any:
    """
    Create the advocate profile of a lawyer account. Admin only.
    """
    advocate = await advocate_service.create_advocate(db, advocate_in)
    logger.info(f"Advocate {advocate.bar_council_id} created by user {current_user.id}")
    return advocate


@router.get("/", response_model=AdvocateList)
async def get_advocates(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    is_active: Optional[bool] = Query(True, description="Filter by active state"),
    specialization: Optional[str] = Query(None),
    min_experience: Optional[int] = Query(None, ge=0),
) -> Any:
    """
    Retrieve advocates, most experienced first.
    """
    advocates, pagination = await advocate_service.list_advocates(
        db,
        page=page,
        limit=limit,
        is_active=is_active,
        specialization=specialization,
        min_experience=min_experience,
    )
    return {"advocates": advocates, "pagination": pagination}


@router.get("/statistics")
async def advocate_statistics(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(STATISTICS_VIEWERS)),
) -> Any:
    return await advocate_service.statistics(db)


@router.get("/user/{user_id}", response_model=Advocate)
async def get_advocate_by_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Any:
    return await advocate_service.get_advocate_by_user(db, user_id)


@router.get("/{advocate_id}", response_model=Advocate)
async def get_advocate(
    advocate_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Any:
    return await advocate_service.get_advocate(db, advocate_id)


@router.get("/{advocate_id}/parties", response_model=List[CaseParty])
async def get_advocate_parties(
    advocate_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Any:
    """
    Active parties this advocate represents, limited to cases the requester may read.
    """
    return await case_party_service.list_advocate_parties(db, advocate_id, current_user)


@router.patch("/{advocate_id}", response_model=Advocate)
async def update_advocate(
    advocate_id: UUID,
    advocate_in: AdvocateUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(MANAGE_ADVOCATES_ROLES)),
) -> Any:
    return await advocate_service.update_advocate(db, advocate_id, advocate_in)


@router.delete("/{advocate_id}", response_model=Advocate)
async def deactivate_advocate(
    advocate_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(MANAGE_ADVOCATES_ROLES)),
) -> Any:
    """
    Deactivate an advocate. The profile is kept; PATCH ``is_active`` restores it.
    """
    return await advocate_service.deactivate_advocate(db, advocate_id)
