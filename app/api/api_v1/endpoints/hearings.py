from typing import List, Any, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.auth import get_current_user, require_roles
from app.core.database import get_db
from app.core.permissions import (
    CHANGE_HEARING_STATUS_ROLES,
    DELETE_HEARING_ROLES,
    SCHEDULE_HEARING_ROLES,
    STATISTICS_VIEWERS,
)
from app.schemas.hearing import HearingCreate, HearingResponse, HearingStatusUpdate, HearingUpdate
from app.schemas.user import CurrentUser
from app.services.hearing_service import hearing_service

router = APIRouter()


@router.post("/", response_model=HearingResponse, status_code=status.HTTP_201_CREATED)
async def create_hearing(
    *,
    db: AsyncSession = Depends(get_db),
    hearing_in: HearingCreate,
    current_user: CurrentUser = Depends(require_roles(SCHEDULE_HEARING_ROLES)),
) -> Any:
    """
    Schedule a hearing. The assigned judge must hold the judge role.
    """
    return await hearing_service.create_hearing(db, hearing_in)


@router.get("/upcoming", response_model=List[HearingResponse])
async def upcoming_hearings(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    judge_id: Optional[UUID] = Query(None),
    court_id: Optional[UUID] = Query(None),
    limit: int = Query(10, ge=1, le=100),
) -> Any:
    return await hearing_service.upcoming_hearings(
        db, current_user, judge_id=judge_id, court_id=court_id, limit=limit
    )


@router.get("/today", response_model=List[HearingResponse])
async def todays_hearings(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    judge_id: Optional[UUID] = Query(None),
) -> Any:
    """
    Today's cause list: scheduled or ongoing hearings, ordered by time.
    """
    return await hearing_service.todays_hearings(db, current_user, judge_id=judge_id)


@router.get("/statistics")
async def hearing_statistics(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(STATISTICS_VIEWERS)),
) -> Any:
    return await hearing_service.statistics(db)


@router.get("/judge/{judge_id}", response_model=List[HearingResponse])
async def judge_hearings(
    judge_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Any:
    return await hearing_service.judge_hearings(db, judge_id, current_user)


@router.get("/case/{case_id}", response_model=List[HearingResponse])
async def case_hearings(
    case_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Any:
    return await hearing_service.list_case_hearings(db, case_id, current_user)


@router.get("/{hearing_id}", response_model=HearingResponse)
async def get_hearing(
    hearing_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Any:
    return await hearing_service.get_hearing(db, hearing_id, current_user)


@router.patch("/{hearing_id}", response_model=HearingResponse)
async def update_hearing(
    hearing_id: UUID,
    hearing_in: HearingUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(SCHEDULE_HEARING_ROLES)),
) -> Any:
    return await hearing_service.update_hearing(db, hearing_id, hearing_in)


@router.patch("/{hearing_id}/status", response_model=HearingResponse)
async def update_hearing_status(
    hearing_id: UUID,
    status_in: HearingStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(CHANGE_HEARING_STATUS_ROLES)),
) -> Any:
    """
    Move a hearing through its lifecycle. Adjourning requires a reason.
    """
    return await hearing_service.change_status(db, hearing_id, status_in)


@router.delete("/{hearing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_hearing(
    hearing_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(DELETE_HEARING_ROLES)),
) -> None:
    await hearing_service.delete_hearing(db, hearing_id)
