from typing import Any, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging
from app.core.auth import get_current_user, require_roles
from app.core.database import get_db
from app.core.permissions import CHANGE_CASE_STATUS_ROLES, CREATE_CASE_ROLES, DELETE_CASE_ROLES, STATISTICS_VIEWERS
from app.crud import case as case_crud
from app.db.models import CasePriority, CaseStage, CaseStatus
from app.schemas.case import CaseCreate, CaseList, CaseResponse, CaseStatusUpdate, CaseUpdate
from app.schemas.user import CurrentUser
from app.services.case_service import case_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=CaseResponse, status_code=status.HTTP_201_CREATED)
async def create_case(
    *,
    db: AsyncSession = Depends(get_db),
    case_in: CaseCreate,
    current_user: CurrentUser = Depends(require_roles(CREATE_CASE_ROLES)),
) -> Any:
    """
    Register a new case.

    Requires admin, judge or clerk role. The filer defaults to the requester.
    """
    new_case = await case_service.create_case(db, case_in, current_user)
    logger.info(f"Case {new_case.case_number} created by user {current_user.id}")
    return new_case


@router.get("/", response_model=CaseList)
async def get_cases(
    *,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[CaseStatus] = Query(None, description="Filter by case status"),
    stage: Optional[CaseStage] = Query(None, description="Filter by case stage"),
    priority: Optional[CasePriority] = Query(None),
    court_id: Optional[UUID] = Query(None),
    case_type_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None, description="Match title, number or description"),
) -> Any:
    """
    Retrieve cases with filtering and pagination.

    Users with the public role only see public cases and their own.
    """
    filters = {
        "status": status,
        "stage": stage,
        "priority": priority,
        "court_id": court_id,
        "case_type_id": case_type_id,
        "search": search,
    }
    cases, pagination = await case_service.list_cases(db, current_user, page=page, limit=limit, filters=filters)
    return {"cases": cases, "pagination": pagination}


@router.get("/my-cases", response_model=CaseList)
async def get_my_cases(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> Any:
    cases, pagination = await case_service.list_cases(
        db, current_user, page=page, limit=limit, filters={"filed_by_id": current_user.id}
    )
    return {"cases": cases, "pagination": pagination}


@router.get("/statistics")
async def case_statistics(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(STATISTICS_VIEWERS)),
) -> Any:
    """
    Case counts by status. Admins and judges only.
    """
    by_status = await case_crud.count_cases_by_status(db)
    return {"total": sum(by_status.values()), "by_status": by_status}


@router.get("/slug/{slug}", response_model=CaseResponse)
async def get_case_by_slug(
    slug: str,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Any:
    return await case_service.get_case_by_slug(db, slug, current_user)


@router.get("/number/{case_number}", response_model=CaseResponse)
async def get_case_by_number(
    case_number: str,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Any:
    return await case_service.get_case_by_number(db, case_number, current_user)


@router.get("/{case_id}", response_model=CaseResponse)
async def get_case(
    case_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Any:
    return await case_service.get_case(db, case_id, current_user)


@router.patch("/{case_id}", response_model=CaseResponse)
async def update_case(
    case_id: UUID,
    case_in: CaseUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Any:
    """
    Edit case metadata. Allowed for the filer and for admins, judges and clerks.
    """
    return await case_service.update_case(db, case_id, case_in, current_user)


@router.patch("/{case_id}/status", response_model=CaseResponse)
async def update_case_status(
    case_id: UUID,
    status_in: CaseStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(CHANGE_CASE_STATUS_ROLES)),
) -> Any:
    """
    Advance the case status and/or stage.
    """
    updated = await case_service.change_status(db, case_id, status_in)
    logger.info(f"Case {updated.case_number} now {updated.status.value}/{updated.stage.value} (by {current_user.id})")
    return updated


@router.delete("/{case_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_case(
    case_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(DELETE_CASE_ROLES)),
) -> None:
    await case_service.delete_case(db, case_id)
