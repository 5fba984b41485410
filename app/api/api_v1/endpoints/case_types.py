from typing import List, Any, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.auth import get_current_user, require_roles
from app.core.database import get_db
from app.core.errors import NotFound
from app.core.permissions import MANAGE_COURTS_ROLES
from app.crud import case_type as case_type_crud
from app.db.models import CaseCategory
from app.schemas.case_type import CaseType, CaseTypeCreate, CaseTypeUpdate
from app.schemas.user import CurrentUser

router = APIRouter()


async def _load_case_type(db: AsyncSession, case_type_id: UUID):
    case_type = await case_type_crud.get_case_type(db, case_type_id)
    if case_type is None:
        raise NotFound("Case type")
    return case_type


@router.get("/", response_model=List[CaseType])
async def read_case_types(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
    category: Optional[CaseCategory] = Query(None),
) -> Any:
    return await case_type_crud.get_case_types(db, skip=skip, limit=limit, category=category)


@router.get("/slug/{slug}", response_model=CaseType)
async def read_case_type_by_slug(
    slug: str,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Any:
    case_type = await case_type_crud.get_case_type_by_slug(db, slug)
    if case_type is None:
        raise NotFound("Case type")
    return case_type


@router.get("/{case_type_id}", response_model=CaseType)
async def read_case_type(
    case_type_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Any:
    return await _load_case_type(db, case_type_id)


@router.post("/", response_model=CaseType, status_code=status.HTTP_201_CREATED)
async def create_case_type(
    *,
    db: AsyncSession = Depends(get_db),
    case_type_in: CaseTypeCreate,
    current_user: CurrentUser = Depends(require_roles(MANAGE_COURTS_ROLES)),
) -> Any:
    return await case_type_crud.create_case_type(db, case_type_in.model_dump())


@router.patch("/{case_type_id}", response_model=CaseType)
async def update_case_type(
    case_type_id: UUID,
    case_type_in: CaseTypeUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(MANAGE_COURTS_ROLES)),
) -> Any:
    case_type = await _load_case_type(db, case_type_id)
    return await case_type_crud.save_case_type(db, case_type, case_type_in.model_dump(exclude_unset=True))


@router.delete("/{case_type_id}", response_model=CaseType)
async def deactivate_case_type(
    case_type_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(MANAGE_COURTS_ROLES)),
) -> Any:
    case_type = await _load_case_type(db, case_type_id)
    return await case_type_crud.save_case_type(db, case_type, {"is_active": False})
