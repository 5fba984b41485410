from typing import List, Any, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.auth import get_current_user, require_roles
from app.core.database import get_db
from app.core.errors import NotFound
from app.core.permissions import MANAGE_COURTS_ROLES
from app.crud import court as court_crud
from app.db.models import CourtType
from app.schemas.court import Court, CourtCreate, CourtUpdate
from app.schemas.user import CurrentUser

router = APIRouter()


@router.get("/", response_model=List[Court])
async def read_courts(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
    type: Optional[CourtType] = Query(None, description="Filter by court type"),
    state: Optional[str] = Query(None, description="Filter by state"),
) -> Any:
    return await court_crud.get_courts(db, skip=skip, limit=limit, court_type=type, state=state)


@router.get("/slug/{slug}", response_model=Court)
async def read_court_by_slug(
    slug: str,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Any:
    court = await court_crud.get_court_by_slug(db, slug)
    if court is None:
        raise NotFound("Court")
    return court


@router.get("/{court_id}", response_model=Court)
async def read_court(
    court_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Any:
    court = await court_crud.get_court(db, court_id)
    if court is None:
        raise NotFound("Court")
    return court


@router.post("/", response_model=Court, status_code=status.HTTP_201_CREATED)
async def create_court(
    *,
    db: AsyncSession = Depends(get_db),
    court_in: CourtCreate,
    current_user: CurrentUser = Depends(require_roles(MANAGE_COURTS_ROLES)),
) -> Any:
    """
    Create a court. Admin only; the slug is derived from name and code.
    """
    return await court_crud.create_court(db, court_in.model_dump())


@router.patch("/{court_id}", response_model=Court)
async def update_court(
    court_id: UUID,
    court_in: CourtUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(MANAGE_COURTS_ROLES)),
) -> Any:
    court = await court_crud.get_court(db, court_id)
    if court is None:
        raise NotFound("Court")
    return await court_crud.save_court(db, court, court_in.model_dump(exclude_unset=True))


@router.delete("/{court_id}", response_model=Court)
async def deactivate_court(
    court_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(MANAGE_COURTS_ROLES)),
) -> Any:
    """
    Deactivate a court. Courts are kept because cases reference them.
    """
    court = await court_crud.get_court(db, court_id)
    if court is None:
        raise NotFound("Court")
    return await court_crud.save_court(db, court, {"is_active": False})
