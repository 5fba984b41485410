from typing import List, Any, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging
from app.core.auth import get_current_user, require_roles
from app.core.database import get_db
from app.core.errors import InvalidRequest, NotFound
from app.core.permissions import MANAGE_USERS_ROLES, STATISTICS_VIEWERS, ensure_owner_or_roles
from app.crud import user as user_crud
from app.db.models import UserRole
from app.schemas.user import CurrentUser, User, UserCreate, UserRoleUpdate, UserUpdate
from app.services import auth_service

logger = logging.getLogger(__name__)
router = APIRouter()


async def _load_user(db: AsyncSession, user_id: UUID):
    user = await user_crud.get_user(db, user_id)
    if user is None:
        raise NotFound("User")
    return user


@router.get("/", response_model=List[User])
async def read_users(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(MANAGE_USERS_ROLES)),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
    role: Optional[UserRole] = Query(None, description="Filter by role"),
    search: Optional[str] = Query(None, description="Match username, name or email"),
) -> Any:
    """
    Retrieve users. Admin only.
    """
    return await user_crud.get_users(db, skip=skip, limit=limit, role=role, search=search)


@router.post("/", response_model=User, status_code=status.HTTP_201_CREATED)
async def create_user(
    *,
    db: AsyncSession = Depends(get_db),
    user_in: UserCreate,
    current_user: CurrentUser = Depends(require_roles(MANAGE_USERS_ROLES)),
) -> Any:
    """
    Create a user with any role. Admin only.
    """
    user = await auth_service.create_user(db, user_in)
    logger.info(f"User {user.id} created by admin {current_user.id}")
    return user


@router.get("/statistics")
async def user_statistics(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(STATISTICS_VIEWERS)),
) -> Any:
    by_role = await user_crud.count_users_by_role(db)
    return {"total": sum(by_role.values()), "by_role": by_role}


@router.get("/{user_id}", response_model=User)
async def read_user_by_id(
    user_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Get a specific user by id; users may read themselves, admins anyone.
    """
    ensure_owner_or_roles(current_user, user_id, MANAGE_USERS_ROLES)
    return await _load_user(db, user_id)


@router.patch("/{user_id}", response_model=User)
async def update_user(
    user_id: UUID,
    user_in: UserUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Any:
    ensure_owner_or_roles(current_user, user_id, MANAGE_USERS_ROLES)
    user = await _load_user(db, user_id)
    return await user_crud.save_user(db, user, user_in.model_dump(exclude_unset=True))


@router.patch("/{user_id}/role", response_model=User)
async def update_user_role(
    user_id: UUID,
    role_in: UserRoleUpdate,
    current_user: CurrentUser = Depends(require_roles(MANAGE_USERS_ROLES)),
    db: AsyncSession = Depends(get_db),
) -> Any:
    user = await _load_user(db, user_id)
    changes = {"role": role_in.role}
    if role_in.bar_council_id:
        changes["bar_council_id"] = role_in.bar_council_id
    if role_in.role == UserRole.lawyer and not (role_in.bar_council_id or user.bar_council_id):
        raise InvalidRequest("Bar Council ID is required for lawyers")
    user = await user_crud.save_user(db, user, changes)
    logger.info(f"User {user.id} role set to {user.role.value} by admin {current_user.id}")
    return user


@router.patch("/{user_id}/verify", response_model=User)
async def verify_user(
    user_id: UUID,
    current_user: CurrentUser = Depends(require_roles(MANAGE_USERS_ROLES)),
    db: AsyncSession = Depends(get_db),
) -> Any:
    user = await _load_user(db, user_id)
    return await user_crud.save_user(db, user, {"is_verified": True})
