from typing import List, Any
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.auth import get_current_user, require_roles
from app.core.database import get_db
from app.core.permissions import STATISTICS_VIEWERS
from app.schemas.bookmark import Bookmark, BookmarkCheck, BookmarkCreate, BookmarkUpdate
from app.schemas.user import CurrentUser
from app.services.bookmark_service import bookmark_service

router = APIRouter()


@router.post("/", response_model=Bookmark, status_code=status.HTTP_201_CREATED)
async def add_bookmark(
    *,
    db: AsyncSession = Depends(get_db),
    bookmark_in: BookmarkCreate,
    current_user: CurrentUser = Depends(get_current_user),
) -> Any:
    return await bookmark_service.add_bookmark(db, bookmark_in, current_user)


@router.get("/my-bookmarks", response_model=List[Bookmark])
async def my_bookmarks(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    upcoming_only: bool = Query(False, description="Only cases with a hearing ahead"),
) -> Any:
    return await bookmark_service.my_bookmarks(
        db, current_user, skip=skip, limit=limit, upcoming_only=upcoming_only
    )


@router.get("/my-statistics")
async def my_bookmark_statistics(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Any:
    return await bookmark_service.my_statistics(db, current_user)


@router.get("/statistics")
async def bookmark_statistics(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(STATISTICS_VIEWERS)),
) -> Any:
    return await bookmark_service.statistics(db)


@router.get("/check/{case_id}", response_model=BookmarkCheck)
async def check_bookmark(
    case_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Any:
    return await bookmark_service.check(db, case_id, current_user)


@router.delete("/case/{case_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_case_bookmark(
    case_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> None:
    await bookmark_service.remove_case_bookmark(db, case_id, current_user)


@router.get("/{bookmark_id}", response_model=Bookmark)
async def get_bookmark(
    bookmark_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Any:
    return await bookmark_service.get_bookmark(db, bookmark_id, current_user)


@router.patch("/{bookmark_id}", response_model=Bookmark)
async def update_bookmark(
    bookmark_id: UUID,
    bookmark_in: BookmarkUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Any:
    return await bookmark_service.update_bookmark(db, bookmark_id, bookmark_in, current_user)


@router.delete("/{bookmark_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_bookmark(
    bookmark_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> None:
    await bookmark_service.remove_bookmark(db, bookmark_id, current_user)
