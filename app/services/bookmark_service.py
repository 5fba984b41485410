from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union
from uuid import UUID
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFound
from app.crud import bookmark as bookmark_crud
from app.crud import case as case_crud
from app.db.models import CaseBookmark
from app.schemas.bookmark import BookmarkCreate, BookmarkUpdate
from app.schemas.user import CurrentUser
from app.services.case_service import case_service, restricted_viewer

logger = logging.getLogger(__name__)


class BookmarkService:
    """Per-user case bookmarks."""

    async def _own_bookmark(
        self, db: AsyncSession, bookmark_id: Union[UUID, str], requester: CurrentUser
    ) -> CaseBookmark:
        # Another user's bookmark is reported as missing
        db_bookmark = await bookmark_crud.get_bookmark(db, bookmark_id)
        if db_bookmark is None or db_bookmark.user_id != requester.id:
            raise NotFound("Bookmark")
        return db_bookmark

    async def add_bookmark(self, db: AsyncSession, data: BookmarkCreate, requester: CurrentUser) -> CaseBookmark:
        case_service.ensure_visible(await case_crud.get_case(db, data.case_id), requester)
        return await bookmark_crud.create_bookmark(
            db, {"user_id": requester.id, "case_id": data.case_id, "notes": data.notes}
        )

    async def my_bookmarks(
        self,
        db: AsyncSession,
        requester: CurrentUser,
        skip: int = 0,
        limit: int = 50,
        upcoming_only: bool = False,
    ) -> List[CaseBookmark]:
        return await bookmark_crud.get_user_bookmarks(
            db,
            requester.id,
            skip=skip,
            limit=limit,
            upcoming_after=datetime.now(timezone.utc) if upcoming_only else None,
            visible_to=restricted_viewer(requester),
        )

    async def check(self, db: AsyncSession, case_id: UUID, requester: CurrentUser) -> Dict[str, Any]:
        db_bookmark = await bookmark_crud.get_bookmark_for(db, requester.id, case_id)
        return {
            "is_bookmarked": db_bookmark is not None,
            "bookmark_id": db_bookmark.id if db_bookmark else None,
        }

    async def get_bookmark(
        self, db: AsyncSession, bookmark_id: Union[UUID, str], requester: CurrentUser
    ) -> CaseBookmark:
        return await self._own_bookmark(db, bookmark_id, requester)

    async def update_bookmark(
        self,
        db: AsyncSession,
        bookmark_id: Union[UUID, str],
        data: BookmarkUpdate,
        requester: CurrentUser,
    ) -> CaseBookmark:
        db_bookmark = await self._own_bookmark(db, bookmark_id, requester)
        return await bookmark_crud.save_bookmark(db, db_bookmark, data.model_dump(exclude_unset=True))

    async def remove_bookmark(self, db: AsyncSession, bookmark_id: Union[UUID, str], requester: CurrentUser) -> None:
        await bookmark_crud.delete_bookmark(db, await self._own_bookmark(db, bookmark_id, requester))

    async def remove_case_bookmark(self, db: AsyncSession, case_id: UUID, requester: CurrentUser) -> None:
        db_bookmark = await bookmark_crud.get_bookmark_for(db, requester.id, case_id)
        if db_bookmark is None:
            raise NotFound("Bookmark")
        await bookmark_crud.delete_bookmark(db, db_bookmark)

    async def my_statistics(self, db: AsyncSession, requester: CurrentUser) -> Dict[str, int]:
        return await bookmark_crud.get_user_bookmark_statistics(db, requester.id, now=datetime.now(timezone.utc))

    async def statistics(self, db: AsyncSession) -> Dict[str, int]:
        return await bookmark_crud.get_bookmark_statistics(db)


bookmark_service = BookmarkService()
