from typing import Any, Dict, List, Optional, Tuple, Union
from uuid import UUID
import logging
import math

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InvalidRequest, NotFound
from app.core.permissions import (
    EDIT_CASE_ROLES,
    RESTRICTED_CASE_READERS,
    ensure_owner_or_roles,
)
from app.crud import case as case_crud
from app.crud import case_type as case_type_crud
from app.crud import court as court_crud
from app.crud import user as user_crud
from app.db.models import Case
from app.schemas.case import CaseCreate, CaseStatusUpdate, CaseUpdate
from app.schemas.user import CurrentUser
from app.services.lifecycle import apply_case_transition, as_utc

logger = logging.getLogger(__name__)


def restricted_viewer(requester: CurrentUser) -> Optional[UUID]:
    """
    Id to scope listings by when the requester may not see restricted cases.
    """
    if requester.role in RESTRICTED_CASE_READERS:
        return None
    return requester.id


class CaseService:
    """Case registration, lookup, metadata edits and lifecycle transitions."""

    async def _check_references(
        self,
        db: AsyncSession,
        court_id: Optional[UUID] = None,
        case_type_id: Optional[UUID] = None,
    ) -> None:
        if court_id is not None:
            court = await court_crud.get_court(db, court_id)
            if court is None:
                raise NotFound("Court")
            if not court.is_active:
                raise InvalidRequest("Court is not active")
        if case_type_id is not None:
            case_type = await case_type_crud.get_case_type(db, case_type_id)
            if case_type is None:
                raise NotFound("Case type")
            if not case_type.is_active:
                raise InvalidRequest("Case type is not active")

    async def create_case(self, db: AsyncSession, data: CaseCreate, requester: CurrentUser) -> Case:
        await self._check_references(db, data.court_id, data.case_type_id)

        filed_by_id = data.filed_by_id or requester.id
        if filed_by_id != requester.id and await user_crud.get_user(db, filed_by_id) is None:
            raise NotFound("Filer")

        payload = data.model_dump()
        payload.update({
            "filed_by_id": filed_by_id,
            "filing_date": as_utc(data.filing_date),
        })
        return await case_crud.create_case(db, payload)

    async def get_case(self, db: AsyncSession, case_id: Union[UUID, str], requester: CurrentUser) -> Case:
        return self.ensure_visible(await case_crud.get_case(db, case_id), requester)

    async def get_case_by_slug(self, db: AsyncSession, slug: str, requester: CurrentUser) -> Case:
        return self.ensure_visible(await case_crud.get_case_by_slug(db, slug), requester)

    async def get_case_by_number(self, db: AsyncSession, case_number: str, requester: CurrentUser) -> Case:
        return self.ensure_visible(await case_crud.get_case_by_number(db, case_number), requester)

    def ensure_visible(self, db_case: Optional[Case], requester: CurrentUser) -> Case:
        """
        Return the case if the requester may read it; restricted cases are
        readable by their filer and by every role except public.
        """
        if db_case is None:
            raise NotFound("Case")
        if not db_case.is_public:
            ensure_owner_or_roles(requester, db_case.filed_by_id, RESTRICTED_CASE_READERS)
        return db_case

    async def list_cases(
        self,
        db: AsyncSession,
        requester: CurrentUser,
        page: int = 1,
        limit: int = 10,
        filters: Optional[Dict[str, Any]] = None,
    ) -> Tuple[List[Case], Dict[str, int]]:
        filters = {key: value for key, value in (filters or {}).items() if value is not None}
        viewer = restricted_viewer(requester)
        if viewer is not None:
            filters["visible_to"] = viewer

        cases, total = await case_crud.get_cases(db, skip=(page - 1) * limit, limit=limit, filters=filters)
        pagination = {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit) if limit else 0,
        }
        return cases, pagination

    async def update_case(
        self,
        db: AsyncSession,
        case_id: Union[UUID, str],
        data: CaseUpdate,
        requester: CurrentUser,
    ) -> Case:
        db_case = await case_crud.get_case(db, case_id)
        if db_case is None:
            raise NotFound("Case")
        ensure_owner_or_roles(requester, db_case.filed_by_id, EDIT_CASE_ROLES)

        changes = data.model_dump(exclude_unset=True)
        await self._check_references(db, changes.get("court_id"), changes.get("case_type_id"))
        return await case_crud.save_case(db, db_case, changes)

    async def change_status(self, db: AsyncSession, case_id: Union[UUID, str], data: CaseStatusUpdate) -> Case:
        db_case = await case_crud.get_case(db, case_id)
        if db_case is None:
            raise NotFound("Case")
        apply_case_transition(db_case, status=data.status, stage=data.stage)
        return await case_crud.save_case(db, db_case)

    async def delete_case(self, db: AsyncSession, case_id: Union[UUID, str]) -> None:
        db_case = await case_crud.get_case(db, case_id)
        if db_case is None:
            raise NotFound("Case")
        await case_crud.delete_case(db, db_case)


case_service = CaseService()
