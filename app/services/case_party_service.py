from typing import Any, Dict, List, Optional, Union
from uuid import UUID
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InvalidRequest, NotFound
from app.crud import advocate as advocate_crud
from app.crud import case as case_crud
from app.crud import case_party as party_crud
from app.crud import user as user_crud
from app.db.models import CaseParty, PartyType
from app.schemas.case_party import CasePartyCreate, CasePartyUpdate
from app.schemas.user import CurrentUser
from app.services.case_service import case_service, restricted_viewer

logger = logging.getLogger(__name__)


class CasePartyService:
    """Parties to a case and the advocates representing them."""

    async def _check_references(
        self,
        db: AsyncSession,
        user_id: Optional[UUID] = None,
        advocate_id: Optional[UUID] = None,
    ) -> None:
        if user_id is not None and await user_crud.get_user(db, user_id) is None:
            raise NotFound("User")
        if advocate_id is not None:
            advocate = await advocate_crud.get_advocate(db, advocate_id)
            if advocate is None:
                raise NotFound("Advocate")
            if not advocate.is_active:
                raise InvalidRequest("Advocate is not active")

    async def _load_party(self, db: AsyncSession, party_id: Union[UUID, str]) -> CaseParty:
        db_party = await party_crud.get_party(db, party_id)
        if db_party is None:
            raise NotFound("Case party")
        return db_party

    async def add_party(self, db: AsyncSession, data: CasePartyCreate) -> CaseParty:
        if await case_crud.get_case(db, data.case_id) is None:
            raise NotFound("Case")
        await self._check_references(db, data.user_id, data.advocate_id)
        return await party_crud.create_party(db, data.model_dump())

    async def get_party(self, db: AsyncSession, party_id: Union[UUID, str], requester: CurrentUser) -> CaseParty:
        """
        A party is readable by whoever may read its case.
        """
        db_party = await self._load_party(db, party_id)
        case_service.ensure_visible(await case_crud.get_case(db, db_party.case_id), requester)
        return db_party

    async def list_case_parties(
        self,
        db: AsyncSession,
        case_id: Union[UUID, str],
        requester: CurrentUser,
        party_type: Optional[PartyType] = None,
        include_inactive: bool = False,
    ) -> List[CaseParty]:
        case_service.ensure_visible(await case_crud.get_case(db, case_id), requester)
        return await party_crud.get_case_parties(
            db, case_id, party_type=party_type, include_inactive=include_inactive
        )

    async def list_advocate_parties(
        self, db: AsyncSession, advocate_id: Union[UUID, str], requester: CurrentUser
    ) -> List[CaseParty]:
        if await advocate_crud.get_advocate(db, advocate_id) is None:
            raise NotFound("Advocate")
        return await party_crud.get_advocate_parties(db, advocate_id, visible_to=restricted_viewer(requester))

    async def update_party(self, db: AsyncSession, party_id: Union[UUID, str], data: CasePartyUpdate) -> CaseParty:
        db_party = await self._load_party(db, party_id)
        changes = data.model_dump(exclude_unset=True)
        await self._check_references(db, changes.get("user_id"), changes.get("advocate_id"))
        return await party_crud.save_party(db, db_party, changes)

    async def remove_party(self, db: AsyncSession, party_id: Union[UUID, str]) -> CaseParty:
        db_party = await self._load_party(db, party_id)
        logger.info(f"Deactivating party {db_party.id} on case {db_party.case_id}")
        return await party_crud.save_party(db, db_party, {"is_active": False})

    async def statistics(self, db: AsyncSession) -> Dict[str, Any]:
        return await party_crud.get_party_statistics(db)


case_party_service = CasePartyService()
