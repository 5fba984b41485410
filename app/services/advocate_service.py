from typing import Any, Dict, List, Optional, Tuple, Union
from uuid import UUID
import logging
import math

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InvalidRequest, NotFound
from app.crud import advocate as advocate_crud
from app.crud import user as user_crud
from app.db.models import Advocate, UserRole
from app.schemas.advocate import AdvocateCreate, AdvocateUpdate
from app.services.lifecycle import as_utc

logger = logging.getLogger(__name__)


class AdvocateService:
    """Advocate profiles for lawyer accounts. Profiles are deactivated, never deleted."""

    async def get_advocate(self, db: AsyncSession, advocate_id: Union[UUID, str]) -> Advocate:
        db_advocate = await advocate_crud.get_advocate(db, advocate_id)
        if db_advocate is None:
            raise NotFound("Advocate")
        return db_advocate

    async def get_advocate_by_user(self, db: AsyncSession, user_id: Union[UUID, str]) -> Advocate:
        db_advocate = await advocate_crud.get_advocate_by_user(db, user_id)
        if db_advocate is None:
            raise NotFound("Advocate")
        return db_advocate

    async def create_advocate(self, db: AsyncSession, data: AdvocateCreate) -> Advocate:
        user = await user_crud.get_user(db, data.user_id)
        if user is None:
            raise NotFound("User")
        if user.role != UserRole.lawyer:
            raise InvalidRequest("User must have lawyer role to become an advocate")

        payload = data.model_dump()
        payload["enrollment_date"] = as_utc(data.enrollment_date)
        return await advocate_crud.create_advocate(db, payload)

    async def list_advocates(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        is_active: Optional[bool] = True,
        specialization: Optional[str] = None,
        min_experience: Optional[int] = None,
    ) -> Tuple[List[Advocate], Dict[str, int]]:
        advocates, total = await advocate_crud.get_advocates(
            db,
            skip=(page - 1) * limit,
            limit=limit,
            is_active=is_active,
            specialization=specialization,
            min_experience=min_experience,
        )
        pagination = {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit) if limit else 0,
        }
        return advocates, pagination

    async def update_advocate(
        self, db: AsyncSession, advocate_id: Union[UUID, str], data: AdvocateUpdate
    ) -> Advocate:
        db_advocate = await self.get_advocate(db, advocate_id)
        changes = data.model_dump(exclude_unset=True)
        if "enrollment_date" in changes:
            changes["enrollment_date"] = as_utc(changes["enrollment_date"])
        return await advocate_crud.save_advocate(db, db_advocate, changes)

    async def deactivate_advocate(self, db: AsyncSession, advocate_id: Union[UUID, str]) -> Advocate:
        db_advocate = await self.get_advocate(db, advocate_id)
        logger.info(f"Deactivating advocate {db_advocate.bar_council_id}")
        return await advocate_crud.save_advocate(db, db_advocate, {"is_active": False})

    async def statistics(self, db: AsyncSession) -> Dict[str, Any]:
        return await advocate_crud.get_advocate_statistics(db)


advocate_service = AdvocateService()
