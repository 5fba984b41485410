from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Union
from uuid import UUID
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InvalidRequest, InvalidTransition, NotFound
from app.crud import case as case_crud
from app.crud import hearing as hearing_crud
from app.crud import user as user_crud
from app.db.models import Case, Hearing, HearingStatus, UserRole
from app.schemas.hearing import HearingCreate, HearingStatusUpdate, HearingUpdate
from app.schemas.user import CurrentUser
from app.services.case_service import case_service, restricted_viewer
from app.services.lifecycle import (
    TERMINAL_HEARING_STATUSES,
    apply_hearing_transition,
    as_utc,
    register_hearing,
    unregister_hearing,
)

logger = logging.getLogger(__name__)

# Hearings still on the day's cause list
ACTIVE_HEARING_STATUSES = (HearingStatus.scheduled, HearingStatus.ongoing)


class HearingService:
    """Scheduling and status changes for hearings, kept in step with their case."""

    async def _get_case(self, db: AsyncSession, case_id: Union[UUID, str]) -> Case:
        db_case = await case_crud.get_case(db, case_id)
        if db_case is None:
            raise NotFound("Case")
        return db_case

    async def _check_judge(self, db: AsyncSession, judge_id: UUID) -> None:
        judge = await user_crud.get_user(db, judge_id)
        if judge is None:
            raise NotFound("Judge")
        if judge.role != UserRole.judge:
            raise InvalidRequest("User must have judge role")

    async def _load_hearing(self, db: AsyncSession, hearing_id: Union[UUID, str]) -> Hearing:
        db_hearing = await hearing_crud.get_hearing(db, hearing_id)
        if db_hearing is None:
            raise NotFound("Hearing")
        return db_hearing

    async def get_hearing(self, db: AsyncSession, hearing_id: Union[UUID, str], requester: CurrentUser) -> Hearing:
        """
        A hearing is readable by whoever may read its case.
        """
        db_hearing = await self._load_hearing(db, hearing_id)
        case_service.ensure_visible(await case_crud.get_case(db, db_hearing.case_id), requester)
        return db_hearing

    async def create_hearing(self, db: AsyncSession, data: HearingCreate) -> Hearing:
        db_case = await self._get_case(db, data.case_id)
        await self._check_judge(db, data.judge_id)

        hearing_date = as_utc(data.hearing_date)
        register_hearing(db_case, hearing_date)

        payload = data.model_dump()
        payload["hearing_date"] = hearing_date
        return await hearing_crud.create_hearing(db, payload)

    async def list_case_hearings(
        self,
        db: AsyncSession,
        case_id: Union[UUID, str],
        requester: CurrentUser,
    ) -> List[Hearing]:
        case_service.ensure_visible(await case_crud.get_case(db, case_id), requester)
        return await hearing_crud.get_case_hearings(db, case_id)

    async def upcoming_hearings(
        self,
        db: AsyncSession,
        requester: CurrentUser,
        judge_id: Optional[UUID] = None,
        court_id: Optional[UUID] = None,
        limit: int = 10,
    ) -> List[Hearing]:
        return await hearing_crud.get_upcoming_hearings(
            db,
            after=datetime.now(timezone.utc),
            judge_id=judge_id,
            court_id=court_id,
            limit=limit,
            visible_to=restricted_viewer(requester),
        )

    async def todays_hearings(
        self,
        db: AsyncSession,
        requester: CurrentUser,
        judge_id: Optional[UUID] = None,
    ) -> List[Hearing]:
        """Scheduled or ongoing hearings on the current UTC day."""
        start = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
        return await hearing_crud.get_hearings_between(
            db,
            start=start,
            end=start + timedelta(days=1),
            statuses=ACTIVE_HEARING_STATUSES,
            judge_id=judge_id,
            visible_to=restricted_viewer(requester),
        )

    async def judge_hearings(self, db: AsyncSession, judge_id: UUID, requester: CurrentUser) -> List[Hearing]:
        if await user_crud.get_user(db, judge_id) is None:
            raise NotFound("Judge")
        return await hearing_crud.get_judge_hearings(db, judge_id, visible_to=restricted_viewer(requester))

    async def statistics(self, db: AsyncSession) -> Dict[str, Any]:
        return await hearing_crud.get_hearing_statistics(db, now=datetime.now(timezone.utc))

    async def update_hearing(self, db: AsyncSession, hearing_id: Union[UUID, str], data: HearingUpdate) -> Hearing:
        db_hearing = await self._load_hearing(db, hearing_id)
        current = HearingStatus(db_hearing.status)
        if current in TERMINAL_HEARING_STATUSES:
            raise InvalidTransition(
                "hearing", "status", current.value, current.value,
                f"Hearing is {current.value} and can no longer be rescheduled",
            )

        changes = data.model_dump(exclude_unset=True)
        if "judge_id" in changes:
            await self._check_judge(db, changes["judge_id"])
        if "hearing_date" in changes:
            changes["hearing_date"] = as_utc(changes["hearing_date"])
        return await hearing_crud.save_hearing(db, db_hearing, changes)

    async def change_status(
        self,
        db: AsyncSession,
        hearing_id: Union[UUID, str],
        data: HearingStatusUpdate,
    ) -> Hearing:
        db_hearing = await self._load_hearing(db, hearing_id)
        db_case = await self._get_case(db, db_hearing.case_id)
        apply_hearing_transition(
            db_hearing,
            db_case,
            data.status,
            reason=data.adjournment_reason,
            next_date=data.next_hearing_date,
            notes=data.notes,
        )
        return await hearing_crud.save_hearing(db, db_hearing)

    async def delete_hearing(self, db: AsyncSession, hearing_id: Union[UUID, str]) -> None:
        db_hearing = await self._load_hearing(db, hearing_id)
        db_case = await self._get_case(db, db_hearing.case_id)
        unregister_hearing(db_case)
        await hearing_crud.delete_hearing(db, db_hearing)


hearing_service = HearingService()
