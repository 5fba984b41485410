"""
Case and hearing state machines.

These functions validate a requested change in full before touching the
objects they are given, so a rejected transition leaves both the case and
the hearing exactly as they were. Persistence is the caller's job.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, FrozenSet, List, Optional

from app.core.errors import InvalidTransition
from app.db.models import Case, CaseStage, CaseStatus, Hearing, HearingStatus

logger = logging.getLogger(__name__)

STATUS_ORDER: List[CaseStatus] = [
    CaseStatus.filed,
    CaseStatus.admitted,
    CaseStatus.hearing,
    CaseStatus.judgment,
    CaseStatus.closed,
    CaseStatus.archived,
]

STAGE_ORDER: List[CaseStage] = [
    CaseStage.preliminary,
    CaseStage.trial,
    CaseStage.final,
]

HEARING_TRANSITIONS: Dict[HearingStatus, FrozenSet[HearingStatus]] = {
    HearingStatus.scheduled: frozenset({HearingStatus.ongoing, HearingStatus.adjourned, HearingStatus.cancelled}),
    HearingStatus.ongoing: frozenset({HearingStatus.completed, HearingStatus.adjourned}),
    HearingStatus.adjourned: frozenset({HearingStatus.scheduled, HearingStatus.cancelled}),
    HearingStatus.completed: frozenset(),
    HearingStatus.cancelled: frozenset(),
}

TERMINAL_HEARING_STATUSES = frozenset(
    status for status, targets in HEARING_TRANSITIONS.items() if not targets
)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC so stored and supplied values compare."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def next_status(current: CaseStatus) -> Optional[CaseStatus]:
    index = STATUS_ORDER.index(current)
    if index + 1 < len(STATUS_ORDER):
        return STATUS_ORDER[index + 1]
    return None


def _validate_stage(case: Case, target: CaseStage) -> CaseStage:
    current = CaseStage(case.stage)
    if STAGE_ORDER.index(target) < STAGE_ORDER.index(current):
        raise InvalidTransition("case", "stage", current.value, target.value)
    return target


def _validate_status(case: Case, target: CaseStatus) -> CaseStatus:
    current = CaseStatus(case.status)
    if target == current:
        return target
    if target != next_status(current):
        raise InvalidTransition("case", "status", current.value, target.value)
    return target


def apply_case_transition(
    case: Case,
    status: Optional[CaseStatus] = None,
    stage: Optional[CaseStage] = None,
    now: Optional[datetime] = None,
) -> Case:
    """
    Move a case to a new status and/or stage.

    Status advances exactly one step; asking for the current status changes
    nothing. Stage only moves forward but may skip. ``judgment`` is accepted
    only when the resulting stage is ``final``. Admission and judgment dates
    are stamped the first time their status is reached and never again.
    """
    if status is None and stage is None:
        raise InvalidTransition("case", "status", _value(case.status), None,
                                "A status or stage change is required")

    target_stage = _validate_stage(case, CaseStage(stage)) if stage is not None else CaseStage(case.stage)
    target_status = _validate_status(case, CaseStatus(status)) if status is not None else CaseStatus(case.status)

    status_changed = target_status != CaseStatus(case.status)
    if status_changed and target_status == CaseStatus.judgment and target_stage != CaseStage.final:
        raise InvalidTransition(
            "case", "status", _value(case.status), target_status.value,
            f"Case cannot reach judgment while its stage is {target_stage.value}; stage must be final",
        )

    moment = now or datetime.now(timezone.utc)
    case.stage = target_stage
    if status_changed:
        logger.info(f"Case {case.id} status {_value(case.status)} -> {target_status.value}")
        case.status = target_status
        if target_status == CaseStatus.admitted and case.admission_date is None:
            case.admission_date = moment
        if target_status == CaseStatus.judgment and case.judgment_date is None:
            case.judgment_date = moment
    return case


def register_hearing(case: Case, hearing_date: datetime) -> Case:
    """
    Account for a newly created hearing on its case.

    The count always goes up by one. The next hearing date only moves when the
    new hearing is later than the recorded one, or none is recorded.
    """
    case.hearing_count = (case.hearing_count or 0) + 1
    incoming = as_utc(hearing_date)
    current = as_utc(case.next_hearing_date)
    if current is None or incoming > current:
        case.next_hearing_date = incoming
    return case


def unregister_hearing(case: Case) -> Case:
    case.hearing_count = max((case.hearing_count or 0) - 1, 0)
    return case


def apply_hearing_transition(
    hearing: Hearing,
    case: Case,
    status: HearingStatus,
    reason: Optional[str] = None,
    next_date: Optional[datetime] = None,
    notes: Optional[str] = None,
) -> Hearing:
    """
    Move a hearing to ``status``.

    Adjourning needs a non-empty reason. A next hearing date supplied with an
    adjournment is copied to the hearing and to its case.
    """
    current = HearingStatus(hearing.status)
    target = HearingStatus(status)

    if target not in HEARING_TRANSITIONS[current]:
        if current in TERMINAL_HEARING_STATUSES:
            message = f"Hearing is {current.value} and can no longer change status"
        else:
            message = None
        raise InvalidTransition("hearing", "status", current.value, target.value, message)

    if target == HearingStatus.adjourned:
        if not reason or not reason.strip():
            raise InvalidTransition("hearing", "status", current.value, target.value,
                                    "An adjourned hearing requires an adjournment reason")
    elif reason or next_date:
        raise InvalidTransition("hearing", "status", current.value, target.value,
                                "Adjournment reason and next hearing date apply only when adjourning")

    hearing.status = target
    if notes:
        hearing.notes = notes
    if target == HearingStatus.adjourned:
        hearing.adjournment_reason = reason.strip()
        if next_date is not None:
            hearing.next_hearing_date = as_utc(next_date)
            case.next_hearing_date = as_utc(next_date)
    logger.info(f"Hearing {hearing.id} status {current.value} -> {target.value}")
    return hearing


def _value(member) -> Optional[str]:
    return getattr(member, "value", member)
