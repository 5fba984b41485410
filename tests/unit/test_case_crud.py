import pytest

from app.core.database import AsyncSessionLocal
from app.core.errors import ConcurrentModification
from app.crud import case as case_crud
from app.db.models import CaseStatus
from app.services.lifecycle import apply_case_transition


async def test_lost_update_is_rejected(case):
    async with AsyncSessionLocal() as first, AsyncSessionLocal() as second:
        mine = await case_crud.get_case(first, case.id)
        theirs = await case_crud.get_case(second, case.id)

        apply_case_transition(theirs, status=CaseStatus.admitted)
        await case_crud.save_case(second, theirs)

        apply_case_transition(mine, status=CaseStatus.admitted)
        with pytest.raises(ConcurrentModification):
            await case_crud.save_case(first, mine)

        reloaded = await case_crud.get_case(first, case.id)
        assert reloaded.status == CaseStatus.admitted
        assert reloaded.version == 2


async def test_version_increments_on_save(db, case):
    assert case.version == 1
    saved = await case_crud.save_case(db, case, {"title": "New title"})
    assert saved.version == 2
    assert saved.slug == "new-title-cs12024"


async def test_filters_and_total(db, make_case):
    await make_case("CS/1/2024")
    await make_case("CS/2/2024", is_public=False)
    cases, total = await case_crud.get_cases(db, filters={"visible_to": "00000000-0000-0000-0000-000000000000"})
    assert total == 1
    assert [c.case_number for c in cases] == ["CS/1/2024"]
