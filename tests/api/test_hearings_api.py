from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from fastapi import status

from app.crud import case as case_crud
from app.db.models import UserRole

pytestmark = pytest.mark.asyncio

FIRST_DATE = datetime(2030, 5, 10, 10, 30, tzinfo=timezone.utc)


def hearing_payload(case, judge, when: datetime = FIRST_DATE, number: str = "H-1") -> dict:
    return {
        "case_id": str(case.id),
        "hearing_number": number,
        "hearing_date": when.isoformat(),
        "hearing_time": "10:30",
        "judge_id": str(judge.id),
        "court_room": "Court 4",
        "purpose": "preliminary",
    }


def parse(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


async def schedule(client: AsyncClient, headers: dict, payload: dict) -> dict:
    response = await client.post("/api/v1/hearings/", json=payload, headers=headers)
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()


class TestCreateHearing:
    async def test_later_hearing_updates_case(self, client: AsyncClient, db, case, judge, clerk, headers_for):
        headers = headers_for(clerk)
        await schedule(client, headers, hearing_payload(case, judge))
        later = FIRST_DATE + timedelta(days=21)
        created = await schedule(client, headers, hearing_payload(case, judge, later, "H-2"))
        assert created["judge"]["id"] == str(judge.id)
        assert created["status"] == "scheduled"

        refreshed = await case_crud.get_case(db, case.id)
        assert refreshed.hearing_count == 2
        assert parse(refreshed.next_hearing_date.isoformat()) == later
        assert refreshed.status.value == "filed"

    async def test_earlier_hearing_keeps_next_date(self, client: AsyncClient, db, case, judge, clerk, headers_for):
        headers = headers_for(clerk)
        await schedule(client, headers, hearing_payload(case, judge))
        await schedule(client, headers, hearing_payload(case, judge, FIRST_DATE - timedelta(days=3), "H-0"))

        refreshed = await case_crud.get_case(db, case.id)
        assert refreshed.hearing_count == 2
        assert parse(refreshed.next_hearing_date.isoformat()) == FIRST_DATE

    async def test_judge_must_have_judge_role(self, client: AsyncClient, case, clerk, headers_for):
        response = await client.post(
            "/api/v1/hearings/", json=hearing_payload(case, clerk), headers=headers_for(clerk)
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    async def test_lawyer_cannot_schedule(self, client: AsyncClient, case, judge, make_user, headers_for):
        lawyer = await make_user(UserRole.lawyer)
        response = await client.post(
            "/api/v1/hearings/", json=hearing_payload(case, judge), headers=headers_for(lawyer)
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_bad_time_format(self, client: AsyncClient, case, judge, clerk, headers_for):
        payload = hearing_payload(case, judge)
        payload["hearing_time"] = "25:00"
        response = await client.post("/api/v1/hearings/", json=payload, headers=headers_for(clerk))
        assert response.status_code == 422


class TestHearingStatus:
    async def test_adjournment_moves_case_date(self, client: AsyncClient, db, case, judge, headers_for):
        headers = headers_for(judge)
        hearing = await schedule(client, headers, hearing_payload(case, judge))
        new_date = FIRST_DATE + timedelta(days=30)

        response = await client.patch(
            f"/api/v1/hearings/{hearing['id']}/status",
            json={
                "status": "adjourned",
                "adjournment_reason": "Counsel unavailable",
                "next_hearing_date": new_date.isoformat(),
            },
            headers=headers,
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["adjournment_reason"] == "Counsel unavailable"

        refreshed = await case_crud.get_case(db, case.id)
        assert parse(refreshed.next_hearing_date.isoformat()) == new_date

    async def test_adjournment_without_reason(self, client: AsyncClient, case, judge, headers_for):
        headers = headers_for(judge)
        hearing = await schedule(client, headers, hearing_payload(case, judge))
        response = await client.patch(
            f"/api/v1/hearings/{hearing['id']}/status", json={"status": "adjourned"}, headers=headers
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["entity"] == "hearing"

    async def test_completed_is_terminal(self, client: AsyncClient, case, judge, headers_for):
        headers = headers_for(judge)
        hearing = await schedule(client, headers, hearing_payload(case, judge))
        url = f"/api/v1/hearings/{hearing['id']}/status"

        assert (await client.patch(url, json={"status": "ongoing"}, headers=headers)).status_code == 200
        assert (await client.patch(url, json={"status": "completed"}, headers=headers)).status_code == 200

        response = await client.patch(url, json={"status": "scheduled"}, headers=headers)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["current"] == "completed"

        reschedule = await client.patch(
            f"/api/v1/hearings/{hearing['id']}", json={"court_room": "Court 9"}, headers=headers
        )
        assert reschedule.status_code == status.HTTP_400_BAD_REQUEST

    async def test_reschedule_cannot_null_required_fields(self, client: AsyncClient, case, judge, headers_for):
        headers = headers_for(judge)
        hearing = await schedule(client, headers, hearing_payload(case, judge))
        for field in ("hearing_date", "judge_id", "purpose"):
            response = await client.patch(f"/api/v1/hearings/{hearing['id']}", json={field: None}, headers=headers)
            assert response.status_code == 422

        response = await client.patch(
            f"/api/v1/hearings/{hearing['id']}", json={"court_room": None}, headers=headers
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["court_room"] is None


class TestReadAndDelete:
    async def test_case_hearings_and_get(self, client: AsyncClient, case, judge, public_user, headers_for):
        hearing = await schedule(client, headers_for(judge), hearing_payload(case, judge))
        listing = await client.get(f"/api/v1/hearings/case/{case.id}", headers=headers_for(public_user))
        assert [h["id"] for h in listing.json()] == [hearing["id"]]

        single = await client.get(f"/api/v1/hearings/{hearing['id']}", headers=headers_for(public_user))
        assert single.json()["hearing_number"] == "H-1"

    async def test_upcoming_only_scheduled_future(self, client: AsyncClient, case, judge, headers_for):
        headers = headers_for(judge)
        past = datetime.now(timezone.utc) - timedelta(days=2)
        await schedule(client, headers, hearing_payload(case, judge, past, "H-past"))
        future = await schedule(client, headers, hearing_payload(case, judge, FIRST_DATE, "H-future"))

        response = await client.get(f"/api/v1/hearings/upcoming?judge_id={judge.id}", headers=headers)
        assert [h["id"] for h in response.json()] == [future["id"]]

    async def test_delete_decrements_count(self, client: AsyncClient, db, case, judge, admin, headers_for):
        hearing = await schedule(client, headers_for(judge), hearing_payload(case, judge))
        response = await client.delete(f"/api/v1/hearings/{hearing['id']}", headers=headers_for(admin))
        assert response.status_code == status.HTTP_204_NO_CONTENT

        refreshed = await case_crud.get_case(db, case.id)
        assert refreshed.hearing_count == 0

        missing = await client.get(f"/api/v1/hearings/{hearing['id']}", headers=headers_for(admin))
        assert missing.status_code == status.HTTP_404_NOT_FOUND

    async def test_deleting_case_removes_hearings(self, client: AsyncClient, case, judge, admin, headers_for):
        hearing = await schedule(client, headers_for(judge), hearing_payload(case, judge))
        await client.delete(f"/api/v1/cases/{case.id}", headers=headers_for(admin))
        response = await client.get(f"/api/v1/hearings/{hearing['id']}", headers=headers_for(admin))
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestRestrictedCaseHearings:
    @pytest.fixture
    async def restricted(self, make_case):
        return await make_case("SEC/1/2024", is_public=False)

    async def test_public_role_denied(
        self, client: AsyncClient, restricted, judge, public_user, headers_for
    ):
        hearing = await schedule(client, headers_for(judge), hearing_payload(restricted, judge))
        headers = headers_for(public_user)

        listing = await client.get(f"/api/v1/hearings/case/{restricted.id}", headers=headers)
        assert listing.status_code == status.HTTP_403_FORBIDDEN
        assert listing.json()["reason"] == "not_owner"

        single = await client.get(f"/api/v1/hearings/{hearing['id']}", headers=headers)
        assert single.status_code == status.HTTP_403_FORBIDDEN

    async def test_listings_skip_restricted_cases_for_public_role(
        self, client: AsyncClient, case, restricted, judge, public_user, headers_for
    ):
        visible = await schedule(client, headers_for(judge), hearing_payload(case, judge))
        await schedule(client, headers_for(judge), hearing_payload(restricted, judge, number="H-S"))
        headers = headers_for(public_user)

        upcoming = await client.get("/api/v1/hearings/upcoming", headers=headers)
        assert [h["id"] for h in upcoming.json()] == [visible["id"]]

        by_judge = await client.get(f"/api/v1/hearings/judge/{judge.id}", headers=headers)
        assert [h["id"] for h in by_judge.json()] == [visible["id"]]

        staff_view = await client.get("/api/v1/hearings/upcoming", headers=headers_for(judge))
        assert len(staff_view.json()) == 2

    async def test_filer_and_other_roles_may_read(
        self, client: AsyncClient, make_case, judge, public_user, make_user, headers_for
    ):
        own = await make_case("SEC/2/2024", filer=public_user, is_public=False)
        hearing = await schedule(client, headers_for(judge), hearing_payload(own, judge))

        response = await client.get(f"/api/v1/hearings/{hearing['id']}", headers=headers_for(public_user))
        assert response.status_code == status.HTTP_200_OK

        lawyer = await make_user(UserRole.lawyer)
        response = await client.get(f"/api/v1/hearings/case/{own.id}", headers=headers_for(lawyer))
        assert [h["id"] for h in response.json()] == [hearing["id"]]


class TestCauseList:
    async def test_todays_hearings(self, client: AsyncClient, case, judge, headers_for):
        headers = headers_for(judge)
        today = datetime.now(timezone.utc).replace(hour=12, minute=0, second=0, microsecond=0)
        morning = await schedule(client, headers, {**hearing_payload(case, judge, today, "H-am"), "hearing_time": "09:15"})
        afternoon = await schedule(client, headers, {**hearing_payload(case, judge, today, "H-pm"), "hearing_time": "14:00"})
        await schedule(client, headers, hearing_payload(case, judge, today + timedelta(days=1), "H-next"))
        cancelled = await schedule(client, headers, hearing_payload(case, judge, today, "H-off"))
        await client.patch(f"/api/v1/hearings/{cancelled['id']}/status", json={"status": "cancelled"}, headers=headers)

        response = await client.get("/api/v1/hearings/today", headers=headers)
        assert response.status_code == status.HTTP_200_OK
        assert [h["id"] for h in response.json()] == [morning["id"], afternoon["id"]]

    async def test_judge_hearings_newest_first(self, client: AsyncClient, case, judge, make_user, clerk, headers_for):
        other_judge = await make_user(UserRole.judge, username="second_judge")
        headers = headers_for(clerk)
        first = await schedule(client, headers, hearing_payload(case, judge))
        later = await schedule(client, headers, hearing_payload(case, judge, FIRST_DATE + timedelta(days=7), "H-2"))
        await schedule(client, headers, hearing_payload(case, other_judge, number="H-3"))

        response = await client.get(f"/api/v1/hearings/judge/{judge.id}", headers=headers)
        assert [h["id"] for h in response.json()] == [later["id"], first["id"]]

    async def test_unknown_judge(self, client: AsyncClient, clerk, headers_for):
        response = await client.get(
            "/api/v1/hearings/judge/00000000-0000-0000-0000-000000000000", headers=headers_for(clerk)
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_statistics(self, client: AsyncClient, case, judge, clerk, headers_for):
        headers = headers_for(judge)
        await schedule(client, headers, hearing_payload(case, judge))
        adjourned = await schedule(client, headers, {**hearing_payload(case, judge, number="H-2"), "purpose": "evidence"})
        await client.patch(
            f"/api/v1/hearings/{adjourned['id']}/status",
            json={"status": "adjourned", "adjournment_reason": "Witness absent"},
            headers=headers,
        )

        response = await client.get("/api/v1/hearings/statistics", headers=headers)
        assert response.json() == {
            "total": 2,
            "upcoming": 1,
            "by_status": {"scheduled": 1, "adjourned": 1},
            "by_purpose": {"preliminary": 1, "evidence": 1},
        }

        denied = await client.get("/api/v1/hearings/statistics", headers=headers_for(clerk))
        assert denied.status_code == status.HTTP_403_FORBIDDEN
