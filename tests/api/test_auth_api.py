import pytest
from httpx import AsyncClient
from fastapi import status

from app.crud import user as user_crud
from app.db.models import UserRole

pytestmark = pytest.mark.asyncio


@pytest.fixture
def registration_data(test_password):
    return {
        "username": "Asha.Rao",
        "email": "Asha@Example.com",
        "password": test_password,
        "full_name": "Asha Rao",
        "role": "litigant",
    }


class TestRegistration:
    async def test_register_user(self, client: AsyncClient, registration_data: dict):
        response = await client.post("/api/v1/auth/register", json=registration_data)
        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["user"]["email"] == "asha@example.com"
        assert data["user"]["username"] == "asha.rao"
        assert data["user"]["role"] == "litigant"
        assert "password" not in data["user"]
        assert "password_hash" not in data["user"]
        assert data["tokens"]["access_token"]
        assert data["tokens"]["refresh_token"]
        assert "accessToken" in response.cookies
        assert "refreshToken" in response.cookies

    @pytest.mark.parametrize("role", ["admin", "judge", "clerk"])
    async def test_cannot_self_register_privileged_role(self, client: AsyncClient, registration_data: dict, role):
        registration_data["role"] = role
        response = await client.post("/api/v1/auth/register", json=registration_data)
        assert response.status_code == 422

    async def test_lawyer_needs_bar_council_id(self, client: AsyncClient, registration_data: dict):
        registration_data["role"] = "lawyer"
        response = await client.post("/api/v1/auth/register", json=registration_data)
        assert response.status_code == 422

        registration_data["bar_council_id"] = "D/1234/2010"
        response = await client.post("/api/v1/auth/register", json=registration_data)
        assert response.status_code == status.HTTP_201_CREATED

    async def test_duplicate_email(self, client: AsyncClient, registration_data: dict):
        await client.post("/api/v1/auth/register", json=registration_data)
        registration_data["username"] = "someone_else"
        response = await client.post("/api/v1/auth/register", json=registration_data)
        assert response.status_code == status.HTTP_409_CONFLICT

    async def test_multibyte_password_over_72_bytes(self, client: AsyncClient, registration_data: dict):
        # 40 characters, 80 bytes in UTF-8
        registration_data["password"] = "é" * 40
        response = await client.post("/api/v1/auth/register", json=registration_data)
        assert response.status_code == 422


class TestLogin:
    async def test_login_user(self, client: AsyncClient, make_user, test_password):
        user = await make_user(UserRole.lawyer)
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": user.email, "password": test_password},
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["tokens"]["token_type"] == "bearer"
        assert data["user"]["id"] == str(user.id)

    async def test_wrong_password_and_unknown_email_look_the_same(self, client: AsyncClient, make_user):
        user = await make_user(UserRole.lawyer)
        wrong_password = await client.post(
            "/api/v1/auth/login",
            json={"email": user.email, "password": "wrongpassword"},
        )
        unknown_email = await client.post(
            "/api/v1/auth/login",
            json={"email": "nobody@example.com", "password": "wrongpassword"},
        )
        assert wrong_password.status_code == status.HTTP_401_UNAUTHORIZED
        assert unknown_email.status_code == status.HTTP_401_UNAUTHORIZED
        assert wrong_password.json() == unknown_email.json()


class TestSessionGate:
    async def test_get_current_user(self, client: AsyncClient, public_user, headers_for):
        response = await client.get("/api/v1/auth/me", headers=headers_for(public_user))
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["email"] == public_user.email

    async def test_missing_token(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.headers["www-authenticate"] == "Bearer"

    async def test_failures_share_one_message(self, client: AsyncClient):
        missing = await client.get("/api/v1/auth/me")
        garbage = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage"})
        assert missing.json() == garbage.json()
        assert missing.json()["detail"] == "Invalid or expired credentials"

    async def test_cookie_wins_over_header(self, client: AsyncClient, make_user, headers_for):
        cookie_user = await make_user(UserRole.litigant)
        header_user = await make_user(UserRole.public)
        cookie_token = headers_for(cookie_user)["Authorization"].split(" ", 1)[1]

        client.cookies.set("accessToken", cookie_token)
        response = await client.get("/api/v1/auth/me", headers=headers_for(header_user))
        assert response.json()["id"] == str(cookie_user.id)

    async def test_token_for_deleted_user(self, client: AsyncClient, db, public_user, headers_for):
        headers = headers_for(public_user)
        await db.delete(public_user)
        await db.commit()
        response = await client.get("/api/v1/auth/me", headers=headers)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_role_is_read_fresh(self, client: AsyncClient, db, admin, headers_for):
        headers = headers_for(admin)
        assert (await client.get("/api/v1/users/", headers=headers)).status_code == status.HTTP_200_OK

        await user_crud.save_user(db, admin, {"role": UserRole.public})
        response = await client.get("/api/v1/users/", headers=headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestRefresh:
    async def _login(self, client: AsyncClient, user, password: str) -> dict:
        response = await client.post("/api/v1/auth/login", json={"email": user.email, "password": password})
        assert response.status_code == status.HTTP_200_OK
        return response.json()["tokens"]

    async def test_refresh_with_body(self, client: AsyncClient, make_user, test_password):
        user = await make_user(UserRole.litigant)
        tokens = await self._login(client, user, test_password)
        client.cookies.clear()

        response = await client.post("/api/v1/auth/refresh-token", json={"refresh_token": tokens["refresh_token"]})
        assert response.status_code == status.HTTP_200_OK
        new_access = response.json()["access_token"]
        me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {new_access}"})
        assert me.json()["id"] == str(user.id)

    async def test_refresh_from_cookie(self, client: AsyncClient, make_user, test_password):
        user = await make_user(UserRole.litigant)
        await self._login(client, user, test_password)
        response = await client.post("/api/v1/auth/refresh-token")
        assert response.status_code == status.HTTP_200_OK

    async def test_refresh_without_token(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/refresh-token", json={})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_new_login_makes_old_refresh_token_stale(self, client: AsyncClient, make_user, test_password):
        user = await make_user(UserRole.litigant)
        first = await self._login(client, user, test_password)
        await self._login(client, user, test_password)
        client.cookies.clear()

        response = await client.post("/api/v1/auth/refresh-token", json={"refresh_token": first["refresh_token"]})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_logout_makes_refresh_token_stale(self, client: AsyncClient, make_user, test_password):
        user = await make_user(UserRole.litigant)
        tokens = await self._login(client, user, test_password)
        client.cookies.clear()
        headers = {"Authorization": f"Bearer {tokens['access_token']}"}

        response = await client.post("/api/v1/auth/logout", headers=headers)
        assert response.status_code == status.HTTP_200_OK

        response = await client.post("/api/v1/auth/refresh-token", json={"refresh_token": tokens["refresh_token"]})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestChangePassword:
    async def test_change_password(self, client: AsyncClient, make_user, test_password):
        user = await make_user(UserRole.litigant)
        login = await client.post("/api/v1/auth/login", json={"email": user.email, "password": test_password})
        tokens = login.json()["tokens"]
        client.cookies.clear()
        headers = {"Authorization": f"Bearer {tokens['access_token']}"}

        response = await client.post(
            "/api/v1/auth/change-password",
            json={"old_password": test_password, "new_password": "brand-new-secret"},
            headers=headers,
        )
        assert response.status_code == status.HTTP_200_OK

        stale = await client.post("/api/v1/auth/refresh-token", json={"refresh_token": tokens["refresh_token"]})
        assert stale.status_code == status.HTTP_401_UNAUTHORIZED

        old_login = await client.post("/api/v1/auth/login", json={"email": user.email, "password": test_password})
        assert old_login.status_code == status.HTTP_401_UNAUTHORIZED
        new_login = await client.post("/api/v1/auth/login", json={"email": user.email, "password": "brand-new-secret"})
        assert new_login.status_code == status.HTTP_200_OK

    async def test_wrong_old_password(self, client: AsyncClient, public_user, headers_for):
        response = await client.post(
            "/api/v1/auth/change-password",
            json={"old_password": "not-it", "new_password": "brand-new-secret"},
            headers=headers_for(public_user),
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    async def test_new_password_over_72_bytes(self, client: AsyncClient, public_user, headers_for, test_password):
        response = await client.post(
            "/api/v1/auth/change-password",
            json={"old_password": test_password, "new_password": "é" * 40},
            headers=headers_for(public_user),
        )
        assert response.status_code == 422
