import uuid
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from app.core.errors import AuthenticationFailure, TokenError, TokenFailure
from app.crud import user as user_crud
from app.db.models import UserRole
from app.services.token_service import TokenService, token_service

ACCESS_SECRET = "test-access-secret"
REFRESH_SECRET = "test-refresh-secret"


def service(**overrides) -> TokenService:
    options = {
        "access_secret": ACCESS_SECRET,
        "refresh_secret": REFRESH_SECRET,
        "access_ttl": timedelta(minutes=15),
        "refresh_ttl": timedelta(days=7),
    }
    options.update(overrides)
    return TokenService(**options)


@pytest.fixture
async def user(make_user):
    return await make_user(UserRole.lawyer, username="advocate")


class TestAccessTokens:
    async def test_round_trip(self, user):
        issued = token_service.issue_access_token(user)
        claims = token_service.verify_access_token(issued.token)
        assert claims.user_id == user.id
        assert claims.email == user.email
        assert claims.username == user.username
        assert claims.role == "lawyer"
        assert claims.expires_at == issued.expires_at

    async def test_default_lifetime_is_fifteen_minutes(self, user):
        issued = token_service.issue_access_token(user)
        remaining = issued.expires_at - datetime.now(timezone.utc)
        assert timedelta(minutes=14) < remaining <= timedelta(minutes=15)

    async def test_claims_carry_type_and_jti(self, user):
        first = token_service.issue_access_token(user)
        second = token_service.issue_access_token(user)
        payload = jwt.get_unverified_claims(first.token)
        assert payload["type"] == "access"
        assert payload["jti"] != jwt.get_unverified_claims(second.token)["jti"]

    async def test_expired(self, user):
        issued = service(access_ttl=timedelta(seconds=-5)).issue_access_token(user)
        with pytest.raises(TokenError) as exc_info:
            token_service.verify_access_token(issued.token)
        assert exc_info.value.reason == TokenFailure.expired

    async def test_wrong_secret(self, user):
        forged = service(access_secret="someone-else").issue_access_token(user)
        with pytest.raises(TokenError) as exc_info:
            token_service.verify_access_token(forged.token)
        assert exc_info.value.reason == TokenFailure.invalid_signature

    def test_garbage_is_malformed(self):
        with pytest.raises(TokenError) as exc_info:
            token_service.verify_access_token("not-a-token")
        assert exc_info.value.reason == TokenFailure.malformed

    async def test_refresh_token_is_not_an_access_token(self, user):
        refresh = token_service.create_refresh_token(user)
        with pytest.raises(TokenError):
            token_service.verify_access_token(refresh.token)

    async def test_access_signed_token_with_refresh_type_is_malformed(self, user):
        now = int(datetime.now(timezone.utc).timestamp())
        token = jwt.encode(
            {"sub": str(user.id), "type": "refresh", "iat": now, "exp": now + 60, "jti": uuid.uuid4().hex},
            ACCESS_SECRET,
            algorithm="HS256",
        )
        with pytest.raises(TokenError) as exc_info:
            token_service.verify_access_token(token)
        assert exc_info.value.reason == TokenFailure.malformed

    def test_secrets_must_differ(self):
        with pytest.raises(ValueError):
            service(refresh_secret=ACCESS_SECRET)


class TestRefreshTokens:
    async def test_second_issue_makes_first_stale(self, db, user):
        first = await token_service.issue_refresh_token(db, user)
        second = await token_service.issue_refresh_token(db, user)

        with pytest.raises(TokenError) as exc_info:
            await token_service.verify_refresh_token(db, first.token)
        assert exc_info.value.reason == TokenFailure.stale

        claims = await token_service.verify_refresh_token(db, second.token)
        assert claims.user_id == user.id

    async def test_only_digest_is_stored(self, db, user):
        issued = await token_service.issue_refresh_token(db, user)
        stored = await user_crud.get_user(db, user.id)
        assert stored.refresh_token_hash != issued.token
        assert len(stored.refresh_token_hash) == 64

    async def test_refresh_issues_access_token(self, db, user):
        issued = await token_service.issue_refresh_token(db, user)
        result = await token_service.refresh(db, issued.token)
        assert token_service.verify_access_token(result.access.token).user_id == user.id
        assert result.refresh is None
        # Rotation is off by default, so the same token keeps working
        await token_service.verify_refresh_token(db, issued.token)

    async def test_expired_refresh_never_issues_access(self, db, user):
        expired = await service(refresh_ttl=timedelta(seconds=-5)).issue_refresh_token(db, user)
        with pytest.raises(AuthenticationFailure) as exc_info:
            await token_service.refresh(db, expired.token)
        assert exc_info.value.reason == TokenFailure.expired

    async def test_missing_refresh_token(self, db):
        with pytest.raises(TokenError) as exc_info:
            await token_service.refresh(db, None)
        assert exc_info.value.reason == TokenFailure.missing

    async def test_revoked_token_is_stale(self, db, user):
        issued = await token_service.issue_refresh_token(db, user)
        await token_service.revoke_refresh_token(db, user.id)
        with pytest.raises(TokenError) as exc_info:
            await token_service.refresh(db, issued.token)
        assert exc_info.value.reason == TokenFailure.stale

    async def test_unknown_user(self, db, user):
        orphan = service().create_refresh_token(user)
        other = await user_crud.get_user(db, user.id)
        await db.delete(other)
        await db.commit()
        with pytest.raises(TokenError) as exc_info:
            await token_service.verify_refresh_token(db, orphan.token)
        assert exc_info.value.reason == TokenFailure.unknown_identity

    async def test_rotation_on_use(self, db, user):
        rotating = service(rotate_on_use=True)
        original = await rotating.issue_refresh_token(db, user)
        result = await rotating.refresh(db, original.token)

        assert result.refresh is not None
        with pytest.raises(TokenError) as exc_info:
            await rotating.refresh(db, original.token)
        assert exc_info.value.reason == TokenFailure.stale
        await rotating.verify_refresh_token(db, result.refresh.token)
