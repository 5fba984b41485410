import uuid

import pytest

from app.core.errors import InvalidRequest, NotFound, TokenError, TokenFailure
from app.crud import user as user_crud
from app.db.models import UserRole
from app.services import credential_store
from app.services.token_service import token_service


@pytest.fixture
async def user(make_user):
    return await make_user(UserRole.litigant, username="litigant_one", password="first-password")


async def test_verify_matches_initial_password(db, user):
    assert await credential_store.verify_password(db, user.id, "first-password")
    assert not await credential_store.verify_password(db, user.id, "wrong-password")


async def test_verify_follows_latest_password(db, user):
    await credential_store.set_password(db, user.id, "second-password")
    assert await credential_store.verify_password(db, user.id, "second-password")
    assert not await credential_store.verify_password(db, user.id, "first-password")


async def test_password_is_not_stored_in_plaintext(db, user):
    await credential_store.set_password(db, user.id, "second-password")
    stored = await user_crud.get_user(db, user.id)
    assert "second-password" not in stored.password_hash
    assert stored.password_hash.startswith("$2")


async def test_same_password_hashes_differently(db, user, make_user):
    other = await make_user(UserRole.litigant, username="litigant_two", password="first-password")
    assert user.password_hash != other.password_hash


async def test_unknown_user_never_verifies(db):
    assert not await credential_store.verify_password(db, uuid.uuid4(), "anything")


async def test_set_password_for_unknown_user(db):
    with pytest.raises(NotFound):
        await credential_store.set_password(db, uuid.uuid4(), "new-password")


async def test_password_change_makes_refresh_token_stale(db, user):
    issued = await token_service.issue_refresh_token(db, user)
    await credential_store.set_password(db, user.id, "second-password")

    with pytest.raises(TokenError) as exc_info:
        await token_service.refresh(db, issued.token)
    assert exc_info.value.reason == TokenFailure.stale


async def test_password_over_bcrypt_limit_is_an_invalid_request(db, user):
    with pytest.raises(InvalidRequest):
        await credential_store.set_password(db, user.id, "é" * 40)
