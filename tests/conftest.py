import os
import tempfile
from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest

# Settings are read at import time, so the test environment goes first
TEST_DB_PATH = os.path.join(tempfile.gettempdir(), f"judiciary_test_{os.getpid()}.db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["ACCESS_TOKEN_SECRET"] = "test-access-secret"
os.environ["REFRESH_TOKEN_SECRET"] = "test-refresh-secret"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["DB_CREATE_TABLES"] = "false"
os.environ["ENVIRONMENT"] = "test"

from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import AsyncSessionLocal, engine
from app.db.base import Base
from app.core.security import get_password_hash
from app.crud import case as case_crud
from app.crud import case_type as case_type_crud
from app.crud import court as court_crud
from app.crud import user as user_crud
from app.db.models import CaseCategory, CourtType, UserRole
from app.services.token_service import token_service
from main import app

TEST_PASSWORD = "test_password123"


@pytest.fixture(autouse=True)
async def setup_database() -> AsyncGenerator[None, None]:
    """Fresh schema for every test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    async with LifespanManager(app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield client


@pytest.fixture
def test_password() -> str:
    return TEST_PASSWORD


@pytest.fixture
def make_user(db):
    """Factory creating users directly in the database."""
    async def _make_user(role: UserRole = UserRole.public, username: str = None, **overrides):
        username = username or f"{role.value}_user"
        data = {
            "username": username,
            "email": f"{username}@example.com",
            "full_name": f"{role.value.title()} User",
            "role": role,
            "password_hash": get_password_hash(overrides.pop("password", TEST_PASSWORD)),
            "is_verified": True,
        }
        if role == UserRole.lawyer:
            data["bar_council_id"] = f"BAR/{username}"
        data.update(overrides)
        return await user_crud.create_user(db, data)
    return _make_user


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {token_service.issue_access_token(user).token}"}


@pytest.fixture
async def admin(make_user):
    return await make_user(UserRole.admin)


@pytest.fixture
async def judge(make_user):
    return await make_user(UserRole.judge)


@pytest.fixture
async def clerk(make_user):
    return await make_user(UserRole.clerk)


@pytest.fixture
async def public_user(make_user):
    return await make_user(UserRole.public)


@pytest.fixture
async def court(db):
    return await court_crud.create_court(db, {
        "name": "High Court of Delhi",
        "code": "DLHC",
        "type": CourtType.high,
        "state": "Delhi",
        "city": "New Delhi",
        "address": "Sher Shah Road",
    })


@pytest.fixture
async def case_type(db):
    return await case_type_crud.create_case_type(db, {
        "name": "Civil Suit",
        "code": "CS",
        "category": CaseCategory.civil,
    })


@pytest.fixture
def make_case(db, court, case_type, clerk):
    async def _make_case(case_number: str = "CS/1/2024", filer=None, **overrides):
        data = {
            "case_number": case_number,
            "title": f"Case {case_number}",
            "court_id": court.id,
            "case_type_id": case_type.id,
            "filed_by_id": (filer or clerk).id,
            "filing_date": datetime(2024, 1, 15, tzinfo=timezone.utc),
        }
        data.update(overrides)
        return await case_crud.create_case(db, data)
    return _make_case


@pytest.fixture
async def case(make_case):
    return await make_case()


@pytest.fixture
def headers_for():
    return auth_headers
