from datetime import datetime, timezone
from typing import Optional, List, Any, Dict, Union
from uuid import UUID
from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
import logging
from app.core.errors import Conflict
from app.db.models import User, UserRole
from app.schemas.user import CurrentUser

logger = logging.getLogger(__name__)

# Columns a request is allowed to see about its own identity
IDENTITY_PROJECTION = (
    User.id,
    User.username,
    User.email,
    User.full_name,
    User.role,
    User.is_verified,
)


async def get_user(db: AsyncSession, user_id: Union[UUID, str]) -> Optional[User]:
    result = await db.execute(select(User).where(User.id == _as_uuid(user_id)).execution_options(populate_existing=True))
    return result.scalar_one_or_none()


async def get_identity(db: AsyncSession, user_id: Union[UUID, str]) -> Optional[CurrentUser]:
    """
    Load the request identity without the password hash or refresh token.
    """
    result = await db.execute(select(*IDENTITY_PROJECTION).where(User.id == _as_uuid(user_id)))
    row = result.first()
    if row is None:
        return None
    return CurrentUser.model_validate(dict(row._mapping))


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    """
    Get a user by email from the database.
    """
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.username == username.strip().lower()))
    return result.scalar_one_or_none()


async def get_user_by_bar_council_id(db: AsyncSession, bar_council_id: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.bar_council_id == bar_council_id))
    return result.scalar_one_or_none()


async def get_users(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 100,
    role: Optional[UserRole] = None,
    search: Optional[str] = None,
) -> List[User]:
    query = select(User)
    if role:
        query = query.where(User.role == role)
    if search:
        pattern = f"%{search.lower()}%"
        query = query.where(
            User.username.like(pattern)
            | func.lower(User.full_name).like(pattern)
            | User.email.like(pattern)
        )
    result = await db.execute(query.order_by(User.created_at.desc()).offset(skip).limit(limit))
    return list(result.scalars().all())


async def create_user(db: AsyncSession, data: Dict[str, Any]) -> User:
    """
    Insert a new user row. ``data`` must already hold a password hash.
    """
    try:
        db_user = User(**data)
        db.add(db_user)
        await db.commit()
        await db.refresh(db_user)
        logger.info(f"User created: {db_user.id} ({db_user.role.value})")
        return db_user
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Duplicate user rejected: {e.orig}")
        raise Conflict("User with email, username or bar council id already exists")
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Database error in create_user: {e}")
        raise


async def save_user(db: AsyncSession, db_user: User, changes: Optional[Dict[str, Any]] = None) -> User:
    try:
        for field, value in (changes or {}).items():
            setattr(db_user, field, value)
        await db.commit()
        await db.refresh(db_user)
        return db_user
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Duplicate user data rejected for {db_user.id}: {e.orig}")
        raise Conflict("User with email, username or bar council id already exists")
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Database error in save_user: {e}")
        raise


async def set_refresh_token_hash(db: AsyncSession, user_id: Union[UUID, str], digest: Optional[str]) -> bool:
    """
    Replace the stored refresh token digest in a single UPDATE.

    Passing ``None`` revokes whatever refresh token is outstanding.
    """
    try:
        result = await db.execute(
            update(User)
            .where(User.id == _as_uuid(user_id))
            .values(refresh_token_hash=digest, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session="fetch")
        )
        await db.commit()
        return result.rowcount == 1
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Database error in set_refresh_token_hash: {e}")
        raise


async def count_users_by_role(db: AsyncSession) -> Dict[str, int]:
    result = await db.execute(select(User.role, func.count(User.id)).group_by(User.role))
    return {role.value: count for role, count in result.all()}


def _as_uuid(value: Union[UUID, str]) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))
