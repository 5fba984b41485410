import logging
from typing import Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFound
from app.core.security import get_password_hash, verify_password_hash
from app.crud import user as user_crud

logger = logging.getLogger(__name__)


async def verify_password(db: AsyncSession, user_id: Union[UUID, str], candidate: str) -> bool:
    """
    True iff ``candidate`` matches the password most recently set for the user.
    Unknown users never verify.
    """
    db_user = await user_crud.get_user(db, user_id)
    if db_user is None:
        return False
    return verify_password_hash(candidate, db_user.password_hash)


async def set_password(db: AsyncSession, user_id: Union[UUID, str], new_plain: str) -> None:
    """
    Store a fresh salted hash and drop the stored refresh token in the same
    row update, so every other session has to log in again.
    """
    db_user = await user_crud.get_user(db, user_id)
    if db_user is None:
        raise NotFound("User")
    await user_crud.save_user(db, db_user, {
        "password_hash": get_password_hash(new_plain),
        "refresh_token_hash": None,
    })
    logger.info(f"Password changed for user {db_user.id}; refresh token revoked")
