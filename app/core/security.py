import hashlib
import hmac
import logging

from passlib.context import CryptContext

from app.core.config import settings
from app.core.errors import InvalidRequest

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.PASSWORD_HASH_ROUNDS,
)


def is_password_too_long(password: str) -> bool:
    """Return True if password exceeds the bcrypt 72-byte limit."""
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


def get_password_hash(password: str) -> str:
    """Hash a password with a per-call random salt."""
    if is_password_too_long(password):
        raise InvalidRequest("Password must be at most 72 bytes")
    return pwd_context.hash(password)


def verify_password_hash(plain_password: str, hashed_password: str) -> bool:
    """Check a candidate password against a stored hash."""
    if not hashed_password or is_password_too_long(plain_password):
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError as e:
        logger.warning(f"Password check failed: unreadable hash ({e})")
        return False


def token_digest(token: str) -> str:
    """SHA-256 hex digest used to store refresh tokens at rest."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def digests_match(token: str, stored_digest: str) -> bool:
    if not stored_digest:
        return False
    return hmac.compare_digest(token_digest(token), stored_digest)
