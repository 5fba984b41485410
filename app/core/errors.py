"""
Error taxonomy shared by services and the HTTP layer.

Services raise subclasses of AppError carrying a typed ``kind``. The
exception handlers registered by ``register_exception_handlers`` are the only
place where a kind is mapped to an HTTP status code.
"""
import logging
from enum import Enum
from typing import Any, Dict, Iterable, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.core.config import settings

logger = logging.getLogger(__name__)

GENERIC_AUTH_MESSAGE = "Invalid or expired credentials"


class ErrorKind(str, Enum):
    authentication_failure = "authentication_failure"
    authorization_failure = "authorization_failure"
    invalid_transition = "invalid_transition"
    invalid_request = "invalid_request"
    not_found = "not_found"
    conflict = "conflict"
    concurrent_modification = "concurrent_modification"


class TokenFailure(str, Enum):
    missing = "missing"
    expired = "expired"
    invalid_signature = "invalid_signature"
    malformed = "malformed"
    stale = "stale"
    unknown_identity = "unknown_identity"
    bad_credentials = "bad_credentials"


class DenyReason(str, Enum):
    unauthenticated = "unauthenticated"
    role_not_permitted = "role_not_permitted"
    not_owner = "not_owner"


class AppError(Exception):
    kind: ErrorKind

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def payload(self) -> Dict[str, Any]:
        return {"detail": self.message, "error": self.kind.value}


class AuthenticationFailure(AppError):
    """
    Missing, invalid, expired or stale credentials.

    ``reason`` is for server-side logging only; clients always receive the
    same generic message.
    """
    kind = ErrorKind.authentication_failure

    def __init__(self, reason: TokenFailure, message: Optional[str] = None):
        self.reason = reason
        super().__init__(message or f"Authentication failed: {reason.value}")

    def payload(self) -> Dict[str, Any]:
        return {"detail": GENERIC_AUTH_MESSAGE, "error": self.kind.value}


class TokenError(AuthenticationFailure):
    """Raised by the token service when a token fails verification."""


class AuthorizationFailure(AppError):
    kind = ErrorKind.authorization_failure

    def __init__(
        self,
        reason: DenyReason,
        role: Optional[str] = None,
        required_roles: Iterable[str] = (),
    ):
        self.reason = reason
        self.role = role
        self.required_roles = sorted(required_roles)
        if reason == DenyReason.role_not_permitted:
            message = (
                f"Role {role} is not allowed to access this resource; "
                f"requires one of: {', '.join(self.required_roles)}"
            )
        elif reason == DenyReason.not_owner:
            message = "Only the owner or a permitted role may access this resource"
        else:
            message = "Unauthorized request"
        super().__init__(message)

    def payload(self) -> Dict[str, Any]:
        body = super().payload()
        body["reason"] = self.reason.value
        if self.required_roles:
            body["required_roles"] = self.required_roles
        return body


class InvalidTransition(AppError):
    kind = ErrorKind.invalid_transition

    def __init__(self, entity: str, field: str, current: Optional[str], attempted: Optional[str], message: Optional[str] = None):
        self.entity = entity
        self.field = field
        self.current = current
        self.attempted = attempted
        super().__init__(
            message or f"Invalid {entity} {field} transition: {current} -> {attempted}"
        )

    def payload(self) -> Dict[str, Any]:
        body = super().payload()
        body.update({
            "entity": self.entity,
            "field": self.field,
            "current": self.current,
            "attempted": self.attempted,
        })
        return body


class InvalidRequest(AppError):
    kind = ErrorKind.invalid_request


class NotFound(AppError):
    kind = ErrorKind.not_found

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"{resource} not found")


class Conflict(AppError):
    kind = ErrorKind.conflict


class ConcurrentModification(AppError):
    kind = ErrorKind.concurrent_modification

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"{resource} was modified by another request; reload and retry")


STATUS_BY_KIND = {
    ErrorKind.authentication_failure: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.authorization_failure: status.HTTP_403_FORBIDDEN,
    ErrorKind.invalid_transition: status.HTTP_400_BAD_REQUEST,
    ErrorKind.invalid_request: status.HTTP_400_BAD_REQUEST,
    ErrorKind.not_found: status.HTTP_404_NOT_FOUND,
    ErrorKind.conflict: status.HTTP_409_CONFLICT,
    ErrorKind.concurrent_modification: status.HTTP_409_CONFLICT,
}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, AuthenticationFailure):
        logger.warning(f"Authentication failed on {request.url.path}: {exc.reason.value}")
        return JSONResponse(
            status_code=STATUS_BY_KIND[exc.kind],
            content=exc.payload(),
            headers={"WWW-Authenticate": "Bearer"},
        )
    if isinstance(exc, AuthorizationFailure):
        logger.warning(f"Authorization denied on {request.url.path}: {exc.reason.value}")
    return JSONResponse(status_code=STATUS_BY_KIND[exc.kind], content=exc.payload())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    content = {"detail": "Internal server error", "error": "internal_error"}
    if not settings.is_production:
        content["exception"] = repr(exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
