"""Session token creation and local verification.

Tokens are HS256 JWTs signed with JWT_SECRET. Besides the subject they carry
the caller's email, display name and role so that the admin route guard can
authorize a request without a database round trip. The role claim is copied
from the persisted user whenever a token is issued or refreshed; nothing else
writes it.

Two decode entry points:
  - decode_token(): strict, raises AppError subclasses. Used by API
    dependencies that answer 401.
  - verify_session(): never raises, returns None for anything unusable.
    Used by the route guard, which treats bad tokens as "no session".
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Protocol

from jose import JWTError, jwt

from config.settings import settings
from src.sf_common.datetime_utils import utc_now
from src.sf_common.enums import UserRole
from src.sf_common.errors import InvalidCredentialsError, InvalidRefreshTokenError

logger = logging.getLogger("sf.auth")

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
_REFRESH_EXPIRE = timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS)


class TokenSubject(Protocol):
    """Anything with the fields a token is minted from (UserModel in practice)."""

    id: Any
    email: str
    name: str | None
    role: Any


@dataclass(frozen=True)
class SessionClaims:
    """The locally verified identity carried by a session token."""

    user_id: str
    role: UserRole
    email: str | None = None
    name: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def _role_value(role: Any) -> str:
    return role.value if isinstance(role, UserRole) else str(role)


def _encode(user: TokenSubject, token_type: str, expires: timedelta) -> str:
    now = utc_now()
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "name": user.name,
        "role": _role_value(user.role),
        "type": token_type,
        "iat": now,
        "exp": now + expires,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def create_access_token(user: TokenSubject) -> str:
    """Issue a short-lived access token (default: 30 min)."""
    return _encode(user, "access", _ACCESS_EXPIRE)


def create_refresh_token(user: TokenSubject) -> str:
    """Issue a long-lived refresh token (default: 7 days).

    Refresh tokens are not rotated on use; /auth/refresh only mints a new
    access token with the role re-read from the database.
    """
    return _encode(user, "refresh", _REFRESH_EXPIRE)


def decode_token(token: str, expected_type: str) -> dict[str, Any]:
    """Decode and validate a JWT token.

    Args:
        token: Raw JWT string.
        expected_type: "access" or "refresh". Strictly enforced to prevent
                       token type confusion attacks.

    Returns:
        Decoded payload dict with at minimum {"sub": ..., "type": ...}.

    Raises:
        InvalidCredentialsError: Token invalid/expired and expected_type="access".
        InvalidRefreshTokenError: Token invalid/expired and expected_type="refresh".
    """
    payload: dict[str, Any] = {}
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        _raise_auth_error(expected_type)

    if payload.get("type") != expected_type:
        _raise_auth_error(expected_type)

    return payload


def verify_session(token: str | None) -> SessionClaims | None:
    """Verify an access token locally; None for absent or unusable tokens."""
    if not token:
        return None
    try:
        payload = decode_token(token, expected_type="access")
    except InvalidCredentialsError:
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None
    try:
        role = UserRole(payload.get("role"))
    except ValueError:
        logger.info("Rejected session token for %s with unknown role %r", user_id, payload.get("role"))
        return None

    return SessionClaims(
        user_id=str(user_id),
        role=role,
        email=payload.get("email"),
        name=payload.get("name"),
    )


def _raise_auth_error(expected_type: str) -> None:
    """Raise the appropriate error based on which token type was expected."""
    if expected_type == "access":
        raise InvalidCredentialsError()
    raise InvalidRefreshTokenError()
