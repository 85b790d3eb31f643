"""User domain service: register, login, refresh, password reset.

All DB operations use the injected AsyncSession. Transactions are managed
by the caller (router layer) via `async with db.begin()`.
"""

import logging
import uuid
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.sf_common.datetime_utils import utc_now
from src.sf_common.enums import UserRole
from src.sf_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    PasswordTooLongError,
)
from src.sf_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.sf_gateway.auth.password import (
    generate_reset_token,
    hash_password,
    password_fits,
    verify_password,
)
from src.sf_gateway.user.db_models import UserModel

logger = logging.getLogger("sf.auth")


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """Stateless service: instantiate once, reuse across requests."""

    async def get_by_id(self, user_id: str | uuid.UUID, db: AsyncSession) -> UserModel | None:
        try:
            uid = user_id if isinstance(user_id, uuid.UUID) else uuid.UUID(str(user_id))
        except ValueError:
            return None
        result = await db.execute(select(UserModel).where(UserModel.id == uid))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str, db: AsyncSession) -> UserModel | None:
        result = await db.execute(
            select(UserModel).where(UserModel.email == _normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def register(
        self,
        email: str,
        password: str,
        name: str | None,
        db: AsyncSession,
    ) -> UserModel:
        """Register a new standard user.

        The caller must wrap this in `async with db.begin()`.
        """
        if not password_fits(password):
            raise PasswordTooLongError()
        # DB UNIQUE constraint is the final guard
        if await self.get_by_email(email, db) is not None:
            raise EmailExistsError()

        user = UserModel(
            email=_normalize_email(email),
            name=name,
            password_hash=hash_password(password),
            role=UserRole.USER.value,
            is_active=True,
        )
        db.add(user)
        await db.flush()  # Get user.id without committing
        logger.info("Registered user %s", user.id)
        return user

    async def login(
        self,
        email: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str, str]:
        """Authenticate user and return (user, access_token, refresh_token).

        Unknown email, provider-only account (no password) and wrong password
        all raise InvalidCredentialsError, so responses do not reveal which
        emails are registered.
        """
        user = await self.get_by_email(email, db)

        if (
            user is None
            or not user.password_hash
            or not verify_password(password, user.password_hash)
        ):
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountDisabledError()

        return user, create_access_token(user), create_refresh_token(user)

    async def refresh(self, refresh_token: str, db: AsyncSession) -> str:
        """Validate refresh token and return a new access token.

        The role claim is re-read from the users table so that a promotion or
        demotion takes effect on the next refresh.
        """
        payload = decode_token(refresh_token, expected_type="refresh")
        user = await self.get_by_id(str(payload.get("sub", "")), db)
        if user is None:
            raise InvalidRefreshTokenError()
        if not user.is_active:
            raise AccountDisabledError()
        return create_access_token(user)

    async def request_password_reset(self, email: str, db: AsyncSession) -> str | None:
        """Store a fresh reset token hash for *email*; return the reset URL.

        Returns None when there is no password account for *email*. Callers
        must answer identically in both cases.
        """
        user = await self.get_by_email(email, db)
        if user is None or not user.password_hash:
            logger.warning("Password reset requested for unknown email")
            return None

        secret, secret_hash = generate_reset_token()
        user.password_reset_token_hash = secret_hash
        user.password_reset_expires = utc_now() + timedelta(
            minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES
        )
        await db.flush()
        logger.info("Password reset issued for user %s", user.id)
        # The user id prefix locates the row; only the secret part is hashed
        return f"{settings.APP_URL}/reset-password?token={user.id}.{secret}"

    async def reset_password(self, token: str, new_password: str, db: AsyncSession) -> bool:
        """Consume a reset token and set *new_password*; False if the token is invalid.

        A wrong secret for an existing reset invalidates that reset. That write
        must be committed, so this returns False instead of raising and the
        router raises InvalidResetTokenError after the transaction closes.
        """
        if not password_fits(new_password):
            raise PasswordTooLongError()
        user_id, _, secret = token.partition(".")
        if not secret:
            return False
        user = await self.get_by_id(user_id, db)
        if (
            user is None
            or user.password_reset_token_hash is None
            or user.password_reset_expires is None
            or user.password_reset_expires <= utc_now()
        ):
            return False

        if not verify_password(secret, user.password_reset_token_hash):
            user.password_reset_token_hash = None
            user.password_reset_expires = None
            await db.flush()
            logger.warning("Invalid password reset token for user %s; reset cleared", user.id)
            return False

        user.password_hash = hash_password(new_password)
        user.password_reset_token_hash = None
        user.password_reset_expires = None
        await db.flush()
        logger.info("Password reset completed for user %s", user.id)
        return True
