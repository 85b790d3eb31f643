"""Unit tests for user service (mocked DB)."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from jose import jwt

from src.sf_common.datetime_utils import utc_now
from src.sf_common.enums import UserRole
from src.sf_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    PasswordTooLongError,
)
from src.sf_gateway.auth.jwt_handler import create_access_token, create_refresh_token
from src.sf_gateway.auth.password import hash_password
from src.sf_gateway.user.service import UserService
from tests.factories import make_user


def _result(value: object) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


@pytest.fixture
def mock_db() -> AsyncMock:
    db = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def service() -> UserService:
    return UserService()


class TestRegister:
    async def test_duplicate_email_raises_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(make_user()))

        with pytest.raises(EmailExistsError):
            await service.register("alice@example.com", "secret1", None, mock_db)
        mock_db.add.assert_not_called()

    async def test_new_user_is_standard_role_with_hashed_password(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(None))

        user = await service.register("  Alice@Example.com ", "secret1", "Alice", mock_db)

        mock_db.add.assert_called_once_with(user)
        mock_db.flush.assert_awaited_once()
        assert user.email == "alice@example.com"
        assert user.role == UserRole.USER.value
        assert user.password_hash != "secret1"


class TestLogin:
    async def test_unknown_email_raises_credentials_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(None))

        with pytest.raises(InvalidCredentialsError):
            await service.login("nobody@example.com", "secret1", mock_db)

    async def test_provider_only_account_raises_credentials_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(make_user(password_hash=None)))

        with pytest.raises(InvalidCredentialsError):
            await service.login("alice@example.com", "secret1", mock_db)

    async def test_wrong_password_raises_credentials_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(make_user()))

        with (
            patch("src.sf_gateway.user.service.verify_password", return_value=False),
            pytest.raises(InvalidCredentialsError),
        ):
            await service.login("alice@example.com", "wrong-pass", mock_db)

    async def test_disabled_account_raises_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(make_user(is_active=False)))

        with (
            patch("src.sf_gateway.user.service.verify_password", return_value=True),
            pytest.raises(AccountDisabledError),
        ):
            await service.login("alice@example.com", "secret1", mock_db)

    async def test_success_returns_user_and_token_pair_with_role(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        user = make_user(UserRole.ADMIN)
        mock_db.execute = AsyncMock(return_value=_result(user))

        with patch("src.sf_gateway.user.service.verify_password", return_value=True):
            returned_user, access, refresh = await service.login(
                "alice@example.com", "secret1", mock_db
            )

        assert returned_user is user
        assert access != refresh
        assert jwt.get_unverified_claims(access)["role"] == "ADMIN"


class TestRefresh:
    async def test_invalid_refresh_token_raises_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh("not.a.real.token", mock_db)

    async def test_access_token_used_as_refresh_raises_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh(create_access_token(make_user()), mock_db)

    async def test_role_is_reread_from_database(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        user = make_user(UserRole.USER)
        refresh = create_refresh_token(user)
        # Promoted after the refresh token was issued
        user.role = UserRole.ADMIN.value
        mock_db.execute = AsyncMock(return_value=_result(user))

        access = await service.refresh(refresh, mock_db)

        assert jwt.get_unverified_claims(access)["role"] == "ADMIN"

    async def test_deleted_user_cannot_refresh(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        refresh = create_refresh_token(make_user())
        mock_db.execute = AsyncMock(return_value=_result(None))

        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh(refresh, mock_db)

    async def test_disabled_user_cannot_refresh(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        user = make_user(is_active=False)
        mock_db.execute = AsyncMock(return_value=_result(user))

        with pytest.raises(AccountDisabledError):
            await service.refresh(create_refresh_token(user), mock_db)


class TestPasswordReset:
    async def test_unknown_email_returns_none(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(None))
        assert await service.request_password_reset("nobody@example.com", mock_db) is None

    async def test_request_stores_hash_not_plain_token(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        user = make_user()
        mock_db.execute = AsyncMock(return_value=_result(user))

        url = await service.request_password_reset("alice@example.com", mock_db)

        assert url is not None
        token = url.split("token=", 1)[1]
        assert token.startswith(f"{user.id}.")
        assert user.password_reset_token_hash is not None
        assert token.split(".", 1)[1] not in user.password_reset_token_hash
        assert user.password_reset_expires > utc_now() + timedelta(minutes=59)

    async def test_reset_with_valid_token_sets_password_and_clears_reset(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        user = make_user()
        mock_db.execute = AsyncMock(return_value=_result(user))
        url = await service.request_password_reset("alice@example.com", mock_db)
        token = url.split("token=", 1)[1]
        old_hash = user.password_hash

        assert await service.reset_password(token, "new-secret", mock_db) is True

        assert user.password_hash != old_hash
        assert user.password_reset_token_hash is None
        assert user.password_reset_expires is None

    async def test_wrong_secret_clears_pending_reset(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        user = make_user()
        user.password_reset_token_hash = hash_password("the-real-secret")
        user.password_reset_expires = utc_now() + timedelta(hours=1)
        mock_db.execute = AsyncMock(return_value=_result(user))
        old_hash = user.password_hash

        assert await service.reset_password(f"{user.id}.guess", "new-secret", mock_db) is False

        assert user.password_hash == old_hash
        assert user.password_reset_token_hash is None
        assert user.password_reset_expires is None

    async def test_expired_reset_is_rejected(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        user = make_user()
        user.password_reset_token_hash = hash_password("secret")
        user.password_reset_expires = utc_now() - timedelta(seconds=1)
        mock_db.execute = AsyncMock(return_value=_result(user))

        assert await service.reset_password(f"{user.id}.secret", "new-secret", mock_db) is False

    async def test_malformed_token_is_rejected_without_lookup(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        assert await service.reset_password("no-separator", "new-secret", mock_db) is False
        assert await service.reset_password("not-a-uuid.secret", "new-secret", mock_db) is False
        mock_db.execute.assert_not_awaited()


class TestOverLongPasswords:
    async def test_register_refuses_hundred_character_password(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        with pytest.raises(PasswordTooLongError):
            await service.register("a@example.com", "x" * 100, None, mock_db)
        mock_db.execute.assert_not_awaited()
        mock_db.add.assert_not_called()

    async def test_login_with_hundred_character_password_is_bad_credentials(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(
            return_value=_result(make_user(password_hash=hash_password("secret1")))
        )

        with pytest.raises(InvalidCredentialsError):
            await service.login("alice@example.com", "x" * 100, mock_db)

    async def test_reset_refuses_hundred_character_password(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        user = make_user()
        with pytest.raises(PasswordTooLongError):
            await service.reset_password(f"{user.id}.secret", "x" * 100, mock_db)
        mock_db.execute.assert_not_awaited()
