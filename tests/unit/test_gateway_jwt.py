"""Unit tests for session token issuing and local verification."""

from datetime import timedelta
from unittest.mock import patch

import pytest
from jose import jwt

from config.settings import settings
from src.sf_common.enums import UserRole
from src.sf_common.errors import InvalidCredentialsError, InvalidRefreshTokenError
from src.sf_gateway.auth.jwt_handler import (
    SessionClaims,
    create_access_token,
    create_refresh_token,
    decode_token,
    verify_session,
)
from tests.factories import make_user


def test_access_token_contains_identity_and_role_claims() -> None:
    user = make_user(UserRole.ADMIN)
    payload = jwt.get_unverified_claims(create_access_token(user))
    assert payload["sub"] == str(user.id)
    assert payload["email"] == "alice@example.com"
    assert payload["name"] == "Alice"
    assert payload["role"] == "ADMIN"
    assert payload["type"] == "access"


def test_refresh_token_type_claim() -> None:
    payload = jwt.get_unverified_claims(create_refresh_token(make_user()))
    assert payload["type"] == "refresh"


def test_decode_valid_access_token() -> None:
    user = make_user()
    payload = decode_token(create_access_token(user), expected_type="access")
    assert payload["sub"] == str(user.id)


def test_access_token_used_as_refresh_raises_error() -> None:
    with pytest.raises(InvalidRefreshTokenError):
        decode_token(create_access_token(make_user()), expected_type="refresh")


def test_refresh_token_used_as_access_raises_error() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_token(create_refresh_token(make_user()), expected_type="access")


def test_expired_access_token_raises_credentials_error() -> None:
    with patch(
        "src.sf_gateway.auth.jwt_handler._ACCESS_EXPIRE",
        timedelta(seconds=-1),
    ):
        token = create_access_token(make_user())
    with pytest.raises(InvalidCredentialsError):
        decode_token(token, expected_type="access")


class TestVerifySession:
    def test_valid_admin_token(self) -> None:
        user = make_user(UserRole.ADMIN, email="boss@example.com", name="Boss")
        claims = verify_session(create_access_token(user))
        assert claims == SessionClaims(
            user_id=str(user.id),
            role=UserRole.ADMIN,
            email="boss@example.com",
            name="Boss",
        )
        assert claims.is_admin

    def test_standard_user_is_not_admin(self) -> None:
        claims = verify_session(create_access_token(make_user(UserRole.USER)))
        assert claims is not None
        assert not claims.is_admin

    @pytest.mark.parametrize("token", [None, "", "not-a-jwt", "a.b.c"])
    def test_absent_or_malformed_token_is_none(self, token: str | None) -> None:
        assert verify_session(token) is None

    def test_tampered_token_is_none(self) -> None:
        token = create_access_token(make_user(UserRole.ADMIN))
        assert verify_session(token[:-4] + "xxxx") is None

    def test_expired_token_is_none(self) -> None:
        with patch(
            "src.sf_gateway.auth.jwt_handler._ACCESS_EXPIRE",
            timedelta(seconds=-1),
        ):
            token = create_access_token(make_user(UserRole.ADMIN))
        assert verify_session(token) is None

    def test_refresh_token_is_not_a_session(self) -> None:
        assert verify_session(create_refresh_token(make_user(UserRole.ADMIN))) is None

    def test_token_signed_with_other_secret_is_none(self) -> None:
        forged = jwt.encode(
            {"sub": "u1", "role": "ADMIN", "type": "access"},
            "some-other-secret",
            algorithm="HS256",
        )
        assert verify_session(forged) is None

    def test_unknown_role_is_none(self) -> None:
        token = jwt.encode(
            {"sub": "u1", "role": "SUPERUSER", "type": "access"},
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )
        assert verify_session(token) is None

    def test_missing_subject_is_none(self) -> None:
        token = jwt.encode(
            {"role": "ADMIN", "type": "access"},
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )
        assert verify_session(token) is None
