"""Pydantic request/response schemas for sf_gateway.

All responses are wrapped in ApiResponse at the router layer.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.sf_gateway.auth.password import MAX_PASSWORD_BYTES, password_fits


def _check_password_bytes(v: str) -> str:
    if not password_fits(v):
        raise ValueError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
    return v


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=MAX_PASSWORD_BYTES)
    name: str | None = Field(default=None, min_length=2, max_length=255)

    @field_validator("password")
    @classmethod
    def password_within_bcrypt_limit(cls, v: str) -> str:
        return _check_password_bytes(v)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., max_length=MAX_PASSWORD_BYTES)

    @field_validator("password")
    @classmethod
    def password_within_bcrypt_limit(cls, v: str) -> str:
        return _check_password_bytes(v)


class RefreshRequest(BaseModel):
    refresh_token: str


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetConfirm(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=MAX_PASSWORD_BYTES)

    @field_validator("new_password")
    @classmethod
    def password_within_bcrypt_limit(cls, v: str) -> str:
        return _check_password_bytes(v)


class UserInfo(BaseModel):
    """Minimal user info embedded in responses."""

    user_id: str
    email: str
    name: str | None = None
    role: str


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    name: str | None = None
    created_at: str


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int = 1800  # 30 minutes in seconds
    user: UserInfo


class RefreshResponse(BaseModel):
    access_token: str
    expires_in: int = 1800
