"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Admin
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/User ---

class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "User with this email already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Invalid email or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Refresh token is invalid or expired", 401)


class InvalidResetTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Invalid or expired password reset token", 400)


class PasswordTooLongError(AppError):
    def __init__(self) -> None:
        super().__init__(1006, "Password cannot be longer than 72 bytes", 422)


# --- 2xxx: Admin ---

class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(2001, "Administrator role required", 403)


class UserNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(2002, f"User not found: {user_id}", 404)


class SelfDemotionError(AppError):
    def __init__(self) -> None:
        super().__init__(2003, "Administrators cannot remove their own admin role", 422)


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self, retry_after_seconds: int = 60) -> None:
        super().__init__(9001, "Too Many Requests", 429)
        self.retry_after_seconds = retry_after_seconds


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
