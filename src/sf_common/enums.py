"""Global enums; must match DB CHECK constraints exactly."""

from enum import Enum


class UserRole(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class GuardDecision(str, Enum):
    """Outcome of the admin route guard for a single request."""
    PASS_THROUGH = "PASS_THROUGH"            # outside the protected prefix
    PUBLIC_ADMIN_PATH = "PUBLIC_ADMIN_PATH"  # the admin sign-in page itself
    NO_TOKEN = "NO_TOKEN"
    TOKEN_WRONG_ROLE = "TOKEN_WRONG_ROLE"
    AUTHORIZED = "AUTHORIZED"

    @property
    def allowed(self) -> bool:
        return self not in (GuardDecision.NO_TOKEN, GuardDecision.TOKEN_WRONG_ROLE)
