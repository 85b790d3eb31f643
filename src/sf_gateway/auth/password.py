"""bcrypt helpers for passwords and password-reset tokens.

Uses the ``bcrypt`` library directly (>=4.0); passlib is unmaintained and
incompatible with bcrypt >=4.

bcrypt only looks at the first 72 bytes of its input and bcrypt >=5 refuses
anything longer, so passwords are capped at MAX_PASSWORD_BYTES of UTF-8.
"""

import secrets

import bcrypt

MAX_PASSWORD_BYTES = 72

# Reset tokens are 64 hex chars, inside the bcrypt input limit
_RESET_TOKEN_BYTES = 32


def password_fits(plain: str) -> bool:
    """True if *plain* is within the bcrypt input limit once UTF-8 encoded."""
    return len(plain.encode("utf-8")) <= MAX_PASSWORD_BYTES


def hash_password(plain: str) -> str:
    """Hash a plain-text password with bcrypt. Returns a utf-8 hash string.

    Raises ValueError for passwords over MAX_PASSWORD_BYTES; request schemas
    reject those before they get here.
    """
    if not password_fits(plain):
        raise ValueError(f"password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
    hashed_bytes: bytes = bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt())
    return hashed_bytes.decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a plain-text password against a bcrypt hash.

    Over-long input can never match a stored hash, so it is simply False.
    """
    if not password_fits(plain):
        return False
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


def generate_reset_token() -> tuple[str, str]:
    """Return ``(plain_token, token_hash)``; only the hash is stored."""
    token = secrets.token_hex(_RESET_TOKEN_BYTES)
    return token, hash_password(token)
