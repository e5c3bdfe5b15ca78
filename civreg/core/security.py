"""Password hashing and JWT creation/verification for authentication."""

from datetime import UTC, datetime, timedelta
from typing import Any, Literal

import bcrypt
import jwt

from civreg.core.config import Settings, get_settings
from civreg.core.errors import TokenExpiredError, TokenInvalidError

TokenKind = Literal["access", "refresh"]

# Min/max lengths for credential validation.
USERNAME_MAX_LEN = 50
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 30


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    cost = rounds if rounds is not None else get_settings().BCRYPT_ROUNDS
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=cost)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def _signing(kind: TokenKind, settings: Settings) -> tuple[str, timedelta]:
    if kind == "access":
        return (
            settings.ACCESS_TOKEN_SECRET.get_secret_value(),
            timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )
    return (
        settings.REFRESH_TOKEN_SECRET.get_secret_value(),
        timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES),
    )


def _create_token(user_id: int, kind: TokenKind, settings: Settings | None = None) -> str:
    settings = settings or get_settings()
    secret, lifetime = _signing(kind, settings)
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "typ": kind,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(payload, secret, algorithm=settings.JWT_ALGORITHM)


def create_access_token(user_id: int, settings: Settings | None = None) -> str:
    """Short-lived token sent as `Authorization: Bearer <token>`."""
    return _create_token(user_id, "access", settings)


def create_refresh_token(user_id: int, settings: Settings | None = None) -> str:
    """Long-lived token used only to obtain new access tokens."""
    return _create_token(user_id, "refresh", settings)


def decode_token(token: str, kind: TokenKind, settings: Settings | None = None) -> int:
    """
    Verify a token of the given kind and return the user id it was issued for.

    Raises TokenExpiredError when the token is past its expiry, TokenInvalidError
    for a bad signature, malformed structure, wrong kind or missing subject.
    """
    settings = settings or get_settings()
    secret, _ = _signing(kind, settings)
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError(str(e)) from e
    except jwt.PyJWTError as e:
        raise TokenInvalidError(str(e)) from e

    if payload.get("typ") != kind:
        raise TokenInvalidError(f"Expected a {kind} token")
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError) as e:
        raise TokenInvalidError("Invalid token subject") from e
