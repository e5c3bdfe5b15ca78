"""Domain error taxonomy. Each error knows its HTTP status; handlers in civreg.main render it."""

from typing import Any


class AppError(Exception):
    """Base class for errors that terminate a request with a typed error envelope."""

    status_code: int = 500

    def __init__(self, message: str, error: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.error = error


class ValidationError(AppError):
    """Malformed or missing input; raised before any persistence call."""

    status_code = 400


class DuplicateError(AppError):
    """Unique-constraint violation (username, names, identification pair, email)."""

    status_code = 400


class AuthenticationError(AppError):
    """Missing, expired or invalid credentials."""

    status_code = 401


class ForbiddenError(AppError):
    """Authenticated but not allowed (inactive user or insufficient role)."""

    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ServerError(AppError):
    """Backing-store or other unexpected failure; `error` carries the operator-facing detail."""

    status_code = 500


class PartialDeleteError(ServerError):
    """One or more attachments could not be removed; the owning record was kept."""

    def __init__(self, message: str, failed_keys: list[str], error: Any = None) -> None:
        super().__init__(message, error=error)
        self.failed_keys = failed_keys


class RequestTimeoutError(AppError):
    status_code = 504


class TokenError(Exception):
    """Base class for token decoding failures (not an HTTP error by itself)."""


class TokenExpiredError(TokenError):
    pass


class TokenInvalidError(TokenError):
    pass
