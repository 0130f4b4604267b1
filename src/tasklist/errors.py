"""Error taxonomy shared by the auth core, the stores and the API layer.

Every failure the core can produce is one of these types. Each carries the
HTTP status it maps to, a stable machine code, and a message that is safe
to show a client. The exception handlers in main.py are the only place
these get turned into responses.
"""

import enum
from typing import Optional


class AppError(Exception):
    """Base for all errors that are translated to an HTTP response."""

    status_code: int = 500
    code: str = "internal_error"
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"message": self.message, "code": self.code}


# ─── Validation ──────────────────────────────────────────


class ValidationError(AppError):
    """Input failed one or more field rules.

    Errors accumulate per field rather than stopping at the first one,
    so a client gets every problem in a single response.
    """

    status_code = 422
    code = "validation_failed"

    def __init__(self, errors: dict[str, list[str]]):
        self.errors = errors
        super().__init__(f"Validation failed: {', '.join(self.full_messages)}")

    @property
    def full_messages(self) -> list[str]:
        return [
            f"{_humanize(field)} {msg}"
            for field, messages in self.errors.items()
            for msg in messages
        ]

    def to_dict(self) -> dict:
        return {**super().to_dict(), "errors": self.errors}


class Errors:
    """Accumulator for field errors, raised as one ValidationError."""

    def __init__(self):
        self._errors: dict[str, list[str]] = {}

    def add(self, field: str, message: str) -> None:
        self._errors.setdefault(field, []).append(message)

    def __bool__(self) -> bool:
        return bool(self._errors)

    def raise_if_any(self) -> None:
        if self._errors:
            raise ValidationError(dict(self._errors))


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _humanize(field: str) -> str:
    return field.replace("_", " ").capitalize()


# ─── Authentication ──────────────────────────────────────


class InvalidCredentialsError(AppError):
    """Login failed. Same message whether the email or the password was wrong."""

    status_code = 401
    code = "invalid_credentials"
    message = "Invalid credentials"


class AuthzErrorKind(str, enum.Enum):
    """Why a request was refused at the authorization gate."""

    MISSING_TOKEN = "missing_token"
    MALFORMED_TOKEN = "malformed_token"
    INVALID_TOKEN = "invalid_token"
    EXPIRED_TOKEN = "expired_token"
    USER_NOT_FOUND = "user_not_found"


_AUTHZ_MESSAGES = {
    AuthzErrorKind.MISSING_TOKEN: "Missing token",
    AuthzErrorKind.MALFORMED_TOKEN: "Malformed token",
    AuthzErrorKind.INVALID_TOKEN: "Invalid token signature",
    AuthzErrorKind.EXPIRED_TOKEN: "Token has expired",
    AuthzErrorKind.USER_NOT_FOUND: "User not found",
}


class AuthorizationError(AppError):
    """A protected request was refused. Always fails closed with a 401."""

    status_code = 401
    code = "unauthorized"

    def __init__(self, kind: AuthzErrorKind):
        self.kind = kind
        super().__init__(_AUTHZ_MESSAGES[kind])

    def to_dict(self) -> dict:
        return {**super().to_dict(), "reason": self.kind.value}


# ─── Resources and storage ───────────────────────────────


class NotFoundError(AppError):
    status_code = 404
    code = "not_found"
    message = "Not found"


class StoreUnavailableError(AppError):
    """The backing store could not be reached. Distinct from any auth failure."""

    status_code = 503
    code = "store_unavailable"
    message = "Service temporarily unavailable"


class DuplicateEmailError(Exception):
    """Raised by the user store when the unique email constraint fires."""
