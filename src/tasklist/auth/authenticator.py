"""Credential verification and token issuance.

Learn: Login has exactly one failure the client can see, "Invalid
credentials", whether the email is unknown or the password is wrong.
The unknown-email path still runs a bcrypt verify against a dummy digest
so the two cases cost about the same and response timing does not reveal
which emails are registered. The log line records which case it was.

Signup validates every field before failing, then hashes, persists and
immediately mints a token through the same codec as login.
"""

import re
from datetime import datetime
from typing import Optional

import structlog

from tasklist.auth.jwt import TokenCodec
from tasklist.auth.password import (
    MAX_PASSWORD_BYTES,
    burn_verify,
    hash_password,
    verify_password,
)
from tasklist.errors import (
    DuplicateEmailError,
    Errors,
    InvalidCredentialsError,
    ValidationError,
    is_blank,
)
from tasklist.services.user_store import UserStore

logger = structlog.get_logger()

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
EMAIL_TAKEN = "has already been taken"

# Column widths of users.name and users.email.
MAX_NAME_LENGTH = 100
MAX_EMAIL_LENGTH = 255


class Authenticator:
    def __init__(
        self, users: UserStore, codec: TokenCodec, rounds: Optional[int] = None
    ):
        self.users = users
        self.codec = codec
        self.rounds = rounds

    async def authenticate(
        self,
        email: Optional[str],
        password: Optional[str],
        now: Optional[datetime] = None,
    ) -> str:
        """Return a token for valid credentials, else raise InvalidCredentialsError."""
        email = email or ""
        password = password or ""

        user = await self.users.get_by_email(email) if email.strip() else None
        if user is None:
            burn_verify(password, self.rounds)
            logger.info("auth.login_failed", reason="unknown_email")
            raise InvalidCredentialsError()

        if not verify_password(password, user.password_hash):
            logger.info("auth.login_failed", reason="bad_password", user_id=str(user.id))
            raise InvalidCredentialsError()

        logger.info("auth.login", user_id=str(user.id))
        return self.codec.encode(str(user.id), now)

    async def register(
        self,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        password_confirmation: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> str:
        """Create an account and return a token for it.

        Raises ValidationError listing every failing field.
        """
        errors = Errors()
        if is_blank(name):
            errors.add("name", "can't be blank")
        elif len(name.strip()) > MAX_NAME_LENGTH:
            errors.add("name", f"is too long (maximum is {MAX_NAME_LENGTH} characters)")
        if is_blank(email):
            errors.add("email", "can't be blank")
        elif len(email.strip()) > MAX_EMAIL_LENGTH:
            errors.add("email", f"is too long (maximum is {MAX_EMAIL_LENGTH} characters)")
        elif not EMAIL_RE.match(email.strip()):
            errors.add("email", "is invalid")
        elif await self.users.get_by_email(email) is not None:
            errors.add("email", EMAIL_TAKEN)
        if not password:
            errors.add("password", "can't be blank")
        elif len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            errors.add("password", f"is too long (maximum is {MAX_PASSWORD_BYTES} bytes)")
        if password_confirmation is not None and password_confirmation != password:
            errors.add("password_confirmation", "doesn't match Password")
        if errors:
            logger.info("auth.signup_rejected")
        errors.raise_if_any()

        try:
            user = await self.users.create(name, email, hash_password(password, self.rounds))
        except DuplicateEmailError:
            logger.info("auth.signup_race_lost")
            raise ValidationError({"email": [EMAIL_TAKEN]})

        logger.info("auth.signup", user_id=str(user.id))
        return self.codec.encode(str(user.id), now)
