"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract
and validate the current identity from the request.

The gate runs four steps and stops at the first failure:
1. Extract  — `Authorization: Bearer <token>` must be present
2. Decode   — signature, structure and expiry via the TokenCodec
3. Resolve  — the token's user must still exist
4. Admit    — a CurrentIdentity is handed to the route handler

Handlers receive the identity as an argument. There is no global or
thread-local "current user".
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import structlog
from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tasklist.auth.jwt import TokenCodec, TokenError, TokenErrorKind
from tasklist.db.engine import get_db
from tasklist.errors import AuthorizationError, AuthzErrorKind
from tasklist.services.user_store import UserStore

logger = structlog.get_logger()

_TOKEN_ERROR_KINDS = {
    TokenErrorKind.MALFORMED: AuthzErrorKind.MALFORMED_TOKEN,
    TokenErrorKind.BAD_SIGNATURE: AuthzErrorKind.INVALID_TOKEN,
    TokenErrorKind.EXPIRED: AuthzErrorKind.EXPIRED_TOKEN,
}


@dataclass(frozen=True)
class CurrentIdentity:
    """The authenticated identity for one request. The only id handlers trust."""

    user_id: uuid.UUID


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Pull the token out of a `Bearer <token>` header value."""
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


class RequestAuthorizer:
    """Turns an Authorization header into a CurrentIdentity or refuses."""

    def __init__(self, codec: TokenCodec, users: UserStore):
        self.codec = codec
        self.users = users

    async def authorize(
        self, authorization: Optional[str], now: Optional[datetime] = None
    ) -> CurrentIdentity:
        token = extract_bearer_token(authorization)
        if token is None:
            raise self._reject(AuthzErrorKind.MISSING_TOKEN)

        try:
            subject = self.codec.decode(token, now)
        except TokenError as e:
            raise self._reject(_TOKEN_ERROR_KINDS[e.kind], detail=e.detail)

        try:
            user_id = uuid.UUID(subject)
        except ValueError:
            raise self._reject(AuthzErrorKind.MALFORMED_TOKEN, detail="sub is not a UUID")

        user = await self.users.get(user_id)
        if user is None:
            raise self._reject(AuthzErrorKind.USER_NOT_FOUND, user_id=subject)

        structlog.contextvars.bind_contextvars(user_id=subject)
        return CurrentIdentity(user_id=user.id)

    def _reject(self, kind: AuthzErrorKind, **context) -> AuthorizationError:
        logger.info("authz.rejected", reason=kind.value, **context)
        return AuthorizationError(kind)


def get_token_codec(request: Request) -> TokenCodec:
    """The codec built at startup by create_app()."""
    return request.app.state.token_codec


async def get_current_user(
    authorization: Optional[str] = Header(None),
    codec: TokenCodec = Depends(get_token_codec),
    db: AsyncSession = Depends(get_db),
) -> CurrentIdentity:
    """Extract current identity (required — 401 if absent or invalid)."""
    return await RequestAuthorizer(codec, UserStore(db)).authorize(authorization)
