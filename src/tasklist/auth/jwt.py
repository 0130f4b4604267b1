"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. The token
carries the user id (sub), issue time (iat) and expiry (exp), signed with
HMAC under a process-wide secret. Nothing is stored server-side, so
rotating the secret invalidates every outstanding token.

The codec is an explicit value built once at startup (see main.create_app)
and injected into request handling; it never reads global settings on the
hot path. Both encode and decode take the current time as an argument so
expiry is testable without sleeping.

`iat` and `exp` keep the sub-second part of `now` (JWT NumericDate allows
fractions), so a token is valid for exactly ttl from the moment it is minted.
"""

import enum
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from tasklist.config import Settings


class TokenErrorKind(str, enum.Enum):
    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"
    EXPIRED = "expired"


class TokenError(Exception):
    """Raised when token verification fails. `kind` says why."""

    def __init__(self, kind: TokenErrorKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)


_REQUIRED_CLAIMS = ["sub", "iat", "exp"]

# Expiry is checked against the caller's `now` below, not PyJWT's clock.
_DECODE_OPTIONS = {
    "require": _REQUIRED_CLAIMS,
    "verify_signature": True,
    "verify_exp": False,
    "verify_iat": False,
    "verify_nbf": False,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _epoch_seconds(moment: datetime) -> float:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.timestamp()


class TokenCodec:
    """Encodes and decodes signed, expiring identity tokens."""

    def __init__(self, secret: str, ttl: timedelta, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        if ttl <= timedelta(0):
            raise ValueError("Token TTL must be positive")
        self._secret = secret
        self._algorithm = algorithm
        self.ttl = ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenCodec":
        return cls(
            secret=settings.jwt_secret,
            ttl=timedelta(minutes=settings.token_expire_minutes),
            algorithm=settings.jwt_algorithm,
        )

    def encode(self, user_id: str, now: Optional[datetime] = None) -> str:
        """Mint a token for user_id, valid from now until now + ttl."""
        issued_at = now or _utcnow()
        payload = {
            "sub": str(user_id),
            "iat": _epoch_seconds(issued_at),
            "exp": _epoch_seconds(issued_at + self.ttl),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str, now: Optional[datetime] = None) -> str:
        """Verify a token and return the user id it was issued to.

        Raises TokenError: BAD_SIGNATURE for a signature that does not match
        this codec's secret (including an empty one or a foreign algorithm),
        MALFORMED for anything that does not parse into the expected claims,
        EXPIRED once now reaches exp.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options=_DECODE_OPTIONS,
            )
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as e:
            raise TokenError(TokenErrorKind.BAD_SIGNATURE, str(e))
        except jwt.InvalidTokenError as e:
            raise TokenError(TokenErrorKind.MALFORMED, str(e))

        subject, expires_at = payload["sub"], payload["exp"]
        if not isinstance(subject, str) or not subject:
            raise TokenError(TokenErrorKind.MALFORMED, "sub must be a non-empty string")
        if not isinstance(expires_at, (int, float)) or isinstance(expires_at, bool):
            raise TokenError(TokenErrorKind.MALFORMED, "exp must be a number")

        if _epoch_seconds(now or _utcnow()) >= expires_at:
            raise TokenError(TokenErrorKind.EXPIRED, "Token has expired")
        return subject
