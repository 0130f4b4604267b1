"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks.
The work factor (TASKLIST_BCRYPT_ROUNDS, default 12) takes ~100ms per
hash on modern hardware.
"""

from functools import lru_cache
from typing import Optional

import bcrypt

from tasklist.config import settings

# bcrypt only looks at the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with bcrypt.

    Learn: bcrypt includes a random salt automatically, so hashing the
    same password twice gives two different digests.
    """
    pw_bytes = password.encode("utf-8")[:MAX_PASSWORD_BYTES]
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Verify a password against its hash in constant time.

    A missing or malformed hash is a mismatch, never an exception.
    """
    if not password_hash:
        return False
    try:
        pw_bytes = password.encode("utf-8")[:MAX_PASSWORD_BYTES]
        return bcrypt.checkpw(pw_bytes, password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def burn_verify(password: str, rounds: Optional[int] = None) -> None:
    """Spend the same CPU a real verify would, then discard the result.

    Called when a login names an unknown email, so that path costs about
    as much as a wrong password.
    """
    verify_password(password, _dummy_hash(rounds or settings.bcrypt_rounds))


@lru_cache(maxsize=4)
def _dummy_hash(rounds: int) -> str:
    return hash_password("tasklist-dummy-password", rounds=rounds)
