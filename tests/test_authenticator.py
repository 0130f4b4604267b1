"""Authenticator tests — login and signup at the service level."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from tasklist.auth.authenticator import Authenticator
from tasklist.auth.jwt import TokenCodec
from tasklist.errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    StoreUnavailableError,
    ValidationError,
)
from tasklist.services.user_store import UserStore

T0 = datetime(2026, 3, 1, 8, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def codec():
    return TokenCodec("authenticator-test-secret-value-0123456789", timedelta(hours=24))


@pytest.fixture
def auth(db_session, codec):
    return Authenticator(UserStore(db_session), codec)


async def _register(auth, email="ada@example.com", password="secret1"):
    return await auth.register("Ada", email, password, password, now=T0)


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_authenticate_returns_token_for_user(auth, codec, db_session):
    await _register(auth)
    token = await auth.authenticate("ada@example.com", "secret1", now=T0)

    user = await UserStore(db_session).get_by_email("ada@example.com")
    assert codec.decode(token, T0) == str(user.id)


@pytest.mark.asyncio
async def test_email_lookup_is_case_insensitive(auth, codec):
    signup_token = await _register(auth, email="Ada.Lovelace@Example.com")
    token = await auth.authenticate("ADA.LOVELACE@example.COM", "secret1", now=T0)
    assert codec.decode(token, T0) == codec.decode(signup_token, T0)


@pytest.mark.asyncio
async def test_wrong_password_and_unknown_email_fail_identically(auth):
    await _register(auth)

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        await auth.authenticate("ada@example.com", "not-it")
    with pytest.raises(InvalidCredentialsError) as unknown_email:
        await auth.authenticate("nobody@example.com", "secret1")

    assert wrong_password.value.message == unknown_email.value.message == "Invalid credentials"
    assert wrong_password.value.to_dict() == unknown_email.value.to_dict()


@pytest.mark.asyncio
async def test_blank_credentials_are_invalid(auth):
    with pytest.raises(InvalidCredentialsError):
        await auth.authenticate("", "")
    with pytest.raises(InvalidCredentialsError):
        await auth.authenticate(None, None)


@pytest.mark.asyncio
async def test_unknown_email_still_runs_password_verify(auth, monkeypatch):
    calls = []
    monkeypatch.setattr(
        "tasklist.auth.authenticator.burn_verify", lambda pw, rounds=None: calls.append(pw)
    )
    with pytest.raises(InvalidCredentialsError):
        await auth.authenticate("ghost@example.com", "guess")
    assert calls == ["guess"]


# ═══════════════════════════════════════════════════════════
# Signup
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_issues_token_and_hashes_password(auth, codec, db_session):
    token = await _register(auth)
    user = await UserStore(db_session).get_by_email("ada@example.com")

    assert codec.decode(token, T0) == str(user.id)
    assert user.name == "Ada"
    assert user.password_hash != "secret1"
    assert user.password_hash.startswith("$2")


@pytest.mark.asyncio
async def test_register_reports_every_blank_field(auth):
    with pytest.raises(ValidationError) as exc:
        await auth.register(None, None, None)

    assert set(exc.value.errors) == {"name", "email", "password"}
    assert exc.value.message == (
        "Validation failed: Name can't be blank, Email can't be blank, "
        "Password can't be blank"
    )


@pytest.mark.asyncio
async def test_register_rejects_bad_email_and_mismatch(auth):
    with pytest.raises(ValidationError) as exc:
        await auth.register("Ada", "not-an-email", "secret1", "secret2")

    assert exc.value.errors == {
        "email": ["is invalid"],
        "password_confirmation": ["doesn't match Password"],
    }


@pytest.mark.asyncio
async def test_register_rejects_overlong_password(auth):
    with pytest.raises(ValidationError) as exc:
        await auth.register("Ada", "ada@example.com", "p" * 73)
    assert exc.value.errors == {"password": ["is too long (maximum is 72 bytes)"]}


@pytest.mark.asyncio
async def test_register_rejects_overlong_name_and_email(auth):
    with pytest.raises(ValidationError) as exc:
        await auth.register("x" * 101, "e" * 300 + "@example.com", "secret1")
    assert exc.value.errors == {
        "name": ["is too long (maximum is 100 characters)"],
        "email": ["is too long (maximum is 255 characters)"],
    }


@pytest.mark.asyncio
async def test_register_accepts_names_at_the_limit(auth, codec):
    email = "e" * (255 - len("@example.com")) + "@example.com"
    token = await auth.register("x" * 100, email, "secret1", now=T0)
    assert codec.decode(token, T0)


@pytest.mark.asyncio
async def test_register_duplicate_email(auth):
    await _register(auth)
    with pytest.raises(ValidationError) as exc:
        await _register(auth, email="ADA@example.com")
    assert exc.value.errors == {"email": ["has already been taken"]}


@pytest.mark.asyncio
async def test_confirmation_is_optional(auth, codec):
    token = await auth.register("Ada", "ada@example.com", "secret1", None, now=T0)
    assert codec.decode(token, T0)


# ═══════════════════════════════════════════════════════════
# Store failures
# ═══════════════════════════════════════════════════════════


class _RacingStore:
    """Sees no existing user, then loses the insert to a concurrent signup."""

    async def get_by_email(self, email):
        return None

    async def create(self, name, email, password_hash):
        raise DuplicateEmailError(email)


class _DownStore:
    async def get_by_email(self, email):
        raise StoreUnavailableError()


@pytest.mark.asyncio
async def test_late_uniqueness_violation_is_validation_error(codec):
    auth = Authenticator(_RacingStore(), codec)
    with pytest.raises(ValidationError) as exc:
        await auth.register("Ada", "ada@example.com", "secret1", "secret1")
    assert exc.value.errors == {"email": ["has already been taken"]}


@pytest.mark.asyncio
async def test_store_outage_is_not_an_auth_failure(codec):
    auth = Authenticator(_DownStore(), codec)
    with pytest.raises(StoreUnavailableError):
        await auth.authenticate("ada@example.com", "secret1")


@pytest.mark.asyncio
async def test_user_store_translates_transport_errors(codec):
    class _DeadSession:
        async def execute(self, *args, **kwargs):
            raise OperationalError("SELECT", {}, ConnectionRefusedError("refused"))

    auth = Authenticator(UserStore(_DeadSession()), codec)
    with pytest.raises(StoreUnavailableError):
        await auth.authenticate("ada@example.com", "secret1")
