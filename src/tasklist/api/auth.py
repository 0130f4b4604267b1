"""Auth API — signup, login, current user.

Learn: Routes for account creation and token issuance:
- POST /signup → create an account, returns a token straight away
- POST /auth/login → email/password → token
- GET /auth/me → the authorized user's profile

Signup and login are open; /auth/me goes through the request authorizer.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tasklist.auth.authenticator import Authenticator
from tasklist.auth.dependencies import CurrentIdentity, get_current_user, get_token_codec
from tasklist.auth.jwt import TokenCodec
from tasklist.db.engine import get_db
from tasklist.errors import AuthorizationError, AuthzErrorKind
from tasklist.schemas.auth import (
    LoginRequest,
    SignupRequest,
    SignupResponse,
    TokenResponse,
    UserRead,
)
from tasklist.services.user_store import UserStore

router = APIRouter()


def _authenticator(
    request: Request,
    db: AsyncSession = Depends(get_db),
    codec: TokenCodec = Depends(get_token_codec),
) -> Authenticator:
    return Authenticator(
        UserStore(db), codec, rounds=request.app.state.settings.bcrypt_rounds
    )


@router.post("/signup", response_model=SignupResponse, status_code=201)
async def signup(body: SignupRequest, auth: Authenticator = Depends(_authenticator)):
    """Create an account and sign it in."""
    token = await auth.register(
        name=body.name,
        email=body.email,
        password=body.password,
        password_confirmation=body.password_confirmation,
    )
    return SignupResponse(auth_token=token)


@router.post("/auth/login", response_model=TokenResponse)
async def login(body: LoginRequest, auth: Authenticator = Depends(_authenticator)):
    """Login with email and password → token."""
    token = await auth.authenticate(body.email, body.password)
    return TokenResponse(auth_token=token)


@router.get("/auth/me", response_model=UserRead)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get the current authenticated user's info."""
    user = await UserStore(db).get(identity.user_id)
    if user is None:
        raise AuthorizationError(AuthzErrorKind.USER_NOT_FOUND)
    return user
