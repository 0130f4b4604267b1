"""Pydantic schemas for signup, login and the current user.

Learn: Request fields are all optional at the schema level. Presence and
format rules live in the Authenticator so that every failing field is
reported in one "Validation failed: ..." message instead of stopping at
the first missing key.
"""

import uuid
from typing import Optional

from pydantic import BaseModel


class SignupRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    password_confirmation: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class TokenResponse(BaseModel):
    auth_token: str


class SignupResponse(TokenResponse):
    message: str = "Account created successfully"


class UserRead(BaseModel):
    id: uuid.UUID
    name: str
    email: str

    model_config = {"from_attributes": True}
