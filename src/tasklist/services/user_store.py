"""User store — persistence for account records.

Learn: Lookups by email are case-insensitive because emails are stored
normalised to lower case and queried the same way. The database's unique
constraint on email is the final word on uniqueness; a concurrent signup
that loses the race surfaces here as DuplicateEmailError.
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tasklist.db.models import User
from tasklist.errors import DuplicateEmailError
from tasklist.services.base import store_errors


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: uuid.UUID) -> Optional[User]:
        async with store_errors("users.get"):
            return await self.db.get(User, user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        q = select(User).where(User.email == normalize_email(email))
        async with store_errors("users.get_by_email"):
            result = await self.db.execute(q)
            return result.scalars().first()

    async def create(self, name: str, email: str, password_hash: str) -> User:
        """Insert a user. Raises DuplicateEmailError if the email is taken."""
        user = User(
            name=name.strip(),
            email=normalize_email(email),
            password_hash=password_hash,
        )
        async with store_errors("users.create"):
            self.db.add(user)
            try:
                await self.db.commit()
            except IntegrityError as e:
                await self.db.rollback()
                raise DuplicateEmailError(user.email) from e
            await self.db.refresh(user)
        return user
