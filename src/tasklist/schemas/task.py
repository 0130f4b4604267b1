"""Pydantic schemas for tasks.

Learn: Separate schemas for write/read keeps the API clean.
- TaskWrite: what you POST or PUT (title only; owner comes from the token)
- TaskRead: what the API returns
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class TaskWrite(BaseModel):
    """Unknown keys such as created_by or owner_id are ignored."""
    title: Optional[str] = None


class TaskRead(BaseModel):
    id: int
    title: str
    owner_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
