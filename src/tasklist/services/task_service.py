"""Task service — CRUD for tasks, scoped to a single owner.

Learn: The service is constructed with the owner_id of the authorized
identity and applies it to every query. There is no method that takes an
owner from anywhere else, so a handler cannot accidentally read or write
another user's tasks. A task that belongs to someone else is reported
exactly like one that does not exist.
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tasklist.db.models import Task
from tasklist.errors import Errors, NotFoundError, is_blank
from tasklist.services.base import store_errors

logger = structlog.get_logger()


class TaskNotFoundError(NotFoundError):
    message = "Task not found"


# Task ids are a 32-bit INTEGER column; anything outside cannot exist.
MAX_TASK_ID = 2**31 - 1


def _validate_title(title: Optional[str]) -> str:
    errors = Errors()
    if is_blank(title):
        errors.add("title", "can't be blank")
    elif len(title.strip()) > 500:
        errors.add("title", "is too long (maximum is 500 characters)")
    errors.raise_if_any()
    return title.strip()


class TaskService:
    """Business logic for one user's tasks."""

    def __init__(self, db: AsyncSession, owner_id: uuid.UUID, per_page: int = 20):
        self.db = db
        self.owner_id = owner_id
        self.per_page = per_page

    def _owned(self):
        return select(Task).where(Task.owner_id == self.owner_id)

    async def list_tasks(self, page: int = 1) -> list[Task]:
        """One page of tasks, oldest first. Pages are 1-based."""
        offset = (max(page, 1) - 1) * self.per_page
        if offset >= MAX_TASK_ID:
            return []
        q = self._owned().order_by(Task.id).limit(self.per_page).offset(offset)
        async with store_errors("tasks.list"):
            result = await self.db.execute(q)
            return list(result.scalars().all())

    async def get_task(self, task_id: int) -> Task:
        task = None
        if 1 <= task_id <= MAX_TASK_ID:
            q = self._owned().where(Task.id == task_id)
            async with store_errors("tasks.get"):
                result = await self.db.execute(q)
                task = result.scalars().first()
        if task is None:
            logger.info("tasks.not_found", task_id=task_id, owner_id=str(self.owner_id))
            raise TaskNotFoundError()
        return task

    async def create_task(self, title: Optional[str]) -> Task:
        task = Task(title=_validate_title(title), owner_id=self.owner_id)
        async with store_errors("tasks.create"):
            self.db.add(task)
            await self.db.commit()
            await self.db.refresh(task)
        return task

    async def update_task(self, task_id: int, title: Optional[str]) -> Task:
        """Rename a task. A missing title leaves it unchanged."""
        task = await self.get_task(task_id)
        if title is not None:
            task.title = _validate_title(title)
        async with store_errors("tasks.update"):
            await self.db.commit()
            await self.db.refresh(task)
        return task

    async def delete_task(self, task_id: int) -> None:
        task = await self.get_task(task_id)
        async with store_errors("tasks.delete"):
            await self.db.delete(task)
            await self.db.commit()
