"""Task API routes.

Learn: Every route depends on get_current_user, and the TaskService is
built from the resolved identity. Routes never read an owner id from the
request body or path, so ownership scoping cannot be bypassed.

- GET    /todos?page=N → one page of the caller's tasks
- POST   /todos        → create
- GET    /todos/:id    → fetch
- PUT    /todos/:id    → rename
- DELETE /todos/:id    → delete (204)
"""

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from tasklist.auth.dependencies import CurrentIdentity, get_current_user
from tasklist.db.engine import get_db
from tasklist.schemas.task import TaskRead, TaskWrite
from tasklist.services.task_service import TaskService

router = APIRouter(prefix="/todos")


def _task_svc(
    request: Request,
    identity: CurrentIdentity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> TaskService:
    return TaskService(
        db, owner_id=identity.user_id, per_page=request.app.state.settings.tasks_per_page
    )


@router.get("", response_model=list[TaskRead])
async def list_tasks(
    page: int = Query(1, ge=1, description="1-based page number"),
    svc: TaskService = Depends(_task_svc),
):
    """List the caller's tasks, one page at a time."""
    return await svc.list_tasks(page=page)


@router.post("", response_model=TaskRead, status_code=201)
async def create_task(body: TaskWrite, svc: TaskService = Depends(_task_svc)):
    return await svc.create_task(body.title)


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(task_id: int, svc: TaskService = Depends(_task_svc)):
    return await svc.get_task(task_id)


@router.put("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: int, body: TaskWrite, svc: TaskService = Depends(_task_svc)
):
    """Rename a task."""
    return await svc.update_task(task_id, body.title)


@router.delete("/{task_id}", status_code=204)
async def delete_task(task_id: int, svc: TaskService = Depends(_task_svc)):
    await svc.delete_task(task_id)
    return Response(status_code=204)
