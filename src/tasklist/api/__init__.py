"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Task routes apply get_current_user through their service
dependency, so every handler runs behind the request authorizer.
Health, signup and login are open.
"""

from fastapi import APIRouter

from tasklist.api.auth import router as auth_router
from tasklist.api.health import router as health_router
from tasklist.api.tasks import router as tasks_router

api_router = APIRouter()

# Open routes (plus /auth/me, which declares its own auth dependency)
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes — require a valid bearer token
api_router.include_router(tasks_router, tags=["tasks"])
