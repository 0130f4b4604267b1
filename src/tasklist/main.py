"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. The token codec is built here, once, from Settings and parked
on app.state; it is read-only for the life of the process.

Errors are translated to responses only at this boundary: every AppError
becomes `{"message", "code"}` with its own status, and FastAPI's own
request-validation failures are reshaped into the same
"Validation failed: ..." form the services produce.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tasklist import __version__
from tasklist.api import api_router
from tasklist.auth.jwt import TokenCodec
from tasklist.config import Settings, settings as default_settings
from tasklist.errors import AppError, AuthorizationError
from tasklist.middleware.request_id import RequestIdMiddleware
from tasklist.middleware.security import SecurityHeadersMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    config: Settings = app.state.settings
    logger.info(
        "tasklist.starting",
        version=__version__,
        environment=config.environment,
        port=config.port,
    )

    yield

    logger.info("tasklist.shutdown")
    from tasklist.db.engine import engine
    await engine.dispose()


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthorizationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code, content=exc.to_dict(), headers=headers
    )


def _describe(error: dict) -> str:
    if error.get("type") == "json_invalid":
        return "Request body is invalid"
    loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    field = loc[-1].replace("_", " ").capitalize() if loc else "Request body"
    if error.get("type") == "missing":
        return f"{field} can't be blank"
    return f"{field} {error.get('msg', 'is invalid').lower()}"


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = ", ".join(_describe(e) for e in exc.errors())
    return JSONResponse(
        status_code=422,
        content={"message": f"Validation failed: {details}", "code": "validation_failed"},
    )


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    config = config or default_settings

    app = FastAPI(
        title="Tasklist",
        description="Multi-user task-list API with stateless token authentication",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.token_codec = TokenCodec.from_settings(config)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → CORS → handler
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: tasklist.main:app)
app = create_app()
