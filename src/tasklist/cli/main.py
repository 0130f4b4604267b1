"""Tasklist CLI — sign up, log in and manage tasks against a running server.

Usage:
    tasklist signup --name Ada --email ada@example.com   # Create account, print token
    tasklist login --email ada@example.com               # Print a fresh token
    tasklist tasks                                       # List your tasks
    tasklist add "Wash the car"                          # Create a task
    tasklist rename 3 "Wash both cars"                   # Rename a task
    tasklist rm 3                                        # Delete a task
    tasklist serve                                       # Run the API server
    tasklist init-db                                     # Create tables (dev)
    tasklist gen-secret                                  # Print a signing secret
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import os
import secrets
import sys
from typing import Optional

import click
import httpx

from tasklist import __version__

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("TASKLIST_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the tasklist server."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Offloads to a thread when an event loop is already running
    (e.g. CliRunner invoked from an async test).
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()


def _require_token(token: Optional[str]) -> str:
    if not token:
        click.secho(
            "Error: --token required (or set TASKLIST_TOKEN env var)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    return token


def _check(r: httpx.Response) -> httpx.Response:
    """Fail the command with the server's message on any error response."""
    if r.is_success:
        return r
    try:
        message = r.json().get("message", r.text)
    except ValueError:
        message = r.text
    raise click.ClickException(f"({r.status_code}) {message}")


def _print_tasks(tasks: list[dict]):
    header = f"{'ID':<6}  TITLE"
    click.secho(header, bold=True)
    click.echo("-" * 40)
    for t in tasks:
        click.echo(f"{t['id']:<6}  {t['title']}")


token_option = click.option(
    "--token", envvar="TASKLIST_TOKEN", help="Auth token (or set TASKLIST_TOKEN)"
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="tasklist")
def main():
    """Tasklist — your own task list behind a bearer token."""


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@main.command()
@click.option("--name", prompt=True)
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
def signup(name: str, email: str, password: str):
    """Create an account and print its auth token."""
    _run(_signup_impl(name, email, password))


async def _signup_impl(name: str, email: str, password: str):
    async with _client() as c:
        r = _check(await c.post("/signup", json={
            "name": name,
            "email": email,
            "password": password,
            "password_confirmation": password,
        }))
    body = r.json()
    click.secho(body["message"], fg="green", err=True)
    click.echo(body["auth_token"])


@main.command()
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True)
def login(email: str, password: str):
    """Log in and print an auth token."""
    _run(_login_impl(email, password))


async def _login_impl(email: str, password: str):
    async with _client() as c:
        r = _check(await c.post("/auth/login", json={"email": email, "password": password}))
    click.echo(r.json()["auth_token"])


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


@main.command()
@token_option
@click.option("--page", "-p", default=1, help="Page number (20 tasks per page)")
def tasks(token: Optional[str], page: int):
    """List your tasks."""
    _run(_tasks_impl(_require_token(token), page))


async def _tasks_impl(token: str, page: int):
    async with _client(token) as c:
        r = _check(await c.get("/todos", params={"page": page}))
    items = r.json()
    if not items:
        click.echo("No tasks.")
        return
    _print_tasks(items)


@main.command()
@token_option
@click.argument("title")
def add(token: Optional[str], title: str):
    """Create a task."""
    _run(_add_impl(_require_token(token), title))


async def _add_impl(token: str, title: str):
    async with _client(token) as c:
        r = _check(await c.post("/todos", json={"title": title}))
    task = r.json()
    click.secho(f"Task #{task['id']} created", fg="green")


@main.command()
@token_option
@click.argument("task_id", type=int)
@click.argument("title")
def rename(token: Optional[str], task_id: int, title: str):
    """Rename a task."""
    _run(_rename_impl(_require_token(token), task_id, title))


async def _rename_impl(token: str, task_id: int, title: str):
    async with _client(token) as c:
        r = _check(await c.put(f"/todos/{task_id}", json={"title": title}))
    click.echo(f"Task #{task_id}: {r.json()['title']}")


@main.command()
@token_option
@click.argument("task_id", type=int)
def rm(token: Optional[str], task_id: int):
    """Delete a task."""
    _run(_rm_impl(_require_token(token), task_id))


async def _rm_impl(token: str, task_id: int):
    async with _client(token) as c:
        _check(await c.delete(f"/todos/{task_id}"))
    click.echo(f"Task #{task_id} deleted")


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------


@main.command()
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(reload: bool):
    """Run the API server with uvicorn."""
    import uvicorn

    from tasklist.config import settings

    uvicorn.run("tasklist.main:app", host=settings.host, port=settings.port, reload=reload)


@main.command("init-db")
def init_db():
    """Create all tables directly (development; use alembic in production)."""
    from tasklist.db.engine import engine
    from tasklist.db.models import Base

    async def _create():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()

    _run(_create())
    click.secho("Tables created", fg="green")


@main.command("gen-secret")
def gen_secret():
    """Print a random value suitable for TASKLIST_JWT_SECRET."""
    click.echo(secrets.token_urlsafe(32))


if __name__ == "__main__":
    main()
