"""CLI tests — commands against a mocked HTTP transport."""

import json

import httpx
import pytest
from click.testing import CliRunner

from tasklist.cli import main as cli_module
from tasklist.cli.main import main


@pytest.fixture
def server(monkeypatch):
    """Route CLI HTTP calls to an in-process handler and record them."""
    seen: list[httpx.Request] = []
    routes = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        key = (request.method, request.url.path)
        status, body = routes.get(key, (404, {"message": "Task not found"}))
        return httpx.Response(status, json=body) if body is not None else httpx.Response(status)

    def fake_client(token=None):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        return httpx.AsyncClient(
            transport=httpx.MockTransport(handler),
            base_url="http://test",
            headers=headers,
        )

    monkeypatch.setattr(cli_module, "_client", fake_client)
    return routes, seen


def test_login_prints_token(server):
    routes, seen = server
    routes[("POST", "/auth/login")] = (200, {"auth_token": "tok-123"})

    result = CliRunner().invoke(main, ["login", "--email", "ada@example.com", "--password", "secret1"])
    assert result.exit_code == 0
    assert result.output.strip() == "tok-123"
    assert seen[0].headers.get("Authorization") is None


def test_login_failure_exits_nonzero(server):
    routes, _ = server
    routes[("POST", "/auth/login")] = (401, {"message": "Invalid credentials"})

    result = CliRunner().invoke(main, ["login", "--email", "a@b.co", "--password", "x"])
    assert result.exit_code == 1
    assert "Invalid credentials" in result.output


def test_signup_sends_confirmation(server):
    routes, seen = server
    routes[("POST", "/signup")] = (
        201,
        {"message": "Account created successfully", "auth_token": "tok-new"},
    )

    result = CliRunner().invoke(
        main,
        ["signup", "--name", "Ada", "--email", "ada@example.com", "--password", "secret1"],
    )
    assert result.exit_code == 0
    assert "tok-new" in result.output
    body = json.loads(seen[0].content)
    assert body["password_confirmation"] == "secret1"


def test_tasks_lists_with_token(server):
    routes, seen = server
    routes[("GET", "/todos")] = (200, [{"id": 1, "title": "Wash the car"}])

    result = CliRunner().invoke(main, ["tasks", "--token", "tok-123", "--page", "2"])
    assert result.exit_code == 0
    assert "Wash the car" in result.output
    assert seen[0].headers["Authorization"] == "Bearer tok-123"
    assert seen[0].url.params["page"] == "2"


def test_tasks_token_from_env(server, monkeypatch):
    routes, seen = server
    routes[("GET", "/todos")] = (200, [])
    monkeypatch.setenv("TASKLIST_TOKEN", "tok-env")

    result = CliRunner().invoke(main, ["tasks"])
    assert result.exit_code == 0
    assert "No tasks." in result.output
    assert seen[0].headers["Authorization"] == "Bearer tok-env"


def test_tasks_without_token(server, monkeypatch):
    monkeypatch.delenv("TASKLIST_TOKEN", raising=False)
    result = CliRunner().invoke(main, ["tasks"])
    assert result.exit_code == 1
    assert "--token required" in result.output


def test_add_rename_rm(server):
    routes, _ = server
    routes[("POST", "/todos")] = (201, {"id": 7, "title": "Shop"})
    routes[("PUT", "/todos/7")] = (200, {"id": 7, "title": "Shop twice"})
    routes[("DELETE", "/todos/7")] = (204, None)
    runner = CliRunner()

    result = runner.invoke(main, ["add", "Shop", "--token", "t"])
    assert result.exit_code == 0
    assert "Task #7 created" in result.output

    result = runner.invoke(main, ["rename", "7", "Shop twice", "--token", "t"])
    assert "Shop twice" in result.output

    result = runner.invoke(main, ["rm", "7", "--token", "t"])
    assert result.exit_code == 0
    assert "deleted" in result.output


def test_rm_missing_task(server):
    result = CliRunner().invoke(main, ["rm", "99", "--token", "t"])
    assert result.exit_code == 1
    assert "Task not found" in result.output


def test_gen_secret():
    result = CliRunner().invoke(main, ["gen-secret"])
    assert result.exit_code == 0
    assert len(result.output.strip()) >= 32
