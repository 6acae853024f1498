"""CLI tests — click's CliRunner against an httpx.MockTransport backend.

Learn: The CLI only talks HTTP, so _client() is swapped for one whose
transport is a handler function. Each test asserts on both what the CLI
sent and what it printed.
"""

import json
import uuid
from types import SimpleNamespace

import httpx
import pytest
from click.testing import CliRunner

from eventkeeper.auth.jwt import TokenCodec
from eventkeeper.cli import main as cli

from conftest import TEST_SECRET


@pytest.fixture()
def runner():
    return CliRunner()


@pytest.fixture()
def backend(monkeypatch):
    """Install a fake backend; returns the list of requests it received."""
    state = SimpleNamespace(requests=[], handler=None)

    def transport_handler(request: httpx.Request) -> httpx.Response:
        state.requests.append(request)
        return state.handler(request)

    def fake_client(token=None):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        return httpx.AsyncClient(
            transport=httpx.MockTransport(transport_handler),
            base_url="http://test",
            headers=headers,
        )

    monkeypatch.setattr(cli, "_client", fake_client)
    return state


def test_register(runner, backend):
    user_id = str(uuid.uuid4())
    backend.handler = lambda req: httpx.Response(
        201, json={"id": user_id, "username": "alice", "email": "alice@example.com"}
    )

    result = runner.invoke(
        cli.main, ["register", "alice", "alice@example.com", "--password", "secret123"]
    )

    assert result.exit_code == 0, result.output
    assert f"Registered alice ({user_id})" in result.output
    sent = json.loads(backend.requests[0].content)
    assert backend.requests[0].url.path == "/api/v1/auth/register"
    assert sent == {"username": "alice", "email": "alice@example.com", "password": "secret123"}


def test_register_conflict_exits_nonzero(runner, backend):
    backend.handler = lambda req: httpx.Response(
        409, json={"detail": "Username already exists: alice", "code": "duplicate_identity"}
    )
    result = runner.invoke(
        cli.main, ["register", "alice", "alice@example.com", "--password", "secret123"]
    )
    assert result.exit_code == 1
    assert "409 Username already exists: alice" in result.output


def test_login_prints_token(runner, backend):
    backend.handler = lambda req: httpx.Response(
        200,
        json={"token": "tok.en.value", "expires_at": "2026-10-17T09:00:00Z"},
    )
    result = runner.invoke(cli.main, ["login", "alice", "--password", "secret123"])
    assert result.exit_code == 0
    assert "tok.en.value" in result.output


def test_login_bad_credentials(runner, backend):
    backend.handler = lambda req: httpx.Response(
        401, json={"detail": "Invalid username or password", "code": "invalid_credentials"}
    )
    result = runner.invoke(cli.main, ["login", "alice", "--password", "wrong"])
    assert result.exit_code == 1
    assert "Invalid username or password" in result.output


def test_events_list_sends_bearer(runner, backend):
    event_id = str(uuid.uuid4())
    backend.handler = lambda req: httpx.Response(200, json={
        "items": [{
            "id": event_id, "type": "NAVIGATION", "from": "/home", "to": "/cart",
            "created_at": "2026-10-16T09:00:00Z",
        }],
        "total": 1, "page": 0, "size": 20, "pages": 1,
    })

    result = runner.invoke(cli.main, ["events", "list", "--token", "T0KEN"])

    assert result.exit_code == 0, result.output
    assert event_id in result.output
    assert "/cart" in result.output
    req = backend.requests[0]
    assert req.headers["Authorization"] == "Bearer T0KEN"
    assert req.url.params["page"] == "0"
    assert req.url.params["size"] == "20"


def test_events_list_empty(runner, backend):
    backend.handler = lambda req: httpx.Response(
        200, json={"items": [], "total": 0, "page": 0, "size": 20, "pages": 0}
    )
    result = runner.invoke(cli.main, ["events", "list"], env={"EVENTKEEPER_TOKEN": "T"})
    assert result.exit_code == 0
    assert "No events found." in result.output


def test_events_require_token(runner, backend):
    result = runner.invoke(cli.main, ["events", "list"], env={"EVENTKEEPER_TOKEN": ""})
    assert result.exit_code == 1
    assert "--token required" in result.output
    assert backend.requests == []


def test_events_create(runner, backend):
    event_id = str(uuid.uuid4())
    backend.handler = lambda req: httpx.Response(201, json={"id": event_id})

    result = runner.invoke(
        cli.main, ["events", "create", "action", "cart", "pay", "--token", "T"]
    )

    assert result.exit_code == 0, result.output
    assert f"Event {event_id} created" in result.output
    assert json.loads(backend.requests[0].content) == {
        "type": "ACTION", "from": "cart", "to": "pay",
    }


def test_events_delete_forbidden(runner, backend):
    backend.handler = lambda req: httpx.Response(
        403, json={"detail": "not yours", "code": "forbidden"}
    )
    event_id = str(uuid.uuid4())
    result = runner.invoke(cli.main, ["events", "delete", event_id, "--token", "T"])
    assert result.exit_code == 1
    assert backend.requests[0].method == "DELETE"
    assert backend.requests[0].url.path == f"/api/v1/events/{event_id}"


def test_token_info(runner, backend):
    token = TokenCodec(TEST_SECRET, ttl_ms=60_000).issue(SimpleNamespace(username="alice"))
    result = runner.invoke(
        cli.main, ["token-info", token], env={"EVENTKEEPER_JWT_SECRET": TEST_SECRET}
    )
    assert result.exit_code == 0, result.output
    assert "Subject:  alice" in result.output
    assert "Valid:    true" in result.output
    assert backend.requests == []


def test_token_info_other_user_is_invalid(runner):
    token = TokenCodec(TEST_SECRET).issue(SimpleNamespace(username="alice"))
    result = runner.invoke(
        cli.main,
        ["token-info", token, "--username", "bob"],
        env={"EVENTKEEPER_JWT_SECRET": TEST_SECRET},
    )
    assert "Valid:    false" in result.output


def test_token_info_wrong_secret(runner):
    token = TokenCodec("a-completely-different-secret-of-32-bytes").issue(
        SimpleNamespace(username="alice")
    )
    result = runner.invoke(
        cli.main, ["token-info", token], env={"EVENTKEEPER_JWT_SECRET": TEST_SECRET}
    )
    assert result.exit_code == 1
    assert "Invalid token" in result.output
