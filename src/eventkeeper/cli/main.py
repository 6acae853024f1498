"""EventKeeper CLI — register, log in, and manage your events from a terminal.

Usage:
    eventkeeper register alice alice@example.com              # Create an account
    eventkeeper login alice                                   # Print a bearer token
    eventkeeper events list --token $TOKEN                    # Your events, newest first
    eventkeeper events create NAVIGATION /home /settings      # Record an event
    eventkeeper events delete <event-id>                      # Soft-delete an event
    eventkeeper token-info $TOKEN                             # Decode a token locally
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import os
import sys
from types import SimpleNamespace
from typing import Optional

import click
import httpx

from eventkeeper.auth.jwt import TokenCodec, TokenMalformed

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("EVENTKEEPER_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the EventKeeper backend."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _fail(message: str):
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


def _check(r: httpx.Response) -> None:
    """Exit with the server's error detail on any non-2xx response."""
    if r.is_success:
        return
    try:
        detail = r.json().get("detail", r.text)
    except ValueError:
        detail = r.text
    _fail(f"{r.status_code} {detail}")


def _require_token(token: Optional[str]) -> str:
    if not token:
        _fail("--token required (or set EVENTKEEPER_TOKEN env var)")
    return token


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k) or "-")[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


token_option = click.option(
    "--token",
    envvar="EVENTKEEPER_TOKEN",
    help="Bearer token from `eventkeeper login` (or set EVENTKEEPER_TOKEN)",
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version="0.1.0", prog_name="eventkeeper")
def main():
    """EventKeeper — a per-user event log behind bearer-token auth."""


# ---------------------------------------------------------------------------
# eventkeeper register / login
# ---------------------------------------------------------------------------


@main.command()
@click.argument("username")
@click.argument("email")
@click.password_option()
def register(username: str, email: str, password: str):
    """Create a new account."""
    _run(_register_impl(username, email, password))


async def _register_impl(username: str, email: str, password: str):
    async with _client() as c:
        r = await c.post("/api/v1/auth/register", json={
            "username": username,
            "email": email,
            "password": password,
        })
        _check(r)
        user = r.json()
        click.secho(f"Registered {user['username']} ({user['id']})", fg="green")


@main.command()
@click.argument("username")
@click.option("--password", prompt=True, hide_input=True)
def login(username: str, password: str):
    """Log in and print a bearer token.

    Use it with: export EVENTKEEPER_TOKEN=$(eventkeeper login alice --password ...)
    """
    _run(_login_impl(username, password))


async def _login_impl(username: str, password: str):
    async with _client() as c:
        r = await c.post("/api/v1/auth/login", json={
            "username": username,
            "password": password,
        })
        _check(r)
        body = r.json()
        click.echo(body["token"])
        click.secho(f"Expires at {body['expires_at']}", fg="cyan", err=True)


# ---------------------------------------------------------------------------
# eventkeeper events ...
# ---------------------------------------------------------------------------


@main.group()
def events():
    """List, create and delete your events."""


@events.command("list")
@token_option
@click.option("--page", default=0, show_default=True, help="Page number (0-indexed)")
@click.option("--size", default=20, show_default=True, help="Page size (1-100)")
def list_events(token: Optional[str], page: int, size: int):
    """List your events, newest first."""
    _run(_list_events_impl(_require_token(token), page, size))


async def _list_events_impl(token: str, page: int, size: int):
    async with _client(token) as c:
        r = await c.get("/api/v1/events", params={"page": page, "size": size})
        _check(r)
        body = r.json()

        if not body["items"]:
            click.echo("No events found.")
            return

        click.secho(
            f"Events (page {body['page'] + 1} of {body['pages']}, {body['total']} total):",
            bold=True,
        )
        _print_table(body["items"], [
            ("ID", "id", 36),
            ("TYPE", "type", 10),
            ("FROM", "from", 20),
            ("TO", "to", 20),
            ("CREATED", "created_at", 26),
        ])


@events.command("create")
@token_option
@click.argument("event_type", type=click.Choice(["NAVIGATION", "ACTION"], case_sensitive=False))
@click.argument("from_value")
@click.argument("to_value")
def create_event(token: Optional[str], event_type: str, from_value: str, to_value: str):
    """Record an event: where it came FROM and went TO."""
    _run(_create_event_impl(_require_token(token), event_type.upper(), from_value, to_value))


async def _create_event_impl(token: str, event_type: str, from_value: str, to_value: str):
    async with _client(token) as c:
        r = await c.post("/api/v1/events", json={
            "type": event_type,
            "from": from_value,
            "to": to_value,
        })
        _check(r)
        event = r.json()
        click.secho(f"Event {event['id']} created", fg="green")


@events.command("delete")
@token_option
@click.argument("event_id")
def delete_event(token: Optional[str], event_id: str):
    """Soft-delete one of your events."""
    _run(_delete_event_impl(_require_token(token), event_id))


async def _delete_event_impl(token: str, event_id: str):
    async with _client(token) as c:
        r = await c.delete(f"/api/v1/events/{event_id}")
        _check(r)
        click.secho(f"Event {event_id} deleted", fg="green")


# ---------------------------------------------------------------------------
# eventkeeper token-info
# ---------------------------------------------------------------------------


@main.command("token-info")
@click.argument("token")
@click.option("--username", help="Also check the token against this username")
def token_info(token: str, username: Optional[str]):
    """Decode a token locally with the configured secret.

    Reads EVENTKEEPER_JWT_SECRET, so it only works where the server's
    secret is available. Nothing is sent over the network.
    """
    from eventkeeper.config import Settings

    codec = TokenCodec.from_settings(Settings())
    try:
        subject = codec.parse_subject(token)
        expires_at = codec.extract_expiration(token)
    except TokenMalformed as e:
        _fail(str(e))

    click.echo(f"Subject:  {subject}")
    click.echo(f"Expires:  {expires_at.isoformat()}")

    valid = codec.is_valid(token, SimpleNamespace(username=username or subject))
    click.echo(f"Valid:    {click.style(str(valid).lower(), fg='green' if valid else 'red')}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()
