"""SecurityContext tests — write-once principal holder."""

import uuid

import pytest

from eventkeeper.auth.context import (
    AuthenticatedPrincipal,
    SecurityContext,
    SecurityContextError,
)


def principal(name: str = "alice") -> AuthenticatedPrincipal:
    return AuthenticatedPrincipal(principal_id=uuid.uuid4(), username=name)


def test_starts_empty():
    ctx = SecurityContext()
    assert ctx.current() is None
    assert ctx.is_authenticated is False


def test_install_once():
    ctx = SecurityContext()
    p = principal()
    ctx.install(p)
    assert ctx.current() is p
    assert ctx.is_authenticated is True


def test_second_install_rejected_and_first_kept():
    ctx = SecurityContext()
    first = principal("alice")
    ctx.install(first)
    with pytest.raises(SecurityContextError):
        ctx.install(principal("bob"))
    assert ctx.current() is first


def test_principal_is_immutable():
    p = principal()
    with pytest.raises(AttributeError):
        p.username = "mallory"


def test_contexts_are_independent():
    a, b = SecurityContext(), SecurityContext()
    a.install(principal())
    assert b.current() is None


def test_repr_shows_username_only():
    ctx = SecurityContext()
    ctx.install(principal("alice"))
    assert repr(ctx) == "SecurityContext(principal='alice')"
