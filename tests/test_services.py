"""Service-layer tests — calling UserService/EventService directly.

Learn: These skip HTTP entirely. The principal is passed explicitly, the
way the routes pass it, and domain errors are asserted as exceptions
rather than status codes.
"""

import uuid

import pytest
from sqlalchemy import func, select

from conftest import as_principal
from eventkeeper.auth.password import dummy_hash, verify_password
from eventkeeper.db.models import Event, EventType, User
from eventkeeper.errors import (
    DuplicateIdentity,
    Forbidden,
    InvalidCredentials,
    ResourceNotFound,
    Unauthenticated,
)
from eventkeeper.services import user_service
from eventkeeper.services.event_service import EventService
from eventkeeper.services.user_service import UserService


@pytest.fixture()
def users(db_session):
    return UserService(db_session)


@pytest.fixture()
def events(db_session):
    return EventService(db_session)


@pytest.mark.asyncio
async def test_register_hashes_password(users):
    user = await users.register("alice", "alice@example.com", "secret123")
    assert user.password_hash != "secret123"
    assert user.password_hash.startswith("$2")
    assert verify_password("secret123", user.password_hash)
    assert user.created_by is None
    assert user.deleted_at is None


@pytest.mark.asyncio
async def test_register_duplicate_fields(users):
    await users.register("alice", "alice@example.com", "secret123")
    with pytest.raises(DuplicateIdentity) as exc:
        await users.register("alice", "other@example.com", "secret123")
    assert exc.value.field == "username"
    with pytest.raises(DuplicateIdentity) as exc:
        await users.register("alice2", "alice@example.com", "secret123")
    assert exc.value.field == "email"


@pytest.mark.asyncio
async def test_login_issues_token(users, codec):
    await users.register("alice", "alice@example.com", "secret123")
    user, token = await users.login(codec, "alice", "secret123")
    assert codec.is_valid(token, user)


@pytest.mark.asyncio
async def test_login_failures_are_generic(users, codec):
    await users.register("alice", "alice@example.com", "secret123")
    with pytest.raises(InvalidCredentials) as wrong_pw:
        await users.login(codec, "alice", "wrong-password")
    with pytest.raises(InvalidCredentials) as unknown:
        await users.login(codec, "nobody", "secret123")
    assert str(wrong_pw.value) == str(unknown.value)


@pytest.mark.asyncio
async def test_unknown_user_still_checks_a_password(users, codec, monkeypatch):
    checked = []

    def recording_verify(password, password_hash):
        checked.append(password_hash)
        return verify_password(password, password_hash)

    monkeypatch.setattr(user_service, "verify_password", recording_verify)
    with pytest.raises(InvalidCredentials):
        await users.login(codec, "nobody", "secret123")
    assert checked == [dummy_hash()]
    assert checked[0].startswith("$2")


# ═══════════════════════════════════════════════════════════
# Registration races
# ═══════════════════════════════════════════════════════════


def miss_first_check(monkeypatch, store, name):
    """Make the store's first existence check report False, as if a
    concurrent registration had not committed yet."""
    real = getattr(store, name)
    calls = []

    async def lagging(value):
        calls.append(value)
        return False if len(calls) == 1 else await real(value)

    monkeypatch.setattr(store, name, lagging)


@pytest.mark.asyncio
async def test_register_race_on_username_is_duplicate(users, db_session, monkeypatch):
    await users.register("alice", "alice@example.com", "secret123")
    miss_first_check(monkeypatch, users.principals, "exists_by_username")
    with pytest.raises(DuplicateIdentity) as exc:
        await users.register("alice", "other@example.com", "secret123")
    assert exc.value.field == "username"

    # The session is usable again after the failed commit.
    count = await db_session.scalar(select(func.count()).select_from(User))
    assert count == 1


@pytest.mark.asyncio
async def test_register_race_on_email_is_duplicate(users, monkeypatch):
    await users.register("alice", "alice@example.com", "secret123")
    miss_first_check(monkeypatch, users.principals, "exists_by_email")
    with pytest.raises(DuplicateIdentity) as exc:
        await users.register("alice2", "alice@example.com", "secret123")
    assert exc.value.field == "email"
    assert str(exc.value) == "Email already exists: alice@example.com"


@pytest.mark.asyncio
async def test_event_crud_with_audit(users, events):
    alice = as_principal(await users.register("alice", "alice@example.com", "secret123"))

    event = await events.create(alice, EventType.NAVIGATION, "/a", "/b")
    assert event.owner_id == alice.principal_id
    assert event.created_by == alice.principal_id

    updated = await events.update(event.id, alice, to_value="/c")
    assert updated.to_value == "/c"
    assert updated.from_value == "/a"
    assert updated.updated_by == alice.principal_id

    await events.delete(event.id, alice)
    with pytest.raises(ResourceNotFound):
        await events.get(event.id, alice)


@pytest.mark.asyncio
async def test_event_access_order(users, events):
    alice = as_principal(await users.register("alice", "alice@example.com", "secret123"))
    bob = as_principal(await users.register("bob", "bob@example.com", "secret123"))
    event = await events.create(alice, EventType.ACTION, "x", "y")

    with pytest.raises(Forbidden):
        await events.get(event.id, bob)
    with pytest.raises(Unauthenticated):
        await events.get(event.id, None)
    with pytest.raises(ResourceNotFound):
        await events.get(uuid.uuid4(), None)
    with pytest.raises(Unauthenticated):
        await events.create(None, EventType.ACTION, "x", "y")


@pytest.mark.asyncio
async def test_list_own_filters_before_paging(users, events):
    alice = as_principal(await users.register("alice", "alice@example.com", "secret123"))
    bob = as_principal(await users.register("bob", "bob@example.com", "secret123"))
    for i in range(3):
        await events.create(bob, EventType.ACTION, f"b{i}", "z")
    mine = await events.create(alice, EventType.ACTION, "a", "z")

    page, total = await events.list_own(alice, page=0, size=2)
    assert total == 1
    assert [e.id for e in page] == [mine.id]


@pytest.mark.asyncio
async def test_deleted_user_row_kept(users, db_session):
    user = await users.register("alice", "alice@example.com", "secret123")
    alice = as_principal(user)
    await users.delete_user(user.id, alice)

    row = (await db_session.execute(select(User).where(User.id == user.id))).scalar_one()
    assert row.deleted_at is not None
    assert row.deleted_by == alice.principal_id
    with pytest.raises(ResourceNotFound):
        await users.get_user(user.id)


@pytest.mark.asyncio
async def test_soft_deleted_event_not_counted(users, events, db_session):
    alice = as_principal(await users.register("alice", "alice@example.com", "secret123"))
    keep = await events.create(alice, EventType.ACTION, "a", "b")
    drop = await events.create(alice, EventType.ACTION, "c", "d")
    await events.delete(drop.id, alice)

    page, total = await events.list_own(alice, page=0, size=20)
    assert total == 1
    assert [e.id for e in page] == [keep.id]

    rows = (await db_session.execute(select(Event))).scalars().all()
    assert len(rows) == 2
