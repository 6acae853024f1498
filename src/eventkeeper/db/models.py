"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Alembic migrations mirror what is declared here.

Key concepts:
- UUID primary keys (generic Uuid type: native on PostgreSQL, CHAR(32) on SQLite)
- Audit columns shared through a mixin and filled by explicit calls
  (eventkeeper.auth.audit), never by ORM event listeners
- Soft delete: deleted_at/deleted_by mark a row instead of removing it
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class AuditMixin:
    """Who created/updated/deleted a row, and when.

    deleted_at and deleted_by are written together by soft_delete() and
    are both NULL on live rows.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    deleted_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)


class User(AuditMixin, Base):
    """A registered principal and its credential.

    Learn: username is the token subject; id is what ownership and audit
    columns point at. Neither changes after registration.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)


class EventType(str, enum.Enum):
    NAVIGATION = "NAVIGATION"
    ACTION = "ACTION"


class Event(AuditMixin, Base):
    """A tracked navigation/action event, owned by exactly one user.

    Learn: owner_id is assigned once from the authenticated principal
    (OwnershipGuard.assign_owner) and no code path updates it afterwards.
    """

    __tablename__ = "events"
    __table_args__ = (
        Index("idx_events_owner_created", "owner_id", "created_at"),
        Index("idx_events_type", "type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    type: Mapped[EventType] = mapped_column(
        Enum(EventType, name="event_type", native_enum=False, length=50),
        nullable=False,
    )
    from_value: Mapped[str] = mapped_column(String(255), nullable=False)
    to_value: Mapped[str] = mapped_column(String(255), nullable=False)
