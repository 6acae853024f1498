"""Event service — owner-scoped CRUD for tracked events.

Learn: Every operation takes the caller's AuthenticatedPrincipal as an
explicit argument. By-id operations go through event_guard, which
checks existence before ownership; list queries filter by owner in SQL
before paginating, so no page can leak another owner's rows.

Soft-deleted events are invisible to every read path: get, list,
update and delete all treat them as missing (404).
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from eventkeeper.auth.audit import not_deleted, soft_delete, stamp_created, stamp_updated
from eventkeeper.auth.context import AuthenticatedPrincipal
from eventkeeper.auth.ownership import OwnershipGuard, require_principal
from eventkeeper.db.models import Event, EventType
from eventkeeper.services.pagination import page_offset

logger = structlog.get_logger()

event_guard = OwnershipGuard(kind="Event")


class EventService:
    """Business logic for events."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load(self, event_id: uuid.UUID, for_update: bool = False) -> Optional[Event]:
        query = select(Event).where(Event.id == event_id, not_deleted(Event))
        if for_update:
            # Row lock on PostgreSQL closes the gap between the ownership
            # check and the write; SQLite ignores it.
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalars().first()

    async def create(
        self,
        principal: Optional[AuthenticatedPrincipal],
        type: EventType,
        from_value: str,
        to_value: str,
    ) -> Event:
        principal = require_principal(principal)
        event = Event(id=uuid.uuid4(), type=type, from_value=from_value, to_value=to_value)
        event_guard.assign_owner(event, principal)
        stamp_created(event, principal)
        self.db.add(event)
        await self.db.commit()
        logger.info(
            "events.created",
            event_id=str(event.id),
            type=type.value,
            owner_id=str(principal.principal_id),
        )
        return event

    async def get(
        self, event_id: uuid.UUID, principal: Optional[AuthenticatedPrincipal]
    ) -> Event:
        return await event_guard.authorize_access(event_id, self._load, principal)

    async def list_own(
        self,
        principal: Optional[AuthenticatedPrincipal],
        page: int,
        size: int,
    ) -> tuple[list[Event], int]:
        """One page of the principal's live events, newest first, plus the total."""
        scope = (event_guard.owned_by(Event, principal), not_deleted(Event))
        total = await self.db.scalar(select(func.count()).select_from(Event).where(*scope))
        result = await self.db.execute(
            select(Event)
            .where(*scope)
            .order_by(Event.created_at.desc(), Event.id)
            .offset(page_offset(page, size))
            .limit(size)
        )
        return list(result.scalars().all()), total or 0

    async def update(
        self,
        event_id: uuid.UUID,
        principal: Optional[AuthenticatedPrincipal],
        type: Optional[EventType] = None,
        from_value: Optional[str] = None,
        to_value: Optional[str] = None,
    ) -> Event:
        """Apply the non-None fields. Last write wins."""
        event = await event_guard.authorize_access(
            event_id, lambda eid: self._load(eid, for_update=True), principal
        )
        changes = {}
        if type is not None:
            changes["type"] = type
        if from_value is not None:
            changes["from_value"] = from_value
        if to_value is not None:
            changes["to_value"] = to_value

        for field, value in changes.items():
            setattr(event, field, value)
        stamp_updated(event, principal)
        await self.db.commit()
        logger.info("events.updated", event_id=str(event_id), fields=sorted(changes))
        return event

    async def delete(
        self, event_id: uuid.UUID, principal: Optional[AuthenticatedPrincipal]
    ) -> None:
        event = await event_guard.authorize_access(
            event_id, lambda eid: self._load(eid, for_update=True), principal
        )
        soft_delete(event, principal)
        await self.db.commit()
        logger.info(
            "events.deleted", event_id=str(event_id), deleted_by=str(principal.principal_id)
        )
