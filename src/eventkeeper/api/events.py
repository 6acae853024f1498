"""Event API routes.

Learn: Routes translate HTTP to service calls; the service layer enforces
ownership and raises domain errors that the perimeter maps to 401/403/404.
The current principal is passed to every service call explicitly.

- POST   /events        → create (owner = caller, 201)
- GET    /events        → caller's events, paginated
- GET    /events/{id}   → one event (404 before 403)
- PUT    /events/{id}   → partial update
- DELETE /events/{id}   → soft delete (204)
"""

import uuid

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from eventkeeper.auth.context import AuthenticatedPrincipal
from eventkeeper.auth.dependencies import get_current_principal
from eventkeeper.db.engine import get_db
from eventkeeper.schemas.event import EventCreate, EventPage, EventRead, EventUpdate
from eventkeeper.services.event_service import EventService
from eventkeeper.services.pagination import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE,
    MAX_PAGE_SIZE,
    page_count,
)

router = APIRouter(prefix="/events")


def _svc(db: AsyncSession = Depends(get_db)) -> EventService:
    return EventService(db)


@router.post("", response_model=EventRead, status_code=201)
async def create_event(
    body: EventCreate,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    svc: EventService = Depends(_svc),
):
    """Record an event owned by the caller."""
    return await svc.create(
        principal,
        type=body.type,
        from_value=body.from_value,
        to_value=body.to_value,
    )


@router.get("", response_model=EventPage)
async def list_events(
    page: int = Query(0, ge=0, le=MAX_PAGE, description="Page number (0-indexed)"),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    svc: EventService = Depends(_svc),
):
    """List the caller's events, newest first."""
    events, total = await svc.list_own(principal, page=page, size=size)
    return EventPage(
        items=[EventRead.model_validate(e) for e in events],
        total=total,
        page=page,
        size=size,
        pages=page_count(total, size),
    )


@router.get("/{event_id}", response_model=EventRead)
async def get_event(
    event_id: uuid.UUID,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    svc: EventService = Depends(_svc),
):
    return await svc.get(event_id, principal)


@router.put("/{event_id}", response_model=EventRead)
async def update_event(
    event_id: uuid.UUID,
    body: EventUpdate,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    svc: EventService = Depends(_svc),
):
    """Partially update an event (type, from, to)."""
    return await svc.update(
        event_id,
        principal,
        type=body.type,
        from_value=body.from_value,
        to_value=body.to_value,
    )


@router.delete("/{event_id}", status_code=204)
async def delete_event(
    event_id: uuid.UUID,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    svc: EventService = Depends(_svc),
):
    """Soft-delete an event. The row is kept, marked with who deleted it and when."""
    await svc.delete(event_id, principal)
    return Response(status_code=204)
