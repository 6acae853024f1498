"""User API routes.

Learn: Any authenticated user can look up accounts, but an account can
only be deleted by its own principal (403 otherwise). Deletion is soft:
the row stays, the username and email stay reserved, and the user's
tokens stop resolving immediately.
"""

import uuid

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from eventkeeper.auth.context import AuthenticatedPrincipal
from eventkeeper.auth.dependencies import get_current_principal
from eventkeeper.db.engine import get_db
from eventkeeper.schemas.auth import UserPage, UserRead
from eventkeeper.services.pagination import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE,
    MAX_PAGE_SIZE,
    page_count,
)
from eventkeeper.services.user_service import UserService

router = APIRouter(prefix="/users")


def _svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


@router.get("", response_model=UserPage)
async def list_users(
    page: int = Query(0, ge=0, le=MAX_PAGE, description="Page number (0-indexed)"),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    svc: UserService = Depends(_svc),
):
    users, total = await svc.list_users(page=page, size=size)
    return UserPage(
        items=[UserRead.model_validate(u) for u in users],
        total=total,
        page=page,
        size=size,
        pages=page_count(total, size),
    )


@router.get("/username/{username}", response_model=UserRead)
async def get_user_by_username(username: str, svc: UserService = Depends(_svc)):
    return await svc.get_by_username(username)


@router.get("/{user_id}", response_model=UserRead)
async def get_user(user_id: uuid.UUID, svc: UserService = Depends(_svc)):
    return await svc.get_user(user_id)


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: uuid.UUID,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    svc: UserService = Depends(_svc),
):
    """Soft-delete your own account."""
    await svc.delete_user(user_id, principal)
    return Response(status_code=204)
