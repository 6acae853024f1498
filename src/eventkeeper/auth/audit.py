"""Audit stamping and soft delete.

Learn: Audit columns are filled by explicit calls that take the acting
principal, not by ORM listeners reading a global. Soft delete marks a
row (deleted_at + deleted_by, always together) and leaves it in the
table; read paths filter it out with not_deleted().
"""

from typing import Any, Optional

from eventkeeper.auth.context import AuthenticatedPrincipal
from eventkeeper.db.models import utcnow


def _actor_id(principal: Optional[AuthenticatedPrincipal]):
    return principal.principal_id if principal else None


def stamp_created(record: Any, principal: Optional[AuthenticatedPrincipal]) -> None:
    """Fill created/updated columns for a new row.

    principal is None for self-registration, where no one is signed in yet.
    """
    now = utcnow()
    record.created_at = now
    record.created_by = _actor_id(principal)
    record.updated_at = now
    record.updated_by = _actor_id(principal)


def stamp_updated(record: Any, principal: Optional[AuthenticatedPrincipal]) -> None:
    record.updated_at = utcnow()
    record.updated_by = _actor_id(principal)


def is_deleted(record: Any) -> bool:
    return record.deleted_at is not None


def soft_delete(record: Any, principal: AuthenticatedPrincipal) -> bool:
    """Mark the record deleted by the principal.

    Returns False and leaves the first stamp untouched if the record was
    already deleted.
    """
    if is_deleted(record):
        return False
    now = utcnow()
    record.deleted_at = now
    record.deleted_by = principal.principal_id
    record.updated_at = now
    record.updated_by = principal.principal_id
    return True


def not_deleted(model: Any):
    """SQL filter for live (not soft-deleted) rows."""
    return model.deleted_at.is_(None)
