"""Ownership authorization.

Learn: Every by-id operation on an owned resource goes through
authorize_access(), which evaluates three checks in a fixed order:

    1. existence  → NOT_FOUND (404), whoever is asking
    2. identity   → UNAUTHENTICATED (401)
    3. ownership  → FORBIDDEN (403)

evaluate() returns an AccessDecision instead of raising, so callers that
want to branch on the outcome can do so exhaustively. unwrap() turns a
non-ALLOWED decision into the matching domain exception for the API
perimeter.

The loader runs on the caller's session, and the mutation that follows
uses the same session, so check and write share one transaction.
"""

import enum
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from eventkeeper.auth.context import AuthenticatedPrincipal
from eventkeeper.errors import Forbidden, ResourceNotFound, Unauthenticated


class Outcome(str, enum.Enum):
    ALLOWED = "allowed"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    UNAUTHENTICATED = "unauthenticated"


@dataclass(frozen=True)
class AccessDecision:
    outcome: Outcome
    resource_id: Any
    kind: str = "Resource"
    resource: Any = None
    principal: Optional[AuthenticatedPrincipal] = None

    @property
    def allowed(self) -> bool:
        return self.outcome is Outcome.ALLOWED

    def unwrap(self) -> Any:
        """Return the resource, or raise the exception matching the outcome."""
        if self.outcome is Outcome.ALLOWED:
            return self.resource
        if self.outcome is Outcome.NOT_FOUND:
            raise ResourceNotFound(self.resource_id, kind=self.kind)
        if self.outcome is Outcome.UNAUTHENTICATED:
            raise Unauthenticated()
        raise Forbidden(self.resource_id, self.principal.principal_id)


def require_principal(
    principal: Optional[AuthenticatedPrincipal],
) -> AuthenticatedPrincipal:
    """Return the principal, or raise Unauthenticated when there is none."""
    if principal is None:
        raise Unauthenticated()
    return principal


class OwnershipGuard:
    """Ownership rules for one resource kind.

    owner_attr names the attribute holding the owning principal's id:
    "owner_id" for events, "id" for a user's own account.
    """

    def __init__(self, kind: str, owner_attr: str = "owner_id"):
        self.kind = kind
        self.owner_attr = owner_attr

    def evaluate(
        self,
        resource_id: Any,
        resource: Any,
        principal: Optional[AuthenticatedPrincipal],
    ) -> AccessDecision:
        if resource is None:
            return AccessDecision(Outcome.NOT_FOUND, resource_id, self.kind)
        if principal is None:
            return AccessDecision(Outcome.UNAUTHENTICATED, resource_id, self.kind)
        if getattr(resource, self.owner_attr) != principal.principal_id:
            return AccessDecision(
                Outcome.FORBIDDEN, resource_id, self.kind, principal=principal
            )
        return AccessDecision(
            Outcome.ALLOWED, resource_id, self.kind, resource=resource, principal=principal
        )

    async def authorize_access(
        self,
        resource_id: Any,
        loader: Callable[[Any], Awaitable[Any]],
        principal: Optional[AuthenticatedPrincipal],
    ) -> Any:
        """Load the resource and return it if the principal owns it."""
        resource = await loader(resource_id)
        return self.evaluate(resource_id, resource, principal).unwrap()

    def assign_owner(self, resource: Any, principal: Optional[AuthenticatedPrincipal]) -> None:
        """Set the owner from the principal, overwriting anything already there."""
        setattr(resource, self.owner_attr, require_principal(principal).principal_id)

    def owned_by(self, model: Any, principal: Optional[AuthenticatedPrincipal]):
        """SQL filter restricting a query to rows owned by the principal."""
        owner_id: uuid.UUID = require_principal(principal).principal_id
        return getattr(model, self.owner_attr) == owner_id
