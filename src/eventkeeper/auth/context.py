"""Request-scoped security context.

Learn: The authenticated identity is an immutable value, not a mutable
global. Each request gets its own SecurityContext (stored on
request.state by the auth dependencies), the authenticator installs at
most one principal into it, and services receive the principal as an
explicit argument.
"""

import uuid
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AuthenticatedPrincipal:
    """The identity of the actor behind one request."""

    principal_id: uuid.UUID
    username: str


class SecurityContextError(RuntimeError):
    """A second principal was installed into the same request context."""


class SecurityContext:
    """Write-once holder of the current request's principal."""

    __slots__ = ("_principal",)

    def __init__(self) -> None:
        self._principal: Optional[AuthenticatedPrincipal] = None

    def current(self) -> Optional[AuthenticatedPrincipal]:
        return self._principal

    @property
    def is_authenticated(self) -> bool:
        return self._principal is not None

    def install(self, principal: AuthenticatedPrincipal) -> None:
        if self._principal is not None:
            raise SecurityContextError("Security context already holds a principal")
        self._principal = principal

    def __repr__(self) -> str:
        who = self._principal.username if self._principal else None
        return f"SecurityContext(principal={who!r})"
