"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers and routers to
extract and validate the current identity from the request.

Two stages, composed:
1. authenticate_request — the "soft" dependency. Runs the fail-open
   RequestAuthenticator and returns a principal or None. Never raises.
2. get_current_principal — the "hard" dependency. Raises Unauthenticated
   (401 at the perimeter) when stage 1 produced nothing.

FastAPI caches dependency results per request, so a router-level
get_current_principal and a handler-level one authenticate only once.
"""

from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from eventkeeper.auth.authenticator import RequestAuthenticator
from eventkeeper.auth.context import AuthenticatedPrincipal, SecurityContext
from eventkeeper.auth.jwt import TokenCodec
from eventkeeper.auth.ownership import require_principal
from eventkeeper.auth.principals import PrincipalStore
from eventkeeper.db.engine import get_db


def get_token_codec(request: Request) -> TokenCodec:
    """The codec built once by create_app()."""
    return request.app.state.token_codec


def get_security_context(request: Request) -> SecurityContext:
    """Return this request's SecurityContext, creating it on first use."""
    context = getattr(request.state, "security_context", None)
    if context is None:
        context = SecurityContext()
        request.state.security_context = context
    return context


async def authenticate_request(
    authorization: Optional[str] = Header(None),
    codec: TokenCodec = Depends(get_token_codec),
    context: SecurityContext = Depends(get_security_context),
    db: AsyncSession = Depends(get_db),
) -> Optional[AuthenticatedPrincipal]:
    """Extract current principal (optional — returns None if not authenticated)."""
    authenticator = RequestAuthenticator(codec=codec, store=PrincipalStore(db))
    return await authenticator.authenticate(authorization, context)


async def get_current_principal(
    principal: Optional[AuthenticatedPrincipal] = Depends(authenticate_request),
) -> AuthenticatedPrincipal:
    """Extract current principal (required — 401 if not authenticated)."""
    return require_principal(principal)
