"""Per-request bearer authentication.

Learn: Authentication is fail-open. Whatever arrives in the Authorization
header — nothing, another scheme, garbage, an expired or forged token,
a token for a deleted user — the result is either an installed principal
or an empty context. Nothing here raises to the caller; rejecting
anonymous access is the job of get_current_principal at the perimeter.

State flow for one request:
    no header / not "Bearer <token>"       → empty
    parse_subject fails (TokenMalformed)   → empty (logged)
    context already authenticated          → keep existing principal
    subject no longer resolvable           → empty (logged)
    is_valid false (expired / mismatched)  → empty (logged)
    otherwise                              → install principal
"""

from typing import Optional

import structlog

from eventkeeper.auth.context import AuthenticatedPrincipal, SecurityContext
from eventkeeper.auth.jwt import TokenCodec, TokenMalformed
from eventkeeper.auth.principals import PrincipalStore
from eventkeeper.errors import PrincipalNotFound

logger = structlog.get_logger()

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from a "Bearer <token>" header value, else None."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


class RequestAuthenticator:
    """Resolves the Authorization header into an optional principal."""

    def __init__(self, codec: TokenCodec, store: PrincipalStore):
        self.codec = codec
        self.store = store

    async def authenticate(
        self,
        authorization: Optional[str],
        context: SecurityContext,
    ) -> Optional[AuthenticatedPrincipal]:
        token = extract_bearer_token(authorization)
        if token is None:
            return context.current()

        try:
            username = self.codec.parse_subject(token)
        except TokenMalformed as e:
            logger.warning("auth.token_malformed", error=str(e))
            return context.current()

        if context.is_authenticated:
            return context.current()

        try:
            user = await self.store.load_by_username(username)
        except PrincipalNotFound:
            logger.warning("auth.principal_unresolvable", username=username)
            return None

        if not self.codec.is_valid(token, user):
            logger.info("auth.token_rejected", username=username)
            return None

        principal = AuthenticatedPrincipal(principal_id=user.id, username=user.username)
        context.install(principal)
        logger.debug("auth.authenticated", username=user.username, user_id=str(user.id))
        return principal
