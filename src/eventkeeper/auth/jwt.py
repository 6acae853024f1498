"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. A token
is three base64url segments (header.payload.signature) carrying the
claims {sub: username, iat, exp}, signed with a shared HMAC secret.
Nothing is stored server-side, so there is no revocation: a token stays
valid until it expires.

Parsing and validity are deliberately split:
- parse_subject() / extract_expiration() verify the signature and the
  claim structure and raise TokenMalformed when they can't.
- is_valid() adds the subject match and the expiry check, and never raises.
"""

import time
from datetime import datetime, timezone
from typing import Any, Callable

import jwt

from eventkeeper.config import Settings

REQUIRED_CLAIMS = ["sub", "iat", "exp"]


class TokenError(Exception):
    """Raised when token creation/verification fails."""


class TokenMalformed(TokenError):
    """Token cannot be parsed or its signature does not verify."""


class TokenCodec:
    """Issues and parses signed bearer tokens.

    `principal` arguments only need a `username` attribute, so both the
    User model and AuthenticatedPrincipal work.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl_ms: int = 86_400_000,
        clock: Callable[[], float] = time.time,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl_ms = ttl_ms
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenCodec":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            ttl_ms=settings.token_ttl_ms,
        )

    def issue(self, principal: Any) -> str:
        """Create a signed token for the principal's username."""
        now = self._clock()
        payload = {
            "sub": principal.username,
            "iat": now,
            # Fractional NumericDate keeps millisecond TTLs exact.
            "exp": now + self.ttl_ms / 1000,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def parse_subject(self, token: str) -> str:
        """Return the token's subject (username). Raises TokenMalformed."""
        return self._claims(token)["sub"]

    def extract_expiration(self, token: str) -> datetime:
        """Return the token's expiry as an aware UTC datetime. Raises TokenMalformed."""
        return datetime.fromtimestamp(self._claims(token)["exp"], tz=timezone.utc)

    def is_valid(self, token: str, principal: Any) -> bool:
        """True iff the token names this principal and has not expired."""
        try:
            claims = self._claims(token)
        except TokenMalformed:
            return False
        return claims["sub"] == principal.username and claims["exp"] > self._clock()

    def _claims(self, token: str) -> dict:
        # Time claims are checked by is_valid() against the injected clock,
        # not here, so expired tokens still parse and report their subject.
        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": REQUIRED_CLAIMS,
                },
            )
        except jwt.InvalidTokenError as e:
            raise TokenMalformed(f"Invalid token: {e}") from e
