"""Principal store — credential lookup by username.

Learn: This is the only I/O the authentication stage performs. It is
used at login (to compare the password hash) and on every
authenticated request (to re-resolve the token's subject before the
token is trusted). Soft-deleted users do not resolve, so their tokens
stop working immediately.
"""

import structlog
from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from eventkeeper.db.models import User
from eventkeeper.errors import PrincipalNotFound

logger = structlog.get_logger()


class PrincipalStore:
    """Resolves stored identities and credentials."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def load_by_username(self, username: str) -> User:
        """Return the live user with this username. Raises PrincipalNotFound."""
        result = await self.db.execute(
            select(User).where(User.username == username, User.deleted_at.is_(None))
        )
        user = result.scalars().first()
        if user is None:
            logger.debug("principals.not_found", username=username)
            raise PrincipalNotFound(username)
        return user

    async def exists_by_username(self, username: str) -> bool:
        # Includes soft-deleted rows: a deleted account keeps its username.
        return await self._exists(User.username == username)

    async def exists_by_email(self, email: str) -> bool:
        return await self._exists(User.email == email)

    async def _exists(self, clause) -> bool:
        result = await self.db.execute(select(exists().where(clause)))
        return bool(result.scalar())
