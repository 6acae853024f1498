"""User service — registration, login, and account lookups.

Learn: Service layer separates business logic from HTTP routing.
API routes call services, services call the database and raise domain
errors (eventkeeper.errors); the API perimeter turns those into status
codes.

Login never reveals which half of the credential was wrong: an unknown
username and a bad password both raise InvalidCredentials with the same
message, so the endpoint can't be used to enumerate accounts.
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eventkeeper.auth.audit import not_deleted, soft_delete, stamp_created
from eventkeeper.auth.context import AuthenticatedPrincipal
from eventkeeper.auth.jwt import TokenCodec
from eventkeeper.auth.ownership import OwnershipGuard
from eventkeeper.auth.password import dummy_hash, hash_password, verify_password
from eventkeeper.auth.principals import PrincipalStore
from eventkeeper.db.models import User
from eventkeeper.errors import (
    DuplicateIdentity,
    InvalidCredentials,
    PrincipalNotFound,
    ResourceNotFound,
)
from eventkeeper.services.pagination import page_offset

logger = structlog.get_logger()

# A principal owns exactly one user record: its own.
account_guard = OwnershipGuard(kind="User", owner_attr="id")


class UserService:
    """Business logic for user accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.principals = PrincipalStore(db)

    # ─── Registration / login ────────────────────────────

    async def register(self, username: str, email: str, password: str) -> User:
        if await self.principals.exists_by_username(username):
            logger.warning("users.register_rejected", reason="username_taken", username=username)
            raise DuplicateIdentity("username", username)
        if await self.principals.exists_by_email(email):
            logger.warning("users.register_rejected", reason="email_taken", username=username)
            raise DuplicateIdentity("email", email)

        user = User(
            id=uuid.uuid4(),
            username=username,
            email=email,
            password_hash=hash_password(password),
        )
        stamp_created(user, None)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same identity.
            await self.db.rollback()
            field, value = (
                ("username", username)
                if await self.principals.exists_by_username(username)
                else ("email", email)
            )
            logger.warning("users.register_rejected", reason=f"{field}_taken", username=username)
            raise DuplicateIdentity(field, value)
        logger.info("users.registered", user_id=str(user.id), username=username)
        return user

    async def login(self, codec: TokenCodec, username: str, password: str) -> tuple[User, str]:
        """Verify credentials and issue a token. Returns (user, token)."""
        try:
            user = await self.principals.load_by_username(username)
        except PrincipalNotFound:
            # Unknown users pay the same bcrypt cost as a wrong password.
            verify_password(password, dummy_hash())
            logger.warning("users.login_failed", reason="unknown_user", username=username)
            raise InvalidCredentials(username)

        if not verify_password(password, user.password_hash):
            logger.warning("users.login_failed", reason="bad_password", username=username)
            raise InvalidCredentials(username)

        token = codec.issue(user)
        logger.info("users.login", user_id=str(user.id), username=username)
        return user, token

    # ─── Lookups ─────────────────────────────────────────

    async def _load(self, user_id: uuid.UUID, for_update: bool = False) -> Optional[User]:
        query = select(User).where(User.id == user_id, not_deleted(User))
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalars().first()

    async def get_user(self, user_id: uuid.UUID) -> User:
        user = await self._load(user_id)
        if user is None:
            raise ResourceNotFound(user_id, kind="User")
        return user

    async def get_by_username(self, username: str) -> User:
        try:
            return await self.principals.load_by_username(username)
        except PrincipalNotFound:
            raise ResourceNotFound(username, kind="User")

    async def list_users(self, page: int, size: int) -> tuple[list[User], int]:
        """One page of live users ordered by username, plus the total count."""
        total = await self.db.scalar(
            select(func.count()).select_from(User).where(not_deleted(User))
        )
        result = await self.db.execute(
            select(User)
            .where(not_deleted(User))
            .order_by(User.username)
            .offset(page_offset(page, size))
            .limit(size)
        )
        return list(result.scalars().all()), total or 0

    # ─── Deletion ────────────────────────────────────────

    async def delete_user(
        self, user_id: uuid.UUID, principal: Optional[AuthenticatedPrincipal]
    ) -> None:
        """Soft-delete an account. Only the account's own principal may do this."""
        user = await account_guard.authorize_access(
            user_id, lambda uid: self._load(uid, for_update=True), principal
        )
        soft_delete(user, principal)
        await self.db.commit()
        logger.info("users.deleted", user_id=str(user_id))
