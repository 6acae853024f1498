"""Auth API — registration, login, current user.

Learn: Routes for the credential lifecycle:
- POST /auth/register → create a new user account
- POST /auth/login → username/password → signed bearer token
- GET /auth/me → current user info (requires a valid token)

There is no logout endpoint: tokens are not tracked server-side, so the
client simply discards its token. It stays valid until it expires.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eventkeeper.auth.context import AuthenticatedPrincipal
from eventkeeper.auth.dependencies import get_current_principal, get_token_codec
from eventkeeper.auth.jwt import TokenCodec
from eventkeeper.db.engine import get_db
from eventkeeper.schemas.auth import LoginRequest, LoginResponse, RegisterRequest, UserRead
from eventkeeper.services.user_service import UserService

router = APIRouter(prefix="/auth")


def _svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=UserRead, status_code=201)
async def register(body: RegisterRequest, svc: UserService = Depends(_svc)):
    """Create a new user account."""
    return await svc.register(
        username=body.username, email=body.email, password=body.password
    )


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    svc: UserService = Depends(_svc),
    codec: TokenCodec = Depends(get_token_codec),
):
    """Login with username and password → bearer token."""
    user, token = await svc.login(codec, body.username, body.password)
    return LoginResponse(
        user_id=user.id,
        username=user.username,
        email=user.email,
        token=token,
        expires_at=codec.extract_expiration(token),
    )


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=UserRead)
async def get_me(
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    svc: UserService = Depends(_svc),
):
    """Get the current authenticated user's info."""
    return await svc.get_user(principal.principal_id)
