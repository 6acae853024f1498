"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. This protects all routes in each router
without modifying individual handlers. Health and auth routers are
open (no auth required); /auth/me declares its own requirement.
"""

from fastapi import APIRouter, Depends

from eventkeeper.api.auth import router as auth_router
from eventkeeper.api.events import router as events_router
from eventkeeper.api.health import router as health_router
from eventkeeper.api.users import router as users_router
from eventkeeper.auth.dependencies import get_current_principal

# All protected routers require authentication
_auth = [Depends(get_current_principal)]

api_router = APIRouter(prefix="/api/v1")

# Open routes (no auth required)
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes (valid bearer token required)
api_router.include_router(events_router, tags=["events"], dependencies=_auth)
api_router.include_router(users_router, tags=["users"], dependencies=_auth)
