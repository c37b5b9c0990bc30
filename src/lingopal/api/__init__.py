"""API route aggregation.

All routers registered here get mounted in main.py under /api.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. This protects all routes in each router
without modifying individual handlers. Health and auth routers are
mounted open; the auth router gates /me and /change-password itself.
"""

from fastapi import APIRouter, Depends

from lingopal.api.ai import router as ai_router
from lingopal.api.auth import router as auth_router
from lingopal.api.conversations import router as conversations_router
from lingopal.api.health import router as health_router
from lingopal.api.users import router as users_router
from lingopal.auth.dependencies import get_current_user, require_admin

# All protected routers require authentication
_auth = [Depends(get_current_user)]
_admin = [Depends(require_admin)]

api_router = APIRouter(prefix="/api")

# Open routes — no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes — require a valid JWT
api_router.include_router(conversations_router, tags=["conversations"], dependencies=_auth)
api_router.include_router(ai_router, tags=["ai"], dependencies=_auth)

# Admin routes
api_router.include_router(users_router, tags=["users"], dependencies=_admin)
