"""FastAPI auth dependencies — the Identity Gate and the Admin Gate.

Learn: These are used as Depends() in route handlers (or at the
include_router level) to resolve the caller:

1. get_current_user — Bearer JWT → verified user id → user re-loaded from
   the DB. Missing header, bad/expired token, or a deleted account all
   give the same 401.
2. require_admin — runs get_current_user, then 403 unless is_admin.
"""

import uuid
from typing import Optional

import structlog
from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from lingopal.auth.jwt import TokenError, verify_token
from lingopal.config import Settings
from lingopal.db.engine import get_db
from lingopal.db.models import User
from lingopal.dependencies import get_settings
from lingopal.schemas.user import UserRead

logger = structlog.get_logger()


class CurrentIdentity:
    """The authenticated user making the request.

    Learn: Carries the sanitized profile, never the ORM row, so the
    password hash can't ride along into handlers by accident.
    """

    def __init__(self, profile: UserRead):
        self.profile = profile
        self.user_id: uuid.UUID = profile.id
        self.is_admin: bool = profile.is_admin

    @classmethod
    def from_user(cls, user: User) -> "CurrentIdentity":
        return cls(UserRead.model_validate(user))


def _unauthorized(detail: str = "Not authorized, token failed") -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> CurrentIdentity:
    """Resolve the Bearer token to a live account (401 otherwise)."""
    if not authorization or not authorization.startswith("Bearer "):
        raise _unauthorized("Not authorized, no token")

    token = authorization[7:].strip()
    try:
        user_id = uuid.UUID(verify_token(token, settings))
    except (TokenError, ValueError) as e:
        logger.info("auth.token_rejected", reason=str(e))
        raise _unauthorized()

    user = await db.get(User, user_id)
    if not user:
        logger.info("auth.token_for_missing_user", user_id=str(user_id))
        raise _unauthorized()

    return CurrentIdentity.from_user(user)


async def require_admin(
    identity: CurrentIdentity = Depends(get_current_user),
) -> CurrentIdentity:
    """Admin Gate — 403 for authenticated non-admins."""
    if not identity.is_admin:
        raise HTTPException(status_code=403, detail="Not authorized as an admin")
    return identity
