"""User management API — admin only.

Learn: The whole router is mounted behind require_admin in
api/__init__.py, so handlers only see admins. The acting admin is
resolved again here where a rule depends on who is asking (an admin
can't change their own role).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lingopal.auth.dependencies import CurrentIdentity, require_admin
from lingopal.db.engine import get_db
from lingopal.schemas.user import AdminUserCreate, MessageResponse, RoleUpdate, UserRead
from lingopal.services.user_service import UserService

router = APIRouter(prefix="/users")


def _svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


@router.post("", response_model=UserRead, status_code=201)
async def create_user(body: AdminUserCreate, svc: UserService = Depends(_svc)):
    """Create an account; the admin decides the role (default: regular user)."""
    return await svc.create_user(
        full_name=body.full_name,
        dob=body.dob,
        gender=body.gender,
        username=body.username,
        email=body.email,
        password=body.password,
        is_admin=body.is_admin,
    )


@router.get("", response_model=list[UserRead])
async def list_users(svc: UserService = Depends(_svc)):
    """All accounts, newest first."""
    return await svc.list_users()


@router.patch("/{user_id}", response_model=UserRead)
async def update_user_role(
    user_id: str,
    body: RoleUpdate,
    identity: CurrentIdentity = Depends(require_admin),
    svc: UserService = Depends(_svc),
):
    return await svc.set_role(identity.user_id, user_id, body.is_admin)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: str, svc: UserService = Depends(_svc)):
    """Remove a non-admin account and its conversations."""
    await svc.delete_user(user_id)
    return {"message": "User removed"}
