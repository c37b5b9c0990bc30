"""User service — credential store and account lifecycle.

Learn: Service layer separates business logic from HTTP routing.
API routes call services, services call the database. Every rule about
accounts lives here:
- first account ever created becomes admin (bootstrap rule)
- email and username are unique; collisions raise ConflictError naming the field
- login failures are indistinguishable (unknown user vs wrong password)
- admins cannot change their own role, and admin accounts cannot be deleted
"""

import uuid
from datetime import date
from functools import lru_cache
from typing import Optional

import structlog
from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lingopal.auth.password import hash_password, verify_password
from lingopal.db.models import Conversation, User
from lingopal.errors import BadRequestError, ConflictError, NotFoundError, UnauthorizedError

logger = structlog.get_logger()

INVALID_CREDENTIALS = "Invalid username or password"


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("lingopal-unknown-account")


def parse_id(value: str) -> Optional[uuid.UUID]:
    """Parse a path id. Malformed ids are treated like unknown ones."""
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class UserService:
    """Business logic for user accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Lookups ────────────────────────────────────────

    async def get(self, user_id: uuid.UUID) -> User | None:
        return await self.db.get(User, user_id)

    async def find_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def find_by_username(self, username: str) -> User | None:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalars().first()

    async def find_by_identifier(self, identifier: str) -> User | None:
        """Look a user up by email OR username."""
        result = await self.db.execute(
            select(User).where(
                or_(User.email == identifier, User.username == identifier)
            )
        )
        return result.scalars().first()

    async def list_users(self) -> list[User]:
        result = await self.db.execute(
            select(User).order_by(User.created_at.desc())
        )
        return list(result.scalars().all())

    async def any_user_exists(self) -> bool:
        return await self.db.scalar(select(User.id).limit(1)) is not None

    # ─── Create ─────────────────────────────────────────

    async def create_user(
        self,
        *,
        full_name: str,
        dob: date,
        gender: str,
        username: str,
        email: str,
        password: str,
        is_admin: Optional[bool] = None,
    ) -> User:
        """Create an account.

        Learn: is_admin=None means "self signup": the bootstrap rule
        decides (admin only if the table is empty). Admin-created accounts
        pass an explicit bool instead.

        The emptiness check and the insert are not atomic; two signups
        racing against an empty database could both become admin. That
        window only exists before the very first account, which is created
        by the operator.
        """
        if await self.find_by_email(email):
            raise ConflictError(f"An account with the email '{email}' already exists.")
        if await self.find_by_username(username):
            raise ConflictError(f"The username '{username}' is already taken.")

        if is_admin is None:
            is_admin = not await self.any_user_exists()

        user = User(
            full_name=full_name,
            dob=dob,
            gender=gender,
            username=username,
            email=email,
            password_hash=hash_password(password),
            is_admin=is_admin,
        )
        self.db.add(user)
        await self.save(user)
        logger.info("user.created", user_id=str(user.id), is_admin=user.is_admin)
        return user

    async def save(self, user: User) -> User:
        """Commit pending changes to a user, mapping constraint violations to ConflictError."""
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("A user with this email or username already exists.")
        await self.db.refresh(user)
        return user

    # ─── Login ──────────────────────────────────────────

    async def authenticate(self, identifier: str, password: str) -> User:
        """Return the user for valid credentials, else raise one generic 401."""
        user = await self.find_by_identifier(identifier)
        if not user:
            # Same bcrypt cost as a real check, so timing doesn't reveal the miss
            verify_password(password, _dummy_hash())
        if not user or not user.match_password(password):
            logger.info("auth.login_failed")
            raise UnauthorizedError(INVALID_CREDENTIALS)
        return user

    # ─── Self-service ───────────────────────────────────

    async def update_profile(
        self,
        user_id: uuid.UUID,
        *,
        full_name: Optional[str] = None,
        dob: Optional[date] = None,
        gender: Optional[str] = None,
    ) -> User:
        user = await self.get(user_id)
        if not user:
            raise NotFoundError("User not found")
        if full_name:
            user.full_name = full_name
        if dob:
            user.dob = dob
        if gender:
            user.gender = gender
        return await self.save(user)

    async def change_password(
        self, user_id: uuid.UUID, current_password: str, new_password: str
    ) -> None:
        user = await self.get(user_id)
        if not user or not user.match_password(current_password):
            raise UnauthorizedError("Invalid current password")
        user.password_hash = hash_password(new_password)
        await self.save(user)
        logger.info("user.password_changed", user_id=str(user_id))

    # ─── Admin ──────────────────────────────────────────

    async def set_role(
        self, actor_id: uuid.UUID, user_id: str, is_admin: bool
    ) -> User:
        target_id = parse_id(user_id)
        user = await self.get(target_id) if target_id else None
        if not user:
            raise NotFoundError("User not found")
        if user.id == actor_id:
            raise BadRequestError("Admins cannot change their own role.")
        user.is_admin = is_admin
        await self.save(user)
        logger.info("user.role_changed", user_id=str(user.id), is_admin=is_admin)
        return user

    async def delete_user(self, user_id: str) -> None:
        """Delete a non-admin account together with its conversations."""
        target_id = parse_id(user_id)
        user = await self.get(target_id) if target_id else None
        if not user:
            raise NotFoundError("User not found")
        if user.is_admin:
            raise BadRequestError("Cannot delete an admin account.")

        await self.db.execute(
            delete(Conversation).where(Conversation.user_id == user.id)
        )
        await self.db.delete(user)
        await self.db.commit()
        logger.info("user.deleted", user_id=str(target_id))
