"""Password reset — emailed single-use tokens with a one-hour expiry.

Learn: The flow per user is Idle → PendingReset → Idle:
1. request_reset(email) stores sha256(token) + expiry on the user and
   emails the raw token inside a frontend link.
2. reset_password(token, pw) consumes it with ONE conditional UPDATE:
   matching hash AND expiry still in the future. The new password hash is
   written and both reset fields cleared in the same statement, so a
   token can never be used twice and a failed attempt mutates nothing.

Unknown emails get a 404. That tells callers whether an address has an
account; it is the product's choice to favour direct feedback here.

The token is only committed after the mail server accepts the message.
If delivery fails the session is rolled back and the caller gets a 503,
so no reset is ever "pending" without an email behind it.
"""

import secrets
from datetime import timedelta

import structlog
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from lingopal.auth.password import hash_password, hash_reset_token
from lingopal.config import Settings
from lingopal.db.models import User, utcnow
from lingopal.errors import InvalidOrExpiredTokenError, NotFoundError, ServiceUnavailableError
from lingopal.services import emails
from lingopal.services.mailer import Mailer, MailDeliveryError
from lingopal.services.user_service import UserService

logger = structlog.get_logger()


def generate_reset_token() -> str:
    return secrets.token_hex(20)


class PasswordResetService:
    """Issues and consumes password reset tokens."""

    def __init__(self, db: AsyncSession, settings: Settings, mailer: Mailer):
        self.db = db
        self.settings = settings
        self.mailer = mailer
        self.users = UserService(db)

    async def request_reset(self, email: str) -> None:
        user = await self.users.find_by_email(email)
        if not user:
            raise NotFoundError("No account with that email address exists.")

        token = generate_reset_token()
        user.reset_token_hash = hash_reset_token(token)
        user.reset_token_expires_at = utcnow() + timedelta(
            minutes=self.settings.reset_token_expire_minutes
        )
        await self.db.flush()

        html = emails.render_reset_email(
            full_name=user.full_name,
            gender=user.gender,
            url=emails.reset_url(self.settings.frontend_url, token),
            valid_minutes=self.settings.reset_token_expire_minutes,
            team_name=self.settings.mail_sender_name,
        )
        try:
            await self.mailer.send(user.email, emails.RESET_SUBJECT, html)
        except MailDeliveryError:
            await self.db.rollback()
            raise ServiceUnavailableError(
                "Server error. Could not send password reset email."
            )

        await self.db.commit()
        logger.info("password_reset.email_sent", user_id=str(user.id))

    async def reset_password(self, token: str, new_password: str) -> None:
        result = await self.db.execute(
            update(User)
            .where(
                User.reset_token_hash == hash_reset_token(token),
                User.reset_token_expires_at > utcnow(),
            )
            .values(
                password_hash=hash_password(new_password),
                reset_token_hash=None,
                reset_token_expires_at=None,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            logger.info("password_reset.rejected")
            raise InvalidOrExpiredTokenError()
        await self.db.commit()
        logger.info("password_reset.completed")
