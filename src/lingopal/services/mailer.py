"""Outbound mail over SMTP.

Learn: smtplib is blocking, so each send runs in a worker thread via
asyncio.to_thread to keep the event loop free. A send is one attempt:
connect over SSL, log in, send, quit. Any SMTP or socket failure surfaces
as MailDeliveryError and the caller decides what that means for the
request.
"""

import asyncio
import smtplib
from email.message import EmailMessage
from email.utils import formataddr

import structlog

from lingopal.config import Settings

logger = structlog.get_logger()


class MailDeliveryError(Exception):
    """Raised when the SMTP server cannot be reached or rejects the message."""


class Mailer:
    """Sends HTML mail from the configured account."""

    def __init__(self, settings: Settings):
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.timeout = settings.smtp_timeout_seconds
        self.username = settings.email_user
        self.password = settings.email_pass
        self.sender = formataddr((settings.mail_sender_name, settings.email_user))

    def build_message(self, to: str, subject: str, html: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content("This message requires an HTML-capable mail client.")
        msg.add_alternative(html, subtype="html")
        return msg

    async def send(self, to: str, subject: str, html: str) -> None:
        msg = self.build_message(to, subject, html)
        try:
            await asyncio.to_thread(self._send_sync, msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("mail.send_failed", host=self.host, error=str(e))
            raise MailDeliveryError(str(e)) from e
        logger.info("mail.sent", subject=subject)

    def _send_sync(self, msg: EmailMessage) -> None:
        with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout) as smtp:
            smtp.login(self.username, self.password)
            smtp.send_message(msg)
