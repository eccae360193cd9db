"""Email notification service.

Notifications are fire-and-forget: they are dispatched as background tasks
after the response is produced, and a failed send is logged, never raised.
The state change that triggered the email is already committed by then.

When SMTP_HOST is not configured (development, tests) messages are only
written to the log.
"""

import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Optional

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType

from config import settings

logger = logging.getLogger(__name__)


class NotifierPort(ABC):
    """Outbound applicant notifications."""

    @abstractmethod
    async def send(self, to: str, subject: str, body: str) -> bool:
        """Send one plain-text email.

        Returns:
            bool: True if the message was handed to the mail server (or
            logged in log-only mode), False if sending failed
        """
        pass


class EmailNotifier(NotifierPort):
    """SMTP notifier built on fastapi-mail.

    Example:
        notifier = EmailNotifier()
        background_tasks.add_task(notifier.send, "jane@example.com", subject, body)
    """

    def __init__(self, mail: Optional[FastMail] = None):
        self.mail = mail
        if self.mail is None and settings.SMTP_HOST:
            self.mail = FastMail(ConnectionConfig(
                MAIL_USERNAME=settings.SMTP_USERNAME or "",
                MAIL_PASSWORD=settings.SMTP_PASSWORD or "",
                MAIL_FROM=settings.MAIL_FROM,
                MAIL_PORT=settings.SMTP_PORT,
                MAIL_SERVER=settings.SMTP_HOST,
                MAIL_STARTTLS=settings.SMTP_USE_TLS,
                MAIL_SSL_TLS=False,
                USE_CREDENTIALS=bool(settings.SMTP_USERNAME),
            ))

    async def send(self, to: str, subject: str, body: str) -> bool:
        if self.mail is None:
            logger.info(f"Email (log only) to={to} subject={subject!r}\n{body}")
            return True

        message = MessageSchema(
            subject=subject,
            recipients=[to],
            body=body,
            subtype=MessageType.plain,
        )
        try:
            await self.mail.send_message(message)
        except Exception as e:
            logger.warning(f"Failed to send email to {to} (subject={subject!r}): {e}")
            return False

        logger.info(f"Email sent to={to} subject={subject!r}")
        return True


@lru_cache()
def get_notifier() -> NotifierPort:
    """FastAPI dependency returning the process-wide notifier."""
    return EmailNotifier()
