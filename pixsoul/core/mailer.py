import logging
import smtplib
from email.message import EmailMessage

from fastapi.concurrency import run_in_threadpool

from pixsoul.config import Settings
from .exceptions import MailDeliveryError

logger = logging.getLogger(__name__)


class Mailer:
    """
    Plain-text mail transport over SMTP.

    In development without an SMTP host the message is logged instead of sent.
    """

    def __init__(self, settings: Settings):
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.username = settings.smtp_username
        self.password = settings.smtp_password.get_secret_value()
        self.use_ssl = settings.smtp_use_ssl
        self.use_tls = settings.smtp_use_tls
        self.sender = settings.mail_from
        self.dev_mode = not settings.is_production and not self.host

    def _build_message(self, to_email: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.set_content(body)
        return msg

    def _send_blocking(self, msg: EmailMessage) -> None:
        smtp_cls = smtplib.SMTP_SSL if self.use_ssl else smtplib.SMTP
        with smtp_cls(self.host, self.port, timeout=15) as client:
            if not self.use_ssl and self.use_tls:
                client.starttls()
            if self.username:
                client.login(self.username, self.password)
            client.send_message(msg)

    async def send(self, to_email: str, subject: str, body: str) -> None:
        if self.dev_mode:
            logger.info(f"Development mode - skipping SMTP delivery to {to_email}: {subject}\n{body}")
            return
        if not self.host:
            raise MailDeliveryError("SMTP host is not configured")

        msg = self._build_message(to_email, subject, body)
        try:
            await run_in_threadpool(self._send_blocking, msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP error when sending '{subject}' to {to_email}: {e}")
            raise MailDeliveryError(str(e)) from e
        logger.info(f"Email '{subject}' sent to {to_email}")
