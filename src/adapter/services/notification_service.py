"""
Candidate email delivery.

SmtpNotificationService sends through SMTP with a bounded retry loop;
LoggingNotificationService only logs, for development and tests.
"""

import asyncio
import logging
import smtplib
import time
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from src.app.services.notification_service import NotificationService
from src.domain.brands import get_brand
from src.domain.identity import mask_email

logger = logging.getLogger(__name__)


def _brand_name(brand: str) -> str:
    registered = get_brand(brand)
    return registered.name if registered else brand


def otp_email_body(brand: str, code: str, expires_at: datetime, verify_url: str) -> str:
    return (
        f"Your {_brand_name(brand)} interview verification code is: {code}\n\n"
        f"Enter it here: {verify_url}\n\n"
        f"The code expires at {expires_at.strftime('%Y-%m-%d %H:%M')} UTC.\n"
        "If you did not request this code you can ignore this email."
    )


def access_link_email_body(brand: str, text_for_email: str, access_url: str) -> str:
    return (
        f"Your identity has been verified for {text_for_email} at {_brand_name(brand)}.\n\n"
        f"Open this link to schedule your interview: {access_url}\n\n"
        "The link works once. Do not forward it."
    )


class LoggingNotificationService(NotificationService):
    async def send_otp_email(self, email, brand, code, expires_at, verify_url) -> bool:
        logger.info("OTP email to %s brand=%s (delivery disabled)", mask_email(email), brand)
        return True

    async def send_access_link_email(self, email, brand, text_for_email, access_url) -> bool:
        logger.info(
            "Access link email to %s brand=%s (delivery disabled)", mask_email(email), brand
        )
        return True


class SmtpNotificationService(NotificationService):
    MAX_RETRIES = 3
    RETRY_DELAY_SECONDS = 2

    def __init__(
        self,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        from_email: str = "",
        from_name: str = "",
        use_tls: bool = True,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email
        self.from_name = from_name
        self.use_tls = use_tls

    @classmethod
    def from_config(cls, config) -> "SmtpNotificationService":
        return cls(
            host=config.SMTP_HOST,
            port=config.SMTP_PORT,
            username=config.SMTP_USERNAME,
            password=config.SMTP_PASSWORD,
            from_email=config.SMTP_FROM_EMAIL,
            from_name=config.SMTP_FROM_NAME,
            use_tls=config.SMTP_USE_TLS,
        )

    def _send(self, to: str, subject: str, body_text: str) -> bool:
        for attempt in range(1, self.MAX_RETRIES + 1):
            try:
                message = MIMEMultipart("alternative")
                sender = self.from_email
                if self.from_name:
                    sender = f"{self.from_name} <{self.from_email}>"
                message["From"] = sender
                message["To"] = to
                message["Subject"] = subject
                message.attach(MIMEText(body_text, "plain"))

                if self.use_tls:
                    server = smtplib.SMTP(self.host, self.port, timeout=10)
                    server.starttls()
                else:
                    server = smtplib.SMTP_SSL(self.host, self.port, timeout=10)

                try:
                    if self.username:
                        server.login(self.username, self.password)
                    server.send_message(message)
                finally:
                    server.quit()

                logger.info("Email sent to %s (attempt %d)", mask_email(to), attempt)
                return True

            except (smtplib.SMTPException, OSError) as e:
                logger.error(
                    "Email send error (attempt %d/%d): %s", attempt, self.MAX_RETRIES, e
                )
                if attempt < self.MAX_RETRIES:
                    time.sleep(self.RETRY_DELAY_SECONDS * attempt)

        logger.error("Failed to send email to %s after %d attempts", mask_email(to), self.MAX_RETRIES)
        return False

    async def _send_async(self, to: str, subject: str, body_text: str) -> bool:
        return await asyncio.to_thread(self._send, to, subject, body_text)

    async def send_otp_email(self, email, brand, code, expires_at, verify_url) -> bool:
        subject = f"{_brand_name(brand)} interview verification code"
        return await self._send_async(
            email, subject, otp_email_body(brand, code, expires_at, verify_url)
        )

    async def send_access_link_email(self, email, brand, text_for_email, access_url) -> bool:
        subject = f"{_brand_name(brand)} interview scheduling link"
        return await self._send_async(
            email, subject, access_link_email_body(brand, text_for_email, access_url)
        )
