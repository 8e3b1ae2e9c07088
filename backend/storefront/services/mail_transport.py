"""
Storefront Backend — Mail Transport Interface
===============================================

What:  The contract for handing an email to a delivery system, plus the SMTP
       implementation used in production.
How:   MailService depends on the abstract MailTransport only. Tests substitute
       a fake transport; deployments can swap SMTP for an HTTP mail API without
       touching MailService.

SMTP delivery:
    smtplib is blocking, so each send runs in a worker thread
    (asyncio.to_thread). Connection-level failures are retried with tenacity
    (exponential backoff + jitter); protocol rejections such as an unknown
    recipient are not retried. Whatever remains after the last attempt is
    raised as MailDeliveryError.
"""

import asyncio
import logging
import smtplib
from abc import ABC, abstractmethod
from email.message import EmailMessage
from typing import Optional

from pydantic import BaseModel
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from storefront.config import Settings, settings
from storefront.exceptions import MailDeliveryError

logger = logging.getLogger(__name__)


class OutgoingEmail(BaseModel):
    """A message ready for delivery."""

    to: str
    subject: str
    text: str
    html: Optional[str] = None


class MailTransport(ABC):
    """
    Abstract delivery mechanism.

    Contract:
        - send() returns normally once the message has been accepted
        - every failure is raised as MailDeliveryError carrying a readable message
    """

    @abstractmethod
    async def send(self, message: OutgoingEmail) -> None:
        ...


# Connection-level problems worth another attempt
TRANSIENT_SMTP_ERRORS = (
    smtplib.SMTPServerDisconnected,
    smtplib.SMTPConnectError,
    ConnectionError,
    TimeoutError,
)


class SmtpMailTransport(MailTransport):
    """
    Delivers through an SMTP relay configured by the SMTP_* settings.

    Args:
        config: Settings override (used in tests); defaults to the singleton.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or settings
        self.retrying = AsyncRetrying(
            retry=retry_if_exception_type(TRANSIENT_SMTP_ERRORS),
            stop=stop_after_attempt(self.config.mail_retry_attempts),
            wait=wait_exponential_jitter(
                initial=self.config.mail_retry_min_wait,
                max=self.config.mail_retry_max_wait,
                jitter=1,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    def build_message(self, message: OutgoingEmail) -> EmailMessage:
        email = EmailMessage()
        email["From"] = self.config.mail_from
        email["To"] = message.to
        email["Subject"] = message.subject
        email.set_content(message.text)
        if message.html:
            email.add_alternative(message.html, subtype="html")
        return email

    async def send(self, message: OutgoingEmail) -> None:
        # ValueError: header values with CR/LF are refused by EmailMessage
        try:
            email = self.build_message(message)
            await self._send_with_retry(email)
        except (smtplib.SMTPException, OSError, ValueError) as e:
            logger.error("SMTP delivery to %r failed: %s", message.to, e)
            raise MailDeliveryError(
                message=str(e) or type(e).__name__,
                context={"recipient": message.to, "smtp_host": self.config.smtp_host},
            )

    async def _send_with_retry(self, email: EmailMessage) -> None:
        # copy(): retry state is per call, the policy is shared
        async for attempt in self.retrying.copy():
            with attempt:
                await asyncio.to_thread(self._deliver, email)

    def _deliver(self, email: EmailMessage) -> None:
        with smtplib.SMTP(
            self.config.smtp_host,
            self.config.smtp_port,
            timeout=self.config.smtp_timeout,
        ) as server:
            if self.config.smtp_use_tls:
                server.starttls()
            if self.config.smtp_username:
                server.login(self.config.smtp_username, self.config.smtp_password or "")
            server.send_message(email)
        logger.info("Email delivered to %s via %s", email["To"], self.config.smtp_host)
