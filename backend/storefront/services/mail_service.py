"""
Storefront Backend — Mail Service (email log collaborator)
============================================================

What:  Sends emails through a MailTransport and keeps a log of every attempt.
How:   All logs are stored as one JSON array at <data_root>/email-logs/logs.json.
       Each send appends a PENDING log, hands the message to the transport and
       then marks the log SENT or FAILED.

Send Flow:
    ┌──────────────┐    ┌──────────────┐    ┌────────────────────┐
    │ append log   │───▶│ transport    │───▶│ mark SENT / FAILED │
    │ (PENDING)    │    │ .send()      │    │ (+sentAt / +error) │
    └──────────────┘    └──────────────┘    └────────────────────┘

    Delivery failures never raise out of send_email(); they are reported as
    SendResult(success=False, error=...). File system failures do raise.

The read-modify-write cycles on the log file are serialized by an asyncio.Lock,
which covers a single process only. Readers take no lock: every write lands
through an atomic rename, so a read always parses a complete array.
"""

import asyncio
import json
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import aiofiles
import aiofiles.os

from storefront.clock import epoch_millis, utc_timestamp
from storefront.config import settings
from storefront.exceptions import MailDeliveryError
from storefront.schemas.email_log import EmailLog, EmailLogFilters, ResendResult, SendResult
from storefront.services.mail_transport import MailTransport, OutgoingEmail, SmtpMailTransport

logger = logging.getLogger(__name__)


def generate_log_id() -> str:
    """Sortable-ish unique id: <epoch-ms>-<9 hex chars>."""
    return f"{epoch_millis()}-{uuid.uuid4().hex[:9]}"


class EmailLogStore:
    """
    JSON-array persistence for email logs.

    Args:
        logs_path: Override the log file location (used in tests).
    """

    def __init__(self, logs_path: Optional[str] = None):
        self._logs_path = Path(logs_path) if logs_path else None
        self.lock = asyncio.Lock()

    @property
    def logs_path(self) -> Path:
        return self._logs_path or settings.email_logs_path

    async def read_all(self) -> List[EmailLog]:
        """Every stored log in insertion order; a missing file yields []."""
        try:
            async with aiofiles.open(self.logs_path, "r", encoding="utf-8") as f:
                raw = json.loads(await f.read())
        except FileNotFoundError:
            return []
        return [EmailLog.model_validate(item) for item in raw]

    async def write_all(self, logs: List[EmailLog]) -> None:
        """
        Replace the log file atomically.

        The array is written to a sibling temp file which is then renamed over
        logs.json, so unlocked readers see either the old or the new array,
        never a truncated one.
        """
        path = self.logs_path
        await aiofiles.os.makedirs(path.parent, exist_ok=True)
        payload = [log.model_dump(mode="json", by_alias=True, exclude_none=True) for log in logs]
        tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(json.dumps(payload, indent=2, ensure_ascii=False))
            await aiofiles.os.replace(tmp_path, path)
        except BaseException:
            if await aiofiles.os.path.exists(tmp_path):
                await aiofiles.os.remove(tmp_path)
            raise

    async def append(self, log: EmailLog) -> None:
        async with self.lock:
            logs = await self.read_all()
            logs.append(log)
            await self.write_all(logs)

    async def update(self, log_id: str, **changes: Any) -> Optional[EmailLog]:
        """Apply field changes to one log; returns the updated log or None if unknown."""
        async with self.lock:
            logs = await self.read_all()
            for index, log in enumerate(logs):
                if log.id == log_id:
                    logs[index] = log.model_copy(update=changes)
                    await self.write_all(logs)
                    return logs[index]
        return None


class MailService:
    """
    Email sending with logging, log queries and resend.

    Args:
        store:     Log persistence (defaults to the settings-based file)
        transport: Delivery mechanism (defaults to SMTP)
    """

    def __init__(
        self,
        store: Optional[EmailLogStore] = None,
        transport: Optional[MailTransport] = None,
    ):
        self.store = store or EmailLogStore()
        self.transport = transport or SmtpMailTransport()

    async def send_email(
        self,
        to: str,
        subject: str,
        text: str,
        html: Optional[str] = None,
        email_type: Optional[str] = None,
        related_order_id: Optional[int] = None,
        related_appointment_id: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> SendResult:
        log = EmailLog(
            id=generate_log_id(),
            recipient=to,
            subject=subject,
            body=text,
            html_body=html,
            status="PENDING",
            email_type=email_type,
            related_order_id=related_order_id,
            related_appointment_id=related_appointment_id,
            metadata=metadata,
            created_at=utc_timestamp(),
        )
        await self.store.append(log)

        try:
            await self.transport.send(OutgoingEmail(to=to, subject=subject, text=text, html=html))
        except MailDeliveryError as e:
            await self.store.update(log.id, status="FAILED", error=e.message)
            logger.warning("Email %s to %s failed: %s", log.id, to, e.message)
            return SendResult(success=False, log_id=log.id, error=e.message)

        await self.store.update(log.id, status="SENT", sent_at=utc_timestamp())
        logger.info("Email %s sent to %s", log.id, to)
        return SendResult(success=True, log_id=log.id)

    async def get_email_logs(self, filters: Optional[EmailLogFilters] = None) -> Tuple[List[EmailLog], int]:
        """
        Filtered logs, newest first, plus the total matching count before paging.

        Filters: status and email_type match exactly; recipient is a
        case-insensitive substring match; offset/limit slice the result.
        """
        filters = filters or EmailLogFilters()
        logs = await self.store.read_all()

        if filters.status:
            logs = [log for log in logs if log.status == filters.status]
        if filters.email_type:
            logs = [log for log in logs if log.email_type == filters.email_type]
        if filters.recipient:
            needle = filters.recipient.lower()
            logs = [log for log in logs if needle in log.recipient.lower()]

        total = len(logs)
        logs.sort(key=lambda log: log.created_at, reverse=True)

        if filters.offset is not None:
            logs = logs[filters.offset:]
        if filters.limit is not None:
            logs = logs[:filters.limit]

        return logs, total

    async def get_email_log(self, log_id: str) -> Optional[EmailLog]:
        for log in await self.store.read_all():
            if log.id == log_id:
                return log
        return None

    async def resend_email(self, log_id: str) -> ResendResult:
        """
        Send a copy of a logged email as a new log.

        The copy's metadata gains `resendOf: <original id>`; the original log
        is left untouched.
        """
        original = await self.get_email_log(log_id)
        if original is None:
            return ResendResult(success=False, new_log_id="", error="Email log not found")

        result = await self.send_email(
            to=original.recipient,
            subject=original.subject,
            text=original.body,
            html=original.html_body,
            email_type=original.email_type,
            related_order_id=original.related_order_id,
            related_appointment_id=original.related_appointment_id,
            metadata={**(original.metadata or {}), "resendOf": log_id},
        )
        return ResendResult(success=result.success, new_log_id=result.log_id, error=result.error)


# ── Singleton Instance ────────────────────────────────────────────────────
mail_service = MailService()


def get_mail_service() -> MailService:
    return mail_service
