"""
Storefront Backend — Email Log Facade
=======================================

What:  Maps the mail service's results onto HTTP semantics for /email-logs.
How:   Validates identifiers, delegates to MailService and converts its
       outcomes into return values or application exceptions:

       blank log id                          → ValidationError (400)
       get: no such log                      → NotFoundError (404)
       resend: success=False                 → ValidationError (400) with the
                                               collaborator's error or a fallback
       anything unexpected                   → ServerError (500) with detail

Retry, queueing and delivery all belong to the mail service; nothing here
retries.
"""

import math
from typing import Any, Optional

from storefront.exceptions import NotFoundError, ValidationError
from storefront.schemas.email_log import (
    EmailLog,
    EmailLogFilters,
    EmailLogListResponse,
    Pagination,
    ResendResponse,
)
from storefront.services.error_boundary import error_boundary
from storefront.services.mail_service import MailService, mail_service

RESEND_FALLBACK_ERROR = "Failed to resend email"


def _require_log_id(log_id: Any) -> str:
    if not isinstance(log_id, str) or not log_id.strip():
        raise ValidationError(message="Log ID is required", field="logId")
    return log_id


class EmailLogFacade:

    def __init__(self, mailer: Optional[MailService] = None):
        self.mailer = mailer or mail_service

    @error_boundary("Failed to fetch email logs")
    async def list_logs(
        self,
        page: int = 1,
        limit: int = 20,
        status: Optional[str] = None,
        email_type: Optional[str] = None,
        recipient: Optional[str] = None,
    ) -> EmailLogListResponse:
        logs, total = await self.mailer.get_email_logs(
            EmailLogFilters(
                status=status,
                email_type=email_type,
                recipient=recipient,
                limit=limit,
                offset=(page - 1) * limit,
            )
        )
        return EmailLogListResponse(
            logs=logs,
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                total_pages=math.ceil(total / limit),
            ),
        )

    @error_boundary("Failed to fetch email log")
    async def get_log(self, log_id: Any) -> EmailLog:
        log_id = _require_log_id(log_id)
        log = await self.mailer.get_email_log(log_id)
        if log is None:
            raise NotFoundError(resource="Email log", resource_id=log_id)
        return log

    @error_boundary(RESEND_FALLBACK_ERROR)
    async def resend(self, log_id: Any) -> ResendResponse:
        log_id = _require_log_id(log_id)
        result = await self.mailer.resend_email(log_id)
        if not result.success:
            raise ValidationError(
                message=result.error or RESEND_FALLBACK_ERROR,
                context={"log_id": log_id},
            )
        return ResendResponse(success=True, new_log_id=result.new_log_id)


# ── Singleton Instance ────────────────────────────────────────────────────
email_log_facade = EmailLogFacade()


def get_email_log_facade() -> EmailLogFacade:
    return email_log_facade
