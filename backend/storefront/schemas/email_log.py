"""
Storefront Backend — Email Log Schemas
========================================

What:  The email log record kept by the mail service, plus the request and
       response shapes of the /email-logs endpoints.
How:   Logs are persisted and returned with camelCase keys; unset optional
       fields are omitted from both the file and the response.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from storefront.schemas.catalog import CamelModel

EmailStatus = Literal["PENDING", "SENT", "FAILED"]


class EmailLog(CamelModel):
    """
    One delivery attempt.

    Lifecycle: PENDING on creation → SENT (sent_at stamped) or FAILED (error set).
    A resend never mutates the original log; it creates a new one whose
    metadata carries `resendOf`.
    """

    id: str
    recipient: str
    subject: str
    body: str
    html_body: Optional[str] = None
    status: EmailStatus = "PENDING"
    error: Optional[str] = None
    email_type: Optional[str] = None
    related_order_id: Optional[int] = None
    related_appointment_id: Optional[int] = None
    metadata: Optional[Dict[str, Any]] = None
    sent_at: Optional[str] = None
    created_at: str


class EmailLogFilters(CamelModel):
    status: Optional[str] = None
    email_type: Optional[str] = None
    recipient: Optional[str] = None
    limit: Optional[int] = None
    offset: Optional[int] = None


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class EmailLogListResponse(CamelModel):
    logs: List[EmailLog]
    pagination: Pagination


class SendResult(CamelModel):
    """Outcome of MailService.send_email()."""

    success: bool
    log_id: str
    error: Optional[str] = None


class ResendResult(CamelModel):
    """Outcome of MailService.resend_email(); new_log_id is "" when the source log is unknown."""

    success: bool
    new_log_id: str = ""
    error: Optional[str] = None


class ResendRequest(CamelModel):
    log_id: Optional[str] = Field(default=None)


class ResendResponse(CamelModel):
    success: bool = True
    new_log_id: str
