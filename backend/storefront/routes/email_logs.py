"""
Storefront Backend — Email Log Route Handlers
===============================================

What:  Admin endpoints over the mail service's delivery log.
How:   Thin wrappers around EmailLogFacade, which owns the 400/404/500 mapping.

Route ordering: /email-logs/resend is POST-only, so it never collides with the
GET /email-logs/{log_id} lookup.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from storefront.schemas.common import ErrorResponse
from storefront.schemas.email_log import (
    EmailLog,
    EmailLogListResponse,
    ResendRequest,
    ResendResponse,
)
from storefront.services.email_log_service import EmailLogFacade, get_email_log_facade

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/email-logs", tags=["Email Logs"])


@router.get(
    "",
    response_model=EmailLogListResponse,
    response_model_exclude_none=True,
    summary="List email logs",
    description="Newest first. status and emailType match exactly; recipient matches as a substring.",
)
async def list_email_logs(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    status: Optional[str] = Query(default=None),
    email_type: Optional[str] = Query(default=None, alias="emailType"),
    recipient: Optional[str] = Query(default=None),
    facade: EmailLogFacade = Depends(get_email_log_facade),
) -> EmailLogListResponse:
    return await facade.list_logs(
        page=page,
        limit=limit,
        status=status,
        email_type=email_type,
        recipient=recipient,
    )


@router.post(
    "/resend",
    response_model=ResendResponse,
    responses={
        400: {"description": "Missing logId, or the resend failed", "model": ErrorResponse},
        500: {"description": "Unexpected failure", "model": ErrorResponse},
    },
    summary="Resend a logged email",
)
async def resend_email(
    request: Optional[ResendRequest] = Body(default=None),
    facade: EmailLogFacade = Depends(get_email_log_facade),
) -> ResendResponse:
    log_id = request.log_id if request else None
    logger.info("Resend requested for email log %s", log_id)
    return await facade.resend(log_id)


@router.get(
    "/{log_id}",
    response_model=EmailLog,
    response_model_exclude_none=True,
    responses={
        400: {"description": "Blank log ID", "model": ErrorResponse},
        404: {"description": "Email log not found", "model": ErrorResponse},
    },
    summary="Get one email log",
)
async def get_email_log(
    log_id: str,
    facade: EmailLogFacade = Depends(get_email_log_facade),
) -> EmailLog:
    return await facade.get_log(log_id)
