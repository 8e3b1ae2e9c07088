"""
Storefront Backend — Email Log Facade & Route Tests
=====================================================

What we test:
    ✅ GET /email-logs pagination envelope and filters
    ✅ GET /email-logs/{logId}: found → 200, unknown → 404, blank → 400
    ✅ POST /email-logs/resend: missing logId → 400, collaborator failure →
       400 with its message (or the generic fallback), success → newLogId
    ✅ Unexpected collaborator failures → 500 with detail
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from storefront.exceptions import ServerError, ValidationError
from storefront.schemas.email_log import EmailLog, ResendResult
from storefront.services.email_log_service import EmailLogFacade


def make_log(log_id, created_at, **fields):
    return EmailLog(
        id=log_id,
        recipient=fields.pop("recipient", "customer@example.com"),
        subject="Hello",
        body="Body",
        created_at=created_at,
        **fields,
    )


class TestEmailLogFacade:
    """Facade behavior against a mocked mail service."""

    def setup_method(self):
        self.mailer = MagicMock()
        self.facade = EmailLogFacade(mailer=self.mailer)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("log_id", [None, "", "   "])
    async def test_resend_requires_log_id(self, log_id):
        self.mailer.resend_email = AsyncMock()

        with pytest.raises(ValidationError) as exc_info:
            await self.facade.resend(log_id)

        assert exc_info.value.message == "Log ID is required"
        self.mailer.resend_email.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_resend_failure_uses_collaborator_message(self):
        self.mailer.resend_email = AsyncMock(
            return_value=ResendResult(success=False, error="SMTP relay unreachable")
        )

        with pytest.raises(ValidationError) as exc_info:
            await self.facade.resend("abc")

        assert exc_info.value.message == "SMTP relay unreachable"

    @pytest.mark.asyncio
    async def test_resend_failure_without_message_uses_fallback(self):
        self.mailer.resend_email = AsyncMock(return_value=ResendResult(success=False))

        with pytest.raises(ValidationError) as exc_info:
            await self.facade.resend("abc")

        assert exc_info.value.message == "Failed to resend email"

    @pytest.mark.asyncio
    async def test_resend_unexpected_failure_is_server_error(self):
        self.mailer.resend_email = AsyncMock(side_effect=RuntimeError("disk full"))

        with pytest.raises(ServerError) as exc_info:
            await self.facade.resend("abc")

        assert exc_info.value.message == "Failed to resend email"
        assert exc_info.value.detail == "disk full"

    @pytest.mark.asyncio
    async def test_list_computes_total_pages(self):
        logs = [make_log(str(i), f"2024-01-0{i}T00:00:00.000Z") for i in range(1, 4)]
        self.mailer.get_email_logs = AsyncMock(return_value=(logs[:2], 3))

        result = await self.facade.list_logs(page=1, limit=2)

        assert result.pagination.total == 3
        assert result.pagination.total_pages == 2
        filters = self.mailer.get_email_logs.await_args.args[0]
        assert filters.limit == 2
        assert filters.offset == 0


class TestEmailLogRoutes:

    @pytest.mark.asyncio
    async def test_list_envelope(self, test_client, mail_service):
        await mail_service.store.write_all([
            make_log("a", "2024-01-01T00:00:00.000Z", status="SENT"),
            make_log("b", "2024-01-02T00:00:00.000Z", status="FAILED", error="bounced"),
            make_log("c", "2024-01-03T00:00:00.000Z", status="SENT", email_type="RECEIPT"),
        ])

        response = await test_client.get("/email-logs", params={"page": 2, "limit": 2})

        assert response.status_code == 200
        body = response.json()
        assert [log["id"] for log in body["logs"]] == ["a"]
        assert body["pagination"] == {"page": 2, "limit": 2, "total": 3, "totalPages": 2}

    @pytest.mark.asyncio
    async def test_list_filters(self, test_client, mail_service):
        await mail_service.store.write_all([
            make_log("a", "2024-01-01T00:00:00.000Z", status="SENT"),
            make_log("c", "2024-01-03T00:00:00.000Z", status="SENT", email_type="RECEIPT"),
        ])

        response = await test_client.get("/email-logs", params={"emailType": "RECEIPT"})

        assert [log["id"] for log in response.json()["logs"]] == ["c"]
        assert response.json()["logs"][0]["emailType"] == "RECEIPT"

    @pytest.mark.asyncio
    async def test_list_rejects_bad_paging(self, test_client):
        response = await test_client.get("/email-logs", params={"limit": 500})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_get_log(self, test_client, mail_service):
        await mail_service.store.write_all([make_log("abc", "2024-01-01T00:00:00.000Z")])

        response = await test_client.get("/email-logs/abc")

        assert response.status_code == 200
        assert response.json()["recipient"] == "customer@example.com"
        assert response.json()["createdAt"] == "2024-01-01T00:00:00.000Z"

    @pytest.mark.asyncio
    async def test_get_unknown_log(self, test_client):
        response = await test_client.get("/email-logs/nope")
        assert response.status_code == 404
        assert response.json()["error"] == "Email log not found"

    @pytest.mark.asyncio
    async def test_get_blank_log_id(self, test_client):
        response = await test_client.get("/email-logs/%20")
        assert response.status_code == 400
        assert response.json()["error"] == "Log ID is required"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"logId": ""}, {"logId": None}])
    async def test_resend_without_log_id(self, test_client, body):
        response = await test_client.post("/email-logs/resend", json=body)
        assert response.status_code == 400
        assert response.json()["error"] == "Log ID is required"

    @pytest.mark.asyncio
    async def test_resend_without_body(self, test_client):
        response = await test_client.post("/email-logs/resend")
        assert response.status_code == 400
        assert response.json()["error"] == "Log ID is required"

    @pytest.mark.asyncio
    async def test_resend_unknown_log(self, test_client):
        response = await test_client.post("/email-logs/resend", json={"logId": "missing"})
        assert response.status_code == 400
        assert response.json()["error"] == "Email log not found"

    @pytest.mark.asyncio
    async def test_resend_success(self, test_client, mail_service, fake_transport):
        await mail_service.store.write_all([make_log("orig", "2024-01-01T00:00:00.000Z", status="FAILED")])

        response = await test_client.post("/email-logs/resend", json={"logId": "orig"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["newLogId"] != "orig"
        assert len(fake_transport.sent) == 1

    @pytest.mark.asyncio
    async def test_resend_delivery_failure(self, test_client, mail_service, fake_transport):
        await mail_service.store.write_all([make_log("orig", "2024-01-01T00:00:00.000Z")])
        fake_transport.fail_with = "Connection refused"

        response = await test_client.post("/email-logs/resend", json={"logId": "orig"})

        assert response.status_code == 400
        assert response.json()["error"] == "Connection refused"
