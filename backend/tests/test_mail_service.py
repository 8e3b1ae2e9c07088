"""
Storefront Backend — Mail Service Unit Tests
==============================================

What we test:
    ✅ send_email logs PENDING → SENT, or FAILED with the transport's error
    ✅ Log queries: exact status/emailType, recipient substring, newest first,
       total counted before paging
    ✅ resend_email copies the original with metadata.resendOf
    ✅ Readers never see a partially written log file during updates
    ✅ SmtpMailTransport maps smtplib failures and unsafe headers to
       MailDeliveryError; the retry policy follows the given settings
"""

import asyncio
import json
import smtplib
from unittest.mock import MagicMock, patch

import pytest
import pytest_asyncio

from storefront.config import Settings
from storefront.exceptions import MailDeliveryError
from storefront.schemas.email_log import EmailLog, EmailLogFilters
from storefront.services.mail_service import EmailLogStore, MailService
from storefront.services.mail_transport import OutgoingEmail, SmtpMailTransport


def make_log(log_id, created_at, **fields):
    defaults = {
        "recipient": "customer@example.com",
        "subject": "Hello",
        "body": "Body",
        "status": "SENT",
    }
    return EmailLog(id=log_id, created_at=created_at, **{**defaults, **fields})


class TestSendEmail:

    @pytest.mark.asyncio
    async def test_successful_send_marks_sent(self, mail_service, fake_transport):
        result = await mail_service.send_email(
            to="a@example.com", subject="Order shipped", text="On its way",
            email_type="ORDER_SHIPPED", related_order_id=12,
        )

        assert result.success is True
        assert result.error is None
        log = await mail_service.get_email_log(result.log_id)
        assert log.status == "SENT"
        assert log.sent_at is not None
        assert log.email_type == "ORDER_SHIPPED"
        assert log.related_order_id == 12
        assert fake_transport.sent[0].to == "a@example.com"

    @pytest.mark.asyncio
    async def test_failed_send_marks_failed(self, mail_service, fake_transport):
        fake_transport.fail_with = "relay refused"

        result = await mail_service.send_email(to="a@example.com", subject="s", text="t")

        assert result.success is False
        assert result.error == "relay refused"
        log = await mail_service.get_email_log(result.log_id)
        assert log.status == "FAILED"
        assert log.error == "relay refused"
        assert log.sent_at is None

    @pytest.mark.asyncio
    async def test_log_file_uses_camel_case(self, mail_service):
        await mail_service.send_email(to="a@example.com", subject="s", text="t", html="<p>t</p>")

        stored = json.loads(mail_service.store.logs_path.read_text(encoding="utf-8"))
        assert stored[0]["htmlBody"] == "<p>t</p>"
        assert "createdAt" in stored[0]
        assert "relatedOrderId" not in stored[0]


class TestQueries:

    @pytest_asyncio.fixture
    async def seeded(self, mail_service):
        await mail_service.store.write_all([
            make_log("1", "2024-01-01T00:00:00.000Z", recipient="Alice@Example.com", email_type="WELCOME"),
            make_log("2", "2024-01-03T00:00:00.000Z", recipient="bob@example.com", status="FAILED"),
            make_log("3", "2024-01-02T00:00:00.000Z", recipient="alice.two@example.com", email_type="RECEIPT"),
        ])
        return mail_service

    @pytest.mark.asyncio
    async def test_newest_first(self, seeded):
        logs, total = await seeded.get_email_logs()
        assert [log.id for log in logs] == ["2", "3", "1"]
        assert total == 3

    @pytest.mark.asyncio
    async def test_filters(self, seeded):
        logs, _ = await seeded.get_email_logs(EmailLogFilters(status="FAILED"))
        assert [log.id for log in logs] == ["2"]

        logs, _ = await seeded.get_email_logs(EmailLogFilters(email_type="WELCOME"))
        assert [log.id for log in logs] == ["1"]

        logs, _ = await seeded.get_email_logs(EmailLogFilters(recipient="ALICE"))
        assert [log.id for log in logs] == ["3", "1"]

    @pytest.mark.asyncio
    async def test_total_counts_before_paging(self, seeded):
        logs, total = await seeded.get_email_logs(EmailLogFilters(limit=1, offset=1))
        assert [log.id for log in logs] == ["3"]
        assert total == 3

    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, mail_service):
        assert await mail_service.get_email_logs() == ([], 0)
        assert await mail_service.get_email_log("nope") is None


class TestResend:

    @pytest.mark.asyncio
    async def test_resend_creates_new_log(self, mail_service, fake_transport):
        await mail_service.store.write_all([
            make_log("orig", "2024-01-01T00:00:00.000Z", status="FAILED", metadata={"source": "checkout"}),
        ])

        result = await mail_service.resend_email("orig")

        assert result.success is True
        assert result.new_log_id != "orig"
        copy = await mail_service.get_email_log(result.new_log_id)
        assert copy.metadata == {"source": "checkout", "resendOf": "orig"}
        assert copy.status == "SENT"
        assert (await mail_service.get_email_log("orig")).status == "FAILED"
        assert len(fake_transport.sent) == 1

    @pytest.mark.asyncio
    async def test_resend_unknown_log(self, mail_service):
        result = await mail_service.resend_email("missing")
        assert result.success is False
        assert result.error == "Email log not found"
        assert result.new_log_id == ""


class TestConcurrentAccess:

    @pytest.mark.asyncio
    async def test_reads_during_updates_see_complete_file(self, mail_service):
        await mail_service.store.write_all([
            make_log(str(i), f"2024-01-01T00:00:{i % 60:02d}.000Z", status="PENDING") for i in range(200)
        ])

        async def writer(log_id):
            await mail_service.store.update(log_id, status="FAILED", error="relay refused")

        async def reader():
            for _ in range(50):
                _, total = await mail_service.get_email_logs()
                assert total == 200

        await asyncio.gather(
            *(writer(str(i)) for i in range(50)),
            *(reader() for _ in range(4)),
        )

        logs, _ = await mail_service.get_email_logs(EmailLogFilters(status="FAILED"))
        assert len(logs) == 50
        assert list(mail_service.store.logs_path.parent.glob("*.tmp")) == []


class TestSmtpTransport:

    def setup_method(self):
        self.config = Settings(smtp_host="smtp.test", smtp_port=2525, mail_from="shop@example.com")
        self.transport = SmtpMailTransport(config=self.config)

    def test_build_message_with_html_alternative(self):
        email = self.transport.build_message(
            OutgoingEmail(to="a@example.com", subject="Hi", text="plain", html="<b>rich</b>")
        )
        assert email["From"] == "shop@example.com"
        assert email["To"] == "a@example.com"
        assert email.is_multipart()

    @pytest.mark.asyncio
    async def test_delivery_uses_smtp(self):
        with patch("storefront.services.mail_transport.smtplib.SMTP") as mock_smtp:
            await self.transport.send(OutgoingEmail(to="a@example.com", subject="Hi", text="plain"))

        mock_smtp.assert_called_once_with("smtp.test", 2525, timeout=self.config.smtp_timeout)
        server = mock_smtp.return_value.__enter__.return_value
        server.send_message.assert_called_once()
        server.starttls.assert_not_called()

    @pytest.mark.asyncio
    async def test_rejection_becomes_delivery_error(self):
        server = MagicMock()
        server.send_message.side_effect = smtplib.SMTPRecipientsRefused({"a@example.com": (550, b"no such user")})
        with patch("storefront.services.mail_transport.smtplib.SMTP") as mock_smtp:
            mock_smtp.return_value.__enter__.return_value = server
            with pytest.raises(MailDeliveryError) as exc_info:
                await self.transport.send(OutgoingEmail(to="a@example.com", subject="Hi", text="plain"))

        assert "no such user" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_header_injection_becomes_delivery_error(self):
        with patch("storefront.services.mail_transport.smtplib.SMTP") as mock_smtp:
            with pytest.raises(MailDeliveryError) as exc_info:
                await self.transport.send(
                    OutgoingEmail(to="a@b.com\nBcc: x@y.z", subject="Hi", text="plain")
                )

        mock_smtp.assert_not_called()
        assert exc_info.value.context["recipient"] == "a@b.com\nBcc: x@y.z"

    @pytest.mark.asyncio
    async def test_header_injection_marks_log_failed(self, data_dir):
        service = MailService(
            store=EmailLogStore(logs_path=str(data_dir / "email-logs" / "logs.json")),
            transport=self.transport,
        )
        with patch("storefront.services.mail_transport.smtplib.SMTP") as mock_smtp:
            result = await service.send_email(to="a@b.com\nBcc: x@y.z", subject="Hi", text="plain")

        mock_smtp.assert_not_called()
        assert result.success is False
        assert result.error
        log = await service.get_email_log(result.log_id)
        assert log.status == "FAILED"

    @pytest.mark.asyncio
    async def test_retry_policy_follows_given_settings(self):
        config = Settings(
            smtp_host="smtp.test", mail_from="shop@example.com",
            mail_retry_attempts=2, mail_retry_min_wait=0, mail_retry_max_wait=1,
        )
        transport = SmtpMailTransport(config=config)
        with patch("storefront.services.mail_transport.smtplib.SMTP") as mock_smtp:
            mock_smtp.side_effect = smtplib.SMTPServerDisconnected("connection dropped")
            with pytest.raises(MailDeliveryError):
                await transport.send(OutgoingEmail(to="a@example.com", subject="Hi", text="plain"))

        assert mock_smtp.call_count == 2

    @pytest.mark.asyncio
    async def test_retry_state_not_shared_between_sends(self):
        config = Settings(
            smtp_host="smtp.test", mail_from="shop@example.com",
            mail_retry_attempts=2, mail_retry_min_wait=0, mail_retry_max_wait=1,
        )
        transport = SmtpMailTransport(config=config)
        with patch("storefront.services.mail_transport.smtplib.SMTP") as mock_smtp:
            mock_smtp.side_effect = smtplib.SMTPServerDisconnected("connection dropped")
            for _ in range(2):
                with pytest.raises(MailDeliveryError):
                    await transport.send(OutgoingEmail(to="a@example.com", subject="Hi", text="plain"))

        assert mock_smtp.call_count == 4
