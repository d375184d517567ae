"""
Pytest test module for background jobs and the mail transport.

Covers:
- backend/services/mailer.py: Mailgun send (unconfigured, accepted, rejected, network error)
- backend/jobs/lead_digest.py: Slack digest idempotency, empty days, force re-send
- backend/jobs/seed_admin.py: Admin upsert with a hashed password

Idempotency Rules (lead digest):
- Never send twice for the same date unless force=True
- Days with no submissions are skipped and not recorded
- State is recorded only after Slack accepts the message

External calls are patched at the module that imports them:
- backend.services.mailer.requests.post
- backend.jobs.lead_digest.get_db_pool / get_settings / WebhookClient
- backend.jobs.seed_admin.ensure_schema / execute_query_one / get_settings
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, Mock, patch

import pytest
import requests

from backend.core.config import Settings
from backend.jobs.lead_digest import (
    check_already_sent,
    fetch_daily_summary,
    format_slack_message,
    mark_digest_sent,
    send_lead_digest,
)
from backend.jobs.seed_admin import seed_admin
from backend.services.auth import verify_password
from backend.services.mailer import build_sender, send_email, send_email_async
from backend.sql.admin_queries import UPSERT_ADMIN


DIGEST_DATE = date(2026, 10, 18)

SUMMARY_ROW = {
    "total": 4,
    "with_email": 3,
    "grade_a": 1,
    "grade_bc": 2,
    "grade_df": 1,
    "avg_risk_midpoint": Decimal("3300.40"),
}


# =============================================================================
# Mail Transport
# =============================================================================

class TestMailer:
    """Best-effort Mailgun delivery."""

    def test_build_sender(self) -> None:
        assert build_sender("mg.clinic.example") == "Follow-Up Health <noreply@mg.clinic.example>"

    def test_unconfigured_mailgun_skips_send(self, test_settings: Settings) -> None:
        settings = test_settings.model_copy(update={"mailgun_api_key": None})

        with patch("backend.services.mailer.requests.post") as post:
            sent = send_email("a@clinic.example", "Subject", "<p>x</p>", settings)

        assert sent is False
        post.assert_not_called()

    def test_successful_send(self, test_settings: Settings) -> None:
        # Arrange
        response = Mock()
        response.raise_for_status = Mock(return_value=None)
        response.json = Mock(return_value={"id": "<20261019.1@mg.followuphealth.test>"})

        # Act
        with patch("backend.services.mailer.requests.post", return_value=response) as post:
            sent = send_email("a@clinic.example", "Your score", "<p>x</p>", test_settings)

        # Assert
        assert sent is True
        post.assert_called_once()
        url = post.call_args.args[0]
        kwargs = post.call_args.kwargs
        assert url == "https://api.mailgun.net/v3/mg.followuphealth.test/messages"
        assert kwargs["auth"] == ("api", "key-test")
        assert kwargs["data"]["to"] == ["a@clinic.example"]
        assert kwargs["data"]["subject"] == "Your score"
        assert kwargs["data"]["html"] == "<p>x</p>"
        assert kwargs["data"]["from"] == "Follow-Up Health <noreply@mg.followuphealth.test>"
        assert kwargs["timeout"] == test_settings.mail_timeout_seconds

    def test_rejected_send_returns_false(self, test_settings: Settings) -> None:
        error_response = Mock()
        error_response.text = '{"message": "Domain not found"}'
        response = Mock()
        response.raise_for_status = Mock(side_effect=requests.HTTPError("404", response=error_response))

        with patch("backend.services.mailer.requests.post", return_value=response):
            sent = send_email("a@clinic.example", "S", "<p>x</p>", test_settings)

        assert sent is False

    def test_network_error_returns_false(self, test_settings: Settings) -> None:
        with patch(
            "backend.services.mailer.requests.post",
            side_effect=requests.ConnectionError("unreachable"),
        ):
            sent = send_email("a@clinic.example", "S", "<p>x</p>", test_settings)

        assert sent is False

    @pytest.mark.asyncio
    async def test_send_email_async(self, test_settings: Settings) -> None:
        response = Mock()
        response.json = Mock(return_value={"id": "x"})

        with patch("backend.services.mailer.requests.post", return_value=response):
            sent = await send_email_async("a@clinic.example", "S", "<p>x</p>", test_settings)

        assert sent is True


# =============================================================================
# Lead Digest
# =============================================================================

@pytest.mark.asyncio
class TestLeadDigestState:
    """job_digest_state reads and writes."""

    async def test_check_already_sent_true(self, mock_db_pool: AsyncMock) -> None:
        conn = mock_db_pool.acquire.return_value.__aenter__.return_value
        conn.fetchrow.return_value = {"digest_date": DIGEST_DATE, "sent_at": datetime.now(timezone.utc)}

        with patch("backend.jobs.lead_digest.get_db_pool", new=AsyncMock(return_value=mock_db_pool)):
            assert await check_already_sent(DIGEST_DATE) is True

        assert conn.fetchrow.await_args.args[1:] == ("lead_digest", DIGEST_DATE)

    async def test_check_already_sent_false(self, mock_db_pool: AsyncMock) -> None:
        conn = mock_db_pool.acquire.return_value.__aenter__.return_value
        conn.fetchrow.return_value = None

        with patch("backend.jobs.lead_digest.get_db_pool", new=AsyncMock(return_value=mock_db_pool)):
            assert await check_already_sent(DIGEST_DATE) is False

    async def test_mark_digest_sent_upserts(self, mock_db_pool: AsyncMock) -> None:
        conn = mock_db_pool.acquire.return_value.__aenter__.return_value

        with patch("backend.jobs.lead_digest.get_db_pool", new=AsyncMock(return_value=mock_db_pool)):
            await mark_digest_sent(DIGEST_DATE)

        sql = conn.execute.await_args.args[0]
        assert "ON CONFLICT (job_type, digest_date)" in sql
        assert conn.execute.await_args.args[1:3] == ("lead_digest", DIGEST_DATE)

    async def test_fetch_daily_summary(self, mock_db_pool: AsyncMock) -> None:
        conn = mock_db_pool.acquire.return_value.__aenter__.return_value
        conn.fetchrow.return_value = SUMMARY_ROW

        with patch("backend.jobs.lead_digest.get_db_pool", new=AsyncMock(return_value=mock_db_pool)):
            summary = await fetch_daily_summary(DIGEST_DATE)

        assert summary == {
            "total": 4,
            "with_email": 3,
            "conversion_rate": 75.0,
            "grade_ranges": {"A": 1, "BC": 2, "DF": 1},
            "avg_risk_midpoint": 3300,
        }

    async def test_fetch_daily_summary_empty_day(self, mock_db_pool: AsyncMock) -> None:
        conn = mock_db_pool.acquire.return_value.__aenter__.return_value
        conn.fetchrow.return_value = {**SUMMARY_ROW, "total": 0}

        with patch("backend.jobs.lead_digest.get_db_pool", new=AsyncMock(return_value=mock_db_pool)):
            summary = await fetch_daily_summary(DIGEST_DATE)

        assert summary["total"] == 0
        assert summary["grade_ranges"] == {"A": 0, "BC": 0, "DF": 0}


class TestLeadDigestMessage:
    """Slack Block Kit layout."""

    def test_format_slack_message(self) -> None:
        summary = {
            "total": 1234,
            "with_email": 617,
            "conversion_rate": 50.0,
            "grade_ranges": {"A": 100, "BC": 900, "DF": 234},
            "avg_risk_midpoint": 4500,
        }

        blocks = format_slack_message(DIGEST_DATE, summary)

        assert blocks[0]["type"] == "header"
        assert blocks[0]["text"]["text"] == "Follow-Up Health Leads - October 18, 2026"
        text = "\n".join(b["text"]["text"] for b in blocks if b["type"] == "section")
        assert "*Submissions:* 1,234" in text
        assert "617 (50.0%)" in text
        assert "B-C: *900*" in text
        assert "$4,500" in text
        assert blocks[-1]["type"] == "context"


@pytest.mark.asyncio
class TestSendLeadDigest:
    """End-to-end digest runs with Slack and the database mocked."""

    async def test_missing_webhook(self, test_settings: Settings) -> None:
        settings = test_settings.model_copy(update={"slack_webhook_url": None})

        with patch("backend.jobs.lead_digest.get_settings", return_value=settings):
            result = await send_lead_digest(DIGEST_DATE)

        assert result["success"] is False
        assert "SLACK_WEBHOOK_URL" in result["error"]

    async def test_already_sent_is_skipped(
        self,
        test_settings: Settings,
        mock_db_pool: AsyncMock,
        mock_slack_client: Mock,
    ) -> None:
        conn = mock_db_pool.acquire.return_value.__aenter__.return_value
        conn.fetchrow.return_value = {"digest_date": DIGEST_DATE, "sent_at": datetime.now(timezone.utc)}

        with patch("backend.jobs.lead_digest.get_settings", return_value=test_settings), \
                patch("backend.jobs.lead_digest.get_db_pool", new=AsyncMock(return_value=mock_db_pool)):
            result = await send_lead_digest(DIGEST_DATE)

        assert result["success"] is True
        assert result["skipped"] is True
        mock_slack_client.send.assert_not_called()

    async def test_empty_day_is_skipped_and_not_recorded(
        self,
        test_settings: Settings,
        mock_db_pool: AsyncMock,
        mock_slack_client: Mock,
    ) -> None:
        conn = mock_db_pool.acquire.return_value.__aenter__.return_value
        conn.fetchrow.side_effect = [None, {**SUMMARY_ROW, "total": 0}]

        with patch("backend.jobs.lead_digest.get_settings", return_value=test_settings), \
                patch("backend.jobs.lead_digest.get_db_pool", new=AsyncMock(return_value=mock_db_pool)):
            result = await send_lead_digest(DIGEST_DATE)

        assert result["skipped"] is True
        assert "No submissions" in result["reason"]
        mock_slack_client.send.assert_not_called()
        conn.execute.assert_not_called()

    async def test_sends_and_records(
        self,
        test_settings: Settings,
        mock_db_pool: AsyncMock,
        mock_slack_client: Mock,
    ) -> None:
        # Arrange: not yet sent, then the day's summary
        conn = mock_db_pool.acquire.return_value.__aenter__.return_value
        conn.fetchrow.side_effect = [None, SUMMARY_ROW]

        # Act
        with patch("backend.jobs.lead_digest.get_settings", return_value=test_settings), \
                patch("backend.jobs.lead_digest.get_db_pool", new=AsyncMock(return_value=mock_db_pool)):
            result = await send_lead_digest(DIGEST_DATE)

        # Assert
        assert result == {
            "success": True,
            "date": "2026-10-18",
            "total": 4,
            "with_email": 3,
        }
        mock_slack_client.send.assert_called_once()
        assert "blocks" in mock_slack_client.send.call_args.kwargs
        conn.execute.assert_awaited_once()

    async def test_force_bypasses_state_check(
        self,
        test_settings: Settings,
        mock_db_pool: AsyncMock,
        mock_slack_client: Mock,
    ) -> None:
        conn = mock_db_pool.acquire.return_value.__aenter__.return_value
        conn.fetchrow.return_value = SUMMARY_ROW

        with patch("backend.jobs.lead_digest.get_settings", return_value=test_settings), \
                patch("backend.jobs.lead_digest.get_db_pool", new=AsyncMock(return_value=mock_db_pool)):
            result = await send_lead_digest(DIGEST_DATE, force=True)

        assert result["success"] is True
        assert conn.fetchrow.await_count == 1
        mock_slack_client.send.assert_called_once()

    async def test_slack_error_is_not_recorded(
        self,
        test_settings: Settings,
        mock_db_pool: AsyncMock,
        mock_slack_client: Mock,
    ) -> None:
        conn = mock_db_pool.acquire.return_value.__aenter__.return_value
        conn.fetchrow.side_effect = [None, SUMMARY_ROW]
        mock_slack_client.send.return_value.status_code = 500
        mock_slack_client.send.return_value.body = "internal_error"

        with patch("backend.jobs.lead_digest.get_settings", return_value=test_settings), \
                patch("backend.jobs.lead_digest.get_db_pool", new=AsyncMock(return_value=mock_db_pool)):
            result = await send_lead_digest(DIGEST_DATE)

        assert result["success"] is False
        assert "500" in result["error"]
        conn.execute.assert_not_called()

    async def test_state_check_failure(
        self,
        test_settings: Settings,
        mock_db_pool: AsyncMock,
        mock_slack_client: Mock,
    ) -> None:
        conn = mock_db_pool.acquire.return_value.__aenter__.return_value
        conn.fetchrow.side_effect = RuntimeError("relation does not exist")

        with patch("backend.jobs.lead_digest.get_settings", return_value=test_settings), \
                patch("backend.jobs.lead_digest.get_db_pool", new=AsyncMock(return_value=mock_db_pool)):
            result = await send_lead_digest(DIGEST_DATE)

        assert result["success"] is False
        mock_slack_client.send.assert_not_called()


# =============================================================================
# Admin Seeding
# =============================================================================

@pytest.mark.asyncio
class TestSeedAdmin:
    """seed_admin() upserts the console account."""

    async def test_seed_admin_with_arguments(self, test_settings: Settings) -> None:
        # Arrange
        row = {
            "id": "5f0c8f3e-6c1a-4b39-9a53-3c1d8f0e2b7a",
            "email": "owner@clinic.example",
            "name": "Owner",
            "created_at": datetime(2026, 10, 19, tzinfo=timezone.utc),
        }
        upsert = AsyncMock(return_value=row)
        schema = AsyncMock()

        # Act
        with patch("backend.jobs.seed_admin.get_settings", return_value=test_settings), \
                patch("backend.jobs.seed_admin.ensure_schema", new=schema), \
                patch("backend.jobs.seed_admin.execute_query_one", new=upsert):
            user = await seed_admin(email=" Owner@Clinic.example ", password="Pa55word!", name="Owner")

        # Assert
        assert user.email == "owner@clinic.example"
        schema.assert_awaited_once()
        query, email, password_hash, name = upsert.await_args.args
        assert query == UPSERT_ADMIN
        assert email == "owner@clinic.example"
        assert name == "Owner"
        assert verify_password("Pa55word!", password_hash)
        assert "Pa55word!" not in password_hash

    async def test_seed_admin_defaults_from_settings(self, test_settings: Settings) -> None:
        upsert = AsyncMock(return_value={
            "id": "5f0c8f3e-6c1a-4b39-9a53-3c1d8f0e2b7a",
            "email": test_settings.admin_email,
            "name": test_settings.admin_name,
            "created_at": None,
        })

        with patch("backend.jobs.seed_admin.get_settings", return_value=test_settings), \
                patch("backend.jobs.seed_admin.ensure_schema", new=AsyncMock()), \
                patch("backend.jobs.seed_admin.execute_query_one", new=upsert):
            await seed_admin()

        args = upsert.await_args.args
        assert args[1] == "admin@followuphealth.com"
        assert verify_password(test_settings.admin_password, args[2])
        assert args[3] == "Admin"

    async def test_seed_admin_rejects_blank_email(self, test_settings: Settings) -> None:
        settings = test_settings.model_copy(update={"admin_email": "   "})

        with patch("backend.jobs.seed_admin.get_settings", return_value=settings), \
                patch("backend.jobs.seed_admin.ensure_schema", new=AsyncMock()) as schema:
            with pytest.raises(ValueError):
                await seed_admin()

        schema.assert_not_awaited()
