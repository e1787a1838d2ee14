# =============================================================================
# tests/test_email_client.py - Resend Email Tests
# =============================================================================
# httpx.post is patched; no network access.
#
# Run with: pytest tests/test_email_client.py -v
# =============================================================================

from unittest.mock import MagicMock, patch

import httpx
import pytest

from app.config import settings
from lib.email_client import (
    RESEND_API_URL,
    daily_digest_email,
    nudge_email,
    send_email,
    sender_address,
    task_reminder_email,
    weekly_report_email,
)


@pytest.fixture
def resend_configured():
    with patch.object(settings, "RESEND_API_KEY", "re_test"), \
            patch.object(settings, "RESEND_FROM_EMAIL", "hello@aiprod.app"):
        yield


class TestSender:

    def test_bare_address_gets_app_name(self, resend_configured):
        assert sender_address() == "AI Productivity Hub <hello@aiprod.app>"

    def test_named_sender_is_kept(self):
        with patch.object(settings, "RESEND_FROM_EMAIL", "Team <team@aiprod.app>"):
            assert sender_address() == "Team <team@aiprod.app>"


class TestSendEmail:

    def test_disabled_without_api_key(self):
        with patch.object(settings, "RESEND_API_KEY", ""), patch("lib.email_client.httpx.post") as post:
            assert send_email("a@example.com", "Hi", "Body") is False
        post.assert_not_called()

    def test_posts_to_resend(self, resend_configured):
        with patch("lib.email_client.httpx.post", return_value=MagicMock(status_code=200)) as post:
            assert send_email("a@example.com", "Hi", "Body", html_body="<p>Body</p>") is True

        assert post.call_args.args[0] == RESEND_API_URL
        payload = post.call_args.kwargs["json"]
        assert payload["to"] == ["a@example.com"]
        assert payload["html"] == "<p>Body</p>"
        assert post.call_args.kwargs["headers"] == {"Authorization": "Bearer re_test"}

    def test_rejection_returns_false(self, resend_configured):
        response = MagicMock(status_code=422, text="invalid from")
        with patch("lib.email_client.httpx.post", return_value=response):
            assert send_email("a@example.com", "Hi", "Body") is False

    def test_network_error_returns_false(self, resend_configured):
        with patch("lib.email_client.httpx.post", side_effect=httpx.ConnectError("refused")):
            assert send_email("a@example.com", "Hi", "Body") is False

    def test_recurring_mail_gets_unsubscribe_header(self, resend_configured):
        with patch("lib.email_client.httpx.post", return_value=MagicMock(status_code=200)) as post:
            send_email("a@example.com", "Digest", "Body", unsubscribe=True)

        headers = post.call_args.kwargs["json"]["headers"]
        assert headers == {"List-Unsubscribe": f"<{settings.site_url}/settings>"}

    def test_one_off_mail_has_no_extra_headers(self, resend_configured):
        with patch("lib.email_client.httpx.post", return_value=MagicMock(status_code=200)) as post:
            send_email("a@example.com", "Hi", "Body")

        assert "headers" not in post.call_args.kwargs["json"]


class TestTemplates:

    def test_reminder_escapes_title_in_html(self):
        subject, text, html_body = task_reminder_email("<b>Pay</b> rent", "2024-06-01")

        assert subject == "Reminder: <b>Pay</b> rent"
        assert "Due: 2024-06-01" in text
        assert "&lt;b&gt;Pay&lt;/b&gt; rent" in html_body
        assert "<b>Pay</b>" not in html_body

    def test_digest_body_is_escaped_and_split_into_paragraphs(self):
        subject, text, html_body = daily_digest_email("Hi there,\n\n- <Ship> release\n- Review")

        assert subject == "Your Daily AI Productivity Digest"
        assert text.startswith("Hi there,")
        assert "&lt;Ship&gt; release<br>- Review" in html_body
        assert html_body.count("<p>") >= 2

    def test_weekly_report_subject(self):
        subject, text, _ = weekly_report_email("Your AI Wins This Week:")
        assert subject == "Your Weekly AI Productivity Report"
        assert f"{settings.site_url}/settings" in text

    def test_nudges_link_to_their_page(self):
        subject, text = nudge_email("task_reminders")
        assert subject == "Tasks for today"
        assert f"{settings.site_url}/tasks" in text

        _, evening = nudge_email("evening_reflection")
        assert f"{settings.site_url}/daily-success" in evening

    def test_unknown_nudge_kind(self):
        with pytest.raises(KeyError):
            nudge_email("weekly_party")
