# =============================================================================
# lib/email_client.py - Transactional Email (Resend)
# =============================================================================
# Sends email through the Resend HTTP API using httpx, plus the templates
# for reminders, digests, weekly reports and scheduled nudges.
#
# Sending is best effort: send_email() never raises, it logs and returns False.
# =============================================================================

import html
import logging
import re

import httpx

from app.config import settings

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
APP_NAME = "AI Productivity Hub"
EMAIL_TIMEOUT_SECONDS = 10.0

_NAMED_SENDER = re.compile(r"^.+<[^>]+>$")


def sender_address() -> str:
    """
    The From header.

    A bare address is wrapped with the app name; "Name <addr>" is kept.
    """
    raw = settings.RESEND_FROM_EMAIL.strip()
    if _NAMED_SENDER.match(raw):
        return raw
    return f"{APP_NAME} <{raw}>"


def send_email(
    to: str,
    subject: str,
    text: str,
    html_body: str | None = None,
    unsubscribe: bool = False,
) -> bool:
    """
    Send one email.

    Recurring mail (digests, reports, nudges) passes unsubscribe=True to add
    a List-Unsubscribe header pointing at the settings page.

    Returns:
        True when Resend accepted the message
    """
    if not settings.email_enabled:
        logger.warning(f"Email to {to} skipped: RESEND_API_KEY is not configured")
        return False

    payload = {
        "from": sender_address(),
        "to": [to],
        "subject": subject,
        "text": text,
    }
    if html_body:
        payload["html"] = html_body
    if unsubscribe:
        payload["headers"] = {"List-Unsubscribe": f"<{settings.site_url}/settings>"}

    try:
        response = httpx.post(
            RESEND_API_URL,
            json=payload,
            headers={"Authorization": f"Bearer {settings.RESEND_API_KEY}"},
            timeout=EMAIL_TIMEOUT_SECONDS,
        )
        if response.status_code >= 400:
            logger.error(f"Resend rejected email to {to}: HTTP {response.status_code} {response.text[:200]}")
            return False
        logger.info(f"Sent email '{subject}' to {to}")
        return True

    except httpx.HTTPError as e:
        logger.error(f"Resend request failed for {to}: {e}")
        return False


# =============================================================================
# Templates
# =============================================================================

def task_reminder_email(title: str, due_date: str | None = None) -> tuple[str, str, str]:
    """
    Build (subject, text, html) for a task reminder.

    Task titles are user input, so they are escaped in the HTML part.
    """
    subject = f"Reminder: {title}"
    due_line = f"\nDue: {due_date}" if due_date else ""
    link = f"{settings.site_url}/tasks"

    text = (
        f"Hi!\n\nThis is your reminder for the task:\n\n{title}{due_line}\n\n"
        f"Open your tasks: {link}\n\n- {APP_NAME}"
    )
    safe_title = html.escape(title)
    due_html = f"<p>Due: {html.escape(due_date)}</p>" if due_date else ""
    html_body = (
        f"<p>Hi!</p><p>This is your reminder for the task:</p>"
        f"<p><strong>{safe_title}</strong></p>{due_html}"
        f'<p><a href="{link}">Open your tasks</a></p><p>- {APP_NAME}</p>'
    )
    return subject, text, html_body


def delivery_check_email() -> tuple[str, str]:
    """(subject, text) for the admin "send test email" button."""
    return (
        f"{APP_NAME} test email",
        f"If you can read this, email delivery from {APP_NAME} works.",
    )


def _body_html(body: str) -> str:
    """Escaped HTML for a plain-text body: blank lines split paragraphs."""
    paragraphs = [p for p in body.split("\n\n") if p.strip()]
    return "".join(f"<p>{html.escape(p).replace(chr(10), '<br>')}</p>" for p in paragraphs)


def _branded(title: str, body: str, footer: str) -> tuple[str, str]:
    """(text, html) with the app header and a settings footer."""
    link = f"{settings.site_url}/settings"
    text = f"{body}\n\n{footer}\n{link}\n\n- {APP_NAME}"
    html_body = (
        f"<h2>{html.escape(title)}</h2>{_body_html(body)}"
        f'<p style="color:#888">{html.escape(footer)} <a href="{link}">Settings</a></p>'
    )
    return text, html_body


def daily_digest_email(body: str) -> tuple[str, str, str]:
    """Build (subject, text, html) for the daily digest."""
    subject = "Your Daily AI Productivity Digest"
    text, html_body = _branded(subject, body, "You can change your daily digest settings anytime.")
    return subject, text, html_body


def weekly_report_email(body: str) -> tuple[str, str, str]:
    """Build (subject, text, html) for the weekly report."""
    subject = "Your Weekly AI Productivity Report"
    text, html_body = _branded(subject, body, "You can turn weekly reports off in your settings.")
    return subject, text, html_body


# Scheduled check-in nudges, keyed by notification kind
NUDGES: dict[str, tuple[str, str, str]] = {
    "daily_success": (
        "Daily Success - quick check-in",
        "Take 10 seconds to score your day from 0-100.",
        "/daily-success",
    ),
    "evening_reflection": (
        "Evening reflection - 2-minute wrap-up",
        "Write a quick reflection on your day and what you'll focus on tomorrow.",
        "/daily-success",
    ),
    "task_reminders": (
        "Tasks for today",
        "Quick reminder to review your tasks for today.",
        "/tasks",
    ),
}


def nudge_email(kind: str) -> tuple[str, str]:
    """(subject, text) for a scheduled nudge; raises KeyError for unknown kinds."""
    subject, line, path = NUDGES[kind]
    return subject, (
        f"{line}\n\nOpen {APP_NAME}: {settings.site_url}{path}\n\n"
        "You can change reminder times in Settings > Notifications."
    )
