# =============================================================================
# tests/test_push_and_reminders.py - Web Push and Reminder Sweep Tests
# =============================================================================
# Run with: pytest tests/test_push_and_reminders.py -v
# =============================================================================

import json
from types import SimpleNamespace
from unittest.mock import patch

import pytest
import requests
from pywebpush import WebPushException

from app.config import settings
from app.exceptions import BadRequestError
from core.models import PushSubscribeRequest
from core.services import PushService, ReminderService
from lib.push_client import PushPayload, send_push, subscription_info

SUBSCRIPTION_ROW = {
    "id": "s1",
    "endpoint": "https://push.example/abc",
    "p256dh": "key",
    "auth": "secret",
}


@pytest.fixture
def vapid():
    with patch.object(settings, "VAPID_PUBLIC_KEY", "pub"), \
            patch.object(settings, "VAPID_PRIVATE_KEY", "priv"), \
            patch.object(settings, "VAPID_SUBJECT", "mailto:owner@example.com"):
        yield


class TestPushClient:

    def test_payload_drops_empty_fields(self):
        payload = json.loads(PushPayload(title="Hi", body="There").to_json())
        assert payload == {"title": "Hi", "body": "There", "url": "/"}

    def test_subscription_info_from_columns(self):
        info = subscription_info(SUBSCRIPTION_ROW)
        assert info == {"endpoint": "https://push.example/abc", "keys": {"p256dh": "key", "auth": "secret"}}

    def test_send_uses_vapid_claims(self, vapid):
        with patch("lib.push_client.webpush") as webpush:
            result = send_push(SUBSCRIPTION_ROW, PushPayload(title="Hi", body="There"))

        assert result.ok is True
        kwargs = webpush.call_args.kwargs
        assert kwargs["vapid_private_key"] == "priv"
        assert kwargs["vapid_claims"] == {"sub": "mailto:owner@example.com"}

    def test_gone_subscription_is_expired(self, vapid):
        error = WebPushException("gone", response=SimpleNamespace(status_code=410))
        with patch("lib.push_client.webpush", side_effect=error):
            result = send_push(SUBSCRIPTION_ROW, PushPayload(title="Hi", body="There"))

        assert result.ok is False
        assert result.expired is True

    def test_network_error_is_reported_not_raised(self, vapid):
        with patch("lib.push_client.webpush", side_effect=requests.ConnectionError("connection reset")):
            result = send_push(SUBSCRIPTION_ROW, PushPayload(title="Hi", body="There"))

        assert result.ok is False
        assert result.expired is False
        assert "connection reset" in result.error

    def test_skipped_without_vapid_keys(self):
        with patch.object(settings, "VAPID_PRIVATE_KEY", ""), patch("lib.push_client.webpush") as webpush:
            result = send_push(SUBSCRIPTION_ROW, PushPayload(title="Hi", body="There"))

        assert result.ok is False
        webpush.assert_not_called()


class TestPushService:

    def test_subscribe_upserts_one_per_user(self, fake_db, user_id):
        request = PushSubscribeRequest(endpoint="https://push.example/abc", keys={"p256dh": "k", "auth": "a"})

        PushService.subscribe(user_id, request)

        query = fake_db.queries("push_subscriptions")[0]
        assert query.kwargs_of("upsert") == {"on_conflict": "user_id"}
        assert query.args_of("upsert")[0]["endpoint"] == "https://push.example/abc"

    def test_unsubscribe_needs_user_or_endpoint(self):
        with pytest.raises(BadRequestError):
            PushService.unsubscribe(None, None)

    def test_expired_subscriptions_are_removed(self, fake_db, user_id, vapid):
        fake_db.on("push_subscriptions", [SUBSCRIPTION_ROW])
        error = WebPushException("gone", response=SimpleNamespace(status_code=404))

        with patch("lib.push_client.webpush", side_effect=error):
            delivered = PushService.send_to_user(user_id, PushPayload(title="Hi", body="There"))

        assert delivered == 0
        deletes = [q for q in fake_db.queries("push_subscriptions") if q.called("delete")]
        assert deletes[0].filters() == {"endpoint": "https://push.example/abc"}


class TestReminderSweep:

    TASK = {"id": "t1", "user_id": "u1", "title": "Pay rent", "due_date": "2024-05-03"}

    def test_due_query_filters(self, fake_db):
        ReminderService.fetch_due(10)

        query = fake_db.queries("tasks")[0]
        assert query.filters() == {"reminder_enabled": True}
        assert query.args_of("is_") == ("reminder_sent_at", "null")
        assert query.args_of("limit") == (10,)

    def test_sends_and_marks_sent(self, fake_db):
        fake_db.on("tasks", [self.TASK])

        with patch("lib.supabase_client.SupabaseClient.fetch_user_email", return_value="u1@example.com"), \
                patch("core.services.reminder_service.send_email", return_value=True) as send_email, \
                patch.object(PushService, "send_to_user", return_value=0):
            result = ReminderService.send_due_reminders()

        assert result == {"processed": 1, "sent": 1}
        assert send_email.call_args.args[0] == "u1@example.com"
        stamp = [q for q in fake_db.queries("tasks") if q.called("update")]
        assert "reminder_sent_at" in stamp[0].args_of("update")[0]
        assert stamp[0].filters() == {"id": "t1"}

    def test_user_without_email_is_left_for_next_sweep(self, fake_db):
        fake_db.on("tasks", [self.TASK])

        with patch("lib.supabase_client.SupabaseClient.fetch_user_email", return_value=None):
            result = ReminderService.send_due_reminders()

        assert result == {"processed": 1, "sent": 0}
        assert not any(q.called("update") for q in fake_db.queries("tasks"))

    def test_one_failure_does_not_stop_the_batch(self, fake_db):
        second = {**self.TASK, "id": "t2"}
        fake_db.on("tasks", [self.TASK, second])

        with patch.object(ReminderService, "send_one", side_effect=[RuntimeError("boom"), True]):
            result = ReminderService.send_due_reminders()

        assert result == {"processed": 2, "sent": 1}

    def test_push_network_error_still_marks_sent(self, fake_db, vapid):
        fake_db.on("tasks", [self.TASK])
        fake_db.on("push_subscriptions", [SUBSCRIPTION_ROW])

        with patch("lib.supabase_client.SupabaseClient.fetch_user_email", return_value="u1@example.com"), \
                patch("core.services.reminder_service.send_email", return_value=True) as send_email, \
                patch("lib.push_client.webpush", side_effect=requests.ConnectionError("unreachable")):
            result = ReminderService.send_due_reminders()

        assert result == {"processed": 1, "sent": 1}
        send_email.assert_called_once()
        stamp = [q for q in fake_db.queries("tasks") if q.called("update")]
        assert len(stamp) == 1
        assert stamp[0].filters() == {"id": "t1"}
