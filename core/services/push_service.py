# =============================================================================
# core/services/push_service.py - Push Subscriptions
# =============================================================================
# One browser subscription per user (upsert on user_id). Sending walks every
# row for the user and deletes rows the push service reports as expired.
# =============================================================================

import logging
from uuid import UUID

from app.exceptions import BadRequestError, DatabaseError
from core.models.push import PushSubscribeRequest
from lib.push_client import PushPayload, send_push
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid

logger = logging.getLogger(__name__)


class PushService:
    """Service for storing subscriptions and delivering notifications."""

    @staticmethod
    def subscribe(user_id: UUID | str, subscription: PushSubscribeRequest) -> None:
        client = SupabaseClient.get_client()
        row = {
            "user_id": normalize_uuid(user_id),
            "endpoint": subscription.endpoint,
            "p256dh": subscription.keys.p256dh,
            "auth": subscription.keys.auth,
            "subscription": subscription.model_dump(),
        }
        try:
            client.table("push_subscriptions").upsert(row, on_conflict="user_id").execute()
        except Exception as e:
            logger.error(f"Failed to save push subscription for {user_id}: {e}")
            raise DatabaseError("Failed to save push subscription", error=str(e))
        logger.info(f"Push subscription saved for {user_id}")

    @staticmethod
    def unsubscribe(user_id: UUID | str | None, endpoint: str | None = None) -> None:
        """Delete by user, by endpoint, or by both."""
        if not user_id and not endpoint:
            raise BadRequestError("Provide a user or an endpoint to unsubscribe")

        client = SupabaseClient.get_client()
        query = client.table("push_subscriptions").delete()
        if user_id:
            query = query.eq("user_id", normalize_uuid(user_id))
        if endpoint:
            query = query.eq("endpoint", endpoint)
        try:
            query.execute()
        except Exception as e:
            raise DatabaseError("Failed to remove push subscription", error=str(e))

    @staticmethod
    def list_subscriptions(user_id: UUID | str) -> list[dict]:
        client = SupabaseClient.get_client()
        response = (
            client.table("push_subscriptions")
            .select("id, endpoint, p256dh, auth, subscription")
            .eq("user_id", normalize_uuid(user_id))
            .execute()
        )
        return response.data or []

    @staticmethod
    def send_to_user(user_id: UUID | str, payload: PushPayload) -> int:
        """
        Push to every subscription of a user.

        Returns:
            Number of successful deliveries. Never raises.
        """
        try:
            rows = PushService.list_subscriptions(user_id)
        except Exception as e:
            logger.error(f"Failed to load push subscriptions for {user_id}: {e}")
            return 0

        delivered = 0
        for row in rows:
            result = send_push(row, payload)
            if result.ok:
                delivered += 1
            elif result.expired:
                logger.info(f"Removing expired push subscription {row.get('id')} for {user_id}")
                try:
                    PushService.unsubscribe(None, row.get("endpoint"))
                except DatabaseError as e:
                    logger.warning(f"Could not remove expired subscription: {e}")
        return delivered
