# =============================================================================
# core/services/chat_thread_service.py - Saved Coach Conversations
# =============================================================================
# Threads and their messages in ai_chat_threads / ai_chat_messages.
# Every query filters by user_id; someone else's thread is reported as not
# found. Saving an exchange from /ai/chat is best effort: the reply was
# already produced, so a failed write is logged and the chat still answers.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import BadRequestError, DatabaseError, NotFoundError
from core.models.chat import THREAD_TITLE_MAX
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now

logger = logging.getLogger(__name__)

THREAD_COLUMNS = "id, title, category, created_at, updated_at"
THREAD_LIST_LIMIT = 50
MESSAGE_LIST_LIMIT = 100
FALLBACK_TITLE_LENGTH = 80


def default_title(message: str) -> str:
    """First line of the message, cut to 80 characters."""
    first_line = message.strip().split("\n")[0][:FALLBACK_TITLE_LENGTH].strip()
    return first_line or "New conversation"


class ChatThreadService:
    """Service for saved AI chat threads."""

    @staticmethod
    def list_threads(user_id: UUID | str, limit: int = THREAD_LIST_LIMIT) -> list[dict[str, Any]]:
        """Most recently active first."""
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("ai_chat_threads")
                .select(THREAD_COLUMNS)
                .eq("user_id", normalize_uuid(user_id))
                .order("updated_at", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            raise DatabaseError("Failed to load conversations", error=str(e))
        return response.data or []

    @staticmethod
    def _require_thread(user_id: str, thread_id: str) -> None:
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("ai_chat_threads")
                .select("id")
                .eq("id", thread_id)
                .eq("user_id", user_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise DatabaseError("Failed to load conversation", error=str(e))
        if not response.data:
            raise NotFoundError("Chat thread", thread_id)

    @staticmethod
    def get_messages(user_id: UUID | str, thread_id: str) -> list[dict[str, Any]]:
        """
        Messages of one thread, oldest first.

        Raises:
            NotFoundError: Unknown thread or not the caller's
        """
        uid = normalize_uuid(user_id)
        ChatThreadService._require_thread(uid, thread_id)

        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("ai_chat_messages")
                .select("id, role, content, created_at")
                .eq("thread_id", thread_id)
                .eq("user_id", uid)
                .order("created_at")
                .limit(MESSAGE_LIST_LIMIT)
                .execute()
            )
        except Exception as e:
            raise DatabaseError("Failed to load messages", error=str(e))
        return response.data or []

    @staticmethod
    def rename_thread(user_id: UUID | str, thread_id: str, title: str) -> dict[str, Any]:
        new_title = title.strip()[:THREAD_TITLE_MAX]
        if not new_title:
            raise BadRequestError("Missing title")

        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("ai_chat_threads")
                .update({"title": new_title, "updated_at": utc_now().isoformat()})
                .eq("id", thread_id)
                .eq("user_id", normalize_uuid(user_id))
                .execute()
            )
        except Exception as e:
            logger.error(f"Rename of thread {thread_id} failed: {e}")
            raise DatabaseError("Could not rename thread", error=str(e))

        rows = response.data or []
        if not rows:
            raise NotFoundError("Chat thread", thread_id)
        return rows[0]

    @staticmethod
    def delete_thread(user_id: UUID | str, thread_id: str) -> None:
        """Delete the messages, then the thread itself."""
        uid = normalize_uuid(user_id)
        client = SupabaseClient.get_client()

        try:
            client.table("ai_chat_messages").delete().eq("thread_id", thread_id).eq("user_id", uid).execute()
        except Exception as e:
            logger.error(f"Deleting messages of thread {thread_id} failed: {e}")

        try:
            response = (
                client.table("ai_chat_threads")
                .delete()
                .eq("id", thread_id)
                .eq("user_id", uid)
                .execute()
            )
        except Exception as e:
            logger.error(f"Deleting thread {thread_id} failed: {e}")
            raise DatabaseError("Could not delete thread", error=str(e))

        if not response.data:
            raise NotFoundError("Chat thread", thread_id)
        logger.info(f"Deleted chat thread {thread_id} for {uid}")

    # -------------------------------------------------------------------------
    # Saving exchanges from /ai/chat
    # -------------------------------------------------------------------------

    @staticmethod
    def save_exchange(
        user_id: UUID | str,
        user_text: str,
        assistant_text: str,
        thread_id: str | None = None,
        title: str | None = None,
        category: str | None = None,
    ) -> str | None:
        """
        Append one user/assistant pair, creating the thread when needed.

        An existing thread gets its updated_at bumped; a thread id the user
        doesn't own is refused.

        Returns:
            The thread id, or None when nothing could be saved
        """
        uid = normalize_uuid(user_id)
        client = SupabaseClient.get_client()

        try:
            if thread_id:
                touched = (
                    client.table("ai_chat_threads")
                    .update({"updated_at": utc_now().isoformat()})
                    .eq("id", thread_id)
                    .eq("user_id", uid)
                    .execute()
                )
                if not touched.data:
                    logger.warning(f"Thread {thread_id} not found for {uid}; exchange not saved")
                    return None
            else:
                created = (
                    client.table("ai_chat_threads")
                    .insert({
                        "user_id": uid,
                        "title": (title or default_title(user_text))[:THREAD_TITLE_MAX],
                        "category": category,
                    })
                    .execute()
                )
                rows = created.data or []
                if not rows:
                    logger.error(f"Creating a chat thread for {uid} returned no row")
                    return None
                thread_id = rows[0]["id"]
        except Exception as e:
            logger.error(f"Could not save chat thread for {uid}: {e}")
            return None

        try:
            client.table("ai_chat_messages").insert([
                {"thread_id": thread_id, "user_id": uid, "role": "user", "content": user_text},
                {"thread_id": thread_id, "user_id": uid, "role": "assistant", "content": assistant_text},
            ]).execute()
        except Exception as e:
            logger.error(f"Could not save messages to thread {thread_id}: {e}")

        return thread_id
