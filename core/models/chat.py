# =============================================================================
# core/models/chat.py - Saved Coach Conversations
# =============================================================================
# ai_chat_threads holds one row per conversation; ai_chat_messages holds the
# turns. Both carry user_id and every query is scoped by it.
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, Field

from .ai import MessageRole

THREAD_TITLE_MAX = 100


class ChatThread(BaseModel):
    id: str
    title: str | None = None
    category: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ChatMessage(BaseModel):
    id: str | None = None
    role: MessageRole
    content: str
    created_at: datetime | None = None


class ThreadRenameRequest(BaseModel):
    """Title is trimmed and cut to 100 characters."""
    title: str = Field(..., max_length=500)
