# =============================================================================
# core/services/note_service.py - Notes and Tasks CRUD
# =============================================================================
# Owner-scoped CRUD for notes and tasks plus the Markdown export.
# Every query filters by user_id; a row owned by someone else is reported as
# not found so its existence isn't revealed.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import DatabaseError, NotFoundError
from core.models.note import NoteCreate, NoteUpdate
from core.models.task import TaskCreate, TaskUpdate
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import normalize_uuid, utc_now

logger = logging.getLogger(__name__)


def _first_row(response: Any, resource: str, resource_id: str) -> dict[str, Any]:
    rows = response.data or []
    if not rows:
        raise NotFoundError(resource, resource_id)
    return rows[0]


class NoteService:
    """Service for notes."""

    @staticmethod
    def list_notes(user_id: UUID | str, limit: int = 200) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("notes")
                .select("id, content, created_at, updated_at")
                .eq("user_id", normalize_uuid(user_id))
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            raise DatabaseError("Failed to load notes", error=str(e))
        return response.data or []

    @staticmethod
    def create_note(user_id: UUID | str, note: NoteCreate) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("notes")
                .insert({"user_id": normalize_uuid(user_id), "content": note.content})
                .execute()
            )
        except Exception as e:
            raise DatabaseError("Failed to create note", error=str(e))
        row = _first_row(response, "Note", "new")
        logger.info(f"Created note {row.get('id')} for {user_id}")
        return row

    @staticmethod
    def update_note(user_id: UUID | str, note_id: str, update: NoteUpdate) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("notes")
                .update({"content": update.content, "updated_at": utc_now().isoformat()})
                .eq("id", note_id)
                .eq("user_id", normalize_uuid(user_id))
                .execute()
            )
        except Exception as e:
            raise DatabaseError("Failed to update note", error=str(e))
        return _first_row(response, "Note", note_id)

    @staticmethod
    def delete_note(user_id: UUID | str, note_id: str) -> None:
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("notes")
                .delete()
                .eq("id", note_id)
                .eq("user_id", normalize_uuid(user_id))
                .execute()
            )
        except Exception as e:
            raise DatabaseError("Failed to delete note", error=str(e))
        _first_row(response, "Note", note_id)


class TaskService:
    """Service for tasks."""

    @staticmethod
    def list_tasks(user_id: UUID | str, limit: int = 500) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("tasks")
                .select("*")
                .eq("user_id", normalize_uuid(user_id))
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            raise DatabaseError("Failed to load tasks", error=str(e))
        return response.data or []

    @staticmethod
    def create_task(user_id: UUID | str, task: TaskCreate) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        data = task.model_dump(mode="json")
        data["user_id"] = normalize_uuid(user_id)
        try:
            response = client.table("tasks").insert(data).execute()
        except Exception as e:
            raise DatabaseError("Failed to create task", error=str(e))
        row = _first_row(response, "Task", "new")
        logger.info(f"Created task {row.get('id')} for {user_id}")
        return row

    @staticmethod
    def update_task(user_id: UUID | str, task_id: str, update: TaskUpdate) -> dict[str, Any]:
        """
        Apply a partial update.

        Changing reminder_at re-arms the reminder (reminder_sent_at cleared).
        """
        data = update.model_dump(mode="json", exclude_unset=True)
        if "reminder_at" in data:
            data["reminder_sent_at"] = None
        data["updated_at"] = utc_now().isoformat()

        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("tasks")
                .update(data)
                .eq("id", task_id)
                .eq("user_id", normalize_uuid(user_id))
                .execute()
            )
        except Exception as e:
            raise DatabaseError("Failed to update task", error=str(e))
        return _first_row(response, "Task", task_id)

    @staticmethod
    def complete_task(user_id: UUID | str, task_id: str, completed: bool = True) -> dict[str, Any]:
        """Mark a task done (or not done) and stamp completed_at."""
        now = utc_now().isoformat()
        data = {
            "completed": completed,
            "is_completed": completed,
            "completed_at": now if completed else None,
            "updated_at": now,
        }
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("tasks")
                .update(data)
                .eq("id", task_id)
                .eq("user_id", normalize_uuid(user_id))
                .execute()
            )
        except Exception as e:
            raise DatabaseError("Failed to complete task", error=str(e))
        return _first_row(response, "Task", task_id)

    @staticmethod
    def delete_task(user_id: UUID | str, task_id: str) -> None:
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("tasks")
                .delete()
                .eq("id", task_id)
                .eq("user_id", normalize_uuid(user_id))
                .execute()
            )
        except Exception as e:
            raise DatabaseError("Failed to delete task", error=str(e))
        _first_row(response, "Task", task_id)


# =============================================================================
# Export
# =============================================================================

def _md(text: str | None) -> str:
    return (text or "").replace("\r\n", "\n")


def build_markdown_export(
    notes: list[dict[str, Any]],
    tasks: list[dict[str, Any]],
    exported_at: str,
) -> str:
    """Markdown document with every note and task, oldest first."""
    lines = ["# AI Productivity Hub - Export", "", f"Exported at: {exported_at}", "", "## Notes", ""]

    if notes:
        for i, note in enumerate(notes, start=1):
            lines += [
                f"### Note {i}",
                f"- Created: {note.get('created_at')}",
                f"- Updated: {note.get('updated_at') or '-'}",
                "",
                _md(note.get("content")),
                "",
                "---",
                "",
            ]
    else:
        lines += ["_No notes_", ""]

    lines += ["## Tasks", ""]
    if tasks:
        for i, task in enumerate(tasks, start=1):
            done = task.get("completed") or task.get("is_completed")
            lines += [
                f"### Task {i}",
                f"- Title: {task.get('title') or '(untitled)'}",
                f"- Description: {_md(task.get('description')) or '-'}",
                f"- Completed: {'Yes' if done else 'No'}",
                f"- Due: {task.get('due_date') or '-'}",
                f"- Created: {task.get('created_at')}",
                f"- Updated: {task.get('updated_at') or '-'}",
                "",
                "---",
                "",
            ]
    else:
        lines += ["_No tasks_", ""]

    return "\n".join(lines)


def export_markdown(user_id: UUID | str) -> tuple[str, str]:
    """
    Export all of a user's notes and tasks, oldest first.

    Returns:
        (filename, markdown)
    """
    client = SupabaseClient.get_client()
    owner = normalize_uuid(user_id)
    try:
        notes = SupabaseClient.fetch_all(
            lambda: client.table("notes")
            .select("id, content, created_at, updated_at")
            .eq("user_id", owner)
            .order("created_at"),
            "notes",
        )
        tasks = SupabaseClient.fetch_all(
            lambda: client.table("tasks").select("*").eq("user_id", owner).order("created_at"),
            "tasks",
        )
    except SupabaseClientError as e:
        raise DatabaseError("Failed to load data for export", error=str(e))

    now = utc_now().isoformat()
    return f"aih_export_{now[:10]}.md", build_markdown_export(notes, tasks, now)
