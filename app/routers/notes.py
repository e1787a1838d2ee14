# =============================================================================
# app/routers/notes.py - Notes & Tasks Endpoints
# =============================================================================
# CRUD for the signed-in user's notes and tasks, plus the Markdown export.
# Every query is scoped to the caller; other users' rows look like 404s.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response

from app.auth import AuthUser, get_current_user
from core.models import (
    NoteCreate,
    NoteResponse,
    NoteUpdate,
    TaskCreate,
    TaskResponse,
    TaskUpdate,
)
from core.services import NoteService, TaskService
from core.services.note_service import export_markdown

logger = logging.getLogger(__name__)

router = APIRouter()

ItemId = Annotated[str, Path(description="Row ID")]


# =============================================================================
# Notes
# =============================================================================

@router.get("/notes", response_model=list[NoteResponse])
def list_notes(user: AuthUser = Depends(get_current_user)):
    """Notes of the current user, newest first."""
    return NoteService.list_notes(user.id)


@router.post("/notes", response_model=NoteResponse, status_code=201)
def create_note(note: NoteCreate, user: AuthUser = Depends(get_current_user)):
    return NoteService.create_note(user.id, note)


@router.patch("/notes/{note_id}", response_model=NoteResponse)
def update_note(note_id: ItemId, update: NoteUpdate, user: AuthUser = Depends(get_current_user)):
    return NoteService.update_note(user.id, note_id, update)


@router.delete("/notes/{note_id}")
def delete_note(note_id: ItemId, user: AuthUser = Depends(get_current_user)):
    NoteService.delete_note(user.id, note_id)
    return {"ok": True}


# =============================================================================
# Tasks
# =============================================================================

@router.get("/tasks", response_model=list[TaskResponse])
def list_tasks(user: AuthUser = Depends(get_current_user)):
    return TaskService.list_tasks(user.id)


@router.post("/tasks", response_model=TaskResponse, status_code=201)
def create_task(task: TaskCreate, user: AuthUser = Depends(get_current_user)):
    """
    Create a task.

    A reminder needs both reminder_enabled and reminder_at; the cron sweep
    picks it up once reminder_at has passed.
    """
    return TaskService.create_task(user.id, task)


@router.patch("/tasks/{task_id}", response_model=TaskResponse)
def update_task(task_id: ItemId, update: TaskUpdate, user: AuthUser = Depends(get_current_user)):
    return TaskService.update_task(user.id, task_id, update)


@router.post("/tasks/{task_id}/complete", response_model=TaskResponse)
def complete_task(
    task_id: ItemId,
    completed: bool = True,
    user: AuthUser = Depends(get_current_user),
):
    """Mark a task done (or undone with ?completed=false)."""
    return TaskService.complete_task(user.id, task_id, completed)


@router.delete("/tasks/{task_id}")
def delete_task(task_id: ItemId, user: AuthUser = Depends(get_current_user)):
    TaskService.delete_task(user.id, task_id)
    return {"ok": True}


# =============================================================================
# Export
# =============================================================================

@router.get("/export")
def export_data(user: AuthUser = Depends(get_current_user)):
    """Download all notes and tasks as a Markdown file."""
    filename, markdown = export_markdown(user.id)
    logger.info(f"Export for {user.id}: {filename}")
    return Response(
        content=markdown,
        media_type="text/markdown; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
