# src/classsync/tasks/task_api.py

"""
UI-facing operations.

These are the only entry points a UI (the console connector, or anything
else) is expected to call; they keep the view state on AppState and leave
confirmation and rendering to the caller.
"""

from __future__ import annotations

import logging

from ..core.state import AppState
from ..llm.extraction import InlineImage
from .task_models import ExtractedTaskData, Task, TaskDraft
from .task_query import StatusFilter, visible_tasks

logger = logging.getLogger(__name__)

__all__ = [
    "load_tasks",
    "create_task",
    "toggle_complete",
    "delete_task",
    "visible_tasks",
    "current_view",
    "set_view",
    "extract_task",
]


def load_tasks(state: AppState) -> list[Task]:
    return state.task_store.load()


def create_task(state: AppState, draft: TaskDraft) -> Task:
    task = state.task_store.create(draft)
    logger.info("Created task id=%s title=%r", task.id, task.title)
    return task


def toggle_complete(state: AppState, task_id: str) -> None:
    state.task_store.toggle_complete(task_id)


def delete_task(state: AppState, task_id: str) -> None:
    """Delete without asking; the caller must have confirmed with the user."""
    state.task_store.delete(task_id)
    if state.pending_delete_id == task_id:
        state.pending_delete_id = None


def set_view(
    state: AppState,
    *,
    status_filter: StatusFilter | str | None = None,
    search_text: str | None = None,
) -> None:
    if status_filter is not None:
        state.status_filter = StatusFilter(status_filter)
    if search_text is not None:
        state.search_text = search_text


def current_view(state: AppState) -> list[Task]:
    return visible_tasks(state.task_store.tasks, state.status_filter, state.search_text)


def extract_task(state: AppState, text: str, image: InlineImage | None = None) -> ExtractedTaskData:
    return state.extractor.extract(text, image)
