# src/classsync/tasks/task_query.py

"""Pure view computation: which tasks are shown, and in what order."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from enum import StrEnum

from .task_models import Task


class StatusFilter(StrEnum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


def matches_status(task: Task, status_filter: StatusFilter) -> bool:
    if status_filter is StatusFilter.ACTIVE:
        return not task.completed
    if status_filter is StatusFilter.COMPLETED:
        return task.completed
    return True


def matches_search(task: Task, search_text: str) -> bool:
    if not search_text:
        return True
    needle = search_text.casefold()
    return (
        needle in task.title.casefold()
        or needle in task.teacher.casefold()
        or needle in task.description.casefold()
    )


def visible_tasks(
    tasks: Iterable[Task],
    status_filter: StatusFilter | str = StatusFilter.ALL,
    search_text: str = "",
) -> list[Task]:
    """
    Filter by status and search text, then order for display:
    active before completed, each group by ascending deadline.

    sorted() is stable, so tasks due the same day keep collection order.
    Raises ValueError for an unknown status filter.
    """
    f = StatusFilter(status_filter)
    kept = [t for t in tasks if matches_status(t, f) and matches_search(t, search_text)]
    return sorted(kept, key=lambda t: (t.completed, t.deadline))


def is_overdue(task: Task, today: date) -> bool:
    """Open task whose deadline day has already passed."""
    return not task.completed and task.deadline < today
