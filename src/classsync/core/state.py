# src/classsync/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.drafts import DraftForm
from ..tasks.task_query import StatusFilter
from ..tasks.task_store import TaskStore
from .ports import TaskExtractor


@dataclass
class AppState:
    """
    Everything one UI session needs.

    settings is kept as Any so tests can pass a SimpleNamespace.
    """

    settings: Any
    task_store: TaskStore
    extractor: TaskExtractor
    ai_online: bool = False

    # View state (the original UI opened on "active").
    status_filter: StatusFilter = StatusFilter.ACTIVE
    search_text: str = ""

    # Form state: the draft being edited and a delete awaiting confirmation.
    draft: DraftForm | None = None
    pending_delete_id: str | None = None
