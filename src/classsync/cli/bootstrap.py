# src/classsync/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (storage/extractor),
- loads the persisted task collection.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import TaskExtractor
from ..core.state import AppState
from ..llm.client import AIExtractionClient
from ..llm.offline import OfflineExtractionClient
from ..tasks.blob_store import JsonFileBlobStore
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.storage_path.parent.mkdir(parents=True, exist_ok=True)


def build_extractor(settings) -> tuple[TaskExtractor, bool]:
    """Return (extractor, online). Falls back to offline heuristics without a credential."""
    if getattr(settings, "offline_ai", False):
        logger.info("AI auto-fill forced offline by settings.")
        return OfflineExtractionClient(), False
    try:
        return AIExtractionClient(settings), True
    except RuntimeError as e:
        logger.info("AI auto-fill unavailable (%s); using offline heuristics.", e)
        return OfflineExtractionClient(), False


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings and load tasks.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    extractor, online = build_extractor(settings)
    task_store = TaskStore(JsonFileBlobStore(settings.storage_path), key=settings.storage_key)

    state = AppState(
        settings=settings,
        task_store=task_store,
        extractor=extractor,
        ai_online=online,
    )
    task_store.load()
    return state
