# tests/conftest.py

from __future__ import annotations

import itertools
from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from classsync.core.state import AppState
from classsync.tasks.blob_store import InMemoryBlobStore
from classsync.tasks.task_store import TaskStore

from .fakes import FakeExtractor

# 2024-04-20 12:00 local time
FIXED_NOW = datetime(2024, 4, 20, 12, 0, 0).timestamp()


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the developer's environment.
    """
    return SimpleNamespace(
        app_name="ClassSync",
        log_level="INFO",
        data_dir=tmp_path,
        storage_path=tmp_path / "storage.json",
        storage_key="classSync_tasks",
        ai_api_key=None,
        ai_base_url="https://example.invalid/v1",
        ai_model="test-model",
        ai_timeout_seconds=5.0,
        ai_connect_timeout_seconds=1.0,
        offline_ai=False,
    )


@pytest.fixture()
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture()
def id_factory():
    counter = itertools.count(1)
    return lambda: f"task-{next(counter):04d}"


@pytest.fixture()
def store(blob_store: InMemoryBlobStore, id_factory) -> TaskStore:
    """Empty TaskStore with a fixed clock and predictable ids."""
    s = TaskStore(blob_store, clock=lambda: FIXED_NOW, id_factory=id_factory)
    blob_store.write("classSync_tasks", "[]")
    s.load()
    return s


@pytest.fixture()
def extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore, extractor: FakeExtractor) -> AppState:
    """AppState wired with an in-memory store and a fake extractor."""
    return AppState(settings=settings, task_store=store, extractor=extractor, ai_online=True)
