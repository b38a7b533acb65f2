# tests/test_bootstrap.py

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from classsync.cli.bootstrap import create_initial_state
from classsync.config import DEFAULT_AI_MODEL, Settings
from classsync.llm.client import AIExtractionClient
from classsync.llm.offline import OfflineExtractionClient
from classsync.tasks import task_api
from classsync.tasks.blob_store import JsonFileBlobStore
from classsync.tasks.task_models import Priority, TaskDraft


def test_json_file_blob_store_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "storage.json"
    store = JsonFileBlobStore(path)

    assert store.read("k") is None
    store.write("k", "[1]")
    store.write("other", "x")

    assert store.read("k") == "[1]"
    assert json.loads(path.read_text("utf-8")) == {"k": "[1]", "other": "x"}
    assert not path.with_suffix(".tmp").exists()


def test_json_file_blob_store_ignores_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    path.write_text("{oops", "utf-8")
    store = JsonFileBlobStore(path)

    assert store.read("k") is None
    store.write("k", "v")
    assert store.read("k") == "v"


def test_create_initial_state_offline_and_persisted(settings) -> None:
    state = create_initial_state(settings=settings)

    assert isinstance(state.extractor, OfflineExtractionClient)
    assert state.ai_online is False
    assert [t.title for t in state.task_store.tasks] == ["Physics Lab Report", "History Essay Draft"]

    task = task_api.create_task(
        state,
        TaskDraft(title="Poster", teacher="Mr. Art", deadline=date(2030, 1, 1), priority=Priority.LOW),
    )
    task_api.toggle_complete(state, "1")

    reopened = create_initial_state(settings=settings)
    by_id = {t.id: t for t in reopened.task_store.tasks}
    assert by_id[task.id].title == "Poster"
    assert by_id["1"].completed is True
    assert settings.storage_path.exists()


def test_create_initial_state_online_with_key(settings) -> None:
    settings.ai_api_key = "secret"
    state = create_initial_state(settings=settings)
    assert isinstance(state.extractor, AIExtractionClient)
    assert state.ai_online is True

    settings.offline_ai = True
    assert isinstance(create_initial_state(settings=settings).extractor, OfflineExtractionClient)


def test_task_api_view_and_delete(state) -> None:
    a = task_api.create_task(state, TaskDraft(title="A", teacher="T", deadline=date(2024, 5, 2)))
    b = task_api.create_task(state, TaskDraft(title="B", teacher="T", deadline=date(2024, 5, 1)))

    task_api.set_view(state, status_filter="all")
    assert [t.id for t in task_api.current_view(state)] == [b.id, a.id]

    task_api.set_view(state, search_text="a")
    assert [t.id for t in task_api.current_view(state)] == [a.id]

    state.pending_delete_id = a.id
    task_api.delete_task(state, a.id)
    assert state.pending_delete_id is None
    assert [t.id for t in task_api.load_tasks(state)] == [b.id]


def test_task_api_extract_delegates(state) -> None:
    data = task_api.extract_task(state, "notes")
    assert data.title == "Lab Report"
    assert state.extractor.calls == [("notes", None)]


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in ("CLASSSYNC_AI_API_KEY", "GEMINI_API_KEY", "CLASSSYNC_AI_MODEL", "CLASSSYNC_STORAGE_PATH"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CLASSSYNC_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("API_KEY", "legacy-key")
    monkeypatch.setenv("CLASSSYNC_AI_TIMEOUT_SECONDS", "not-a-number")
    monkeypatch.setenv("CLASSSYNC_OFFLINE_AI", "yes")

    s = Settings.from_env()

    assert s.ai_api_key == "legacy-key"
    assert s.ai_model == DEFAULT_AI_MODEL
    assert s.storage_path == tmp_path / "storage.json"
    assert s.storage_key == "classSync_tasks"
    assert s.ai_timeout_seconds == 60.0
    assert s.offline_ai is True
