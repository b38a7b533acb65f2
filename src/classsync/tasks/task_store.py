# src/classsync/tasks/task_store.py

from __future__ import annotations

import json
import logging
import time
import uuid
import warnings
from collections.abc import Callable
from dataclasses import replace
from datetime import date, timedelta

from ..config import DEFAULT_STORAGE_KEY
from ..core.errors import PersistenceWarning, ValidationError
from ..core.ports import BlobStore
from .task_models import Priority, Task, TaskDraft

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


def seed_tasks(today: date, now_ms: int) -> list[Task]:
    """Starter collection shown on first run (no persisted state yet)."""
    return [
        Task(
            id="1",
            title="Physics Lab Report",
            teacher="Mr. Heisenberg",
            deadline=today + timedelta(days=2),
            description="Complete the write-up for the projectile motion experiment. Include all graphs.",
            priority=Priority.HIGH,
            completed=False,
            created_at=now_ms,
        ),
        Task(
            id="2",
            title="History Essay Draft",
            teacher="Ms. Antony",
            deadline=today + timedelta(days=5),
            description="First draft about the Industrial Revolution impact on urbanization.",
            priority=Priority.MEDIUM,
            completed=True,
            created_at=now_ms - 100_000,
        ),
    ]


class TaskStore:
    """
    The single task collection plus its persisted copy.

    Storage model:
    - the whole collection is one JSON array under one blob-store key
    - it is rewritten after every mutation and read whole by load()
    - newest tasks are stored first; display order is computed by task_query

    A failed write never rolls back memory: it is logged, reported via
    warnings.warn(PersistenceWarning) and kept in last_persist_error.
    """

    def __init__(
        self,
        blob_store: BlobStore,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        clock: Callable[[], float] = time.time,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._blob_store = blob_store
        self._key = key
        self._clock = clock
        self._id_factory = id_factory
        self._tasks: list[Task] = []
        self.last_persist_error: Exception | None = None

    # ---- low-level helpers ----

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _today(self) -> date:
        return date.fromtimestamp(self._clock())

    def _decode(self, raw: str) -> list[Task] | None:
        """Parse the persisted blob. None means "unusable, fall back to seed"."""
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Persisted tasks are not valid JSON; using seed tasks.")
            return None
        if not isinstance(data, list):
            logger.warning("Persisted tasks are not a JSON array; using seed tasks.")
            return None

        out: list[Task] = []
        seen: set[str] = set()
        for i, item in enumerate(data):
            if not isinstance(item, dict):
                logger.warning("Skipping persisted task #%d: not an object", i)
                continue
            try:
                task = Task.from_dict(item)
            except (TypeError, ValueError) as e:
                logger.warning("Skipping persisted task #%d: %s", i, e)
                continue
            if task.id in seen:
                logger.warning("Skipping persisted task #%d: duplicate id %s", i, task.id)
                continue
            seen.add(task.id)
            out.append(task)
        return out

    def _persist(self) -> bool:
        payload = json.dumps([t.to_dict() for t in self._tasks], ensure_ascii=False)
        try:
            self._blob_store.write(self._key, payload)
        except (OSError, ValueError) as e:
            # ValueError covers text the encoder rejects (lone surrogates).
            self.last_persist_error = e
            logger.warning("Failed to persist %d tasks (key=%s): %s", len(self._tasks), self._key, e)
            warnings.warn(
                PersistenceWarning(f"Could not save tasks: {e}. Changes are kept for this session."),
                stacklevel=3,
            )
            return False
        self.last_persist_error = None
        return True

    def _index_of(self, task_id: str) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    # ---- public API ----

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    def count_tasks(self) -> int:
        return len(self._tasks)

    def load(self) -> list[Task]:
        """
        Replace the in-memory collection with the persisted one.

        Missing or unusable persisted data yields the seed collection.
        """
        try:
            raw = self._blob_store.read(self._key)
        except OSError:
            logger.exception("Failed to read persisted tasks (key=%s).", self._key)
            raw = None

        tasks = self._decode(raw) if raw is not None else None
        if tasks is None:
            tasks = seed_tasks(self._today(), self._now_ms())
            logger.info("TaskStore seeded with %d starter tasks", len(tasks))
        else:
            logger.info("TaskStore loaded %d tasks (key=%s)", len(tasks), self._key)

        self._tasks = tasks
        return self.tasks

    def get(self, task_id: str) -> Task | None:
        i = self._index_of(task_id)
        return self._tasks[i] if i is not None else None

    def find_by_prefix(self, prefix: str) -> list[Task]:
        """Tasks whose id starts with prefix (console UI shows shortened ids)."""
        prefix = prefix.strip()
        if not prefix:
            return []
        exact = self.get(prefix)
        if exact is not None:
            return [exact]
        return [t for t in self._tasks if t.id.startswith(prefix)]

    def create(self, draft: TaskDraft) -> Task:
        title = draft.title.strip()
        teacher = draft.teacher.strip()
        if not title:
            raise ValidationError("title is required", field="title")
        if not teacher:
            raise ValidationError("teacher is required", field="teacher")

        task = Task(
            id=self._id_factory(),
            title=title,
            teacher=teacher,
            deadline=draft.deadline,
            description=draft.description,
            priority=draft.priority,
            completed=False,
            created_at=self._now_ms(),
            image_url=draft.image_url or None,
        )
        self._tasks.insert(0, task)
        logger.debug("Task created id=%s deadline=%s priority=%s", task.id, task.deadline, task.priority)
        self._persist()
        return task

    def toggle_complete(self, task_id: str) -> None:
        i = self._index_of(task_id)
        if i is None:
            logger.debug("toggle_complete: unknown id=%s", task_id)
            return
        t = self._tasks[i]
        self._tasks[i] = replace(t, completed=not t.completed)
        logger.debug("Task id=%s completed=%s", task_id, not t.completed)
        self._persist()

    def delete(self, task_id: str) -> None:
        i = self._index_of(task_id)
        if i is None:
            logger.debug("delete: unknown id=%s", task_id)
            return
        del self._tasks[i]
        logger.debug("Task deleted id=%s", task_id)
        self._persist()
