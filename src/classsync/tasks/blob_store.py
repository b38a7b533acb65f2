# src/classsync/tasks/blob_store.py

"""
Key-value blob stores backing TaskStore.

JsonFileBlobStore keeps every slot in one JSON object on disk
({"<key>": "<string value>", ...}) and rewrites the whole file on each write.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class JsonFileBlobStore:
    """
    File-backed slots.

    - read() never raises for a missing or corrupt file (returns None);
      the caller decides how to fall back.
    - write() is atomic (temp file + os.replace) and raises OSError on failure.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.warning("Blob store file unreadable, ignoring: %s", self._path, exc_info=True)
            return {}
        if not isinstance(data, dict):
            logger.warning("Blob store file is not a JSON object, ignoring: %s", self._path)
            return {}
        return {k: v for k, v in data.items() if isinstance(k, str) and isinstance(v, str)}

    def read(self, key: str) -> str | None:
        return self._read_all().get(key)

    def write(self, key: str, value: str) -> None:
        slots = self._read_all()
        slots[key] = value

        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        try:
            tmp.write_text(json.dumps(slots, ensure_ascii=False, indent=2), "utf-8")
            os.replace(tmp, self._path)
        except BaseException:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise
        with contextlib.suppress(OSError):
            # Task descriptions and images are personal; keep the file private on disk.
            os.chmod(self._path, 0o600)
        logger.debug("Blob store wrote key=%s bytes=%d path=%s", key, len(value), self._path)


class InMemoryBlobStore:
    """Process-local slots (tests, throwaway sessions)."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.slots: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self.slots.get(key)

    def write(self, key: str, value: str) -> None:
        self.slots[key] = value
