# src/classsync/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage and AI providers swappable and makes testing easier.
"""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..llm.extraction import InlineImage
    from ..tasks.task_models import ExtractedTaskData


class BlobStore(Protocol):
    """
    Key-value slots holding opaque strings (localStorage-style).

    read() returns None when the key was never written.
    write() replaces the value wholesale and may raise OSError.
    """

    def read(self, key: str) -> str | None: ...
    def write(self, key: str, value: str) -> None: ...


class TaskExtractor(Protocol):
    """Turns rough notes and/or an image into structured task fields."""

    def extract(
            self,
            note_text: str,
            image: InlineImage | None = None,
    ) -> ExtractedTaskData: ...
