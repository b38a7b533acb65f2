# src/classsync/llm/offline.py

from __future__ import annotations

import re
from datetime import date

from ..core.errors import ExtractionFailure, InvalidInput
from ..tasks.task_models import ExtractedTaskData, Priority
from .extraction import InlineImage

_TEACHER_RE = re.compile(r"\b(?:Mr|Mrs|Ms|Dr|Prof)\.?\s+[A-Z][\w'-]+")
_DATE_RE = re.compile(r"\b\d{4}-\d{2}-\d{2}\b")
_HIGH_WORDS = ("urgent", "asap", "exam", "test", "tomorrow", "important", "due today")
_LOW_WORDS = ("optional", "whenever", "extra credit", "no rush")

TITLE_MAX_CHARS = 80


def _first_valid_date(text: str) -> str:
    for m in _DATE_RE.finditer(text):
        try:
            date.fromisoformat(m.group(0))
        except ValueError:
            continue
        return m.group(0)
    return ""


def _guess_priority(text: str) -> Priority:
    low = text.lower()
    if any(w in low for w in _HIGH_WORDS):
        return Priority.HIGH
    if any(w in low for w in _LOW_WORDS):
        return Priority.LOW
    return Priority.MEDIUM


class OfflineExtractionClient:
    """
    Offline deterministic extractor used when no AI credential is configured.

    Heuristics only: first line -> title, "Mr./Ms./Dr. Name" -> teacher,
    first YYYY-MM-DD -> deadline, keywords -> priority. Images cannot be read.
    """

    def extract(self, note_text: str, image: InlineImage | None = None) -> ExtractedTaskData:
        note_text = note_text or ""
        if not note_text.strip():
            if image is None:
                raise InvalidInput("No input provided for analysis")
            raise ExtractionFailure(
                "Offline mode cannot read images. Set CLASSSYNC_AI_API_KEY to enable AI auto-fill.",
                reason="offline",
            )

        lines = [ln.strip() for ln in note_text.splitlines() if ln.strip()]
        title = lines[0][:TITLE_MAX_CHARS].rstrip() if lines else "Unknown"

        m = _TEACHER_RE.search(note_text)
        teacher = m.group(0) if m else "Unknown"

        return ExtractedTaskData(
            title=title,
            teacher=teacher,
            deadline=_first_valid_date(note_text),
            description=" ".join(note_text.split()),
            priority=_guess_priority(note_text),
        )
