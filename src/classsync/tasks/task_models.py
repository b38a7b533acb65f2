# src/classsync/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import Any


class Priority(StrEnum):
    """Closed priority set; the string values are the persisted/wire form."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def parse(cls, raw: Any) -> Priority:
        """Strict parse (case-insensitive). Raises ValueError for anything else."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            raise ValueError(f"priority must be a string, got {type(raw).__name__}")
        wanted = raw.strip().lower()
        for p in cls:
            if p.value.lower() == wanted:
                return p
        raise ValueError(f"unknown priority: {raw!r}")

    @classmethod
    def from_db(cls, raw: Any) -> Priority:
        """Lenient parse for persisted data: unknown values read as Medium."""
        try:
            return cls.parse(raw)
        except ValueError:
            return cls.MEDIUM


def parse_deadline(raw: Any) -> date:
    """
    Parse a deadline into a calendar date.

    Accepts a date, "YYYY-MM-DD", or a full ISO timestamp (older data stored
    "2024-05-01T09:30:00.000Z"); only the date part is kept.
    """
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str):
        raise ValueError(f"deadline must be a string, got {type(raw).__name__}")
    s = raw.strip()
    if len(s) < 10:
        raise ValueError(f"invalid deadline: {raw!r}")
    return date.fromisoformat(s[:10])


@dataclass(slots=True)
class Task:
    id: str
    title: str
    teacher: str
    deadline: date
    description: str
    priority: Priority
    completed: bool
    created_at: int  # epoch milliseconds

    image_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "teacher": self.teacher,
            "deadline": self.deadline.isoformat(),
            "description": self.description,
            "priority": self.priority.value,
            "completed": self.completed,
            "createdAt": self.created_at,
        }
        if self.image_url:
            out["imageUrl"] = self.image_url
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task:
        """
        Build a Task from a persisted record.

        Optional fields tolerate absence; required ones (id, title, teacher,
        deadline) raise ValueError when missing or invalid.
        """
        task_id = raw.get("id")
        if task_id is None or str(task_id).strip() == "":
            raise ValueError("task record has no id")

        title = str(raw.get("title") or "").strip()
        teacher = str(raw.get("teacher") or "").strip()
        if not title:
            raise ValueError(f"task {task_id!r} has an empty title")
        if not teacher:
            raise ValueError(f"task {task_id!r} has an empty teacher")

        image_url = raw.get("imageUrl")
        created_at = raw.get("createdAt")

        return cls(
            id=str(task_id),
            title=title,
            teacher=teacher,
            deadline=parse_deadline(raw.get("deadline")),
            description=str(raw.get("description") or ""),
            priority=Priority.from_db(raw.get("priority")),
            completed=raw.get("completed") is True,
            created_at=int(created_at) if isinstance(created_at, (int, float)) else 0,
            image_url=str(image_url) if image_url else None,
        )


@dataclass(frozen=True, slots=True)
class TaskDraft:
    """Validated field values ready for TaskStore.create()."""

    title: str
    teacher: str
    deadline: date
    description: str = ""
    priority: Priority = Priority.MEDIUM
    image_url: str | None = None


@dataclass(frozen=True, slots=True)
class ExtractedTaskData:
    """
    Structured fields returned by an extractor.

    deadline is "" when the source gave no date, otherwise "YYYY-MM-DD".
    Never persisted; merged into a DraftForm.
    """

    title: str
    teacher: str
    deadline: str
    description: str
    priority: Priority
