# src/classsync/tasks/drafts.py

"""
Form-side draft handling: field validation before TaskStore.create() and
merging AI auto-fill results into the draft.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import date

from ..core.errors import ExtractionInProgress, InvalidInput, ValidationError
from ..core.ports import TaskExtractor
from ..llm.extraction import InlineImage
from .task_models import ExtractedTaskData, Priority, TaskDraft, parse_deadline

logger = logging.getLogger(__name__)


@dataclass
class DraftForm:
    """
    Mutable draft for one "new task" form.

    Fields are kept as the user typed them (deadline as a string); to_draft()
    turns them into a validated TaskDraft.
    """

    title: str = ""
    teacher: str = ""
    deadline: str = ""
    description: str = ""
    priority: Priority = Priority.MEDIUM
    image_url: str | None = None

    loading: bool = field(default=False, init=False)
    _inflight: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    def attach_image(self, image: InlineImage) -> None:
        self.image_url = image.to_data_url()

    def image(self) -> InlineImage | None:
        """Inline payload for the attached image; external URLs are not sent."""
        if not self.image_url or not self.image_url.startswith("data:"):
            return None
        try:
            return InlineImage.from_data_url(self.image_url)
        except ValueError:
            logger.warning("Attached image is not a valid data URL; sending text only.")
            return None

    def merge_extracted(self, extracted: ExtractedTaskData) -> list[str]:
        """
        Typed partial update from an extraction result.

        Each field is checked against its expected type before it replaces the
        draft value; an empty deadline keeps whatever the draft already has.
        Returns the names of the fields that were updated.
        """
        updated: list[str] = []
        for name in ("title", "teacher", "description"):
            value = getattr(extracted, name)
            if isinstance(value, str):
                setattr(self, name, value)
                updated.append(name)
            else:
                logger.warning("Ignoring extracted %s of type %s", name, type(value).__name__)

        if isinstance(extracted.priority, Priority):
            self.priority = extracted.priority
            updated.append("priority")

        if isinstance(extracted.deadline, str) and extracted.deadline:
            try:
                parse_deadline(extracted.deadline)
            except ValueError:
                logger.warning("Ignoring extracted deadline %r", extracted.deadline)
            else:
                self.deadline = extracted.deadline
                updated.append("deadline")
        return updated

    def autofill(self, extractor: TaskExtractor) -> ExtractedTaskData:
        """
        Run AI auto-fill over the description and/or attached image.

        At most one request per form is in flight; a second call while one
        is pending raises ExtractionInProgress. On failure nothing is merged.
        """
        image = self.image()
        if not self.description.strip() and image is None:
            raise InvalidInput("Please enter some messy notes or attach an image for the AI to analyze.")

        if not self._inflight.acquire(blocking=False):
            raise ExtractionInProgress("An auto-fill request is already running for this form.")
        self.loading = True
        try:
            extracted = extractor.extract(self.description, image)
        finally:
            self.loading = False
            self._inflight.release()

        updated = self.merge_extracted(extracted)
        logger.debug("Auto-fill merged fields=%s", updated)
        return extracted

    def to_draft(self, today: date) -> TaskDraft:
        title = self.title.strip()
        teacher = self.teacher.strip()
        if not title:
            raise ValidationError("Title is required.", field="title")
        if not teacher:
            raise ValidationError("Teacher is required.", field="teacher")

        if self.deadline.strip():
            try:
                deadline = parse_deadline(self.deadline)
            except ValueError as e:
                raise ValidationError(
                    f"Deadline must be a date (YYYY-MM-DD): {self.deadline!r}", field="deadline"
                ) from e
        else:
            deadline = today

        return TaskDraft(
            title=title,
            teacher=teacher,
            deadline=deadline,
            description=self.description.strip(),
            priority=self.priority,
            image_url=self.image_url or None,
        )
