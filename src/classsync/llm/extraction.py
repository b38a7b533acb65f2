# src/classsync/llm/extraction.py

"""
Request/response contract for AI auto-fill.

Everything here is pure: the output schema, the fixed system instruction,
building the chat messages, and validating the reply. llm/client.py only
moves bytes.
"""

from __future__ import annotations

import base64
import binascii
import json
import mimetypes
import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

from ..core.errors import ExtractionFailure
from ..tasks.task_models import ExtractedTaskData, Priority

DEFAULT_IMAGE_MIME = "image/jpeg"
IMAGE_ONLY_PROMPT = "Analyze the image attached"

FIELDS = ("title", "teacher", "deadline", "description", "priority")

SYSTEM_INSTRUCTION = (
    "You are a helpful student assistant. Extract assignment details accurately. "
    "If a date is missing, leave deadline empty; never guess a date. "
    "If specific details are missing, use 'Unknown'."
)

TASK_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {
            "type": "string",
            "description": "A concise title for the task or assignment.",
        },
        "teacher": {
            "type": "string",
            "description": "The name of the teacher or professor assigning the task.",
        },
        "deadline": {
            "type": "string",
            "description": "The due date in YYYY-MM-DD format, or an empty string if no date is given.",
        },
        "description": {
            "type": "string",
            "description": "A short summary of what needs to be done.",
        },
        "priority": {
            "type": "string",
            "enum": [p.value for p in Priority],
            "description": "The estimated priority based on urgency and importance.",
        },
    },
    "required": list(FIELDS),
    "additionalProperties": False,
}

RESPONSE_FORMAT: dict[str, Any] = {
    "type": "json_schema",
    "json_schema": {"name": "extracted_task", "strict": True, "schema": TASK_SCHEMA},
}

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,]*)?,(?P<data>.*)$", re.DOTALL)
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True, slots=True)
class InlineImage:
    """Base64 image payload with its declared MIME type."""

    mime_type: str
    data: str

    @classmethod
    def from_data_url(cls, value: str) -> InlineImage:
        """
        Accept "data:image/png;base64,...." or bare base64.

        Bare base64 has no declared type and is sent as image/jpeg.
        """
        value = value.strip()
        m = _DATA_URL_RE.match(value)
        if m:
            mime = m.group("mime") or DEFAULT_IMAGE_MIME
            data = m.group("data")
        else:
            mime, data = DEFAULT_IMAGE_MIME, value
        if not data:
            raise ValueError("image payload is empty")
        try:
            base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError("image payload is not valid base64") from e
        return cls(mime_type=mime, data=data)

    @classmethod
    def from_path(cls, path: str | Path) -> InlineImage:
        p = Path(path).expanduser()
        mime, _ = mimetypes.guess_type(p.name)
        if not mime or not mime.startswith("image/"):
            mime = DEFAULT_IMAGE_MIME
        return cls(mime_type=mime, data=base64.b64encode(p.read_bytes()).decode("ascii"))

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


def build_prompt(note_text: str, today: date) -> str:
    text = (
        "Analyze this input (which may be a photo of a board, a syllabus, or messy notes) "
        "and extract the task details.\n"
        f"Today's date: {today.isoformat()}."
    )
    note_text = note_text.strip()
    if note_text:
        text += f"\nInput text context: {note_text}"
    return text


def build_messages(note_text: str, image: InlineImage | None, today: date) -> list[dict[str, Any]]:
    """OpenAI-style chat messages: system instruction + one multimodal user turn."""
    content: list[dict[str, Any]] = []
    if image is not None:
        content.append({"type": "image_url", "image_url": {"url": image.to_data_url()}})
    prompt = build_prompt(note_text, today)
    if image is not None and not note_text.strip():
        prompt += f"\n{IMAGE_ONLY_PROMPT}."
    content.append({"type": "text", "text": prompt})
    return [
        {"role": "system", "content": SYSTEM_INSTRUCTION},
        {"role": "user", "content": content},
    ]


def _strip_code_fence(text: str) -> str:
    # Some OpenAI-compatible backends wrap JSON in ```json fences despite response_format.
    s = text.strip()
    if s.startswith("```"):
        s = s.split("\n", 1)[1] if "\n" in s else ""
        if s.rstrip().endswith("```"):
            s = s.rstrip()[:-3]
    return s.strip()


def _require_str(data: dict[str, Any], name: str) -> str:
    if name not in data:
        raise ExtractionFailure(f"AI reply is missing '{name}'", reason="schema")
    value = data[name]
    if not isinstance(value, str):
        raise ExtractionFailure(f"AI reply field '{name}' is not a string", reason="schema")
    return value.strip()


def _check_deadline(value: str) -> str:
    if not value:
        return ""
    if not _ISO_DATE_RE.match(value):
        raise ExtractionFailure(f"AI reply deadline is not YYYY-MM-DD: {value!r}", reason="schema")
    try:
        date.fromisoformat(value)
    except ValueError as e:
        raise ExtractionFailure(f"AI reply deadline is not a real date: {value!r}", reason="schema") from e
    return value


def parse_extraction_reply(text: str | None) -> ExtractedTaskData:
    """
    Validate the raw reply body. Any deviation from the schema is fatal;
    there is no partial result.
    """
    if not text or not text.strip():
        raise ExtractionFailure("No response from AI", reason="empty_reply")

    try:
        data = json.loads(_strip_code_fence(text))
    except ValueError as e:
        raise ExtractionFailure("AI reply is not valid JSON", reason="invalid_json") from e

    if not isinstance(data, dict):
        raise ExtractionFailure("AI reply is not a JSON object", reason="schema")

    # deadline may be omitted entirely: "no date" is a valid answer.
    raw_deadline = data.get("deadline", "")
    if raw_deadline is None:
        raw_deadline = ""
    if not isinstance(raw_deadline, str):
        raise ExtractionFailure("AI reply field 'deadline' is not a string", reason="schema")

    try:
        priority = Priority.parse(_require_str(data, "priority"))
    except ValueError as e:
        raise ExtractionFailure(f"AI reply priority is invalid: {e}", reason="schema") from e

    return ExtractedTaskData(
        title=_require_str(data, "title"),
        teacher=_require_str(data, "teacher"),
        deadline=_check_deadline(raw_deadline.strip()),
        description=_require_str(data, "description"),
        priority=priority,
    )
