# tests/test_extraction_client.py

from __future__ import annotations

import json
from datetime import date
from types import SimpleNamespace

import httpx
import openai
import pytest

from classsync.core.errors import ExtractionFailure, InvalidInput
from classsync.llm.client import AIExtractionClient, friendly_llm_error_message
from classsync.llm.extraction import IMAGE_ONLY_PROMPT, SYSTEM_INSTRUCTION, InlineImage
from classsync.tasks.task_models import ExtractedTaskData, Priority

from .fakes import FakeOpenAIClient

GOOD_REPLY = {
    "title": "Lab Report",
    "teacher": "Mr. X",
    "deadline": "2024-05-01",
    "description": "...",
    "priority": "High",
}


def _client(settings: SimpleNamespace, fake: FakeOpenAIClient) -> AIExtractionClient:
    return AIExtractionClient(settings, client=fake, today=lambda: date(2024, 4, 20))


def test_empty_input_fails_before_any_request(settings: SimpleNamespace) -> None:
    fake = FakeOpenAIClient(reply=GOOD_REPLY)
    client = _client(settings, fake)

    with pytest.raises(InvalidInput):
        client.extract("", None)
    with pytest.raises(InvalidInput):
        client.extract("   \n")

    assert fake.requests == []


def test_well_formed_reply_is_returned(settings: SimpleNamespace) -> None:
    fake = FakeOpenAIClient(reply=GOOD_REPLY)

    data = _client(settings, fake).extract("rough notes")

    assert data == ExtractedTaskData(
        title="Lab Report",
        teacher="Mr. X",
        deadline="2024-05-01",
        description="...",
        priority=Priority.HIGH,
    )
    assert data.priority is Priority.HIGH


def test_request_shape(settings: SimpleNamespace) -> None:
    fake = FakeOpenAIClient(reply=GOOD_REPLY)
    image = InlineImage(mime_type="image/png", data="iVBORw0KGgo=")

    _client(settings, fake).extract("lab due friday, Mr. X", image)

    (req,) = fake.requests
    assert req["model"] == "test-model"

    system, user = req["messages"]
    assert system == {"role": "system", "content": SYSTEM_INSTRUCTION}
    assert "leave deadline empty" in SYSTEM_INSTRUCTION
    image_part, text_part = user["content"]
    assert image_part == {"type": "image_url", "image_url": {"url": "data:image/png;base64,iVBORw0KGgo="}}
    assert "lab due friday, Mr. X" in text_part["text"]
    assert "2024-04-20" in text_part["text"]

    fmt = req["response_format"]
    assert fmt["type"] == "json_schema"
    schema = fmt["json_schema"]["schema"]
    assert set(schema["properties"]) == {"title", "teacher", "deadline", "description", "priority"}
    assert schema["properties"]["priority"]["enum"] == ["High", "Medium", "Low"]
    assert schema["additionalProperties"] is False


def test_image_only_request_asks_to_analyze_image(settings: SimpleNamespace) -> None:
    fake = FakeOpenAIClient(reply=GOOD_REPLY)
    image = InlineImage(mime_type="image/jpeg", data="AAAA")

    _client(settings, fake).extract("", image)

    text_part = fake.requests[0]["messages"][1]["content"][-1]
    assert "Input text context" not in text_part["text"]
    assert IMAGE_ONLY_PROMPT in text_part["text"]


def test_missing_deadline_reads_as_empty(settings: SimpleNamespace) -> None:
    reply = {k: v for k, v in GOOD_REPLY.items() if k != "deadline"}
    data = _client(settings, FakeOpenAIClient(reply=reply)).extract("notes")
    assert data.deadline == ""


def test_fenced_json_is_accepted(settings: SimpleNamespace) -> None:
    fake = FakeOpenAIClient(reply="```json\n" + json.dumps(GOOD_REPLY) + "\n```")
    assert _client(settings, fake).extract("notes").title == "Lab Report"


@pytest.mark.parametrize(
    ("reply", "reason"),
    [
        (None, "empty_reply"),
        ("", "empty_reply"),
        ("Sure! Here is your task: Lab Report", "invalid_json"),
        ("[1, 2, 3]", "schema"),
        ({k: v for k, v in GOOD_REPLY.items() if k != "priority"}, "schema"),
        ({**GOOD_REPLY, "priority": "Urgent"}, "schema"),
        ({**GOOD_REPLY, "title": 42}, "schema"),
        ({**GOOD_REPLY, "deadline": "May 1st"}, "schema"),
        ({**GOOD_REPLY, "deadline": "2024-02-30"}, "schema"),
    ],
)
def test_malformed_reply_fails_without_partial_result(settings: SimpleNamespace, reply, reason: str) -> None:
    client = _client(settings, FakeOpenAIClient(reply=reply))
    with pytest.raises(ExtractionFailure) as exc:
        client.extract("rough notes")
    assert exc.value.reason == reason


def _api_error(cls, status: int):
    request = httpx.Request("POST", "https://example.invalid/v1/chat/completions")
    response = httpx.Response(status, request=request)
    return cls("boom", response=response, body=None)


@pytest.mark.parametrize(
    ("error", "reason"),
    [
        (lambda: _api_error(openai.AuthenticationError, 401), "auth"),
        (lambda: _api_error(openai.RateLimitError, 429), "rate_limit"),
        (lambda: openai.APIConnectionError(request=httpx.Request("POST", "https://example.invalid")), "network"),
        (lambda: _api_error(openai.InternalServerError, 500), "service"),
    ],
)
def test_transport_errors_are_wrapped(settings: SimpleNamespace, error, reason: str) -> None:
    original = error()
    client = _client(settings, FakeOpenAIClient(error=original))

    with pytest.raises(ExtractionFailure) as exc:
        client.extract("rough notes")

    assert exc.value.reason == reason
    assert exc.value.__cause__ is original


def test_missing_api_key_is_a_configuration_error(settings: SimpleNamespace) -> None:
    with pytest.raises(RuntimeError, match="API key"):
        AIExtractionClient(settings)


def test_friendly_messages() -> None:
    assert "notes" in friendly_llm_error_message(InvalidInput("x"))
    assert "try again" in friendly_llm_error_message(ExtractionFailure("x", reason="schema"))
    assert "CLASSSYNC_AI_API_KEY" in friendly_llm_error_message(ExtractionFailure("x", reason="auth"))


def test_inline_image_from_data_url_and_path(tmp_path) -> None:
    img = InlineImage.from_data_url("data:image/png;base64,iVBORw0KGgo=")
    assert (img.mime_type, img.data) == ("image/png", "iVBORw0KGgo=")

    bare = InlineImage.from_data_url("iVBORw0KGgo=")
    assert bare.mime_type == "image/jpeg"

    with pytest.raises(ValueError):
        InlineImage.from_data_url("data:image/png;base64,")
    with pytest.raises(ValueError):
        InlineImage.from_data_url("not base64 at all!")

    p = tmp_path / "board.png"
    p.write_bytes(b"\x89PNG\r\n")
    from_file = InlineImage.from_path(p)
    assert from_file.mime_type == "image/png"
    assert from_file.to_data_url().startswith("data:image/png;base64,")
