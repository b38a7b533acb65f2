# src/classsync/llm/client.py

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import date
from typing import Any

import httpx
import openai
from openai import OpenAI

from ..config import Settings, get_settings
from ..core.errors import ExtractionFailure, InvalidInput
from ..tasks.task_models import ExtractedTaskData
from .extraction import RESPONSE_FORMAT, InlineImage, build_messages, parse_extraction_reply

logger = logging.getLogger(__name__)


def _is_auth_error(exc: Exception) -> bool:
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return True
    return exc.__class__.__name__ in {"UnauthorizedError"}


def _is_rate_limit_error(exc: Exception) -> bool:
    if isinstance(exc, openai.RateLimitError):
        return True
    return exc.__class__.__name__ in {"RateLimitError", "TooManyRequestsError"}


def _is_connection_error(exc: Exception) -> bool:
    if isinstance(exc, (openai.APIConnectionError, httpx.TransportError)):
        return True
    return exc.__class__.__name__ in {"Timeout", "ConnectTimeout", "ReadTimeout", "WriteTimeout"}


def _classify(exc: Exception) -> str:
    if _is_auth_error(exc):
        return "auth"
    if _is_rate_limit_error(exc):
        return "rate_limit"
    if _is_connection_error(exc):
        return "network"
    return "service"


def friendly_llm_error_message(err: Exception) -> str:
    if isinstance(err, InvalidInput):
        return "Please enter some notes or attach an image for the AI to analyze."
    if isinstance(err, ExtractionFailure):
        if err.reason == "auth":
            return "AI auto-fill is not authorized. Check CLASSSYNC_AI_API_KEY in .env."
        if err.reason == "rate_limit":
            return "The AI service is rate-limited. Try again in a moment."
        if err.reason == "network":
            return "Could not reach the AI service. Check your connection and try again."
        if err.reason == "offline":
            return str(err)
        return "Failed to extract details. Please try again."
    msg = str(err).strip() or "AI error."
    if "AI API key is not set" in msg:
        return "AI auto-fill is not configured (missing API key). Set CLASSSYNC_AI_API_KEY in .env."
    return msg


class AIExtractionClient:
    """
    One blocking chat-completion call per extract().

    Works against any OpenAI-compatible endpoint that supports json_schema
    response formats and image_url parts (Gemini's OpenAI endpoint by default).

    IMPORTANT:
    - The SDK client is created lazily; construction only checks configuration.
    - SDK retries are disabled: a failure is reported once and the user retries.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        client: Any | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._settings = settings if settings is not None else get_settings()
        self._client = client
        self._today = today

        if self._client is None:
            api_key = getattr(self._settings, "ai_api_key", None)
            if not api_key or not str(api_key).strip():
                raise RuntimeError("AI API key is not set. Set CLASSSYNC_AI_API_KEY in your .env.")
            base_url = getattr(self._settings, "ai_base_url", "") or ""
            if not base_url.strip():
                raise RuntimeError("AI base URL is not set. Set CLASSSYNC_AI_BASE_URL in your .env.")

    @property
    def model(self) -> str:
        return str(self._settings.ai_model)

    def _get_client(self) -> Any:
        if self._client is not None:
            return self._client

        s = self._settings
        timeout = httpx.Timeout(
            connect=float(s.ai_connect_timeout_seconds),
            read=float(s.ai_timeout_seconds),
            write=10.0,
            pool=float(s.ai_connect_timeout_seconds),
        )
        self._client = OpenAI(
            base_url=str(s.ai_base_url),
            api_key=str(s.ai_api_key),
            timeout=timeout,
            max_retries=0,
        )
        return self._client

    def extract(self, note_text: str, image: InlineImage | None = None) -> ExtractedTaskData:
        """
        Extract task fields from rough notes and/or an image.

        Raises:
            InvalidInput: no text and no image (nothing is sent).
            ExtractionFailure: transport/service error or a reply that does not match the schema.
        """
        note_text = note_text or ""
        if not note_text.strip() and image is None:
            raise InvalidInput("No input provided for analysis")

        messages = build_messages(note_text, image, self._today())
        client = self._get_client()

        logger.info(
            "AI extract: model=%s text_chars=%d image=%s",
            self.model,
            len(note_text),
            image.mime_type if image is not None else None,
        )
        t0 = time.monotonic()

        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=messages,
                response_format=RESPONSE_FORMAT,
            )
        except Exception as e:
            reason = _classify(e)
            logger.warning(
                "AI extract failed: model=%s reason=%s error=%s (%.2fs)",
                self.model,
                reason,
                e.__class__.__name__,
                time.monotonic() - t0,
            )
            raise ExtractionFailure(f"AI request failed: {e}", reason=reason) from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError):
            content = None

        try:
            data = parse_extraction_reply(content)
        except ExtractionFailure as e:
            logger.warning("AI extract: unusable reply (%s): %s", e.reason, e)
            raise

        logger.info("AI extract: done model=%s (%.2fs)", self.model, time.monotonic() - t0)
        return data
