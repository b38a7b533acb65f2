# src/classsync/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time (the AI credential is optional).
- Every path lives under a local, gitignored data directory by default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "CLASSSYNC"

DEFAULT_AI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_AI_MODEL = "gemini-2.5-flash"
DEFAULT_STORAGE_KEY = "classSync_tasks"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local storage ----
    data_dir: Path
    storage_path: Path
    storage_key: str

    # ---- AI auto-fill ----
    ai_api_key: Optional[str]
    ai_base_url: str
    ai_model: str
    ai_timeout_seconds: float
    ai_connect_timeout_seconds: float
    offline_ai: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "ClassSync") or "ClassSync"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/classsync"))
        storage_path = _env_path(_k("STORAGE_PATH"), data_dir / "storage.json")
        storage_key = _env(_k("STORAGE_KEY"), DEFAULT_STORAGE_KEY).strip() or DEFAULT_STORAGE_KEY

        # The browser build read API_KEY; accept it (and GEMINI_API_KEY) as fallbacks.
        ai_api_key = _first_env(_k("AI_API_KEY"), "GEMINI_API_KEY", "API_KEY", default=None)
        ai_base_url = _env(_k("AI_BASE_URL"), DEFAULT_AI_BASE_URL)
        ai_model = _env(_k("AI_MODEL"), DEFAULT_AI_MODEL).strip() or DEFAULT_AI_MODEL

        ai_timeout_seconds = _env_float(_k("AI_TIMEOUT_SECONDS"), 60.0)
        ai_connect_timeout_seconds = _env_float(_k("AI_CONNECT_TIMEOUT_SECONDS"), 5.0)

        offline_ai = _env_bool(_k("OFFLINE_AI"), False)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            storage_path=storage_path,
            storage_key=storage_key,
            ai_api_key=ai_api_key,
            ai_base_url=ai_base_url,
            ai_model=ai_model,
            ai_timeout_seconds=ai_timeout_seconds,
            ai_connect_timeout_seconds=ai_connect_timeout_seconds,
            offline_ai=offline_ai,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
