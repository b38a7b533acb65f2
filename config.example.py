# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets; keep the AI key in .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "CLASSSYNC_APP_NAME": "App display name (default: ClassSync).",
    "CLASSSYNC_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Paths (gitignored)
    "CLASSSYNC_DATA_DIR": "Local data directory for storage and logs (default: .local/classsync).",
    "CLASSSYNC_STORAGE_PATH": "Key-value storage file (default: <data_dir>/storage.json).",
    "CLASSSYNC_STORAGE_KEY": "Key holding the task list inside the storage file (default: classSync_tasks).",
    # AI auto-fill
    "CLASSSYNC_AI_API_KEY": "AI service key; GEMINI_API_KEY or API_KEY are accepted as fallbacks.",
    "CLASSSYNC_AI_BASE_URL": (
        "OpenAI-compatible endpoint "
        "(default: https://generativelanguage.googleapis.com/v1beta/openai/)."
    ),
    "CLASSSYNC_AI_MODEL": "Model used for extraction (default: gemini-2.5-flash).",
    "CLASSSYNC_AI_TIMEOUT_SECONDS": "Read timeout for one extraction call (default: 60).",
    "CLASSSYNC_AI_CONNECT_TIMEOUT_SECONDS": "Connect timeout (default: 5).",
    "CLASSSYNC_OFFLINE_AI": "Force offline heuristics even when a key is set (true/false).",
}
