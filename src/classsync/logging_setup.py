# src/classsync/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "classsync.log"
LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

APP_LOGGER_PREFIX = "classsync."
WARNINGS_LOGGER = "py.warnings"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Decide what reaches the REPL's stderr.

    Task store, extraction and command logs pass through. Save failures come
    in as PersistenceWarning via py.warnings and are shown. The AI SDK and its
    HTTP stack only get through on ERROR, so a slow auto-fill does not flood
    the prompt with connection chatter.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(APP_LOGGER_PREFIX):
            return True
        if record.name == WARNINGS_LOGGER:
            return record.levelno >= logging.WARNING
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/classsync",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Route ClassSync logs to the console (filtered) and to <log_dir>/classsync.log (everything).

    Meant to run once from main() before the store is loaded. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    # Re-running main() in the same process must not double every line.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
