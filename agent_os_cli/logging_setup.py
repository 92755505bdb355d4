"""
App-layer JSONL logging bootstrap.
Initializes a single canonical JSONL sink early in CLI startup.
"""

import json
import logging
import os
from datetime import UTC
from datetime import datetime
from pathlib import Path

from rich.logging import RichHandler

from .console import error_console

LOG_PATH_ENV = "AGENT_OS_LOG_PATH"
LOG_LEVEL_ENV = "AGENT_OS_LOG_LEVEL"
DEFAULT_PATH = "./agent-os.log.jsonl"
DEFAULT_LEVEL = "INFO"

# LogRecord attributes that are not user extras
_RESERVED_ATTRS = frozenset(
    {
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "name",
    }
)


class JsonlHandler(logging.Handler):
    def __init__(self, path: str | Path):
        super().__init__()
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def format_record(self, record: logging.LogRecord) -> dict:
        base = {
            "ts": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "lvl": record.levelname,
            "schema": {"name": "agent-os.log", "ver": "1.0.0"},
            "logger": record.name,
            "event": getattr(record, "event", None),
            "message": record.getMessage(),
        }
        if isinstance(record.msg, dict):
            base.update(record.msg)
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            base.setdefault(key, value)
        return base

    def emit(self, record: logging.LogRecord) -> None:
        try:
            payload = self.format_record(record)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(payload, ensure_ascii=False, default=str) + "\n")
        except Exception:
            self.handleError(record)


def init_json_logging(path: str | None = None, level: str | None = None, verbose: bool = False) -> None:
    """Install the JSONL sink on the root logger.

    Args:
        path: Log file (defaults to ``AGENT_OS_LOG_PATH``)
        level: Level name (defaults to ``AGENT_OS_LOG_LEVEL``)
        verbose: Log at DEBUG and also echo records to stderr
    """
    path = path or os.environ.get(LOG_PATH_ENV) or DEFAULT_PATH
    level = "DEBUG" if verbose else (level or os.environ.get(LOG_LEVEL_ENV) or DEFAULT_LEVEL).upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))

    # Remove existing handlers of the same kind to avoid duplicates
    for h in list(root.handlers):
        if isinstance(h, JsonlHandler | RichHandler):
            root.removeHandler(h)
    root.addHandler(JsonlHandler(path))

    if verbose:
        root.addHandler(RichHandler(console=error_console, show_path=False, markup=False))
