"""
Logging bootstrap for typeloader.

Registers the TRACE level used for per-accessor misses and provides the
JSONL file sink and the Rich console handler used by the CLI.
"""

import json
import logging
import os
from datetime import UTC
from datetime import datetime
from pathlib import Path

from rich.logging import RichHandler

# Below DEBUG: one entry per accessor miss
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

DEFAULT_PATH = os.environ.get("TYPELOADER_LOG_PATH", "./typeloader.log.jsonl")
DEFAULT_LEVEL = os.environ.get("TYPELOADER_LOG_LEVEL", "INFO").upper()

_RESERVED = frozenset(
    (
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
        "name",
        "taskName",
    )
)


def level_from_name(level: str | int | None, default: int = logging.INFO) -> int:
    """Translate a level name (including TRACE) to its numeric value."""
    if level is None:
        return default
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else default


class JsonlHandler(logging.Handler):
    def __init__(self, path: str | Path):
        super().__init__()
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def build_payload(self, record: logging.LogRecord) -> dict:
        base = {
            "ts": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "lvl": record.levelname,
            "schema": {"name": "typeloader.log", "ver": "1.0.0"},
            "logger": record.name,
            "event": getattr(record, "event", None),
            "message": record.getMessage(),
        }
        if record.exc_info:
            base["exc"] = logging.Formatter().formatException(record.exc_info)
        for k, v in record.__dict__.items():
            if k in _RESERVED:
                continue
            base.setdefault(k, v)
        return base

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = json.dumps(self.build_payload(record), ensure_ascii=False, default=str)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception:
            self.handleError(record)


def init_json_logging(path: str | Path | None = None, level: str | int | None = None) -> JsonlHandler:
    path = path or DEFAULT_PATH
    root = logging.getLogger()
    root.setLevel(level_from_name(level or DEFAULT_LEVEL))
    # Remove existing handlers of the same kind to avoid duplicates
    for h in list(root.handlers):
        if isinstance(h, JsonlHandler):
            root.removeHandler(h)
    handler = JsonlHandler(path)
    root.addHandler(handler)
    return handler


def init_console_logging(level: str | int | None = "WARNING") -> RichHandler:
    """Attach a Rich console handler to the ``typeloader`` logger."""
    logger = logging.getLogger("typeloader")
    logger.setLevel(level_from_name(level, logging.WARNING))
    for h in list(logger.handlers):
        if isinstance(h, RichHandler):
            logger.removeHandler(h)
    handler = RichHandler(show_path=False, rich_tracebacks=True)
    logger.addHandler(handler)
    return handler
