"""Logging setup: one stdout handler, JSON lines, idempotent."""

from __future__ import annotations

import json
import logging
import sys

_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}

_LOGGING_INITIALIZED = False


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        data = {
            "time": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Attach extras if present
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            try:
                json.dumps(value)
                data[key] = value
            except (TypeError, ValueError):
                data[key] = str(value)
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


def configure_logging(level: str = "INFO") -> None:
    """Install the JSON handler on the ``daas`` logger tree.

    Safe to call more than once; only the first call takes effect.
    """
    global _LOGGING_INITIALIZED
    if _LOGGING_INITIALIZED:
        return

    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(JsonFormatter())

    root = logging.getLogger("daas")
    root.setLevel(log_level)
    root.addHandler(handler)
    # Events are written once, here; not again by the root logger
    root.propagate = False

    # Reduce noisy libraries
    for noisy in ("httpx", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(max(log_level, logging.WARNING))

    _LOGGING_INITIALIZED = True


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name or "daas")
