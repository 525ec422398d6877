"""
Log formatting for AI Bridge.

Library modules only call logging.getLogger(__name__) and attach context
through `extra=` (provider, model, operation, duration_ms and so on).
Applications pick an output shape once at startup:

    from aibridge.observability.logging_config import configure_logging

    configure_logging()              # AIBRIDGE_ENV, default "development"
    configure_logging("production")  # one JSON object per line on stdout

Anything passed in `extra` is carried through by both formatters, so a
facade can add a field without touching this module.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Optional

ENV_VAR = "AIBRIDGE_ENV"

# Attributes every LogRecord carries; everything else came from `extra`.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}

# Loggers from provider SDKs that are chatty at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "anthropic")


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
    """Return the fields attached to a record via `extra`, in call order."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


def _jsonable(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record, for log shippers.

        {"timestamp": "...", "level": "INFO", "logger": "aibridge.services.chat",
         "message": "chat_completed", "provider": "OpenAI", "duration_ms": 812.4}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update({k: _jsonable(v) for k, v in record_extras(record).items()})

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class DevFormatter(logging.Formatter):
    """
    Single-line colored output for a terminal.

    Format: [HH:MM:SS] LEVEL logger: event [provider=.. model=.. key=value]

    provider, model and operation lead so related lines line up; the other
    extras follow in the order they were logged.
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[41m",
    }
    RESET = "\033[0m"

    LEADING_KEYS = ("provider", "model", "operation")

    def _context(self, record: logging.LogRecord) -> str:
        extras = record_extras(record)
        ordered = [k for k in self.LEADING_KEYS if k in extras]
        ordered += [k for k in extras if k not in self.LEADING_KEYS]

        pairs = []
        for key in ordered:
            value = extras[key]
            if value is None:
                continue
            text = str(value)
            pairs.append(f"{key}={text!r}" if " " in text else f"{key}={text}")
        return f" [{' '.join(pairs)}]" if pairs else ""

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        line = (
            f"[{self.formatTime(record, '%H:%M:%S')}] "
            f"{color}{record.levelname:<8}{self.RESET} "
            f"{record.name}: {record.getMessage()}{self._context(record)}"
        )
        if record.exc_info and record.exc_info[1]:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(env: Optional[str] = None, level: int = logging.INFO) -> None:
    """
    Install a single root handler, replacing any existing ones.

    "production" logs JSON to stdout; any other environment logs colored
    text to stderr. SDK transport loggers are held at WARNING.
    """
    env = (env or os.environ.get(ENV_VAR, "development")).lower().strip()

    if env == "production":
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(DevFormatter())

    logging.basicConfig(level=level, handlers=[handler], force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
