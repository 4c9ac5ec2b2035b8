"""
Logging setup for Fly Advisor.

Library modules only ever call ``logging.getLogger(__name__)``.  The CLI
calls ``configure_logging(config.logging, debug=config.debug)`` once, before
any recommendation run, to attach handlers to the root logger.

Console output goes to stderr: ``fly-advisor recommend --json`` and friends
print machine-readable results on stdout.

With ``json_format = true`` in the ``[logging]`` section each record is one
JSON object per line::

    {"ts": "2024-07-15T20:00:00Z", "level": "WARNING",
     "logger": "fly_advisor.recommendations.service",
     "msg": "Live weather fetch timed out after 10.0s"}

Values passed through ``extra=`` are added as top-level keys.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fly_advisor.config import LoggingConfig

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Chatty dependencies held at WARNING regardless of the configured level.
QUIET_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "asyncio")

_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record: ``ts``, ``level``, ``logger``, ``msg``."""

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "ts": stamp.strftime(TIMESTAMP_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        )
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _text_formatter() -> logging.Formatter:
    formatter = logging.Formatter(TEXT_FORMAT, datefmt=TIMESTAMP_FORMAT)
    formatter.converter = time.gmtime
    return formatter


def build_handlers(config: "LoggingConfig", level: int) -> list[logging.Handler]:
    """stderr handler plus an optional file handler, sharing one formatter."""
    formatter = JsonLineFormatter() if config.json_format else _text_formatter()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        path = Path(config.log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def configure_logging(config: "LoggingConfig", debug: bool = False) -> None:
    """Replace the root logger's handlers according to ``config``.

    Args:
        config: ``[logging]`` section of ``AppConfig``.
        debug:  Force DEBUG level (``AppConfig.debug`` / ``FLY_ADVISOR_DEBUG``).
    """
    level = logging.DEBUG if debug else logging.getLevelName(config.level)
    logging.basicConfig(level=level, handlers=build_handlers(config, level), force=True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
