"""Logging setup for the backdrop CLI and embedding applications."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from backdrop.core.config.models import LoggingConfig

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
}

# Library loggers that drown out resolver decisions at DEBUG.
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


class JsonLineFormatter(logging.Formatter):
    """One flat JSON object per record.

    ``extra`` fields (the HTTP client's ``request_id``, ``attempt``,
    ``elapsed_ms``...) become top-level keys next to ``ts``, ``level``,
    ``logger`` and ``msg``. Exceptions are rendered under ``exc``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        entry.update(
            (k, v) for k, v in vars(record).items() if k not in _RECORD_ATTRS and k[0] != "_"
        )
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(config: LoggingConfig, *, level: str | None = None) -> None:
    """Install a single root handler built from a LoggingConfig.

    Safe to call again; the previous root handlers are replaced.

    Args:
        config: Logging section of the app config
        level: Overrides ``config.level`` (the CLI's --log-level)
    """
    handler: logging.Handler
    if config.filename:
        handler = logging.FileHandler(config.filename)
    else:
        handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        JsonLineFormatter() if config.structured else logging.Formatter(config.format)
    )
    logging.basicConfig(level=(level or config.level).upper(), handlers=[handler], force=True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
