"""Logging configuration for badgeflow.

Both entry points (the HTTP service and the quickstart script) call
``setup_logging`` once at startup.  Everything goes to stdout so the
same output works in a terminal, under ``uvicorn`` and in a container.

TWO OUTPUT SHAPES
------------------
  _ConsoleFormatter - one human-readable line per record, for local runs.
    Warnings and above get a ``[file:line]`` suffix so the guard clause
    that fired is easy to find.

  _JsonFormatter - one JSON object per line (LOG_JSON=true).  Context
    fields attached to a record (request id, the LearnCard operation,
    the issuance id returned by the inbox) become top-level keys, so a
    log pipeline can filter on ``operation == "inbox_issue"`` without
    regex over the message text.
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar


# Set per request by RequestContextMiddleware; "-" outside a request.
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class _RequestIdFilter(logging.Filter):
    """Stamp the current request ID onto records that lack one.

    Installed on the HANDLER, so records from every logger pass through it.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = request_id_var.get()  # type: ignore[attr-defined]
        return True


class _ConsoleFormatter(logging.Formatter):
    """Single-line formatter: timestamp, level, logger, message."""

    _BASE_FMT = "%(asctime)s %(levelname)-8s %(name)s  %(message)s"
    _LOC_SUFFIX = "  [%(filename)s:%(lineno)d]"

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        base = super().formatTime(record, datefmt)
        # Millisecond precision goes before the UTC offset.
        return f"{base[:-5]}.{int(record.msecs):03d}{base[-5:]}"

    def format(self, record: logging.LogRecord) -> str:
        fmt = self._BASE_FMT
        if record.levelno >= logging.WARNING:
            fmt += self._LOC_SUFFIX
        self._style._fmt = fmt
        return super().format(record)


class _JsonFormatter(logging.Formatter):
    """JSON Lines formatter for machine-parsed output."""

    _CONTEXT_FIELDS = (
        "request_id",
        "method",
        "path",
        "status_code",
        "duration_ms",
        "operation",
        "issuance_id",
        "recipient_did",
    )

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in self._CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def setup_logging(level_name: str, *, json_format: bool = False) -> None:
    """Install a single stdout handler on the root logger.

    Args:
        level_name: debug/info/warning/error.  Unknown names mean INFO.
        json_format: emit JSON lines instead of console lines (LOG_JSON).
    """
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if json_format else _ConsoleFormatter())
    handler.addFilter(_RequestIdFilter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    # httpx logs every outbound request at INFO; keep that out of the way.
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error", "httpcore", "httpx"):
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
