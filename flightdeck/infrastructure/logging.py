"""
Centralized Logging

Architectural Intent:
- Provides human-readable or structured JSON logging for all components
- Every record carries the identity of the host it concerns, so output of
  hosts running concurrently stays attributable
- TransportLogger gives transports the categories an operator reads:
  commands ($), command output (>) and outcomes (●)
"""

import json
import logging
import sys
from datetime import datetime, UTC
from typing import Any, MutableMapping

ROOT_LOGGER = "flightdeck"

_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[35m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
}
_MARKER_COLORS = {
    "$": "\033[34m",
    ">": "\033[90m",
    "●": "\033[32m",
}
_GRAY = "\033[90m"
_RESET = "\033[0m"


class _RecordDefaults(logging.Filter):
    """Guarantees `host` and `marker` exist on every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "host"):
            record.host = ""
        if not hasattr(record, "marker"):
            record.marker = ""
        return True


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "host": getattr(record, "host", ""),
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


class HumanFormatter(logging.Formatter):
    """`<host> <marker> <message>`, optionally colored by level and marker."""

    def __init__(self, color: bool = True) -> None:
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        host = getattr(record, "host", "")
        marker = getattr(record, "marker", "")
        message = record.getMessage().rstrip()
        if record.exc_info and record.exc_info[1]:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        if self.color:
            if record.levelno >= logging.WARNING or marker not in _MARKER_COLORS:
                tint = _COLORS.get(record.levelno, "")
            else:
                tint = _MARKER_COLORS[marker]
            if marker == ">":
                marker = f"{tint}{marker}{_RESET}"
            else:
                message = f"{tint}{message}{_RESET}"
            host = f"{_GRAY}{host}{_RESET}" if host else host

        parts = [p for p in (host, marker, message) if p]
        return " ".join(parts)


class TransportLogger(logging.LoggerAdapter):
    """Logger bound to one host identity."""

    def __init__(self, host: str, debug: bool = False, name: str = ROOT_LOGGER):
        super().__init__(logging.getLogger(name), {"host": host})
        self.debug_enabled = debug

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs

    def _emit(self, level: int, marker: str, message: str) -> None:
        self.log(level, "%s", message, extra={"marker": marker})

    def user(self, message: str) -> None:
        self._emit(logging.INFO, "", message)

    def command(self, message: str) -> None:
        self._emit(logging.INFO, "$", message)

    def stdout(self, message: str) -> None:
        self._emit(logging.INFO, ">", message)

    def stdwarn(self, message: str) -> None:
        self._emit(logging.WARNING, ">", message)

    def stderr(self, message: str) -> None:
        self._emit(logging.ERROR, ">", message)

    def success(self, message: str) -> None:
        self._emit(logging.INFO, "●", message)

    def warn(self, message: str) -> None:
        self._emit(logging.WARNING, "●", message)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        if args or kwargs:
            super().error(message, *args, **kwargs)
        else:
            self._emit(logging.ERROR, "●", message)

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        if self.debug_enabled:
            super().debug(message, *args, **kwargs)


def configure_logging(
    level: int = logging.INFO,
    json_format: bool = False,
    color: bool = True,
) -> None:
    """Configure logging for the flightdeck application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, etc.)
        json_format: If True, use JSON structured output. Otherwise human-readable.
        color: Colorize human-readable output with ANSI escapes.
    """
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)

    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(_RecordDefaults())

    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(HumanFormatter(color=color))

    root.addHandler(handler)
