"""JSON logging for the pod-toolkit CLI.

``configure_logging()`` runs once per command. Records go to stderr as one
JSON object per line, so stdout only carries the command's own output.
``bind_command()`` tags every later record with the subcommand name.
"""

import json
import logging
import sys
from contextvars import ContextVar

_command_var: ContextVar[str] = ContextVar("command", default="")

# LogRecord attributes that are either rendered explicitly or not useful here
_RESERVED = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()
) | {"message", "asctime"}


def get_command() -> str:
    return _command_var.get()


def bind_command(name: str) -> None:
    """Tag all subsequent log records in this context with ``name``."""
    _command_var.set(name)


class _JsonFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger, message,
    the bound command and any ``extra=`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        command = get_command()
        if command:
            payload["command"] = command
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RESERVED and not key.startswith("_")
        )
        return json.dumps(payload, default=str)


def configure_logging(level: str = "WARNING") -> None:
    """Send all logging to stderr as JSON at ``level`` (e.g. "DEBUG")."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_JsonFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))

    # httpx logs every request at INFO
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("Logging configured", extra={"log_level": level.upper()})
