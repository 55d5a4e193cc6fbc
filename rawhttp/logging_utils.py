"""Structured logging helpers for rawhttp."""

from __future__ import annotations

import json
import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

DEFAULT_MAX_BYTES = int(os.environ.get("LOG_MAX_BYTES", str(10 * 1024 * 1024)))
DEFAULT_BACKUP_COUNT = int(os.environ.get("LOG_BACKUP_COUNT", "5"))

SENSITIVE_HEADERS = {"cookie", "set-cookie", "authorization", "proxy-authorization"}
REDACTED = "[redacted]"


class JsonFormatter(logging.Formatter):
    """Emit logs as structured JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
        }
        event = getattr(record, "event", None)
        if event:
            payload["event"] = event
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, sort_keys=True)


class SensitiveHeaderFilter(logging.Filter):
    """Redact credential header values echoed in log messages.

    Malformed header lines are logged verbatim, so ``Authorization: Basic ...``
    would otherwise land in the logs.
    """

    HEADER_PATTERN = re.compile(
        r"\b(" + "|".join(re.escape(name) for name in sorted(SENSITIVE_HEADERS)) + r")(: )([^`\r\n]*)",
        re.IGNORECASE,
    )

    def _redact(self, value: str) -> str:
        return self.HEADER_PATTERN.sub(lambda match: f"{match.group(1)}{match.group(2)}{REDACTED}", value)

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self._redact(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(self._redact(arg) if isinstance(arg, str) else arg for arg in record.args)
        elif isinstance(record.args, dict):
            sanitized = {}
            for key, value in record.args.items():
                if isinstance(key, str) and key.lower() in SENSITIVE_HEADERS:
                    sanitized[key] = REDACTED
                else:
                    sanitized[key] = value
            record.args = sanitized
        return True


def configure_logging(
    level: int = logging.INFO,
    *,
    json_logs: bool = False,
    logfile: Optional[Path | str] = None,
) -> None:
    """Configure root logging with a rich console and optional rotating file."""

    handlers: list[logging.Handler] = []

    console_handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        markup=False,
        show_path=False,
        level=level,
    )
    console_handler.addFilter(SensitiveHeaderFilter())
    handlers.append(console_handler)

    if logfile:
        path = Path(logfile)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=DEFAULT_MAX_BYTES,
            backupCount=DEFAULT_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.addFilter(SensitiveHeaderFilter())
        if json_logs:
            file_handler.setFormatter(JsonFormatter())
        else:
            file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)


__all__ = ["configure_logging", "JsonFormatter", "SensitiveHeaderFilter"]
