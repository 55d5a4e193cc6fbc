"""Configuration helpers and .env loading for rawhttp."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Mapping, Optional

from dotenv import load_dotenv

DEFAULT_ENV_FILES: tuple[Path, ...] = (
    Path(".env"),
    Path("config/.env"),
)

TRUE_VALUES = {"1", "true", "yes", "on"}


class ConfigError(ValueError):
    """Raised when an environment setting cannot be interpreted."""


@lru_cache(maxsize=1)
def load_environment(*, extra_files: Iterable[Path] | None = None) -> dict[str, str]:
    """Load environment variables from .env files once per process."""

    candidates = list(DEFAULT_ENV_FILES)
    if extra_files:
        candidates = [*candidates, *extra_files]

    for path in candidates:
        try:
            if path.exists():
                load_dotenv(path, override=False)
        except OSError:
            continue

    return dict(os.environ)


@dataclass(frozen=True)
class Settings:
    log_level: int = logging.INFO
    log_json: bool = False
    log_file: Optional[Path] = None
    strict: bool = False


def _flag(environ: Mapping[str, str], name: str) -> bool:
    return environ.get(name, "false").strip().lower() in TRUE_VALUES


def _log_level(value: str) -> int:
    level = logging.getLevelName(value.strip().upper())
    if not isinstance(level, int):
        raise ConfigError(f"RAWHTTP_LOG_LEVEL must be a logging level name (got '{value}')")
    return level


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from ``RAWHTTP_*`` variables."""

    environ = os.environ if environ is None else environ
    log_file = environ.get("RAWHTTP_LOG_FILE")
    return Settings(
        log_level=_log_level(environ.get("RAWHTTP_LOG_LEVEL", "INFO")),
        log_json=_flag(environ, "RAWHTTP_LOG_JSON"),
        log_file=Path(log_file) if log_file else None,
        strict=_flag(environ, "RAWHTTP_STRICT"),
    )


__all__ = ["ConfigError", "DEFAULT_ENV_FILES", "Settings", "load_environment", "load_settings"]
