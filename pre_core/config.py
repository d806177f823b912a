"""
pre_core.config
---------------
Runtime settings resolved from an explicit dict, then the environment,
then defaults. The resolved value is frozen; the process-wide copy is
loaded once on first use.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import logging
import os

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_MAX_MESSAGE_SIZE = 16 * 1024 * 1024


@dataclass(frozen=True)
class Settings:
    log_level: int = logging.INFO
    log_file: Optional[str] = None
    max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE


def _parse_level(value) -> int:
    if isinstance(value, int):
        return value
    level = logging.getLevelName(str(value).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {value}")
    return level


def load_settings(config: dict | None = None) -> Settings:
    """
    Resolve settings.

    Keys / env vars:
        log_level         PRE_CORE_LOG_LEVEL         (default INFO)
        log_file          PRE_CORE_LOG_FILE          (default: stdout only)
        max_message_size  PRE_CORE_MAX_MESSAGE_SIZE  (default 16 MiB)
    """
    config = config or {}

    level = config.get("log_level") or os.getenv("PRE_CORE_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    log_file = config.get("log_file") or os.getenv("PRE_CORE_LOG_FILE") or None

    raw_size = config.get("max_message_size")
    if raw_size is None:
        raw_size = os.getenv("PRE_CORE_MAX_MESSAGE_SIZE")
    if raw_size is None:
        max_size = DEFAULT_MAX_MESSAGE_SIZE
    else:
        try:
            max_size = int(raw_size)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid max_message_size: {raw_size!r}") from None
        if max_size <= 0:
            raise ValueError(f"max_message_size must be positive, got {max_size}")

    return Settings(
        log_level=_parse_level(level),
        log_file=log_file,
        max_message_size=max_size,
    )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    # test hook: forces the next get_settings() to re-read the environment
    global _settings
    _settings = None
