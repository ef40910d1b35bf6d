"""Logging configuration helpers shared by the CLI and the proxy server."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Client libraries that log every request at INFO/DEBUG.
DEPENDENCY_LOGGERS: tuple[str, ...] = ("urllib3", "httpx", "httpcore", "openai")

_LOGGING_CONFIGURED = False


def _resolve_level(level: str | int | None) -> int:
    """Resolves an explicit level, then LOG_LEVEL, then INFO."""
    candidate: str | int | None = level
    if candidate is None:
        candidate = os.getenv("LOG_LEVEL")
    if candidate is None or candidate == "":
        return logging.INFO
    if isinstance(candidate, int):
        return candidate
    resolved = logging.getLevelName(candidate.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: str | int | None = None) -> int:
    """Configures root logging once and returns the applied level."""
    global _LOGGING_CONFIGURED
    resolved_level = _resolve_level(level)
    root_logger = logging.getLogger()
    if not _LOGGING_CONFIGURED and not root_logger.handlers:
        logging.basicConfig(format=LOG_FORMAT, level=resolved_level)
        for handler in root_logger.handlers:
            handler.setLevel(resolved_level)
    root_logger.setLevel(resolved_level)
    dependency_level = (
        resolved_level if resolved_level <= logging.DEBUG else logging.WARNING
    )
    for name in DEPENDENCY_LOGGERS:
        logging.getLogger(name).setLevel(dependency_level)
    _LOGGING_CONFIGURED = True
    return resolved_level


def get_logger(name: str) -> logging.Logger:
    """Returns a module logger, configuring logging from the environment once."""
    if not _LOGGING_CONFIGURED:
        configure_logging()
    return logging.getLogger(name)
