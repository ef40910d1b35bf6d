"""Typed application settings loaded from the process environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_REMOTE_URL = "http://localhost:3000/api/chat"


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return value.strip() if value is not None and value.strip() else default


def _env_optional_str(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "y", "on")


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class RemoteConfig:
    """Client-side settings for the optional reply proxy."""

    enabled: bool = False
    endpoint_url: str = DEFAULT_REMOTE_URL
    timeout_seconds: float = 5.0


@dataclass(frozen=True)
class ProviderConfig:
    """Language-model provider settings used by the proxy server."""

    api_key: str | None = None
    model: str = DEFAULT_MODEL
    base_url: str | None = None
    max_tokens: int = 350
    temperature: float = 0.7

    @property
    def enabled(self) -> bool:
        """Whether a provider credential is configured."""
        return bool(self.api_key)


@dataclass(frozen=True)
class RateLimitConfig:
    """Moving-window limits applied to `/api/` requests, per client address."""

    max_requests: int = 10
    window_seconds: int = 10


@dataclass(frozen=True)
class ServerConfig:
    """Proxy server bind address, assets and logging."""

    host: str = "127.0.0.1"
    port: int = 3000
    static_folder: Path = Path("static")
    session_log_file: Path | None = None
    rate_limit: RateLimitConfig = RateLimitConfig()


@dataclass(frozen=True)
class TimelineConfig:
    """Emotion timeline bound."""

    max_events: int = 80


@dataclass(frozen=True)
class ExportConfig:
    """Destination folder for transcript and timeline exports."""

    folder: Path = Path("exports")


@dataclass(frozen=True)
class AppConfig:
    """Complete application settings."""

    remote: RemoteConfig
    provider: ProviderConfig
    server: ServerConfig
    timeline: TimelineConfig
    export: ExportConfig
    response_delay_seconds: float = 0.4


def _load_settings() -> AppConfig:
    session_log = _env_optional_str("COMPANION_SESSION_LOG")
    max_events = max(1, _env_int("COMPANION_TIMELINE_MAX_EVENTS", 80))
    return AppConfig(
        remote=RemoteConfig(
            enabled=_env_bool("COMPANION_USE_REMOTE", False),
            endpoint_url=_env_str("COMPANION_REMOTE_URL", DEFAULT_REMOTE_URL),
            timeout_seconds=max(
                0.0, _env_float("COMPANION_REMOTE_TIMEOUT_SECONDS", 5.0)
            ),
        ),
        provider=ProviderConfig(
            api_key=_env_optional_str("OPENAI_API_KEY"),
            model=_env_str("OPENAI_MODEL", DEFAULT_MODEL),
            base_url=_env_optional_str("OPENAI_BASE_URL"),
        ),
        server=ServerConfig(
            host=_env_str("HOST", "127.0.0.1"),
            port=_env_int("PORT", 3000),
            static_folder=Path(_env_str("COMPANION_STATIC_DIR", "static")),
            session_log_file=Path(session_log) if session_log else None,
            rate_limit=RateLimitConfig(
                max_requests=max(1, _env_int("COMPANION_RATE_LIMIT_MAX", 10)),
                window_seconds=max(
                    1, _env_int("COMPANION_RATE_LIMIT_WINDOW_SECONDS", 10)
                ),
            ),
        ),
        timeline=TimelineConfig(max_events=max_events),
        export=ExportConfig(folder=Path(_env_str("COMPANION_EXPORT_DIR", "exports"))),
        response_delay_seconds=max(
            0.0, _env_float("COMPANION_RESPONSE_DELAY_SECONDS", 0.4)
        ),
    )


_SETTINGS: AppConfig | None = None


def reload_settings() -> AppConfig:
    """Reloads settings from the current environment and caches them."""
    global _SETTINGS
    _SETTINGS = _load_settings()
    return _SETTINGS


def get_settings() -> AppConfig:
    """Returns cached settings, loading them on first use."""
    if _SETTINGS is None:
        return reload_settings()
    return _SETTINGS
