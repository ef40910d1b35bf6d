"""
FastAPI proxy server for the companion chat.

Exposes ``POST /api/chat``: runs a server-side crisis check, forwards safe
messages to the configured language model and falls back to deterministic
replies when no model reply is available. Serves the static chat assets when
the static folder exists.
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
import time
from collections.abc import Callable
from typing import TypeAlias
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

from companion.analysis.crisis import CrisisDetector
from companion.config import AppConfig, ProviderConfig, get_settings
from companion.server.llm import (
    SERVER_CRISIS_REPLY,
    ProviderError,
    ReplyProvider,
    build_provider,
    deterministic_reply,
)
from companion.server.rate_limit import ClientRateLimiter
from companion.utils.logger import get_logger

ProviderFactory: TypeAlias = Callable[[ProviderConfig], ReplyProvider | None]

logger: logging.Logger = get_logger(__name__)


class SafetyPayload(BaseModel):
    crisis: bool = False
    moderated: bool = False


class ChatResponse(BaseModel):
    reply: str
    safety: SafetyPayload = Field(default_factory=SafetyPayload)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def append_session_log(log_file: Path, *, message: str, reply: str) -> None:
    """Appends one exchange to the JSONL session log; failures are only logged."""
    record = {"ts": int(time.time() * 1000), "message": message, "reply": reply}
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        with log_file.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False))
            handle.write("\n")
    except OSError:
        logger.warning("Failed to append session log %s.", log_file, exc_info=True)


def create_app(
    settings: AppConfig | None = None,
    *,
    provider_factory: ProviderFactory = build_provider,
    rng: random.Random | None = None,
    limiter: ClientRateLimiter | None = None,
) -> FastAPI:
    """Builds the proxy application from settings."""
    active_settings = settings if settings is not None else get_settings()
    server_settings = active_settings.server
    provider = provider_factory(active_settings.provider)
    detector = CrisisDetector()
    api_limiter = (
        limiter if limiter is not None else ClientRateLimiter(server_settings.rate_limit)
    )
    reply_rng = rng if rng is not None else random.Random()

    app = FastAPI(
        title="Companion chat proxy",
        description="Crisis-aware reply proxy for the companion chat client.",
        version="1.0.0",
    )

    @app.middleware("http")
    async def limit_api_requests(request: Request, call_next):
        if request.url.path.startswith("/api/"):
            client_key = request.client.host if request.client else "unknown"
            if not api_limiter.allow(client_key):
                logger.warning("Rate limit exceeded for %s.", client_key)
                response = _error(429, "Too many requests")
                response.headers["Retry-After"] = str(
                    max(1, api_limiter.retry_after(client_key))
                )
                return response
        return await call_next(request)

    @app.post("/api/chat", response_model=None)
    async def chat(request: Request) -> ChatResponse | JSONResponse:
        try:
            try:
                payload = await request.json()
            except ValueError:
                return _error(400, "Invalid message")
            message = payload.get("message") if isinstance(payload, dict) else None
            if not isinstance(message, str) or not message.strip():
                return _error(400, "Invalid message")

            # Crisis messages are never forwarded to the model.
            if detector.is_crisis(message):
                logger.warning("Server-side crisis check matched; returning safe reply.")
                return ChatResponse(
                    reply=SERVER_CRISIS_REPLY,
                    safety=SafetyPayload(crisis=True, moderated=True),
                )

            if provider is not None:
                try:
                    reply = await asyncio.to_thread(provider.complete, message)
                except ProviderError as err:
                    logger.error("LLM call error: %s", err)
                except Exception:
                    logger.error(
                        "Unexpected provider failure; using fallback reply.",
                        exc_info=True,
                    )
                else:
                    if server_settings.session_log_file is not None:
                        append_session_log(
                            server_settings.session_log_file,
                            message=message,
                            reply=reply,
                        )
                    return ChatResponse(reply=reply)

            return ChatResponse(reply=deterministic_reply(message, reply_rng))
        except Exception:
            logger.error("Unhandled error in /api/chat.", exc_info=True)
            return _error(500, "Server error")

    static_folder = server_settings.static_folder
    if static_folder.is_dir():
        app.mount("/", StaticFiles(directory=str(static_folder), html=True), name="static")
        logger.info("Serving static assets from %s.", static_folder)

    return app


def serve(settings: AppConfig | None = None) -> None:
    """Runs the proxy server with uvicorn."""
    active_settings = settings if settings is not None else get_settings()
    app = create_app(active_settings)
    logger.info(
        "Server running on http://%s:%s",
        active_settings.server.host,
        active_settings.server.port,
    )
    uvicorn.run(
        app,
        host=active_settings.server.host,
        port=active_settings.server.port,
        log_level=logging.getLevelName(logging.getLogger().level).lower(),
    )
