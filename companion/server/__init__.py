"""HTTP proxy server for model-backed replies."""

from .app import create_app, serve
from .llm import ChatCompletionProvider, ProviderError, build_provider, deterministic_reply
from .rate_limit import ClientRateLimiter

__all__ = [
    "ChatCompletionProvider",
    "ProviderError",
    "ClientRateLimiter",
    "build_provider",
    "create_app",
    "deterministic_reply",
    "serve",
]
