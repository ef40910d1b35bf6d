"""Language-model provider and deterministic fallback replies for the proxy."""

from __future__ import annotations

import logging
import random
from typing import Protocol

from openai import OpenAI, OpenAIError

from companion.config import ProviderConfig
from companion.utils.logger import get_logger

SYSTEM_PROMPT = """
You are a supportive, empathic conversational assistant for mental health support.
Follow these rules:
1) Use reflective listening and validation; do not give medical diagnoses.
2) Never provide instructions for self-harm or any illegal/harmful acts.
3) If the user expresses imminent self-harm risk, instruct them to contact emergency services immediately and provide crisis line info.
4) Offer brief coping strategies (grounding, breathing, seeking help) and encourage professional help when appropriate.
Keep responses under 300 words and avoid medical claims.
""".strip()

SERVER_CRISIS_REPLY = (
    "I'm concerned for your safety. If you are in immediate danger, please call "
    "your local emergency number now. Would you like crisis line information or "
    "someone to contact?"
)
ANXIETY_REPLY = (
    "I hear you're feeling anxious. Would you like a short breathing exercise? "
    "We can try one together."
)
SADNESS_REPLY = (
    "I'm sorry you're feeling sad. Want to tell me more about what's been "
    "happening lately?"
)
GENERIC_REPLIES: tuple[str, ...] = (
    "Thanks for sharing that. I'm listening. Can you tell me more?",
    "That sounds important. How long have you felt this way?",
    "I appreciate you telling me this. What would help you right now?",
)

logger: logging.Logger = get_logger(__name__)


class ProviderError(RuntimeError):
    """Raised when the language-model provider fails or returns nothing."""


class ReplyProvider(Protocol):
    def complete(self, message: str) -> str: ...


class ChatCompletionProvider:
    """OpenAI chat-completions provider with the supportive system prompt."""

    def __init__(self, config: ProviderConfig, *, client: OpenAI | None = None) -> None:
        self._config = config
        if client is not None:
            self._client = client
        else:
            self._client = OpenAI(api_key=config.api_key, base_url=config.base_url)

    @property
    def model(self) -> str:
        return self._config.model

    def complete(self, message: str) -> str:
        """Returns the model reply for one user message."""
        try:
            completion = self._client.chat.completions.create(
                model=self._config.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": message},
                ],
                max_tokens=self._config.max_tokens,
                temperature=self._config.temperature,
            )
        except OpenAIError as err:
            raise ProviderError(f"Provider call failed: {err}") from err

        choices = getattr(completion, "choices", None) or []
        content = choices[0].message.content if choices else None
        reply = (content or "").strip()
        if not reply:
            raise ProviderError("Empty reply from provider.")
        return reply


def build_provider(config: ProviderConfig) -> ChatCompletionProvider | None:
    """Returns a provider when a credential is configured, else ``None``."""
    if not config.enabled:
        logger.warning(
            "OPENAI_API_KEY not provided; model calls disabled "
            "(server will use fallback replies)."
        )
        return None
    logger.info("Language-model provider configured (model=%s).", config.model)
    return ChatCompletionProvider(config)


def deterministic_reply(text: str, rng: random.Random | None = None) -> str:
    """Keyword-based fallback reply used when no provider reply is available."""
    lowered = text.lower()
    if "help" in lowered and "anx" in lowered:
        return ANXIETY_REPLY
    if "sad" in lowered or "depress" in lowered:
        return SADNESS_REPLY
    return (rng if rng is not None else random).choice(GENERIC_REPLIES)
