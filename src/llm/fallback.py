"""
Free-text fallback responders.

Consulted only when no conversation rule matched. Responders raise
``FallbackUnavailableError`` when they cannot answer; the engine swaps in
the canned reply, so neither configuration detail nor provider error text
ever reaches the visitor.
"""

import logging
from typing import Any, Optional, Protocol

import openai

from src.config import settings
from src.prompts.reply_templates import FALLBACK_REPLY, build_fallback_context
from src.prompts.system_prompts import FALLBACK_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class FallbackUnavailableError(Exception):
    """The responder could not produce a reply."""


class FallbackResponder(Protocol):
    def respond(self, message: str, context: dict[str, Any]) -> str: ...


def clip_reply(text: str, max_lines: Optional[int] = None, max_chars: Optional[int] = None) -> str:
    """Keep the first ``max_lines`` lines, then cut to ``max_chars`` with an ellipsis."""
    max_lines = max_lines or settings.chat.max_reply_lines
    max_chars = max_chars or settings.chat.max_reply_chars
    clipped = "\n".join(text.strip().split("\n")[:max_lines])
    if len(clipped) > max_chars:
        return clipped[: max_chars - 3] + "..."
    return clipped


class CannedResponder:
    """Always answers with the fixed capability summary."""

    def respond(self, message: str, context: dict[str, Any]) -> str:
        return FALLBACK_REPLY


class OpenAIResponder:
    """Short museum-scoped answers from an OpenAI chat model."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[openai.OpenAI] = None,
    ) -> None:
        cfg = settings.model
        self._api_key = api_key if api_key is not None else cfg.llm_api_key
        self._model = model or cfg.llm_model
        self._client = client

    def _get_client(self) -> openai.OpenAI:
        if self._client is None:
            if not self._api_key or not self._api_key.strip():
                logger.warning("OPENAI_API_KEY is not set - using fallback response")
                raise FallbackUnavailableError("No API key configured")
            self._client = openai.OpenAI(api_key=self._api_key)
        return self._client

    def respond(self, message: str, context: dict[str, Any]) -> str:
        client = self._get_client()
        try:
            response = client.chat.completions.create(
                model=self._model,
                messages=[
                    {
                        "role": "system",
                        "content": f"{FALLBACK_SYSTEM_PROMPT}\n\n{build_fallback_context(context)}",
                    },
                    {"role": "user", "content": message},
                ],
                max_tokens=settings.model.llm_max_tokens,
                temperature=settings.model.llm_temperature,
            )
        except openai.OpenAIError as e:
            logger.error("OpenAI fallback error: %s", e)
            raise FallbackUnavailableError(str(e)) from e

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise FallbackUnavailableError("Empty completion")
        return clip_reply(content)
