from src.llm.fallback import (
    CannedResponder,
    FallbackResponder,
    FallbackUnavailableError,
    OpenAIResponder,
    clip_reply,
)

__all__ = [
    "FallbackResponder",
    "FallbackUnavailableError",
    "OpenAIResponder",
    "CannedResponder",
    "clip_reply",
]
