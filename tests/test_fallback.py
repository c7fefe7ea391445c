"""Tests for the free-text fallback responders."""

from types import SimpleNamespace

import openai
import pytest

from src.llm.fallback import (
    CannedResponder,
    FallbackUnavailableError,
    OpenAIResponder,
    clip_reply,
)
from src.prompts.reply_templates import FALLBACK_REPLY

CONTEXT = {"bookingStep": None, "hasActiveBooking": False}


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.requests: list[dict] = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _client(completions: FakeCompletions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


class TestClipReply:
    def test_short_reply_unchanged(self):
        assert clip_reply("Open daily.") == "Open daily."

    def test_keeps_two_lines(self):
        assert clip_reply("one\ntwo\nthree") == "one\ntwo"

    def test_truncates_with_ellipsis(self):
        clipped = clip_reply("a" * 300)
        assert len(clipped) == 200
        assert clipped.endswith("...")

    def test_custom_limits(self):
        assert clip_reply("abcdefghij", max_lines=1, max_chars=8) == "abcde..."


class TestCannedResponder:
    def test_always_canned(self):
        assert CannedResponder().respond("anything", CONTEXT) == FALLBACK_REPLY


class TestOpenAIResponder:
    def test_no_api_key(self):
        with pytest.raises(FallbackUnavailableError):
            OpenAIResponder(api_key="").respond("hello", CONTEXT)

    def test_reply_clipped(self):
        completions = FakeCompletions(content="line one\nline two\nline three")
        responder = OpenAIResponder(api_key="sk-test", client=_client(completions))
        assert responder.respond("when do you open?", CONTEXT) == "line one\nline two"

    def test_prompt_carries_context(self):
        completions = FakeCompletions(content="We open at 10.")
        responder = OpenAIResponder(api_key="sk-test", model="test-model", client=_client(completions))
        responder.respond("when do you open?", {"bookingStep": "date", "hasActiveBooking": True})

        [request] = completions.requests
        assert request["model"] == "test-model"
        system, user = request["messages"]
        assert system["role"] == "system"
        assert '"bookingStep": "date"' in system["content"]
        assert user == {"role": "user", "content": "when do you open?"}

    def test_provider_error(self):
        completions = FakeCompletions(error=openai.OpenAIError("quota exceeded"))
        responder = OpenAIResponder(api_key="sk-test", client=_client(completions))
        with pytest.raises(FallbackUnavailableError):
            responder.respond("hello", CONTEXT)

    def test_empty_completion(self):
        completions = FakeCompletions(content="  ")
        responder = OpenAIResponder(api_key="sk-test", client=_client(completions))
        with pytest.raises(FallbackUnavailableError):
            responder.respond("hello", CONTEXT)
