"""Tests for configuration loading and validation."""

from dataclasses import replace

import pytest

from src.config import (
    AppConfig,
    CatalogConfig,
    ChatConfig,
    ModelConfig,
    PaymentConfig,
    _safe_bool,
    _safe_float,
    _safe_int,
    _validate_config,
)


def _config(**sections) -> AppConfig:
    return replace(AppConfig(), **sections)


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        _validate_config(AppConfig())  # should not raise

    @pytest.mark.parametrize("temperature", [3.0, -0.5])
    def test_invalid_temperature(self, temperature):
        config = _config(model=replace(ModelConfig(), llm_temperature=temperature))
        with pytest.raises(ValueError, match="LLM_TEMPERATURE"):
            _validate_config(config)

    def test_invalid_max_tokens(self):
        config = _config(model=replace(ModelConfig(), llm_max_tokens=0))
        with pytest.raises(ValueError, match="LLM_MAX_TOKENS"):
            _validate_config(config)

    def test_invalid_listing_limit(self):
        config = _config(catalog=replace(CatalogConfig(), listing_limit=0))
        with pytest.raises(ValueError, match="MUSEUM_LISTING_LIMIT"):
            _validate_config(config)

    def test_invalid_ticket_ceiling(self):
        config = _config(chat=replace(ChatConfig(), max_ticket_count=0))
        with pytest.raises(ValueError, match="MAX_TICKET_COUNT"):
            _validate_config(config)

    def test_reply_ceiling_too_short_for_ellipsis(self):
        config = _config(chat=replace(ChatConfig(), max_reply_chars=3))
        with pytest.raises(ValueError, match="MAX_FALLBACK_REPLY_CHARS"):
            _validate_config(config)

    def test_negative_minimum_amount(self):
        config = _config(payment=replace(PaymentConfig(), minimum_amount=-1))
        with pytest.raises(ValueError, match="PAYMENT_MINIMUM_AMOUNT"):
            _validate_config(config)


class TestDefaults:
    def test_catalog_defaults(self):
        assert CatalogConfig().listing_limit == 10

    def test_chat_defaults(self):
        chat = ChatConfig()
        assert chat.max_ticket_count == 100
        assert chat.max_reply_chars == 200
        assert chat.max_reply_lines == 2


class TestEnvParsing:
    def test_safe_int(self, monkeypatch):
        monkeypatch.setenv("TEST_INT", "42")
        assert _safe_int("TEST_INT", "0") == 42

    def test_safe_int_default(self, monkeypatch):
        monkeypatch.delenv("TEST_INT", raising=False)
        assert _safe_int("TEST_INT", "7") == 7

    def test_safe_int_invalid(self, monkeypatch):
        monkeypatch.setenv("TEST_INT", "lots")
        with pytest.raises(ValueError, match="TEST_INT"):
            _safe_int("TEST_INT", "0")

    def test_safe_float_invalid(self, monkeypatch):
        monkeypatch.setenv("TEST_FLOAT", "warm")
        with pytest.raises(ValueError, match="TEST_FLOAT"):
            _safe_float("TEST_FLOAT", "0.0")

    @pytest.mark.parametrize("raw,expected", [
        ("true", True), ("1", True), ("YES", True), ("off", False), ("0", False),
    ])
    def test_safe_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("TEST_BOOL", raw)
        assert _safe_bool("TEST_BOOL", "false") is expected

    def test_safe_bool_invalid(self, monkeypatch):
        monkeypatch.setenv("TEST_BOOL", "maybe")
        with pytest.raises(ValueError, match="TEST_BOOL"):
            _safe_bool("TEST_BOOL", "false")
