"""
Centralized configuration with environment variable overrides.

Catalog presentation, conversation limits, the fallback model and the
payment processor are all configurable here. Nothing is hardcoded in the
conversation flows or collaborator tools.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag ("true"/"false", "1"/"0", "yes"/"no")."""
    raw = os.getenv(env_var, default).strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


@dataclass(frozen=True)
class CatalogConfig:
    """How the museum catalog is presented in chat."""

    city: str = os.getenv("CATALOG_CITY", "Bengaluru")
    listing_limit: int = _safe_int("MUSEUM_LISTING_LIMIT", "10")
    currency_symbol: str = os.getenv("CURRENCY_SYMBOL", "₹")


@dataclass(frozen=True)
class ChatConfig:
    """Limits applied by the conversation engine."""

    max_ticket_count: int = _safe_int("MAX_TICKET_COUNT", "100")
    max_reply_chars: int = _safe_int("MAX_FALLBACK_REPLY_CHARS", "200")
    max_reply_lines: int = _safe_int("MAX_FALLBACK_REPLY_LINES", "2")
    bookings_shown: int = _safe_int("BOOKINGS_SHOWN", "5")
    serialize_sessions: bool = _safe_bool("SERIALIZE_SESSIONS", "true")


@dataclass(frozen=True)
class ModelConfig:
    """Free-text fallback model settings."""

    llm_api_key: str = os.getenv("OPENAI_API_KEY", "")
    llm_model: str = os.getenv("LLM_MODEL", "gpt-4o-mini")
    llm_temperature: float = _safe_float("LLM_TEMPERATURE", "0.3")
    llm_max_tokens: int = _safe_int("LLM_MAX_TOKENS", "150")


@dataclass(frozen=True)
class PaymentConfig:
    """Hosted checkout settings."""

    stripe_secret_key: str = os.getenv("STRIPE_SECRET_KEY", "")
    currency: str = os.getenv("PAYMENT_CURRENCY", "inr")
    client_url: str = os.getenv("CLIENT_URL", "http://localhost:5173")
    minimum_amount: float = _safe_float("PAYMENT_MINIMUM_AMOUNT", "50")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    chat: ChatConfig = field(default_factory=ChatConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    payment: PaymentConfig = field(default_factory=PaymentConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "museum-ticket-assistant")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if not 0.0 <= config.model.llm_temperature <= 2.0:
        raise ValueError(
            f"LLM_TEMPERATURE must be between 0.0 and 2.0, got {config.model.llm_temperature}"
        )
    if config.model.llm_max_tokens < 1:
        raise ValueError(
            f"LLM_MAX_TOKENS must be >= 1, got {config.model.llm_max_tokens}"
        )
    if config.catalog.listing_limit < 1:
        raise ValueError(
            f"MUSEUM_LISTING_LIMIT must be >= 1, got {config.catalog.listing_limit}"
        )

    for name, value in [
        ("MAX_TICKET_COUNT", config.chat.max_ticket_count),
        ("MAX_FALLBACK_REPLY_CHARS", config.chat.max_reply_chars),
        ("MAX_FALLBACK_REPLY_LINES", config.chat.max_reply_lines),
        ("BOOKINGS_SHOWN", config.chat.bookings_shown),
    ]:
        if value < 1:
            raise ValueError(f"{name} must be >= 1, got {value}")

    if config.chat.max_reply_chars < 4:
        raise ValueError(
            f"MAX_FALLBACK_REPLY_CHARS must leave room for an ellipsis, got {config.chat.max_reply_chars}"
        )
    if config.payment.minimum_amount < 0:
        raise ValueError(
            f"PAYMENT_MINIMUM_AMOUNT must be >= 0, got {config.payment.minimum_amount}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.app_name)
    return config


# Singleton instance
settings = load_config()
