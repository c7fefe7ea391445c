"""
Museum ticket assistant entry point.

Live mode wires the OpenAI fallback responder and Stripe checkout from the
environment; console mode runs the offline demo with no API keys.

Usage:
    Live chat:    python main.py
    Console mode: python main.py console
"""

import logging
import sys

from src.config import settings

logger = logging.getLogger(__name__)


def _run_live_mode() -> None:
    """Chat in the terminal against the configured OpenAI and Stripe accounts."""
    from console_demo import ConsoleSession
    from src.llm.fallback import OpenAIResponder
    from src.tools.payments import StripeGateway

    if not settings.model.llm_api_key:
        logger.warning("OPENAI_API_KEY is not set - fallback replies will be canned")
    if not settings.payment.stripe_secret_key:
        logger.warning("STRIPE_SECRET_KEY is not set - checkout will fail")

    session = ConsoleSession(responder=OpenAIResponder(), gateway=StripeGateway())
    session.run()


def _run_console_mode() -> None:
    """Start the offline console demo (no API keys required)."""
    from console_demo import ConsoleSession

    session = ConsoleSession()
    session.run()


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "console":
        _run_console_mode()
    else:
        _run_live_mode()
