"""
Offline console demo: chat with the museum ticket assistant without any API keys.

Drives the real conversation engine with the in-memory catalog, stores and
a canned fallback responder. When a booking reaches payment, checkout runs
against a local gateway that hands back a fake checkout URL, so no network
calls are made.

Usage:
    python console_demo.py
    python console_demo.py --scenario booking
    python console_demo.py --scenario support
    python console_demo.py --scenario info
"""

import argparse
import uuid
from typing import Optional

from src.config import settings
from src.conversation.engine import ConversationEngine
from src.llm.fallback import CannedResponder, FallbackResponder
from src.schemas.conversation_schema import ChatReply, NextAction
from src.tools.booking import InMemoryBookingStore
from src.tools.catalog import InMemoryMuseumCatalog
from src.tools.notifications import LoggingNotifier
from src.tools.payments import CheckoutService, GatewaySession, PaymentError, PaymentGateway
from src.tools.support import InMemorySupportTicketStore

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


class OfflineGateway:
    """Checkout gateway that never leaves the process."""

    def __init__(self) -> None:
        self._sessions: dict[str, GatewaySession] = {}

    def create_session(self, *, amount_minor: int, client_reference_id: str, **kwargs) -> GatewaySession:
        session_id = f"cs_demo_{uuid.uuid4().hex[:12]}"
        session = GatewaySession(
            id=session_id,
            url=f"{settings.payment.client_url.rstrip('/')}/demo-checkout/{session_id}",
            payment_status="paid",
            metadata={"bookingId": client_reference_id},
        )
        self._sessions[session_id] = session
        return session

    def retrieve_session(self, session_id: str) -> GatewaySession:
        return self._sessions[session_id]


class ConsoleSession:
    """One visitor chatting with the assistant in the terminal."""

    # Pre-scripted scenarios for --scenario flag
    SCENARIOS: dict[str, list[str]] = {
        "booking": [
            "hi",
            "book tickets",
            "Kempegowda Museum",
            "tomorrow",
            "2",
            "go back",
            "4",
            "yes",
            "show my bookings",
            "download ticket",
        ],
        "support": [
            "create support ticket",
            "Asha Rao",
            "asha.rao@example",
            "asha.rao@example.com",
            "Payment Problem",
            "I was charged twice for my booking.",
            "urgent",
            "high",
        ],
        "info": [
            "what museums are open?",
            "help",
            "what time do you close?",
            "cancel",
        ],
    }

    MAX_INPUT_LENGTH = 500

    def __init__(
        self,
        responder: Optional[FallbackResponder] = None,
        gateway: Optional[PaymentGateway] = None,
        user_id: Optional[str] = "demo-user",
    ) -> None:
        catalog = InMemoryMuseumCatalog()
        bookings = InMemoryBookingStore()
        self.notifier = LoggingNotifier()
        self.engine = ConversationEngine(
            catalog=catalog,
            bookings=bookings,
            tickets=InMemorySupportTicketStore(),
            responder=responder or CannedResponder(),
            notifier=self.notifier,
        )
        self.checkout = CheckoutService(catalog, bookings, gateway or OfflineGateway(), self.notifier)
        self.session_id = f"console-{uuid.uuid4().hex[:8]}"
        self.user_id = user_id

    def bot_say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[Assistant]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  MUSEUM TICKET ASSISTANT - {title}{RESET}")
        print(f"{BOLD}  City: {settings.catalog.city}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

    def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self._banner(f"Scenario: {scenario}")
        for step in steps:
            print(f"\n{BLUE}[Visitor] {RESET}{step}")
            self._process_input(step)

        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
        print(f"{DIM}  Notifications sent: {len(self.notifier.sent)}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    def run(self) -> None:
        self._banner("Console Demo")
        print(f"{BOLD}  Type 'quit' to exit{RESET}")

        while True:
            user_input = input(f"\n{BLUE}[Visitor] {RESET}").strip()
            if not user_input:
                continue
            if user_input.lower() in ("quit", "exit", "q"):
                print(f"\n{DIM}Session ended.{RESET}")
                return
            if len(user_input) > self.MAX_INPUT_LENGTH:
                self.bot_say("That was quite long. Could you keep it brief for me?")
                continue
            self._process_input(user_input)

    def _process_input(self, text: str) -> None:
        reply = self.engine.send_message(self.session_id, text, user_id=self.user_id)
        self.bot_say(reply.reply)
        action = reply.next_action.value if reply.next_action else "none"
        self.system_log(f"Next action: {action}")
        if reply.payload:
            self.system_log(f"Payload: {reply.payload}")
        if reply.next_action == NextAction.TRIGGER_PAYMENT:
            self._checkout(reply)

    def _checkout(self, reply: ChatReply) -> None:
        if not self.user_id:
            self.bot_say("Please login to complete your booking.")
            return
        try:
            result = self.checkout.start_checkout(self.user_id, reply.payload or {})
        except PaymentError as e:
            print(f"{YELLOW}{e.user_message}{RESET}")
            return
        self.system_log(f"Checkout URL: {result.checkout_url}")
        try:
            booking = self.checkout.verify_payment(
                result.session_id, email=f"{self.user_id}@example.com"
            )
        except PaymentError as e:
            self.system_log(f"Booking {result.booking_id} pending: {e.user_message}")
            return
        self.system_log(f"Booking {booking.booking_id}: {booking.payment_status.value}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    if args.scenario:
        session.run_scenario(args.scenario)
    else:
        session.run()


if __name__ == "__main__":
    main()
