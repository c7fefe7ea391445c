"""
Keyword vocabularies and intent predicates for the chat assistant.

Every predicate is a pure function of the message text. Matching is done
on the lower-cased, trimmed message; multi-word entries are substring
phrases, single words are matched either as whole words or as substrings
depending on the vocabulary (documented per method).
"""

import re

from src.utils import normalize_message


def _words(normalized: str) -> list[str]:
    return normalized.split()


class IntentMatcher:
    """Fixed keyword vocabularies for every rule the engine evaluates."""

    EXACT_GREETINGS = ["hi", "hello", "hey", "hai", "yo", "greetings", "greeting"]
    GREETING_PHRASES = ["good morning", "good afternoon", "good evening", "good night", "good day"]
    GREETING_WORDS = ["hi", "hello", "hey", "hai"]

    BOOKING_WORDS = ["ticket", "tickets", "book", "booking", "museum"]
    BOOKING_PHRASES = [
        "book ticket", "book tickets", "museum tickets", "i want to book",
        "want to book", "book museum", "book a ticket", "book a museum",
        "new booking", "make booking", "buy ticket", "reserve ticket",
        "buy tickets", "reserve tickets", "get tickets", "get ticket",
        "i want tickets", "i need tickets", "i need ticket", "i want ticket",
    ]

    SUPPORT_PHRASES = [
        "create support ticket", "raise complaint", "support ticket",
        "file complaint", "create ticket", "help ticket",
    ]
    MY_BOOKINGS_PHRASES = [
        "show my bookings", "my bookings", "my tickets", "show bookings",
        "booking history", "view bookings", "list bookings",
    ]
    DOWNLOAD_PHRASES = [
        "download ticket", "download my ticket", "get ticket pdf", "ticket pdf", "download pdf",
    ]
    MUSEUM_LIST_PHRASES = [
        "what museums", "list museums", "show museums", "available museums",
        "museums available", "which museums",
    ]
    HELP_PHRASES = ["help", "i need help", "assistance", "support", "how can you help"]

    CANCEL_KEYWORDS = [
        "cancel", "stop", "nevermind", "never mind", "no thanks", "no thank you", "exit", "quit",
    ]
    GO_BACK_KEYWORDS = ["go back", "back", "undo", "previous", "change", "modify", "edit"]
    CONFIRM_KEYWORDS = [
        "yes", "y", "ok", "okay", "confirm", "proceed", "continue",
        "pay", "payment", "sure", "go ahead",
    ]

    @staticmethod
    def _contains_any(normalized: str, phrases: list[str]) -> bool:
        return any(phrase in normalized for phrase in phrases)

    # ------------------------------------------------------------------ #
    # Global rules
    # ------------------------------------------------------------------ #

    def is_greeting(self, message: str) -> bool:
        normalized = normalize_message(message)
        if normalized in self.EXACT_GREETINGS:
            return True
        if self._contains_any(normalized, self.GREETING_PHRASES):
            return True
        return any(word in self.GREETING_WORDS for word in _words(normalized))

    def wants_cancel(self, message: str) -> bool:
        return self._contains_any(normalize_message(message), self.CANCEL_KEYWORDS)

    # ------------------------------------------------------------------ #
    # Flow entry
    # ------------------------------------------------------------------ #

    def wants_booking(self, message: str) -> bool:
        """Booking words or phrases, unless a more specific intent claims the message."""
        normalized = normalize_message(message)
        if self._claimed_by_specific_intent(normalized):
            return False
        if any(word in self.BOOKING_WORDS for word in _words(normalized)):
            return True
        return self._contains_any(normalized, self.BOOKING_PHRASES)

    def wants_support_ticket(self, message: str) -> bool:
        return self._contains_any(normalize_message(message), self.SUPPORT_PHRASES)

    def _claimed_by_specific_intent(self, normalized: str) -> bool:
        return (
            self._contains_any(normalized, self.SUPPORT_PHRASES)
            or self._contains_any(normalized, self.MY_BOOKINGS_PHRASES)
            or self._contains_any(normalized, self.DOWNLOAD_PHRASES)
        )

    # ------------------------------------------------------------------ #
    # Informational
    # ------------------------------------------------------------------ #

    def wants_my_bookings(self, message: str) -> bool:
        return self._contains_any(normalize_message(message), self.MY_BOOKINGS_PHRASES)

    def wants_download_ticket(self, message: str) -> bool:
        return self._contains_any(normalize_message(message), self.DOWNLOAD_PHRASES)

    def wants_museum_list(self, message: str) -> bool:
        return self._contains_any(normalize_message(message), self.MUSEUM_LIST_PHRASES)

    def wants_help(self, message: str) -> bool:
        return self._contains_any(normalize_message(message), self.HELP_PHRASES)

    # ------------------------------------------------------------------ #
    # In-flow keywords
    # ------------------------------------------------------------------ #

    def wants_go_back(self, message: str) -> bool:
        return self._contains_any(normalize_message(message), self.GO_BACK_KEYWORDS)

    def is_confirmation(self, message: str) -> bool:
        # Whole words only: "yesterday" and "repay later" are not a yes.
        normalized = normalize_message(message)
        return any(
            re.search(rf"\b{re.escape(keyword)}\b", normalized)
            for keyword in self.CONFIRM_KEYWORDS
        )
