"""Human-readable booking and support-ticket identifiers."""

import logging
import secrets
import string
import uuid
from typing import Callable

logger = logging.getLogger(__name__)

BOOKING_ID_PREFIX = "BK-"
TICKET_ID_PREFIX = "TKT-"
_TICKET_ALPHABET = string.ascii_uppercase + string.digits


def generate_booking_id() -> str:
    return f"{BOOKING_ID_PREFIX}{uuid.uuid4().hex[:8].upper()}"


def generate_ticket_id() -> str:
    suffix = "".join(secrets.choice(_TICKET_ALPHABET) for _ in range(8))
    return f"{TICKET_ID_PREFIX}{suffix}"


def generate_unique_id(generate: Callable[[], str], exists: Callable[[str], bool]) -> str:
    """Regenerate until ``exists`` reports the candidate is unused.

    There is no retry cap: with 32+ bits of entropy per candidate,
    running out of identifiers is not a practical failure mode.
    """
    candidate = generate()
    while exists(candidate):
        logger.debug("Identifier collision on %s, regenerating", candidate)
        candidate = generate()
    return candidate
