"""
Rule-based parsing of visit dates and ticket counts from chat messages.

Date precedence:
    1. ISO ``YYYY-MM-DD`` prefix
    2. ``DD-MM-YYYY`` / ``DD/MM/YYYY``
    3. ``MM-DD-YYYY`` / ``MM/DD/YYYY``
    4. "day after tomorrow", "tomorrow", "today"
    5. generic calendar parsing (dateparser, strict)

Patterns 2 and 3 share one shape; day-first always wins, so month-first
only applies when the day-first reading is not a real calendar date
(``12/25/2030``). ``03/04/2030`` is therefore always 3 April.
"""

import logging
import re
from datetime import date, timedelta
from typing import Optional

import dateparser

from src.utils import normalize_message

logger = logging.getLogger(__name__)

_ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_NUMERIC_RE = re.compile(r"^(\d{1,2})[-/](\d{1,2})[-/](\d{4})")
_DIGITS_RE = re.compile(r"\d+")
_WORD_RE = re.compile(r"[a-z]+")

RELATIVE_DAYS: list[tuple[str, int]] = [
    ("day after tomorrow", 2),
    ("tomorrow", 1),
    ("today", 0),
]

WORD_NUMBERS: dict[str, int] = {
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
    "eleven": 11, "twelve": 12, "thirteen": 13, "fourteen": 14, "fifteen": 15,
    "single": 1, "double": 2, "couple": 2, "few": 3,
}

_DATEPARSER_SETTINGS = {
    "STRICT_PARSING": True,
    "RETURN_AS_TIMEZONE_AWARE": False,
}


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_date(text: str, today: Optional[date] = None) -> Optional[date]:
    """Parse a visit date from free text; None if nothing matches."""
    if not text or not isinstance(text, str):
        return None

    stripped = text.strip()
    today = today or date.today()

    iso = _ISO_RE.match(stripped)
    if iso:
        parsed = _safe_date(int(iso.group(1)), int(iso.group(2)), int(iso.group(3)))
        if parsed:
            return parsed

    numeric = _NUMERIC_RE.match(stripped)
    if numeric:
        first, second, year = (int(g) for g in numeric.groups())
        parsed = _safe_date(year, second, first) or _safe_date(year, first, second)
        if parsed:
            return parsed

    lower = normalize_message(stripped)
    for phrase, offset in RELATIVE_DAYS:
        if phrase in lower:
            return today + timedelta(days=offset)

    try:
        parsed_dt = dateparser.parse(stripped, settings=_DATEPARSER_SETTINGS)
    except (ValueError, TypeError, OverflowError):
        logger.debug("Calendar parser rejected %r", stripped, exc_info=True)
        return None
    return parsed_dt.date() if parsed_dt else None


def is_valid_future_date(value: Optional[date], today: Optional[date] = None) -> bool:
    """True when the date is today or later (date-only comparison)."""
    if value is None:
        return False
    return value >= (today or date.today())


def extract_ticket_count(text: str, max_count: int = 100) -> Optional[int]:
    """
    Pull a ticket count out of a message.

    The first digit run wins if it lies in [1, max_count]; otherwise the
    first whole word in the message that is in the word-number vocabulary
    ("fourteen" is 14, not 4).
    """
    match = _DIGITS_RE.search(text)
    if match:
        count = int(match.group(0))
        if 0 < count <= max_count:
            return count

    for word in _WORD_RE.findall(normalize_message(text)):
        if word in WORD_NUMBERS and WORD_NUMBERS[word] <= max_count:
            return WORD_NUMBERS[word]
    return None
