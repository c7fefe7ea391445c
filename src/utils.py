"""Shared utilities used across the museum ticket assistant."""

import re
from datetime import date

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_message(value: str) -> str:
    """Lower-case and trim a chat message for keyword matching.

    Examples:
        >>> normalize_message("  Book Tickets ")
        'book tickets'
    """
    return value.lower().strip()


def is_valid_email(value: str) -> bool:
    """Check the basic ``local@domain.tld`` shape."""
    return bool(_EMAIL_RE.match(value.strip()))


def format_amount(amount: float) -> str:
    """Format an amount with thousands separators, dropping a zero fraction.

    Examples:
        >>> format_amount(1500)
        '1,500'
        >>> format_amount(75.5)
        '75.50'
    """
    if float(amount).is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.2f}"


def format_visit_date(value: date) -> str:
    """Long-form visit date, e.g. 'Friday, 1 January 2099'."""
    return f"{value.strftime('%A')}, {value.day} {value.strftime('%B %Y')}"
