"""Formatting and parsing helpers used across the job portal."""
import math
import re
from datetime import datetime
from typing import Any, Optional

CURRENCY_SYMBOLS = {
    'INR': '₹',
    'USD': '$',
    'EUR': '€',
    'GBP': '£',
}

# Largest integer a database column can bind
MAX_SQL_INT = 2 ** 63 - 1

TIME_INTERVALS = [
    ('year', 31536000),
    ('month', 2592000),
    ('week', 604800),
    ('day', 86400),
    ('hour', 3600),
    ('minute', 60),
]


def parse_amount(value: Any) -> Optional[int]:
    """Parse a loosely formatted amount to an integer.

    Args:
        value: Amount such as 120000, "120000", "$120k", "1,50,000"

    Returns:
        Optional[int]: Parsed amount or None when it is not a number
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if abs(value) > MAX_SQL_INT or not math.isfinite(value):
            return None
        return int(value)

    text = str(value).strip().lower()
    if not text:
        return None

    # Remove currency symbols and separators
    text = re.sub(r'[$€£₹,\s]', '', text)

    multiplier = 1
    if text.endswith('k'):
        multiplier = 1000
        text = text[:-1]

    try:
        amount = float(text) * multiplier
    except ValueError:
        return None
    if abs(amount) > MAX_SQL_INT or not math.isfinite(amount):
        return None
    return int(amount)


def format_salary(amount: Optional[float], currency: str = 'INR') -> str:
    """Format a salary amount for display.

    Rupee amounts use the crore / lakh-per-annum notation common on
    Indian job boards; other currencies use a symbol and thousands
    separators.
    """
    if not amount:
        return 'Not disclosed'

    if currency == 'INR':
        if amount >= 10000000:
            return f"₹{amount / 10000000:.1f} Cr"
        if amount >= 100000:
            return f"₹{amount / 100000:.1f} LPA"
        return f"₹{amount:,.0f}"

    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    return f"{symbol}{amount:,.0f}"


def time_ago(date: datetime, now: Optional[datetime] = None) -> str:
    """Describe how long ago a timestamp was, e.g. "3 days ago"."""
    now = now or datetime.utcnow()
    seconds = int((now - date).total_seconds())

    for unit, unit_seconds in TIME_INTERVALS:
        interval = seconds // unit_seconds
        if interval >= 1:
            return f"{interval} {unit}{'s' if interval > 1 else ''} ago"

    return 'Just now'


def generate_slug(text: str) -> str:
    """Turn a title into a URL slug."""
    slug = re.sub(r'[^a-z0-9]+', '-', text.lower())
    return slug.strip('-')
