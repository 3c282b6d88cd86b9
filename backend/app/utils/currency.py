"""Currency parsing and formatting helpers."""

import math
import re

# Leading decimal number after currency symbols and separators are stripped
_NUMBER_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (12.5 -> 13, -12.5 -> -12)."""
    return math.floor(value + 0.5)


def parse_currency_input(text: str | None) -> float:
    """Parse free-form currency text such as "$1,234.50" into a float.

    Anything after the leading number is ignored ("12.50 bucks" -> 12.5).
    Unparseable input returns 0.0 so callers can treat it as "no amount".
    """
    if not text:
        return 0.0

    cleaned = re.sub(r"[$,]", "", text)
    match = _NUMBER_RE.match(cleaned)
    if not match:
        return 0.0

    amount = float(match.group(1))
    if not math.isfinite(amount):
        return 0.0
    return amount


def format_currency(amount: float) -> str:
    """Format an amount as USD with two decimals, e.g. -$1,234.50."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"
