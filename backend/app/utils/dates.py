"""Local calendar-date helpers.

Budgets are keyed by month ("YYYY-MM") and transactions are bucketed by local
calendar day ("YYYY-MM-DD"). Everything here works on ``datetime.date`` values
so that a transaction made late in the evening never slides into the next day
because of a UTC conversion.
"""

import calendar
import re
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

WEEKDAY_NAMES = [
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
]
MONTH_NAMES = [
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
]

_MONTH_KEY_RE = re.compile(r"^(\d{4})-(\d{2})$")
_LAST_NEXT_RE = re.compile(
    r"\b(last|next)\s+(sunday|monday|tuesday|wednesday|thursday|friday|saturday)\b"
)
_ISO_RE = re.compile(r"\b(\d{4})-(\d{1,2})-(\d{1,2})\b")
_SLASH_RE = re.compile(r"\b(\d{1,2})/(\d{1,2})(?:/(\d{2,4}))?\b")
_MONTH_NAME_RE = re.compile(
    r"\b(january|february|march|april|may|june|july|august|september|october|"
    r"november|december|jan|feb|mar|apr|jun|jul|aug|sep|oct|nov|dec)"
    r"\s+(\d{1,2})(?:st|nd|rd|th)?(?:,?\s*(\d{4}))?\b"
)


def get_month_key(value: date) -> str:
    """Return the "YYYY-MM" key for a date."""
    return f"{value.year:04d}-{value.month:02d}"


def format_local_date(value: date) -> str:
    """Return the "YYYY-MM-DD" key for a local calendar date."""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def parse_local_date(value: str) -> date:
    """Parse "YYYY-MM-DD" into a date. Missing month or day default to 1."""
    parts = value.strip().split("-")
    year = int(parts[0])
    month = int(parts[1]) if len(parts) > 1 and parts[1] else 1
    day = int(parts[2][:2]) if len(parts) > 2 and parts[2] else 1
    return date(year, month, day)


def parse_month_key(month_key: str) -> tuple[int, int]:
    """Split a "YYYY-MM" key into (year, month).

    Raises:
        ValueError: If the key is not a valid month
    """
    match = _MONTH_KEY_RE.match(month_key or "")
    if not match:
        raise ValueError(f"Invalid month format: {month_key}. Expected YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month format: {month_key}. Expected YYYY-MM")
    return year, month


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_bounds(month_key: str) -> tuple[date, date]:
    """Return (first_day, last_day) of a "YYYY-MM" month, both inclusive."""
    year, month = parse_month_key(month_key)
    return date(year, month, 1), date(year, month, days_in_month(year, month))


def to_local_date(value: date | datetime | str, tz: ZoneInfo | None = None) -> date:
    """Normalize a stored date value to a local calendar date.

    Naive datetimes are taken at face value. Aware datetimes are converted to
    ``tz`` (when given) before the date is read, so an evening purchase stored
    as the next morning in UTC still lands on the right day.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None and tz is not None:
            value = value.astimezone(tz)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) > 10:
            return to_local_date(datetime.fromisoformat(text.replace("Z", "+00:00")), tz)
        return parse_local_date(text)
    raise TypeError(f"Cannot convert {type(value).__name__} to a date")


def local_today(tz: ZoneInfo | None = None) -> date:
    """Today's date in the given zone (server local time when tz is None)."""
    return datetime.now(tz).date() if tz else date.today()


def weekday_index(value: date) -> int:
    """Day of week with Sunday = 0 ... Saturday = 6."""
    return (value.weekday() + 1) % 7


def remaining_days_in_month(today: date) -> int:
    """Days left in the month of ``today``, counting today."""
    return days_in_month(today.year, today.month) - today.day + 1


def month_progress(today: date) -> int:
    """Percentage of the month elapsed as of ``today`` (rounded)."""
    total = days_in_month(today.year, today.month)
    return int(today.day * 100 / total + 0.5)


def days_elapsed(month_key: str, today: date) -> int:
    """Days of ``month_key`` that have passed as of ``today``.

    The current month counts today; past months count every day and future
    months count none.
    """
    first_day, last_day = month_bounds(month_key)
    if today < first_day:
        return 0
    if today > last_day:
        return last_day.day
    return today.day


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_date_from_text(text: str, today: date) -> str | None:
    """Pick a date phrase out of free text and return it as "YYYY-MM-DD".

    Understands today/yesterday/tomorrow, "last/next <weekday>", ISO dates,
    M/D[/YY[YY]] and month names ("Aug 3rd", "August 3, 2024"). Returns None
    when nothing date-like is found.
    """
    lower = text.lower()

    if "today" in lower:
        return format_local_date(today)
    if "yesterday" in lower:
        return format_local_date(today - timedelta(days=1))
    if "tomorrow" in lower:
        return format_local_date(today + timedelta(days=1))

    match = _LAST_NEXT_RE.search(lower)
    if match:
        direction, day_name = match.groups()
        diff = WEEKDAY_NAMES.index(day_name) - weekday_index(today)
        if direction == "last" and diff >= 0:
            diff -= 7
        elif direction == "next" and diff <= 0:
            diff += 7
        return format_local_date(today + timedelta(days=diff))

    match = _ISO_RE.search(text)
    if match:
        parsed = _safe_date(*(int(g) for g in match.groups()))
        if parsed:
            return format_local_date(parsed)

    match = _SLASH_RE.search(text)
    if match:
        month, day, year = match.groups()
        if year:
            year = int(year)
            year = 2000 + year if year < 100 else year
        else:
            year = today.year
        parsed = _safe_date(year, int(month), int(day))
        if parsed:
            return format_local_date(parsed)

    match = _MONTH_NAME_RE.search(lower)
    if match:
        month_str, day, year = match.groups()
        month = next(i for i, name in enumerate(MONTH_NAMES, 1) if name.startswith(month_str))
        parsed = _safe_date(int(year) if year else today.year, month, int(day))
        if parsed:
            return format_local_date(parsed)

    return None
