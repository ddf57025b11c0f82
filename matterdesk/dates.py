from datetime import date, datetime, timedelta
from typing import Optional

from matterdesk.helpers import round_half_up

SHORT_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
LONG_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

# (limit in seconds, divisor, unit); average month and year lengths
RELATIVE_THRESHOLDS = (
    (60, 1, "second"),
    (3600, 60, "minute"),
    (86400, 3600, "hour"),
    (604800, 86400, "day"),
    (2629800, 604800, "week"),
    (31557600, 2629800, "month"),
    (float("inf"), 31557600, "year"),
)

RELATIVE_IDIOMS = {
    ("second", 0): "now",
    ("minute", 0): "this minute",
    ("hour", 0): "this hour",
    ("day", 0): "today",
    ("day", 1): "tomorrow",
    ("day", -1): "yesterday",
    ("week", 0): "this week",
    ("week", 1): "next week",
    ("week", -1): "last week",
    ("month", 0): "this month",
    ("month", 1): "next month",
    ("month", -1): "last month",
    ("year", 0): "this year",
    ("year", 1): "next year",
    ("year", -1): "last year",
}


def parse_to_date(value) -> Optional[datetime]:
    """
    Parse an API date value into a naive local ``datetime``.

    Accepts datetimes, dates, ISO-8601 strings (a trailing ``Z`` included) and
    epoch milliseconds. Anything else, or an unparseable string, returns None.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        try:
            parsed = datetime.fromtimestamp(value / 1000)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def get_ordinal_suffix(day: int) -> str:
    if 3 < day < 21:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def to_start_of_minute(value=None) -> datetime:
    parsed = parse_to_date(value) or datetime.now()
    return parsed.replace(second=0, microsecond=0)


def to_start_of_day(value=None) -> datetime:
    parsed = parse_to_date(value) or datetime.now()
    return parsed.replace(hour=0, minute=0, second=0, microsecond=0)


def add_days(value, amount: float) -> datetime:
    parsed = parse_to_date(value) or datetime.now()
    return parsed + timedelta(days=amount)


def difference_in_days(left, right=None) -> int:
    """Whole calendar days from ``right`` (default today) to ``left``."""
    start_left = to_start_of_day(left)
    start_right = to_start_of_day(right)
    return round_half_up((start_left - start_right).total_seconds() / 86400)


def format_datetime_local(value) -> str:
    parsed = parse_to_date(value)
    if not parsed:
        return ""
    return parsed.strftime("%Y-%m-%dT%H:%M")


def format_date_input_value(value) -> str:
    parsed = parse_to_date(value)
    if not parsed:
        return ""
    return parsed.strftime("%Y-%m-%d")


def format_date_label(value, fallback: str = "N/A") -> str:
    """``2025-03-05`` -> ``5th Mar 2025``"""
    parsed = parse_to_date(value)
    if not parsed:
        return fallback
    return f"{parsed.day}{get_ordinal_suffix(parsed.day)} {SHORT_MONTHS[parsed.month - 1]} {parsed.year}"


def format_full_datetime(value) -> str:
    """``Wednesday 5th March 2025 • 14:03:09``"""
    parsed = parse_to_date(value)
    if not parsed:
        return ""
    weekday = WEEKDAYS[parsed.weekday()]
    month = LONG_MONTHS[parsed.month - 1]
    suffix = get_ordinal_suffix(parsed.day)
    return f"{weekday} {parsed.day}{suffix} {month} {parsed.year} • {parsed.strftime('%H:%M:%S')}"


def format_medium_datetime(value, fallback: str = "") -> str:
    """``Mar 5, 2025 • 14:03``"""
    parsed = parse_to_date(value)
    if not parsed:
        return fallback
    month = SHORT_MONTHS[parsed.month - 1]
    return f"{month} {parsed.day}, {parsed.year} • {parsed.strftime('%H:%M')}"


def _format_relative(amount: int, unit: str) -> str:
    idiom = RELATIVE_IDIOMS.get((unit, amount))
    if idiom:
        return idiom

    magnitude = abs(amount)
    label = unit if magnitude == 1 else f"{unit}s"
    if amount > 0:
        return f"in {magnitude} {label}"
    return f"{magnitude} {label} ago"


def format_relative_time_from_now(value, fallback: str = "Just now", now: Optional[datetime] = None) -> str:
    parsed = parse_to_date(value)
    if not parsed:
        return fallback

    reference = now or datetime.now()
    diff_seconds = round_half_up((parsed - reference).total_seconds())
    absolute_seconds = abs(diff_seconds)

    for limit, divisor, unit in RELATIVE_THRESHOLDS:
        if absolute_seconds < limit:
            return _format_relative(round_half_up(diff_seconds / divisor), unit)

    return fallback
