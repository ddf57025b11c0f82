"""
Small formatting and validation helpers shared across the client
"""
from datetime import datetime
from typing import Optional
import math
import re

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_THOUSANDS = re.compile(r"\B(?=(\d{3})+(?!\d))")


def validate_email(email) -> bool:
    """Loose shape check, the API does the real validation"""
    if not isinstance(email, str):
        return False
    return bool(EMAIL_REGEX.match(email))


def round_half_up(value: float) -> int:
    """Round .5 towards positive infinity (``round`` would pick the even neighbour)"""
    return math.floor(value + 0.5)


def to_number(value, fallback: float = 0) -> float:
    """Coerce an API value to a finite number, returning ``fallback`` otherwise"""
    if value is None:
        return fallback
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else fallback
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return 0.0
        try:
            parsed = float(stripped)
        except ValueError:
            return fallback
        return parsed if math.isfinite(parsed) else fallback
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return fallback
    return parsed if math.isfinite(parsed) else fallback


def add_thousands_separator(num) -> str:
    if num is None or isinstance(num, bool):
        return ""
    if isinstance(num, float) and not math.isfinite(num):
        return ""

    text = str(num).strip()
    try:
        float(text)
    except ValueError:
        return ""

    integer_part, _, fractional_part = text.partition(".")
    formatted_integer = _THOUSANDS.sub(",", integer_part)
    return f"{formatted_integer}.{fractional_part}" if fractional_part else formatted_integer


def get_greeting_message(now: Optional[datetime] = None) -> str:
    current_hour = (now or datetime.now()).hour

    if current_hour < 12:
        return "Good Morning"
    if current_hour < 17:
        return "Good Afternoon"
    return "Good Evening"
