"""Pure helpers deriving values from user input (urgency, deadlines, amounts)."""
import math
import re
from datetime import date
from enum import Enum
from typing import Any, Callable, Optional


class Urgency(str, Enum):
    """Urgency bucket derived from the approval deadline"""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


# Inclusive upper bounds, in days
HIGH_WITHIN_DAYS = 3
MEDIUM_WITHIN_DAYS = 6

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_AMOUNT_INPUT = re.compile(r"^\d*\.?\d{0,2}$")

Today = Callable[[], date]


def parse_date(value: Any) -> Optional[date]:
    """Accept a date or a `YYYY-MM-DD` string; anything else is treated as absent."""
    if isinstance(value, date):
        return value
    if isinstance(value, str) and _ISO_DATE.match(value.strip()):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def days_until(deadline: Optional[date], today: Optional[date] = None) -> Optional[int]:
    """Signed whole days from today's local midnight to the deadline. None if no deadline."""
    if deadline is None:
        return None
    return (deadline - (today or date.today())).days


def compute_urgency(deadline: Optional[date], today: Optional[date] = None) -> str:
    """
    Bucket a deadline into an urgency.

    High within 3 days (including overdue), Medium within 6, Low beyond.
    Returns an empty string when there is no deadline.
    """
    days = days_until(deadline, today)
    if days is None:
        return ""
    if days <= HIGH_WITHIN_DAYS:
        return Urgency.HIGH.value
    if days <= MEDIUM_WITHIN_DAYS:
        return Urgency.MEDIUM.value
    return Urgency.LOW.value


def parse_amount(value: Any) -> float:
    """Parse an amount after removing thousands separators. NaN when unparsable."""
    text = str(value if value is not None else "").replace(",", "").strip()
    if not text:
        # An empty input is not a number
        return math.nan
    try:
        return float(text)
    except ValueError:
        return math.nan


def amount_or_none(value: Any) -> Optional[float]:
    """Amount to send: positive finite numbers only, otherwise absent."""
    amount = parse_amount(value)
    if not math.isfinite(amount) or amount <= 0:
        return None
    return amount


def clean_amount_input(value: str) -> Optional[str]:
    """Input mask for the amount box: strip commas, allow up to two decimals. None rejects the keystroke."""
    text = (value or "").replace(",", "")
    return text if _AMOUNT_INPUT.match(text) else None
