"""
Time and date utilities.

Pure helpers for working with "HH:mm" wall-clock strings and calendar
days:
- Lenient parsing of user-entered times with a fixed fallback
- Composition of a day and a time into a timestamp
- End-time and duration arithmetic that wraps past midnight
- Day arithmetic and weekday numbering (1=Sunday ... 7=Saturday)
- Tolerant ISO-8601 parsing for persisted dates
"""

import re
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple, Union


DEFAULT_HOUR = 18
DEFAULT_MINUTE = 30
DEFAULT_HHMM = "18:30"

MINUTES_PER_DAY = 1440

# Colon look-alikes that users type on CJK keyboards
_COLON_VARIANTS = ("：", "﹕", "∶", "·")

# Range separators accepted in template time options
_RANGE_SEPARATORS = ("—", "-", "~", "～")
_CANONICAL_RANGE_SEPARATOR = "–"

_DIGITS = re.compile(r"[0-9]")


def _is_ascii_number(text: str) -> bool:
    # str.isdigit() also accepts superscripts and other digits int() rejects
    return text.isascii() and text.isdigit()


def _in_range(hour: int, minute: int) -> Optional[Tuple[int, int]]:
    if 0 <= hour <= 23 and 0 <= minute <= 59:
        return hour, minute
    return None


def parse_hhmm(value: Optional[str]) -> Tuple[int, int]:
    """
    Parse a free-form time string into (hour, minute).

    Accepts "18:30", "18：30", "8:30", "1830", "830" and surrounding
    whitespace. Anything that cannot be read as a valid time of day
    falls back to 18:30; this function never raises.

    Args:
        value: User-entered time string

    Returns:
        Tuple of (hour, minute)

    Examples:
        >>> parse_hhmm("830")
        (8, 30)
        >>> parse_hhmm("25:00")
        (18, 30)
    """
    raw = (value or "").strip()
    if not raw:
        return DEFAULT_HOUR, DEFAULT_MINUTE

    normalized = raw
    for variant in _COLON_VARIANTS:
        normalized = normalized.replace(variant, ":")
    normalized = normalized.replace(" ", "")

    if ":" in normalized:
        parts = [p for p in normalized.split(":") if p]
        if len(parts) == 2 and all(_is_ascii_number(p) for p in parts):
            parsed = _in_range(int(parts[0]), int(parts[1]))
            if parsed:
                return parsed

    digits = "".join(_DIGITS.findall(normalized))
    if len(digits) in (3, 4):
        parsed = _in_range(int(digits[:-2]), int(digits[-2:]))
        if parsed:
            return parsed

    return DEFAULT_HOUR, DEFAULT_MINUTE


def is_valid_hhmm(value: Optional[str]) -> bool:
    """
    Check whether a string parses without falling back to the default.

    "18:30" itself is reported valid even though it equals the fallback.
    """
    raw = (value or "").strip()
    if not raw:
        return False
    if parse_hhmm(raw) != (DEFAULT_HOUR, DEFAULT_MINUTE):
        return True
    digits = "".join(_DIGITS.findall(raw))
    return digits == "1830"


def normalize_hhmm(value: Optional[str]) -> str:
    """Canonicalize a time string to zero-padded "HH:mm"."""
    hour, minute = parse_hhmm(value)
    return f"{hour:02d}:{minute:02d}"


def minutes_from_hhmm(value: Optional[str]) -> int:
    """Minutes since midnight for a time string."""
    hour, minute = parse_hhmm(value)
    return hour * 60 + minute


def hhmm_from_minutes(minutes: int) -> str:
    """
    Format minutes-of-day as "HH:mm", wrapping into a 24-hour cycle.

    Examples:
        >>> hhmm_from_minutes(1470)
        '00:30'
        >>> hhmm_from_minutes(-30)
        '23:30'
    """
    wrapped = minutes % MINUTES_PER_DAY
    return f"{wrapped // 60:02d}:{wrapped % 60:02d}"


def end_hhmm(start_hhmm: str, duration_minutes: int) -> str:
    """End time of a lesson that starts at start_hhmm."""
    return hhmm_from_minutes(minutes_from_hhmm(start_hhmm) + duration_minutes)


def normalize_duration(
    minutes: int,
    min_minutes: int = 30,
    max_minutes: int = 300,
    step: int = 10
) -> int:
    """
    Clamp a duration to [min, max] and round it to the nearest step.

    The rounded value is clamped again so rounding can never leave the
    allowed range. Halves round up.
    """
    clamped = max(min_minutes, min(max_minutes, minutes))
    rounded = ((clamped + step // 2) // step) * step if step > 0 else clamped
    return max(min_minutes, min(max_minutes, rounded))


def duration_from_range(
    start_hhmm: str,
    end_hhmm_value: str,
    min_minutes: int = 30,
    max_minutes: int = 300,
    step: int = 10
) -> int:
    """
    Derive a lesson duration from its start and end times.

    An end time at or before the start is treated as the next day.

    Args:
        start_hhmm: Start time string
        end_hhmm_value: End time string
        min_minutes: Lower bound of the result
        max_minutes: Upper bound of the result
        step: Rounding step in minutes

    Returns:
        Duration in minutes, normalized by normalize_duration()

    Examples:
        >>> duration_from_range("22:00", "00:30")
        150
    """
    start = minutes_from_hhmm(start_hhmm)
    end = minutes_from_hhmm(end_hhmm_value)
    if end <= start:
        end += MINUTES_PER_DAY
    return normalize_duration(end - start, min_minutes, max_minutes, step)


def _range_option_parts(value: Optional[str]) -> List[str]:
    normalized = (value or "").strip()
    for sep in _RANGE_SEPARATORS:
        normalized = normalized.replace(sep, _CANONICAL_RANGE_SEPARATOR)
    normalized = normalized.replace(" ", "")
    return [p for p in normalized.split(_CANONICAL_RANGE_SEPARATOR) if p]


def range_option_start(value: Optional[str]) -> str:
    """
    Start time of a template time option, whether or not it is a range.

    Examples:
        >>> range_option_start("8:30~10:30")
        '08:30'
        >>> range_option_start("1900")
        '19:00'
    """
    parts = _range_option_parts(value)
    return normalize_hhmm(parts[0] if parts else None)


def parse_time_range_option(value: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Parse a template time option such as "08:30–10:30".

    Returns:
        (start, end) as canonical "HH:mm" strings, or None when the
        option does not contain exactly two parts
    """
    parts = _range_option_parts(value)
    if len(parts) != 2:
        return None
    return normalize_hhmm(parts[0]), normalize_hhmm(parts[1])


def time_range_string(start_hhmm: str, duration_minutes: int) -> str:
    """Display form of a lesson slot, e.g. "18:30–20:30"."""
    start = normalize_hhmm(start_hhmm)
    return f"{start}{_CANONICAL_RANGE_SEPARATOR}{end_hhmm(start, duration_minutes)}"


# Dates

def start_of_day(value: Union[date, datetime]) -> datetime:
    """Midnight at the start of the given day."""
    day = value.date() if isinstance(value, datetime) else value
    return datetime.combine(day, time.min)


def as_date(value: Union[date, datetime]) -> date:
    """Calendar day of a date or datetime."""
    return value.date() if isinstance(value, datetime) else value


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def make_date(year: int, month: int, day: int) -> date:
    return date(year, month, day)


def compose_datetime(day: Union[date, datetime], hhmm: str) -> datetime:
    """Combine a calendar day with an "HH:mm" time into a local timestamp."""
    hour, minute = parse_hhmm(hhmm)
    return datetime.combine(as_date(day), time(hour, minute))


def weekday_number(day: Union[date, datetime]) -> int:
    """
    Weekday of a day numbered 1=Sunday ... 7=Saturday.

    Examples:
        >>> weekday_number(date(2026, 1, 25))  # a Sunday
        1
    """
    # date.isoweekday(): Monday=1 ... Sunday=7
    return as_date(day).isoweekday() % 7 + 1


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp into a naive local datetime.

    A trailing "Z" or offset is converted to local time. Returns None
    for empty or malformed input.
    """
    if not value or not isinstance(value, str):
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone().replace(tzinfo=None)
        except (OverflowError, ValueError):
            # Offset pushes the instant outside the representable range
            return None
    return parsed


def parse_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a persisted calendar date.

    Accepts "2026-01-23" as well as full timestamps, of which only the
    local calendar day is kept.
    """
    if not value or not isinstance(value, str):
        return None

    text = value.strip()
    if len(text) == 10:
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None

    parsed = parse_datetime(text)
    return parsed.date() if parsed else None
