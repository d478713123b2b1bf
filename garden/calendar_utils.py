"""Date helpers shared by the bed grid, the succession generator and the
calendar view.

All dates cross module boundaries as canonical ISO strings::

    "2026-04-30"

Anything that cannot be understood as a calendar date degrades to ``None``
(or ``""`` for display) instead of raising, so callers can simply omit the
event or reject the action.
"""

from datetime import date, datetime, timedelta


def parse_date(value) -> date | None:
    """Turn *value* into a ``datetime.date``, or ``None`` if it isn't one.

    Accepts ``date`` / ``datetime`` objects and ISO strings.  A time part
    after the date (``"2026-04-30T08:00"``) is ignored.

    Examples:
        >>> parse_date("2026-04-30")
        datetime.date(2026, 4, 30)
        >>> parse_date("April") is None
        True
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    try:
        if len(text) <= 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def to_canonical(value) -> str | None:
    """Normalise *value* to ``YYYY-MM-DD``; ``None`` if it isn't a date."""
    d = parse_date(value)
    return d.isoformat() if d is not None else None


def _as_days(days) -> int | None:
    # bool is an int subclass but never a meaningful offset
    if isinstance(days, bool):
        return None
    if isinstance(days, int):
        return days
    if isinstance(days, float) and days.is_integer():
        return int(days)
    return None


def add_offset(date_str, days) -> str | None:
    """Shift *date_str* by *days* calendar days.

    Returns ``None`` when the date is invalid, *days* is not an integer,
    or the result falls outside the representable calendar.

    Examples:
        >>> add_offset("2024-05-15", -56)
        '2024-03-20'
        >>> add_offset("2026-12-25", 10)
        '2027-01-04'
    """
    d = parse_date(date_str)
    n = _as_days(days)
    if d is None or n is None:
        return None
    try:
        return (d + timedelta(days=n)).isoformat()
    except OverflowError:
        return None


def days_between(start, end) -> int | None:
    """Whole days from *start* to *end* (negative if *end* is earlier)."""
    a, b = parse_date(start), parse_date(end)
    if a is None or b is None:
        return None
    return (b - a).days


def format_display(date_str) -> str:
    """Short, locale-aware label such as ``"Apr 30"``.

    Empty string for missing or invalid input.
    """
    d = parse_date(date_str)
    if d is None:
        return ""
    return f"{d:%b} {d.day}"
