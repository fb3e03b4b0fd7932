"""Minute-of-day arithmetic for the daily schedule.

All schedule times are integers counting minutes from midnight. Intervals
are half-open ``[start, end)``, so two intervals that merely touch do not
overlap.
"""

DAY_START_MINUTE = 0
DAY_END_MINUTE = 1440  # exclusive end of the day
NOON_MINUTE = 720


def parse_time(time_str: str) -> int:
    """Convert an ``"H:MM"`` string to minutes from midnight.

    Uses raw 24-hour parsing without any AM/PM adjustment.

    Examples:
        >>> parse_time("7:30")
        450
        >>> parse_time("16:30")
        990
    """
    hours_str, _, mins_str = time_str.strip().partition(":")
    hours = int(hours_str)
    mins = int(mins_str) if mins_str else 0
    return hours * 60 + mins


def format_minutes(minutes: int) -> str:
    """Convert minutes from midnight back to an ``"H:MM"`` string.

    The inverse of :func:`parse_time`.
    """
    hours, mins = divmod(minutes, 60)
    return f"{hours}:{mins:02d}"


def format_display_time(minutes: int) -> str:
    """Format minutes from midnight as a 12-hour ``"H:MM AM"`` string."""
    hours24, mins = divmod(minutes, 60)
    period = "PM" if hours24 >= 12 else "AM"
    if hours24 == 0:
        hours12 = 12
    elif hours24 > 12:
        hours12 = hours24 - 12
    else:
        hours12 = hours24
    return f"{hours12}:{mins:02d} {period}"


def ranges_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    """Check whether ``[start1, end1)`` and ``[start2, end2)`` overlap."""
    return start1 < end2 and end1 > start2


def block_for_minute(minute: int) -> str:
    """Return the half-day block (``"AM"`` or ``"PM"``) a minute falls in."""
    return "AM" if minute < NOON_MINUTE else "PM"


def is_within_day(minute: int) -> bool:
    """Check if a minute value is a valid boundary within the day."""
    return DAY_START_MINUTE <= minute <= DAY_END_MINUTE
