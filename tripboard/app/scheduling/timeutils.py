"""Wall-clock helpers: HH:mm <-> minutes since midnight."""

import math
from datetime import date

MINUTES_PER_DAY = 1440


def time_to_minutes(t: str | None) -> int:
    """Convert an HH:mm string to minutes since midnight.

    Missing or unparsable input is treated as 0 so callers stay total.
    """
    if not t or ":" not in t:
        return 0
    hours, _, minutes = t.partition(":")
    try:
        return int(hours) * 60 + int(minutes)
    except ValueError:
        return 0


def minutes_to_time(m: int | float) -> str:
    """Convert minutes to a zero-padded HH:mm string, wrapping at 24h."""
    m = int(m) % MINUTES_PER_DAY
    return f"{m // 60:02d}:{m % 60:02d}"


def round_up_to_five(m: int | float, step: int = 5) -> int:
    """Ceiling to the next multiple of step (5 minutes by default)."""
    return math.ceil(m / step) * step


def relative_minutes(t: str | None, day_start: str) -> int:
    """Minutes of t relative to a day starting at day_start.

    Times earlier than the day start belong to the small hours after midnight,
    so they are pushed past 24:00.
    """
    if not t:
        return 0
    minutes = time_to_minutes(t)
    if minutes < time_to_minutes(day_start):
        minutes += MINUTES_PER_DAY
    return minutes


def format_duration(seconds: int) -> str:
    """Format a total trip duration, e.g. "2h 5m" or "45m"."""
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    return f"{hours}h {minutes}m" if hours > 0 else f"{minutes}m"


def format_leg_duration(minutes: int) -> str:
    """Format a single leg's duration, e.g. "1 hr 5 min" or "12 min"."""
    hours, mins = divmod(minutes, 60)
    return f"{hours} hr {mins} min" if hours > 0 else f"{mins} min"


def parse_iso_date(value: str | None) -> date | None:
    """Parse a YYYY-MM-DD day date; anything else gives None."""
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None
