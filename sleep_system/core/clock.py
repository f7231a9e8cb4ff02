"""
Clock arithmetic on naive HH:MM times of day.

All times live on a single 24h dial (1440 minutes). Distances either run
forward with a wrap past midnight (event -> bedtime) or take the short way
round the dial (actual vs. target).
"""

import math
from decimal import ROUND_HALF_UP, Decimal

MINUTES_PER_DAY = 24 * 60


def to_minutes(time: str) -> int:
    """Parse HH:MM into a minute offset in [0, 1440)."""
    try:
        hours, minutes = (int(part) for part in time.split(":"))
    except (AttributeError, ValueError):
        raise ValueError(f"Invalid time of day: {time!r}") from None
    return (hours * 60 + minutes) % MINUTES_PER_DAY


def from_minutes(minutes: int) -> str:
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def forward_span(from_time: str, to_time: str) -> int:
    """
    Minutes from from_time to to_time moving forward, wrapping past midnight.
    Equal times give 0, never 1440.
    """
    return (to_minutes(to_time) - to_minutes(from_time)) % MINUTES_PER_DAY


def circular_deviation(a: str, b: str) -> int:
    """Shortest distance around the 24h dial, in [0, 720]."""
    diff = abs(to_minutes(a) - to_minutes(b))
    return min(diff, MINUTES_PER_DAY - diff)


def hours_before(event_time: str, bedtime: str) -> float:
    """How long before bedtime the event happened, in [0, 24)."""
    return forward_span(event_time, bedtime) / 60.0


def round_half_up(value: float) -> int:
    """Round halves toward +inf (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def average_time(times: list[str]) -> str:
    """Arithmetic mean of the minute offsets, formatted HH:MM."""
    if not times:
        return "00:00"
    total = sum(to_minutes(t) for t in times)
    return from_minutes(round_half_up(total / len(times)))


def format_duration(minutes: int) -> str:
    """'7h 30m' style display."""
    return f"{minutes // 60}h {minutes % 60}m"


def format_tenths(value: float) -> str:
    """
    One decimal place, half-up on the exact binary value: 9/60 is stored as
    0.1499..., so it prints "0.1", not "0.2".
    """
    return str(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def format_number(value: float) -> str:
    """Drop a trailing .0 so whole quantities print as integers."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"
