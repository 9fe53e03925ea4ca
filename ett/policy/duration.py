"""Human readable rendering of durations for logs and diagnostics."""

from __future__ import annotations

from typing import List, Sequence, Tuple

# Milliseconds per unit, using the calendar averages common to duration humanizers.
UNIT_MILLISECONDS = {
    "y": 31557600000,
    "mo": 2629800000,
    "w": 604800000,
    "d": 86400000,
    "h": 3600000,
    "m": 60000,
    "s": 1000,
    "ms": 1,
}

UNIT_NAMES = {
    "y": ("year", "years"),
    "mo": ("month", "months"),
    "w": ("week", "weeks"),
    "d": ("day", "days"),
    "h": ("hour", "hours"),
    "m": ("minute", "minutes"),
    "s": ("second", "seconds"),
    "ms": ("millisecond", "milliseconds"),
}

DEFAULT_UNITS: Tuple[str, ...] = ("y", "mo", "w", "d", "h", "m", "s")
DAY_FAVORING_UNITS: Tuple[str, ...] = ("d", "h", "m", "s", "ms")


def _format_count(count: float, unit: str) -> str:
    singular, plural = UNIT_NAMES[unit]
    if count == int(count):
        count = int(count)
        return f"{count} {singular if count == 1 else plural}"
    return f"{round(count, 2):g} {plural}"


def humanize(duration_ms: float, units: Sequence[str] = DEFAULT_UNITS) -> str:
    remaining = abs(duration_ms)
    pieces: List[str] = []
    smallest = units[-1]
    for unit in units:
        size = UNIT_MILLISECONDS[unit]
        if unit == smallest:
            count = remaining / size
        else:
            count = remaining // size
            remaining -= count * size
        if count:
            pieces.append(_format_count(count, unit))
    if not pieces:
        return _format_count(0, smallest)
    return ", ".join(pieces)


def human_readable_from_milliseconds(duration: float) -> str:
    units = DEFAULT_UNITS
    if UNIT_MILLISECONDS["d"] <= duration < UNIT_MILLISECONDS["y"]:
        # Favor days over weeks and months until the duration reaches a year.
        units = DAY_FAVORING_UNITS
    return humanize(duration, units)


def human_readable_from_seconds(duration: float) -> str:
    return human_readable_from_milliseconds(duration * 1000)


def human_readable_from_minutes(duration: float) -> str:
    return human_readable_from_seconds(duration * 60)


def human_readable_from_hours(duration: float) -> str:
    return human_readable_from_minutes(duration * 60)


def human_readable_from_days(duration: float) -> str:
    return human_readable_from_hours(duration * 24)
