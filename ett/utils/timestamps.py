"""Timestamp helpers and the injectable clock used by both engines."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Union

Clock = Callable[[], datetime]
Timestamp = Union[str, datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Timestamp) -> datetime:
    """Return an aware datetime for an ISO-8601 string or datetime; naive values are taken as UTC."""

    if isinstance(value, datetime):
        parsed = value
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_millis(value: Timestamp) -> int:
    return int(round(parse_timestamp(value).timestamp() * 1000))


def now_millis(clock: Clock = utc_now) -> int:
    return to_millis(clock())


def to_iso(value: datetime) -> str:
    """Render in the `2024-11-04T18:00:00.000Z` form stored on records."""

    utc = parse_timestamp(value).astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def from_millis_iso(millis: int) -> str:
    return to_iso(datetime.fromtimestamp(millis / 1000, tz=timezone.utc))
