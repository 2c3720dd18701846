"""Timestamp resolution for heterogeneous producer encodings.

The ClickHouse column value is always written in UTC. A timestamp sent with
an offset, such as ``2024-01-01T08:00:00+08:00``, is stored as
``2024-01-01 00:00:00`` rather than as its local wall-clock time, so
ClickHouse servers running in another timezone must interpret the column
as UTC.
"""

import re
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

_RFC3339 = re.compile(
    r"(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})"
    r"(?P<fraction>\.\d+)?"
    r"(?P<zone>Z|[+-]\d{2}:\d{2})"
)


def _zone(text: str) -> timezone:
    if text == "Z":
        return timezone.utc
    sign = -1 if text[0] == "-" else 1
    hours, minutes = int(text[1:3]), int(text[4:6])
    if hours > 23 or minutes > 59:
        raise ValueError(f"invalid UTC offset: {text}")
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def _parse_rfc3339(value: str, require_fraction: bool = False) -> datetime:
    """Parse an RFC3339 timestamp.

    Fractions finer than microseconds are truncated.

    Raises:
        ValueError: If the value is not RFC3339.
    """
    match = _RFC3339.fullmatch(value)
    if match is None or (require_fraction and not match["fraction"]):
        raise ValueError(f"not an RFC3339 timestamp: {value!r}")
    parsed = datetime.strptime(match["base"], "%Y-%m-%dT%H:%M:%S")
    microsecond = 0
    if match["fraction"]:
        microsecond = int(match["fraction"][1:7].ljust(6, "0"))
    return parsed.replace(microsecond=microsecond, tzinfo=_zone(match["zone"]))


def _parse_rfc3339_nano(value: str) -> datetime:
    return _parse_rfc3339(value, require_fraction=True)


def _utc_format(fmt: str) -> Callable[[str], datetime]:
    def parse(value: str) -> datetime:
        return datetime.strptime(value, fmt).replace(tzinfo=timezone.utc)

    parse.__name__ = f"parse_{fmt}"
    return parse


# Order matters: the first parser that accepts the string wins.
TIMESTAMP_PARSERS: tuple[Callable[[str], datetime], ...] = (
    _parse_rfc3339,
    _parse_rfc3339_nano,
    _utc_format("%Y-%m-%dT%H:%M:%S.%fZ"),
    _utc_format("%Y-%m-%dT%H:%M:%SZ"),
    _utc_format("%Y-%m-%d %H:%M:%S"),
)


def utc_now() -> datetime:
    """Return the current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def resolve_timestamp(value: Any, now: datetime | None = None) -> datetime:
    """Resolve a producer timestamp into a concrete instant.

    Resolution never fails: values that cannot be interpreted fall back to
    the current time.

    Args:
        value: None, a datetime, or a string in one of the recognized
            encodings. Any other type is treated as unresolvable.
        now: Fallback instant. Defaults to the current UTC time.

    Returns:
        A timezone-aware datetime. Naive inputs are taken as UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, str):
        for parse in TIMESTAMP_PARSERS:
            try:
                return parse(value)
            except ValueError:
                continue
    return now if now is not None else utc_now()


def format_rfc3339(value: datetime) -> str:
    """Format an aware datetime as RFC3339 in UTC (``Z`` suffix)."""
    text = value.astimezone(timezone.utc).isoformat()
    return text.replace("+00:00", "Z")


def format_column(value: datetime) -> str:
    """Format an instant for a ClickHouse DateTime column (UTC)."""
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
