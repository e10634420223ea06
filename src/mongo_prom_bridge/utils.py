"""
Timestamp and duration helpers for Prometheus-style query parameters.
"""

import math
import re
import time
from datetime import datetime, timedelta, timezone


SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = SECONDS_PER_MINUTE * 60
SECONDS_PER_DAY = SECONDS_PER_HOUR * 24

RFC3339_PATTERN = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})[Tt ](?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d{1,9}))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2})$"
)

_DURATION_UNITS = {
    "y": SECONDS_PER_DAY * 365,
    "w": SECONDS_PER_DAY * 7,
    "d": SECONDS_PER_DAY,
    "h": SECONDS_PER_HOUR,
    "m": SECONDS_PER_MINUTE,
    "s": 1,
    "ms": 0.001,
}
_DURATION_PATTERN = re.compile(r"(\d+)(ms|y|w|d|h|m|s)")


def now_seconds() -> float:
    """
    Get current time as fractional Unix seconds.

    Returns:
        Current timestamp in seconds.
    """
    return time.time()


def datetime_to_seconds(value: datetime) -> float:
    """
    Convert a datetime to fractional Unix seconds.

    Naive datetimes are taken to be UTC, which is how pymongo hands back
    BSON dates by default.

    Args:
        value: Datetime to convert.

    Returns:
        Timestamp in seconds.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def seconds_to_datetime(seconds: float) -> datetime:
    """
    Convert fractional Unix seconds to a timezone-aware UTC datetime.

    Args:
        seconds: Unix timestamp in seconds.

    Returns:
        Datetime in UTC.
    """
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def parse_rfc3339(text: str, allow_fraction: bool = True) -> float:
    """
    Parse an RFC3339 timestamp into fractional Unix seconds.

    Fractions finer than microseconds are kept in the returned float.

    Args:
        text: Timestamp such as "2024-01-01T00:00:00.123456789Z".
        allow_fraction: Reject fractional seconds when False.

    Returns:
        Timestamp in seconds.

    Raises:
        ValueError: If the text is not RFC3339.
    """
    match = RFC3339_PATTERN.match(text.strip())
    if match is None or (match.group("fraction") and not allow_fraction):
        raise ValueError(f"cannot parse {text!r} as RFC3339")

    offset = match.group("offset")
    if offset in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = -1 if offset[0] == "-" else 1
        hours, minutes = int(offset[1:3]), int(offset[4:6])
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))

    whole = datetime.strptime(
        f"{match.group('date')}T{match.group('time')}", "%Y-%m-%dT%H:%M:%S"
    ).replace(tzinfo=tz)

    fraction = match.group("fraction")
    seconds = whole.timestamp()
    if fraction:
        seconds += int(fraction) / 10 ** len(fraction)
    return seconds


def parse_time(text: str) -> float:
    """
    Parse a query time parameter (Unix seconds or RFC3339).

    Args:
        text: Parameter value, e.g. "1704067200", "1704067200.5" or
            "2024-01-01T00:00:00Z".

    Returns:
        Timestamp in seconds.

    Raises:
        ValueError: If the value is empty or in neither format.
    """
    if text is None or not str(text).strip():
        raise ValueError("empty time string")
    text = str(text).strip()

    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds):
            raise ValueError(f"cannot parse {text!r}: not a finite timestamp")
        return seconds

    try:
        return parse_rfc3339(text)
    except ValueError:
        raise ValueError(f"cannot parse {text!r}: invalid format") from None


def parse_duration(text: str) -> float:
    """
    Parse a step/duration parameter into seconds.

    Accepts float seconds ("15", "0.5") or Prometheus duration syntax
    ("5m", "1h30m", "250ms").

    Args:
        text: Parameter value.

    Returns:
        Duration in seconds.

    Raises:
        ValueError: If the value is empty or not a duration.
    """
    if text is None or not str(text).strip():
        raise ValueError("empty duration string")
    text = str(text).strip()

    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds):
            raise ValueError(f"cannot parse {text!r}: not a finite duration")
        return seconds

    position = 0
    total = 0.0
    for match in _DURATION_PATTERN.finditer(text):
        if match.start() != position:
            break
        total += int(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()

    if position == 0 or position != len(text):
        raise ValueError(f"cannot parse {text!r}: invalid format")
    return total
