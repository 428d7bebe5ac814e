"""Duration units used to rescale timer and histogram values"""
from datetime import timedelta
from typing import NamedTuple, Optional, Union

NANOSECOND = 1
MICROSECOND = 1_000 * NANOSECOND
MILLISECOND = 1_000 * MICROSECOND
SECOND = 1_000 * MILLISECOND


class TimeUnit(NamedTuple):
    """Display name and nanosecond magnitude of a duration unit"""
    name: str
    nanoseconds: int


_UNIT_NAMES = {
    SECOND: "seconds",
    MILLISECOND: "milliseconds",
    MICROSECOND: "microseconds",
    NANOSECOND: "nanoseconds",
}

_UNIT_ALIASES = {
    "s": SECOND, "sec": SECOND, "second": SECOND, "seconds": SECOND,
    "ms": MILLISECOND, "millisecond": MILLISECOND, "milliseconds": MILLISECOND,
    "us": MICROSECOND, "µs": MICROSECOND, "microsecond": MICROSECOND, "microseconds": MICROSECOND,
    "ns": NANOSECOND, "nanosecond": NANOSECOND, "nanoseconds": NANOSECOND,
}

DEFAULT_TIME_UNIT = TimeUnit(_UNIT_NAMES[MILLISECOND], MILLISECOND)


def resolve_time_unit(unit: Optional[int]) -> TimeUnit:
    """Resolve a nanosecond magnitude to a TimeUnit.

    Anything other than one second, millisecond, microsecond or nanosecond
    (including 0 and None) resolves to milliseconds.
    """
    if unit in _UNIT_NAMES:
        return TimeUnit(_UNIT_NAMES[unit], unit)
    return DEFAULT_TIME_UNIT


def parse_time_unit(value: Union[None, int, str, timedelta]) -> int:
    """Turn a configured unit (magnitude, timedelta or name) into nanoseconds"""
    if value is None:
        return MILLISECOND
    if isinstance(value, timedelta):
        value = (value.days * 86_400 + value.seconds) * SECOND + value.microseconds * MICROSECOND
    if isinstance(value, str):
        stripped = value.strip().lower()
        if stripped.isdigit():
            value = int(stripped)
        else:
            return _UNIT_ALIASES.get(stripped, MILLISECOND)
    return resolve_time_unit(int(value)).nanoseconds
