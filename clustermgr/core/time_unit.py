"""
Timeout units for the blocking management API.
"""

import math
from datetime import timedelta
from enum import Enum
from typing import Optional, Union

Timeout = Union[int, float, timedelta]


class TimeUnit(str, Enum):
    NANOSECONDS = "ns"
    MICROSECONDS = "us"
    MILLISECONDS = "ms"
    SECONDS = "s"
    MINUTES = "min"
    HOURS = "h"

    @property
    def seconds(self) -> float:
        """Length of one unit in seconds"""
        return _SECONDS_PER_UNIT[self]

    def to_seconds(self, amount: Union[int, float]) -> float:
        return amount * self.seconds


_SECONDS_PER_UNIT = {
    TimeUnit.NANOSECONDS: 1e-9,
    TimeUnit.MICROSECONDS: 1e-6,
    TimeUnit.MILLISECONDS: 1e-3,
    TimeUnit.SECONDS: 1.0,
    TimeUnit.MINUTES: 60.0,
    TimeUnit.HOURS: 3600.0,
}


def to_seconds(
    timeout: Optional[Timeout],
    unit: TimeUnit = TimeUnit.SECONDS,
    default: Optional[float] = None,
) -> float:
    """
    Resolve a caller supplied timeout to seconds.

    Args:
        timeout: Amount in ``unit``, a timedelta, or None for ``default``
        unit: Unit of a numeric ``timeout``
        default: Seconds to use when ``timeout`` is None

    Raises:
        ValueError: If the resulting timeout is missing, not finite or not positive
    """
    if timeout is None:
        if default is None:
            raise ValueError("timeout is required when no default is configured")
        seconds = float(default)
    elif isinstance(timeout, timedelta):
        seconds = timeout.total_seconds()
    elif isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
        raise ValueError(f"timeout must be a number or timedelta, got {type(timeout).__name__}")
    else:
        seconds = TimeUnit(unit).to_seconds(timeout)

    if not math.isfinite(seconds):
        raise ValueError(f"timeout must be finite, got {seconds}")
    if seconds <= 0:
        raise ValueError("timeout must be positive")
    return seconds
