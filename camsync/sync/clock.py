"""
Clock domains used to timestamp frames.

Two clocks are used, both in integer microseconds:
    - monotonic: never goes backward, arbitrary origin, used to order captures
    - utc: wall clock (microseconds since epoch), used to align devices

The offset between them is sampled once per process:

    monotonic + offset = utc
"""

import threading
import time
from typing import Callable, Optional

from ..utils.logger import LoggerMixin

_US_PER_MS = 1000
_US_PER_S = 1000 * _US_PER_MS
_US_PER_MIN = 60 * _US_PER_S
_US_PER_HOUR = 60 * _US_PER_MIN
_US_PER_DAY = 24 * _US_PER_HOUR


def get_time_stamp() -> int:
    """Current monotonic time in microseconds."""
    return time.monotonic_ns() // 1000


def get_utc_time_stamp() -> int:
    """Current wall clock time in microseconds since epoch."""
    return time.time_ns() // 1000


class SteadyClockOffset(LoggerMixin):
    """
    Offset from the monotonic clock to the wall clock, sampled on first use.

    The measurement is taken once, under a lock, and never updated afterwards:
    readers after initialization see an immutable value.

    Example:
        >>> tracker = SteadyClockOffset()
        >>> utc = get_time_stamp() + tracker.get()
    """

    def __init__(
        self,
        monotonic_clock: Callable[[], int] = get_time_stamp,
        utc_clock: Callable[[], int] = get_utc_time_stamp,
    ):
        """
        Args:
            monotonic_clock: Returns monotonic time (us).
            utc_clock: Returns wall clock time (us).
        """
        self._monotonic_clock = monotonic_clock
        self._utc_clock = utc_clock
        self._lock = threading.Lock()
        self._offset: Optional[int] = None

    @property
    def is_initialized(self) -> bool:
        return self._offset is not None

    def get(self) -> int:
        """Return the offset (us) such that monotonic + offset = utc."""
        offset = self._offset
        if offset is None:
            with self._lock:
                if self._offset is None:
                    self._offset = self._measure()
                offset = self._offset
        return offset

    def _measure(self) -> int:
        # The wall clock is read between two monotonic samples
        before = self._monotonic_clock()
        utc = self._utc_clock()
        after = self._monotonic_clock()
        offset = utc - (before + after) // 2
        self.logger.debug(f"Steady clock offset sampled: {offset} us (sampling window {after - before} us)")
        return offset


_PROCESS_OFFSET = SteadyClockOffset()


def get_steady_clock_offset() -> int:
    """Process-wide offset (us) from the monotonic clock to the wall clock."""
    return _PROCESS_OFFSET.get()


def monotonic_to_utc(time_stamp: int, offset: Optional[int] = None) -> int:
    """Convert a monotonic timestamp (us) to the wall clock domain."""
    return time_stamp + (get_steady_clock_offset() if offset is None else offset)


def utc_to_monotonic(time_stamp: int, offset: Optional[int] = None) -> int:
    """Convert a wall clock timestamp (us) to the monotonic domain."""
    return time_stamp - (get_steady_clock_offset() if offset is None else offset)


def get_pretty_duration(duration_us: int) -> str:
    """
    Format a duration as ..d:..h:..m:..s:...ms, showing only non-zero parts.

    Sub-millisecond remainders are dropped.

    Example:
        >>> get_pretty_duration(3_723_004_000)
        '1h:2m:3s:4ms'
    """
    if duration_us < 0:
        raise ValueError(f"duration_us must be non-negative, got {duration_us}")

    parts = []
    remaining = int(duration_us)
    for unit_us, suffix in (
        (_US_PER_DAY, "d"),
        (_US_PER_HOUR, "h"),
        (_US_PER_MIN, "m"),
        (_US_PER_S, "s"),
        (_US_PER_MS, "ms"),
    ):
        value, remaining = divmod(remaining, unit_us)
        if value:
            parts.append(f"{value}{suffix}")

    return ":".join(parts) if parts else "0ms"


def get_formatted_time() -> str:
    """Local time formatted as YYYY_MM_DD_HHhMMmSSs, e.g. 2018_09_25_17h23m12s."""
    return time.strftime("%Y_%m_%d_%Hh%Mm%Ss", time.localtime())
