"""Type aliases and time units for layercache-redis."""

from __future__ import annotations

from datetime import timedelta
from enum import Enum

# Keys are always text at the API surface; the key serializer turns them into bytes
type KeyT = str

# Relative expiry - matches redis.typing.ExpiryT
type ExpiryT = int | timedelta


class TimeUnit(Enum):
    """Units for relative timeouts, valued in nanoseconds."""

    NANOSECONDS = 1
    MICROSECONDS = 1_000
    MILLISECONDS = 1_000_000
    SECONDS = 1_000_000_000
    MINUTES = 60 * 1_000_000_000
    HOURS = 3_600 * 1_000_000_000
    DAYS = 86_400 * 1_000_000_000

    def to_seconds(self, duration: int) -> int:
        """Convert ``duration`` in this unit to whole seconds, truncating toward zero.

        >>> TimeUnit.MILLISECONDS.to_seconds(2500)
        2
        """
        nanos = duration * self.value
        seconds = abs(nanos) // TimeUnit.SECONDS.value
        return seconds if nanos >= 0 else -seconds


def to_seconds(timeout: ExpiryT, unit: TimeUnit = TimeUnit.SECONDS) -> int:
    """Normalise a timeout to whole seconds.

    A ``timedelta`` ignores ``unit``; an ``int`` is read in ``unit``. Sub-second
    remainders are dropped.
    """
    if isinstance(timeout, timedelta):
        return int(timeout.total_seconds())
    return unit.to_seconds(int(timeout))
