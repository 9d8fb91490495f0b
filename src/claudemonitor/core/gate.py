"""Attempt throttle to keep expensive side effects from flapping."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from dataclasses import field
from datetime import UTC
from datetime import datetime
from datetime import timedelta


def utc_now() -> datetime:
    return datetime.now(UTC)


# Throttle windows
CREDENTIAL_COOLDOWN = timedelta(seconds=30)
AUTOMATION_INTERVAL = timedelta(seconds=60)


@dataclass
class Throttle:
    """Tracks the last attempt of an operation.

    An attempt is throttled while less than `interval` has passed since
    the last recorded one. Callers record before acting so an attempt
    that fails or hangs still counts.
    """

    interval: timedelta
    clock: Callable[[], datetime] = field(default=utc_now, repr=False)
    last_attempt: datetime | None = None

    def is_throttled(self) -> bool:
        """Check if an attempt now falls inside the interval."""
        if self.last_attempt is None:
            return False
        return self.clock() - self.last_attempt < self.interval

    def remaining(self) -> timedelta | None:
        """Get time remaining until the next attempt is allowed."""
        if self.last_attempt is None:
            return None

        remaining = self.last_attempt + self.interval - self.clock()
        if remaining.total_seconds() <= 0:
            return None
        return remaining

    def record(self) -> datetime:
        """Record an attempt at the current time."""
        self.last_attempt = self.clock()
        return self.last_attempt

    def reset(self) -> None:
        """Forget the last attempt."""
        self.last_attempt = None
