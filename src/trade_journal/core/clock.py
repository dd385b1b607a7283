"""Clock abstraction for time-dependent journal code.

WallClock: real wall-clock time
SimClock: fixed, manually advanced time (tests, imports of historic data)

Record construction and the month presets take a clock instead of calling
datetime.now() directly.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Protocol


class IClock(Protocol):
    """Clock interface used by all time-dependent code."""

    def now(self) -> datetime:
        """Current time as timezone-aware UTC datetime."""
        ...

    def now_ms(self) -> int:
        """Current time as milliseconds since epoch."""
        ...


class WallClock:
    """Real wall-clock time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def now_ms(self) -> int:
        return int(self.now().timestamp() * 1000)


class SimClock:
    """Simulated clock.

    Time advances only when explicitly set.
    """

    def __init__(self, start: datetime | None = None) -> None:
        self._time = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._time

    def now_ms(self) -> int:
        return int(self._time.timestamp() * 1000)

    def set_time(self, t: datetime) -> None:
        """Move the clock. Must be monotonically increasing."""
        if t < self._time:
            raise ValueError(
                f"SimClock cannot go backwards: {t} < {self._time}"
            )
        self._time = t

    def advance_ms(self, ms: int) -> None:
        """Advance time by milliseconds."""
        self.set_time(self._time + timedelta(milliseconds=ms))


def local_today(clock: IClock) -> date:
    """Calendar date of *clock* in the machine's local timezone."""
    return clock.now().astimezone().date()
