from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol, Tuple


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """UTC wall clock, naive and truncated to seconds to match stored timestamps."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


class FixedClock:
    def __init__(self, moment: datetime) -> None:
        self._moment = moment

    def now(self) -> datetime:
        return self._moment

    def advance(self, **delta: float) -> None:
        self._moment = self._moment + timedelta(**delta)


def day_bounds(clock: Clock) -> Tuple[datetime, datetime]:
    start = clock.now().replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)
