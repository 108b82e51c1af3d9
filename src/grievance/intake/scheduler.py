"""Clock abstraction and a poll-driven debouncer for autosave."""

from __future__ import annotations

import time
from datetime import date
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Source of monotonic time and of the current calendar date."""

    def monotonic(self) -> float: ...

    def today(self) -> date: ...


class SystemClock:
    """Clock backed by the process clock."""

    def monotonic(self) -> float:
        return time.monotonic()

    def today(self) -> date:
        return date.today()


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 0.0, today: date | None = None) -> None:
        self._now = start
        self._today = today or date.today()

    def monotonic(self) -> float:
        return self._now

    def today(self) -> date:
        return self._today

    def advance(self, seconds: float) -> None:
        self._now += seconds

    def set_today(self, today: date) -> None:
        self._today = today


class Debouncer:
    """Fires once ``delay`` seconds after the most recent ``touch()``.

    Nothing runs on its own: the owner calls ``due()`` from its tick and acts
    when it returns True.
    """

    def __init__(self, clock: Clock, delay: float) -> None:
        self._clock = clock
        self._delay = delay
        self._deadline: float | None = None

    @property
    def pending(self) -> bool:
        return self._deadline is not None

    def touch(self) -> None:
        self._deadline = self._clock.monotonic() + self._delay

    def cancel(self) -> None:
        self._deadline = None

    def due(self) -> bool:
        """Return True once per armed deadline that has passed."""
        if self._deadline is None or self._clock.monotonic() < self._deadline:
            return False
        self._deadline = None
        return True
