"""Step location indicator (the ``step`` query parameter) and history."""

from __future__ import annotations

from typing import Protocol, runtime_checkable
from urllib.parse import parse_qs

from grievance.intake.models import REVIEW_STEP

STEP_PARAM = "step"


def parse_step_param(raw: str | int | None, last_step: int = REVIEW_STEP) -> int:
    """Return the step named by a location indicator, defaulting to 0.

    Accepts a bare value (``"2"``) or a query string (``"?step=2"``). Missing,
    malformed, and out-of-range values all map to step 0.
    """
    if raw is None:
        return 0
    if isinstance(raw, int):
        value = str(raw)
    else:
        value = raw.strip()
        if "=" in value:
            values = parse_qs(value.lstrip("?")).get(STEP_PARAM)
            if not values:
                return 0
            value = values[0]
    try:
        step = int(value)
    except ValueError:
        return 0
    if step < 0 or step > last_step:
        return 0
    return step


def step_query(step: int) -> str:
    return f"?{STEP_PARAM}={step}"


@runtime_checkable
class Navigator(Protocol):
    """Receives location changes made by the wizard."""

    def push(self, location: str) -> None: ...

    def replace(self, location: str) -> None: ...


class HistoryNavigator:
    """In-memory browser-style history stack."""

    def __init__(self, initial: str | None = None) -> None:
        self._entries: list[str] = [initial or step_query(0)]
        self._index = 0

    @property
    def location(self) -> str:
        return self._entries[self._index]

    @property
    def entries(self) -> list[str]:
        return list(self._entries[: self._index + 1])

    def push(self, location: str) -> None:
        del self._entries[self._index + 1 :]
        self._entries.append(location)
        self._index += 1

    def replace(self, location: str) -> None:
        self._entries[self._index] = location

    def go_back(self) -> str:
        if self._index > 0:
            self._index -= 1
        return self.location

    def go_forward(self) -> str:
        if self._index < len(self._entries) - 1:
            self._index += 1
        return self.location
