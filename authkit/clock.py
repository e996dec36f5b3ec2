"""
authkit - Clocks

Time source for rate limiting and token expiry. Everything time-dependent
in the engine asks an injected clock instead of calling ``datetime.now``.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    """Source of the current time (timezone-aware UTC)."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class ManualClock:
    """
    Clock that only moves when told to.

    Usage::

        clock = ManualClock()
        flow = PasswordResetFlow(directory, clock=clock)
        await flow.trigger("a@x.com")
        clock.advance(61)
        await flow.trigger("a@x.com")   # cooldown elapsed
    """

    def __init__(self, start: datetime | None = None):
        if start is None:
            start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        elif start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)
        self._now = start

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> datetime:
        """Move forward by ``seconds`` and return the new time."""
        if seconds < 0:
            raise ValueError("ManualClock cannot move backwards")
        self._now = self._now + timedelta(seconds=seconds)
        return self._now

    def set(self, moment: datetime) -> None:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        self._now = moment
