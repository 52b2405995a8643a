"""UTC time helpers and injectable clocks."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def epoch_ms(value: datetime) -> int:
    """Return integer milliseconds since the epoch for an aware datetime."""
    return int(value.timestamp() * 1000)


def from_epoch_ms(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


class Clock(Protocol):
    """Source of the current time for issuers, verifiers and stores."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock backed by :func:`utc_now`."""

    def now(self) -> datetime:
        return utc_now()


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self._now = start or utc_now()

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> datetime:
        self._now = self._now + timedelta(seconds=seconds)
        return self._now

    def set(self, value: datetime) -> None:
        if value.tzinfo is None:
            raise ValueError("ManualClock requires an aware datetime.")
        self._now = value
