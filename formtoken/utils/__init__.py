"""Utility helpers for time operations."""

from .time import Clock, ManualClock, SystemClock, epoch_ms, from_epoch_ms, utc_now

__all__ = ["Clock", "ManualClock", "SystemClock", "epoch_ms", "from_epoch_ms", "utc_now"]
