"""In-process nonce store."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple

from ..utils.time import Clock, SystemClock
from .base import NonceStore


class InMemoryNonceStore(NonceStore):
    """Mapping of nonce to (consumed_at, expires_at), guarded by a lock.

    No await happens while the lock is held, so a mark is atomic across
    both event-loop tasks and OS threads.
    """

    def __init__(self, *, clock: Optional[Clock] = None, gc_interval_seconds: float = 60.0) -> None:
        self.clock = clock or SystemClock()
        self.gc_interval = timedelta(seconds=gc_interval_seconds)
        self._lock = threading.Lock()
        self._nonces: Dict[str, Tuple[datetime, datetime]] = {}
        self._next_gc: Optional[datetime] = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._nonces)

    async def mark_consumed(self, nonce: str, expires_at: datetime) -> bool:
        now = self.clock.now()
        with self._lock:
            if self._next_gc is None or now >= self._next_gc:
                self._gc(now)
            if nonce in self._nonces:
                return False
            self._nonces[nonce] = (now, expires_at)
            return True

    async def is_consumed(self, nonce: str) -> bool:
        with self._lock:
            return nonce in self._nonces

    async def purge_expired(self) -> int:
        now = self.clock.now()
        with self._lock:
            return self._gc(now)

    def _gc(self, now: datetime) -> int:
        expired = [k for k, (_, exp) in self._nonces.items() if exp <= now]
        for key in expired:
            self._nonces.pop(key, None)
        self._next_gc = now + self.gc_interval
        return len(expired)
