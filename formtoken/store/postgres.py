"""Postgres-backed nonce store using asyncpg."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from typing import Optional

import asyncpg

from ..errors import StoreUnavailableError
from ..utils.time import Clock, SystemClock
from .base import NonceStore

MARK_SQL = """
INSERT INTO form_token_nonces (nonce, consumed_at, expires_at)
VALUES ($1, $2, $3)
ON CONFLICT (nonce) DO NOTHING
RETURNING nonce
"""

PURGE_SQL = "DELETE FROM form_token_nonces WHERE expires_at <= $1"

_BACKEND_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


class PostgresNonceStore(NonceStore):
    """Nonce registry shared across processes.

    ``mark_consumed`` is a single insert-if-absent statement, so it either
    commits or does not run at all. Expired rows are deleted on the way in,
    at most once per ``gc_interval_seconds``.
    """

    def __init__(
        self,
        dsn: Optional[str] = None,
        *,
        pool: Optional[asyncpg.Pool] = None,
        clock: Optional[Clock] = None,
        min_size: int = 1,
        max_size: int = 4,
        gc_interval_seconds: float = 60.0,
    ) -> None:
        self._dsn = dsn
        self._pool = pool
        self.clock = clock or SystemClock()
        self._min_size = min_size
        self._max_size = max_size
        self.gc_interval = timedelta(seconds=gc_interval_seconds)
        self._next_gc: Optional[datetime] = None
        self._connect_lock = asyncio.Lock()

    async def connect(self) -> None:
        if self._pool is not None:
            return
        if not self._dsn:
            raise ValueError("Either `dsn` or `pool` must be provided for PostgresNonceStore.")
        async with self._connect_lock:
            if self._pool is not None:
                return
            try:
                self._pool = await asyncpg.create_pool(dsn=self._dsn, min_size=self._min_size, max_size=self._max_size)
            except _BACKEND_ERRORS as exc:
                raise StoreUnavailableError("could not connect to nonce store") from exc

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    async def mark_consumed(self, nonce: str, expires_at: datetime) -> bool:
        await self.connect()
        assert self._pool is not None
        now = self.clock.now()
        try:
            async with self._pool.acquire() as conn:
                if self._next_gc is None or now >= self._next_gc:
                    self._next_gc = now + self.gc_interval
                    await conn.execute(PURGE_SQL, now)
                inserted = await conn.fetchval(MARK_SQL, nonce, now, expires_at)
        except _BACKEND_ERRORS as exc:
            raise StoreUnavailableError("nonce store query failed") from exc
        return inserted is not None

    async def is_consumed(self, nonce: str) -> bool:
        await self.connect()
        assert self._pool is not None
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow("SELECT nonce FROM form_token_nonces WHERE nonce=$1", nonce)
        except _BACKEND_ERRORS as exc:
            raise StoreUnavailableError("nonce store query failed") from exc
        return row is not None

    async def purge_expired(self) -> int:
        await self.connect()
        assert self._pool is not None
        try:
            async with self._pool.acquire() as conn:
                status = await conn.execute(PURGE_SQL, self.clock.now())
        except _BACKEND_ERRORS as exc:
            raise StoreUnavailableError("nonce store query failed") from exc
        # status looks like "DELETE 3"
        return int(status.split()[-1])
