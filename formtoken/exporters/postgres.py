"""PostgreSQL exporter for guard decisions."""

from __future__ import annotations

import asyncio
from typing import Optional

import asyncpg

from ..core.context import GuardContext
from .base import Exporter


INSERT_SQL = """
INSERT INTO form_guard_audit (
    request_id,
    method,
    path,
    form_name,
    state,
    reason,
    token_present,
    start_time,
    end_time
)
VALUES (
    $1::uuid, $2, $3, $4, $5, $6, $7, $8, $9
)
"""


class PostgresExporter(Exporter):
    """Exporter that persists guard decisions into PostgreSQL using ``asyncpg``."""

    def __init__(
        self,
        dsn: Optional[str] = None,
        *,
        pool: Optional[asyncpg.Pool] = None,
        min_size: int = 1,
        max_size: int = 10,
    ) -> None:
        self._dsn = dsn
        self._pool = pool
        self._min_size = min_size
        self._max_size = max_size
        self._connect_lock = asyncio.Lock()

    async def connect(self) -> None:
        """Initialize a connection pool if one was not supplied."""
        if self._pool is not None:
            return
        if not self._dsn:
            raise ValueError("Either `dsn` or `pool` must be provided for PostgresExporter.")

        async with self._connect_lock:
            if self._pool is not None:
                return
            self._pool = await asyncpg.create_pool(
                dsn=self._dsn,
                min_size=self._min_size,
                max_size=self._max_size,
            )

    async def export(self, context: GuardContext) -> None:
        """Insert a finished guard context into PostgreSQL."""
        if self._pool is None:
            await self.connect()

        assert self._pool is not None
        payload = context.to_dict()

        async with self._pool.acquire() as conn:
            await conn.execute(
                INSERT_SQL,
                payload["request_id"],
                payload["method"],
                payload["path"],
                payload["form_name"],
                payload["state"],
                payload["reason"],
                payload["token_present"],
                payload["start_time"],
                payload["end_time"],
            )

    async def close(self) -> None:
        """Close the underlying pool if it exists."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
