"""Nonce stores for single-use token enforcement."""

from __future__ import annotations

import os
from typing import Optional

from ..utils.time import Clock
from .base import NonceStore
from .memory import InMemoryNonceStore

__all__ = ["NonceStore", "InMemoryNonceStore", "PostgresNonceStore", "create_store_from_env"]


def __getattr__(name: str):
    if name == "PostgresNonceStore":
        from .postgres import PostgresNonceStore

        return PostgresNonceStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def create_store_from_env(*, clock: Optional[Clock] = None) -> NonceStore:
    """Create a Postgres store if a DSN is configured, otherwise in-memory."""
    dsn = os.getenv("FORMTOKEN_PG_DSN") or os.getenv("DATABASE_URL")
    if dsn:
        from .postgres import PostgresNonceStore

        return PostgresNonceStore(dsn=dsn, clock=clock)
    return InMemoryNonceStore(clock=clock)
