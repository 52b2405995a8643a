"""Nonce store interface for single-use token enforcement."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class NonceStore(ABC):
    """Abstract registry of consumed token nonces."""

    @abstractmethod
    async def mark_consumed(self, nonce: str, expires_at: datetime) -> bool:
        """Record ``nonce`` as spent. Return False if it was already spent.

        At most one caller may observe True for a given nonce.
        """

    @abstractmethod
    async def is_consumed(self, nonce: str) -> bool:
        """Return True if ``nonce`` has been spent and not yet evicted."""

    @abstractmethod
    async def purge_expired(self) -> int:
        """Drop entries whose token has expired and return how many were removed."""

    async def close(self) -> None:
        """Release backend resources if needed."""
