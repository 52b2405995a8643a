"""Base exporter interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..core.context import GuardContext


class Exporter(ABC):
    """Abstract base class for guard decision exporters."""

    @abstractmethod
    async def export(self, context: GuardContext) -> None:
        """Export one finished guard decision."""

    async def close(self) -> None:
        """Close exporter resources if needed."""
