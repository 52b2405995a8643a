"""Guard context, metrics and logging setup."""

from .context import GuardContext, GuardState
from .logging import setup_logging
from .metrics import AlertThresholds, GuardMetrics, MetricsSnapshot, build_alerts

__all__ = [
    "GuardContext",
    "GuardState",
    "GuardMetrics",
    "MetricsSnapshot",
    "AlertThresholds",
    "build_alerts",
    "setup_logging",
]
