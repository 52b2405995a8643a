"""Guard decision counters and alert evaluation helpers."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, List

from ..token.types import Reason
from .context import GuardContext, GuardState


@dataclass
class MetricsSnapshot:
    """Aggregated counters and rates used for operational alerting."""

    total_requests: int
    authorized: int
    rejected: int
    rejection_rate: float
    replay_rate: float
    rejections_by_reason: Dict[str, int]


@dataclass
class AlertThresholds:
    """Threshold configuration for alert generation."""

    max_rejection_rate: float = 0.10
    max_replay_rate: float = 0.01
    max_store_unavailable: int = 0


def ratio(numerator: int, denominator: int) -> float:
    """Safely compute a ratio in [0.0, 1.0]."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator


class GuardMetrics:
    """Thread-safe counters fed by finished guard contexts."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total = 0
        self._authorized = 0
        self._by_reason: Dict[str, int] = {}

    def record(self, ctx: GuardContext) -> None:
        with self._lock:
            self._total += 1
            if ctx.state == GuardState.AUTHORIZED:
                self._authorized += 1
            elif ctx.reason is not None:
                key = ctx.reason.value
                self._by_reason[key] = self._by_reason.get(key, 0) + 1

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            rejected = sum(self._by_reason.values())
            return MetricsSnapshot(
                total_requests=self._total,
                authorized=self._authorized,
                rejected=rejected,
                rejection_rate=ratio(rejected, self._total),
                replay_rate=ratio(self._by_reason.get(Reason.REPLAYED.value, 0), self._total),
                rejections_by_reason=dict(self._by_reason),
            )


def build_alerts(snapshot: MetricsSnapshot, thresholds: AlertThresholds) -> List[str]:
    """Build textual alerts from a snapshot and threshold policy."""
    alerts: List[str] = []

    if snapshot.rejection_rate > thresholds.max_rejection_rate:
        alerts.append("rejection_rate_above_threshold")
    if snapshot.replay_rate > thresholds.max_replay_rate:
        alerts.append("replay_rate_above_threshold")
    if snapshot.rejections_by_reason.get(Reason.STORE_UNAVAILABLE.value, 0) > thresholds.max_store_unavailable:
        alerts.append("nonce_store_unavailable")

    return alerts
