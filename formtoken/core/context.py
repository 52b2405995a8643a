"""Per-request guard state."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from ..token.types import Reason


def _new_id() -> str:
    """Generate a request identifier as UUID text."""
    return str(uuid4())


class GuardState(str, Enum):
    RECEIVED = "received"
    AUTHORIZED = "authorized"
    REJECTED = "rejected"


@dataclass
class GuardContext:
    """Tracks one request through the guard state machine.

    ``RECEIVED`` moves to exactly one of ``AUTHORIZED`` or ``REJECTED`` and
    never changes again.
    """

    method: str
    path: str
    form_name: Optional[str]
    request_id: str = field(default_factory=_new_id)
    state: GuardState = GuardState.RECEIVED
    reason: Optional[Reason] = None
    token_present: bool = False
    start_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc).replace(tzinfo=None))
    end_time: Optional[datetime] = None

    @property
    def authorized(self) -> bool:
        return self.state == GuardState.AUTHORIZED

    def authorize(self) -> "GuardContext":
        self._transition(GuardState.AUTHORIZED, Reason.OK)
        return self

    def reject(self, reason: Reason) -> "GuardContext":
        if reason == Reason.OK:
            raise ValueError("cannot reject with reason 'ok'")
        self._transition(GuardState.REJECTED, reason)
        return self

    def _transition(self, state: GuardState, reason: Reason) -> None:
        if self.state != GuardState.RECEIVED:
            raise RuntimeError(f"guard context already {self.state.value}")
        self.state = state
        self.reason = reason
        self.end_time = datetime.now(timezone.utc).replace(tzinfo=None)

    def to_dict(self) -> dict:
        """Serialize context for exporters."""
        return {
            "request_id": self.request_id,
            "method": self.method,
            "path": self.path,
            "form_name": self.form_name,
            "state": self.state.value,
            "reason": self.reason.value if self.reason else None,
            "token_present": self.token_present,
            "start_time": self.start_time,
            "end_time": self.end_time,
        }
