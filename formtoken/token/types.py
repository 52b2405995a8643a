"""Form token datatypes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class Reason(str, Enum):
    """Outcome of token verification or request guarding."""

    OK = "ok"
    MALFORMED = "malformed"
    INVALID_SIGNATURE = "invalid_signature"
    WRONG_FORM = "wrong_form"
    EXPIRED = "expired"
    NOT_YET_VALID = "not_yet_valid"
    REPLAYED = "replayed"
    MISSING = "missing"
    STORE_UNAVAILABLE = "store_unavailable"
    UNREGISTERED_ROUTE = "unregistered_route"


@dataclass(frozen=True)
class TokenPayload:
    """The signed fields of a form token. Times are epoch milliseconds."""

    form_name: str
    issued_at: int
    nonce: str
    expires_at: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "form_name": self.form_name,
            "issued_at": self.issued_at,
            "nonce": self.nonce,
            "expires_at": self.expires_at,
        }


@dataclass(frozen=True)
class DecodedToken:
    payload: TokenPayload
    signature: bytes


@dataclass(frozen=True)
class FormToken:
    """An issued token together with its transportable encoding."""

    form_name: str
    issued_at: int
    expires_at: int
    nonce: str
    signature: bytes
    encoded: str

    @property
    def payload(self) -> TokenPayload:
        return TokenPayload(
            form_name=self.form_name,
            issued_at=self.issued_at,
            nonce=self.nonce,
            expires_at=self.expires_at,
        )

    @property
    def ttl_ms(self) -> int:
        return self.expires_at - self.issued_at


@dataclass(frozen=True)
class VerificationResult:
    valid: bool
    reason: Reason
    payload: Optional[TokenPayload] = None
