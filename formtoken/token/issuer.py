"""HMAC-backed form token issuer."""

from __future__ import annotations

import secrets
from datetime import timedelta
from typing import Optional, Union

from loguru import logger

from ..utils.time import Clock, SystemClock, epoch_ms
from . import codec
from .signing import SigningSecret
from .types import FormToken, TokenPayload

TTL = Union[timedelta, int, float]

NONCE_BYTES = 16


def _ttl_ms(ttl: TTL) -> int:
    if isinstance(ttl, bool):
        raise ValueError("ttl must be a duration, not a bool")
    if isinstance(ttl, timedelta):
        ms = int(ttl.total_seconds() * 1000)
    elif isinstance(ttl, (int, float)):
        ms = int(ttl * 1000)
    else:
        raise ValueError(f"unsupported ttl type: {type(ttl).__name__}")
    if ms <= 0:
        raise ValueError("ttl must be positive")
    return ms


class TokenIssuer:
    """Issue signed tokens that authorize one submission of a named form."""

    def __init__(
        self,
        secret: SigningSecret,
        *,
        clock: Optional[Clock] = None,
        default_ttl: TTL = timedelta(hours=1),
    ) -> None:
        self._secret = secret
        self.clock = clock or SystemClock()
        self.default_ttl_ms = _ttl_ms(default_ttl)

    def issue(self, form_name: str, ttl: Optional[TTL] = None, context: Optional[str] = None) -> FormToken:
        if not isinstance(form_name, str) or not form_name:
            raise ValueError("form_name must be a non-empty string")
        ttl_ms = self.default_ttl_ms if ttl is None else _ttl_ms(ttl)

        issued_at = epoch_ms(self.clock.now())
        payload = TokenPayload(
            form_name=form_name,
            issued_at=issued_at,
            nonce=secrets.token_urlsafe(NONCE_BYTES),
            expires_at=issued_at + ttl_ms,
        )
        signature = self._secret.sign(payload, context)
        encoded = codec.encode(payload, signature)
        logger.debug("Issued form token for {} (ttl {} ms)", form_name, ttl_ms)
        return FormToken(
            form_name=payload.form_name,
            issued_at=payload.issued_at,
            expires_at=payload.expires_at,
            nonce=payload.nonce,
            signature=signature,
            encoded=encoded,
        )
