"""Form token verification with replay protection."""

from __future__ import annotations

import asyncio
from typing import Optional

from loguru import logger

from ..errors import DecodeError, StoreUnavailableError
from ..store.base import NonceStore
from ..store.memory import InMemoryNonceStore
from ..utils.time import Clock, SystemClock, epoch_ms, from_epoch_ms
from . import codec
from .signing import SigningSecret
from .types import Reason, VerificationResult


class TokenVerifier:
    """Verify signed form tokens against the form they are expected to authorize.

    Checks run in a fixed order and stop at the first failure. Nothing in
    the payload is looked at until the signature has been confirmed, so a
    forged token is always reported as ``invalid_signature``.
    """

    def __init__(
        self,
        secret: SigningSecret,
        *,
        clock: Optional[Clock] = None,
        store: Optional[NonceStore] = None,
        single_use: bool = True,
        store_timeout: float = 0.5,
    ) -> None:
        self._secret = secret
        self.clock = clock or SystemClock()
        self.store = store or InMemoryNonceStore(clock=self.clock)
        self.single_use = single_use
        self.store_timeout = store_timeout

    async def verify(
        self,
        encoded: str,
        expected_form_name: str,
        context: Optional[str] = None,
    ) -> VerificationResult:
        try:
            decoded = codec.decode(encoded)
        except DecodeError:
            return VerificationResult(False, Reason.MALFORMED)

        payload = decoded.payload
        if not self._secret.matches(payload, decoded.signature, context):
            return VerificationResult(False, Reason.INVALID_SIGNATURE)

        if payload.form_name != expected_form_name:
            return VerificationResult(False, Reason.WRONG_FORM, payload=payload)

        now_ms = epoch_ms(self.clock.now())
        if now_ms >= payload.expires_at:
            return VerificationResult(False, Reason.EXPIRED, payload=payload)
        if now_ms < payload.issued_at:
            return VerificationResult(False, Reason.NOT_YET_VALID, payload=payload)

        if self.single_use:
            try:
                fresh = await asyncio.wait_for(
                    self.store.mark_consumed(payload.nonce, from_epoch_ms(payload.expires_at)),
                    timeout=self.store_timeout,
                )
            except (asyncio.TimeoutError, StoreUnavailableError) as exc:
                logger.error("Nonce store unavailable, rejecting token for {}: {!r}", expected_form_name, exc)
                return VerificationResult(False, Reason.STORE_UNAVAILABLE, payload=payload)
            if not fresh:
                return VerificationResult(False, Reason.REPLAYED, payload=payload)

        return VerificationResult(True, Reason.OK, payload=payload)
