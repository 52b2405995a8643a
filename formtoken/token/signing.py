"""Process-wide signing secret and HMAC helpers."""

from __future__ import annotations

import hmac
import os
import secrets
from hashlib import sha256
from typing import Optional

from loguru import logger

from ..config import FormTokenConfig
from ..errors import SecretUnavailableError
from .codec import canonical_bytes
from .types import TokenPayload

MIN_SECRET_BYTES = 16


class SigningSecret:
    """Immutable HMAC key held for the lifetime of the process.

    Replacing it invalidates every outstanding token.
    """

    __slots__ = ("_key",)

    def __init__(self, key: bytes) -> None:
        if len(key) < MIN_SECRET_BYTES:
            raise SecretUnavailableError(f"signing secret must be at least {MIN_SECRET_BYTES} bytes")
        self._key = bytes(key)

    def __repr__(self) -> str:
        return "SigningSecret(<redacted>)"

    @classmethod
    def from_string(cls, value: str) -> "SigningSecret":
        return cls(value.encode("utf-8"))

    @classmethod
    def generate(cls) -> "SigningSecret":
        return cls(secrets.token_bytes(32))

    @classmethod
    def from_config(cls, config: Optional[FormTokenConfig] = None) -> "SigningSecret":
        """Resolve the secret from config, then ``FORMTOKEN_SECRET``, then a random key."""
        config = config or FormTokenConfig()
        value = config.secret or os.getenv("FORMTOKEN_SECRET")
        if value:
            return cls.from_string(value)
        if config.require_secret:
            raise SecretUnavailableError("FORMTOKEN_SECRET is required but not set")
        logger.warning("No form token secret configured; generated a random one. Tokens will not survive a restart.")
        return cls.generate()

    def sign(self, payload: TokenPayload, context: Optional[str] = None) -> bytes:
        """HMAC-SHA256 over the canonical payload, optionally bound to a context string."""
        message = canonical_bytes(payload)
        if context is not None:
            message += b"\x00" + context.encode("utf-8")
        return hmac.new(self._key, message, sha256).digest()

    def matches(self, payload: TokenPayload, signature: bytes, context: Optional[str] = None) -> bool:
        return hmac.compare_digest(self.sign(payload, context), signature)
