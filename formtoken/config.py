"""Configuration model for token issuance and request guarding."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from datetime import timedelta
from typing import Any, Optional, Tuple

STATE_CHANGING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def _env_paths(name: str) -> Tuple[str, ...]:
    raw = os.getenv(name, "")
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class FormTokenConfig:
    """Policy knobs shared by issuer, verifier and guard."""

    secret: Optional[str] = None
    require_secret: bool = False
    ttl_seconds: float = 3600.0
    single_use: bool = True
    field_name: str = "formToken"
    header_name: str = "X-Form-Token"
    store_timeout_seconds: float = 0.5
    exempt_paths: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive.")
        if self.store_timeout_seconds <= 0:
            raise ValueError("store_timeout_seconds must be positive.")
        if not self.field_name:
            raise ValueError("field_name must be non-empty.")

    @property
    def default_ttl(self) -> timedelta:
        return timedelta(seconds=self.ttl_seconds)

    def with_overrides(self, **overrides: Any) -> "FormTokenConfig":
        return replace(self, **overrides)

    @classmethod
    def from_env(cls) -> "FormTokenConfig":
        """Build a config from ``FORMTOKEN_*`` environment variables."""
        defaults = cls()
        return cls(
            secret=os.getenv("FORMTOKEN_SECRET") or None,
            require_secret=_env_bool("FORMTOKEN_REQUIRE_SECRET", defaults.require_secret),
            ttl_seconds=float(os.getenv("FORMTOKEN_TTL_SECONDS", defaults.ttl_seconds)),
            single_use=_env_bool("FORMTOKEN_SINGLE_USE", defaults.single_use),
            field_name=os.getenv("FORMTOKEN_FIELD_NAME", defaults.field_name),
            header_name=os.getenv("FORMTOKEN_HEADER_NAME", defaults.header_name),
            store_timeout_seconds=float(os.getenv("FORMTOKEN_STORE_TIMEOUT_SECONDS", defaults.store_timeout_seconds)),
            exempt_paths=_env_paths("FORMTOKEN_EXEMPT_PATHS"),
        )
