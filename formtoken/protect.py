"""High-level helpers wiring issuer, verifier and guard around one secret."""

from __future__ import annotations

import html
from datetime import timedelta
from typing import Any, Awaitable, Callable, Optional, Sequence, Union

from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from .config import FormTokenConfig
from .core.metrics import GuardMetrics
from .exporters.base import Exporter
from .guard.middleware import FormTokenMiddleware
from .guard.pipeline import ContextGetter, Handler, RequestGuard
from .guard.registry import FormRegistry
from .store.base import NonceStore
from .store.memory import InMemoryNonceStore
from .token.issuer import TokenIssuer
from .token.signing import SigningSecret
from .token.verifier import TokenVerifier
from .utils.time import Clock, SystemClock

TTL = Union[timedelta, int, float]


class FormProtection:
    """Owns the process-wide secret, nonce store and clock for one application."""

    def __init__(
        self,
        *,
        config: FormTokenConfig,
        secret: SigningSecret,
        clock: Clock,
        store: NonceStore,
        metrics: Optional[GuardMetrics] = None,
        exporter: Optional[Exporter] = None,
        context_getter: Optional[ContextGetter] = None,
    ) -> None:
        self.config = config
        self.clock = clock
        self.store = store
        self.exporter = exporter
        self.issuer = TokenIssuer(secret, clock=clock, default_ttl=config.default_ttl)
        self.verifier = TokenVerifier(
            secret,
            clock=clock,
            store=store,
            single_use=config.single_use,
            store_timeout=config.store_timeout_seconds,
        )
        self.registry = FormRegistry()
        self.request_guard = RequestGuard(
            self.verifier,
            config=config,
            metrics=metrics,
            exporter=exporter,
            context_getter=context_getter,
        )

    @property
    def metrics(self) -> GuardMetrics:
        return self.request_guard.metrics

    def issue(self, form_name: str, ttl: Optional[TTL] = None, context: Optional[str] = None) -> str:
        """Return an encoded token to embed in the named form."""
        return self.issuer.issue(form_name, ttl=ttl, context=context).encoded

    def issue_for(self, request: Request, form_name: str, ttl: Optional[TTL] = None) -> str:
        """Issue a token bound to whatever the configured context getter extracts from ``request``."""
        getter = self.request_guard.context_getter
        return self.issue(form_name, ttl=ttl, context=getter(request) if getter else None)

    def hidden_field(self, token: str) -> str:
        return (
            f'<input type="hidden" name="{html.escape(self.config.field_name)}" '
            f'value="{html.escape(token)}">'
        )

    def guard(self, expected_form_name: str, handler: Handler) -> Callable[[Request], Awaitable[Response]]:
        return self.request_guard.guard(expected_form_name, handler)

    def form_route(
        self,
        path: str,
        endpoint: Handler,
        *,
        form_name: str,
        methods: Sequence[str] = ("GET", "POST"),
        name: Optional[str] = None,
    ) -> Route:
        """Register ``path`` for middleware enforcement and return a guarded route."""
        self.registry.register(path, form_name)
        return Route(path, self.guard(form_name, endpoint), methods=list(methods), name=name)

    def middleware(self) -> Middleware:
        return Middleware(
            FormTokenMiddleware,
            guard=self.request_guard,
            registry=self.registry,
            exempt_paths=self.config.exempt_paths,
        )

    async def close(self) -> None:
        await self.store.close()
        if self.exporter:
            await self.exporter.close()


def protect(
    config: Optional[FormTokenConfig] = None,
    *,
    secret: Optional[SigningSecret] = None,
    clock: Optional[Clock] = None,
    store: Optional[NonceStore] = None,
    metrics: Optional[GuardMetrics] = None,
    exporter: Optional[Exporter] = None,
    context_getter: Optional[ContextGetter] = None,
    **overrides: Any,
) -> FormProtection:
    """Create a ready-to-use protection bundle.

    Raises :class:`~formtoken.errors.SecretUnavailableError` when a secret
    is required but cannot be resolved.
    """
    config = config or FormTokenConfig()
    if overrides:
        config = config.with_overrides(**overrides)
    clock = clock or SystemClock()
    return FormProtection(
        config=config,
        secret=secret or SigningSecret.from_config(config),
        clock=clock,
        store=store or InMemoryNonceStore(clock=clock),
        metrics=metrics,
        exporter=exporter,
        context_getter=context_getter,
    )
