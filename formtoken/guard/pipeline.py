"""Request guard that runs token verification ahead of route handlers."""

from __future__ import annotations

import asyncio
import functools
import inspect
from typing import Any, Awaitable, Callable, Optional, Union

import asyncpg
from loguru import logger
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import Request
from starlette.responses import Response

from ..config import STATE_CHANGING_METHODS, FormTokenConfig
from ..core.context import GuardContext
from ..core.metrics import GuardMetrics
from ..exporters.base import Exporter
from ..token.types import Reason
from ..token.verifier import TokenVerifier
from .responses import forbidden_response

Handler = Callable[[Request], Union[Awaitable[Response], Response]]
ContextGetter = Callable[[Request], Optional[str]]

AUTHORIZED_FORM_KEY = "formtoken.authorized_form"

_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

_EXPORT_ERRORS = (asyncio.TimeoutError, OSError, asyncpg.PostgresError, asyncpg.InterfaceError)


class RequestGuard:
    """Drives each state-changing request from RECEIVED to AUTHORIZED or REJECTED."""

    def __init__(
        self,
        verifier: TokenVerifier,
        *,
        config: Optional[FormTokenConfig] = None,
        metrics: Optional[GuardMetrics] = None,
        exporter: Optional[Exporter] = None,
        context_getter: Optional[ContextGetter] = None,
    ) -> None:
        self.verifier = verifier
        self.config = config or FormTokenConfig()
        self.metrics = metrics or GuardMetrics()
        self.exporter = exporter
        self.context_getter = context_getter

    async def extract_token(self, request: Request) -> Optional[str]:
        """Read the token from the reserved form field, then from the header."""
        content_type = request.headers.get("content-type", "").lower()
        if content_type.startswith(_FORM_CONTENT_TYPES):
            try:
                form = await request.form()
            except (MultiPartException, HTTPException):
                form = None
            if form is not None:
                value = form.get(self.config.field_name)
                if isinstance(value, str) and value:
                    return value
        header = request.headers.get(self.config.header_name)
        return header or None

    async def check(self, request: Request, expected_form_name: str) -> GuardContext:
        ctx = GuardContext(method=request.method, path=request.url.path, form_name=expected_form_name)
        token = await self.extract_token(request)
        if token is None:
            ctx.reject(Reason.MISSING)
        else:
            ctx.token_present = True
            binding = self.context_getter(request) if self.context_getter else None
            result = await self.verifier.verify(token, expected_form_name, context=binding)
            if result.valid:
                ctx.authorize()
            else:
                ctx.reject(result.reason)
        await self.record(ctx)
        return ctx

    async def record(self, ctx: GuardContext) -> None:
        """Log, count and export a finished decision."""
        if ctx.authorized:
            logger.debug("Authorized {} {} for form {} [{}]", ctx.method, ctx.path, ctx.form_name, ctx.request_id)
        else:
            logger.warning(
                "Rejected {} {} for form {}: {} [{}]",
                ctx.method,
                ctx.path,
                ctx.form_name,
                ctx.reason.value if ctx.reason else None,
                ctx.request_id,
            )
        self.metrics.record(ctx)
        if self.exporter:
            # The decision is already made; an exporter outage only loses the audit row.
            try:
                await asyncio.wait_for(self.exporter.export(ctx), timeout=self.config.store_timeout_seconds)
            except _EXPORT_ERRORS as exc:
                logger.error("Failed to export guard decision [{}]: {!r}", ctx.request_id, exc)

    def guard(self, expected_form_name: str, handler: Handler) -> Callable[[Request], Awaitable[Response]]:
        """Wrap ``handler`` so state-changing requests only reach it with a valid token."""
        if not expected_form_name:
            raise ValueError("expected_form_name must be non-empty")
        is_async = inspect.iscoroutinefunction(handler)

        @functools.wraps(handler)
        async def guarded(request: Request) -> Any:
            if (
                request.method in STATE_CHANGING_METHODS
                and request.scope.get(AUTHORIZED_FORM_KEY) != expected_form_name
            ):
                ctx = await self.check(request, expected_form_name)
                if not ctx.authorized:
                    return forbidden_response(request)
            if is_async:
                return await handler(request)
            return await run_in_threadpool(handler, request)

        guarded.form_name = expected_form_name  # type: ignore[attr-defined]
        return guarded
