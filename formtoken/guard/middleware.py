"""ASGI middleware enforcing form tokens on every state-changing request."""

from __future__ import annotations

from typing import Iterable, Tuple

from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..config import STATE_CHANGING_METHODS
from ..core.context import GuardContext
from ..token.types import Reason
from .pipeline import AUTHORIZED_FORM_KEY, RequestGuard
from .registry import FormRegistry
from .responses import forbidden_response


def _replay(body: bytes, receive: Receive) -> Receive:
    sent = False

    async def replay() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


class FormTokenMiddleware:
    """Rejects state-changing requests unless they carry a valid token for their path.

    A path with no registered form is rejected too, so a route added
    without protection fails closed. ``exempt_paths`` are prefixes that
    skip the check entirely.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        guard: RequestGuard,
        registry: FormRegistry,
        exempt_paths: Iterable[str] = (),
    ) -> None:
        self.app = app
        self.guard = guard
        self.registry = registry
        self.exempt_paths: Tuple[str, ...] = tuple(exempt_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] not in STATE_CHANGING_METHODS:
            await self.app(scope, receive, send)
            return

        path = scope["path"]
        if self._is_exempt(path):
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        form_name = self.registry.match(path)
        if form_name is None:
            ctx = GuardContext(method=request.method, path=path, form_name=None).reject(Reason.UNREGISTERED_ROUTE)
            await self.guard.record(ctx)
            await forbidden_response(request)(scope, receive, send)
            return

        # Buffer the body so the form can be parsed here and read again downstream.
        body = await request.body()
        ctx = await self.guard.check(request, form_name)
        if not ctx.authorized:
            await forbidden_response(request)(scope, receive, send)
            return

        scope = dict(scope)
        scope[AUTHORIZED_FORM_KEY] = form_name
        await self.app(scope, _replay(body, receive), send)

    def _is_exempt(self, path: str) -> bool:
        # Prefixes match whole path segments: "/webhooks" covers "/webhooks/x", not "/webhooksx".
        return any(path == prefix or path.startswith(prefix.rstrip("/") + "/") for prefix in self.exempt_paths)
