"""Demo Starlette app with a token-protected capture form."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse
from starlette.routing import Route

from formtoken.config import FormTokenConfig
from formtoken.core.logging import setup_logging
from formtoken.protect import FormProtection, protect
from formtoken.store import create_store_from_env

CAPTURE_FORM = "capture"

PAGE = """<!doctype html>
<html>
  <body>
    <form method="post" action="/capture">
      {hidden}
      <input type="text" name="email">
      <button type="submit">Save</button>
    </form>
  </body>
</html>
"""


@dataclass
class Submissions:
    """In-memory record of accepted captures."""

    items: list[dict] = field(default_factory=list)


def build_app(protection: FormProtection, submissions: Optional[Submissions] = None) -> Starlette:
    """Build the demo app around an existing protection bundle."""
    submissions = submissions if submissions is not None else Submissions()

    async def capture(request: Request):
        if request.method == "GET":
            token = protection.issue_for(request, CAPTURE_FORM)
            return HTMLResponse(PAGE.format(hidden=protection.hidden_field(token)))
        form = await request.form()
        record = {"email": form.get("email")}
        submissions.items.append(record)
        return JSONResponse({"status": "captured", **record}, status_code=201)

    async def health(request: Request):
        return JSONResponse({"status": "ok"})

    routes = [
        protection.form_route("/capture", capture, form_name=CAPTURE_FORM, name="capture"),
        Route("/health", health, methods=["GET"]),
    ]
    app = Starlette(routes=routes, middleware=[protection.middleware()])
    app.state.protection = protection
    app.state.submissions = submissions
    return app


def create_app() -> Starlette:
    """Build the demo app from environment configuration."""
    setup_logging()
    config = FormTokenConfig.from_env()
    protection = protect(config, store=create_store_from_env())
    return build_app(protection)
