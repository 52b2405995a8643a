"""Pipeline guard: handler wrapper, middleware and path registry."""

from .middleware import FormTokenMiddleware
from .pipeline import AUTHORIZED_FORM_KEY, RequestGuard
from .registry import FormRegistry
from .responses import FORBIDDEN_MESSAGE, forbidden_response

__all__ = [
    "AUTHORIZED_FORM_KEY",
    "FORBIDDEN_MESSAGE",
    "FormRegistry",
    "FormTokenMiddleware",
    "RequestGuard",
    "forbidden_response",
]
