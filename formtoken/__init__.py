"""formtoken package.

Signed, time-limited, per-form CSRF tokens and a guard that keeps
state-changing handlers from running without one.
"""

from .config import FormTokenConfig
from .errors import DecodeError, FormTokenError, SecretUnavailableError, StoreUnavailableError
from .guard import FormRegistry, FormTokenMiddleware, RequestGuard
from .protect import FormProtection, protect
from .token import FormToken, Reason, SigningSecret, TokenIssuer, TokenVerifier, VerificationResult

__all__ = [
    "protect",
    "FormProtection",
    "FormTokenConfig",
    "FormToken",
    "Reason",
    "SigningSecret",
    "TokenIssuer",
    "TokenVerifier",
    "VerificationResult",
    "RequestGuard",
    "FormRegistry",
    "FormTokenMiddleware",
    "FormTokenError",
    "DecodeError",
    "SecretUnavailableError",
    "StoreUnavailableError",
]
