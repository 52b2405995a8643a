"""Exception types raised by formtoken."""

from __future__ import annotations


class FormTokenError(Exception):
    """Base class for formtoken errors."""


class DecodeError(FormTokenError):
    """Raised when an encoded token cannot be parsed into its field layout."""


class SecretUnavailableError(FormTokenError):
    """Raised at startup when no usable signing secret can be obtained."""


class StoreUnavailableError(FormTokenError):
    """Raised when the nonce store cannot answer in time or at all."""
