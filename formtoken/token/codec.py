"""Compact, URL-safe encoding for form tokens.

Layout::

    base64url(canonical_json(payload)) "." base64url(signature)

Padding is stripped. Decoding is strict: a string only decodes if
re-encoding the parsed fields reproduces it exactly, so every accepted
token has a single spelling. Signatures are not checked here.
"""

from __future__ import annotations

import base64
import binascii
import json
import re

from ..errors import DecodeError
from .types import DecodedToken, TokenPayload

MAX_TOKEN_LENGTH = 4096
SIGNATURE_SIZE = 32

_TOKEN_RE = re.compile(r"[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+")
_FIELDS = frozenset({"form_name", "issued_at", "nonce", "expires_at"})


def canonical_bytes(payload: TokenPayload) -> bytes:
    """Return the byte representation that gets signed and transmitted."""
    return json.dumps(payload.to_dict(), sort_keys=True, separators=(",", ":")).encode("utf-8")


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64decode(segment: str) -> bytes:
    if len(segment) % 4 == 1:
        raise DecodeError("truncated base64 segment")
    padded = segment + "=" * (-len(segment) % 4)
    try:
        data = base64.urlsafe_b64decode(padded.encode("ascii"))
    except (binascii.Error, ValueError) as exc:
        raise DecodeError("invalid base64 segment") from exc
    if _b64encode(data) != segment:
        raise DecodeError("non-canonical base64 segment")
    return data


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_payload(raw: bytes) -> TokenPayload:
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError, RecursionError) as exc:
        raise DecodeError("payload is not valid JSON") from exc

    if not isinstance(data, dict) or set(data) != _FIELDS:
        raise DecodeError("unexpected payload fields")

    form_name = data["form_name"]
    nonce = data["nonce"]
    issued_at = data["issued_at"]
    expires_at = data["expires_at"]
    if not isinstance(form_name, str) or not form_name:
        raise DecodeError("form_name must be a non-empty string")
    if not isinstance(nonce, str) or not nonce:
        raise DecodeError("nonce must be a non-empty string")
    if not _is_int(issued_at) or not _is_int(expires_at):
        raise DecodeError("timestamps must be integers")

    payload = TokenPayload(form_name=form_name, issued_at=issued_at, nonce=nonce, expires_at=expires_at)
    if canonical_bytes(payload) != raw:
        raise DecodeError("payload is not in canonical form")
    return payload


def encode(payload: TokenPayload, signature: bytes) -> str:
    """Encode payload and signature into a single transportable string."""
    if len(signature) != SIGNATURE_SIZE:
        raise ValueError(f"signature must be {SIGNATURE_SIZE} bytes")
    return f"{_b64encode(canonical_bytes(payload))}.{_b64encode(signature)}"


def decode(encoded: str) -> DecodedToken:
    """Parse an encoded token, raising :class:`DecodeError` on any deviation."""
    if not isinstance(encoded, str):
        raise DecodeError("token must be a string")
    if len(encoded) > MAX_TOKEN_LENGTH:
        raise DecodeError("token too long")
    if _TOKEN_RE.fullmatch(encoded) is None:
        raise DecodeError("token has an invalid shape")

    payload_b64, sig_b64 = encoded.split(".")
    signature = _b64decode(sig_b64)
    if len(signature) != SIGNATURE_SIZE:
        raise DecodeError("signature has the wrong length")
    payload = _parse_payload(_b64decode(payload_b64))
    return DecodedToken(payload=payload, signature=signature)
