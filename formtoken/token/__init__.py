"""Form token issuance and verification."""

from .codec import canonical_bytes, decode, encode
from .issuer import TokenIssuer
from .signing import SigningSecret
from .types import DecodedToken, FormToken, Reason, TokenPayload, VerificationResult
from .verifier import TokenVerifier

__all__ = [
    "TokenIssuer",
    "TokenVerifier",
    "SigningSecret",
    "FormToken",
    "TokenPayload",
    "DecodedToken",
    "Reason",
    "VerificationResult",
    "canonical_bytes",
    "decode",
    "encode",
]
