"""
AWS Signature Version 4 - Standalone Implementation

This package computes AWS Signature Version 4 signing artifacts (canonical
request, string to sign, signing key and signature) using only the standard
library's hashlib/hmac primitives. Nothing here performs network I/O.
"""

from .canonical import canonical_request, canonicalize
from .crypto import hmac_sha256, sha256_hex
from .exceptions import ClockUnavailableError, CryptoFailureError, InvalidInputError, SigningError
from .models import RequestDescriptor, SigningResult
from .signing import compute_signature, derive_signing_key, sign_request, string_to_sign
from .sigv4 import SigV4Signer, UNSIGNED_PAYLOAD, Service, Headers

__version__ = "0.1.0"
__all__ = [
    "SigV4Signer",
    "UNSIGNED_PAYLOAD",
    "Service",
    "Headers",
    "RequestDescriptor",
    "SigningResult",
    "canonical_request",
    "canonicalize",
    "string_to_sign",
    "derive_signing_key",
    "compute_signature",
    "sign_request",
    "sha256_hex",
    "hmac_sha256",
    "SigningError",
    "InvalidInputError",
    "CryptoFailureError",
    "ClockUnavailableError",
]
