"""
Compact JSON Web Token signing and verification.

High-level flow
---------------
Encode:
1. Build a `Token` from an algorithm and a claims mapping.
2. `Token.encode(key)` serializes header and payload to base64url JSON,
   signs ``H.P`` with the algorithm family's backend and appends the
   signature segment.

Decode:
1. `decode_and_verify(token, key, expected_algorithms, options)`:
   - Splits and size-checks the three segments
   - Parses the header and rejects algorithms outside the allowlist
   - Verifies the signature over the original wire bytes
   - Parses the payload and validates ``exp``/``nbf``/``iss``/``aud``/...
2. On success: a `Token` in the VERIFIED state.

Security notes
--------------
- Always pass an explicit algorithm allowlist (avoid algorithm confusion).
- NONE never verifies unless both the allowlist and
  ``DecodeOptions.allow_none`` permit it.
- Claims are untrusted until the signature has been verified.
- Oversized tokens are rejected before any decoding.

Example usage
-------------

.. code-block:: python

    from compact_jwt import Algorithm, DecodeOptions, Token, decode_and_verify

    token = Token(Algorithm.ES256, {"sub": "user-1", "aud": "api://orders"})
    compact = token.encode(ec_private_key)

    verified = decode_and_verify(
        compact,
        ec_public_key,
        {"ES256"},
        DecodeOptions(audience="api://orders", leeway=10),
    )
    verified.payload["sub"]
"""

# Algorithms
from .algorithms import (
    Algorithm,
    AlgorithmFamily,
    digest_bits,
    family_of,
    name_of,
    parse,
)

# Claims
from .claims import RegisteredClaim

# Configuration
from .config import allowed_algorithms_from_env, options_from_env

# Errors
from .errors import (
    ClaimMismatch,
    ClaimMissing,
    DisallowedAlgorithm,
    DuplicateClaim,
    InvalidToken,
    JWTError,
    KeyMismatch,
    MalformedHeader,
    MalformedPayload,
    MalformedToken,
    SignatureInvalid,
    TokenExpired,
    TokenNotYetValid,
    UnknownAlgorithm,
)

# Header / payload
from .header import Header, TokenType

# Key providers
from .key_providers import StaticKeyProvider
from .payload import Payload

# Protocols
from .protocols import Claims, Key, KeyProvider, SignatureBackend, TokenVerifier

# Serialization
from .serialization import write

# Token
from .token import (
    Signature,
    Token,
    TokenState,
    decode_and_verify,
    encode,
    get_unverified_header,
)

# Validation
from .validation import DecodeOptions, validate_claims

# Verifier
from .verifier import JWTVerifier

__all__ = [
    # Algorithms
    "Algorithm",
    "AlgorithmFamily",
    "digest_bits",
    "family_of",
    "name_of",
    "parse",
    # Claims
    "RegisteredClaim",
    # Errors
    "ClaimMismatch",
    "ClaimMissing",
    "DisallowedAlgorithm",
    "DuplicateClaim",
    "InvalidToken",
    "JWTError",
    "KeyMismatch",
    "MalformedHeader",
    "MalformedPayload",
    "MalformedToken",
    "SignatureInvalid",
    "TokenExpired",
    "TokenNotYetValid",
    "UnknownAlgorithm",
    # Protocols
    "Claims",
    "Key",
    "KeyProvider",
    "SignatureBackend",
    "TokenVerifier",
    # Header / payload
    "Header",
    "Payload",
    "TokenType",
    # Token
    "Signature",
    "Token",
    "TokenState",
    "decode_and_verify",
    "encode",
    "get_unverified_header",
    "write",
    # Validation
    "DecodeOptions",
    "validate_claims",
    # Verifier
    "JWTVerifier",
    # Key providers
    "StaticKeyProvider",
    # Configuration
    "allowed_algorithms_from_env",
    "options_from_env",
]
