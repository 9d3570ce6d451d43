"""Protocol definitions for compact_jwt.

This module defines structural interfaces using Protocol (PEP 544) for:
- Signing/verification backends (one per algorithm family)
- Verification key resolution
- Token verification

Using protocols allows for duck-typing and easier testing/mocking without
requiring explicit inheritance. Any class that implements the required methods
satisfies the protocol.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias

if TYPE_CHECKING:
    from .algorithms import Algorithm

# ============================================================================
# Type Aliases
# ============================================================================

Claims: TypeAlias = Mapping[str, Any]
"""Represents decoded JWT claims as a read-only mapping."""

Key: TypeAlias = Any
"""A signing or verification key.

Accepted forms depend on the algorithm family: ``bytes``/``str`` secrets for
HMAC, ``cryptography`` key objects or PEM text for RSA/ECDSA, a ``jwt.PyJWK``
for any family, and ``None`` for NONE.
"""


# ============================================================================
# Core Protocols
# ============================================================================


class SignatureBackend(Protocol):
    """Protocol for an algorithm family's sign/verify implementation.

    Implementers must never raise for a signature that simply does not verify;
    exceptions are reserved for keys that cannot be used with the algorithm.
    """

    def sign(self, alg: Algorithm, key: Key, message: bytes) -> bytes:
        """Sign ``message`` and return the signature in JWS wire form.

        Raises:
            KeyMismatch: The key does not fit ``alg``.
        """
        ...

    def verify(self, alg: Algorithm, key: Key, message: bytes, signature: bytes) -> bool:
        """Return whether ``signature`` is valid for ``message`` under ``key``.

        Raises:
            KeyMismatch: The key does not fit ``alg``.
        """
        ...


class KeyProvider(Protocol):
    """Protocol for resolving verification keys.

    Common implementations:
    - Static key mapping (StaticKeyProvider)
    - JWK Set loaded once at startup (StaticKeyProvider.from_jwks)
    """

    def get_key(self, alg: Algorithm) -> Key:
        """Resolve the verification key for tokens signed with ``alg``.

        Raises:
            InvalidToken: If no key is known for ``alg``.
        """
        ...


class TokenVerifier(Protocol):
    """Protocol for JWT verification implementations."""

    def verify(self, token: str) -> Claims:
        """Verify a compact JWT and return its claims.

        Raises:
            InvalidToken: Any decode-path failure (subclass names the reason).
            UnknownAlgorithm: The header names an unregistered algorithm.
        """
        ...
