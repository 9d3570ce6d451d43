"""Token construction and verification errors.

This module defines the exception hierarchy for compact_jwt. All errors inherit
from JWTError to allow catch-all error handling.

Construction-time errors (UnknownAlgorithm, KeyMismatch, DuplicateClaim) are
local and recoverable: the Header/Payload is left untouched so the caller can
pick another name, algorithm or key and try again.

Every failure on the decode path derives from InvalidToken and has its own
class, so callers can log or audit the precise reason a token was rejected.

Security Note:
    Messages never include key material or the raw token. They are still meant
    for server-side logs; return a generic 401 to untrusted clients.
"""

from __future__ import annotations


class JWTError(Exception):
    """Base exception for all compact_jwt failures.

    Application code can catch this single exception type to handle any
    construction or verification failure generically.
    """


class UnknownAlgorithm(JWTError, ValueError):  # noqa: N818
    """Raised when an algorithm name is not an exact registered name.

    Matching is case-sensitive: ``"hs256"`` is rejected just like ``"XX999"``
    so alternate spellings cannot slip past an allowlist.
    """


class KeyMismatch(JWTError):  # noqa: N818
    """Raised when a key cannot be used with the requested algorithm.

    This occurs when:
    - The key belongs to a different family (e.g. an EC key for RS256)
    - An ECDSA key is on the wrong curve for the digest width
    - A public key is supplied for signing
    - A PEM/SSH public key is offered as an HMAC secret
    - A key is supplied for the NONE algorithm
    """


class DuplicateClaim(JWTError, ValueError):  # noqa: N818
    """Raised when two claim names differ only by case at construction time."""


class InvalidToken(JWTError):  # noqa: N818
    """Base class for every failure on the decode/verify path.

    Also raised directly when a verification key cannot be resolved.
    """


class MalformedToken(InvalidToken):  # noqa: N818
    """The compact string is not three valid base64url segments, or is too large.

    MalformedHeader and MalformedPayload narrow this down to the segment that
    failed to decode or parse.
    """


class MalformedHeader(MalformedToken):  # noqa: N818
    """The header segment is not a JSON object with a string ``alg`` member."""


class MalformedPayload(MalformedToken):  # noqa: N818
    """The payload segment is not a JSON object of well-typed claims."""


class DisallowedAlgorithm(InvalidToken):  # noqa: N818
    """The token's ``alg`` is registered but not in the caller's allowlist.

    This is the algorithm-confusion defense; it fires before any
    cryptographic verification is attempted.
    """


class SignatureInvalid(InvalidToken):  # noqa: N818
    """The signature does not verify under the supplied key."""


class TokenExpired(InvalidToken):  # noqa: N818
    """The ``exp`` claim lies in the past, beyond the configured leeway."""


class TokenNotYetValid(InvalidToken):  # noqa: N818
    """The ``nbf`` claim lies in the future, beyond the configured leeway."""


class ClaimMismatch(InvalidToken):  # noqa: N818
    """A configured ``iss``/``aud``/``sub``/``jti`` expectation was not met."""


class ClaimMissing(InvalidToken):  # noqa: N818
    """A claim that is required or has a configured expectation is absent."""
