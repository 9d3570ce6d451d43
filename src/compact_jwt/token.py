"""Token composition, compact serialization and verification.

Encode path (UNSIGNED -> SIGNED)
--------------------------------
1. ``H = b64(header JSON)``, ``P = b64(payload JSON)``
2. ``message = H + "." + P``
3. ``signature = backend(alg).sign(key, message)``
4. Result: ``H.P.b64(signature)``

Decode path (encoded -> VERIFIED, or an InvalidToken subclass)
--------------------------------------------------------------
1. Size limits, then split into exactly three segments
2. Parse the header and resolve ``alg``
3. Enforce the caller's algorithm allowlist (before any crypto)
4. Verify the signature over the *wire* bytes ``H.P``
5. Parse the payload and validate registered claims

Each segment is decoded by the step that needs it and a bad encoding is
reported against that segment: MalformedHeader, SignatureInvalid or
MalformedPayload.

Security notes
--------------
- The signing input on verification is rebuilt from the original segments,
  never from re-serialized JSON.
- Claims are not looked at until the signature has been verified.
- NONE only passes when both the allowlist and ``DecodeOptions.allow_none``
  say so.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import IO, Any

from . import backends
from .algorithms import Algorithm, AlgorithmFamily, family_of, parse, parse_many
from .errors import (
    DisallowedAlgorithm,
    DuplicateClaim,
    MalformedHeader,
    MalformedPayload,
    MalformedToken,
    SignatureInvalid,
)
from .header import Header
from .payload import Payload
from .protocols import Key
from .serialization import (
    b64decode_segment,
    b64encode_segment,
    dumps,
    load_json_object,
)
from .serialization import write as _write
from .validation import DecodeOptions, validate_claims

logger = logging.getLogger(__name__)

_DEFAULT_OPTIONS = DecodeOptions()


class TokenState(str, Enum):
    UNSIGNED = "unsigned"
    SIGNED = "signed"
    VERIFIED = "verified"


@dataclass(frozen=True, slots=True)
class Signature:
    """Raw signature bytes and the algorithm that produced them."""

    value: bytes
    algorithm: Algorithm

    def encode(self) -> str:
        return b64encode_segment(self.value)


class Token:
    """A header, a claims payload and, once signed or verified, a signature.

    The signature is dropped when ``header.alg`` changes or a claim is added
    through :meth:`add_claim`. Edits made on ``payload`` directly are not
    tracked, so make them before signing.

    Example:
        ```python
        token = Token(Algorithm.HS256, {"sub": "user-1"})
        token.add_claim("exp", datetime.now(timezone.utc) + timedelta(minutes=5))
        compact = token.encode(b"secret")

        verified = Token.decode(compact, b"secret", {"HS256"})
        verified.payload["sub"]  # "user-1"
        ```
    """

    __slots__ = ("header", "payload", "_signature", "_verified")

    def __init__(
        self,
        alg: Algorithm | str = Algorithm.NONE,
        claims: Mapping[str, Any] | Payload | None = None,
        *,
        header: Header | None = None,
    ) -> None:
        self.header = header if header is not None else Header(alg)
        self.payload = claims if isinstance(claims, Payload) else Payload(claims)
        self._signature: Signature | None = None
        self._verified = False

    @property
    def signature(self) -> Signature | None:
        """The current signature, or None if it no longer matches the header."""
        if self._signature is not None and self._signature.algorithm is not self.header.alg:
            return None
        return self._signature

    @property
    def state(self) -> TokenState:
        if self.signature is None:
            return TokenState.UNSIGNED
        return TokenState.VERIFIED if self._verified else TokenState.SIGNED

    def add_claim(self, name: str, value: Any, overwrite: bool = False) -> bool:
        """Add a claim; a successful change discards any existing signature."""
        added = self.payload.add_claim(name, value, overwrite=overwrite)
        if added:
            self._signature = None
            self._verified = False
        return added

    def has_claim(self, name: str) -> bool:
        return self.payload.has_claim(name)

    def has_claim_with_value(self, name: str, value: Any) -> bool:
        return self.payload.has_claim_with_value(name, value)

    def signing_input(self) -> str:
        """Return ``b64(header) + "." + b64(payload)`` for the current state."""
        return f"{self.header.encode()}.{self.payload.encode()}"

    def encode(self, key: Key = None) -> str:
        """Sign the token and return its compact serialization.

        The header and payload are serialized once and the very same bytes
        are signed and emitted.

        Raises:
            KeyMismatch: ``key`` cannot be used with ``header.alg``.
            ValueError: A claim value is NaN or an infinity.
        """
        alg = self.header.alg
        message = self.signing_input()
        raw = backends.sign(alg, key, message.encode("ascii"))
        self._signature = Signature(raw, alg)
        self._verified = False
        logger.debug("Encoded %s token with %d claims", alg, len(self.payload))
        return f"{message}.{b64encode_segment(raw)}"

    @classmethod
    def decode(
        cls,
        token: str | bytes,
        key: Key,
        expected_algorithms: Iterable[Algorithm | str] | Algorithm | str,
        options: DecodeOptions | None = None,
    ) -> Token:
        """Alias for :func:`decode_and_verify`."""
        return decode_and_verify(token, key, expected_algorithms, options)

    def to_dict(self) -> dict[str, Any]:
        return {"header": self.header.to_dict(), "payload": self.payload.to_dict()}

    def to_json(self, pretty: bool = False) -> str:
        return dumps(self.to_dict(), pretty=pretty)

    def write(self, stream: IO[str], pretty: bool = False) -> IO[str]:
        return _write(stream, self, pretty=pretty)

    def __repr__(self) -> str:
        return f"Token(header={self.header!r}, payload={self.payload!r}, state={self.state.value!r})"

    def __str__(self) -> str:
        return self.to_json()


def encode(claims: Mapping[str, Any], key: Key, algorithm: Algorithm | str = Algorithm.HS256) -> str:
    """Build a token from ``claims`` and return its compact serialization.

    Raises:
        DuplicateClaim: Two claim names differ only by case.
        UnknownAlgorithm: ``algorithm`` is not registered.
        KeyMismatch: ``key`` cannot be used with ``algorithm``.
    """
    return Token(parse(algorithm), claims).encode(key)


def _split(token: str | bytes, options: DecodeOptions) -> tuple[str, str, str]:
    if isinstance(token, bytes):
        try:
            token = token.decode("ascii")
        except UnicodeDecodeError:
            raise MalformedToken("Token must be ASCII") from None
    if not isinstance(token, str):
        raise MalformedToken(f"Token must be str or bytes, got {type(token).__name__}")
    if len(token) > options.max_token_length:
        raise MalformedToken("Token exceeds the maximum allowed length")

    parts = token.split(".")
    if len(parts) != 3:
        raise MalformedToken(f"Token must have 3 segments, found {len(parts)}")
    for part in parts:
        if len(part) * 3 // 4 > options.max_segment_bytes:
            raise MalformedToken("Token segment exceeds the maximum allowed size")
    return parts[0], parts[1], parts[2]


def get_unverified_header(token: str | bytes, options: DecodeOptions | None = None) -> dict[str, Any]:
    """Return the parsed header without verifying anything.

    Useful for routing (e.g. choosing a key provider); never base an
    authorization decision on it.

    Raises:
        MalformedToken: The token is not three segments, or is too large.
        MalformedHeader: The header is not base64url JSON object text.
    """
    h, _, _ = _split(token, options or _DEFAULT_OPTIONS)
    return load_json_object(b64decode_segment(h, MalformedHeader), MalformedHeader)


def decode_and_verify(
    token: str | bytes,
    key: Key,
    expected_algorithms: Iterable[Algorithm | str] | Algorithm | str,
    options: DecodeOptions | None = None,
) -> Token:
    """Parse, verify and validate a compact JWT.

    Args:
        token: Compact serialization ``H.P.S``.
        key: Verification key for the algorithm named in the header.
        expected_algorithms: Allowlist; the token's ``alg`` must be a member.
        options: Claim expectations, leeway and input limits.

    Returns:
        A Token in the VERIFIED state.

    Raises:
        ValueError: ``expected_algorithms`` is empty.
        UnknownAlgorithm: ``expected_algorithms`` or the header names an
            unregistered algorithm.
        MalformedToken: Wrong segment count, not text, or too large.
        MalformedHeader: Header is not base64url JSON object text with a
            string ``alg``.
        DisallowedAlgorithm: ``alg`` is not in ``expected_algorithms``.
        SignatureInvalid: The signature segment is not base64url, or does
            not verify.
        MalformedPayload: Payload is not a JSON object of unique claims.
        TokenExpired, TokenNotYetValid, ClaimMissing, ClaimMismatch:
            Registered-claim validation failed.
        KeyMismatch: ``key`` cannot be used with the token's algorithm.
    """
    allowed = parse_many(expected_algorithms)
    options = options or _DEFAULT_OPTIONS

    h, p, s = _split(token, options)

    raw_header = b64decode_segment(h, MalformedHeader)
    header = Header.from_dict(load_json_object(raw_header, MalformedHeader))
    alg = header.alg
    if alg not in allowed:
        raise DisallowedAlgorithm(f"Algorithm {alg} is not allowed")

    # the wire text itself is signed, whatever it decodes to
    message = f"{h}.{p}".encode("utf-8", "surrogatepass")
    signature = b64decode_segment(s, SignatureInvalid)
    if not signature and family_of(alg) is not AlgorithmFamily.NONE:
        raise SignatureInvalid("Signature is empty")

    if not backends.verify(alg, key, message, signature, allow_none=options.allow_none):
        raise SignatureInvalid("Signature verification failed")

    claims = load_json_object(b64decode_segment(p, MalformedPayload), MalformedPayload)
    try:
        payload = Payload(claims)
    except DuplicateClaim as e:
        raise MalformedPayload(str(e)) from e

    validate_claims(payload, options)

    result = Token(header=header, claims=payload)
    result._signature = Signature(signature, alg)
    result._verified = True
    logger.debug("Verified %s token", alg)
    return result
