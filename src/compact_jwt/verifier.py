"""Allowlist-bound token verifier.

This module provides a reusable verifier that:
- Reads the unverified header only to learn which algorithm was used
- Resolves the verification key via an injected KeyProvider
- Verifies signature and claims with decode_and_verify
- Logs every rejection with its specific reason for auditing

The verifier holds no mutable state after construction and can be shared
between threads as long as the KeyProvider can.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from .algorithms import Algorithm, parse_many
from .errors import DisallowedAlgorithm, JWTError
from .header import Header
from .protocols import Claims
from .token import decode_and_verify, get_unverified_header
from .validation import DecodeOptions

if TYPE_CHECKING:
    from .protocols import KeyProvider

logger = logging.getLogger(__name__)


class JWTVerifier:
    """Verifies compact JWTs against a fixed algorithm allowlist.

    Architecture:
        1. Read ``alg`` from the token header (unverified)
        2. Reject algorithms outside the allowlist before touching keys
        3. Resolve the verification key via KeyProvider
        4. Verify signature and claims via decode_and_verify

    Example:
        ```python
        verifier = JWTVerifier(
            key_provider=StaticKeyProvider({"RS256": public_key}),
            algorithms=("RS256",),
            options=DecodeOptions(issuer="https://issuer.example", leeway=10),
        )

        try:
            claims = verifier.verify(raw_token)
        except TokenExpired:
            ...  # prompt re-authentication
        except InvalidToken:
            ...  # reject request
        ```

    Attributes:
        _keys: KeyProvider responsible for resolving verification keys.
        _algorithms: Immutable allowlist.
        _opt: Immutable claim validation options.
    """

    def __init__(
        self,
        key_provider: KeyProvider,
        algorithms: Iterable[Algorithm | str] | Algorithm | str = (Algorithm.RS256,),
        options: DecodeOptions | None = None,
    ) -> None:
        """Initialize the verifier.

        Raises:
            ValueError: ``algorithms`` is empty.
            UnknownAlgorithm: ``algorithms`` names an unregistered algorithm.
        """
        self._keys = key_provider
        self._algorithms = parse_many(algorithms)
        self._opt = options or DecodeOptions()

    @property
    def algorithms(self) -> frozenset[Algorithm]:
        return self._algorithms

    @property
    def options(self) -> DecodeOptions:
        return self._opt

    def verify(self, token: str) -> Claims:
        """Verify a JWT and return its claims.

        Returns:
            Mapping of verified claims (case-insensitive lookups).

        Raises:
            InvalidToken: Any decode-path failure; the subclass names the
                reason (TokenExpired, SignatureInvalid, ...).
            UnknownAlgorithm: The header names an unregistered algorithm.
            KeyMismatch: The resolved key does not fit the algorithm.
        """
        try:
            # Only alg is read here; nothing in the header is trusted yet.
            alg = Header.from_dict(get_unverified_header(token, self._opt)).alg
            if alg not in self._algorithms:
                raise DisallowedAlgorithm(f"Algorithm {alg} is not allowed")

            key = self._keys.get_key(alg)
            return decode_and_verify(token, key, self._algorithms, self._opt).payload
        except JWTError as e:
            logger.info("Rejected token: %s: %s", type(e).__name__, e)
            raise
