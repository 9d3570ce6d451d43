"""
Static verification key provider.

Holds one verification key per algorithm, supplied directly or loaded from a
JWK Set document with PyJWT.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from jwt import PyJWKSet
from jwt.exceptions import PyJWKError, PyJWKSetError

from ..algorithms import Algorithm, parse
from ..errors import InvalidToken, UnknownAlgorithm
from ..protocols import Key, KeyProvider

logger = logging.getLogger(__name__)


class StaticKeyProvider(KeyProvider):
    """
    Resolves verification keys from a fixed algorithm -> key mapping.

    Parameters
    ----------
    keys : Mapping[Algorithm | str, Key]
        Verification key per algorithm name. Names go through the algorithm
        registry, so misspelled names fail at construction time.

    Example
    -------
    provider = StaticKeyProvider({"RS256": public_key, "HS256": b"secret"})
    provider.get_key(Algorithm.RS256)
    """

    def __init__(self, keys: Mapping[Algorithm | str, Key]) -> None:
        self._keys: dict[Algorithm, Key] = {parse(alg): key for alg, key in keys.items()}

    @property
    def algorithms(self) -> frozenset[Algorithm]:
        return frozenset(self._keys)

    def get_key(self, alg: Algorithm) -> Key:
        try:
            return self._keys[alg]
        except KeyError:
            raise InvalidToken(f"No verification key configured for {alg}") from None

    @classmethod
    def from_jwks(cls, jwks: Mapping[str, Any]) -> StaticKeyProvider:
        """Build a provider from a JWK Set document (``{"keys": [...]}``).

        Each usable key is registered under its ``alg`` (PyJWT infers one
        from ``kty``/``crv`` when absent). Keys whose algorithm is not
        supported here are skipped. The first key seen for an algorithm
        wins.

        Raises:
            ValueError: The document holds no usable keys.
        """
        try:
            key_set = PyJWKSet.from_dict(dict(jwks))
        except (PyJWKError, PyJWKSetError) as e:
            raise ValueError(f"Invalid JWK Set: {e}") from e

        keys: dict[Algorithm, Key] = {}
        for jwk in key_set.keys:
            try:
                alg = parse(jwk.algorithm_name)
            except UnknownAlgorithm:
                logger.debug("Skipping JWK %s with unsupported alg %s", jwk.key_id, jwk.algorithm_name)
                continue
            keys.setdefault(alg, jwk)

        if not keys:
            raise ValueError("JWK Set contains no keys for supported algorithms")
        return cls(keys)
