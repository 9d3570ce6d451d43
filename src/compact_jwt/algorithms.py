"""Algorithm registry.

The set of signing algorithms is closed. Each algorithm belongs to exactly one
family (which selects the signing backend) and carries one SHA-2 digest width.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Final

from .errors import UnknownAlgorithm


class Algorithm(str, Enum):
    """JWS ``alg`` values understood by this package."""

    NONE = "NONE"
    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"
    RS256 = "RS256"
    RS384 = "RS384"
    RS512 = "RS512"
    ES256 = "ES256"
    ES384 = "ES384"
    ES512 = "ES512"

    def __str__(self) -> str:
        return self.value


class AlgorithmFamily(str, Enum):
    """Cryptographic primitive behind an algorithm."""

    NONE = "none"
    HMAC = "hmac"
    RSA = "rsa"
    ECDSA = "ecdsa"


_REGISTRY: Final[Mapping[Algorithm, tuple[AlgorithmFamily, int]]] = MappingProxyType(
    {
        Algorithm.NONE: (AlgorithmFamily.NONE, 0),
        Algorithm.HS256: (AlgorithmFamily.HMAC, 256),
        Algorithm.HS384: (AlgorithmFamily.HMAC, 384),
        Algorithm.HS512: (AlgorithmFamily.HMAC, 512),
        Algorithm.RS256: (AlgorithmFamily.RSA, 256),
        Algorithm.RS384: (AlgorithmFamily.RSA, 384),
        Algorithm.RS512: (AlgorithmFamily.RSA, 512),
        Algorithm.ES256: (AlgorithmFamily.ECDSA, 256),
        Algorithm.ES384: (AlgorithmFamily.ECDSA, 384),
        Algorithm.ES512: (AlgorithmFamily.ECDSA, 512),
    }
)


def family_of(alg: Algorithm) -> AlgorithmFamily:
    """Return the family whose backend signs and verifies ``alg``."""
    return _REGISTRY[alg][0]


def digest_bits(alg: Algorithm) -> int:
    """Return the SHA-2 width for ``alg`` (0 for NONE)."""
    return _REGISTRY[alg][1]


def name_of(alg: Algorithm) -> str:
    """Return the wire token for ``alg``."""
    return alg.value


def parse(name: str | Algorithm) -> Algorithm:
    """Resolve a wire name to its Algorithm.

    Only exact, case-sensitive matches are accepted. ``"hs256"``, ``"none"``
    and ``" HS256"`` all fail, which keeps an allowlist from being bypassed
    through alternate spellings.

    Raises:
        UnknownAlgorithm: if ``name`` is not a registered algorithm name.
    """
    if isinstance(name, Algorithm):
        return name
    if not isinstance(name, str):
        raise UnknownAlgorithm(f"Algorithm name must be a string, got {type(name).__name__}")
    try:
        return Algorithm(name)
    except ValueError:
        raise UnknownAlgorithm(f"Unknown algorithm {name!r}") from None


def parse_many(names: str | Algorithm | Iterable[str | Algorithm]) -> frozenset[Algorithm]:
    """Parse an allowlist of algorithm names.

    A single name is treated as a one-element allowlist.

    Raises:
        ValueError: if the allowlist is empty.
        UnknownAlgorithm: if any entry is not registered.
    """
    if isinstance(names, (str, Algorithm)):
        names = (names,)
    algorithms = frozenset(parse(n) for n in names)
    if not algorithms:
        raise ValueError("At least one expected algorithm is required")
    return algorithms
