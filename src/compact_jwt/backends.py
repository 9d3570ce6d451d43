"""Signing and verification backends, one per algorithm family.

Dispatch is a fixed table from AlgorithmFamily to a stateless backend object.
The digest and signature math is PyJWT's (``jwt.algorithms``); the backends
add what a strict verifier needs on top of it: the key must belong to the
algorithm's family, must be private for signing, and for ECDSA must sit on
the curve paired with the digest width.

Contract shared by all backends:
- ``sign`` raises KeyMismatch when the key cannot be used with the algorithm.
- ``verify`` returns False for a signature that does not check out and only
  raises (KeyMismatch) for keys that are unusable for the algorithm.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Final

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from jwt import PyJWK
from jwt.algorithms import Algorithm as PyJWTAlgorithm
from jwt.algorithms import get_default_algorithms
from jwt.exceptions import InvalidKeyError

from .algorithms import Algorithm, AlgorithmFamily, digest_bits, family_of
from .errors import KeyMismatch
from .protocols import Key, SignatureBackend

logger = logging.getLogger(__name__)

_PYJWT: Final[Mapping[str, PyJWTAlgorithm]] = MappingProxyType(get_default_algorithms())

_CURVES: Final[Mapping[int, type[ec.EllipticCurve]]] = MappingProxyType(
    {256: ec.SECP256R1, 384: ec.SECP384R1, 512: ec.SECP521R1}
)


def _impl(alg: Algorithm) -> PyJWTAlgorithm:
    return _PYJWT[alg.value]


def _unwrap(key: Key) -> Any:
    if isinstance(key, PyJWK):
        return key.key
    return key


def _prepare(alg: Algorithm, key: Key) -> Any:
    """Load ``key`` (object, PEM or SSH text) the way PyJWT does for ``alg``."""
    key = _unwrap(key)
    if isinstance(key, bytearray):
        key = bytes(key)
    try:
        return _impl(alg).prepare_key(key)
    except (InvalidKeyError, TypeError, ValueError, UnsupportedAlgorithm) as e:
        logger.debug(e, exc_info=True)
        raise KeyMismatch(f"Key is not usable with {alg}") from None


class NoneBackend:
    """Unsecured tokens: empty signature, no key."""

    def sign(self, alg: Algorithm, key: Key, message: bytes) -> bytes:
        if key is not None:
            raise KeyMismatch("The NONE algorithm does not take a key")
        return b""

    def verify(self, alg: Algorithm, key: Key, message: bytes, signature: bytes) -> bool:
        return signature == b""


class HMACBackend:
    """HMAC with SHA-2 over a shared secret of any length."""

    def prepare_key(self, alg: Algorithm, key: Key) -> bytes:
        key = _unwrap(key)
        if not isinstance(key, (str, bytes, bytearray)):
            raise KeyMismatch(f"HMAC requires a bytes or str secret, got {type(key).__name__}")
        # PyJWT refuses PEM and SSH public keys here
        return _prepare(alg, key)

    def sign(self, alg: Algorithm, key: Key, message: bytes) -> bytes:
        return _impl(alg).sign(message, self.prepare_key(alg, key))

    def verify(self, alg: Algorithm, key: Key, message: bytes, signature: bytes) -> bool:
        return _impl(alg).verify(message, self.prepare_key(alg, key), signature)


class RSABackend:
    """RSASSA-PKCS1-v1_5 with SHA-2."""

    def sign(self, alg: Algorithm, key: Key, message: bytes) -> bytes:
        key = _prepare(alg, key)
        if isinstance(key, rsa.RSAPublicKey):
            raise KeyMismatch("A public key cannot be used for signing")
        if not isinstance(key, rsa.RSAPrivateKey):
            raise KeyMismatch(f"{alg} requires an RSA private key, got {type(key).__name__}")
        try:
            return _impl(alg).sign(message, key)
        except ValueError as e:  # digest too large for the modulus
            logger.debug(e, exc_info=True)
            raise KeyMismatch(f"RSA key too small for {alg}") from e

    def verify(self, alg: Algorithm, key: Key, message: bytes, signature: bytes) -> bool:
        key = _prepare(alg, key)
        if isinstance(key, rsa.RSAPrivateKey):
            key = key.public_key()
        if not isinstance(key, rsa.RSAPublicKey):
            raise KeyMismatch(f"{alg} requires an RSA public key, got {type(key).__name__}")
        return _impl(alg).verify(message, key, signature)


class ECDSABackend:
    """ECDSA on the NIST curve paired with the digest width.

    JWS carries ECDSA signatures as the fixed-length concatenation of the
    big-endian ``r`` and ``s`` integers. PyJWT converts to and from the DER
    form ``cryptography`` produces, and rejects raw signatures of the wrong
    length.
    """

    @staticmethod
    def _check_curve(alg: Algorithm, key: ec.EllipticCurvePrivateKey | ec.EllipticCurvePublicKey) -> None:
        expected = _CURVES[digest_bits(alg)]
        if not isinstance(key.curve, expected):
            raise KeyMismatch(f"{alg} requires a {expected.name} key, got {key.curve.name}")

    def sign(self, alg: Algorithm, key: Key, message: bytes) -> bytes:
        key = _prepare(alg, key)
        if isinstance(key, ec.EllipticCurvePublicKey):
            raise KeyMismatch("A public key cannot be used for signing")
        if not isinstance(key, ec.EllipticCurvePrivateKey):
            raise KeyMismatch(f"{alg} requires an EC private key, got {type(key).__name__}")
        self._check_curve(alg, key)
        return _impl(alg).sign(message, key)

    def verify(self, alg: Algorithm, key: Key, message: bytes, signature: bytes) -> bool:
        key = _prepare(alg, key)
        if isinstance(key, ec.EllipticCurvePrivateKey):
            key = key.public_key()
        if not isinstance(key, ec.EllipticCurvePublicKey):
            raise KeyMismatch(f"{alg} requires an EC public key, got {type(key).__name__}")
        self._check_curve(alg, key)
        return _impl(alg).verify(message, key, signature)


_BACKENDS: Final[Mapping[AlgorithmFamily, SignatureBackend]] = MappingProxyType(
    {
        AlgorithmFamily.NONE: NoneBackend(),
        AlgorithmFamily.HMAC: HMACBackend(),
        AlgorithmFamily.RSA: RSABackend(),
        AlgorithmFamily.ECDSA: ECDSABackend(),
    }
)


def backend_for(alg: Algorithm) -> SignatureBackend:
    """Return the backend for ``alg``'s family."""
    return _BACKENDS[family_of(alg)]


def sign(alg: Algorithm, key: Key, message: bytes) -> bytes:
    """Sign ``message`` with ``key`` under ``alg``.

    Raises:
        KeyMismatch: The key does not fit ``alg``.
    """
    return backend_for(alg).sign(alg, key, message)


def verify(
    alg: Algorithm,
    key: Key,
    message: bytes,
    signature: bytes,
    *,
    allow_none: bool = False,
) -> bool:
    """Check ``signature`` over ``message``.

    Unsecured (NONE) tokens only verify when ``allow_none`` is set, so a
    forged ``"alg": "NONE"`` header cannot pass by default.

    Raises:
        KeyMismatch: The key is unusable for ``alg``.
    """
    if family_of(alg) is AlgorithmFamily.NONE and not allow_none:
        logger.debug("Refusing unsecured token: NONE algorithm not allowed")
        return False
    ok = backend_for(alg).verify(alg, key, message, signature)
    if not ok:
        logger.debug("%s signature did not verify", alg)
    return ok
