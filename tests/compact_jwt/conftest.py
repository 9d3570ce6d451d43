import pytest
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from jwt import PyJWK
from jwt.utils import base64url_encode

import compact_jwt as m
from compact_jwt import validation

NOW = 1_700_000_000.0


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_private_keys() -> dict[m.Algorithm, ec.EllipticCurvePrivateKey]:
    return {
        m.Algorithm.ES256: ec.generate_private_key(ec.SECP256R1()),
        m.Algorithm.ES384: ec.generate_private_key(ec.SECP384R1()),
        m.Algorithm.ES512: ec.generate_private_key(ec.SECP521R1()),
    }


@pytest.fixture
def hmac_secret() -> bytes:
    return b"a-shared-secret-of-reasonable-length"


@pytest.fixture
def keypair(rsa_private_key, ec_private_keys, hmac_secret):
    """
    Factory fixture returning (signing_key, verification_key) for an algorithm.

    Usage in tests:
        sign_key, verify_key = keypair(m.Algorithm.ES384)
    """

    def _make(alg: m.Algorithm):
        family = m.family_of(alg)
        if family is m.AlgorithmFamily.HMAC:
            return hmac_secret, hmac_secret
        if family is m.AlgorithmFamily.RSA:
            return rsa_private_key, rsa_private_key.public_key()
        if family is m.AlgorithmFamily.ECDSA:
            private = ec_private_keys[alg]
            return private, private.public_key()
        return None, None

    return _make


@pytest.fixture
def make_oct_jwk():
    """
    Factory fixture that returns a function.

    Usage in tests:
        jwk = make_oct_jwk(kid="k1")
    """

    def _make(*, kid: str = "kid1", secret: bytes = b"supersecret") -> PyJWK:
        jwk_dict = {
            "kty": "oct",
            "kid": kid,
            "k": base64url_encode(secret).decode("ascii"),
            "alg": "HS256",
            "use": "sig",
        }
        return PyJWK.from_dict(jwk_dict)

    return _make


@pytest.fixture
def frozen_time(monkeypatch: pytest.MonkeyPatch) -> float:
    """Pin the clock used by claim validation to NOW."""
    monkeypatch.setattr(validation.time, "time", lambda: NOW)
    return NOW
