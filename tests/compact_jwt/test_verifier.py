import json
import logging
from typing import Any, cast

import pytest
from _pytest.monkeypatch import MonkeyPatch
from jwt.algorithms import RSAAlgorithm
from jwt.utils import base64url_encode

import compact_jwt as m
from compact_jwt import verifier as verifier_module


class DummyProvider:
    """Duck-typed KeyProvider for tests."""

    def __init__(self, key: Any):
        self._key = key
        self.alg: m.Algorithm | None = None

    def get_key(self, alg: m.Algorithm) -> Any:
        self.alg = alg
        return self._key


def test_verifier_reads_alg_and_calls_keyprovider(monkeypatch: MonkeyPatch, hmac_secret):
    dummy_key = object()
    provider = DummyProvider(dummy_key)
    options = m.DecodeOptions(issuer="iss")
    verifier = m.JWTVerifier(
        cast(m.KeyProvider, provider),
        algorithms=("HS256",),
        options=options,
    )
    compact = m.encode({"sub": "u1"}, hmac_secret, "HS256")

    def fake_decode(*args: Any):
        token, key, algorithms, opts = args
        assert token == compact
        assert key is dummy_key
        assert algorithms == frozenset({m.Algorithm.HS256})
        assert opts is options
        return m.Token(m.Algorithm.HS256, {"sub": "u1"})

    monkeypatch.setattr(verifier_module, "decode_and_verify", fake_decode)

    claims = verifier.verify(compact)
    assert claims["sub"] == "u1"
    assert provider.alg is m.Algorithm.HS256


def test_verifier_end_to_end(rsa_private_key, frozen_time):
    verifier = m.JWTVerifier(
        m.StaticKeyProvider({"RS256": rsa_private_key.public_key()}),
        options=m.DecodeOptions(issuer="https://issuer.example", audience="api"),
    )
    compact = m.encode(
        {"iss": "https://issuer.example", "aud": "api", "exp": int(frozen_time) + 60},
        rsa_private_key,
        "RS256",
    )

    claims = verifier.verify(compact)
    assert claims["aud"] == "api"
    assert verifier.algorithms == frozenset({m.Algorithm.RS256})


def test_verifier_disallowed_alg_never_asks_for_a_key(hmac_secret):
    provider = DummyProvider(hmac_secret)
    verifier = m.JWTVerifier(cast(m.KeyProvider, provider), algorithms="RS256")
    compact = m.encode({"sub": "u"}, hmac_secret, "HS256")

    with pytest.raises(m.DisallowedAlgorithm):
        verifier.verify(compact)
    assert provider.alg is None


def test_verifier_missing_key_is_invalid_token(hmac_secret):
    verifier = m.JWTVerifier(
        m.StaticKeyProvider({"HS256": hmac_secret}),
        algorithms=("HS256", "HS512"),
    )
    compact = m.encode({"sub": "u"}, hmac_secret, "HS512")

    with pytest.raises(m.InvalidToken) as exc_info:
        verifier.verify(compact)
    assert exc_info.type is m.InvalidToken


def test_verifier_logs_rejections(hmac_secret, frozen_time, caplog: pytest.LogCaptureFixture):
    verifier = m.JWTVerifier(m.StaticKeyProvider({"HS256": hmac_secret}), algorithms="HS256")
    compact = m.encode({"exp": int(frozen_time) - 10}, hmac_secret, "HS256")

    with caplog.at_level(logging.INFO, logger="compact_jwt.verifier"):
        with pytest.raises(m.TokenExpired):
            verifier.verify(compact)

    assert "Rejected token: TokenExpired" in caplog.text


def test_verifier_malformed_header(hmac_secret):
    verifier = m.JWTVerifier(m.StaticKeyProvider({"HS256": hmac_secret}), algorithms="HS256")
    header = base64url_encode(b'{"typ":"JWT"}').decode("ascii")

    with pytest.raises(m.MalformedHeader):
        verifier.verify(f"{header}.e30.")


def test_verifier_rejects_empty_allowlist(hmac_secret):
    with pytest.raises(ValueError):
        m.JWTVerifier(m.StaticKeyProvider({"HS256": hmac_secret}), algorithms=())


class TestStaticKeyProvider:
    def test_unknown_algorithm_name(self):
        with pytest.raises(m.UnknownAlgorithm):
            m.StaticKeyProvider({"hs256": b"k"})

    def test_from_jwks(self, rsa_private_key):
        rsa_jwk = json.loads(RSAAlgorithm.to_jwk(rsa_private_key.public_key()))
        rsa_jwk["kid"] = "rsa1"
        oct_jwk = {"kty": "oct", "kid": "h1", "k": base64url_encode(b"supersecret").decode("ascii")}
        unsupported = dict(rsa_jwk, kid="ps1", alg="PS256")

        provider = m.StaticKeyProvider.from_jwks({"keys": [unsupported, rsa_jwk, oct_jwk]})

        assert provider.algorithms == frozenset({m.Algorithm.RS256, m.Algorithm.HS256})
        assert provider.get_key(m.Algorithm.RS256).key_id == "rsa1"

        compact = m.encode({"sub": "u"}, rsa_private_key, "RS256")
        verifier = m.JWTVerifier(provider, algorithms="RS256")
        assert verifier.verify(compact)["sub"] == "u"

    def test_first_key_per_algorithm_wins(self):
        first = {"kty": "oct", "kid": "a", "k": base64url_encode(b"one").decode("ascii")}
        second = {"kty": "oct", "kid": "b", "k": base64url_encode(b"two").decode("ascii")}

        provider = m.StaticKeyProvider.from_jwks({"keys": [first, second]})
        assert provider.get_key(m.Algorithm.HS256).key_id == "a"

    @pytest.mark.parametrize("jwks", [{"keys": []}, {"keys": [{"kty": "nope"}]}])
    def test_invalid_jwks(self, jwks):
        with pytest.raises(ValueError):
            m.StaticKeyProvider.from_jwks(jwks)
