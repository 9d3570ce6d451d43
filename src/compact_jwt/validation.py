"""Registered-claim validation for decoded tokens."""

from __future__ import annotations

import math
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Final

from .claims import RegisteredClaim, describe
from .errors import (
    ClaimMismatch,
    ClaimMissing,
    MalformedPayload,
    TokenExpired,
    TokenNotYetValid,
)

DEFAULT_MAX_TOKEN_LENGTH: Final[int] = 64 * 1024
"""Default upper bound on the compact token length, in characters."""

DEFAULT_MAX_SEGMENT_BYTES: Final[int] = 48 * 1024
"""Default upper bound on any decoded segment, in bytes."""


@dataclass(frozen=True, slots=True)
class DecodeOptions:
    """Configuration for claim validation and input limits.

    Attributes:
        leeway: Clock skew tolerance in seconds (or a timedelta) applied to
            ``exp`` and ``nbf``. Default: 0.

        issuer: Expected ``iss``. If None, issuer is not checked.

        audience: Expected ``aud``; a single string or any iterable of
            strings, any one of which may match. If None, not checked.

        subject: Expected ``sub``. If None, not checked.

        jwt_id: Expected ``jti``. If None, not checked.

        require: Claim names that must be present regardless of value; a
            single name or any iterable of names.

        allow_none: Accept unsecured (NONE) tokens. Only takes effect when
            NONE is also in the caller's expected algorithms. Default: False.

        max_token_length: Reject compact strings longer than this before
            any decoding.

        max_segment_bytes: Reject tokens in which any segment could decode
            to more than this many bytes.

    Example:
        ```python
        options = DecodeOptions(
            issuer="https://issuer.example",
            audience="api://orders",
            leeway=10,
        )
        token = decode_and_verify(raw, key, {"RS256"}, options)
        ```
    """

    leeway: float | timedelta = 0
    issuer: str | None = None
    audience: str | Iterable[str] | None = None
    subject: str | None = None
    jwt_id: str | None = None
    require: str | Iterable[str] = field(default_factory=frozenset)
    allow_none: bool = False
    max_token_length: int = DEFAULT_MAX_TOKEN_LENGTH
    max_segment_bytes: int = DEFAULT_MAX_SEGMENT_BYTES

    def __post_init__(self) -> None:
        if isinstance(self.audience, Iterable) and not isinstance(self.audience, str):
            object.__setattr__(self, "audience", frozenset(self.audience))
        require = {self.require} if isinstance(self.require, str) else self.require
        object.__setattr__(self, "require", frozenset(require))
        if self.leeway_seconds < 0:
            raise ValueError(f"leeway must not be negative, got {self.leeway}")
        if self.max_token_length <= 0 or self.max_segment_bytes <= 0:
            raise ValueError("size limits must be positive")

    @property
    def leeway_seconds(self) -> float:
        if isinstance(self.leeway, timedelta):
            return self.leeway.total_seconds()
        return float(self.leeway)


def _numeric_date(payload: Mapping[str, Any], claim: RegisteredClaim) -> float | None:
    if claim.value not in payload:
        return None
    value = payload[claim.value]
    # bool is an int subclass but never a valid NumericDate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedPayload(f"{describe(claim)} claim ({claim.value}) must be a number")
    try:
        finite = math.isfinite(value)
    except OverflowError:  # int beyond float range
        finite = False
    if not finite:
        raise MalformedPayload(f"{describe(claim)} claim ({claim.value}) must be a finite number")
    return value


def _expect_equal(payload: Mapping[str, Any], claim: RegisteredClaim, expected: str | None) -> None:
    if expected is None:
        return
    if claim.value not in payload:
        raise ClaimMissing(f"Token is missing the {describe(claim)} claim ({claim.value})")
    if payload[claim.value] != expected:
        raise ClaimMismatch(f"{describe(claim)} claim ({claim.value}) does not match")


def _check_audience(payload: Mapping[str, Any], expected: str | frozenset[str] | None) -> None:
    if expected is None:
        return
    name = RegisteredClaim.AUDIENCE.value
    if name not in payload:
        raise ClaimMissing("Token is missing the Audience claim (aud)")

    accepted = {expected} if isinstance(expected, str) else expected
    aud = payload[name]
    if isinstance(aud, str):
        if aud in accepted:
            return
    elif isinstance(aud, list):
        if any(isinstance(item, str) and item in accepted for item in aud):
            return
    else:
        raise MalformedPayload("Audience claim (aud) must be a string or an array of strings")
    raise ClaimMismatch("Audience claim (aud) does not match")


def validate_claims(
    payload: Mapping[str, Any],
    options: DecodeOptions,
    now: float | None = None,
) -> None:
    """Validate registered claims of a verified payload.

    Args:
        payload: Claims, looked up by their registered lowercase names.
        options: Expectations and leeway.
        now: Current UNIX time; defaults to ``time.time()``.

    Raises:
        MalformedPayload: A time claim is not a number, or ``aud`` has an
            impossible type.
        TokenExpired: ``now > exp + leeway``.
        TokenNotYetValid: ``now < nbf - leeway``.
        ClaimMissing: A required or expected claim is absent.
        ClaimMismatch: A claim differs from its configured expectation.
    """
    if now is None:
        now = time.time()
    leeway = options.leeway_seconds

    for name in sorted(options.require):
        if name not in payload:
            raise ClaimMissing(f"Token is missing the required {name!r} claim")

    exp = _numeric_date(payload, RegisteredClaim.EXPIRATION)
    nbf = _numeric_date(payload, RegisteredClaim.NOT_BEFORE)
    _numeric_date(payload, RegisteredClaim.ISSUED_AT)

    if exp is not None and now > exp + leeway:
        raise TokenExpired("Token has expired")
    if nbf is not None and now < nbf - leeway:
        raise TokenNotYetValid("Token is not yet valid")

    _expect_equal(payload, RegisteredClaim.ISSUER, options.issuer)
    _check_audience(payload, options.audience)  # type: ignore[arg-type]
    _expect_equal(payload, RegisteredClaim.SUBJECT, options.subject)
    _expect_equal(payload, RegisteredClaim.JWT_ID, options.jwt_id)
