"""Registered claim names (RFC 7519 section 4.1)."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Final


class RegisteredClaim(str, Enum):
    """Claims with semantics defined by the JWT standard."""

    EXPIRATION = "exp"
    NOT_BEFORE = "nbf"
    ISSUER = "iss"
    AUDIENCE = "aud"
    ISSUED_AT = "iat"
    SUBJECT = "sub"
    JWT_ID = "jti"

    def __str__(self) -> str:
        return self.value


_DESCRIPTIONS: Final[Mapping[RegisteredClaim, str]] = MappingProxyType(
    {
        RegisteredClaim.EXPIRATION: "Expiration Time",
        RegisteredClaim.NOT_BEFORE: "Not Before",
        RegisteredClaim.ISSUER: "Issuer",
        RegisteredClaim.AUDIENCE: "Audience",
        RegisteredClaim.ISSUED_AT: "Issued At",
        RegisteredClaim.SUBJECT: "Subject",
        RegisteredClaim.JWT_ID: "JWT ID",
    }
)

TIME_CLAIMS: Final[frozenset[str]] = frozenset(
    {
        RegisteredClaim.EXPIRATION.value,
        RegisteredClaim.NOT_BEFORE.value,
        RegisteredClaim.ISSUED_AT.value,
    }
)
"""Claims carrying NumericDate values (seconds since the epoch)."""


def claim_name(claim: RegisteredClaim) -> str:
    """Return the wire name of a registered claim."""
    return claim.value


def describe(claim: RegisteredClaim) -> str:
    """Return the human-readable name used in error messages."""
    return _DESCRIPTIONS[claim]


def lookup(name: str) -> RegisteredClaim | None:
    """Return the registered claim with wire name ``name``, if any."""
    try:
        return RegisteredClaim(name)
    except ValueError:
        return None
