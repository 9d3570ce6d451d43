"""JOSE header for compact JWTs."""

from __future__ import annotations

from enum import Enum
from typing import Any

from . import algorithms
from .algorithms import Algorithm
from .errors import MalformedHeader
from .serialization import b64encode_segment, dumps


class TokenType(str, Enum):
    """``typ`` header values."""

    JWT = "JWT"

    def __str__(self) -> str:
        return self.value


class Header:
    """Minimal ``{"alg", "typ"}`` header.

    The encoding is recomputed from the current state on every call, so
    changing ``alg`` after a token was encoded never reuses stale bytes.
    """

    __slots__ = ("_alg", "_typ")

    def __init__(self, alg: Algorithm | str = Algorithm.NONE, typ: TokenType = TokenType.JWT) -> None:
        self._alg = algorithms.parse(alg)
        self._typ = TokenType(typ)

    @property
    def alg(self) -> Algorithm:
        return self._alg

    @alg.setter
    def alg(self, value: Algorithm | str) -> None:
        # parse() raises before assignment, so a bad name leaves alg unchanged
        self._alg = algorithms.parse(value)

    @property
    def typ(self) -> TokenType:
        return self._typ

    @typ.setter
    def typ(self, value: TokenType | str) -> None:
        self._typ = TokenType(value)

    def to_dict(self) -> dict[str, str]:
        return {"alg": algorithms.name_of(self._alg), "typ": self._typ.value}

    def to_json(self, pretty: bool = False) -> str:
        return dumps(self.to_dict(), pretty=pretty)

    def encode(self) -> str:
        """Return the base64url header segment."""
        return b64encode_segment(self.to_json().encode("utf-8"))

    @classmethod
    def from_dict(cls, obj: dict[str, Any]) -> Header:
        """Build a Header from a parsed wire header.

        Member names are matched exactly: ``"Alg"`` is not ``"alg"``. Extra
        members are ignored.

        Raises:
            MalformedHeader: ``alg`` is missing or not a string, or ``typ`` is
                present but is not ``"JWT"``.
            UnknownAlgorithm: ``alg`` is not a registered name.
        """
        if "alg" not in obj:
            raise MalformedHeader("Header is missing the 'alg' member")
        alg = obj["alg"]
        if not isinstance(alg, str):
            raise MalformedHeader("Header 'alg' must be a string")

        typ = obj.get("typ", TokenType.JWT.value)
        if not isinstance(typ, str) or typ.upper() != TokenType.JWT.value:
            raise MalformedHeader(f"Unsupported header 'typ': {typ!r}")

        return cls(alg=algorithms.parse(alg))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Header):
            return NotImplemented
        return self._alg is other._alg and self._typ is other._typ

    def __repr__(self) -> str:
        return f"Header(alg={self._alg.value!r}, typ={self._typ.value!r})"

    def __str__(self) -> str:
        return self.to_json()
