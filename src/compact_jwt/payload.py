"""JWT claims set with case-insensitive name uniqueness.

Claims are stored under the case-folded name as the only key; the casing the
caller supplied is kept alongside the value and used when serializing. There
is therefore exactly one entry per case-insensitive name, and the uniqueness
index can never disagree with the stored values.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from datetime import datetime, timezone
from typing import Any

from .claims import TIME_CLAIMS
from .errors import DuplicateClaim
from .serialization import b64encode_segment, dumps


def _fold(name: str) -> str:
    if not isinstance(name, str):
        raise TypeError(f"Claim name must be a string, got {type(name).__name__}")
    return name.casefold()


def _to_numeric_date(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def _normalize(name: str, value: Any) -> Any:
    # datetimes for exp/nbf/iat go on the wire as NumericDate
    if isinstance(value, datetime) and name.casefold() in TIME_CLAIMS:
        return _to_numeric_date(value)
    return value


class Payload(Mapping[str, Any]):
    """Ordered claims set.

    Lookups (``payload["SUB"]``, ``"Sub" in payload``) are case-insensitive;
    iteration and serialization use the casing the claim was stored with.

    Example:
        ```python
        payload = Payload({"sub": "user-1"})
        payload.add_claim("SUB", "user-2")               # False, unchanged
        payload.add_claim("SUB", "user-2", overwrite=True)  # True
        payload.to_dict()                                # {"SUB": "user-2"}
        ```
    """

    __slots__ = ("_claims",)

    def __init__(self, claims: Mapping[str, Any] | None = None) -> None:
        """Create a claims set.

        Raises:
            DuplicateClaim: Two names in ``claims`` differ only by case.
        """
        self._claims: dict[str, tuple[str, Any]] = {}
        if claims:
            staged: dict[str, tuple[str, Any]] = {}
            for name, value in claims.items():
                key = _fold(name)
                if key in staged:
                    raise DuplicateClaim(
                        f"Claim {name!r} conflicts with {staged[key][0]!r}"
                    )
                staged[key] = (name, _normalize(name, value))
            self._claims = staged

    @classmethod
    def from_dict(cls, claims: Mapping[str, Any]) -> Payload:
        return cls(claims)

    def add_claim(self, name: str, value: Any, overwrite: bool = False) -> bool:
        """Add or replace a claim.

        Args:
            name: Claim name; uniqueness is checked case-insensitively.
            value: Any JSON-serializable value. A ``datetime`` given for
                ``exp``/``nbf``/``iat`` is stored as a UNIX timestamp.
            overwrite: Replace an existing claim with the same folded name.
                The stored casing becomes ``name``.

        Returns:
            False if the claim exists and ``overwrite`` is False (nothing is
            changed), True otherwise.
        """
        key = _fold(name)
        if key in self._claims and not overwrite:
            return False
        self._claims[key] = (name, _normalize(name, value))
        return True

    def remove_claim(self, name: str) -> bool:
        """Remove a claim by case-insensitive name; return whether it existed."""
        return self._claims.pop(_fold(name), None) is not None

    def has_claim(self, name: str) -> bool:
        return _fold(name) in self._claims

    def has_claim_with_value(self, name: str, value: Any) -> bool:
        entry = self._claims.get(_fold(name))
        if entry is None:
            return False
        return entry[1] == _normalize(name, value)

    def stored_name(self, name: str) -> str | None:
        """Return the casing a claim was stored with, or None if absent."""
        entry = self._claims.get(_fold(name))
        return entry[0] if entry else None

    def to_dict(self) -> dict[str, Any]:
        return {name: value for name, value in self._claims.values()}

    def to_json(self, pretty: bool = False) -> str:
        return dumps(self.to_dict(), pretty=pretty)

    def encode(self) -> str:
        """Return the base64url payload segment."""
        return b64encode_segment(self.to_json().encode("utf-8"))

    def __getitem__(self, name: str) -> Any:
        try:
            return self._claims[_fold(name)][1]
        except KeyError:
            raise KeyError(name) from None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.casefold() in self._claims

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._claims.values())

    def __len__(self) -> int:
        return len(self._claims)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Payload):
            return self.to_dict() == other.to_dict()
        if isinstance(other, Mapping):
            return self.to_dict() == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Payload({self.to_dict()!r})"

    def __str__(self) -> str:
        return self.to_json()
