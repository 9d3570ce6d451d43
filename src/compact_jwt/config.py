"""Environment-driven configuration.

Reads verification settings from the process environment, after loading a
``.env`` file with python-dotenv (real environment variables win).

Variables (default prefix ``JWT_``):

=========================  ==============================================
``JWT_ALGORITHMS``         comma-separated allowlist (default ``HS256``)
``JWT_ISSUER``             expected ``iss``
``JWT_AUDIENCE``           comma-separated accepted ``aud`` values
``JWT_SUBJECT``            expected ``sub``
``JWT_ID``                 expected ``jti``
``JWT_LEEWAY``             clock skew tolerance in seconds
``JWT_REQUIRE``            comma-separated claims that must be present
``JWT_ALLOW_NONE``         ``1``/``true``/``yes``/``on`` to accept NONE
``JWT_MAX_TOKEN_LENGTH``   maximum compact token length
``JWT_MAX_SEGMENT_BYTES``  maximum decoded segment size
=========================  ==============================================
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import find_dotenv, load_dotenv

from .algorithms import Algorithm, parse_many
from .validation import DEFAULT_MAX_SEGMENT_BYTES, DEFAULT_MAX_TOKEN_LENGTH, DecodeOptions

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})


def _list(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _number(env: Mapping[str, str], name: str, default: float, cast: type = float) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _environ(dotenv: bool) -> Mapping[str, str]:
    if dotenv:
        load_dotenv(find_dotenv(usecwd=True), override=False)
    return os.environ


def options_from_env(prefix: str = "JWT_", *, dotenv: bool = True) -> DecodeOptions:
    """Build DecodeOptions from ``{prefix}*`` environment variables.

    Raises:
        ValueError: A numeric variable does not parse, or a value is out of
            range.
    """
    env = _environ(dotenv)
    audience = _list(env.get(f"{prefix}AUDIENCE"))

    return DecodeOptions(
        leeway=_number(env, f"{prefix}LEEWAY", 0),
        issuer=env.get(f"{prefix}ISSUER") or None,
        audience=frozenset(audience) if audience else None,
        subject=env.get(f"{prefix}SUBJECT") or None,
        jwt_id=env.get(f"{prefix}ID") or None,
        require=frozenset(_list(env.get(f"{prefix}REQUIRE"))),
        allow_none=env.get(f"{prefix}ALLOW_NONE", "").strip().lower() in _TRUTHY,
        max_token_length=int(_number(env, f"{prefix}MAX_TOKEN_LENGTH", DEFAULT_MAX_TOKEN_LENGTH, int)),
        max_segment_bytes=int(_number(env, f"{prefix}MAX_SEGMENT_BYTES", DEFAULT_MAX_SEGMENT_BYTES, int)),
    )


def allowed_algorithms_from_env(prefix: str = "JWT_", *, dotenv: bool = True) -> frozenset[Algorithm]:
    """Read the algorithm allowlist from ``{prefix}ALGORITHMS``.

    Raises:
        UnknownAlgorithm: A listed name is not registered.
    """
    env = _environ(dotenv)
    names = _list(env.get(f"{prefix}ALGORITHMS")) or [Algorithm.HS256.value]
    return parse_many(names)
