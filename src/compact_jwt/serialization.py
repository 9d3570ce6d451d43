"""JSON and base64url glue shared by Header, Payload and Token.

The encoders here produce the exact bytes that get signed. The decoders are
deliberately strict: a segment must be canonical unpadded base64url, so two
different wire strings can never decode to the same bytes.
"""

from __future__ import annotations

import binascii
import json
import re
from typing import IO, Any, Final, Protocol

from jwt.utils import base64url_decode, base64url_encode

from .errors import InvalidToken, MalformedToken

_SEGMENT_RE: Final = re.compile(r"[A-Za-z0-9_-]*")


class JSONRenderable(Protocol):
    def to_json(self, pretty: bool = False) -> str: ...


def dumps(obj: Any, pretty: bool = False) -> str:
    """Render ``obj`` as JSON text, compact unless ``pretty``.

    Raises:
        ValueError: ``obj`` holds NaN or an infinity, which JSON cannot carry.
    """
    if pretty:
        return json.dumps(obj, indent=2, allow_nan=False)
    return json.dumps(obj, separators=(",", ":"), allow_nan=False)


def write(stream: IO[str], obj: JSONRenderable, pretty: bool = False) -> IO[str]:
    """Write the JSON rendering of ``obj`` to ``stream`` and return the stream."""
    stream.write(obj.to_json(pretty=pretty))
    return stream


def is_segment(segment: str) -> bool:
    """Return whether ``segment`` only uses the URL-safe base64 alphabet."""
    return _SEGMENT_RE.fullmatch(segment) is not None


def b64encode_segment(data: bytes) -> str:
    """Encode bytes as an unpadded base64url segment."""
    return base64url_encode(data).decode("ascii")


def b64decode_segment(segment: str, error: type[InvalidToken] = MalformedToken) -> bytes:
    """Decode one unpadded base64url segment.

    Args:
        segment: Text between two dots of a compact token.
        error: Exception class raised on any failure.

    Raises:
        error: If the segment contains characters outside the URL-safe
            alphabet, padding, an impossible length, or non-zero trailing
            bits.
    """
    if not is_segment(segment):
        raise error("Segment is not unpadded base64url")
    try:
        data = base64url_decode(segment)
    except (binascii.Error, ValueError) as e:
        raise error("Segment is not valid base64url") from e
    # Re-encoding catches leftover bits that the decoder silently drops.
    if b64encode_segment(data) != segment:
        raise error("Segment is not canonically encoded")
    return data


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a JSON number")


def _reject_duplicates(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    obj: dict[str, Any] = {}
    for name, value in pairs:
        if name in obj:
            raise ValueError(f"Duplicate member {name!r}")
        obj[name] = value
    return obj


def load_json_object(raw: bytes, error: type[InvalidToken]) -> dict[str, Any]:
    """Parse UTF-8 JSON text that must be an object with unique member names.

    Args:
        raw: Decoded segment bytes.
        error: Exception class raised on any failure.

    Raises:
        error: If the bytes are not UTF-8, not JSON, not an object, or an
            object repeats a member name. The non-standard constants
            ``NaN``, ``Infinity`` and ``-Infinity`` are refused.
    """
    try:
        obj = json.loads(
            raw.decode("utf-8"),
            object_pairs_hook=_reject_duplicates,
            parse_constant=_reject_constant,
        )
    except (UnicodeDecodeError, ValueError) as e:
        raise error(f"Segment is not a valid JSON object: {e}") from e
    if not isinstance(obj, dict):
        raise error("Segment must be a JSON object")
    return obj
