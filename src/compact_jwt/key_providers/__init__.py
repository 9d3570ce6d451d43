"""
Key provider implementations for resolving JWT verification keys.

This package contains implementations of the KeyProvider protocol,
allowing flexible resolution of verification keys from different sources.
"""

from .static import StaticKeyProvider

__all__ = ["StaticKeyProvider"]
