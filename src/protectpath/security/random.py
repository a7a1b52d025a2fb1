"""Cryptographically secure random source used for salts and IVs.

Engines take a ``RandomSource`` instead of calling ``os.urandom`` directly so
the capability is explicit. The default ``SystemRandomSource`` is backed by
the operating system CSPRNG and is safe to share between threads.
"""
from __future__ import annotations

import os

from protectpath.core.exceptions import DerivationError


class RandomSource:
    """Capability interface: return ``length`` unpredictable bytes."""

    def token_bytes(self, length: int) -> bytes:
        raise NotImplementedError


class SystemRandomSource(RandomSource):
    def token_bytes(self, length: int) -> bytes:
        if length <= 0:
            raise ValueError("length must be positive")
        try:
            data = os.urandom(length)
        except (NotImplementedError, OSError) as e:
            raise DerivationError(f"secure random source unavailable: {e}") from e
        if len(data) != length:
            raise DerivationError("secure random source returned a short read")
        return data


_default = SystemRandomSource()


def default_random_source() -> RandomSource:
    """Return the process-wide random source."""
    return _default
