"""
Entropy sources for polynomial coefficients and sealing keys.

An entropy source is anything with a fill(buffer) method that overwrites a
bytearray with random bytes. The splitter treats it as an opaque capability
and does not check the quality of what it returns.
"""

import os
import random
from typing import Optional, Protocol


class EntropySource(Protocol):
    """Supplier of random bytes."""

    def fill(self, buffer: bytearray) -> None:
        """Overwrite every byte of buffer with random data."""
        ...


class SystemEntropy:
    """Operating system CSPRNG (os.urandom)."""

    def fill(self, buffer: bytearray) -> None:
        buffer[:] = os.urandom(len(buffer))


class SeededEntropy:
    """
    Deterministic source backed by random.Random.

    Same seed, same bytes. Useful for reproducible tests; never use it to
    protect a real secret.
    """

    def __init__(self, seed: int = 0):
        self._rng = random.Random(seed)

    def fill(self, buffer: bytearray) -> None:
        buffer[:] = self._rng.randbytes(len(buffer))


_default = SystemEntropy()


def get_entropy() -> EntropySource:
    """Return the process-wide default entropy source."""
    return _default


def random_bytes(n: int, entropy: Optional[EntropySource] = None) -> bytes:
    """Draw n bytes from entropy (default: the system CSPRNG)."""
    source = entropy if entropy is not None else get_entropy()
    buffer = bytearray(n)
    source.fill(buffer)
    return bytes(buffer)
