"""Shared fixtures for lockbox tests."""

import pytest

from lockbox.crypto.rng import SeededEntropy


class ZeroEntropy:
    """Entropy stub that only ever returns zero bytes."""

    def fill(self, buffer: bytearray) -> None:
        buffer[:] = bytes(len(buffer))


class CountingEntropy:
    """Seeded entropy that records the size of every request."""

    def __init__(self, seed: int = 0):
        self._inner = SeededEntropy(seed)
        self.requests: list[int] = []

    def fill(self, buffer: bytearray) -> None:
        self.requests.append(len(buffer))
        self._inner.fill(buffer)


@pytest.fixture
def entropy():
    """Reproducible entropy source."""
    return SeededEntropy(1234)


@pytest.fixture
def zero_entropy():
    return ZeroEntropy()


@pytest.fixture
def counting_entropy():
    return CountingEntropy()


@pytest.fixture
def store_dir(tmp_path):
    """Fresh key store directory."""
    return tmp_path / "store"
