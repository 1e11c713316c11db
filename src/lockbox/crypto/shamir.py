"""
Shamir Secret Sharing (SSS) over GF(256).

A secret of m bytes is split byte by byte. For each position i a random
polynomial of degree k-1 is drawn with the secret byte as its constant term:

    p_i(x) = secret[i] + r_1*x + ... + r_{k-1}*x^{k-1}

Key j (1-indexed) is the byte string

    [x = j][p_0(j)][p_1(j)] ... [p_{m-1}(j)]

so every key is m + 1 bytes long. Any k keys recover each p_i(0) by Lagrange
interpolation; k - 1 or fewer are indistinguishable from random.

No checksum is embedded in the keys. Callers who need to know that a
recovered secret is the right one pass a predicate to combine() (for
example, checking a MAC or signature over the candidate).

Reference:
    Shamir, A. (1979). "How to share a secret". Communications of the ACM.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence, Union

from . import gf256
from .comb import combination_such_that
from .errors import (
    DuplicateXCoordinate,
    InsufficientShares,
    InvalidByte,
    InvalidThreshold,
    NoShares,
    ShamirError,
    TooManyShares,
    UnequalKeyLengths,
)
from .rng import EntropySource, get_entropy


_logger = logging.getLogger(__name__)

# A key is its wire form: one x byte followed by one y byte per secret byte.
Key = bytes

# Anything accepted as a secret or key. Text is taken character by
# character, so every character must have a code point below 256.
SecretInput = Union[str, bytes, bytearray, memoryview, Sequence[int]]

Predicate = Callable[[bytes], bool]

# x = 0 is where the secret lives, leaving 255 usable x-coordinates.
MAX_SHARES = gf256.ORDER


def to_bytes(data: SecretInput) -> bytes:
    """
    Normalize a secret or key to bytes.

    Raises:
        InvalidByte: If a character or integer is outside 0-255
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)

    values = [ord(c) for c in data] if isinstance(data, str) else list(data)
    for i, v in enumerate(values):
        if not gf256.is_elem(v):
            raise InvalidByte(v, i)
    return bytes(values)


def _elem(key: SecretInput, pos: int) -> int:
    v = ord(key[pos]) if isinstance(key, str) else key[pos]
    if not gf256.is_elem(v):
        raise InvalidByte(v, pos)
    return v


def get_x(key: SecretInput) -> int:
    """x-coordinate of the points encoded by key."""
    return _elem(key, 0)


def get_y(key: SecretInput, idx: int) -> int:
    """y-coordinate of the point for secret byte idx."""
    return _elem(key, idx + 1)


def check_parameters(k: int, n: int) -> None:
    """
    Validate a k-of-n configuration.

    Raises:
        InvalidThreshold: If k < 2
        InsufficientShares: If n < k
        TooManyShares: If n > 255
    """
    if k < 2:
        raise InvalidThreshold(f"Threshold must be at least 2, got {k}")
    if n < k:
        raise InsufficientShares(
            f"Must have at least threshold total keys, got n={n}, k={k}"
        )
    if n > MAX_SHARES:
        raise TooManyShares(f"Can't make more than {MAX_SHARES} distinct keys")


def split(
    secret: SecretInput,
    k: int,
    n: Optional[int] = None,
    entropy: Optional[EntropySource] = None,
) -> list[Key]:
    """
    Split a secret into n keys, any k of which reconstruct it.

    Args:
        secret: Text, bytes or a sequence of byte values
        k: Minimum number of keys needed to recombine the secret
        n: Total number of keys to produce (default: k)
        entropy: Source of polynomial coefficients (default: os.urandom)

    Returns:
        n keys with x-coordinates 1..n, in that order

    Raises:
        InvalidThreshold: If k < 2
        InsufficientShares: If n < k
        TooManyShares: If n > 255
        InvalidByte: If the secret holds a value outside 0-255

    Example:
        >>> keys = split(b"hunter2", k=2, n=3)
        >>> combine(keys[1:]) == b"hunter2"
        True
    """
    if n is None:
        n = k
    check_parameters(k, n)

    data = to_bytes(secret)
    source = entropy if entropy is not None else get_entropy()

    keys = [bytearray(1 + len(data)) for _ in range(n)]
    for j, key in enumerate(keys):
        key[0] = j + 1

    # coeffs[0] is the secret byte, coeffs[1:] are fresh random bytes
    coeffs = bytearray(k)
    randoms = bytearray(k - 1)

    for i, b in enumerate(data):
        source.fill(randoms)
        coeffs[0] = b
        coeffs[1:] = randoms
        for key in keys:
            key[1 + i] = gf256.poly_eval(coeffs, key[0])

    return [bytes(key) for key in keys]


def _basis_at_zero(xs: list[int]) -> list[int]:
    """
    Lagrange basis coefficients L_t(0) for the given x-coordinates.

    L_t(0) = prod_{u != t} (0 - x_u) / (x_t - x_u)
    """
    for t in range(len(xs)):
        for u in range(t + 1, len(xs)):
            if xs[t] == xs[u]:
                raise DuplicateXCoordinate(t, u, xs[t])

    basis = []
    for t, xt in enumerate(xs):
        prod = gf256.ONE
        for u, xu in enumerate(xs):
            if u == t:
                continue
            term = gf256.div(gf256.sub(gf256.ZERO, xu), gf256.sub(xt, xu))
            prod = gf256.mul(prod, term)
        basis.append(prod)
    return basis


def _interpolate(keys: list[Key]) -> bytes:
    """Recover the secret from exactly these keys (all of them are used)."""
    basis = _basis_at_zero([get_x(key) for key in keys])

    secret = bytearray(len(keys[0]) - 1)
    for i in range(len(secret)):
        total = gf256.ZERO
        for key, coeff in zip(keys, basis):
            total = gf256.add(total, gf256.mul(get_y(key, i), coeff))
        secret[i] = total
    return bytes(secret)


def combine(
    keys: Iterable[SecretInput],
    k: Optional[int] = None,
    predicate: Optional[Predicate] = None,
) -> Optional[bytes]:
    """
    Recombine keys produced by split() into the original secret.

    With k equal to the number of keys, every key is interpolated. With a
    smaller k, k-subsets of the keys are tried in lexicographic order until
    one recombines to a secret accepted by predicate.

    If fewer keys than the split threshold are given, the result is random.

    Args:
        keys: Keys to recombine
        k: Number of keys per combination (default and maximum: all of them)
        predicate: Acceptance test for a recovered secret (default: accept)

    Returns:
        The recovered secret, or None if no combination satisfies predicate

    Raises:
        NoShares: If keys is empty
        InvalidThreshold: If k < 1
        UnequalKeyLengths: If keys encode secrets of different lengths
        DuplicateXCoordinate: If a combination holds two keys with the same x
    """
    keys = [to_bytes(key) for key in keys]

    if not keys:
        raise NoShares("Can't combine nothing")
    if k is None or k > len(keys):
        k = len(keys)
    if k < 1:
        raise InvalidThreshold(f"Threshold must be at least 1, got {k}")
    if any(len(key) == 0 for key in keys):
        raise ShamirError("Keys must hold at least an x-coordinate")
    if any(len(key) != len(keys[0]) for key in keys):
        raise UnequalKeyLengths("Unequal key lengths")

    if k == len(keys):
        secret = _interpolate(keys)
        if predicate is not None and not predicate(secret):
            _logger.debug("Combination of all %d keys rejected", k)
            return None
        return secret

    accept = predicate if predicate is not None else (lambda secret: True)

    def recovers(candidate: list[Key]) -> bool:
        return accept(_interpolate(candidate))

    found = combination_such_that(recovers, keys, k)
    if found is None:
        _logger.debug("No %d-of-%d combination satisfied predicate", k, len(keys))
        return None

    _logger.debug(
        "Accepted combination with x-coordinates %s", [get_x(key) for key in found]
    )
    return _interpolate(found)


@dataclass(frozen=True)
class SplitOptions:
    """
    Parameters for split().

    Attributes:
        threshold: Minimum keys needed to recombine (k)
        total_shares: Keys to produce (n, default: threshold)
        entropy: Coefficient source (default: os.urandom)
    """

    threshold: int
    total_shares: Optional[int] = None
    entropy: Optional[EntropySource] = None

    def split(self, secret: SecretInput) -> list[Key]:
        return split(secret, self.threshold, self.total_shares, self.entropy)


@dataclass(frozen=True)
class CombineOptions:
    """
    Parameters for combine().

    Attributes:
        threshold: Keys per combination (default: all given keys)
        predicate: Acceptance test for a recovered secret (default: accept)
    """

    threshold: Optional[int] = None
    predicate: Optional[Predicate] = None

    def combine(self, keys: Iterable[SecretInput]) -> Optional[bytes]:
        return combine(keys, self.threshold, self.predicate)
