"""
Enumeration of k-element combinations.

Combinations are produced in lexicographic order of their index sets:
(0, 1, ..., k-1) first, the rightmost index advancing fastest and carrying
leftward when it runs out of room. Generation is lazy, so a search stops as
soon as the first match is found.
"""

from typing import Callable, Iterator, Optional, Sequence, TypeVar


T = TypeVar("T")


def index_combinations(n: int, k: int) -> Iterator[tuple[int, ...]]:
    """
    Yield every k-subset of range(n) as a sorted tuple of indices.

    Yields nothing when k > n, and a single empty tuple when k == 0.
    Each call returns a fresh generator.

    Raises:
        ValueError: If n or k is negative
    """
    if n < 0 or k < 0:
        raise ValueError(f"n and k must be non-negative, got n={n}, k={k}")
    if k > n:
        return

    idx = list(range(k))
    while True:
        yield tuple(idx)

        # Find the rightmost index that can still advance. Position i may
        # hold at most n - k + i.
        i = k - 1
        while i >= 0 and idx[i] == n - k + i:
            i -= 1
        if i < 0:
            return

        idx[i] += 1
        for j in range(i + 1, k):
            idx[j] = idx[j - 1] + 1


def combinations(items: Sequence[T], k: int) -> Iterator[list[T]]:
    """Yield every k-element combination of items, in index order."""
    for idx in index_combinations(len(items), k):
        yield [items[i] for i in idx]


def combination_such_that(
    predicate: Callable[[list[T]], bool], items: Sequence[T], k: int
) -> Optional[list[T]]:
    """
    Return the first k-element combination of items satisfying predicate.

    Args:
        predicate: Test applied to each candidate combination
        items: Ordered collection to choose from
        k: Size of each combination

    Returns:
        The first matching combination, or None if none matches
    """
    for candidate in combinations(items, k):
        if predicate(candidate):
            return candidate
    return None
