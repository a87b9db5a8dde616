"""Lazy subset enumeration."""

from itertools import combinations
from typing import Iterator, Sequence, TypeVar

T = TypeVar("T")


def subsets_by_size(items: Sequence[T]) -> Iterator[tuple[T, ...]]:
    """Yield every non-empty subset, smallest subsets first.

    Within one size, subsets come in lexicographic order of item position,
    so the first subset with a given property is also the smallest one.
    """
    for size in range(1, len(items) + 1):
        yield from combinations(items, size)
