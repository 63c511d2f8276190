"""Array-backed binary max-heap ordered by an injected comparator."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Generic, TypeVar

T = TypeVar("T")

Comparator = Callable[[T, T], int]
"""Returns a positive number when the first value ranks higher, zero on a tie."""


class MaxPriorityHeap(Generic[T]):
    """
    Binary max-heap.

    For every non-root slot ``i``, ``compare(items[parent(i)], items[i]) >= 0``.
    """

    __slots__ = ("_compare", "_items")

    def __init__(self, compare: Comparator[T], values: Iterable[T] | None = None) -> None:
        self._compare = compare
        self._items: list[T] = []
        if values is not None:
            for value in values:
                self.push(value)

    def __len__(self) -> int:
        return len(self._items)

    def clear(self) -> None:
        self._items.clear()

    def push(self, value: T) -> None:
        self._items.append(value)
        self._sift_up(len(self._items) - 1)

    def try_peek(self) -> tuple[bool, T | None]:
        if not self._items:
            return False, None
        return True, self._items[0]

    def try_pop(self) -> tuple[bool, T | None]:
        """Remove and return the highest-ranked value, or ``(False, None)`` when empty."""
        if not self._items:
            return False, None

        top = self._items[0]
        last = self._items.pop()
        if self._items:
            self._items[0] = last
            self._sift_down(0)
        return True, top

    def top(self, count: int) -> tuple[T, ...]:
        """
        Return up to ``count`` values in descending rank without changing the heap.

        Pops from a copy of the backing array, so repeated calls observe the
        same population and return the same sequence.
        """
        if count <= 0:
            return ()
        shadow: MaxPriorityHeap[T] = MaxPriorityHeap(self._compare)
        shadow._items = list(self._items)

        ranked: list[T] = []
        while len(ranked) < count:
            found, value = shadow.try_pop()
            if not found:
                break
            ranked.append(value)  # type: ignore[arg-type]
        return tuple(ranked)

    def _sift_up(self, index: int) -> None:
        items = self._items
        while index > 0:
            parent = (index - 1) // 2
            if self._compare(items[index], items[parent]) <= 0:
                break
            items[index], items[parent] = items[parent], items[index]
            index = parent

    def _sift_down(self, index: int) -> None:
        items = self._items
        size = len(items)
        while True:
            left = 2 * index + 1
            right = left + 1
            best = index
            if left < size and self._compare(items[left], items[best]) > 0:
                best = left
            if right < size and self._compare(items[right], items[best]) > 0:
                best = right
            if best == index:
                return
            items[index], items[best] = items[best], items[index]
            index = best


__all__ = ["Comparator", "MaxPriorityHeap"]
