"""Read surface shared by the binary-search-tree indices."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any, Generic, Protocol, TypeVar


class SupportsOrdering(Protocol):
    def __lt__(self, other: Any, /) -> bool: ...


KeyT = TypeVar("KeyT", bound=SupportsOrdering)
ValueT = TypeVar("ValueT")


class TreeNode(Generic[KeyT, ValueT]):
    """Binary tree node; subclasses add balancing metadata."""

    __slots__ = ("key", "value", "left", "right")

    def __init__(self, key: KeyT, value: ValueT) -> None:
        self.key = key
        self.value = value
        self.left: Any = None
        self.right: Any = None


class OrderedMap(ABC, Generic[KeyT, ValueT]):
    """Ordered map keyed by a totally ordered key.

    Keys are compared with ``<`` only; two keys are the same key when neither
    is less than the other. Lookups and scans never mutate the tree.
    Iterators are lazy and must not be held across an ``insert``.
    """

    __slots__ = ("_root", "_size")

    def __init__(self) -> None:
        self._root: Any = None
        self._size = 0

    @abstractmethod
    def insert(self, key: KeyT, value: ValueT) -> None:
        """Insert ``key``, or replace its value when it is already present."""

    def try_find(self, key: KeyT) -> tuple[bool, ValueT | None]:
        """Return ``(True, value)`` for a stored key, else ``(False, None)``."""
        node = self._root
        while node is not None:
            if key < node.key:
                node = node.left
            elif node.key < key:
                node = node.right
            else:
                return True, node.value
        return False, None

    def get(self, key: KeyT, default: ValueT | None = None) -> ValueT | None:
        found, value = self.try_find(key)
        return value if found else default

    def __contains__(self, key: object) -> bool:
        found, _ = self.try_find(key)  # type: ignore[arg-type]
        return found

    def __len__(self) -> int:
        return self._size

    def items(self) -> Iterator[tuple[KeyT, ValueT]]:
        """Yield ``(key, value)`` pairs in ascending key order."""
        return self.range_items()

    def keys(self) -> Iterator[KeyT]:
        for key, _ in self.range_items():
            yield key

    def values(self) -> Iterator[ValueT]:
        for _, value in self.range_items():
            yield value

    def range_items(
        self, start: KeyT | None = None, end: KeyT | None = None
    ) -> Iterator[tuple[KeyT, ValueT]]:
        """
        Yield pairs with ``start <= key <= end`` in ascending key order.

        Either bound may be omitted. Subtrees entirely outside the range are
        not visited.
        """
        stack: list[Any] = []
        node = self._root
        while stack or node is not None:
            if node is not None:
                if start is not None and node.key < start:
                    node = node.right
                    continue
                stack.append(node)
                node = node.left
                continue

            node = stack.pop()
            if end is not None and end < node.key:
                return
            yield node.key, node.value
            node = node.right

    def height(self) -> int:
        """Number of nodes on the longest root-to-leaf path (0 when empty)."""
        if self._root is None:
            return 0
        tallest = 0
        pending: list[tuple[Any, int]] = [(self._root, 1)]
        while pending:
            node, depth = pending.pop()
            tallest = max(tallest, depth)
            if node.left is not None:
                pending.append((node.left, depth + 1))
            if node.right is not None:
                pending.append((node.right, depth + 1))
        return tallest


__all__ = ["KeyT", "OrderedMap", "SupportsOrdering", "TreeNode", "ValueT"]
