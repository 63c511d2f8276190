"""AVL tree used as the creation-time index."""

from __future__ import annotations

from typing import Any

from municipal_requests.structures.ordered_map import KeyT, OrderedMap, TreeNode, ValueT


class _AvlNode(TreeNode[KeyT, ValueT]):
    __slots__ = ("height",)

    def __init__(self, key: KeyT, value: ValueT) -> None:
        super().__init__(key, value)
        self.height = 1


class BalancedHeightTree(OrderedMap[KeyT, ValueT]):
    """
    Height-balanced binary search tree.

    After every insertion each node satisfies
    ``abs(height(left) - height(right)) <= 1``, so the tree height stays
    below ``1.44 * log2(n + 2)``.
    """

    __slots__ = ()

    def insert(self, key: KeyT, value: ValueT) -> None:
        self._root = self._insert(self._root, key, value)

    def _insert(self, node: Any, key: KeyT, value: ValueT) -> Any:
        if node is None:
            self._size += 1
            return _AvlNode(key, value)

        if key < node.key:
            node.left = self._insert(node.left, key, value)
        elif node.key < key:
            node.right = self._insert(node.right, key, value)
        else:
            node.value = value
            return node

        _update_height(node)
        balance = _balance_factor(node)

        # The rotation case is chosen by where the new key landed relative to
        # the heavy child, not by the child's own balance factor.
        if balance > 1 and key < node.left.key:
            return _rotate_right(node)
        if balance < -1 and node.right.key < key:
            return _rotate_left(node)
        if balance > 1 and node.left.key < key:
            node.left = _rotate_left(node.left)
            return _rotate_right(node)
        if balance < -1 and key < node.right.key:
            node.right = _rotate_right(node.right)
            return _rotate_left(node)
        return node

    def is_height_balanced(self) -> bool:
        """Recompute heights bottom-up and check every balance factor."""

        def measure(node: Any) -> int:
            if node is None:
                return 0
            left = measure(node.left)
            right = measure(node.right)
            if left < 0 or right < 0 or abs(left - right) > 1:
                return -1
            if node.height != 1 + max(left, right):
                return -1
            return 1 + max(left, right)

        return measure(self._root) >= 0


def _height(node: Any) -> int:
    return 0 if node is None else node.height


def _balance_factor(node: Any) -> int:
    return _height(node.left) - _height(node.right)


def _update_height(node: Any) -> None:
    node.height = 1 + max(_height(node.left), _height(node.right))


def _rotate_right(pivot: Any) -> Any:
    child = pivot.left
    pivot.left = child.right
    child.right = pivot
    _update_height(pivot)
    _update_height(child)
    return child


def _rotate_left(pivot: Any) -> Any:
    child = pivot.right
    pivot.right = child.left
    child.left = pivot
    _update_height(pivot)
    _update_height(child)
    return child


__all__ = ["BalancedHeightTree"]
