"""Left-leaning red-black tree used as the location index."""

from __future__ import annotations

from typing import Any

from municipal_requests.structures.ordered_map import KeyT, OrderedMap, TreeNode, ValueT

RED = True
BLACK = False


class _RbNode(TreeNode[KeyT, ValueT]):
    __slots__ = ("red",)

    def __init__(self, key: KeyT, value: ValueT) -> None:
        super().__init__(key, value)
        self.red = RED


class BalancedColorTree(OrderedMap[KeyT, ValueT]):
    """
    Left-leaning red-black tree (2-3 variant).

    Red links only lean left, no path has two consecutive red links, and
    every root-to-leaf path crosses the same number of black links.
    """

    __slots__ = ()

    def insert(self, key: KeyT, value: ValueT) -> None:
        self._root = self._insert(self._root, key, value)
        self._root.red = BLACK

    def _insert(self, node: Any, key: KeyT, value: ValueT) -> Any:
        if node is None:
            self._size += 1
            return _RbNode(key, value)

        if key < node.key:
            node.left = self._insert(node.left, key, value)
        elif node.key < key:
            node.right = self._insert(node.right, key, value)
        else:
            node.value = value

        if _is_red(node.right) and not _is_red(node.left):
            node = _rotate_left(node)
        if _is_red(node.left) and _is_red(node.left.left):
            node = _rotate_right(node)
        if _is_red(node.left) and _is_red(node.right):
            _flip_colors(node)
        return node

    def is_red_black_valid(self) -> bool:
        """Check root color, left-leaning reds, no red-red links and equal black height."""
        if _is_red(self._root):
            return False

        def black_height(node: Any, parent_red: bool) -> int:
            if node is None:
                return 1
            if node.red and parent_red:
                return -1
            if _is_red(node.right):
                return -1
            left = black_height(node.left, node.red)
            right = black_height(node.right, node.red)
            if left < 0 or right < 0 or left != right:
                return -1
            return left + (0 if node.red else 1)

        return black_height(self._root, False) > 0


def _is_red(node: Any) -> bool:
    return node is not None and node.red


def _rotate_left(node: Any) -> Any:
    child = node.right
    node.right = child.left
    child.left = node
    child.red = node.red
    node.red = RED
    return child


def _rotate_right(node: Any) -> Any:
    child = node.left
    node.left = child.right
    child.right = node
    child.red = node.red
    node.red = RED
    return child


def _flip_colors(node: Any) -> None:
    node.red = RED
    node.left.red = BLACK
    node.right.red = BLACK


__all__ = ["BalancedColorTree"]
