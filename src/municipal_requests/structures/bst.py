"""Unbalanced binary search tree used as the ticket-number index."""

from __future__ import annotations

from municipal_requests.structures.ordered_map import KeyT, OrderedMap, TreeNode, ValueT


class OrderedKeyTree(OrderedMap[KeyT, ValueT]):
    """
    Textbook binary search tree with no rebalancing.

    Cost is O(h) and ``h`` is unbounded by insertion order: sorted input
    degenerates into a linked list. Insertion walks the tree iteratively so a
    long sorted run of ticket numbers cannot hit the interpreter recursion
    limit.
    """

    __slots__ = ()

    def insert(self, key: KeyT, value: ValueT) -> None:
        if self._root is None:
            self._root = TreeNode(key, value)
            self._size += 1
            return

        node = self._root
        while True:
            if key < node.key:
                if node.left is None:
                    node.left = TreeNode(key, value)
                    self._size += 1
                    return
                node = node.left
            elif node.key < key:
                if node.right is None:
                    node.right = TreeNode(key, value)
                    self._size += 1
                    return
                node = node.right
            else:
                node.value = value
                return


__all__ = ["OrderedKeyTree"]
