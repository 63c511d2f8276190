"""Static N-ary category taxonomy for display and categorisation."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Final

from municipal_requests.constants import TAXONOMY_ROOT_LABEL

_CATEGORY_SHAPE: Final[tuple[tuple[str, tuple[str, ...]], ...]] = (
    ("Water", ("Leak", "Burst", "Low Pressure")),
    ("Electricity", ("Outage", "Fault", "Meter")),
    ("Roads", ("Pothole", "Resurfacing", "Signage")),
    ("Community Safety", ("Streetlight", "Vandalism")),
)


class CategoryNode:
    """A labelled node with an ordered list of children."""

    __slots__ = ("label", "_children")

    def __init__(self, label: str) -> None:
        self.label = label
        self._children: list[CategoryNode] = []

    @property
    def children(self) -> tuple[CategoryNode, ...]:
        return tuple(self._children)

    def add_child(self, label: str) -> CategoryNode:
        """Append a new child labelled ``label`` and return it."""
        child = CategoryNode(label)
        self._children.append(child)
        return child

    def labels(self) -> tuple[str, ...]:
        return tuple(child.label for child in self._children)

    def walk(self) -> Iterator[tuple[int, CategoryNode]]:
        """Yield ``(depth, node)`` in pre-order, starting with this node at depth 0."""
        pending: list[tuple[int, CategoryNode]] = [(0, self)]
        while pending:
            depth, node = pending.pop()
            yield depth, node
            for child in reversed(node._children):
                pending.append((depth + 1, child))

    def __repr__(self) -> str:
        return f"CategoryNode({self.label!r}, children={len(self._children)})"


def build_category_taxonomy() -> CategoryNode:
    """Build the fixed service category hierarchy under a synthetic root."""
    root = CategoryNode(TAXONOMY_ROOT_LABEL)
    for category, sub_categories in _CATEGORY_SHAPE:
        node = root.add_child(category)
        for sub_category in sub_categories:
            node.add_child(sub_category)
    return root


__all__ = ["CategoryNode", "build_category_taxonomy"]
