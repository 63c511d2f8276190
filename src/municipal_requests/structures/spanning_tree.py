"""Prim's minimum spanning tree over a :class:`DepotGraph`."""

from __future__ import annotations

from dataclasses import dataclass
from heapq import heappop, heappush

from municipal_requests.structures.graph import DepotGraph


class DisconnectedGraphError(ValueError):
    """Raised when a complete spanning tree is required but some vertices are unreachable."""

    unreached: tuple[int, ...]

    def __init__(self, start: int, unreached: tuple[int, ...]) -> None:
        self.unreached = unreached
        preview = ", ".join(str(vertex) for vertex in unreached[:5])
        suffix = ", ..." if len(unreached) > 5 else ""
        super().__init__(f"Vertices unreachable from {start}: {preview}{suffix}")


@dataclass(frozen=True, slots=True)
class SpanningEdge:
    source: int
    target: int
    weight: float


@dataclass(frozen=True, slots=True)
class SpanningTree:
    """Edges accepted by Prim's algorithm in acceptance order, plus their total weight."""

    start: int
    vertex_count: int
    edges: tuple[SpanningEdge, ...]
    total_weight: float

    @property
    def is_spanning(self) -> bool:
        """True when every vertex of the graph is connected to ``start``."""
        return len(self.edges) == self.vertex_count - 1

    @property
    def unreached(self) -> tuple[int, ...]:
        reached = {self.start}
        reached.update(edge.target for edge in self.edges)
        return tuple(vertex for vertex in range(self.vertex_count) if vertex not in reached)

    def require_spanning(self) -> SpanningTree:
        """Return ``self`` or raise :class:`DisconnectedGraphError` for a partial tree."""
        if not self.is_spanning:
            raise DisconnectedGraphError(self.start, self.unreached)
        return self


def prim(graph: DepotGraph, start: int = 0) -> SpanningTree:
    """
    Grow a minimum spanning tree from ``start``.

    The frontier is ordered by ``(weight, source, target)`` so ties resolve
    deterministically. Entries whose target was absorbed after they were
    queued are discarded when popped. When part of the graph is unreachable
    from ``start`` the result holds fewer than ``vertex_count - 1`` edges;
    check :attr:`SpanningTree.is_spanning`.
    """
    vertex_count = graph.vertex_count
    graph.name_of(start)

    used = [False] * vertex_count
    frontier: list[tuple[float, int, int]] = []
    accepted: list[SpanningEdge] = []
    total = 0.0

    def absorb(vertex: int) -> None:
        used[vertex] = True
        for edge in graph.neighbours(vertex):
            if not used[edge.target]:
                heappush(frontier, (edge.weight, vertex, edge.target))

    absorb(start)
    while frontier and len(accepted) < vertex_count - 1:
        weight, source, target = heappop(frontier)
        if used[target]:
            continue
        accepted.append(SpanningEdge(source, target, weight))
        total += weight
        absorb(target)

    return SpanningTree(
        start=start,
        vertex_count=vertex_count,
        edges=tuple(accepted),
        total_weight=total,
    )


__all__ = ["DisconnectedGraphError", "SpanningEdge", "SpanningTree", "prim"]
