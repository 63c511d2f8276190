"""Weighted undirected adjacency-list graph of service depots."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Edge:
    """One adjacency entry: the neighbour vertex id and the edge weight."""

    target: int
    weight: float


class DepotGraph:
    """
    Undirected weighted graph with dense zero-based vertex ids.

    Every undirected edge is stored in both adjacency lists with the same
    weight. Vertex ids are assigned in creation order and never change.
    Weights are not checked for sign.
    """

    __slots__ = ("_names", "_adjacency")

    def __init__(
        self,
        vertices: Iterable[str] | None = None,
        edges: Iterable[tuple[int, int, float]] | None = None,
    ) -> None:
        self._names: list[str] = []
        self._adjacency: list[list[Edge]] = []

        if vertices is not None:
            for name in vertices:
                self.add_vertex(name)

        if edges is not None:
            for source, target, weight in edges:
                self.add_undirected_edge(source, target, weight)

    @property
    def vertex_count(self) -> int:
        return len(self._names)

    @property
    def names(self) -> tuple[str, ...]:
        """Vertex names indexed by vertex id."""
        return tuple(self._names)

    def add_vertex(self, name: str) -> int:
        """Append a named vertex and return its id."""
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Vertex name must be a non-empty string.")
        self._names.append(name)
        self._adjacency.append([])
        return len(self._names) - 1

    def add_undirected_edge(self, source: int, target: int, weight: float) -> None:
        """Add ``source <-> target`` with ``weight`` to both adjacency lists."""
        self._assert_vertex_exists(source)
        self._assert_vertex_exists(target)
        self._adjacency[source].append(Edge(target, float(weight)))
        self._adjacency[target].append(Edge(source, float(weight)))

    def name_of(self, vertex: int) -> str:
        self._assert_vertex_exists(vertex)
        return self._names[vertex]

    def index_of(self, name: str) -> int:
        """Return the id of the first vertex called ``name``."""
        try:
            return self._names.index(name)
        except ValueError:
            raise KeyError(f"Unknown vertex: {name}") from None

    def neighbours(self, vertex: int) -> tuple[Edge, ...]:
        """Adjacency entries of ``vertex`` in insertion order."""
        self._assert_vertex_exists(vertex)
        return tuple(self._adjacency[vertex])

    def edges(self) -> tuple[tuple[int, int, float], ...]:
        """Each undirected edge once, as ``(source, target, weight)`` with ``source <= target``."""
        listed: list[tuple[int, int, float]] = []
        for source, entries in enumerate(self._adjacency):
            loops_seen = 0
            for edge in entries:
                if source < edge.target:
                    listed.append((source, edge.target, edge.weight))
                elif source == edge.target:
                    # A self-loop occupies two entries in its own list.
                    if loops_seen % 2 == 0:
                        listed.append((source, source, edge.weight))
                    loops_seen += 1
        return tuple(listed)

    def bfs(self, start: int) -> Iterator[str]:
        """
        Lazily yield vertex names in breadth-first order from ``start``.

        Vertices are marked on enqueue and neighbours are visited in
        adjacency insertion order.
        """
        self._assert_vertex_exists(start)
        return self._bfs(start)

    def dfs(self, start: int) -> Iterator[str]:
        """
        Lazily yield vertex names in depth-first order from ``start``.

        Recursion depth equals the length of the current discovery path,
        which is fine for the small fixed depot network.
        """
        self._assert_vertex_exists(start)
        return self._dfs(start, [False] * len(self._names))

    def serialize(self) -> dict[str, object]:
        """Serialize to a JSON-friendly mapping."""
        return {
            "vertices": list(self._names),
            "edges": [[source, target, weight] for source, target, weight in self.edges()],
        }

    def _bfs(self, start: int) -> Iterator[str]:
        seen = [False] * len(self._names)
        seen[start] = True
        queue: deque[int] = deque([start])
        while queue:
            vertex = queue.popleft()
            yield self._names[vertex]
            for edge in self._adjacency[vertex]:
                if not seen[edge.target]:
                    seen[edge.target] = True
                    queue.append(edge.target)

    def _dfs(self, vertex: int, seen: list[bool]) -> Iterator[str]:
        seen[vertex] = True
        yield self._names[vertex]
        for edge in self._adjacency[vertex]:
            if not seen[edge.target]:
                yield from self._dfs(edge.target, seen)

    def _assert_vertex_exists(self, vertex: int) -> None:
        if isinstance(vertex, bool) or not isinstance(vertex, int):
            raise TypeError(f"Vertex id must be an int, got {type(vertex).__name__}")
        if not 0 <= vertex < len(self._names):
            raise IndexError(f"Unknown vertex id: {vertex}")


__all__ = ["DepotGraph", "Edge"]
