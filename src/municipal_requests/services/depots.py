"""Fixed depot network used for traversal and spanning tree queries."""

from __future__ import annotations

from typing import Final

from municipal_requests.structures.graph import DepotGraph

DEPOT_NAMES: Final[tuple[str, ...]] = (
    "Bellville Depot",
    "Athlone Depot",
    "Mitchells Plain Depot",
    "Khayelitsha Depot",
    "Durbanville Depot",
)

# Illustrative road distances in kilometres.
DEPOT_ROUTES: Final[tuple[tuple[str, str, float], ...]] = (
    ("Bellville Depot", "Athlone Depot", 18.0),
    ("Bellville Depot", "Durbanville Depot", 13.0),
    ("Athlone Depot", "Mitchells Plain Depot", 20.0),
    ("Athlone Depot", "Khayelitsha Depot", 22.0),
    ("Mitchells Plain Depot", "Khayelitsha Depot", 17.0),
    ("Durbanville Depot", "Khayelitsha Depot", 29.0),
)


def build_depot_graph() -> DepotGraph:
    """Build the depot network; vertex ids follow ``DEPOT_NAMES`` order."""
    graph = DepotGraph(DEPOT_NAMES)
    for source, target, distance_km in DEPOT_ROUTES:
        graph.add_undirected_edge(graph.index_of(source), graph.index_of(target), distance_km)
    return graph


__all__ = ["DEPOT_NAMES", "DEPOT_ROUTES", "build_depot_graph"]
