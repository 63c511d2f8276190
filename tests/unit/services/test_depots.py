"""Unit tests for the fixed depot network."""

from __future__ import annotations

from municipal_requests.services.depots import DEPOT_NAMES, DEPOT_ROUTES, build_depot_graph
from municipal_requests.structures.spanning_tree import prim


def test_depot_graph_shape() -> None:
    graph = build_depot_graph()

    assert graph.names == DEPOT_NAMES
    assert len(graph.edges()) == len(DEPOT_ROUTES)
    bellville = graph.index_of("Bellville Depot")
    neighbours = {graph.name_of(edge.target): edge.weight for edge in graph.neighbours(bellville)}
    assert neighbours == {"Athlone Depot": 18.0, "Durbanville Depot": 13.0}


def test_depot_traversals_from_bellville() -> None:
    graph = build_depot_graph()
    start = graph.index_of("Bellville Depot")

    assert list(graph.bfs(start)) == [
        "Bellville Depot",
        "Athlone Depot",
        "Durbanville Depot",
        "Mitchells Plain Depot",
        "Khayelitsha Depot",
    ]
    assert list(graph.dfs(start)) == [
        "Bellville Depot",
        "Athlone Depot",
        "Mitchells Plain Depot",
        "Khayelitsha Depot",
        "Durbanville Depot",
    ]


def test_depot_minimum_spanning_tree() -> None:
    graph = build_depot_graph()

    tree = prim(graph, graph.index_of("Bellville Depot")).require_spanning()

    named = [
        (graph.name_of(edge.source), graph.name_of(edge.target), edge.weight)
        for edge in tree.edges
    ]
    assert named == [
        ("Bellville Depot", "Durbanville Depot", 13.0),
        ("Bellville Depot", "Athlone Depot", 18.0),
        ("Athlone Depot", "Mitchells Plain Depot", 20.0),
        ("Mitchells Plain Depot", "Khayelitsha Depot", 17.0),
    ]
    assert tree.total_weight == 68.0
