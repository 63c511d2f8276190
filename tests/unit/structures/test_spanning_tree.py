"""Unit tests for Prim's minimum spanning tree."""

from __future__ import annotations

import pytest

from municipal_requests.structures import (
    DepotGraph,
    DisconnectedGraphError,
    SpanningEdge,
    prim,
)


def test_triangle_fixture() -> None:
    graph = DepotGraph(["A", "B", "C"], [(0, 1, 1), (1, 2, 2), (0, 2, 5)])

    tree = prim(graph, 0)

    assert tree.edges == (SpanningEdge(0, 1, 1.0), SpanningEdge(1, 2, 2.0))
    assert tree.total_weight == 3.0
    assert tree.is_spanning
    assert tree.require_spanning() is tree


def test_start_vertex_changes_order_not_weight() -> None:
    graph = DepotGraph(["A", "B", "C"], [(0, 1, 1), (1, 2, 2), (0, 2, 3)])

    tree = prim(graph, 2)

    assert tree.edges == (SpanningEdge(2, 1, 2.0), SpanningEdge(1, 0, 1.0))
    assert tree.total_weight == 3.0


def test_equal_weights_break_ties_by_vertex_ids() -> None:
    graph = DepotGraph(["A", "B", "C", "D"], [(0, 2, 1), (0, 1, 1), (1, 3, 1), (2, 3, 1)])

    tree = prim(graph, 0)

    assert tree.edges == (
        SpanningEdge(0, 1, 1.0),
        SpanningEdge(0, 2, 1.0),
        SpanningEdge(1, 3, 1.0),
    )


def test_disconnected_graph_returns_partial_tree() -> None:
    graph = DepotGraph(["A", "B", "C", "D"], [(0, 1, 4), (2, 3, 1)])

    tree = prim(graph, 0)

    assert tree.edges == (SpanningEdge(0, 1, 4.0),)
    assert not tree.is_spanning
    assert tree.unreached == (2, 3)
    with pytest.raises(DisconnectedGraphError) as excinfo:
        tree.require_spanning()
    assert excinfo.value.unreached == (2, 3)


def test_single_vertex_is_trivially_spanning() -> None:
    tree = prim(DepotGraph(["Only"]), 0)

    assert tree.edges == ()
    assert tree.total_weight == 0.0
    assert tree.is_spanning


def test_invalid_start_raises_index_error() -> None:
    with pytest.raises(IndexError):
        prim(DepotGraph(["A"]), 5)
