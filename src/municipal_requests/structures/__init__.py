"""Self-contained ordered containers and graph algorithms used by the request indices."""

from municipal_requests.structures.avl import BalancedHeightTree
from municipal_requests.structures.bst import OrderedKeyTree
from municipal_requests.structures.graph import DepotGraph, Edge
from municipal_requests.structures.heap import Comparator, MaxPriorityHeap
from municipal_requests.structures.ordered_map import OrderedMap
from municipal_requests.structures.red_black import BalancedColorTree
from municipal_requests.structures.spanning_tree import (
    DisconnectedGraphError,
    SpanningEdge,
    SpanningTree,
    prim,
)
from municipal_requests.structures.taxonomy import CategoryNode, build_category_taxonomy

__all__ = [
    "BalancedColorTree",
    "BalancedHeightTree",
    "CategoryNode",
    "Comparator",
    "DepotGraph",
    "DisconnectedGraphError",
    "Edge",
    "MaxPriorityHeap",
    "OrderedKeyTree",
    "OrderedMap",
    "SpanningEdge",
    "SpanningTree",
    "build_category_taxonomy",
    "prim",
]
