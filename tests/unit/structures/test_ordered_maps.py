"""Behaviour shared by the three tree indices."""

from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from municipal_requests.structures import (
    BalancedColorTree,
    BalancedHeightTree,
    OrderedKeyTree,
    OrderedMap,
)

TREE_TYPES = (OrderedKeyTree, BalancedHeightTree, BalancedColorTree)


@pytest.mark.parametrize("tree_type", TREE_TYPES)
def test_empty_tree_reads(tree_type: type[OrderedMap[int, str]]) -> None:
    tree = tree_type()

    assert len(tree) == 0
    assert tree.height() == 0
    assert tree.try_find(1) == (False, None)
    assert tree.get(1, "fallback") == "fallback"
    assert 1 not in tree
    assert list(tree.items()) == []


@pytest.mark.parametrize("tree_type", TREE_TYPES)
def test_last_write_wins_on_duplicate_key(tree_type: type[OrderedMap[str, int]]) -> None:
    tree = tree_type()
    for index, key in enumerate(["m", "c", "x", "c", "a", "m"]):
        tree.insert(key, index)

    assert tree.try_find("c") == (True, 3)
    assert tree.try_find("m") == (True, 5)
    assert tree.try_find("x") == (True, 2)
    assert len(tree) == 4
    assert list(tree.keys()) == ["a", "c", "m", "x"]


@pytest.mark.parametrize("tree_type", TREE_TYPES)
def test_range_items_is_inclusive_and_bounds_are_optional(
    tree_type: type[OrderedMap[int, str]],
) -> None:
    tree = tree_type()
    for key in (50, 20, 80, 10, 30, 70, 90, 60):
        tree.insert(key, f"v{key}")

    assert [key for key, _ in tree.range_items(30, 70)] == [30, 50, 60, 70]
    assert [key for key, _ in tree.range_items(start=75)] == [80, 90]
    assert [key for key, _ in tree.range_items(end=15)] == [10]
    assert list(tree.range_items(31, 49)) == []
    assert list(tree.values())[:2] == ["v10", "v20"]


@pytest.mark.parametrize("tree_type", TREE_TYPES)
def test_lookup_does_not_mutate(tree_type: type[OrderedMap[int, int]]) -> None:
    tree = tree_type()
    for key in range(20):
        tree.insert(key, key * key)
    before = list(tree.items())
    height = tree.height()

    for key in range(-5, 25):
        tree.try_find(key)

    assert list(tree.items()) == before
    assert tree.height() == height


@pytest.mark.parametrize("tree_type", TREE_TYPES)
@given(pairs=st.lists(st.tuples(st.integers(-50, 50), st.integers()), max_size=60))
@settings(max_examples=40, derandomize=True, deadline=None)
def test_property_tree_matches_dict(
    tree_type: type[OrderedMap[int, int]], pairs: list[tuple[int, int]]
) -> None:
    tree = tree_type()
    expected: dict[int, int] = {}
    for key, value in pairs:
        tree.insert(key, value)
        expected[key] = value

    assert len(tree) == len(expected)
    assert list(tree.items()) == sorted(expected.items())
    for key, value in expected.items():
        assert tree.try_find(key) == (True, value)


def test_read_surface_alone_cannot_be_instantiated() -> None:
    with pytest.raises(TypeError, match="abstract"):
        OrderedMap()  # type: ignore[abstract]
