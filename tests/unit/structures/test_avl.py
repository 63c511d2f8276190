"""Unit tests for the AVL creation-time tree."""

from __future__ import annotations

import math

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from municipal_requests.structures import BalancedHeightTree


def _height_bound(count: int) -> int:
    return math.ceil(1.44 * math.log2(count + 2))


@pytest.mark.parametrize(
    "keys",
    [
        [3, 2, 1],  # left-left
        [1, 2, 3],  # right-right
        [3, 1, 2],  # left-right
        [1, 3, 2],  # right-left
    ],
)
def test_each_rotation_case_balances_three_nodes(keys: list[int]) -> None:
    tree: BalancedHeightTree[int, int] = BalancedHeightTree()
    for key in keys:
        tree.insert(key, key)

    assert tree.height() == 2
    assert tree.is_height_balanced()
    assert list(tree.keys()) == [1, 2, 3]


def test_sequential_ticks_stay_logarithmic() -> None:
    tree: BalancedHeightTree[int, int] = BalancedHeightTree()
    for tick in range(1_000):
        tree.insert(tick, tick)

    assert tree.is_height_balanced()
    assert tree.height() <= _height_bound(1_000)


@given(keys=st.lists(st.integers(-10_000, 10_000), max_size=300))
@settings(max_examples=50, derandomize=True, deadline=None)
def test_property_avl_balanced_after_every_insert(keys: list[int]) -> None:
    tree: BalancedHeightTree[int, None] = BalancedHeightTree()
    for key in keys:
        tree.insert(key, None)
        assert tree.is_height_balanced()

    assert tree.height() <= _height_bound(len(tree))
