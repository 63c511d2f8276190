"""Unit tests for the comparator-driven max-heap."""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from municipal_requests.structures import MaxPriorityHeap


def _by_value(first: int, second: int) -> int:
    return (first > second) - (first < second)


def _drain(heap: MaxPriorityHeap[int]) -> list[int]:
    drained: list[int] = []
    while True:
        found, value = heap.try_pop()
        if not found:
            return drained
        assert value is not None
        drained.append(value)


def test_empty_heap_pop_and_peek_return_not_found() -> None:
    heap: MaxPriorityHeap[int] = MaxPriorityHeap(_by_value)

    assert heap.try_pop() == (False, None)
    assert heap.try_peek() == (False, None)
    assert len(heap) == 0
    assert heap.top(3) == ()


def test_push_pop_returns_descending_order() -> None:
    heap = MaxPriorityHeap(_by_value, [5, 1, 9, 3, 9, 7])

    assert heap.try_peek() == (True, 9)
    assert _drain(heap) == [9, 9, 7, 5, 3, 1]
    assert len(heap) == 0


def test_top_leaves_heap_untouched() -> None:
    heap = MaxPriorityHeap(_by_value, [4, 8, 2, 6])

    assert heap.top(2) == (8, 6)
    assert heap.top(2) == (8, 6)
    assert heap.top(10) == (8, 6, 4, 2)
    assert len(heap) == 4
    assert _drain(heap) == [8, 6, 4, 2]


def test_clear_empties_heap() -> None:
    heap = MaxPriorityHeap(_by_value, [1, 2, 3])
    heap.clear()

    assert len(heap) == 0
    assert heap.try_pop() == (False, None)


def test_custom_comparator_defines_rank() -> None:
    shortest_first = MaxPriorityHeap(lambda a, b: len(b) - len(a), ["ccc", "a", "bb"])

    assert shortest_first.top(3) == ("a", "bb", "ccc")


@given(values=st.lists(st.integers(-1_000, 1_000), max_size=200))
@settings(max_examples=60, derandomize=True, deadline=None)
def test_property_pops_are_non_increasing(values: list[int]) -> None:
    heap = MaxPriorityHeap(_by_value, values)

    assert list(heap.top(len(values))) == sorted(values, reverse=True)
    assert _drain(heap) == sorted(values, reverse=True)
