"""Authoritative service-request list kept in sync with its ordered indices."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime

from municipal_requests.domain.models import RequestStatus, ServiceRequest, ticks_from_datetime
from municipal_requests.services.depots import build_depot_graph
from municipal_requests.structures.avl import BalancedHeightTree
from municipal_requests.structures.bst import OrderedKeyTree
from municipal_requests.structures.graph import DepotGraph
from municipal_requests.structures.heap import MaxPriorityHeap
from municipal_requests.structures.red_black import BalancedColorTree
from municipal_requests.structures.taxonomy import CategoryNode, build_category_taxonomy

_LOGGER = logging.getLogger(__name__)


def compare_urgency(first: ServiceRequest, second: ServiceRequest) -> int:
    """
    Rank requests for the urgency heap.

    Higher priority ranks higher; on equal priority the more recently
    created request ranks higher.
    """
    if first.priority != second.priority:
        return 1 if first.priority > second.priority else -1
    first_ticks = first.created_ticks
    second_ticks = second.created_ticks
    if first_ticks != second_ticks:
        return 1 if first_ticks > second_ticks else -1
    return 0


class RequestIndexStore:
    """
    Owns every indexed service request.

    Each request is appended to one authoritative list and the same object is
    inserted into the ticket, creation-time and location trees and pushed onto
    the urgency heap. Duplicate keys overwrite the tree entry (last write
    wins), so point lookups return the latest request for a key. Ordered
    listings walk the tree keys and yield every request filed under each key
    in insertion order; the list and heap also keep every request.

    The store is single-writer: it is constructed by its owner and passed to
    consumers explicitly.
    """

    __slots__ = (
        "_all",
        "_by_ticket",
        "_by_created",
        "_by_location",
        "_created_groups",
        "_location_groups",
        "_urgent",
        "_depot_graph",
        "_category_taxonomy",
        "_logger",
    )

    def __init__(
        self,
        *,
        depot_graph: DepotGraph | None = None,
        category_taxonomy: CategoryNode | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._all: list[ServiceRequest] = []
        self._by_ticket: OrderedKeyTree[str, ServiceRequest] = OrderedKeyTree()
        self._by_created: BalancedHeightTree[int, ServiceRequest] = BalancedHeightTree()
        self._by_location: BalancedColorTree[str, ServiceRequest] = BalancedColorTree()
        self._created_groups: dict[int, list[ServiceRequest]] = {}
        self._location_groups: dict[str, list[ServiceRequest]] = {}
        self._urgent: MaxPriorityHeap[ServiceRequest] = MaxPriorityHeap(compare_urgency)
        self._depot_graph = depot_graph if depot_graph is not None else build_depot_graph()
        self._category_taxonomy = (
            category_taxonomy if category_taxonomy is not None else build_category_taxonomy()
        )
        self._logger = logger if logger is not None else _LOGGER

    @property
    def depot_graph(self) -> DepotGraph:
        return self._depot_graph

    @property
    def category_taxonomy(self) -> CategoryNode:
        return self._category_taxonomy

    def __len__(self) -> int:
        return len(self._all)

    def add(self, request: ServiceRequest) -> None:
        """Index ``request`` in the list, all three trees and the urgency heap."""
        ticket, created_ticks, location = _index_keys(request)

        # Keys are checked above, so none of the inserts below can fail midway.
        self._all.append(request)
        self._by_ticket.insert(ticket, request)
        self._by_created.insert(created_ticks, request)
        self._by_location.insert(location, request)
        self._created_groups.setdefault(created_ticks, []).append(request)
        self._location_groups.setdefault(location, []).append(request)
        self._urgent.push(request)

        self._logger.debug(
            "request_indexed",
            extra={
                "ticket_number": ticket,
                "created_ticks": created_ticks,
                "location": location,
                "priority": int(request.priority),
                "request_count": len(self._all),
            },
        )

    def try_find_by_ticket(self, ticket: str) -> tuple[bool, ServiceRequest | None]:
        return self._by_ticket.try_find(ticket)

    def try_find_by_location(self, location: str) -> tuple[bool, ServiceRequest | None]:
        """Return the request most recently indexed under ``location``."""
        return self._by_location.try_find(location)

    def get_all(self) -> tuple[ServiceRequest, ...]:
        """Every added request in insertion order."""
        return tuple(self._all)

    def get_top_urgent(self, count: int) -> tuple[ServiceRequest, ...]:
        """
        Return up to ``count`` requests, most urgent first.

        The urgency heap is left untouched, so consecutive calls with no
        intervening ``add`` return the same sequence.
        """
        return self._urgent.top(count)

    def iter_by_created(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> Iterator[ServiceRequest]:
        """
        Lazily yield every request by creation time, optionally within ``[start, end]``.

        Requests created in the same microsecond come out in insertion order.
        """
        low = None if start is None else ticks_from_datetime(start)
        high = None if end is None else ticks_from_datetime(end)
        for created_ticks, _ in self._by_created.range_items(low, high):
            yield from self._created_groups[created_ticks]

    def iter_by_location(self) -> Iterator[ServiceRequest]:
        """Lazily yield every request ordered by location; ties keep insertion order."""
        for location in self._by_location.keys():
            yield from self._location_groups[location]

    def update_status(
        self,
        ticket: str,
        status: RequestStatus | str,
        note: str | None = None,
    ) -> ServiceRequest:
        """
        Change the status of the request indexed under ``ticket``.

        Status and history are not index keys, so every index stays
        consistent. Raises ``KeyError`` for an unknown ticket.
        """
        found, request = self._by_ticket.try_find(ticket)
        if not found or request is None:
            raise KeyError(f"Unknown ticket: {ticket}")

        request.record_status(status, note)
        self._logger.debug(
            "request_status_updated",
            extra={"ticket_number": ticket, "status": str(request.status)},
        )
        return request


def _index_keys(request: ServiceRequest) -> tuple[str, int, str]:
    if not isinstance(request, ServiceRequest):
        raise TypeError(f"expected ServiceRequest, got {type(request).__name__}")
    if not isinstance(request.ticket_number, str):
        raise TypeError("ServiceRequest.ticket_number must be a string")
    if isinstance(request.priority, bool) or not isinstance(request.priority, int):
        raise TypeError("ServiceRequest.priority must be an integer")
    location = request.location if request.location is not None else ""
    if not isinstance(location, str):
        raise TypeError("ServiceRequest.location must be a string")
    return request.ticket_number, request.created_ticks, location


__all__ = ["RequestIndexStore", "compare_urgency"]
