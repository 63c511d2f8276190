"""Packaged sample requests for demos and an empty store."""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from importlib import resources
from typing import TYPE_CHECKING, Final, cast

import yaml

from municipal_requests.constants import SAMPLE_BACKDATE_MAX_MINUTES
from municipal_requests.domain.models import ServiceRequest

if TYPE_CHECKING:
    from municipal_requests.services.request_store import RequestIndexStore

_LOGGER = logging.getLogger(__name__)

_SAMPLE_RESOURCE: Final[tuple[str, ...]] = ("data", "sample_requests.yaml")


class SeedDataError(ValueError):
    """Raised when the packaged sample data is missing or malformed."""


def load_sample_requests(*, now: datetime | None = None) -> tuple[ServiceRequest, ...]:
    """
    Build the packaged sample requests.

    Each request is backdated from ``now`` by a per-ticket offset of up to
    ``SAMPLE_BACKDATE_MAX_MINUTES`` minutes. The offset depends only on the
    ticket number, so repeated loads with the same ``now`` are identical.
    """
    reference = now if now is not None else datetime.now(tz=UTC)
    entries = _read_sample_entries()

    requests: list[ServiceRequest] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            raise SeedDataError(f"requests[{index}]: expected mapping, got {type(entry).__name__}")
        payload = dict(entry)
        ticket = payload.get("ticket_number")
        if not isinstance(ticket, str):
            raise SeedDataError(f"requests[{index}].ticket_number: expected string")
        payload.setdefault("created_at", reference - timedelta(minutes=_backdate_minutes(ticket)))
        try:
            requests.append(ServiceRequest.from_dict(payload))
        except ValueError as exc:
            raise SeedDataError(f"requests[{index}]: {exc}") from exc
    return tuple(requests)


def seed_if_empty(store: RequestIndexStore, *, now: datetime | None = None) -> int:
    """Add the sample requests when ``store`` is empty; return how many were added."""
    if len(store) > 0:
        return 0

    samples = load_sample_requests(now=now)
    for request in samples:
        store.add(request)
    _LOGGER.debug("sample_requests_seeded", extra={"request_count": len(samples)})
    return len(samples)


def _backdate_minutes(ticket: str) -> int:
    return random.Random(ticket).randrange(SAMPLE_BACKDATE_MAX_MINUTES)


def _read_sample_entries() -> list[object]:
    resource = resources.files("municipal_requests.services")
    for part in _SAMPLE_RESOURCE:
        resource = resource / part
    try:
        with resource.open("r", encoding="utf-8") as handle:
            loaded = cast("object", yaml.safe_load(handle))
    except yaml.YAMLError as exc:
        raise SeedDataError(f"invalid YAML in sample requests: {exc}") from exc
    except OSError as exc:
        raise SeedDataError(f"unable to read sample requests: {exc}") from exc

    if not isinstance(loaded, Mapping):
        raise SeedDataError("sample requests root must be a mapping")
    entries = loaded.get("requests")
    if not isinstance(entries, list):
        raise SeedDataError("sample requests must define a 'requests' list")
    return entries


__all__ = ["SeedDataError", "load_sample_requests", "seed_if_empty"]
