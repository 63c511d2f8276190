"""Deterministic builders for service-request tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Final

from municipal_requests.domain.models import Priority, RequestStatus, ServiceRequest

BASE_TS: Final[datetime] = datetime(2025, 3, 1, 8, 0, 0, tzinfo=UTC)


def fixed_now(minutes: int) -> datetime:
    return BASE_TS + timedelta(minutes=minutes)


def make_request(
    seed: int,
    *,
    ticket_number: str | None = None,
    priority: Priority | int = Priority.NORMAL,
    location: str | None = None,
    created_at: datetime | None = None,
    category: str = "Water",
    sub_category: str = "Leak",
    status: RequestStatus = RequestStatus.NEW,
) -> ServiceRequest:
    return ServiceRequest(
        ticket_number=ticket_number or f"SR-TEST-{seed:04d}",
        category=category,
        sub_category=sub_category,
        location=location if location is not None else f"Ward {seed:02d}",
        description=f"Test request {seed}",
        priority=priority,
        created_at=created_at or fixed_now(seed),
        status=status,
    )


__all__ = ["BASE_TS", "fixed_now", "make_request"]
