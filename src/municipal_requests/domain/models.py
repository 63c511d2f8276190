"""Dataclass domain models with strict validation and canonical serialization."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import IntEnum, StrEnum
from typing import Final, NoReturn

from municipal_requests.domain import ids as domain_ids

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

_MAX_TEXT: Final[int] = 8192
_MAX_TICKET: Final[int] = 64
_MAX_HISTORY: Final[int] = 512
_EPOCH: Final[datetime] = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MICROSECOND: Final[timedelta] = timedelta(microseconds=1)

_REQUIRED_FIELDS: Final[frozenset[str]] = frozenset(
    {"ticket_number", "category", "sub_category", "location", "description", "priority"}
)
_OPTIONAL_FIELDS: Final[frozenset[str]] = frozenset({"id", "created_at", "status", "history"})


class Priority(IntEnum):
    """Urgency ordinal; a higher value is more urgent."""

    LOW = 0
    NORMAL = 1
    HIGH = 2
    CRITICAL = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()


class RequestStatus(StrEnum):
    NEW = "New"
    IN_PROGRESS = "InProgress"
    ON_HOLD = "OnHold"
    RESOLVED = "Resolved"
    CLOSED = "Closed"


@dataclass(slots=True, kw_only=True)
class ServiceRequest:
    """A municipal service request.

    Every index key (ticket number, creation instant, location, priority) is
    validated here, so a constructed request can always be indexed. Only
    ``status`` and ``history`` change after construction, through
    :meth:`record_status`.
    """

    ticket_number: str
    category: str
    sub_category: str
    location: str | None
    description: str
    priority: Priority | int
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    status: RequestStatus | str = RequestStatus.NEW
    history: list[str] = field(default_factory=list)
    id: str = field(default_factory=domain_ids.generate_request_id)

    def __post_init__(self) -> None:
        domain_ids.validate_request_id(self.id)
        # Index keys are stored exactly as given.
        self.ticket_number = _as_str(
            self.ticket_number, "ServiceRequest.ticket_number", max_len=_MAX_TICKET, strip=False
        )
        self.category = _as_str(self.category, "ServiceRequest.category")
        self.sub_category = _as_str(self.sub_category, "ServiceRequest.sub_category", min_len=0)
        self.location = (
            ""
            if self.location is None
            else _as_str(self.location, "ServiceRequest.location", min_len=0, strip=False)
        )
        self.description = _as_str(self.description, "ServiceRequest.description", min_len=0)
        self.priority = _as_priority(self.priority, "ServiceRequest.priority")
        self.created_at = _as_datetime(self.created_at, "ServiceRequest.created_at")
        self.status = _as_status(self.status, "ServiceRequest.status")
        self.history = _as_history(self.history, "ServiceRequest.history")

    @property
    def created_ticks(self) -> int:
        """Creation instant as whole microseconds since the Unix epoch."""
        return ticks_from_datetime(self.created_at)

    def record_status(self, status: RequestStatus | str, note: str | None = None) -> None:
        """Move to ``status`` and append a history note describing the change."""
        previous = self.status
        self.status = _as_status(status, "ServiceRequest.status")
        text = f"{previous} -> {self.status}"
        if note is not None:
            text = f"{text}: {_as_str(note, 'ServiceRequest.history[]')}"
        if len(self.history) >= _MAX_HISTORY:
            _fail("ServiceRequest.history", f"too many items (>{_MAX_HISTORY})")
        self.history.append(text)

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "id": self.id,
            "ticket_number": self.ticket_number,
            "created_at": _datetime_to_iso8601z(self.created_at),
            "category": self.category,
            "sub_category": self.sub_category,
            "location": self.location,
            "description": self.description,
            "priority": int(self.priority),
            "status": str(self.status),
            "history": list(self.history),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ServiceRequest:
        payload = _expect_object(data, cls.__name__)
        return cls(**payload)  # type: ignore[arg-type]

    @classmethod
    def from_json(cls, raw: str) -> ServiceRequest:
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as exc:
            _fail(cls.__name__, f"invalid JSON: {exc}")
        return cls.from_dict(parsed)


def ticks_from_datetime(value: datetime) -> int:
    """Encode an aware datetime as whole microseconds since the Unix epoch."""
    normalized = _as_datetime(value, "datetime")
    return (normalized - _EPOCH) // _ONE_MICROSECOND


def _fail(path: str, message: str) -> NoReturn:
    raise ValueError(f"{path}: {message}")


def _expect_object(value: object, path: str) -> dict[str, object]:
    if not isinstance(value, Mapping):
        _fail(path, f"expected object, got {type(value).__name__}")

    parsed: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            _fail(path, f"object keys must be strings, got {type(key).__name__}")
        parsed[key] = item

    unknown = sorted(key for key in parsed if key not in _REQUIRED_FIELDS | _OPTIONAL_FIELDS)
    if unknown:
        _fail(path, f"unexpected fields: {unknown}")

    missing = sorted(key for key in _REQUIRED_FIELDS if key not in parsed)
    if missing:
        _fail(path, f"missing required fields: {missing}")

    return parsed


def _as_str(
    value: object, path: str, *, min_len: int = 1, max_len: int = _MAX_TEXT, strip: bool = True
) -> str:
    if not isinstance(value, str):
        _fail(path, f"expected string, got {type(value).__name__}")
    normalized = value.strip() if strip else value
    if len(value.strip()) < min_len:
        _fail(path, f"must be at least {min_len} character(s)")
    if len(normalized) > max_len:
        _fail(path, f"must be <= {max_len} characters")
    return normalized


def _as_priority(value: object, path: str) -> Priority:
    if isinstance(value, bool) or not isinstance(value, int):
        _fail(path, f"expected integer, got {type(value).__name__}")
    try:
        return Priority(value)
    except ValueError:
        allowed = ", ".join(str(int(item)) for item in Priority)
        _fail(path, f"invalid value {value!r}; expected one of: {allowed}")


def _as_status(value: object, path: str) -> RequestStatus:
    if isinstance(value, RequestStatus):
        return value
    if not isinstance(value, str):
        _fail(path, f"expected string enum value, got {type(value).__name__}")
    try:
        return RequestStatus(value)
    except ValueError:
        allowed = ", ".join(item.value for item in RequestStatus)
        _fail(path, f"invalid value {value!r}; expected one of: {allowed}")


def _as_history(value: object, path: str) -> list[str]:
    if not isinstance(value, (list, tuple)):
        _fail(path, f"expected array, got {type(value).__name__}")
    if len(value) > _MAX_HISTORY:
        _fail(path, f"too many items (>{_MAX_HISTORY})")
    return [_as_str(item, f"{path}[{index}]") for index, item in enumerate(value)]


def _as_datetime(value: object, path: str) -> datetime:
    parsed: datetime
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value[:-1] + "+00:00" if value.endswith("Z") else value
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            _fail(path, f"invalid ISO-8601 datetime: {value!r} ({exc})")
    else:
        _fail(path, f"expected datetime or ISO-8601 string, got {type(value).__name__}")

    if parsed.tzinfo is None or parsed.utcoffset() is None:
        _fail(path, "datetime must be timezone-aware")
    return parsed.astimezone(UTC)


def _datetime_to_iso8601z(value: datetime) -> str:
    return value.astimezone(UTC).isoformat(timespec="microseconds").replace("+00:00", "Z")


__all__ = [
    "JSONScalar",
    "JSONValue",
    "Priority",
    "RequestStatus",
    "ServiceRequest",
    "ticks_from_datetime",
]
