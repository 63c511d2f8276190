"""
Structured logging: one JSON object per line.

Each event carries ``timestamp``, ``level``, ``logger`` and ``message``, the
correlation fields bound for the current context (always ``session_id``), and
a ``fields`` object holding whatever was passed as ``extra=``. Library modules
only call ``logging.getLogger(__name__)``; :func:`setup_logging` attaches the
sinks to the package logger.
"""

from __future__ import annotations

import atexit
import contextvars
import json
import logging
import math
import sys
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Final, TextIO

from municipal_requests.constants import LOG_DIR

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

PACKAGE_LOGGER: Final[str] = "municipal_requests"
LOG_FILENAME: Final[str] = "municipal_requests.jsonl"

# Attributes every LogRecord has; anything else on a record came from ``extra=``.
_RECORD_ATTRIBUTES: Final[frozenset[str]] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}

_CORRELATION: contextvars.ContextVar[tuple[tuple[str, str], ...]] = contextvars.ContextVar(
    "municipal_requests_correlation", default=()
)

_active_lock = threading.Lock()
_active: LoggingHandle | None = None
_atexit_registered = False


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Where structured events go and from which level."""

    session_id: str
    level: int | str = "WARNING"
    log_to_stderr: bool = True
    log_to_file: bool = False
    log_dir: Path | str = str(LOG_DIR)


class JsonLinesFormatter(logging.Formatter):
    """Serializes a record, its correlation context and its extras as compact JSON."""

    def __init__(self, session_id: str) -> None:
        super().__init__()
        self._session_id = session_id

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, JSONValue] = {"session_id": self._session_id}
        event.update(get_correlation_context())
        event["timestamp"] = (
            datetime.fromtimestamp(record.created, tz=UTC)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z")
        )
        event["level"] = record.levelname
        event["logger"] = record.name
        event["message"] = record.getMessage()

        extras = {
            key: _to_json(value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
        }
        if extras:
            event["fields"] = extras
        if record.exc_info:
            event["exception"] = self.formatException(record.exc_info)
        return json.dumps(event, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class LoggingHandle:
    """The sinks installed by one :func:`setup_structured_logging` call."""

    def __init__(
        self, logger: logging.Logger, handlers: tuple[logging.Handler, ...], log_path: Path | None
    ) -> None:
        self.logger = logger
        self.log_path = log_path
        self._handlers = handlers
        self._closed = False

    @property
    def is_shutdown(self) -> bool:
        return self._closed

    def flush(self) -> None:
        for handler in self._handlers:
            handler.flush()

    def shutdown(self) -> None:
        """Detach and close the sinks; repeated calls do nothing."""
        if self._closed:
            return
        self._closed = True
        for handler in self._handlers:
            self.logger.removeHandler(handler)
            handler.close()
        self.logger.propagate = True


def setup_logging(
    observability: Mapping[str, object] | None = None,
    *,
    session_id: str,
    level: int | str | None = None,
    stream: TextIO | None = None,
) -> LoggingHandle:
    """
    Configure logging from an ``[observability]`` config section.

    ``level`` overrides ``log_level`` (the CLI passes ``DEBUG`` for
    ``--verbose``). ``stream`` replaces ``sys.stderr`` as the console sink.
    """

    section = dict(observability or {})
    log_dir = section.get("log_dir", str(LOG_DIR))
    config = LoggingConfig(
        session_id=session_id,
        level=level if level is not None else str(section.get("log_level", "WARNING")),
        log_to_file=bool(section.get("log_to_file", False)),
        log_dir=log_dir if isinstance(log_dir, (str, Path)) else str(LOG_DIR),
    )
    return setup_structured_logging(config, stream=stream)


def setup_structured_logging(
    config: LoggingConfig, *, stream: TextIO | None = None
) -> LoggingHandle:
    """Replace any active sinks with the ones described by ``config``."""

    if not config.session_id.strip():
        raise ValueError("session_id must not be empty")
    level = _resolve_level(config.level)
    shutdown_logging()

    handlers: list[logging.Handler] = []
    if config.log_to_stderr:
        handlers.append(logging.StreamHandler(stream or sys.stderr))
    log_path: Path | None = None
    if config.log_to_file:
        log_path = Path(config.log_dir) / LOG_FILENAME
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    formatter = JsonLinesFormatter(config.session_id.strip())
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.propagate = False
    for stale in list(logger.handlers):
        logger.removeHandler(stale)
        stale.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    handle = LoggingHandle(logger, tuple(handlers), log_path)
    global _active, _atexit_registered
    with _active_lock:
        _active = handle
        if not _atexit_registered:
            atexit.register(shutdown_logging)
            _atexit_registered = True
    return handle


def shutdown_logging(handle: LoggingHandle | None = None) -> None:
    """Close ``handle``, or the active handle when none is given."""

    global _active
    with _active_lock:
        target = handle or _active
        if target is _active:
            _active = None
    if target is not None:
        target.shutdown()


def get_active_logging_handle() -> LoggingHandle | None:
    with _active_lock:
        return _active


def get_correlation_context() -> dict[str, str]:
    return dict(_CORRELATION.get())


@contextmanager
def correlation_scope(**fields: str | None) -> Iterator[None]:
    """
    Add fields to every event logged inside the ``with`` block.

    Scopes nest; a ``None`` value hides an outer field until the block exits.
    """
    bound = get_correlation_context()
    for key, value in fields.items():
        if value is None:
            bound.pop(key, None)
        elif not value.strip():
            raise ValueError(f"correlation field {key!r} must not be empty")
        else:
            bound[key] = value.strip()
    token = _CORRELATION.set(tuple(bound.items()))
    try:
        yield
    finally:
        _CORRELATION.reset(token)


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"unsupported logging level {level!r}")
    return resolved


def _to_json(value: object) -> JSONValue:
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else repr(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(key): _to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_to_json(item) for item in value]
    return str(value)


__all__ = [
    "JSONValue",
    "JsonLinesFormatter",
    "LoggingConfig",
    "LoggingHandle",
    "correlation_scope",
    "get_active_logging_handle",
    "get_correlation_context",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
