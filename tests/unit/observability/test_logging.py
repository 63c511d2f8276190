"""
municipal-requests: unit tests for structured logging.

Covers JSON line shape, correlation scoping, the file sink, and shutdown.
"""

from __future__ import annotations

import io
import json
import logging
from typing import TYPE_CHECKING

import pytest

from municipal_requests.observability.logging import (
    LOG_FILENAME,
    LoggingConfig,
    correlation_scope,
    get_active_logging_handle,
    get_correlation_context,
    setup_logging,
    setup_structured_logging,
    shutdown_logging,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def _cleanup_logging() -> Iterator[None]:
    yield
    shutdown_logging()


def _events(stream: io.StringIO) -> list[dict[str, object]]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


def test_events_are_single_json_lines() -> None:
    stream = io.StringIO()
    setup_structured_logging(LoggingConfig(session_id="sess-1", level="INFO"), stream=stream)

    logging.getLogger("municipal_requests.services").info(
        "request_indexed", extra={"ticket": "SR-1", "priority": 3, "tags": ("a", "b")}
    )

    (event,) = _events(stream)
    assert event["session_id"] == "sess-1"
    assert event["level"] == "INFO"
    assert event["logger"] == "municipal_requests.services"
    assert event["message"] == "request_indexed"
    assert event["fields"] == {"ticket": "SR-1", "priority": 3, "tags": ["a", "b"]}
    assert str(event["timestamp"]).endswith("Z")


def test_level_filters_lower_events() -> None:
    stream = io.StringIO()
    setup_logging({"log_level": "WARNING"}, session_id="sess-2", stream=stream)
    logger = logging.getLogger("municipal_requests.cli")

    logger.info("hidden")
    logger.warning("shown")

    assert [event["message"] for event in _events(stream)] == ["shown"]


def test_explicit_level_overrides_section() -> None:
    stream = io.StringIO()
    setup_logging({"log_level": "ERROR"}, session_id="sess-3", level="DEBUG", stream=stream)

    logging.getLogger("municipal_requests").debug("detail")

    assert [event["message"] for event in _events(stream)] == ["detail"]


def test_correlation_scope_nests_and_restores() -> None:
    stream = io.StringIO()
    setup_structured_logging(LoggingConfig(session_id="sess-4", level="INFO"), stream=stream)
    logger = logging.getLogger("municipal_requests.cli")

    with correlation_scope(command="urgent"):
        logger.info("outer")
        with correlation_scope(ticket="SR-9", command=None):
            assert get_correlation_context() == {"ticket": "SR-9"}
            logger.info("inner")
        logger.info("outer_again")
    logger.info("unscoped")

    events = {event["message"]: event for event in _events(stream)}
    assert events["outer"]["command"] == "urgent"
    assert events["inner"]["ticket"] == "SR-9"
    assert "command" not in events["inner"]
    assert events["outer_again"]["command"] == "urgent"
    assert "command" not in events["unscoped"]
    assert get_correlation_context() == {}


def test_correlation_scope_rejects_blank_values() -> None:
    with pytest.raises(ValueError, match="must not be empty"), correlation_scope(command="  "):
        pass


def test_exception_text_is_captured() -> None:
    stream = io.StringIO()
    setup_structured_logging(LoggingConfig(session_id="sess-5"), stream=stream)

    try:
        raise RuntimeError("boom")
    except RuntimeError:
        logging.getLogger("municipal_requests").exception("failed")

    (event,) = _events(stream)
    assert "RuntimeError: boom" in str(event["exception"])


def test_file_sink_writes_jsonl(tmp_path: Path) -> None:
    handle = setup_logging(
        {"log_level": "INFO", "log_to_file": True, "log_dir": str(tmp_path / "logs")},
        session_id="sess-6",
        stream=io.StringIO(),
    )
    logging.getLogger("municipal_requests").info("to_disk", extra={"count": 2})
    handle.flush()

    assert handle.log_path == tmp_path / "logs" / LOG_FILENAME
    lines = handle.log_path.read_text(encoding="utf-8").splitlines()
    assert json.loads(lines[0])["fields"] == {"count": 2}


def test_shutdown_detaches_handlers_and_is_idempotent() -> None:
    stream = io.StringIO()
    handle = setup_structured_logging(LoggingConfig(session_id="sess-7"), stream=stream)
    assert get_active_logging_handle() is handle

    shutdown_logging()
    shutdown_logging(handle)
    logging.getLogger("municipal_requests").error("after_shutdown")

    assert handle.is_shutdown
    assert get_active_logging_handle() is None
    assert handle.logger.handlers == []
    assert handle.logger.propagate is True
    assert stream.getvalue() == ""


def test_setup_replaces_previous_sinks() -> None:
    first_stream = io.StringIO()
    second_stream = io.StringIO()
    first = setup_structured_logging(LoggingConfig(session_id="one"), stream=first_stream)
    setup_structured_logging(LoggingConfig(session_id="two"), stream=second_stream)

    logging.getLogger("municipal_requests").warning("routed")

    assert first.is_shutdown
    assert first_stream.getvalue() == ""
    assert _events(second_stream)[0]["session_id"] == "two"


def test_blank_session_id_rejected() -> None:
    with pytest.raises(ValueError, match="session_id"):
        setup_structured_logging(LoggingConfig(session_id=" "))
