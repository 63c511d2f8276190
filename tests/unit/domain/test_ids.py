"""Unit tests for ULID and request-id helpers."""

from __future__ import annotations

import pytest

from municipal_requests.domain import ids


def _zero_bytes(size: int) -> bytes:
    return b"\x00" * size


def _ff_bytes(size: int) -> bytes:
    return b"\xff" * size


def test_generate_ulid_no_collision_10000() -> None:
    generated = {ids.generate_ulid() for _ in range(10_000)}
    assert len(generated) == 10_000


def test_ulid_shape_and_case_insensitive_validation() -> None:
    value = ids.generate_ulid(timestamp_ms=123_456, randbytes=_ff_bytes)

    assert len(value) == ids.ULID_LENGTH
    assert value == value.upper()
    assert set(value) <= set(ids.CROCKFORD_BASE32_ALPHABET)
    ids.validate_ulid(value.lower())


@pytest.mark.parametrize(
    ("candidate", "message"),
    [
        ("0" * 25, "26 characters"),
        ("I" + "0" * 25, "invalid ULID character"),
        ("U" + "0" * 25, "invalid ULID character"),
        ("*" + "0" * 25, "invalid ULID character"),
        ("8" + "0" * 25, "overflows"),
    ],
)
def test_validate_ulid_rejects(candidate: str, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        ids.validate_ulid(candidate)


def test_timestamp_roundtrip_and_bounds() -> None:
    assert ids.ulid_timestamp_ms("0" * 26) == 0

    top = ids.generate_ulid(timestamp_ms=ids.ULID_MAX_TIMESTAMP_MS, randbytes=_zero_bytes)
    assert ids.ulid_timestamp_ms(top) == ids.ULID_MAX_TIMESTAMP_MS
    ids.validate_ulid("7" + "Z" * 25)

    with pytest.raises(ValueError, match="out of range"):
        ids.generate_ulid(timestamp_ms=ids.ULID_MAX_TIMESTAMP_MS + 1)
    with pytest.raises(ValueError, match="exactly 10 bytes"):
        ids.generate_ulid(randbytes=lambda size: b"\x01" * (size - 1))


def test_pinned_inputs_are_deterministic() -> None:
    first = ids.generate_ulid(timestamp_ms=42, randbytes=_zero_bytes)
    second = ids.generate_ulid(timestamp_ms=42, randbytes=_zero_bytes)

    assert first == second == "000000001A" + "0" * 16


def test_request_id_prefix() -> None:
    request_id = ids.generate_request_id(timestamp_ms=1, randbytes=_ff_bytes)

    assert request_id.startswith(ids.REQUEST_ID_PREFIX)
    ids.validate_request_id(request_id)

    with pytest.raises(ValueError, match="must start with"):
        ids.validate_request_id("wi-" + request_id[3:])
    with pytest.raises(ValueError, match="request id"):
        ids.validate_request_id("sr-not-a-ulid")
