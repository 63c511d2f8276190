"""Opaque identifiers: ULIDs and the ``sr-<ULID>`` service-request id."""

from __future__ import annotations

import secrets
import time
from collections.abc import Callable
from typing import Final

CROCKFORD_BASE32_ALPHABET: Final[str] = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
ULID_LENGTH: Final[int] = 26
ULID_MAX_TIMESTAMP_MS: Final[int] = (1 << 48) - 1
REQUEST_ID_PREFIX: Final[str] = "sr-"

_TIMESTAMP_CHARS: Final[int] = 10
_ENTROPY_CHARS: Final[int] = ULID_LENGTH - _TIMESTAMP_CHARS
_ENTROPY_BYTES: Final[int] = 10
_ALPHABET_INDEX: Final[dict[str, int]] = {
    char: value for value, char in enumerate(CROCKFORD_BASE32_ALPHABET)
}

RandBytes = Callable[[int], bytes]


def generate_ulid(
    *,
    timestamp_ms: int | None = None,
    randbytes: RandBytes | None = None,
) -> str:
    """
    Return a new ULID: 48-bit millisecond timestamp then 80 random bits.

    ``timestamp_ms`` and ``randbytes`` exist so tests can pin both halves.
    """
    now_ms = time.time_ns() // 1_000_000 if timestamp_ms is None else timestamp_ms
    if isinstance(now_ms, bool) or not isinstance(now_ms, int):
        raise ValueError(f"timestamp_ms must be an int, got {type(now_ms).__name__}")
    if not 0 <= now_ms <= ULID_MAX_TIMESTAMP_MS:
        raise ValueError(f"timestamp_ms out of range 0..{ULID_MAX_TIMESTAMP_MS}: {now_ms}")

    entropy = bytes((randbytes or secrets.token_bytes)(_ENTROPY_BYTES))
    if len(entropy) != _ENTROPY_BYTES:
        raise ValueError(f"randbytes must return exactly {_ENTROPY_BYTES} bytes")

    return _encode(now_ms, _TIMESTAMP_CHARS) + _encode(
        int.from_bytes(entropy, "big"), _ENTROPY_CHARS
    )


def validate_ulid(value: str) -> None:
    """Raise ``ValueError`` unless ``value`` is a well-formed ULID (case-insensitive)."""
    if not isinstance(value, str):
        raise ValueError(f"ULID must be a string, got {type(value).__name__}")
    if len(value) != ULID_LENGTH:
        raise ValueError(f"ULID must be {ULID_LENGTH} characters, got {len(value)}")
    for position, char in enumerate(value.upper()):
        if char not in _ALPHABET_INDEX:
            raise ValueError(f"invalid ULID character {value[position]!r} at index {position}")
    # 26 base32 digits hold 130 bits; the leading digit may only carry 3 of them.
    if _ALPHABET_INDEX[value[0].upper()] > 7:
        raise ValueError("ULID overflows 128 bits")


def ulid_timestamp_ms(value: str) -> int:
    """Millisecond timestamp encoded in the first ten characters of ``value``."""
    validate_ulid(value)
    return _decode(value[:_TIMESTAMP_CHARS])


def generate_request_id(
    *, timestamp_ms: int | None = None, randbytes: RandBytes | None = None
) -> str:
    return REQUEST_ID_PREFIX + generate_ulid(timestamp_ms=timestamp_ms, randbytes=randbytes)


def validate_request_id(value: str) -> None:
    if not isinstance(value, str) or not value.startswith(REQUEST_ID_PREFIX):
        raise ValueError(f"request id must start with {REQUEST_ID_PREFIX!r}: {value!r}")
    try:
        validate_ulid(value[len(REQUEST_ID_PREFIX) :])
    except ValueError as exc:
        raise ValueError(f"request id {value!r}: {exc}") from exc


def _encode(number: int, width: int) -> str:
    digits: list[str] = []
    for _ in range(width):
        number, digit = divmod(number, 32)
        digits.append(CROCKFORD_BASE32_ALPHABET[digit])
    return "".join(reversed(digits))


def _decode(text: str) -> int:
    number = 0
    for char in text.upper():
        number = number * 32 + _ALPHABET_INDEX[char]
    return number


__all__ = [
    "CROCKFORD_BASE32_ALPHABET",
    "REQUEST_ID_PREFIX",
    "ULID_LENGTH",
    "ULID_MAX_TIMESTAMP_MS",
    "generate_request_id",
    "generate_ulid",
    "ulid_timestamp_ms",
    "validate_request_id",
    "validate_ulid",
]
