"""
municipal-requests: configuration schema and validation.

The schema is a table of sections, each a table of field checkers. Validation
never stops at the first problem: it reports every issue with a dotted field
path (``store.top_urgent_limit``) so a user can fix the whole file at once.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, TypedDict

from municipal_requests.constants import (
    CONFIG_SCHEMA_VERSION,
    DEFAULT_MST_START,
    DEFAULT_TOP_URGENT_LIMIT,
    LOG_DIR,
)

LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")

# Fields resolved relative to the directory of the config file.
PATH_FIELDS: Final[tuple[tuple[str, str], ...]] = (("observability", "log_dir"),)


class MetaConfig(TypedDict):
    schema_version: int


class StoreConfig(TypedDict):
    seed_on_startup: bool
    top_urgent_limit: int


class DepotsConfig(TypedDict):
    mst_start: str


class ObservabilityConfig(TypedDict):
    log_level: str
    log_dir: str
    log_to_file: bool


class RequestsConfig(TypedDict):
    meta: MetaConfig
    store: StoreConfig
    depots: DepotsConfig
    observability: ObservabilityConfig


DEFAULT_CONFIG: Final[RequestsConfig] = {
    "meta": {"schema_version": CONFIG_SCHEMA_VERSION},
    "store": {"seed_on_startup": True, "top_urgent_limit": DEFAULT_TOP_URGENT_LIMIT},
    "depots": {"mst_start": DEFAULT_MST_START},
    "observability": {"log_level": "WARNING", "log_dir": str(LOG_DIR), "log_to_file": False},
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """One problem found in a config document."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Normalized config, or ``None`` plus every issue found."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised by :func:`assert_valid_config` when any issue was found."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        lines = [f"- {issue.path}: {issue.message}" for issue in self.issues]
        super().__init__("invalid config:\n" + ("\n".join(lines) or "- <root>: unknown failure"))


class _Invalid(Exception):
    """Internal signal carrying the message for one rejected field value."""


_Checker = Callable[[object], Any]


def _boolean(value: object) -> bool:
    if not isinstance(value, bool):
        raise _Invalid(f"expected boolean, got {type(value).__name__}")
    return value


def _integer(minimum: int) -> Callable[[object], int]:
    def check(value: object) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise _Invalid(f"expected integer, got {type(value).__name__}")
        if value < minimum:
            raise _Invalid(f"must be >= {minimum}")
        return value

    return check


def _text(value: object) -> str:
    if not isinstance(value, str):
        raise _Invalid(f"expected string, got {type(value).__name__}")
    stripped = value.strip()
    if not stripped:
        raise _Invalid("must not be empty")
    if "\x00" in stripped:
        raise _Invalid("must not contain NUL bytes")
    return stripped


def _log_level(value: object) -> str:
    level = _text(value).upper()
    if level not in LOG_LEVELS:
        raise _Invalid(f"invalid value {value!r}; expected one of: {', '.join(LOG_LEVELS)}")
    return level


def _schema_version(value: object) -> int:
    version = _integer(1)(value)
    if version != CONFIG_SCHEMA_VERSION:
        raise _Invalid(migration_guidance(version))
    return version


_SCHEMA: Final[dict[str, dict[str, _Checker]]] = {
    "meta": {"schema_version": _schema_version},
    "store": {"seed_on_startup": _boolean, "top_urgent_limit": _integer(1)},
    "depots": {"mst_start": _text},
    "observability": {"log_level": _log_level, "log_dir": _text, "log_to_file": _boolean},
}


def default_config() -> dict[str, Any]:
    """Return a fresh deep copy of the built-in defaults."""

    return copy.deepcopy(dict(DEFAULT_CONFIG))


def migration_guidance(found_version: int) -> str:
    """Explain how to resolve a schema version mismatch."""

    if found_version < CONFIG_SCHEMA_VERSION:
        return (
            f"schema version {found_version} is older than supported {CONFIG_SCHEMA_VERSION}; "
            "update municipal.toml to the current layout"
        )
    if found_version > CONFIG_SCHEMA_VERSION:
        return (
            f"schema version {found_version} is newer than supported {CONFIG_SCHEMA_VERSION}; "
            "upgrade the municipal-requests package"
        )
    return "schema version is current"


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Return ``base`` with ``overlay`` merged in; nested mappings merge key by key."""

    merged: dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = merge_config(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def validate_config(config: object) -> ConfigValidationResult:
    """Check every section and field; collect issues instead of raising."""

    issues: list[ConfigValidationIssue] = []
    if not isinstance(config, Mapping):
        issues.append(
            ConfigValidationIssue("<root>", f"expected table, got {type(config).__name__}")
        )
        return ConfigValidationResult(config=None, issues=tuple(issues))

    for key in sorted(set(map(str, config)) - set(_SCHEMA)):
        issues.append(ConfigValidationIssue(key, "unknown section"))

    normalized: dict[str, Any] = {}
    for section_name, fields in _SCHEMA.items():
        section = config.get(section_name)
        if section is None:
            issues.append(ConfigValidationIssue(section_name, "missing required section"))
            continue
        if not isinstance(section, Mapping):
            issues.append(
                ConfigValidationIssue(section_name, f"expected table, got {type(section).__name__}")
            )
            continue
        normalized[section_name] = _validate_section(section_name, section, fields, issues)

    if issues:
        return ConfigValidationResult(config=None, issues=tuple(issues))
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: object) -> dict[str, Any]:
    """Return the normalized config or raise :class:`ConfigValidationError`."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def _validate_section(
    section_name: str,
    section: Mapping[object, object],
    fields: Mapping[str, _Checker],
    issues: list[ConfigValidationIssue],
) -> dict[str, Any]:
    for key in sorted(set(map(str, section)) - set(fields)):
        issues.append(ConfigValidationIssue(f"{section_name}.{key}", "unknown field"))

    normalized: dict[str, Any] = {}
    for field_name, check in fields.items():
        path = f"{section_name}.{field_name}"
        if field_name not in section:
            issues.append(ConfigValidationIssue(path, "missing required field"))
            continue
        try:
            normalized[field_name] = check(section[field_name])
        except _Invalid as exc:
            issues.append(ConfigValidationIssue(path, str(exc)))
    return normalized


__all__ = [
    "DEFAULT_CONFIG",
    "LOG_LEVELS",
    "PATH_FIELDS",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "RequestsConfig",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "migration_guidance",
    "validate_config",
]
