"""
municipal-requests: runtime config loader.

The effective config is a stack of layers, lowest first: built-in defaults,
``municipal.toml``, ``MUNIREQ_<SECTION>_<FIELD>`` environment variables, and
CLI overrides. Every default field has an environment variable, and its type
decides how the variable's text is coerced.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from functools import reduce
from pathlib import Path
from typing import Any, Final

from municipal_requests.config.schema import (
    PATH_FIELDS,
    assert_valid_config,
    default_config,
    merge_config,
)

DEFAULT_CONFIG_FILE: Final[str] = "municipal.toml"
ENV_PREFIX: Final[str] = "MUNIREQ_"

_TRUE_WORDS: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSE_WORDS: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})


class ConfigLoadError(ValueError):
    """The config file is unreadable, or an override cannot be coerced."""


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """
    Build the validated effective config.

    Without ``config_path`` a ``municipal.toml`` in the working directory is
    used when present. An explicit path that does not exist is an error.
    ``cli_overrides`` keys are dotted paths such as ``"store.top_urgent_limit"``;
    text values are coerced like environment values.
    """

    path = (
        Path.cwd() / DEFAULT_CONFIG_FILE
        if config_path is None
        else Path(config_path).expanduser()
    ).resolve()
    file_layer = _read_toml(path, required=config_path is not None)
    # File mistakes surface before env and CLI values are layered on.
    from_file = assert_valid_config(merge_config(default_config(), file_layer))

    layers = [
        from_file,
        env_overrides(from_file, os.environ if environ is None else environ),
        _coerce_strings(from_file, _expand_dotted(cli_overrides or {})),
    ]
    effective = assert_valid_config(reduce(merge_config, layers))
    return normalize_paths(effective, base_dir=path.parent)


def env_overrides(config: Mapping[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``MUNIREQ_`` variables for the fields present in ``config``."""

    overrides: dict[str, Any] = {}
    for section, fields in config.items():
        for field, current in fields.items():
            name = env_name_for(section, field)
            if name in environ:
                value = _coerce(environ[name], like=current, name=name)
                overrides.setdefault(section, {})[field] = value
    return overrides


def env_name_for(section: str, field: str) -> str:
    """Environment variable that overrides ``section.field``."""

    return f"{ENV_PREFIX}{section.upper()}_{field.upper()}"


def normalize_paths(config: Mapping[str, Any], *, base_dir: Path) -> dict[str, Any]:
    """Make relative path fields absolute against ``base_dir``."""

    normalized = merge_config({}, config)
    for section, field in PATH_FIELDS:
        raw = normalized.get(section, {}).get(field)
        if isinstance(raw, str):
            candidate = Path(os.path.expandvars(raw)).expanduser()
            if not candidate.is_absolute():
                candidate = base_dir / candidate
            normalized[section][field] = Path(os.path.normpath(candidate)).as_posix()
    return normalized


def dump_effective_config(config: Mapping[str, object]) -> str:
    """Compact JSON with sorted keys; identical configs dump identically."""

    return json.dumps(config, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _read_toml(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.is_file():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _coerce(raw: str, *, like: object, name: str) -> object:
    text = raw.strip()
    if isinstance(like, bool):
        if text.lower() in _TRUE_WORDS:
            return True
        if text.lower() in _FALSE_WORDS:
            return False
        raise ConfigLoadError(f"{name} must be a boolean (true/false/1/0/yes/no/on/off)")
    if isinstance(like, int):
        try:
            return int(text)
        except ValueError as exc:
            raise ConfigLoadError(f"{name} must be an integer, got {raw!r}") from exc
    return text


def _coerce_strings(config: Mapping[str, Any], layer: Mapping[str, Any]) -> dict[str, Any]:
    """Coerce text values in ``layer`` to the type of the field they override."""

    coerced: dict[str, Any] = {}
    for section, fields in layer.items():
        current = config.get(section)
        if not isinstance(fields, Mapping) or not isinstance(current, Mapping):
            coerced[section] = fields
            continue
        coerced[section] = {
            field: (
                _coerce(value, like=current[field], name=f"{section}.{field}")
                if isinstance(value, str) and field in current
                else value
            )
            for field, value in fields.items()
        }
    return coerced


def _expand_dotted(overrides: Mapping[str, object]) -> dict[str, Any]:
    nested: dict[str, Any] = {}
    for key, value in overrides.items():
        parts = [part for part in key.split(".") if part]
        if not parts:
            raise ConfigLoadError(f"invalid CLI override key {key!r}")
        cursor = nested
        for part in parts[:-1]:
            cursor = cursor.setdefault(part, {})
            if not isinstance(cursor, dict):
                raise ConfigLoadError(f"CLI override {key!r} conflicts with another override")
        cursor[parts[-1]] = value
    return nested


__all__ = [
    "ConfigLoadError",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "dump_effective_config",
    "env_name_for",
    "env_overrides",
    "load_config",
    "normalize_paths",
]
