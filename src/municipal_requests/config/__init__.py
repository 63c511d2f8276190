"""Runtime configuration: TOML file, ``MUNIREQ_`` environment and CLI overrides."""

from municipal_requests.config.loader import (
    DEFAULT_CONFIG_FILE,
    ENV_PREFIX,
    ConfigLoadError,
    dump_effective_config,
    load_config,
)
from municipal_requests.config.schema import (
    ConfigValidationError,
    ConfigValidationIssue,
    assert_valid_config,
    default_config,
    validate_config,
)

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "assert_valid_config",
    "default_config",
    "dump_effective_config",
    "load_config",
    "validate_config",
]
