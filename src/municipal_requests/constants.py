"""Stable constants shared across the request engine."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Final

# Schema version for the TOML configuration contract.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Store defaults.
DEFAULT_TOP_URGENT_LIMIT: Final[int] = 6
DEFAULT_MST_START: Final[str] = "Bellville Depot"

# Label of the synthetic root node of the category taxonomy.
TAXONOMY_ROOT_LABEL: Final[str] = "Root"

# Seeded sample requests are backdated by up to this many minutes.
SAMPLE_BACKDATE_MAX_MINUTES: Final[int] = 10_000

# Default runtime paths (relative to the config file unless absolute).
LOG_DIR: Final[PurePosixPath] = PurePosixPath("logs")

__all__ = [
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_MST_START",
    "DEFAULT_TOP_URGENT_LIMIT",
    "LOG_DIR",
    "SAMPLE_BACKDATE_MAX_MINUTES",
    "TAXONOMY_ROOT_LABEL",
]
