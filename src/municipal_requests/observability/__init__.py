"""Observability: JSON-lines structured logging."""

from municipal_requests.observability.logging import (
    LoggingConfig,
    correlation_scope,
    setup_logging,
    shutdown_logging,
)

__all__ = ["LoggingConfig", "correlation_scope", "setup_logging", "shutdown_logging"]
