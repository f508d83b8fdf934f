"""Public observability primitives: structured logging."""

from workgraph.observability.logging import (
    DEFAULT_LOGGER_NAME,
    JsonLineFormatter,
    LoggingConfig,
    TextFormatter,
    setup_logging,
    setup_structured_logging,
    shutdown_logging,
)

__all__ = [
    "DEFAULT_LOGGER_NAME",
    "JsonLineFormatter",
    "LoggingConfig",
    "TextFormatter",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
